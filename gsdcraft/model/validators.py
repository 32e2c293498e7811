"""
Validation utilities for device description models.

Provides checks beyond the load-time Pydantic validation: things a vendor
file may get wrong without making the document unusable, such as
overlapping fields or defaults that contradict their own allowed values.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from gsdcraft.utils import canonical_raw_code, parse_int

from .device import DeviceDescription, ModuleDef
from .parameter_record import DataType, FieldDef, ParameterBlock

ADDRESS_MIN = 1
ADDRESS_MAX = 65534


@dataclass
class ValidationIssue:
    """Validation finding with context."""

    severity: str  # 'error', 'warning'
    message: str
    location: str  # e.g. 'module:IDM_10:record:100:field:Mode'
    suggestion: str = ""


class DeviceDescriptionValidator:
    """
    Semantic validator for a loaded DeviceDescription.

    Errors mean decode/encode results for the affected record cannot be
    trusted; warnings flag vendor data that is merely suspicious.
    """

    def __init__(self, description: DeviceDescription):
        self.description = description
        self.errors: List[ValidationIssue] = []
        self.warnings: List[ValidationIssue] = []

    def validate_all(self) -> bool:
        """
        Run all validation checks.

        Returns:
            True if no errors (warnings are allowed)
        """
        self.errors.clear()
        self.warnings.clear()

        self.validate_module_names()
        for module in self.description.all_modules:
            for block in module.parameter_blocks:
                self.validate_parameter_block(module, block)
            self.validate_safety_block(module)

        return len(self.errors) == 0

    def validate_module_names(self) -> None:
        """Warn about modules sharing a display name (lookup by name is ambiguous)."""
        by_name: Dict[str, List[str]] = {}
        for module in self.description.all_modules:
            if module.name:
                by_name.setdefault(module.name, []).append(module.id)
        for name, ids in by_name.items():
            if len(ids) > 1:
                self.warnings.append(
                    ValidationIssue(
                        severity="warning",
                        message=f"Module name '{name}' is used by {len(ids)} modules: {', '.join(ids)}",
                        location=f"module:{name}",
                        suggestion="Look these modules up by ID",
                    )
                )

    def validate_parameter_block(self, module: ModuleDef, block: ParameterBlock) -> None:
        """Check field overlaps and default values of one record."""
        location = f"module:{module.id}:record:{block.record_index}"

        for i, first in enumerate(block.fields):
            for second in block.fields[i + 1 :]:
                if self._fields_overlap(first, second):
                    self.errors.append(
                        ValidationIssue(
                            severity="error",
                            message=f"Overlapping fields: '{first.name}' and '{second.name}'",
                            location=location,
                        )
                    )

        for field in block.fields:
            self._validate_field(f"{location}:field:{field.name}", field)

    def _validate_field(self, location: str, field: FieldDef) -> None:
        if field.value_item_target and not field.assignments:
            self.warnings.append(
                ValidationIssue(
                    severity="warning",
                    message=f"Value item '{field.value_item_target}' could not be resolved",
                    location=location,
                    suggestion="Values of this field are exchanged as raw numbers",
                )
            )

        if field.default_value is None or not field.data_type.is_numeric:
            return

        default = parse_int(field.default_value)
        if default is None:
            self.warnings.append(
                ValidationIssue(
                    severity="warning",
                    message=f"Default value '{field.default_value}' is not a number",
                    location=location,
                )
            )
            return

        low, high = field.data_type.value_bounds(field.bit_length)
        if not low <= default <= high:
            self.errors.append(
                ValidationIssue(
                    severity="error",
                    message=f"Default value {default} does not fit {field.data_type.value} ({low}..{high})",
                    location=location,
                )
            )
        if field.allowed_values is not None and not field.allowed_values.contains(default):
            self.errors.append(
                ValidationIssue(
                    severity="error",
                    message=f"Default value {default} is outside allowed values {field.allowed_values}",
                    location=location,
                )
            )
        if field.assignments and canonical_raw_code(default) not in field.assignments:
            self.warnings.append(
                ValidationIssue(
                    severity="warning",
                    message=f"Default value {default} has no matching assignment",
                    location=location,
                    suggestion="Decoding the default record yields a raw number for this field",
                )
            )

    def validate_safety_block(self, module: ModuleDef) -> None:
        """Check default F-addresses against the PROFIsafe address range."""
        block = module.safety_block
        if block is None:
            return
        for element in ("F_Source_Add", "F_Dest_Add"):
            parameter = block.get_parameter(element)
            if parameter is None or parameter.default_value is None:
                continue
            value = parse_int(parameter.default_value)
            if value is None or not ADDRESS_MIN <= value <= ADDRESS_MAX:
                self.warnings.append(
                    ValidationIssue(
                        severity="warning",
                        message=f"{element} default '{parameter.default_value}' is outside "
                        f"{ADDRESS_MIN}..{ADDRESS_MAX}",
                        location=f"module:{module.id}:safety:{element}",
                    )
                )

    @staticmethod
    def _field_bits(field: FieldDef) -> Dict[int, int]:
        """Byte offset to used bit mask for every byte the field touches."""
        if field.data_type in (DataType.BIT, DataType.BIT_AREA):
            return {field.byte_offset: field.bit_mask}
        return {offset: 0xFF for offset in range(field.byte_offset, field.end_offset)}

    @classmethod
    def _fields_overlap(cls, first: FieldDef, second: FieldDef) -> bool:
        bits_first = cls._field_bits(first)
        bits_second = cls._field_bits(second)
        return any(
            offset in bits_second and mask & bits_second[offset]
            for offset, mask in bits_first.items()
        )

    def get_error_summary(self) -> str:
        """Get human-readable error summary."""
        lines = []

        for title, issues in (("Error(s)", self.errors), ("Warning(s)", self.warnings)):
            if not issues:
                continue
            lines.append(f"\n{len(issues)} {title}:")
            for issue in issues:
                lines.append(f"  [{issue.severity.upper()}] {issue.location}: {issue.message}")
                if issue.suggestion:
                    lines.append(f"           -> {issue.suggestion}")

        if not self.errors and not self.warnings:
            lines.append("\nAll validation checks passed")

        return "\n".join(lines)


def validate_device_description(
    description: DeviceDescription,
) -> Tuple[bool, List[ValidationIssue], List[ValidationIssue]]:
    """
    Convenience function to validate a device description.

    Args:
        description: Loaded device description

    Returns:
        Tuple of (is_valid, errors, warnings)
    """
    validator = DeviceDescriptionValidator(description)
    is_valid = validator.validate_all()
    return is_valid, validator.errors, validator.warnings
