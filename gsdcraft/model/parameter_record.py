"""
Parameter record definitions for GSDML modules.

These are Pydantic models built by the GSDML loader.
For encode/decode over raw record bytes, use gsdcraft.runtime.transcoder.

Naming convention:
- Classes here use *Def suffix (e.g., FieldDef) where they are
    definitions/schemas, not runtime objects.
"""

from enum import Enum
from functools import cached_property
from typing import Any, Dict, List, Optional, Tuple

from pydantic import Field, field_validator, model_validator

from gsdcraft.utils import canonical_raw_code, parse_value_range

from .base import FlexibleModel, StrictModel


class DataType(str, Enum):
    """GSDML ``Ref/@DataType`` values supported in parameter records."""

    BIT = "Bit"
    BIT_AREA = "BitArea"
    INTEGER8 = "Integer8"
    UNSIGNED8 = "Unsigned8"
    INTEGER16 = "Integer16"
    UNSIGNED16 = "Unsigned16"
    INTEGER32 = "Integer32"
    UNSIGNED32 = "Unsigned32"
    VISIBLE_STRING = "VisibleString"

    @classmethod
    def from_string(cls, value: str) -> "DataType":
        """Parse a GSDML data type name, ignoring case.

        Raises:
            ValueError: If the data type is not supported.
        """
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(f"Unsupported data type '{value}'")

    @property
    def byte_width(self) -> Optional[int]:
        """Width in bytes of fixed-width integer types, None otherwise."""
        return _INTEGER_LAYOUT.get(self, (None, None))[0]

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_LAYOUT

    @property
    def is_numeric(self) -> bool:
        return self is not DataType.VISIBLE_STRING

    def value_bounds(self, bit_length: Optional[int] = None) -> Tuple[int, int]:
        """Representable ``(min, max)`` for numeric types."""
        if self is DataType.BIT:
            return 0, 1
        if self is DataType.BIT_AREA:
            return 0, (1 << (bit_length or 8)) - 1
        width, signed = _INTEGER_LAYOUT[self]
        bits = width * 8
        if signed:
            return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        return 0, (1 << bits) - 1


# (byte width, signed)
_INTEGER_LAYOUT = {
    DataType.INTEGER8: (1, True),
    DataType.UNSIGNED8: (1, False),
    DataType.INTEGER16: (2, True),
    DataType.UNSIGNED16: (2, False),
    DataType.INTEGER32: (4, True),
    DataType.UNSIGNED32: (4, False),
}


class ValueRange(FlexibleModel):
    """
    Allowed numeric values of a field, parsed from GSDML ``AllowedValues``.

    A value is allowed when it lies in any of the segments.
    """

    segments: Tuple[Tuple[int, int], ...] = Field(..., min_length=1)

    @classmethod
    def parse(cls, text: str) -> "ValueRange":
        """Build from ``"0..255"``, ``"1 3 5"`` or mixed notation.

        Raises:
            ValueError: If the notation is invalid.
        """
        return cls(segments=tuple(parse_value_range(text)))

    @property
    def minimum(self) -> int:
        return min(low for low, _ in self.segments)

    @property
    def maximum(self) -> int:
        return max(high for _, high in self.segments)

    def contains(self, value: int) -> bool:
        return any(low <= value <= high for low, high in self.segments)

    def __str__(self) -> str:
        return " ".join(
            str(low) if low == high else f"{low}..{high}" for low, high in self.segments
        )


class FieldDef(FlexibleModel):
    """
    One ``<Ref>`` entry of a parameter record (Field Descriptor).

    The data type decides which of the optional shape attributes are
    required: Bit uses ``bit_offset``, BitArea needs ``bit_length``,
    VisibleString needs ``string_length``.
    """

    name: str = Field(..., min_length=1, description="Resolved display name, unique per record")
    text_id: str = Field(..., description="TextId the name was resolved from")
    data_type: DataType = Field(..., description="GSDML data type")
    byte_offset: int = Field(..., ge=0, description="Byte offset within the record")
    bit_offset: Optional[int] = Field(default=None, ge=0, le=7)
    bit_length: Optional[int] = Field(default=None, ge=1, le=8)
    string_length: Optional[int] = Field(default=None, ge=0)
    default_value: Optional[str] = Field(default=None, description="Raw default as written in GSDML")
    allowed_values: Optional[ValueRange] = None
    value_item_target: Optional[str] = Field(default=None, description="ValueItem ID for symbolic values")
    assignments: Dict[str, str] = Field(
        default_factory=dict, description="Canonical raw code to display text"
    )
    changeable: bool = True
    visible: bool = True

    @field_validator("data_type", mode="before")
    @classmethod
    def normalize_data_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return DataType.from_string(v)
        return v

    @model_validator(mode="after")
    def check_shape(self) -> "FieldDef":
        """Enforce the per-data-type shape attributes."""
        if self.data_type is DataType.BIT_AREA:
            if self.bit_length is None:
                raise ValueError(f"Field '{self.name}': BitArea requires bit_length")
            if self.effective_bit_offset + self.bit_length > 8:
                raise ValueError(
                    f"Field '{self.name}': bit_offset + bit_length exceeds 8 "
                    f"({self.effective_bit_offset} + {self.bit_length})"
                )
        if self.data_type is DataType.VISIBLE_STRING and self.string_length is None:
            raise ValueError(f"Field '{self.name}': VisibleString requires string_length")
        return self

    @property
    def effective_bit_offset(self) -> int:
        return self.bit_offset or 0

    @property
    def byte_span(self) -> int:
        """Number of record bytes the field occupies."""
        if self.data_type is DataType.VISIBLE_STRING:
            return self.string_length or 0
        if self.data_type.is_integer:
            return self.data_type.byte_width
        return 1

    @property
    def end_offset(self) -> int:
        """First byte after the field."""
        return self.byte_offset + self.byte_span

    @property
    def bit_mask(self) -> int:
        """Mask of the bits used inside the first byte (bit types) or 0xFF."""
        if self.data_type is DataType.BIT:
            return 1 << self.effective_bit_offset
        if self.data_type is DataType.BIT_AREA:
            return ((1 << self.bit_length) - 1) << self.effective_bit_offset
        return 0xFF

    @cached_property
    def display_index(self) -> Dict[str, str]:
        index: Dict[str, str] = {}
        for raw, text in self.assignments.items():
            index.setdefault(text, raw)
        return index

    @property
    def has_assignments(self) -> bool:
        return bool(self.assignments)

    def raw_to_display(self, raw: Any) -> Optional[str]:
        """Display text for a raw value, or None if it has no assignment."""
        if not self.assignments:
            return None
        return self.assignments.get(canonical_raw_code(raw))

    def display_to_raw(self, text: str) -> Optional[str]:
        """Raw code for a display text, or None if the text is unknown."""
        return self.display_index.get(text)


class ParameterBlock(StrictModel):
    """
    A ``ParameterRecordDataItem``: fixed-length record addressed by index.

    Every field lies inside ``[0, length)`` and field names are unique.
    """

    record_index: int = Field(..., ge=0, description="Record index (Index attribute)")
    length: int = Field(..., ge=0, description="Declared record length in bytes")
    name: str = Field(default="", description="Resolved record name")
    fields: List[FieldDef] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_fields(self) -> "ParameterBlock":
        seen = set()
        for field in self.fields:
            if field.name in seen:
                raise ValueError(f"Duplicate field name '{field.name}' in record {self.record_index}")
            seen.add(field.name)
            if field.end_offset > self.length:
                raise ValueError(
                    f"Field '{field.name}' (bytes {field.byte_offset}..{field.end_offset - 1}) "
                    f"exceeds record length {self.length}"
                )
        return self

    @cached_property
    def fields_by_name(self) -> Dict[str, FieldDef]:
        return {f.name: f for f in self.fields}

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[FieldDef]:
        """Find a field by name."""
        return self.fields_by_name.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.fields_by_name

    def __len__(self) -> int:
        return len(self.fields)
