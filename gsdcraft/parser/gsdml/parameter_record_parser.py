"""Parameter record parsing mixin for ``GsdmlParser``."""

import logging
from typing import Dict, List, Optional, Set
from xml.etree.ElementTree import Element

from pydantic import ValidationError

from gsdcraft.errors import SchemaError
from gsdcraft.model import DataType, FieldDef, ParameterBlock, ValueRange
from gsdcraft.utils import canonical_raw_code, filter_none, parse_int

from .protocols import ParserHostContext

logger = logging.getLogger(__name__)

RECORD_PATH = "./VirtualSubmoduleList/VirtualSubmoduleItem/RecordDataList/ParameterRecordDataItem"


def _parse_flag(text: Optional[str], default: bool = True) -> bool:
    if text is None:
        return default
    return text.strip().lower() in ("true", "1")


def _unique_name(name: str, seen: Set[str]) -> str:
    """Return ``name`` or ``name_1``, ``name_2``, ... whichever is still free."""
    if name not in seen:
        return name
    suffix = 1
    while f"{name}_{suffix}" in seen:
        suffix += 1
    return f"{name}_{suffix}"


class ParameterRecordParserMixin(ParserHostContext):
    """Mixin parsing ``ParameterRecordDataItem`` elements into ParameterBlocks."""

    def _parse_parameter_blocks(self, item: Element, module_id: str) -> List[ParameterBlock]:
        """Parse every parameter record below a module or DAP element."""
        return [
            self._parse_parameter_block(record, module_id)
            for record in item.findall(RECORD_PATH)
        ]

    def _parse_parameter_block(self, record: Element, module_id: str) -> ParameterBlock:
        context = f"module '{module_id}'"
        index = self._require_int(record, "Index", f"ParameterRecordDataItem of {context}")
        length = self._require_int(record, "Length", f"ParameterRecordDataItem {index} of {context}")
        context = f"record {index} of module '{module_id}'"

        name_element = record.find("Name")
        if name_element is None or not name_element.get("TextId"):
            raise SchemaError(f"Missing <Name TextId> in {context}", self._current_file)
        record_name = self._resolve_name(name_element.get("TextId"), context)

        refs = record.findall("Ref")
        if not refs:
            raise SchemaError(f"No <Ref> field entries in {context}", self._current_file)

        seen: Set[str] = set()
        fields = []
        for position, ref in enumerate(refs):
            field = self._parse_field(ref, f"Ref[{position}] of {context}", seen)
            seen.add(field.name)
            fields.append(field)

        logger.debug(
            "Parsed record %s '%s' of module '%s': %d bytes, %d fields",
            index,
            record_name,
            module_id,
            length,
            len(fields),
        )
        try:
            return ParameterBlock(record_index=index, length=length, name=record_name, fields=fields)
        except ValidationError as e:
            raise SchemaError(f"Invalid {context}: {self._format_validation(e)}", self._current_file)

    def _parse_field(self, ref: Element, context: str, seen: Set[str]) -> FieldDef:
        byte_offset = self._require_int(ref, "ByteOffset", context)

        data_type_text = ref.get("DataType")
        if not data_type_text:
            raise SchemaError(f"Missing DataType in {context}", self._current_file)
        try:
            data_type = DataType.from_string(data_type_text)
        except ValueError as e:
            raise SchemaError(f"{e} in {context}", self._current_file)

        text_id = ref.get("TextId")
        if not text_id:
            raise SchemaError(f"Missing TextId in {context}", self._current_file)
        name = _unique_name(self._resolve_name(text_id, context), seen)

        allowed_values = None
        allowed_text = ref.get("AllowedValues")
        if allowed_text and allowed_text.strip():
            try:
                allowed_values = ValueRange.parse(allowed_text)
            except ValueError as e:
                raise SchemaError(f"Invalid AllowedValues in {context}: {e}", self._current_file)

        value_item_target = ref.get("ValueItemTarget")
        assignments = self._resolve_assignments(value_item_target, context)

        try:
            return FieldDef(
                **filter_none(
                    {
                        "name": name,
                        "text_id": text_id,
                        "data_type": data_type,
                        "byte_offset": byte_offset,
                        "bit_offset": self._optional_int(ref, "BitOffset", context),
                        "bit_length": self._optional_int(ref, "BitLength", context),
                        "string_length": self._optional_int(ref, "Length", context),
                        "default_value": ref.get("DefaultValue"),
                        "allowed_values": allowed_values,
                        "value_item_target": value_item_target,
                        "assignments": assignments,
                        "changeable": _parse_flag(ref.get("Changeable")),
                        "visible": _parse_flag(ref.get("Visible")),
                    }
                )
            )
        except ValidationError as e:
            raise SchemaError(f"Invalid {context}: {self._format_validation(e)}", self._current_file)

    def _optional_int(self, element: Element, attribute: str, context: str) -> Optional[int]:
        text = element.get(attribute)
        if text is None:
            return None
        value = parse_int(text)
        if value is None:
            raise SchemaError(
                f"Attribute {attribute}='{text}' is not an integer in {context}",
                self._current_file,
            )
        return value

    def _resolve_assignments(self, value_item_target: Optional[str], context: str) -> Dict[str, str]:
        """Resolve a ValueItemTarget once into a raw code -> display text mapping."""
        if not value_item_target:
            return {}
        items = self._value_catalog.resolve_value_item(value_item_target)
        if items is None:
            logger.warning("ValueItemTarget '%s' of %s not found", value_item_target, context)
            return {}
        mapping: Dict[str, str] = {}
        for assignment in items:
            mapping.setdefault(canonical_raw_code(assignment.raw_code), assignment.display_text)
        return mapping
