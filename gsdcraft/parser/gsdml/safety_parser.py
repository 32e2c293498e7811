"""F-parameter record parsing mixin for ``GsdmlParser``."""

import logging
from typing import Optional
from xml.etree.ElementTree import Element

from pydantic import ValidationError

from gsdcraft.errors import SchemaError
from gsdcraft.model import SafetyParameterBlock, SafetyParameterDef
from gsdcraft.utils import filter_none, parse_int

from .protocols import ParserHostContext

logger = logging.getLogger(__name__)

SAFETY_RECORD_PATH = (
    "./VirtualSubmoduleList/VirtualSubmoduleItem/RecordDataList/F_ParameterRecordDataItem"
)


def _flag(text: Optional[str]) -> Optional[bool]:
    if text is None:
        return None
    return text.strip().lower() in ("true", "1")


class SafetyParserMixin(ParserHostContext):
    """Mixin parsing ``F_ParameterRecordDataItem`` into a SafetyParameterBlock."""

    def _parse_safety_block(self, item: Element, module_id: str) -> Optional[SafetyParameterBlock]:
        """Parse the F-parameter record of a module, if it declares one."""
        record = item.find(SAFETY_RECORD_PATH)
        if record is None:
            return None

        context = f"F_ParameterRecordDataItem of module '{module_id}'"
        crc = record.get("F_ParamDescCRC")
        if not crc:
            raise SchemaError(f"Missing F_ParamDescCRC in {context}", self._current_file)

        index_text = record.get("Index")
        record_index = parse_int(index_text)
        if index_text is not None and record_index is None:
            raise SchemaError(f"Index='{index_text}' is not an integer in {context}", self._current_file)

        parameters = {}
        for child in record:
            attr = SafetyParameterBlock.ELEMENT_NAMES.get(child.tag)
            if attr is None:
                logger.debug("Ignoring F-parameter element '%s' in %s", child.tag, context)
                continue
            parameters[attr] = SafetyParameterDef(
                **filter_none(
                    {
                        "default_value": child.get("DefaultValue"),
                        "allowed_values": child.get("AllowedValues"),
                        "changeable": _flag(child.get("Changeable")),
                        "visible": _flag(child.get("Visible")),
                    }
                )
            )

        logger.debug("Parsed %d F-parameters of module '%s'", len(parameters), module_id)
        try:
            return SafetyParameterBlock(
                param_desc_crc=crc, record_index=record_index, **parameters
            )
        except ValidationError as e:
            raise SchemaError(f"Invalid {context}: {self._format_validation(e)}", self._current_file)
