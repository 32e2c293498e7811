"""
Safety (F-) parameter definitions.

An ``F_ParameterRecordDataItem`` carries a fixed set of PROFIsafe
attributes. Unlike a ParameterBlock it is not a list of fields, so it is
modeled as a closed record with one optional attribute per F-parameter.
"""

from typing import ClassVar, Dict, List, Optional

from pydantic import Field

from .base import FlexibleModel, StrictModel


class SafetyParameterDef(FlexibleModel):
    """Attributes of one F-parameter element (``<F_SIL DefaultValue=...>``)."""

    default_value: Optional[str] = None
    allowed_values: Optional[str] = None
    changeable: bool = True
    visible: bool = True

    @property
    def allowed_tokens(self) -> List[str]:
        """``AllowedValues`` split on whitespace (e.g. ``["SIL1", "SIL2"]``)."""
        return self.allowed_values.split() if self.allowed_values else []


class SafetyParameterBlock(StrictModel):
    """
    Closed record of F-parameters of one module.

    ``param_desc_crc`` is mandatory in GSDML; every other attribute is
    present only when the document declares it.
    """

    # GSDML element name -> attribute name
    ELEMENT_NAMES: ClassVar[Dict[str, str]] = {
        "F_Check_iPar": "f_check_ipar",
        "F_SIL": "f_sil",
        "F_CRC_Length": "f_crc_length",
        "F_Block_ID": "f_block_id",
        "F_Par_Version": "f_par_version",
        "F_Source_Add": "f_source_add",
        "F_Dest_Add": "f_dest_add",
        "F_WD_Time": "f_wd_time",
        "F_Par_CRC": "f_par_crc",
        "F_iPar_CRC": "f_ipar_crc",
    }

    param_desc_crc: str = Field(..., min_length=1, description="F_ParamDescCRC attribute")
    record_index: Optional[int] = Field(default=None, ge=0)

    f_check_ipar: Optional[SafetyParameterDef] = None
    f_sil: Optional[SafetyParameterDef] = None
    f_crc_length: Optional[SafetyParameterDef] = None
    f_block_id: Optional[SafetyParameterDef] = None
    f_par_version: Optional[SafetyParameterDef] = None
    f_source_add: Optional[SafetyParameterDef] = None
    f_dest_add: Optional[SafetyParameterDef] = None
    f_wd_time: Optional[SafetyParameterDef] = None
    f_par_crc: Optional[SafetyParameterDef] = None
    f_ipar_crc: Optional[SafetyParameterDef] = None

    def get_parameter(self, element_name: str) -> Optional[SafetyParameterDef]:
        """Look up an F-parameter by its GSDML element name."""
        attr = self.ELEMENT_NAMES.get(element_name)
        return getattr(self, attr) if attr else None

    @property
    def declared_parameters(self) -> Dict[str, SafetyParameterDef]:
        """Element name to definition for every declared F-parameter."""
        return {
            element: getattr(self, attr)
            for element, attr in self.ELEMENT_NAMES.items()
            if getattr(self, attr) is not None
        }
