"""
Device description document model.

A DeviceDescription is the parsed, validated and frozen form of one GSDML
file. It owns the text and value catalogs and the module catalog (device
access points plus modules). Id and name lookup tables are compiled once on
first use.
"""

from enum import Enum
from functools import cached_property
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import Field, model_validator

from .base import FlexibleModel, StrictModel
from .catalog import TextCatalog, ValueCatalog
from .parameter_record import ParameterBlock
from .safety import SafetyParameterBlock


class ModuleKind(str, Enum):
    """Where a module descriptor came from in the document."""

    DAP = "dap"
    MODULE = "module"


class ModuleDef(StrictModel):
    """
    Module or Device Access Point descriptor.

    A module may declare several parameter records; ``parameter_block``
    returns the first one.
    """

    id: str = Field(..., min_length=1, description="ID attribute")
    ident_number: str = Field(..., min_length=1, description="ModuleIdentNumber attribute")
    name: str = Field(default="", description="Resolved ModuleInfo/Name text")
    info_text: str = Field(default="", description="Resolved ModuleInfo/InfoText text")
    order_number: Optional[str] = None
    kind: ModuleKind = ModuleKind.MODULE
    parameter_blocks: List[ParameterBlock] = Field(default_factory=list)
    safety_block: Optional[SafetyParameterBlock] = None

    @model_validator(mode="after")
    def check_record_indices(self) -> "ModuleDef":
        indices = [b.record_index for b in self.parameter_blocks]
        duplicates = sorted({i for i in indices if indices.count(i) > 1})
        if duplicates:
            raise ValueError(f"Module '{self.id}' declares record index {duplicates[0]} more than once")
        return self

    @property
    def parameter_block(self) -> Optional[ParameterBlock]:
        return self.parameter_blocks[0] if self.parameter_blocks else None

    def get_parameter_block(self, record_index: int) -> Optional[ParameterBlock]:
        """Find a parameter record by its index."""
        for block in self.parameter_blocks:
            if block.record_index == record_index:
                return block
        return None

    @property
    def is_dap(self) -> bool:
        return self.kind is ModuleKind.DAP


class DeviceIdentity(FlexibleModel):
    """``DeviceIdentity`` element: vendor and device ids."""

    vendor_id: Optional[str] = None
    device_id: Optional[str] = None
    vendor_name: Optional[str] = None


class DeviceInfo(FlexibleModel):
    """Descriptive texts of the device."""

    name: str = ""
    info_text: str = ""
    order_number: Optional[str] = None
    hardware_release: Optional[str] = None
    software_release: Optional[str] = None


class DeviceDescription(StrictModel):
    """
    Root of a parsed GSDML document.

    Shared read-only by every device instance of the same type.
    """

    text_catalog: TextCatalog = Field(default_factory=TextCatalog)
    value_catalog: ValueCatalog = Field(default_factory=ValueCatalog)
    device_access_points: List[ModuleDef] = Field(..., min_length=1)
    modules: List[ModuleDef] = Field(default_factory=list)
    identity: DeviceIdentity = Field(default_factory=DeviceIdentity)
    info: DeviceInfo = Field(default_factory=DeviceInfo)
    source_path: Optional[Path] = None

    @model_validator(mode="after")
    def check_unique_ids(self) -> "DeviceDescription":
        seen = set()
        for module in self.all_modules:
            if module.id in seen:
                raise ValueError(f"Duplicate module ID '{module.id}'")
            seen.add(module.id)
        return self

    @property
    def device_access_point(self) -> ModuleDef:
        """The first (primary) device access point."""
        return self.device_access_points[0]

    @property
    def all_modules(self) -> List[ModuleDef]:
        """Device access points followed by modules, in document order."""
        return list(self.device_access_points) + list(self.modules)

    @cached_property
    def modules_by_id(self) -> Dict[str, ModuleDef]:
        index: Dict[str, ModuleDef] = {}
        for module in self.all_modules:
            index.setdefault(module.id, module)
        return index

    @cached_property
    def modules_by_name(self) -> Dict[str, List[ModuleDef]]:
        index: Dict[str, List[ModuleDef]] = {}
        for module in self.all_modules:
            if module.name:
                index.setdefault(module.name, []).append(module)
        return index

    def get_module(self, key: str) -> Optional[ModuleDef]:
        """Look up a module by id, then by display name.

        When several modules share a name the first one in document order
        is returned; use the id to select another.
        """
        module = self.modules_by_id.get(key)
        if module is not None:
            return module
        matches = self.modules_by_name.get(key)
        return matches[0] if matches else None

    def find_modules_by_name(self, name: str) -> List[ModuleDef]:
        """All modules carrying ``name``."""
        return list(self.modules_by_name.get(name, []))

    def resolve_text(self, text_id: Optional[str]) -> Optional[str]:
        return self.text_catalog.resolve_text(text_id)
