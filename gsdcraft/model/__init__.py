"""
Pydantic-based data models for GSDML device descriptions.

This module provides the single source of truth for a loaded device
description, with validation-first design and compiled lookup tables.

For encode/decode of parameter records, use gsdcraft.runtime.
"""

from .base import FlexibleModel, GsdBaseModel, StrictModel
from .catalog import Assignment, TextCatalog, ValueCatalog
from .device import DeviceDescription, DeviceIdentity, DeviceInfo, ModuleDef, ModuleKind
from .parameter_record import DataType, FieldDef, ParameterBlock, ValueRange
from .safety import SafetyParameterBlock, SafetyParameterDef

__all__ = [
    # Base
    "GsdBaseModel",
    "StrictModel",
    "FlexibleModel",
    # Catalogs
    "Assignment",
    "TextCatalog",
    "ValueCatalog",
    # Parameter records
    "DataType",
    "ValueRange",
    "FieldDef",
    "ParameterBlock",
    # Safety
    "SafetyParameterDef",
    "SafetyParameterBlock",
    # Device
    "ModuleKind",
    "ModuleDef",
    "DeviceIdentity",
    "DeviceInfo",
    "DeviceDescription",
]
