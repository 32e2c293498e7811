"""
Runtime encode/decode of parameter records and safety parameters.

This module provides the codec, transcoder and device-facing adapters.
For GSDML schema definitions, use gsdcraft.model instead.
"""

from . import codec
from .record import AbstractRecordInterface, ParameterRecord
from .safety import AbstractSafetyAttributeStore, SafetyParameterAdapter
from .transcoder import UNREADABLE, decode, default_record, encode

__all__ = [
    "codec",
    "decode",
    "encode",
    "default_record",
    "UNREADABLE",
    "AbstractRecordInterface",
    "ParameterRecord",
    "AbstractSafetyAttributeStore",
    "SafetyParameterAdapter",
]
