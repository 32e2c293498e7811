"""
GSDML parsers for PROFINET device descriptions.
"""

from gsdcraft.errors import SchemaError

from .gsdml_parser import (
    GsdmlParser,
    clear_document_cache,
    get_device_description,
    load_device_description,
)

__all__ = [
    "GsdmlParser",
    "SchemaError",
    "load_device_description",
    "get_device_description",
    "clear_document_cache",
]
