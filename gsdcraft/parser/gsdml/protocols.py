"""Typing protocols for parser mixins."""

from pathlib import Path
from typing import Optional, Protocol
from xml.etree.ElementTree import Element

from gsdcraft.model import TextCatalog, ValueCatalog


class ParserHostContext(Protocol):
    """Attributes and methods required by parser mixins from the main parser class."""

    _current_file: Optional[Path]
    _text_catalog: TextCatalog
    _value_catalog: ValueCatalog

    def _require_int(self, element: Element, attribute: str, context: str) -> int:
        """Read a mandatory integer attribute or raise SchemaError."""
        ...

    def _resolve_name(self, text_id: Optional[str], context: str) -> str:
        """Resolve a TextId, falling back to the id itself."""
        ...

    def _format_validation(self, error: Exception) -> str:
        """Flatten a pydantic ValidationError into one message."""
        ...
