"""
Text and value catalogs of a device description.

Both catalogs are built once while a GSDML document is loaded and are
never mutated afterwards.
"""

from typing import Dict, Optional, Tuple

from pydantic import Field

from .base import FlexibleModel, StrictModel


class Assignment(FlexibleModel):
    """One ``<Assign>`` entry of a value item: raw code to display text."""

    raw_code: str = Field(..., description="Raw value as written in the record")
    display_text: str = Field(..., description="Human readable text")


class TextCatalog(StrictModel):
    """Language-neutral text ids resolved to display strings."""

    texts: Dict[str, str] = Field(default_factory=dict, description="TextId to text")

    def resolve_text(self, text_id: Optional[str]) -> Optional[str]:
        """Return the display string for ``text_id`` or None if there is none."""
        if not text_id:
            return None
        return self.texts.get(text_id)

    def __contains__(self, text_id: object) -> bool:
        return text_id in self.texts

    def __len__(self) -> int:
        return len(self.texts)


class ValueCatalog(StrictModel):
    """Value item ids resolved to their ordered assignment lists."""

    items: Dict[str, Tuple[Assignment, ...]] = Field(
        default_factory=dict, description="ValueItem ID to assignments"
    )

    def resolve_value_item(self, value_item_id: Optional[str]) -> Optional[Tuple[Assignment, ...]]:
        """Return the assignments of a value item or None if it is unknown."""
        if not value_item_id:
            return None
        return self.items.get(value_item_id)

    def __contains__(self, value_item_id: object) -> bool:
        return value_item_id in self.items

    def __len__(self) -> int:
        return len(self.items)
