"""Text and value catalog parsing mixin for ``GsdmlParser``."""

import logging
from typing import Dict, List, Optional, Tuple
from xml.etree.ElementTree import Element

from gsdcraft.model import Assignment, TextCatalog, ValueCatalog

from .protocols import ParserHostContext

logger = logging.getLogger(__name__)


class CatalogParserMixin(ParserHostContext):
    """Mixin building the text and value catalogs of a document."""

    @staticmethod
    def _read_texts(language_element: Optional[Element]) -> Dict[str, str]:
        texts: Dict[str, str] = {}
        if language_element is None:
            return texts
        for text in language_element.findall("Text"):
            text_id = text.get("TextId")
            if text_id:
                texts[text_id] = text.get("Value", "")
        return texts

    def _parse_text_catalog(self, root: Element, language: Optional[str]) -> TextCatalog:
        """Build the text catalog from ``ExternalTextList``.

        Texts of ``language`` override the primary language; ids missing in
        that language keep their primary text.
        """
        text_list = root.find(".//ExternalTextList")
        if text_list is None:
            logger.warning("Document has no ExternalTextList; names fall back to text ids")
            return TextCatalog()

        texts = self._read_texts(text_list.find("PrimaryLanguage"))
        if language:
            matched = None
            for candidate in text_list.findall("Language"):
                if (candidate.get("lang") or "").lower() == language.lower():
                    matched = candidate
                    break
            if matched is None:
                logger.debug("Language '%s' not in document, using primary language", language)
            else:
                texts.update(self._read_texts(matched))

        logger.debug("Loaded %d external texts", len(texts))
        return TextCatalog(texts=texts)

    def _parse_assignments(self, value_item: Element, catalog: TextCatalog) -> List[Assignment]:
        assignments = []
        for assign in value_item.findall("./Assignments/Assign"):
            content = assign.get("Content")
            if content is None:
                continue
            text_id = assign.get("TextId")
            text = catalog.resolve_text(text_id)
            assignments.append(
                Assignment(
                    raw_code=content.strip(),
                    display_text=(text if text is not None else text_id or content).strip(),
                )
            )
        return assignments

    def _parse_value_catalog(self, root: Element, catalog: TextCatalog) -> ValueCatalog:
        """Build the value catalog from ``ValueList/ValueItem`` entries."""
        items: Dict[str, Tuple[Assignment, ...]] = {}
        for value_item in root.findall(".//ValueList/ValueItem"):
            item_id = value_item.get("ID")
            if not item_id:
                continue
            items[item_id] = tuple(self._parse_assignments(value_item, catalog))
        logger.debug("Loaded %d value items", len(items))
        return ValueCatalog(items=items)
