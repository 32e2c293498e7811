"""
GSDML parser for PROFINET device descriptions.

Loads GSDML XML files and converts the parameter-relevant subset to
canonical Pydantic models: text and value catalogs, device access points,
modules, their parameter records and F-parameter records.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union
from xml.etree import ElementTree
from xml.etree.ElementTree import Element

from pydantic import ValidationError

from gsdcraft.config import get_settings
from gsdcraft.errors import SchemaError
from gsdcraft.model import (
    DeviceDescription,
    DeviceIdentity,
    DeviceInfo,
    ModuleDef,
    ModuleKind,
    TextCatalog,
    ValueCatalog,
)
from gsdcraft.result import Result
from gsdcraft.utils import filter_none, parse_int

from .catalog_parser import CatalogParserMixin
from .parameter_record_parser import ParameterRecordParserMixin
from .safety_parser import SafetyParserMixin

logger = logging.getLogger(__name__)


def _local_name(name: str) -> str:
    return name.rsplit("}", 1)[-1] if name.startswith("{") else name


def _strip_namespaces(root: Element) -> Element:
    """Drop XML namespaces from tags and attributes in place."""
    for element in root.iter():
        if isinstance(element.tag, str):
            element.tag = _local_name(element.tag)
        if any(key.startswith("{") for key in element.attrib):
            element.attrib = {_local_name(k): v for k, v in element.attrib.items()}
    return root


class GsdmlParser(CatalogParserMixin, ParameterRecordParserMixin, SafetyParserMixin):
    """
    Parser for GSDML device descriptions.

    Handles:
    - External text resolution with language selection
    - Value list resolution attached to each field
    - Device access points and modules with their parameter records
    - F-parameter records of failsafe modules
    - Strict validation: any problem aborts the load with SchemaError
    """

    def __init__(self, language: Optional[str] = None):
        self.language = language if language is not None else get_settings().gsdml.language
        self._current_file: Optional[Path] = None
        self._text_catalog = TextCatalog()
        self._value_catalog = ValueCatalog()

    @staticmethod
    def _format_validation(error: ValidationError) -> str:
        errors = []
        for item in error.errors():
            loc = " -> ".join(str(x) for x in item["loc"])
            errors.append(f"{loc}: {item['msg']}" if loc else item["msg"])
        return "; ".join(errors)

    def _require_int(self, element: Element, attribute: str, context: str) -> int:
        text = element.get(attribute)
        if text is None or not text.strip():
            raise SchemaError(f"Missing {attribute} in {context}", self._current_file)
        value = parse_int(text)
        if value is None:
            raise SchemaError(
                f"Attribute {attribute}='{text}' is not an integer in {context}",
                self._current_file,
            )
        return value

    def _resolve_name(self, text_id: Optional[str], context: str) -> str:
        text = self._text_catalog.resolve_text(text_id)
        if text is None:
            logger.warning("TextId '%s' of %s not found; using the id as name", text_id, context)
            return text_id or ""
        return text.strip()

    def parse_file(self, file_path: Union[str, Path]) -> DeviceDescription:
        """
        Parse a GSDML file.

        Args:
            file_path: Path to the GSDML XML file

        Returns:
            DeviceDescription: Validated, frozen document model

        Raises:
            SchemaError: If the file is missing, malformed or fails validation
        """
        file_path = Path(file_path).resolve()
        self._current_file = file_path

        if not file_path.exists():
            raise SchemaError(f"File not found: {file_path}")

        try:
            root = ElementTree.parse(file_path).getroot()
        except ElementTree.ParseError as e:
            line = e.position[0] if getattr(e, "position", None) else None
            raise SchemaError(f"XML syntax error: {e}", file_path, line)
        except OSError as e:
            raise SchemaError(f"Cannot read file: {e}", file_path)

        return self._parse_root(root, file_path)

    def parse_string(self, content: str, source: Optional[Union[str, Path]] = None) -> DeviceDescription:
        """
        Parse GSDML content held in memory.

        Args:
            content: GSDML XML text
            source: Optional name used in error messages

        Raises:
            SchemaError: If the content is malformed or fails validation
        """
        self._current_file = Path(source) if source else None
        try:
            root = ElementTree.fromstring(content)
        except ElementTree.ParseError as e:
            line = e.position[0] if getattr(e, "position", None) else None
            raise SchemaError(f"XML syntax error: {e}", self._current_file, line)
        return self._parse_root(root, self._current_file)

    def _parse_root(self, root: Element, file_path: Optional[Path]) -> DeviceDescription:
        _strip_namespaces(root)
        self._text_catalog = self._parse_text_catalog(root, self.language)
        self._value_catalog = self._parse_value_catalog(root, self._text_catalog)

        try:
            return self._parse_device(root, file_path)
        except ValidationError as e:
            # Convert Pydantic validation errors to SchemaError
            raise SchemaError(f"Validation failed: {self._format_validation(e)}", file_path)

    def _parse_device(self, root: Element, file_path: Optional[Path]) -> DeviceDescription:
        dap_elements = root.findall(".//DeviceAccessPointList/DeviceAccessPointItem")
        if not dap_elements:
            raise SchemaError("No DeviceAccessPointItem found", file_path)

        daps = [self._parse_module(el, ModuleKind.DAP) for el in dap_elements]
        modules = [
            self._parse_module(el, ModuleKind.MODULE)
            for el in root.findall(".//ModuleList/ModuleItem")
        ]
        logger.info(
            "Loaded %s: %d device access point(s), %d module(s)",
            file_path or "<string>",
            len(daps),
            len(modules),
        )

        return DeviceDescription(
            text_catalog=self._text_catalog,
            value_catalog=self._value_catalog,
            device_access_points=daps,
            modules=modules,
            identity=self._parse_identity(root),
            info=self._parse_info(root, dap_elements[0]),
            source_path=file_path,
        )

    def _parse_module(self, item: Element, kind: ModuleKind) -> ModuleDef:
        """Parse a DeviceAccessPointItem or ModuleItem."""
        label = "DeviceAccessPointItem" if kind is ModuleKind.DAP else "ModuleItem"
        module_id = (item.get("ID") or "").strip()
        if not module_id:
            raise SchemaError(f"{label} without ID", self._current_file)
        ident_number = (item.get("ModuleIdentNumber") or "").strip()
        if not ident_number:
            raise SchemaError(
                f"Missing ModuleIdentNumber in {label} '{module_id}'", self._current_file
            )

        info = item.find("ModuleInfo")
        name = info_text = ""
        order_number = None
        if info is not None:
            name_el = info.find("Name")
            if name_el is not None and name_el.get("TextId"):
                name = self._resolve_name(name_el.get("TextId"), f"{label} '{module_id}'")
            info_el = info.find("InfoText")
            if info_el is not None:
                info_text = (self._text_catalog.resolve_text(info_el.get("TextId")) or "").strip()
            order_el = info.find("OrderNumber")
            if order_el is not None:
                order_number = order_el.get("Value")

        parameter_blocks = self._parse_parameter_blocks(item, module_id)
        safety_block = self._parse_safety_block(item, module_id)
        logger.debug(
            "Parsed %s '%s' (%s): %d parameter record(s)%s",
            label,
            module_id,
            name,
            len(parameter_blocks),
            ", F-parameters" if safety_block else "",
        )

        try:
            return ModuleDef(
                **filter_none(
                    {
                        "id": module_id,
                        "ident_number": ident_number,
                        "name": name,
                        "info_text": info_text,
                        "order_number": order_number,
                        "kind": kind,
                        "parameter_blocks": parameter_blocks,
                        "safety_block": safety_block,
                    }
                )
            )
        except ValidationError as e:
            raise SchemaError(
                f"Invalid {label} '{module_id}': {self._format_validation(e)}", self._current_file
            )

    def _parse_identity(self, root: Element) -> DeviceIdentity:
        identity = root.find(".//DeviceIdentity")
        if identity is None:
            return DeviceIdentity()
        vendor = identity.find("VendorName")
        return DeviceIdentity(
            **filter_none(
                {
                    "vendor_id": identity.get("VendorID"),
                    "device_id": identity.get("DeviceID"),
                    "vendor_name": vendor.get("Value") if vendor is not None else None,
                }
            )
        )

    def _parse_info(self, root: Element, dap: Element) -> DeviceInfo:
        """Device texts: DAP ModuleInfo, with DeviceIdentity/InfoText as description."""
        values: Dict[str, Optional[str]] = {}
        info = dap.find("ModuleInfo")
        if info is not None:
            name_el = info.find("Name")
            if name_el is not None:
                values["name"] = self._text_catalog.resolve_text(name_el.get("TextId"))
            info_el = info.find("InfoText")
            if info_el is not None:
                values["info_text"] = self._text_catalog.resolve_text(info_el.get("TextId"))
            for tag, key in (
                ("OrderNumber", "order_number"),
                ("HardwareRelease", "hardware_release"),
                ("SoftwareRelease", "software_release"),
            ):
                element = info.find(tag)
                if element is not None:
                    values[key] = element.get("Value")

        identity_text = root.find(".//DeviceIdentity/InfoText")
        if identity_text is not None:
            text = self._text_catalog.resolve_text(identity_text.get("TextId"))
            if text:
                values["info_text"] = text
        return DeviceInfo(**filter_none(values))


def load_device_description(
    file_path: Union[str, Path], language: Optional[str] = None
) -> Result[DeviceDescription]:
    """Parse a GSDML file, returning the SchemaError as a failed Result."""
    try:
        return Result.success(GsdmlParser(language=language).parse_file(file_path))
    except SchemaError as e:
        logger.error("Failed to load device description: %s", e)
        return Result.failure(e)


# One parsed document per resolved path (device type)
_document_cache: Dict[Path, DeviceDescription] = {}


def get_device_description(file_path: Union[str, Path]) -> DeviceDescription:
    """
    Get the device description of a GSDML file, parsing it on first use.

    Caching is controlled by ``gsdml.cacheDocuments`` in the settings.

    Raises:
        SchemaError: If the document cannot be loaded
    """
    path = Path(file_path).resolve()
    settings = get_settings().gsdml
    if settings.cache_documents and path in _document_cache:
        return _document_cache[path]

    description = GsdmlParser().parse_file(path)
    if settings.cache_documents:
        _document_cache[path] = description
    return description


def clear_document_cache() -> List[Path]:
    """Forget every cached document and return the paths that were cached."""
    paths = list(_document_cache)
    _document_cache.clear()
    return paths
