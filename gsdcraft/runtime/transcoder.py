"""
Parameter transcoder: named values <-> parameter record bytes.

``decode`` turns a record buffer into ``{field name: value}`` and
``encode`` applies a set of named values to a copy of a baseline buffer.
Fields with value assignments exchange display texts instead of raw codes.

Both operations return a :class:`Result`; errors carry the offending
field name in ``error.field``. ``encode`` is all-or-nothing: on failure
the caller gets the error only, never a partially modified buffer.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from gsdcraft.errors import (
    EmptyInputError,
    EncodeError,
    FieldNotFoundError,
    InsufficientDataError,
    InvalidSymbolError,
    RangeViolationError,
)
from gsdcraft.model.parameter_record import DataType, FieldDef, ParameterBlock
from gsdcraft.result import Result
from gsdcraft.utils import hex_dump, parse_int

from . import codec

logger = logging.getLogger(__name__)


class _Unreadable:
    """Placeholder for a field the codec could not read from the buffer."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNREADABLE"

    def __bool__(self) -> bool:
        return False


UNREADABLE = _Unreadable()


def _check_length(block: ParameterBlock, buffer: Optional[bytes]) -> Optional[InsufficientDataError]:
    size = 0 if buffer is None else len(buffer)
    if size < block.length:
        return InsufficientDataError(
            f"Record {block.record_index} needs {block.length} bytes, got {size}"
        )
    return None


def _raw_to_typed(field: FieldDef, raw_code: str) -> Any:
    """Convert an assignment raw code (``Content``) to the value the codec expects."""
    if field.data_type is DataType.VISIBLE_STRING:
        return raw_code
    if field.data_type is DataType.BIT and raw_code.strip().lower() in ("true", "false"):
        return raw_code.strip().lower() == "true"
    number = parse_int(raw_code)
    return raw_code if number is None else number


def decode(
    block: ParameterBlock, buffer: bytes, requested: Optional[Iterable[str]] = None
) -> Result[Dict[str, Any]]:
    """
    Decode a parameter record.

    Args:
        block: Parameter record definition
        buffer: Raw record bytes, at least ``block.length`` long
        requested: Optional field names to decode (all fields when None)

    Returns:
        Result with ``{name: value}``; fails with InsufficientDataError or
        FieldNotFoundError (no partial result)
    """
    error = _check_length(block, buffer)
    if error:
        return Result.failure(error)

    wanted = None
    if requested is not None:
        wanted = set(requested)
        for name in sorted(wanted):
            if name not in block:
                return Result.failure(
                    FieldNotFoundError(
                        f"Field '{name}' not found in record {block.record_index}", field=name
                    )
                )

    logger.debug("Decoding record %s: %s", block.record_index, hex_dump(buffer))

    values: Dict[str, Any] = {}
    for field in block.fields:
        if wanted is not None and field.name not in wanted:
            continue
        res = codec.read_field(buffer, field)
        if not res.ok:
            logger.warning(
                "Field '%s' of record %s unreadable: %s",
                field.name,
                block.record_index,
                res.error,
            )
            values[field.name] = UNREADABLE
            continue
        display = field.raw_to_display(res.value)
        values[field.name] = display if display is not None else res.value
    return Result.success(values)


def _resolve_value(field: FieldDef, value: Any) -> Result[Any]:
    """Map display text to a typed raw value and enforce allowed values."""
    raw = value
    if isinstance(value, str) and field.has_assignments:
        raw_code = field.display_to_raw(value)
        if raw_code is None:
            return Result.failure(
                InvalidSymbolError(
                    f"'{value}' is not a valid value for field '{field.name}' "
                    f"(expected one of: {', '.join(field.assignments.values())})",
                    field=field.name,
                )
            )
        raw = _raw_to_typed(field, raw_code)

    if (
        field.allowed_values is not None
        and isinstance(raw, int)
        and not isinstance(raw, bool)
        and not field.allowed_values.contains(raw)
    ):
        return Result.failure(
            RangeViolationError(
                f"Value {raw} for field '{field.name}' outside allowed values {field.allowed_values}",
                field=field.name,
            )
        )
    return Result.success(raw)


def _check_string_length(field: FieldDef, value: Any) -> Optional[EncodeError]:
    """Reject VisibleString values that do not fit the field."""
    if field.data_type is not DataType.VISIBLE_STRING or not isinstance(value, str):
        return None
    size = len(value.encode(codec.STRING_ENCODING, errors="replace"))
    if size > field.string_length:
        return EncodeError(
            f"Value {value!r} for field '{field.name}' is {size} characters long, "
            f"maximum is {field.string_length}",
            field=field.name,
        )
    return None


def encode(
    block: ParameterBlock, baseline: bytes, values: Mapping[str, Any]
) -> Result[bytes]:
    """
    Apply named values to a copy of ``baseline``.

    Args:
        block: Parameter record definition
        baseline: Current record bytes, at least ``block.length`` long
        values: ``{field name: value}``; display texts for fields with
            value assignments, raw values otherwise

    Returns:
        Result with the new record bytes, or the first error encountered
    """
    if not values:
        return Result.failure(EmptyInputError("No parameter values given"))
    error = _check_length(block, baseline)
    if error:
        return Result.failure(error)

    working = bytearray(baseline)
    for name, value in values.items():
        field = block.get_field(name)
        if field is None:
            return _reject(
                FieldNotFoundError(
                    f"Field '{name}' not found in record {block.record_index}", field=name
                )
            )

        if not field.changeable:
            return _reject(
                EncodeError(f"Field '{name}' is not changeable", field=name)
            )

        resolved = _resolve_value(field, value)
        if not resolved.ok:
            return _reject(resolved.error)

        overlength = _check_string_length(field, resolved.value)
        if overlength:
            return _reject(overlength)

        written = codec.write_field(working, field, resolved.value)
        if not written.ok:
            return _reject(
                EncodeError(
                    f"Cannot write {value!r} to field '{name}' ({field.data_type.value}): "
                    f"{written.error}",
                    field=name,
                )
            )

    logger.debug(
        "Encoded record %s: %s -> %s",
        block.record_index,
        hex_dump(baseline),
        hex_dump(working),
    )
    return Result.success(bytes(working))


def default_record(block: ParameterBlock) -> Result[bytes]:
    """Build a record of ``block.length`` bytes holding every field's default value."""
    working = bytearray(block.length)
    for field in block.fields:
        if field.default_value is None:
            continue
        typed = _raw_to_typed(field, field.default_value)
        written = codec.write_field(working, field, typed)
        if not written.ok:
            return _reject(
                EncodeError(
                    f"Default value {field.default_value!r} of field '{field.name}' "
                    f"cannot be written: {written.error}",
                    field=field.name,
                )
            )
    return Result.success(bytes(working))


def _reject(error) -> Result[bytes]:
    logger.error("Parameter write rejected: %s", error)
    return Result.failure(error)
