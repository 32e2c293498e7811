"""
Binary field codec for parameter record buffers.

Stateless get/set primitives over a caller-owned buffer. Multi-byte
integers are big-endian (network order, as PROFINET records are laid
out). Bits inside a byte are numbered from the least significant bit, so
a BitArea value is ``(byte >> bit_offset) & mask``.

No function raises on bad input: each returns a :class:`Result` holding
either the value or a ``BoundsError``/``EncodeError``. Setters need a
writable ``bytearray`` and either fully apply or leave it unchanged.
"""

from typing import Any, Callable, Dict, Optional

from gsdcraft.errors import BoundsError, EncodeError, TranscodeError
from gsdcraft.model.parameter_record import DataType, FieldDef
from gsdcraft.result import Result

STRING_ENCODING = "ascii"


def _check_span(buffer: Any, byte_offset: int, width: int) -> Optional[BoundsError]:
    if buffer is None:
        return BoundsError("Buffer is missing")
    if not isinstance(byte_offset, int) or isinstance(byte_offset, bool):
        return BoundsError(f"Byte offset must be an integer, got {byte_offset!r}")
    if width < 0 or byte_offset < 0 or byte_offset + width > len(buffer):
        return BoundsError(
            f"Bytes {byte_offset}..{byte_offset + width - 1} outside buffer of {len(buffer)} bytes"
        )
    return None


def _check_bits(bit_offset: int, bit_length: int) -> Optional[BoundsError]:
    if not 0 <= bit_offset <= 7:
        return BoundsError(f"Bit offset {bit_offset} outside 0..7")
    if not 1 <= bit_length <= 8:
        return BoundsError(f"Bit length {bit_length} outside 1..8")
    if bit_offset + bit_length > 8:
        return BoundsError(f"Bit offset {bit_offset} + length {bit_length} exceeds 8")
    return None


def _check_writable(buffer: Any) -> Optional[BoundsError]:
    if buffer is not None and not isinstance(buffer, bytearray):
        return BoundsError(f"Setter needs a bytearray, got {type(buffer).__name__}")
    return None


def _check_int(value: Any, low: int, high: int) -> Optional[TranscodeError]:
    if isinstance(value, bool) or not isinstance(value, int):
        return EncodeError(f"Expected an integer, got {value!r}")
    if not low <= value <= high:
        return BoundsError(f"Value {value} outside {low}..{high}")
    return None


# ---------------------------------------------------------------------------
# Getters
# ---------------------------------------------------------------------------


def get_bit(buffer: bytes, byte_offset: int, bit_offset: int) -> Result[bool]:
    """Read bit ``bit_offset`` (0 = LSB) of ``buffer[byte_offset]``."""
    error = _check_span(buffer, byte_offset, 1) or _check_bits(bit_offset, 1)
    if error:
        return Result.failure(error)
    return Result.success(bool((buffer[byte_offset] >> bit_offset) & 1))


def get_bit_area(
    buffer: bytes, byte_offset: int, bit_offset: int, bit_length: int
) -> Result[int]:
    """Read ``bit_length`` bits starting at ``bit_offset`` as an unsigned value."""
    error = _check_span(buffer, byte_offset, 1) or _check_bits(bit_offset, bit_length)
    if error:
        return Result.failure(error)
    mask = (1 << bit_length) - 1
    return Result.success((buffer[byte_offset] >> bit_offset) & mask)


def _get_int(buffer: bytes, byte_offset: int, width: int, signed: bool) -> Result[int]:
    error = _check_span(buffer, byte_offset, width)
    if error:
        return Result.failure(error)
    raw = bytes(buffer[byte_offset : byte_offset + width])
    return Result.success(int.from_bytes(raw, "big", signed=signed))


def get_uint8(buffer: bytes, byte_offset: int) -> Result[int]:
    return _get_int(buffer, byte_offset, 1, False)


def get_int8(buffer: bytes, byte_offset: int) -> Result[int]:
    return _get_int(buffer, byte_offset, 1, True)


def get_uint16(buffer: bytes, byte_offset: int) -> Result[int]:
    return _get_int(buffer, byte_offset, 2, False)


def get_int16(buffer: bytes, byte_offset: int) -> Result[int]:
    return _get_int(buffer, byte_offset, 2, True)


def get_uint32(buffer: bytes, byte_offset: int) -> Result[int]:
    return _get_int(buffer, byte_offset, 4, False)


def get_int32(buffer: bytes, byte_offset: int) -> Result[int]:
    return _get_int(buffer, byte_offset, 4, True)


def get_string(buffer: bytes, byte_offset: int, length: int) -> Result[str]:
    """Read an ASCII string of ``length`` bytes, trimming trailing NULs."""
    error = _check_span(buffer, byte_offset, length)
    if error:
        return Result.failure(error)
    raw = bytes(buffer[byte_offset : byte_offset + length]).rstrip(b"\x00")
    try:
        return Result.success(raw.decode(STRING_ENCODING))
    except UnicodeDecodeError as e:
        return Result.failure(BoundsError(f"String at byte {byte_offset} is not ASCII: {e}"))


# ---------------------------------------------------------------------------
# Setters
# ---------------------------------------------------------------------------


def set_bit(buffer: bytearray, byte_offset: int, bit_offset: int, value: bool) -> Result[None]:
    """Set or clear one bit; other bits of the byte are kept."""
    error = (
        _check_span(buffer, byte_offset, 1)
        or _check_writable(buffer)
        or _check_bits(bit_offset, 1)
    )
    if error is None and not isinstance(value, bool) and value not in (0, 1):
        error = EncodeError(f"Bit value must be a bool or 0/1, got {value!r}")
    if error:
        return Result.failure(error)
    if value:
        buffer[byte_offset] |= 1 << bit_offset
    else:
        buffer[byte_offset] &= ~(1 << bit_offset) & 0xFF
    return Result.success()


def set_bit_area(
    buffer: bytearray, byte_offset: int, bit_offset: int, bit_length: int, value: int
) -> Result[None]:
    """Write ``value`` into a bit area; bits outside the area are kept."""
    error = (
        _check_span(buffer, byte_offset, 1)
        or _check_writable(buffer)
        or _check_bits(bit_offset, bit_length)
        or _check_int(value, 0, (1 << bit_length) - 1)
    )
    if error:
        return Result.failure(error)
    mask = ((1 << bit_length) - 1) << bit_offset
    buffer[byte_offset] = (buffer[byte_offset] & ~mask & 0xFF) | ((value << bit_offset) & mask)
    return Result.success()


def _set_int(
    buffer: bytearray, byte_offset: int, value: int, width: int, signed: bool
) -> Result[None]:
    bits = width * 8
    low, high = (-(1 << (bits - 1)), (1 << (bits - 1)) - 1) if signed else (0, (1 << bits) - 1)
    error = (
        _check_span(buffer, byte_offset, width)
        or _check_writable(buffer)
        or _check_int(value, low, high)
    )
    if error:
        return Result.failure(error)
    buffer[byte_offset : byte_offset + width] = value.to_bytes(width, "big", signed=signed)
    return Result.success()


def set_uint8(buffer: bytearray, byte_offset: int, value: int) -> Result[None]:
    return _set_int(buffer, byte_offset, value, 1, False)


def set_int8(buffer: bytearray, byte_offset: int, value: int) -> Result[None]:
    return _set_int(buffer, byte_offset, value, 1, True)


def set_uint16(buffer: bytearray, byte_offset: int, value: int) -> Result[None]:
    return _set_int(buffer, byte_offset, value, 2, False)


def set_int16(buffer: bytearray, byte_offset: int, value: int) -> Result[None]:
    return _set_int(buffer, byte_offset, value, 2, True)


def set_uint32(buffer: bytearray, byte_offset: int, value: int) -> Result[None]:
    return _set_int(buffer, byte_offset, value, 4, False)


def set_int32(buffer: bytearray, byte_offset: int, value: int) -> Result[None]:
    return _set_int(buffer, byte_offset, value, 4, True)


def set_string(buffer: bytearray, byte_offset: int, length: int, value: str) -> Result[None]:
    """Write ASCII ``value`` truncated or NUL-padded to exactly ``length`` bytes."""
    error = _check_span(buffer, byte_offset, length) or _check_writable(buffer)
    if error:
        return Result.failure(error)
    if not isinstance(value, str):
        return Result.failure(EncodeError(f"Expected a string, got {value!r}"))
    try:
        encoded = value.encode(STRING_ENCODING)
    except UnicodeEncodeError as e:
        return Result.failure(EncodeError(f"String {value!r} is not ASCII: {e}"))
    buffer[byte_offset : byte_offset + length] = encoded[:length].ljust(length, b"\x00")
    return Result.success()


# ---------------------------------------------------------------------------
# Field-level dispatch
# ---------------------------------------------------------------------------

_INT_GETTERS: Dict[DataType, Callable[[bytes, int], Result[int]]] = {
    DataType.UNSIGNED8: get_uint8,
    DataType.INTEGER8: get_int8,
    DataType.UNSIGNED16: get_uint16,
    DataType.INTEGER16: get_int16,
    DataType.UNSIGNED32: get_uint32,
    DataType.INTEGER32: get_int32,
}

_INT_SETTERS: Dict[DataType, Callable[[bytearray, int, int], Result[None]]] = {
    DataType.UNSIGNED8: set_uint8,
    DataType.INTEGER8: set_int8,
    DataType.UNSIGNED16: set_uint16,
    DataType.INTEGER16: set_int16,
    DataType.UNSIGNED32: set_uint32,
    DataType.INTEGER32: set_int32,
}


def read_field(buffer: bytes, field: FieldDef) -> Result[Any]:
    """Read the raw typed value of ``field`` from ``buffer``."""
    data_type = field.data_type
    if data_type is DataType.BIT:
        return get_bit(buffer, field.byte_offset, field.effective_bit_offset)
    if data_type is DataType.BIT_AREA:
        return get_bit_area(buffer, field.byte_offset, field.effective_bit_offset, field.bit_length)
    if data_type is DataType.VISIBLE_STRING:
        return get_string(buffer, field.byte_offset, field.string_length)
    return _INT_GETTERS[data_type](buffer, field.byte_offset)


def write_field(buffer: bytearray, field: FieldDef, value: Any) -> Result[None]:
    """Write the raw typed ``value`` of ``field`` into ``buffer``."""
    data_type = field.data_type
    if data_type is DataType.BIT:
        return set_bit(buffer, field.byte_offset, field.effective_bit_offset, value)
    if data_type is DataType.BIT_AREA:
        return set_bit_area(
            buffer, field.byte_offset, field.effective_bit_offset, field.bit_length, value
        )
    if data_type is DataType.VISIBLE_STRING:
        return set_string(buffer, field.byte_offset, field.string_length, value)
    return _INT_SETTERS[data_type](buffer, field.byte_offset, value)
