import pytest

from gsdcraft.errors import BoundsError, EncodeError
from gsdcraft.model import DataType, FieldDef
from gsdcraft.runtime import codec


class TestGetters:
    def test_big_endian_integers(self):
        buffer = bytes([0x12, 0x34, 0x56, 0x78])
        assert codec.get_uint32(buffer, 0).value == 0x12345678
        assert codec.get_uint16(buffer, 2).value == 0x5678
        assert codec.get_uint8(buffer, 1).value == 0x34

    def test_integer32_big_endian(self):
        assert codec.get_int32(bytes([0x12, 0x34, 0x56, 0x78]), 0).value == 0x12345678

    def test_signed_integers(self):
        buffer = bytes([0xFF, 0xFB, 0x80, 0x00, 0x00, 0x00])
        assert codec.get_int8(buffer, 0).value == -1
        assert codec.get_int16(buffer, 0).value == -5
        assert codec.get_int32(buffer, 2).value == -(2**31)

    def test_bits_lsb_first(self):
        buffer = bytes([0b00010100])
        assert codec.get_bit(buffer, 0, 2).value is True
        assert codec.get_bit(buffer, 0, 3).value is False
        assert codec.get_bit_area(buffer, 0, 2, 3).value == 0b101

    def test_string_trims_trailing_nul(self):
        assert codec.get_string(b"AB\x00\x00", 0, 4).value == "AB"
        assert codec.get_string(b"xxABC", 2, 3).value == "ABC"

    @pytest.mark.parametrize(
        "call",
        [
            lambda: codec.get_uint8(b"", 0),
            lambda: codec.get_uint16(b"\x00", 0),
            lambda: codec.get_uint32(b"\x00\x00\x00\x00", 1),
            lambda: codec.get_int8(b"\x00", -1),
            lambda: codec.get_bit(b"\x00", 0, 8),
            lambda: codec.get_bit_area(b"\x00", 0, 6, 3),
            lambda: codec.get_string(b"AB", 0, 3),
            lambda: codec.get_uint8(None, 0),
            lambda: codec.get_bit(b"\x01\x02", -1, 0),
            lambda: codec.get_bit(b"\x01\x02", 2, 0),
        ],
    )
    def test_out_of_bounds_is_an_error_result(self, call):
        result = call()
        assert not result.ok
        assert isinstance(result.error, BoundsError)


class TestSetters:
    def test_big_endian_layout(self):
        buffer = bytearray(4)
        assert codec.set_uint32(buffer, 0, 0x12345678).ok
        assert buffer == bytearray([0x12, 0x34, 0x56, 0x78])

        codec.set_int16(buffer, 0, -5)
        assert buffer[:2] == bytearray([0xFF, 0xFB])

    def test_integer32_round_trip(self):
        buffer = bytearray(6)
        assert codec.set_int32(buffer, 1, 0x12345678).ok
        assert buffer == bytearray([0x00, 0x12, 0x34, 0x56, 0x78, 0x00])
        assert codec.get_int32(bytes(buffer), 1).value == 0x12345678

    def test_bit_keeps_neighbours(self):
        buffer = bytearray([0b10100101])
        assert codec.set_bit(buffer, 0, 1, True).ok
        assert buffer[0] == 0b10100111
        assert codec.set_bit(buffer, 0, 7, 0).ok
        assert buffer[0] == 0b00100111

    def test_bit_area_keeps_neighbours(self):
        buffer = bytearray([0xFF])
        assert codec.set_bit_area(buffer, 0, 2, 3, 0b010).ok
        assert buffer[0] == 0b11101011

    def test_string_pads_and_truncates(self):
        buffer = bytearray(b"\xff" * 4)
        assert codec.set_string(buffer, 0, 4, "AB").ok
        assert buffer == bytearray(b"AB\x00\x00")

        assert codec.set_string(buffer, 0, 4, "ABCDEF").ok
        assert buffer == bytearray(b"ABCD")

    def test_non_ascii_string_rejected(self):
        buffer = bytearray(4)
        result = codec.set_string(buffer, 0, 4, "Grüß")
        assert isinstance(result.error, EncodeError)
        assert buffer == bytearray(4)

    @pytest.mark.parametrize(
        "setter, value",
        [
            (codec.set_uint8, 256),
            (codec.set_uint8, -1),
            (codec.set_int8, 128),
            (codec.set_uint16, 0x10000),
            (codec.set_int16, -32769),
            (codec.set_int32, 2**31),
        ],
    )
    def test_out_of_range_leaves_buffer_unchanged(self, setter, value):
        buffer = bytearray(b"\xaa\xbb\xcc\xdd")
        result = setter(buffer, 0, value)
        assert isinstance(result.error, BoundsError)
        assert buffer == bytearray(b"\xaa\xbb\xcc\xdd")

    def test_offset_beyond_buffer(self):
        buffer = bytearray(2)
        assert isinstance(codec.set_uint16(buffer, 1, 1).error, BoundsError)
        assert isinstance(codec.set_bit(buffer, 2, 0, True).error, BoundsError)
        assert buffer == bytearray(2)

    def test_wrong_value_type(self):
        buffer = bytearray(2)
        assert isinstance(codec.set_uint8(buffer, 0, "7").error, EncodeError)
        assert isinstance(codec.set_uint8(buffer, 0, True).error, EncodeError)
        assert isinstance(codec.set_bit(buffer, 0, 0, 2).error, EncodeError)

    def test_immutable_buffer_rejected(self):
        result = codec.set_uint8(b"\x00", 0, 1)
        assert not result.ok
        assert isinstance(result.error, BoundsError)


class TestFieldDispatch:
    def test_read_and_write_by_field(self):
        field = FieldDef(name="W", text_id="T_W", data_type=DataType.UNSIGNED16, byte_offset=1)
        buffer = bytearray(3)
        assert codec.write_field(buffer, field, 0xBEEF).ok
        assert buffer == bytearray([0x00, 0xBE, 0xEF])
        assert codec.read_field(bytes(buffer), field).value == 0xBEEF

    def test_bit_area_by_field(self):
        field = FieldDef(
            name="A", text_id="T_A", data_type=DataType.BIT_AREA, byte_offset=0, bit_offset=4, bit_length=4
        )
        buffer = bytearray([0x0F])
        assert codec.write_field(buffer, field, 0xA).ok
        assert buffer[0] == 0xAF
        assert codec.read_field(buffer, field).value == 0xA
