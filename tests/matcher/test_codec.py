"""Tests for src/matcher/codec.py: fixed-offset little-endian marshaling."""

import pytest

from src.matcher import codec
from src.matcher.constants import I64_MAX, I64_MIN, I128_MAX, I128_MIN, U32_MAX, U64_MAX, U128_MAX
from src.matcher.errors import ArithmeticOverflowError, ErrorKind, StorageTooSmallError


# ---------------------------------------------------------------------------
# Boundary round-trips
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "reader,writer,width,values",
    [
        (codec.read_u32, codec.write_u32, 4, [0, 1, U32_MAX]),
        (codec.read_u64, codec.write_u64, 8, [0, 1, U64_MAX]),
        (codec.read_i64, codec.write_i64, 8, [I64_MIN, -1, 0, I64_MAX]),
        (codec.read_u128, codec.write_u128, 16, [0, 1, U128_MAX]),
        (codec.read_i128, codec.write_i128, 16, [I128_MIN, -1, 0, I128_MAX]),
    ],
)
def test_boundary_values_at_unaligned_offset(reader, writer, width, values):
    for v in values:
        buf = bytearray(3 + width + 2)
        writer(buf, 3, v)
        assert reader(buf, 3) == v
        # Neighbouring bytes untouched.
        assert buf[:3] == b"\x00\x00\x00"
        assert buf[3 + width:] == b"\x00\x00"


class TestLittleEndian:
    def test_u32_byte_order(self):
        buf = bytearray(4)
        codec.write_u32(buf, 0, 0x01020304)
        assert bytes(buf) == b"\x04\x03\x02\x01"

    def test_i128_minus_one_is_all_ff(self):
        buf = bytearray(16)
        codec.write_i128(buf, 0, -1)
        assert bytes(buf) == b"\xff" * 16

    def test_reads_from_immutable_bytes(self):
        assert codec.read_u64(b"\x2a" + b"\x00" * 7, 0) == 42


# ---------------------------------------------------------------------------
# Failure modes
# ---------------------------------------------------------------------------

class TestBounds:
    def test_short_read(self):
        with pytest.raises(StorageTooSmallError) as ei:
            codec.read_u128(bytes(20), 8)
        assert ei.value.kind is ErrorKind.STORAGE_TOO_SMALL
        assert ei.value.required == 24
        assert ei.value.actual == 20

    def test_short_write_leaves_buffer(self):
        buf = bytearray(7)
        with pytest.raises(StorageTooSmallError):
            codec.write_u64(buf, 0, 1)
        assert buf == bytearray(7)

    def test_exact_fit_ok(self):
        buf = bytearray(8)
        codec.write_u64(buf, 0, U64_MAX)
        assert codec.read_u64(buf, 0) == U64_MAX

    def test_negative_offset(self):
        with pytest.raises(ValueError):
            codec.read_u32(bytes(8), -1)


class TestRange:
    def test_unsigned_rejects_negative(self):
        with pytest.raises(ArithmeticOverflowError):
            codec.write_u64(bytearray(8), 0, -1)

    def test_u128_rejects_overflow(self):
        buf = bytearray(16)
        with pytest.raises(ArithmeticOverflowError):
            codec.write_u128(buf, 0, U128_MAX + 1)
        assert buf == bytearray(16)

    def test_i64_rejects_overflow(self):
        with pytest.raises(ArithmeticOverflowError):
            codec.write_i64(bytearray(8), 0, I64_MAX + 1)

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            codec.write_u32(bytearray(4), 0, True)


def test_bytes_roundtrip():
    buf = bytearray(40)
    codec.write_bytes(buf, 5, b"\xab" * 32)
    assert codec.read_bytes(buf, 5, 32) == b"\xab" * 32
    with pytest.raises(StorageTooSmallError):
        codec.write_bytes(buf, 10, b"\x00" * 32)
