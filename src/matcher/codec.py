"""Fixed-offset little-endian integer codec.

Pure byte marshaling shared by the context record, the ledger view and the
instruction payloads. No field semantics live here.

Reads accept any bytes-like buffer; writes need a mutable one (``bytearray``
or a writable ``memoryview``). Offsets carry no alignment requirement.
"""

from __future__ import annotations

from typing import Union

from .errors import ArithmeticOverflowError, StorageTooSmallError

Buffer = Union[bytes, bytearray, memoryview]
MutableBuffer = Union[bytearray, memoryview]


def _check_span(buf: Buffer, off: int, width: int) -> None:
    if off < 0:
        raise ValueError(f"offset must be non-negative: {off}")
    if len(buf) < off + width:
        raise StorageTooSmallError(
            f"buffer too short for {width}-byte field at offset {off}",
            required=off + width,
            actual=len(buf),
        )


def read_int(buf: Buffer, off: int, width: int, *, signed: bool) -> int:
    """Decode a ``width``-byte little-endian integer at ``off``."""
    _check_span(buf, off, width)
    return int.from_bytes(bytes(buf[off:off + width]), "little", signed=signed)


def write_int(buf: MutableBuffer, off: int, width: int, value: int, *, signed: bool) -> None:
    """Encode ``value`` in place as a ``width``-byte little-endian integer."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"value must be an int, got {type(value).__name__}")
    _check_span(buf, off, width)
    try:
        raw = value.to_bytes(width, "little", signed=signed)
    except OverflowError as exc:
        kind = "i" if signed else "u"
        raise ArithmeticOverflowError(f"{value} does not fit {kind}{width * 8}") from exc
    buf[off:off + width] = raw


def read_u8(buf: Buffer, off: int) -> int:
    return read_int(buf, off, 1, signed=False)


def read_u32(buf: Buffer, off: int) -> int:
    return read_int(buf, off, 4, signed=False)


def read_u64(buf: Buffer, off: int) -> int:
    return read_int(buf, off, 8, signed=False)


def read_i64(buf: Buffer, off: int) -> int:
    return read_int(buf, off, 8, signed=True)


def read_u128(buf: Buffer, off: int) -> int:
    return read_int(buf, off, 16, signed=False)


def read_i128(buf: Buffer, off: int) -> int:
    return read_int(buf, off, 16, signed=True)


def write_u8(buf: MutableBuffer, off: int, value: int) -> None:
    write_int(buf, off, 1, value, signed=False)


def write_u32(buf: MutableBuffer, off: int, value: int) -> None:
    write_int(buf, off, 4, value, signed=False)


def write_u64(buf: MutableBuffer, off: int, value: int) -> None:
    write_int(buf, off, 8, value, signed=False)


def write_i64(buf: MutableBuffer, off: int, value: int) -> None:
    write_int(buf, off, 8, value, signed=True)


def write_u128(buf: MutableBuffer, off: int, value: int) -> None:
    write_int(buf, off, 16, value, signed=False)


def write_i128(buf: MutableBuffer, off: int, value: int) -> None:
    write_int(buf, off, 16, value, signed=True)


def read_bytes(buf: Buffer, off: int, width: int) -> bytes:
    _check_span(buf, off, width)
    return bytes(buf[off:off + width])


def write_bytes(buf: MutableBuffer, off: int, value: bytes) -> None:
    _check_span(buf, off, len(value))
    buf[off:off + len(value)] = value
