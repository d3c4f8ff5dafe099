"""Instruction payload builders and parsers.

Layouts (little-endian, byte offsets):

- Match (tag 0, 25 bytes): ``oracle_price u64 @1``, ``trade_size i128 @9``.
- Initialize (tag 2, 74 bytes): ``kind u8 @1``, ``base_fee_bps u32 @2``,
  ``min_spread_bps u32 @6``, ``max_spread_bps u32 @10``,
  ``imbalance_k_bps u32 @14``, ``liquidity_notional u128 @18``,
  ``max_fill_abs u128 @34``, ``max_inventory_abs u128 @50``,
  ``age_halflife_slots u32 @66``, ``insurance_weight_bps u32 @70``.
- RefreshCredibility (tag 3, 1 byte).

Parsers accept trailing bytes and ignore them.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import codec
from .codec import Buffer
from .constants import (
    INIT_PAYLOAD_LEN,
    KIND_CREDIBILITY,
    MATCH_PAYLOAD_LEN,
    TAG_INIT,
    TAG_MATCH,
    TAG_REFRESH_CREDIBILITY,
)
from .errors import MalformedInputError


@dataclass(frozen=True)
class InitParams:
    base_fee_bps: int = 0
    min_spread_bps: int = 0
    max_spread_bps: int = 0
    imbalance_k_bps: int = 0
    liquidity_notional: int = 0
    max_fill_abs: int = 0
    max_inventory_abs: int = 0
    age_halflife_slots: int = 0
    insurance_weight_bps: int = 0
    kind: int = KIND_CREDIBILITY


@dataclass(frozen=True)
class MatchRequest:
    oracle_price: int
    trade_size: int


# (field, payload offset, reader, writer) after the tag and kind bytes.
_INIT_LAYOUT = (
    ("base_fee_bps", 2, codec.read_u32, codec.write_u32),
    ("min_spread_bps", 6, codec.read_u32, codec.write_u32),
    ("max_spread_bps", 10, codec.read_u32, codec.write_u32),
    ("imbalance_k_bps", 14, codec.read_u32, codec.write_u32),
    ("liquidity_notional", 18, codec.read_u128, codec.write_u128),
    ("max_fill_abs", 34, codec.read_u128, codec.write_u128),
    ("max_inventory_abs", 50, codec.read_u128, codec.write_u128),
    ("age_halflife_slots", 66, codec.read_u32, codec.write_u32),
    ("insurance_weight_bps", 70, codec.read_u32, codec.write_u32),
)


def encode_init(params: InitParams) -> bytes:
    data = bytearray(INIT_PAYLOAD_LEN)
    codec.write_u8(data, 0, TAG_INIT)
    codec.write_u8(data, 1, params.kind)
    for name, off, _, writer in _INIT_LAYOUT:
        writer(data, off, getattr(params, name))
    return bytes(data)


def parse_init(data: Buffer) -> InitParams:
    if len(data) < INIT_PAYLOAD_LEN:
        raise MalformedInputError(
            f"initialize payload needs {INIT_PAYLOAD_LEN} bytes, got {len(data)}"
        )
    kwargs = {name: reader(data, off) for name, off, reader, _ in _INIT_LAYOUT}
    return InitParams(kind=codec.read_u8(data, 1), **kwargs)


def encode_match(oracle_price: int, trade_size: int) -> bytes:
    data = bytearray(MATCH_PAYLOAD_LEN)
    codec.write_u8(data, 0, TAG_MATCH)
    codec.write_u64(data, 1, oracle_price)
    codec.write_i128(data, 9, trade_size)
    return bytes(data)


def parse_match(data: Buffer) -> MatchRequest:
    if len(data) < MATCH_PAYLOAD_LEN:
        raise MalformedInputError(
            f"match payload needs {MATCH_PAYLOAD_LEN} bytes, got {len(data)}"
        )
    return MatchRequest(
        oracle_price=codec.read_u64(data, 1),
        trade_size=codec.read_i128(data, 9),
    )


def encode_refresh() -> bytes:
    return bytes([TAG_REFRESH_CREDIBILITY])
