"""Tests for src/matcher/context.py and src/matcher/instructions.py: wire layouts."""

from dataclasses import fields

import pytest

from src.matcher import codec
from src.matcher.constants import (
    CTX_ACCOUNT_LEN,
    CTX_BASE,
    CTX_RESERVED_LEN,
    CTX_RESERVED_OFF,
    I128_MIN,
    INIT_PAYLOAD_LEN,
    MAGIC,
    MATCH_PAYLOAD_LEN,
    U64_MAX,
    U128_MAX,
    VERSION,
)
from src.matcher.context import (
    MatcherContext,
    context_to_dict,
    is_initialized,
    load_context,
    read_return_payload,
    store_context,
    write_return_payload,
)
from src.matcher.errors import ArithmeticOverflowError, MalformedInputError, StorageTooSmallError
from src.matcher.instructions import InitParams, encode_init, encode_match, encode_refresh, parse_init, parse_match


class TestContextOffsets:
    def test_magic_bytes(self):
        buf = bytearray(CTX_ACCOUNT_LEN)
        store_context(buf, MatcherContext(magic=MAGIC, version=VERSION, kind=2))
        assert bytes(buf[CTX_BASE:CTX_BASE + 8]) == b"CTAMCREP"
        assert codec.read_u32(buf, CTX_BASE + 8) == 4
        assert buf[CTX_BASE + 12] == 2
        assert is_initialized(buf)

    def test_documented_offsets(self):
        ctx = MatcherContext(
            authority=b"\x11" * 32,
            base_fee_bps=1, min_spread_bps=2, max_spread_bps=3, imbalance_k_bps=4,
            liquidity_notional=5, max_fill_abs=6, inventory_base=-7,
            last_oracle_price=8, last_exec_price=9, max_inventory_abs=10,
            insurance_snapshot=11, total_oi_snapshot=12, market_age_slots=13,
            last_deficit_slot=14, snapshot_slot=15, age_halflife_slots=16,
            insurance_weight_bps=17,
        )
        buf = bytearray(CTX_ACCOUNT_LEN)
        store_context(buf, ctx)
        b = CTX_BASE
        assert bytes(buf[b + 16:b + 48]) == b"\x11" * 32
        assert codec.read_u32(buf, b + 48) == 1
        assert codec.read_u32(buf, b + 60) == 4
        assert codec.read_u128(buf, b + 64) == 5
        assert codec.read_i128(buf, b + 96) == -7
        assert codec.read_u64(buf, b + 120) == 9
        assert codec.read_u128(buf, b + 144) == 11
        assert codec.read_u64(buf, b + 192) == 15
        assert codec.read_u32(buf, b + 204) == 17
        assert load_context(buf) == ctx

    def test_boundary_values_roundtrip(self):
        ctx = MatcherContext(
            magic=U64_MAX, version=0xFFFFFFFF, kind=0xFF, authority=b"\xff" * 32,
            liquidity_notional=U128_MAX, inventory_base=I128_MIN,
            max_fill_abs=U128_MAX, last_exec_price=U64_MAX,
        )
        buf = bytearray(CTX_ACCOUNT_LEN)
        store_context(buf, ctx)
        assert load_context(buf) == ctx

    def test_reserved_tail_and_payload_slot_untouched(self):
        buf = bytearray(b"\x5a" * CTX_ACCOUNT_LEN)
        store_context(buf, MatcherContext())
        tail = CTX_BASE + CTX_RESERVED_OFF
        assert bytes(buf[tail:tail + CTX_RESERVED_LEN]) == b"\x5a" * CTX_RESERVED_LEN
        assert bytes(buf[:CTX_BASE]) == b"\x5a" * CTX_BASE
        assert bytes(buf[CTX_BASE + 13:CTX_BASE + 16]) == b"\x5a" * 3

    def test_out_of_range_store_is_atomic(self):
        buf = bytearray(CTX_ACCOUNT_LEN)
        before = bytes(buf)
        with pytest.raises(ArithmeticOverflowError):
            store_context(buf, MatcherContext(base_fee_bps=1, inventory_base=1 << 127))
        assert bytes(buf) == before

    def test_short_record(self):
        with pytest.raises(StorageTooSmallError):
            load_context(bytes(CTX_ACCOUNT_LEN - 1))
        with pytest.raises(StorageTooSmallError):
            is_initialized(bytes(100))

    def test_zeroed_record_uninitialized(self):
        assert not is_initialized(bytes(CTX_ACCOUNT_LEN))
        assert not load_context(bytes(CTX_ACCOUNT_LEN)).initialized

    def test_wrong_version_uninitialized(self):
        buf = bytearray(CTX_ACCOUNT_LEN)
        store_context(buf, MatcherContext(magic=MAGIC, version=VERSION - 1))
        assert not is_initialized(buf)

    def test_dict_has_every_field(self):
        d = context_to_dict(MatcherContext())
        assert set(d) == {f.name for f in fields(MatcherContext)}
        assert d["authority"] == "00" * 32


def test_return_payload():
    buf = bytearray(CTX_ACCOUNT_LEN)
    write_return_payload(buf, 1_003_000_000, -10)
    assert read_return_payload(buf) == (1_003_000_000, -10)
    assert codec.read_i64(buf, 0) == 1_003_000_000
    assert codec.read_i128(buf, 8) == -10


# ---------------------------------------------------------------------------
# Instruction payloads
# ---------------------------------------------------------------------------

class TestPayloads:
    def test_match_layout(self):
        data = encode_match(1_000_000_000, -10)
        assert len(data) == MATCH_PAYLOAD_LEN
        assert data[0] == 0
        assert codec.read_u64(data, 1) == 1_000_000_000
        assert codec.read_i128(data, 9) == -10
        req = parse_match(data)
        assert (req.oracle_price, req.trade_size) == (1_000_000_000, -10)

    def test_init_layout(self):
        params = InitParams(
            base_fee_bps=5, min_spread_bps=50, max_spread_bps=500, imbalance_k_bps=100,
            liquidity_notional=1_000_000_000_000, max_fill_abs=1_000_000_000_000,
            max_inventory_abs=0, age_halflife_slots=216_000, insurance_weight_bps=50,
        )
        data = encode_init(params)
        assert len(data) == INIT_PAYLOAD_LEN
        assert data[:2] == b"\x02\x02"
        assert codec.read_u32(data, 2) == 5
        assert codec.read_u128(data, 18) == 1_000_000_000_000
        assert codec.read_u32(data, 66) == 216_000
        assert codec.read_u32(data, 70) == 50
        assert parse_init(data) == params

    def test_trailing_bytes_ignored(self):
        req = parse_match(encode_match(7, 3) + b"\xff\xff")
        assert (req.oracle_price, req.trade_size) == (7, 3)

    @pytest.mark.parametrize("n", [0, 1, MATCH_PAYLOAD_LEN - 1])
    def test_short_match(self, n):
        with pytest.raises(MalformedInputError):
            parse_match(encode_match(1, 1)[:n])

    def test_short_init(self):
        with pytest.raises(MalformedInputError):
            parse_init(encode_init(InitParams(max_spread_bps=1))[:INIT_PAYLOAD_LEN - 1])

    def test_refresh(self):
        assert encode_refresh() == b"\x03"
