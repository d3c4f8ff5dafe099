"""Tests for src/matcher/slab.py: ledger and clock views."""

import pytest

from src.matcher import codec
from src.matcher.constants import SYSTEM_PROGRAM_ID, U64_MAX, U128_MAX
from src.matcher.errors import StorageTooSmallError
from src.matcher.slab import (
    SLAB_LAYOUT_V1,
    AdminState,
    SlabLayout,
    classify_admin,
    encode_clock,
    encode_slab,
    read_clock_slot,
    read_slab,
)


class TestLayoutV1:
    def test_engine_offset_and_min_len(self):
        assert SLAB_LAYOUT_V1.engine_off == 392
        assert SLAB_LAYOUT_V1.min_len == 792

    def test_absolute_offsets(self):
        buf = encode_slab(
            insurance_balance=U128_MAX,
            total_open_interest=123,
            admin=b"\x07" * 32,
            last_crank_slot=U64_MAX,
            lifetime_liquidations=9,
        )
        assert len(buf) == 792
        assert bytes(buf[16:48]) == b"\x07" * 32
        assert codec.read_u128(buf, 408) == U128_MAX
        assert codec.read_u64(buf, 624) == U64_MAX
        assert codec.read_u128(buf, 640) == 123
        assert codec.read_u64(buf, 720) == 9

    def test_read(self):
        snap = read_slab(encode_slab(insurance_balance=5, total_open_interest=6, last_crank_slot=7))
        assert (snap.insurance_balance, snap.total_open_interest, snap.last_crank_slot) == (5, 6, 7)
        assert snap.admin_state is AdminState.OWNERLESS

    def test_larger_buffer_ok(self):
        buf = encode_slab(total_open_interest=1) + bytearray(10_000)
        assert read_slab(buf).total_open_interest == 1

    def test_too_small(self):
        with pytest.raises(StorageTooSmallError) as ei:
            read_slab(bytes(791))
        assert ei.value.required == 792


class TestAdminState:
    def test_zero_is_ownerless(self):
        assert classify_admin(bytes(32)) is AdminState.OWNERLESS
        assert classify_admin(SYSTEM_PROGRAM_ID) is AdminState.OWNERLESS

    def test_key_is_owned(self):
        assert classify_admin(b"\x01" + bytes(31)) is AdminState.OWNED

    def test_custom_burn_identity(self):
        burn = b"\xde\xad" * 16
        layout = SlabLayout(burn_identities=(SYSTEM_PROGRAM_ID, burn))
        assert classify_admin(burn, layout) is AdminState.OWNERLESS
        assert classify_admin(burn) is AdminState.OWNED


class TestCustomLayout:
    def test_shifted_engine(self):
        layout = SlabLayout(version=2, header_len=80, config_len=400)
        buf = encode_slab(insurance_balance=42, layout=layout)
        assert len(buf) == layout.min_len == 880
        assert read_slab(buf, layout).insurance_balance == 42
        with pytest.raises(StorageTooSmallError):
            read_slab(encode_slab(), layout)


class TestClock:
    def test_slot(self):
        assert read_clock_slot(encode_clock(123_456)) == 123_456

    def test_extra_bytes_ignored(self):
        assert read_clock_slot(bytes(encode_clock(9)) + b"\xff" * 32) == 9

    def test_short_clock_is_zero(self):
        assert read_clock_slot(b"\x01\x02") == 0
