"""Matcher context record: typed view over the 320-byte persistent account.

``load_context()`` decodes every field into an immutable ``MatcherContext``;
``store_context()`` writes the fields back in place and leaves padding and the
reserved tail untouched. Handlers update state with ``dataclasses.replace`` and
store once, after every precondition has passed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from . import codec
from .codec import Buffer, MutableBuffer
from .constants import (
    CTX_ACCOUNT_LEN,
    CTX_AGE_HALFLIFE_OFF,
    CTX_AUTHORITY_OFF,
    CTX_BASE,
    CTX_BASE_FEE_OFF,
    CTX_IMBALANCE_K_OFF,
    CTX_INSURANCE_OFF,
    CTX_INSURANCE_WEIGHT_OFF,
    CTX_INVENTORY_OFF,
    CTX_KIND_OFF,
    CTX_LAST_DEFICIT_OFF,
    CTX_LAST_EXEC_OFF,
    CTX_LAST_ORACLE_OFF,
    CTX_LIQUIDITY_OFF,
    CTX_MAGIC_OFF,
    CTX_MARKET_AGE_OFF,
    CTX_MAX_FILL_OFF,
    CTX_MAX_INVENTORY_OFF,
    CTX_MAX_SPREAD_OFF,
    CTX_MIN_SPREAD_OFF,
    CTX_SNAPSHOT_SLOT_OFF,
    CTX_TOTAL_OI_OFF,
    CTX_VERSION_OFF,
    IDENTITY_LEN,
    MAGIC,
    RET_EXEC_PRICE_OFF,
    RET_FILL_SIZE_OFF,
    VERSION,
)
from .errors import StorageTooSmallError


@dataclass(frozen=True)
class MatcherContext:
    """Decoded context record. Field order follows the wire layout."""

    magic: int = 0
    version: int = 0
    kind: int = 0
    authority: bytes = bytes(IDENTITY_LEN)

    # Static pricing parameters
    base_fee_bps: int = 0
    min_spread_bps: int = 0
    max_spread_bps: int = 0
    imbalance_k_bps: int = 0
    liquidity_notional: int = 0

    # Risk limits
    max_fill_abs: int = 0
    max_inventory_abs: int = 0

    # Mutable market state
    inventory_base: int = 0
    last_oracle_price: int = 0
    last_exec_price: int = 0

    # Credibility signal
    insurance_snapshot: int = 0
    total_oi_snapshot: int = 0

    # Temporal bookkeeping
    market_age_slots: int = 0
    last_deficit_slot: int = 0  # reserved, never touched by any handler
    snapshot_slot: int = 0
    age_halflife_slots: int = 0  # stored only; no decay is applied
    insurance_weight_bps: int = 0

    @property
    def initialized(self) -> bool:
        return self.magic == MAGIC and self.version == VERSION


_Reader = Callable[[Buffer, int], int]
_Writer = Callable[[MutableBuffer, int, int], None]

# (field, relative offset, reader, writer) for every integer field.
_INT_FIELDS: tuple[tuple[str, int, _Reader, _Writer], ...] = (
    ("magic", CTX_MAGIC_OFF, codec.read_u64, codec.write_u64),
    ("version", CTX_VERSION_OFF, codec.read_u32, codec.write_u32),
    ("kind", CTX_KIND_OFF, codec.read_u8, codec.write_u8),
    ("base_fee_bps", CTX_BASE_FEE_OFF, codec.read_u32, codec.write_u32),
    ("min_spread_bps", CTX_MIN_SPREAD_OFF, codec.read_u32, codec.write_u32),
    ("max_spread_bps", CTX_MAX_SPREAD_OFF, codec.read_u32, codec.write_u32),
    ("imbalance_k_bps", CTX_IMBALANCE_K_OFF, codec.read_u32, codec.write_u32),
    ("liquidity_notional", CTX_LIQUIDITY_OFF, codec.read_u128, codec.write_u128),
    ("max_fill_abs", CTX_MAX_FILL_OFF, codec.read_u128, codec.write_u128),
    ("inventory_base", CTX_INVENTORY_OFF, codec.read_i128, codec.write_i128),
    ("last_oracle_price", CTX_LAST_ORACLE_OFF, codec.read_u64, codec.write_u64),
    ("last_exec_price", CTX_LAST_EXEC_OFF, codec.read_u64, codec.write_u64),
    ("max_inventory_abs", CTX_MAX_INVENTORY_OFF, codec.read_u128, codec.write_u128),
    ("insurance_snapshot", CTX_INSURANCE_OFF, codec.read_u128, codec.write_u128),
    ("total_oi_snapshot", CTX_TOTAL_OI_OFF, codec.read_u128, codec.write_u128),
    ("market_age_slots", CTX_MARKET_AGE_OFF, codec.read_u64, codec.write_u64),
    ("last_deficit_slot", CTX_LAST_DEFICIT_OFF, codec.read_u64, codec.write_u64),
    ("snapshot_slot", CTX_SNAPSHOT_SLOT_OFF, codec.read_u64, codec.write_u64),
    ("age_halflife_slots", CTX_AGE_HALFLIFE_OFF, codec.read_u32, codec.write_u32),
    ("insurance_weight_bps", CTX_INSURANCE_WEIGHT_OFF, codec.read_u32, codec.write_u32),
)


def require_context_len(buf: Buffer) -> None:
    if len(buf) < CTX_ACCOUNT_LEN:
        raise StorageTooSmallError(
            "matcher context account too small",
            required=CTX_ACCOUNT_LEN,
            actual=len(buf),
        )


def is_initialized(buf: Buffer) -> bool:
    """True when the record carries the current magic and version."""
    require_context_len(buf)
    return (
        codec.read_u64(buf, CTX_BASE + CTX_MAGIC_OFF) == MAGIC
        and codec.read_u32(buf, CTX_BASE + CTX_VERSION_OFF) == VERSION
    )


def load_context(buf: Buffer) -> MatcherContext:
    require_context_len(buf)
    kwargs: dict[str, Any] = {
        name: reader(buf, CTX_BASE + off) for name, off, reader, _ in _INT_FIELDS
    }
    kwargs["authority"] = codec.read_bytes(buf, CTX_BASE + CTX_AUTHORITY_OFF, IDENTITY_LEN)
    return MatcherContext(**kwargs)


def store_context(buf: MutableBuffer, ctx: MatcherContext) -> None:
    """Write every field of ``ctx`` into ``buf``.

    All values are range-checked before the first byte is written, so a value
    that does not fit its field leaves ``buf`` untouched.
    """
    require_context_len(buf)
    if len(ctx.authority) != IDENTITY_LEN:
        raise ValueError(f"authority must be {IDENTITY_LEN} bytes")
    scratch = bytearray(buf[:CTX_ACCOUNT_LEN])
    for name, off, _, writer in _INT_FIELDS:
        writer(scratch, CTX_BASE + off, getattr(ctx, name))
    codec.write_bytes(scratch, CTX_BASE + CTX_AUTHORITY_OFF, ctx.authority)
    buf[:CTX_ACCOUNT_LEN] = scratch


def write_return_payload(buf: MutableBuffer, exec_price: int, fill_size: int) -> None:
    codec.write_i64(buf, RET_EXEC_PRICE_OFF, exec_price)
    codec.write_i128(buf, RET_FILL_SIZE_OFF, fill_size)


def read_return_payload(buf: Buffer) -> tuple[int, int]:
    """Return ``(exec_price, fill_size)`` from the first 24 bytes of the record."""
    return codec.read_i64(buf, RET_EXEC_PRICE_OFF), codec.read_i128(buf, RET_FILL_SIZE_OFF)


def context_to_dict(ctx: MatcherContext) -> dict[str, int | str]:
    """Plain-dict rendering (authority as hex) for JSON output."""
    out: dict[str, int | str] = {name: getattr(ctx, name) for name, _, _, _ in _INT_FIELDS}
    out["authority"] = ctx.authority.hex()
    return out
