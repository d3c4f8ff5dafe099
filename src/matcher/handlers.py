"""Operation handlers: Initialize, Match, RefreshCredibility.

Each handler checks every precondition before its first write, then commits
with a single ``store_context()``. A raised ``MatcherError`` therefore leaves
the context record byte-identical to its pre-call contents.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Sequence

from .accounts import AccountInfo, require_accounts
from .codec import Buffer
from .constants import KIND_CREDIBILITY, MAGIC, U64_MAX, VERSION
from .context import (
    MatcherContext,
    is_initialized,
    load_context,
    require_context_len,
    store_context,
    write_return_payload,
)
from .errors import (
    AlreadyInitializedError,
    InvalidConfigError,
    UnauthorizedError,
    UninitializedError,
    WrongKindError,
)
from .instructions import parse_init, parse_match
from .pricing import check_trade, price_trade
from .slab import SLAB_LAYOUT_V1, AdminState, SlabLayout, read_clock_slot, read_slab

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    """Return payload of a Match, also written to bytes 0..24 of the context."""

    exec_price: int
    fill_size: int
    spread_bps: int
    fee_bps: int


# -- Initialize (tag 0x02) ---------------------------------------------------

def process_init(accounts: Sequence[AccountInfo], data: Buffer) -> None:
    """Accounts: ``[authority, context (writable)]``."""
    require_accounts(accounts, 2, op="initialize")
    params = parse_init(data)
    authority, ctx_account = accounts[0], accounts[1]
    buf = ctx_account.data

    require_context_len(buf)
    if is_initialized(buf):
        raise AlreadyInitializedError("matcher context already initialized")
    if params.kind != KIND_CREDIBILITY:
        raise WrongKindError(f"expected matcher kind {KIND_CREDIBILITY}, got {params.kind}")
    if params.max_spread_bps < 1:
        raise InvalidConfigError("max_spread_bps must be >= 1")

    ctx = MatcherContext(
        magic=MAGIC,
        version=VERSION,
        kind=params.kind,
        authority=bytes(authority.key),
        base_fee_bps=params.base_fee_bps,
        min_spread_bps=params.min_spread_bps,
        max_spread_bps=params.max_spread_bps,
        imbalance_k_bps=params.imbalance_k_bps,
        liquidity_notional=params.liquidity_notional,
        max_fill_abs=params.max_fill_abs,
        max_inventory_abs=params.max_inventory_abs,
        age_halflife_slots=params.age_halflife_slots,
        insurance_weight_bps=params.insurance_weight_bps,
    )
    store_context(buf, ctx)

    logger.info(
        "credibility-init: fee=%dbps spread=[%d,%d]bps imbalance_k=%dbps age_hl=%d ins_w=%dbps",
        params.base_fee_bps, params.min_spread_bps, params.max_spread_bps,
        params.imbalance_k_bps, params.age_halflife_slots, params.insurance_weight_bps,
    )


# -- Match (tag 0x00) --------------------------------------------------------

def _load_initialized(buf: Buffer) -> MatcherContext:
    ctx = load_context(buf)
    if not ctx.initialized:
        raise UninitializedError("matcher context not initialized")
    return ctx


def process_match(accounts: Sequence[AccountInfo], data: Buffer) -> MatchResult:
    """Accounts: ``[authority (signer), context (writable)]``."""
    require_accounts(accounts, 2, op="match")
    req = parse_match(data)
    authority, ctx_account = accounts[0], accounts[1]

    if not authority.is_signer:
        raise UnauthorizedError("authority must sign match requests")
    ctx = _load_initialized(ctx_account.data)
    if bytes(authority.key) != ctx.authority:
        raise UnauthorizedError("authority does not match context")

    size = req.trade_size
    new_inventory = check_trade(ctx, req.oracle_price, size)
    # Priced off the pre-trade inventory.
    q = price_trade(ctx, req.oracle_price, size)

    store_context(
        ctx_account.data,
        replace(
            ctx,
            inventory_base=new_inventory,
            last_oracle_price=req.oracle_price,
            last_exec_price=q.exec_price,
        ),
    )
    write_return_payload(ctx_account.data, q.exec_price, size)

    logger.info(
        "credibility-match: spread=%dbps fee=%dbps price=%d size=%d",
        q.spread_bps, q.fee_bps, q.exec_price, size,
    )
    return MatchResult(
        exec_price=q.exec_price, fill_size=size, spread_bps=q.spread_bps, fee_bps=q.fee_bps,
    )


# -- RefreshCredibility (tag 0x03) -------------------------------------------

def next_market_age(
    market_age_slots: int,
    snapshot_slot: int,
    current_slot: int,
    admin_state: AdminState,
) -> int:
    """Age accrues linearly while ownerless; owned markets stay at zero.

    The first refresh after the admin burn (no prior snapshot) starts at zero.
    """
    if admin_state is not AdminState.OWNERLESS or snapshot_slot == 0:
        return 0
    elapsed = max(current_slot - snapshot_slot, 0)
    return min(market_age_slots + elapsed, U64_MAX)


def process_refresh_credibility(
    accounts: Sequence[AccountInfo],
    data: Buffer,
    *,
    layout: SlabLayout = SLAB_LAYOUT_V1,
) -> None:
    """Accounts: ``[context (writable), slab, clock]``. Permissionless."""
    require_accounts(accounts, 3, op="refresh_credibility")
    ctx_account, slab_account, clock_account = accounts[0], accounts[1], accounts[2]

    ctx = _load_initialized(ctx_account.data)
    snap = read_slab(slab_account.data, layout)
    now = read_clock_slot(clock_account.data)

    age = next_market_age(ctx.market_age_slots, ctx.snapshot_slot, now, snap.admin_state)
    store_context(
        ctx_account.data,
        replace(
            ctx,
            insurance_snapshot=snap.insurance_balance,
            total_oi_snapshot=snap.total_open_interest,
            market_age_slots=age,
            snapshot_slot=now,
        ),
    )

    logger.info(
        "credibility-update: insurance=%d oi=%d age=%d ownerless=%s last_crank=%d liqs=%d",
        snap.insurance_balance, snap.total_open_interest, age,
        snap.admin_state is AdminState.OWNERLESS, snap.last_crank_slot,
        snap.lifetime_liquidations,
    )
