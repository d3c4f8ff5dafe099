"""Credibility-aware spread and execution-price arithmetic.

Every function is pure and integer-only. Rounding is floor (``//``) on
non-negative operands. Steps that could exceed their wire width saturate
explicitly, so any two implementations agree bit-for-bit:

1. spread starts at ``min_spread_bps``;
2. inventory imbalance widens it by ``k * |inventory| / liquidity``;
3. insurance coverage of open interest narrows it by up to
   ``insurance_weight_bps``;
4. the result is clamped to ``[1, max_spread_bps]``;
5. the fee is added on top without a clamp.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import BPS, I64_MAX, I128_MAX, I128_MIN, U64_MAX, U128_MAX
from .context import MatcherContext
from .errors import (
    ArithmeticOverflowError,
    InvalidConfigError,
    InvalidMarketDataError,
    RiskLimitError,
    UninitializedError,
)


def imbalance_cost_bps(inventory_base: int, imbalance_k_bps: int, liquidity_notional: int) -> int:
    """Spread widening from inventory skew; 0 when either input is disabled."""
    if liquidity_notional <= 0 or imbalance_k_bps <= 0:
        return 0
    numer = min(imbalance_k_bps * abs(inventory_base), U128_MAX)
    return min(numer // liquidity_notional, U64_MAX)


def coverage_bps(insurance_snapshot: int, total_oi_snapshot: int) -> int:
    """Uncapped insurance/OI ratio in bps; 0 when there is no open interest."""
    if total_oi_snapshot <= 0:
        return 0
    return (insurance_snapshot * BPS) // total_oi_snapshot


def credibility_discount_bps(
    insurance_snapshot: int,
    total_oi_snapshot: int,
    insurance_weight_bps: int,
) -> int:
    """Spread discount from insurance coverage, saturating at ``insurance_weight_bps``."""
    if insurance_weight_bps <= 0 or total_oi_snapshot <= 0:
        return 0
    capped = min(coverage_bps(insurance_snapshot, total_oi_snapshot), BPS)
    return (capped * insurance_weight_bps) // BPS


def clamp_spread(spread_bps: int, max_spread_bps: int) -> int:
    if max_spread_bps < 1:
        raise InvalidConfigError(f"max_spread_bps must be >= 1, got {max_spread_bps}")
    return max(1, min(spread_bps, max_spread_bps))


def compute_spread_bps(ctx: MatcherContext) -> int:
    spread = ctx.min_spread_bps
    spread = min(
        spread + imbalance_cost_bps(ctx.inventory_base, ctx.imbalance_k_bps, ctx.liquidity_notional),
        U64_MAX,
    )
    discount = credibility_discount_bps(
        ctx.insurance_snapshot, ctx.total_oi_snapshot, ctx.insurance_weight_bps,
    )
    spread = max(spread - discount, 0)
    return clamp_spread(spread, ctx.max_spread_bps)


def exec_price(oracle_price: int, trade_size: int, total_cost_bps: int) -> int:
    """Oracle price marked up for buys, marked down for sells and zero size.

    The sell-side cost is capped at 100% so the price never goes negative.
    """
    if trade_size > 0:
        return (oracle_price * (BPS + total_cost_bps)) // BPS
    return (oracle_price * (BPS - min(total_cost_bps, BPS))) // BPS


@dataclass(frozen=True)
class Quote:
    """Breakdown of one priced trade."""

    oracle_price: int
    trade_size: int
    imbalance_bps: int
    discount_bps: int
    spread_bps: int
    fee_bps: int
    total_cost_bps: int
    exec_price: int


def check_trade(ctx: MatcherContext, oracle_price: int, trade_size: int) -> int:
    """Apply the Match trade preconditions and return the post-trade inventory.

    Raises the same ``MatcherError`` kinds Match raises for an uninitialized
    record, an oracle price outside ``(0, u64 max]``, a fill or inventory cap
    breach, and an inventory that leaves i128.
    """
    if not ctx.initialized:
        raise UninitializedError("matcher context not initialized")
    if oracle_price <= 0 or oracle_price > U64_MAX:
        raise InvalidMarketDataError(f"oracle price {oracle_price} outside (0, {U64_MAX}]")
    if ctx.max_fill_abs > 0 and abs(trade_size) > ctx.max_fill_abs:
        raise RiskLimitError(f"|trade_size| {abs(trade_size)} exceeds max fill {ctx.max_fill_abs}")
    new_inventory = ctx.inventory_base + trade_size
    if ctx.max_inventory_abs > 0 and abs(new_inventory) > ctx.max_inventory_abs:
        raise RiskLimitError(
            f"inventory {new_inventory} would exceed limit {ctx.max_inventory_abs}"
        )
    if not I128_MIN <= new_inventory <= I128_MAX:
        raise ArithmeticOverflowError(f"inventory {new_inventory} exceeds i128")
    return new_inventory


def price_trade(ctx: MatcherContext, oracle_price: int, trade_size: int) -> Quote:
    """Price a trade that already passed ``check_trade``.

    Raises ``ArithmeticOverflowError`` when the execution price does not fit
    the signed 64-bit return slot.
    """
    spread = compute_spread_bps(ctx)
    total = spread + ctx.base_fee_bps
    price = exec_price(oracle_price, trade_size, total)
    if price > I64_MAX:
        raise ArithmeticOverflowError(f"execution price {price} exceeds i64")
    return Quote(
        oracle_price=oracle_price,
        trade_size=trade_size,
        imbalance_bps=imbalance_cost_bps(ctx.inventory_base, ctx.imbalance_k_bps, ctx.liquidity_notional),
        discount_bps=credibility_discount_bps(
            ctx.insurance_snapshot, ctx.total_oi_snapshot, ctx.insurance_weight_bps,
        ),
        spread_bps=spread,
        fee_bps=ctx.base_fee_bps,
        total_cost_bps=total,
        exec_price=price,
    )


def quote(ctx: MatcherContext, oracle_price: int, trade_size: int) -> Quote:
    """Price ``trade_size`` against ``ctx`` without touching any record.

    Succeeds exactly when Match would accept the same trade from the authority.
    """
    check_trade(ctx, oracle_price, trade_size)
    return price_trade(ctx, oracle_price, trade_size)


def bid_ask(ctx: MatcherContext, oracle_price: int) -> tuple[Optional[int], Optional[int]]:
    """One-unit two-sided quote at the current inventory: ``(bid, ask)``.

    A side is ``None`` when a unit trade on it would breach a risk limit.
    """
    sides: list[Optional[int]] = []
    for size in (-1, 1):
        try:
            sides.append(quote(ctx, oracle_price, size).exec_price)
        except RiskLimitError:
            sides.append(None)
    return sides[0], sides[1]
