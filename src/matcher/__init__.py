"""`matcher`: credibility-aware autonomous matcher.

Prices incoming trades off an oracle price, an inventory-skew cost and one
credibility signal (insurance fund coverage of open interest). State lives in
a fixed 320-byte little-endian record; the ledger and clock are read through
versioned byte layouts.

Public API:
- `process_instruction(accounts, data) -> MatchResult | None`
- `encode_init` / `encode_match` / `encode_refresh` payload builders
- `load_context` / `store_context` record views
- `quote(ctx, oracle_price, trade_size) -> Quote` (read-only preview under
  the same trade checks as Match)
"""

from .accounts import AccountInfo
from .context import MatcherContext, context_to_dict, is_initialized, load_context, read_return_payload, store_context
from .dispatch import Tag, process_instruction
from .errors import (
    AlreadyInitializedError,
    ArithmeticOverflowError,
    ErrorKind,
    InvalidConfigError,
    InvalidMarketDataError,
    MalformedInputError,
    MatcherError,
    NotEnoughAccountsError,
    RiskLimitError,
    StorageTooSmallError,
    UnauthorizedError,
    UninitializedError,
    WrongKindError,
)
from .handlers import MatchResult
from .instructions import InitParams, MatchRequest, encode_init, encode_match, encode_refresh
from .pricing import Quote, bid_ask, check_trade, quote
from .slab import SLAB_LAYOUT_V1, AdminState, SlabLayout, encode_clock, encode_slab

__all__ = [
    "process_instruction",
    "Tag",
    "AccountInfo",
    "MatcherContext",
    "MatchResult",
    "context_to_dict",
    "is_initialized",
    "load_context",
    "store_context",
    "read_return_payload",
    "InitParams",
    "MatchRequest",
    "encode_init",
    "encode_match",
    "encode_refresh",
    "Quote",
    "quote",
    "bid_ask",
    "check_trade",
    "SlabLayout",
    "SLAB_LAYOUT_V1",
    "AdminState",
    "encode_slab",
    "encode_clock",
    "ErrorKind",
    "MatcherError",
    "MalformedInputError",
    "WrongKindError",
    "NotEnoughAccountsError",
    "UnauthorizedError",
    "UninitializedError",
    "AlreadyInitializedError",
    "InvalidMarketDataError",
    "RiskLimitError",
    "StorageTooSmallError",
    "ArithmeticOverflowError",
    "InvalidConfigError",
]
