"""Wire constants for the credibility matcher.

Offsets marked ``CTX_*`` are relative to ``CTX_BASE`` (byte 64 of the
320-byte context record). The first 64 bytes hold the return payload that the
calling program reads back after a Match.
"""

from __future__ import annotations

# Record identity ("PERCMATC")
MAGIC: int = 0x5045_5243_4D41_5443
VERSION: int = 4
KIND_CREDIBILITY: int = 2

# Instruction tags
TAG_MATCH: int = 0x00
TAG_INIT: int = 0x02
TAG_REFRESH_CREDIBILITY: int = 0x03

# Fixed-point scales
BPS: int = 10_000

# Integer domains
U32_MAX: int = (1 << 32) - 1
U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1
I64_MIN: int = -(1 << 63)
I64_MAX: int = (1 << 63) - 1
I128_MIN: int = -(1 << 127)
I128_MAX: int = (1 << 127) - 1

IDENTITY_LEN: int = 32

# -- Context record ----------------------------------------------------------

CTX_ACCOUNT_LEN: int = 320
CTX_BASE: int = 64

RET_EXEC_PRICE_OFF: int = 0   # i64
RET_FILL_SIZE_OFF: int = 8    # i128

CTX_MAGIC_OFF: int = 0
CTX_VERSION_OFF: int = 8
CTX_KIND_OFF: int = 12
CTX_AUTHORITY_OFF: int = 16
CTX_BASE_FEE_OFF: int = 48
CTX_MIN_SPREAD_OFF: int = 52
CTX_MAX_SPREAD_OFF: int = 56
CTX_IMBALANCE_K_OFF: int = 60
CTX_LIQUIDITY_OFF: int = 64
CTX_MAX_FILL_OFF: int = 80
CTX_INVENTORY_OFF: int = 96
CTX_LAST_ORACLE_OFF: int = 112
CTX_LAST_EXEC_OFF: int = 120
CTX_MAX_INVENTORY_OFF: int = 128
CTX_INSURANCE_OFF: int = 144
CTX_TOTAL_OI_OFF: int = 160
CTX_MARKET_AGE_OFF: int = 176
CTX_LAST_DEFICIT_OFF: int = 184
CTX_SNAPSHOT_SLOT_OFF: int = 192
CTX_AGE_HALFLIFE_OFF: int = 200
CTX_INSURANCE_WEIGHT_OFF: int = 204
CTX_RESERVED_OFF: int = 208
CTX_RESERVED_LEN: int = 48

# -- Instruction payloads ----------------------------------------------------

MATCH_PAYLOAD_LEN: int = 25   # tag + u64 oracle price + i128 size
INIT_PAYLOAD_LEN: int = 74    # tag + kind + 4*u32 + 3*u128 + 2*u32

# -- Clock record ------------------------------------------------------------

CLOCK_SLOT_OFF: int = 0

# System program identity (all zero bytes). A ledger whose admin equals this
# value has had its admin burned.
SYSTEM_PROGRAM_ID: bytes = bytes(IDENTITY_LEN)
