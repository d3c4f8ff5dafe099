"""Read-only views over the foreign ledger ("slab") and clock records.

The ledger is owned by another program. Its layout is a versioned contract:
``SlabLayout`` pins the offsets this matcher consumes, and every read goes
through an explicit length check instead of trusting a shared struct.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Optional

from . import codec
from .codec import Buffer
from .constants import CLOCK_SLOT_OFF, IDENTITY_LEN, SYSTEM_PROGRAM_ID
from .errors import StorageTooSmallError


@dataclass(frozen=True)
class SlabLayout:
    """Byte offsets of the ledger fields read by RefreshCredibility."""

    version: int = 1
    header_len: int = 72
    config_len: int = 320
    admin_off: int = 16            # header-relative
    insurance_off: int = 16        # engine-relative, u128
    last_crank_slot_off: int = 232  # engine-relative, u64
    total_oi_off: int = 248        # engine-relative, u128
    lifetime_liqs_off: int = 328   # engine-relative, u64
    engine_min_len: int = 400
    burn_identities: tuple[bytes, ...] = (SYSTEM_PROGRAM_ID,)

    @property
    def engine_off(self) -> int:
        return self.header_len + self.config_len

    @property
    def min_len(self) -> int:
        return self.engine_off + self.engine_min_len


SLAB_LAYOUT_V1 = SlabLayout()


@unique
class AdminState(Enum):
    """Whether the market still has an administrator."""

    OWNED = "owned"
    OWNERLESS = "ownerless"


def classify_admin(admin: bytes, layout: SlabLayout = SLAB_LAYOUT_V1) -> AdminState:
    if admin == bytes(IDENTITY_LEN) or admin in layout.burn_identities:
        return AdminState.OWNERLESS
    return AdminState.OWNED


@dataclass(frozen=True)
class SlabSnapshot:
    insurance_balance: int
    total_open_interest: int
    admin: bytes
    admin_state: AdminState
    last_crank_slot: int
    lifetime_liquidations: int


def read_slab(buf: Buffer, layout: SlabLayout = SLAB_LAYOUT_V1) -> SlabSnapshot:
    if len(buf) < layout.min_len:
        raise StorageTooSmallError("slab account too small", required=layout.min_len, actual=len(buf))
    engine = layout.engine_off
    admin = codec.read_bytes(buf, layout.admin_off, IDENTITY_LEN)
    return SlabSnapshot(
        insurance_balance=codec.read_u128(buf, engine + layout.insurance_off),
        total_open_interest=codec.read_u128(buf, engine + layout.total_oi_off),
        admin=admin,
        admin_state=classify_admin(admin, layout),
        last_crank_slot=codec.read_u64(buf, engine + layout.last_crank_slot_off),
        lifetime_liquidations=codec.read_u64(buf, engine + layout.lifetime_liqs_off),
    )


def read_clock_slot(buf: Buffer) -> int:
    """Current slot from a clock record; a record under 8 bytes reads as slot 0."""
    if len(buf) < CLOCK_SLOT_OFF + 8:
        return 0
    return codec.read_u64(buf, CLOCK_SLOT_OFF)


def encode_slab(
    *,
    insurance_balance: int = 0,
    total_open_interest: int = 0,
    admin: Optional[bytes] = None,
    last_crank_slot: int = 0,
    lifetime_liquidations: int = 0,
    layout: SlabLayout = SLAB_LAYOUT_V1,
) -> bytearray:
    """Build a minimal ledger buffer carrying only the fields this matcher reads."""
    admin = bytes(IDENTITY_LEN) if admin is None else admin
    if len(admin) != IDENTITY_LEN:
        raise ValueError(f"admin must be {IDENTITY_LEN} bytes")
    buf = bytearray(layout.min_len)
    engine = layout.engine_off
    codec.write_bytes(buf, layout.admin_off, admin)
    codec.write_u128(buf, engine + layout.insurance_off, insurance_balance)
    codec.write_u128(buf, engine + layout.total_oi_off, total_open_interest)
    codec.write_u64(buf, engine + layout.last_crank_slot_off, last_crank_slot)
    codec.write_u64(buf, engine + layout.lifetime_liqs_off, lifetime_liquidations)
    return buf


def encode_clock(slot: int) -> bytearray:
    buf = bytearray(8)
    codec.write_u64(buf, CLOCK_SLOT_OFF, slot)
    return buf
