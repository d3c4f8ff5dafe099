"""Account references handed to the matcher by the host.

The host resolves account keys, verifies signatures and takes write locks
before invoking the matcher; the matcher only sees the outcome through
``is_signer`` / ``is_writable`` and the raw ``data`` buffer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .constants import IDENTITY_LEN
from .errors import NotEnoughAccountsError


@dataclass
class AccountInfo:
    key: bytes
    data: bytearray = field(default_factory=bytearray)
    is_signer: bool = False
    is_writable: bool = False

    def __post_init__(self) -> None:
        if len(self.key) != IDENTITY_LEN:
            raise ValueError(f"account key must be {IDENTITY_LEN} bytes, got {len(self.key)}")


def require_accounts(accounts: Sequence[AccountInfo], n: int, *, op: str) -> None:
    if len(accounts) < n:
        raise NotEnoughAccountsError(f"{op} needs {n} accounts, got {len(accounts)}")
