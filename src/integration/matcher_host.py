"""
In-process host for the credibility matcher (imperative shell).

Reproduces the two host guarantees the matcher relies on:
- transaction atomicity: every account buffer is copied before the call and
  the copies are committed only when the instruction succeeds;
- write permissions: an instruction that changes a read-only account fails.

Signature verification and account locking stay with the real host; here a
caller states them directly through `AccountInfo.is_signer` / `is_writable`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..matcher.accounts import AccountInfo
from ..matcher.constants import CTX_ACCOUNT_LEN, IDENTITY_LEN
from ..matcher.dispatch import process_instruction
from ..matcher.errors import MatcherError
from ..matcher.handlers import MatchResult
from ..matcher.slab import SLAB_LAYOUT_V1, SlabLayout, encode_clock

logger = logging.getLogger(__name__)

# Well-known address of the clock record (all 0x06 bytes in this host).
CLOCK_KEY = bytes([6]) * IDENTITY_LEN


class HostError(Exception):
    """Raised when an instruction violates a host rule rather than a matcher rule."""


class HostConfigError(ValueError):
    """Raised by `MatcherHostConfig.from_env` for a malformed environment value."""


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _env_log_level(name: str, default: str) -> str:
    level = _env_str(name, default).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise HostConfigError(f"{name} must be a logging level name, got {level!r}")
    return level


def _env_identity(name: str) -> Optional[bytes]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    s = raw[2:] if raw.startswith(("0x", "0X")) else raw
    try:
        out = bytes.fromhex(s)
    except ValueError as exc:
        raise HostConfigError(f"{name} must be hex") from exc
    if len(out) != IDENTITY_LEN:
        raise HostConfigError(f"{name} must be {IDENTITY_LEN} bytes")
    return out


@dataclass(frozen=True)
class MatcherHostConfig:
    """
    Host settings.

    `program_id` identifies the matcher program in log lines only; the matcher
    itself never reads it. `log_level` is applied by whoever configures
    logging for the process; the host never changes logger levels.
    """

    program_id: bytes = bytes([0xC5]) * IDENTITY_LEN
    slab_layout: SlabLayout = SLAB_LAYOUT_V1
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "MatcherHostConfig":
        program_id = _env_identity("MATCHER_PROGRAM_ID")
        return cls(
            program_id=program_id if program_id is not None else cls.program_id,
            log_level=_env_log_level("MATCHER_LOG_LEVEL", cls.log_level),
        )


@dataclass(frozen=True)
class HostResult:
    ok: bool
    match: Optional[MatchResult] = None
    error: Optional[str] = None
    code: Optional[str] = None


@dataclass
class MatcherHost:
    config: MatcherHostConfig = field(default_factory=MatcherHostConfig)

    def execute(self, data: bytes, accounts: Sequence[AccountInfo]) -> HostResult:
        """Run one instruction atomically; never raises on a matcher rejection."""
        scratch: List[AccountInfo] = [
            AccountInfo(
                key=acc.key,
                data=bytearray(acc.data),
                is_signer=acc.is_signer,
                is_writable=acc.is_writable,
            )
            for acc in accounts
        ]
        try:
            result = process_instruction(scratch, data, slab_layout=self.config.slab_layout)
            for acc, tmp in zip(accounts, scratch):
                if not acc.is_writable and tmp.data != acc.data:
                    raise HostError(f"instruction modified read-only account {acc.key.hex()}")
        except MatcherError as exc:
            return HostResult(ok=False, error=str(exc), code=exc.kind.value)
        except HostError as exc:
            logger.warning("program %s: %s", self.config.program_id.hex()[:8], exc)
            return HostResult(ok=False, error=str(exc), code="host_rule")

        for acc, tmp in zip(accounts, scratch):
            if acc.is_writable:
                acc.data[:] = tmp.data
        return HostResult(ok=True, match=result)

    def execute_or_raise(self, data: bytes, accounts: Sequence[AccountInfo]) -> Optional[MatchResult]:
        res = self.execute(data, accounts)
        if not res.ok:
            raise HostError(f"{res.code}: {res.error}")
        return res.match


def new_context_account(key: bytes) -> AccountInfo:
    """Zeroed, writable context account as created by the external allocation step."""
    return AccountInfo(key=key, data=bytearray(CTX_ACCOUNT_LEN), is_writable=True)


def clock_account(slot: int) -> AccountInfo:
    return AccountInfo(key=CLOCK_KEY, data=encode_clock(slot))
