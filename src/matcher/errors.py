"""Exception types for the credibility matcher.

Every error aborts the whole invocation; the host discards any writes. Callers
branch on ``MatcherError.kind``, never on the message text.
"""

from __future__ import annotations

from enum import Enum, unique


@unique
class ErrorKind(Enum):
    MALFORMED_INPUT = "malformed_input"
    NOT_ENOUGH_ACCOUNTS = "not_enough_accounts"
    UNAUTHORIZED = "unauthorized"
    UNINITIALIZED = "uninitialized"
    ALREADY_INITIALIZED = "already_initialized"
    INVALID_MARKET_DATA = "invalid_market_data"
    RISK_LIMIT = "risk_limit"
    STORAGE_TOO_SMALL = "storage_too_small"
    ARITHMETIC_OVERFLOW = "arithmetic_overflow"
    INVALID_CONFIG = "invalid_config"


class MatcherError(Exception):
    """Base class; ``kind`` identifies the failure for callers."""

    kind: ErrorKind = ErrorKind.MALFORMED_INPUT


class MalformedInputError(MatcherError):
    """Payload too short or unknown operation tag."""

    kind = ErrorKind.MALFORMED_INPUT


class WrongKindError(MalformedInputError):
    """Initialize payload names a matcher kind other than credibility."""


class NotEnoughAccountsError(MatcherError):
    kind = ErrorKind.NOT_ENOUGH_ACCOUNTS


class UnauthorizedError(MatcherError):
    """Missing signer assertion or identity mismatch with the stored authority."""

    kind = ErrorKind.UNAUTHORIZED


class UninitializedError(MatcherError):
    kind = ErrorKind.UNINITIALIZED


class AlreadyInitializedError(MatcherError):
    kind = ErrorKind.ALREADY_INITIALIZED


class InvalidMarketDataError(MatcherError):
    kind = ErrorKind.INVALID_MARKET_DATA


class RiskLimitError(MatcherError):
    """Fill cap or inventory cap would be exceeded."""

    kind = ErrorKind.RISK_LIMIT


class StorageTooSmallError(MatcherError):
    """A record buffer is shorter than its layout requires."""

    kind = ErrorKind.STORAGE_TOO_SMALL

    def __init__(self, message: str, *, required: int, actual: int) -> None:
        self.required = required
        self.actual = actual
        super().__init__(f"{message} (need {required} bytes, have {actual})")


class ArithmeticOverflowError(MatcherError):
    """A value does not fit its fixed-width wire type."""

    kind = ErrorKind.ARITHMETIC_OVERFLOW


class InvalidConfigError(MatcherError):
    """Stored or supplied pricing parameters cannot be priced against."""

    kind = ErrorKind.INVALID_CONFIG
