"""Instruction dispatcher: routes a payload to its handler by the leading tag."""

from __future__ import annotations

import logging
from enum import IntEnum, unique
from typing import Optional, Sequence

from .accounts import AccountInfo
from .codec import Buffer
from .constants import TAG_INIT, TAG_MATCH, TAG_REFRESH_CREDIBILITY
from .errors import MalformedInputError, MatcherError
from .handlers import MatchResult, process_init, process_match, process_refresh_credibility
from .slab import SLAB_LAYOUT_V1, SlabLayout

logger = logging.getLogger(__name__)


@unique
class Tag(IntEnum):
    MATCH = TAG_MATCH
    INIT = TAG_INIT
    REFRESH_CREDIBILITY = TAG_REFRESH_CREDIBILITY


def decode_tag(data: Buffer) -> Tag:
    if len(data) == 0:
        raise MalformedInputError("empty instruction data")
    try:
        return Tag(data[0])
    except ValueError:
        raise MalformedInputError(f"unrecognized operation tag {data[0]:#04x}") from None


def process_instruction(
    accounts: Sequence[AccountInfo],
    data: Buffer,
    *,
    slab_layout: SlabLayout = SLAB_LAYOUT_V1,
) -> Optional[MatchResult]:
    """Run one instruction. Returns the ``MatchResult`` for Match, else None.

    Raises ``MatcherError`` on any rejected precondition.
    """
    try:
        tag = decode_tag(data)
        if tag is Tag.MATCH:
            return process_match(accounts, data)
        if tag is Tag.INIT:
            process_init(accounts, data)
            return None
        process_refresh_credibility(accounts, data, layout=slab_layout)
        return None
    except MatcherError as exc:
        logger.warning("instruction rejected (%s): %s", exc.kind.value, exc)
        raise
