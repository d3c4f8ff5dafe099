#!/usr/bin/env python3
"""
Offline helper for credibility-matcher context records.

Subcommands:
  init   build a fresh 320-byte context file from a YAML parameter file
  show   decode a context file to JSON
  quote  preview the price of a trade against a context file

Example:
  python3 tools/matcher_ctx.py init --params params.yaml --authority 0x11..11 --out ctx.bin
  python3 tools/matcher_ctx.py quote ctx.bin --oracle-price 1000000000 --size 10

The YAML file is a mapping of `InitParams` field names to integers; unknown
keys are rejected.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.integration.matcher_host import (
    HostConfigError,
    HostError,
    MatcherHost,
    MatcherHostConfig,
    new_context_account,
)
from src.matcher import (
    AccountInfo,
    InitParams,
    MatcherError,
    bid_ask,
    context_to_dict,
    encode_init,
    load_context,
    quote,
    read_return_payload,
)
from src.matcher.constants import IDENTITY_LEN


class CtxToolError(Exception):
    pass


def _parse_identity(text: str) -> bytes:
    s = text.strip()
    if s.startswith(("0x", "0X")):
        s = s[2:]
    try:
        out = bytes.fromhex(s)
    except ValueError as exc:
        raise CtxToolError(f"identity must be hex: {text!r}") from exc
    if len(out) != IDENTITY_LEN:
        raise CtxToolError(f"identity must be {IDENTITY_LEN} bytes, got {len(out)}")
    return out


def params_from_mapping(obj: Any) -> InitParams:
    if not isinstance(obj, Mapping):
        raise CtxToolError("params file must be a mapping")
    known = {f.name for f in fields(InitParams)}
    unknown = sorted(set(obj) - known)
    if unknown:
        raise CtxToolError(f"unknown params: {', '.join(map(str, unknown))}")
    for k, v in obj.items():
        if not isinstance(v, int) or isinstance(v, bool) or v < 0:
            raise CtxToolError(f"param {k} must be a non-negative int")
    return InitParams(**obj)


def load_params(path: Path) -> InitParams:
    return params_from_mapping(yaml.safe_load(path.read_text(encoding="utf-8")))


def build_context(
    params: InitParams,
    authority: bytes,
    config: MatcherHostConfig | None = None,
) -> bytearray:
    """Run Initialize through the in-process host against a zeroed record."""
    ctx_acc = new_context_account(bytes(IDENTITY_LEN))
    host = MatcherHost(config if config is not None else MatcherHostConfig())
    host.execute_or_raise(encode_init(params), [AccountInfo(key=authority), ctx_acc])
    return ctx_acc.data


def show_context(buf: bytes) -> dict[str, Any]:
    out: dict[str, Any] = dict(context_to_dict(load_context(buf)))
    price, size = read_return_payload(buf)
    out["return_exec_price"] = price
    out["return_fill_size"] = size
    return out


def quote_context(buf: bytes, *, oracle_price: int, size: int) -> dict[str, Any]:
    ctx = load_context(buf)
    out: dict[str, Any] = asdict(quote(ctx, oracle_price, size))
    bid, ask = bid_ask(ctx, oracle_price)
    out["bid"] = bid
    out["ask"] = ask
    return out


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Build, decode and price credibility-matcher context records.")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="Create a context file from YAML params")
    p_init.add_argument("--params", required=True, type=Path, help="YAML mapping of InitParams fields")
    p_init.add_argument("--authority", required=True, help="Hex identity allowed to submit Match")
    p_init.add_argument("--out", required=True, type=Path, help="Output path for the 320-byte record")

    p_show = sub.add_parser("show", help="Decode a context file to JSON")
    p_show.add_argument("ctx", type=Path)

    p_quote = sub.add_parser("quote", help="Preview a trade price (no state change)")
    p_quote.add_argument("ctx", type=Path)
    p_quote.add_argument("--oracle-price", required=True, type=int, help="Oracle price, 6 decimals")
    p_quote.add_argument("--size", required=True, type=int, help="Signed trade size (buy > 0)")

    args = p.parse_args(argv)

    try:
        config = MatcherHostConfig.from_env()
        logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")
        if args.cmd == "init":
            buf = build_context(load_params(args.params), _parse_identity(args.authority), config)
            args.out.write_bytes(bytes(buf))
            out: dict[str, Any] = show_context(buf)
        elif args.cmd == "show":
            out = show_context(args.ctx.read_bytes())
        else:
            out = quote_context(args.ctx.read_bytes(), oracle_price=args.oracle_price, size=args.size)
    except (OSError, yaml.YAMLError, CtxToolError, HostConfigError, HostError, MatcherError) as exc:
        print(f"matcher_ctx error: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(out, sort_keys=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
