"""Command-line front end for the pure codec: encode, decode, format, business-days.

Invariants:
    - No database access; every command runs on the core only
    - Output is one JSON document on stdout; CaptureLineError exits 1 with the error envelope
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from datetime import date, datetime, time
from decimal import Decimal

from capture_lines.config import get_settings
from capture_lines.core.business_days import add_business_days
from capture_lines.core.codec import (
    CaptureLineCodec, IssuanceParams, decode, format_for_display,
)
from capture_lines.core.errors import CaptureLineError


def _print(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, default=str))


def _codec(issued_on: str | None) -> CaptureLineCodec:
    config = get_settings().issuance_config()
    if issued_on is None:
        return CaptureLineCodec(config)
    fixed = datetime.combine(date.fromisoformat(issued_on), time(), config.tzinfo)
    return CaptureLineCodec(config, clock=lambda: fixed)


def cmd_encode(args: argparse.Namespace) -> int:
    codec = _codec(args.date)
    code = codec.encode(IssuanceParams(
        amount=Decimal(args.amount),
        entity_code=args.entity,
        concept_code=args.concept,
        reference=args.reference,
        validity_days=args.validity_days,
    ))
    _print({"code": code, "formatted": format_for_display(code)})
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    decoded = decode(args.code)
    payload = asdict(decoded)
    payload["formatted"] = decoded.formatted
    _print(payload)
    return 0


def cmd_format(args: argparse.Namespace) -> int:
    _print({"formatted": format_for_display(args.code)})
    return 0


def cmd_business_days(args: argparse.Namespace) -> int:
    start = date.fromisoformat(args.start)
    _print({
        "start": start.isoformat(),
        "days": args.days,
        "result": add_business_days(start, args.days).isoformat(),
    })
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="capture-lines")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("encode", help="Build a capture line without storing it")
    sp.add_argument("--amount", required=True)
    sp.add_argument("--entity")
    sp.add_argument("--concept")
    sp.add_argument("--reference")
    sp.add_argument("--validity-days", type=int)
    sp.add_argument("--date", help="Issuance date YYYY-MM-DD (default: now)")
    sp.set_defaults(func=cmd_encode)

    sp = sub.add_parser("decode", help="Validate and break down a capture line")
    sp.add_argument("code")
    sp.set_defaults(func=cmd_decode)

    sp = sub.add_parser("format", help="Group a capture line for display")
    sp.add_argument("code")
    sp.set_defaults(func=cmd_format)

    sp = sub.add_parser("business-days", help="Add weekdays to a date")
    sp.add_argument("--start", required=True)
    sp.add_argument("--days", type=int, required=True)
    sp.set_defaults(func=cmd_business_days)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args) or 0)
    except CaptureLineError as e:
        print(json.dumps(e.to_response(), ensure_ascii=False, default=str), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
