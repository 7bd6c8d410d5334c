from __future__ import annotations

"""CLI helper for looking up one or more CNRs and printing JSON results."""

import argparse
import asyncio
import json
from pathlib import Path
from typing import Sequence

from .config_validation import validate_runtime_config
from .dispatcher import lookup_batch
from .session import BrowserSession


def _build_parser() -> argparse.ArgumentParser:
    """Return an argument parser for the lookup CLI."""

    parser = argparse.ArgumentParser(
        description="Look up case status for CNR numbers.",
    )
    parser.add_argument("cnrs", nargs="*", help="CNR numbers to look up.")
    parser.add_argument(
        "--file",
        type=Path,
        help="Read additional CNRs from a file, one per line.",
    )
    parser.add_argument("--concurrency", type=int, help="Parallel lookups.")
    parser.add_argument("--pace", type=float, help="Seconds between dispatches.")
    parser.add_argument("--timeout", type=float, help="Per-CNR time-box in seconds.")
    parser.add_argument(
        "--no-html",
        action="store_true",
        help="Leave the raw result fragment out of the output.",
    )
    return parser


def _collect_cnrs(args: argparse.Namespace) -> list[str]:
    cnrs = [c.strip() for c in args.cnrs if c.strip()]
    if args.file:
        lines = args.file.read_text(encoding="utf-8").splitlines()
        cnrs.extend(line.strip() for line in lines if line.strip())
    return cnrs


async def _run(args: argparse.Namespace, cnrs: list[str]) -> list[dict]:
    session = BrowserSession()
    try:
        return await lookup_batch(
            cnrs,
            session=session,
            concurrency=args.concurrency,
            pace_seconds=args.pace,
            timeout_seconds=args.timeout,
            include_html=not args.no_html,
        )
    finally:
        if session.started:
            await session.close()


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the lookup CLI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    cnrs = _collect_cnrs(args)
    if not cnrs:
        parser.error("Provide at least one CNR or --file")

    try:
        validate_runtime_config("cli")
    except ValueError as exc:
        parser.error(str(exc))

    results = asyncio.run(_run(args, cnrs))
    print(json.dumps({"results": results}, indent=2, ensure_ascii=False))
    return 0 if all(item["success"] for item in results) else 1


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
