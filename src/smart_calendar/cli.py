from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Optional, Sequence

from .api import ApiState
from .config import get_settings
from .domain import SyncStatus
from .logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Smart Calendar command line interface.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    api_parser = subparsers.add_parser("api", help="Start the HTTP API server.")
    api_parser.add_argument("--host", default=settings.server.host)
    api_parser.add_argument("--port", type=int, default=settings.server.port)

    subparsers.add_parser("sync", help="Run one manual sync pass against Google Calendar.")

    summary_parser = subparsers.add_parser("summary", help="Print this week's statistics as JSON.")
    summary_parser.add_argument("--narrative", action="store_true", help="Ask the language model for a short review.")

    subparsers.add_parser("seed-categories", help="Create the default task categories if none exist.")

    return parser


async def _run_sync(state: ApiState) -> int:
    try:
        report = await state.sync.request_manual_sync()
    finally:
        await state.aclose()
    print(json.dumps(report.to_dict(), indent=2))
    return 1 if report.auth_expired or report.status is SyncStatus.FAILED else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    logger.info("Smart Calendar CLI starting")
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "api":
        from .services.http import run_local_server

        run_local_server(host=args.host, port=args.port)
        return 0

    state = ApiState()
    if args.command == "sync":
        return asyncio.run(_run_sync(state))
    if args.command == "summary":
        print(json.dumps(state.summary.weekly_summary(include_narrative=args.narrative), indent=2))
        return 0
    if args.command == "seed-categories":
        categories = state.categories.seed_defaults()
        print(json.dumps([category.to_record() for category in categories], indent=2))
        return 0
    parser.print_help()  # pragma: no cover - argparse enforces choices
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
