"""Fetch one week of the portal schedule as JSON.

Standalone CLI script: launches headless Chromium, renders the schedule page
for a group/teacher/room and prints the embedded week document.

Run with: python scripts/fetch_schedule.py --type group --value 501
Dates:    python scripts/fetch_schedule.py --type group --value 501 --date-start 2024-01-01
Debug:    python scripts/fetch_schedule.py --type group --value 501 --headed
File:     python scripts/fetch_schedule.py --type group --value 501 --output data/501.json

Exit codes:
  0 = success (JSON on stdout, or file written for --output)
  1 = error (message on stderr)
"""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.schedule_proxy.config import ScheduleProxyConfig  # noqa: E402
from src.schedule_proxy.errors import ScrapingError  # noqa: E402
from src.schedule_proxy.fetcher import ScheduleFetcher  # noqa: E402
from src.schedule_proxy.logging import setup_logging  # noqa: E402
from src.schedule_proxy.models import ScheduleQuery  # noqa: E402
from src.schedule_proxy.session import BrowserSession  # noqa: E402


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fetch a week of the portal class schedule as JSON.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--type", required=True, help="Schedule type, e.g. group.")
    parser.add_argument("--value", required=True, help="Group/teacher/room id, e.g. 501.")
    parser.add_argument("--date-start", default=None, help="First day (dateStart).")
    parser.add_argument("--date-end", default=None, help="Last day (dateEnd).")
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Launch browser in headed mode (visible window).",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the JSON document to this file instead of stdout.",
    )
    return parser.parse_args()


async def _fetch(args: argparse.Namespace) -> object:
    config = ScheduleProxyConfig(headless=not args.headed)
    query = ScheduleQuery.from_params(
        args.type, args.value, args.date_start, args.date_end
    )

    session = BrowserSession(config)
    fetcher = ScheduleFetcher(session, config)
    _log(f"Fetching {fetcher.build_url(query)}")
    try:
        return await fetcher.fetch(query)
    finally:
        await session.shutdown()


def main() -> int:
    args = _parse_args()
    setup_logging(log_level=os.getenv("LOG_LEVEL", "WARNING"))

    try:
        document = asyncio.run(_fetch(args))
    except ScrapingError as e:
        _log(f"ERROR: {type(e).__name__}: {e}")
        return 1

    text = json.dumps(document, ensure_ascii=False, indent=2)
    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text + "\n", encoding="utf-8")
        _log(f"Wrote {out}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
