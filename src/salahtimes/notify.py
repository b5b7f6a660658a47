"""CLI entry point for the notification batch.

Reads profile rows (a JSON array as exported from the profiles table), computes
the notifications due now and prints them as JSON lines for the delivery job:
    uv run salahtimes-notify profiles.json
"""

import argparse
import json
import logging
import sys
from datetime import datetime

import pytz
from dotenv import load_dotenv

load_dotenv()

from salahtimes.batch import Subscriber, run_batch  # noqa: E402
from salahtimes.settings import load_settings  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compute prayer notifications due now.")
    parser.add_argument("profiles", type=argparse.FileType("r", encoding="utf-8"))
    parser.add_argument(
        "--now",
        help="ISO timestamp with offset to evaluate at (default: current time)",
    )
    parser.add_argument(
        "--api-method-codes",
        action="store_true",
        help="calculation_method holds the remote provider's method numbers (older profile rows)",
    )
    args = parser.parse_args(argv)

    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    now = datetime.fromisoformat(args.now) if args.now else datetime.now(pytz.utc)
    if now.tzinfo is None:
        parser.error("--now must include a UTC offset")

    with args.profiles as f:
        subscribers = [
            Subscriber.from_profile(row, api_method_codes=args.api_method_codes)
            for row in json.load(f)
        ]

    report = run_batch(subscribers, now, settings=settings)
    for n in report.notifications:
        print(
            json.dumps(
                {
                    "user_id": n.user_id,
                    "prayer": n.prayer,
                    "time": n.time.isoformat(),
                    "title": n.title,
                    "body": n.body,
                    "source": n.source,
                },
                ensure_ascii=False,
            )
        )
    return 1 if report.failed and not report.success else 0


if __name__ == "__main__":
    sys.exit(main())
