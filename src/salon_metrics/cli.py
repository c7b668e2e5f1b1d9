"""
Print salon metrics for an establishment and period.

Command-line examples
---------------------
Finance facet for March:
    salon-metrics --facet finance --establishment est-1 \
        --start 2025-03-01 --end 2025-03-31

Same data as JSON:
    salon-metrics --facet finance --establishment est-1 \
        --start 2025-03-01 --end 2025-03-31 --json

Dashboard (month to date, no period needed):
    salon-metrics --facet dashboard --establishment est-1

Connection settings come from the environment:
    SALON_SOURCE_URL, SALON_SOURCE_KEY (required)
    SALON_SOURCE_TIMEOUT, SALON_SOURCE_RETRIES, SALON_TZ (optional)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from salon_metrics.api import get_dashboard_summary, get_metrics
from salon_metrics.config import DEFAULT_TIMEZONE, SourceConfig
from salon_metrics.exceptions import ConfigError, FetchFailure
from salon_metrics.formatters.console import FORMATTERS, format_dashboard_for_console
from salon_metrics.source.base import RecordSource
from salon_metrics.source.postgrest import PostgrestSource
from salon_metrics.window import parse_date

FACET_CHOICES = [*FORMATTERS, "dashboard"]


@dataclass
class Args:
    facet: str
    establishment: str
    start: Optional[str]
    end: Optional[str]
    tz: str
    json: bool
    quiet: bool
    verbose: bool


def _date_arg(value: str) -> str:
    try:
        parse_date(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from e
    return value


def _tz_arg(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise argparse.ArgumentTypeError(f"unknown timezone {value!r}") from e
    return value


def _establishment_arg(value: str) -> str:
    if not value.strip():
        raise argparse.ArgumentTypeError("establishment id must not be blank")
    return value.strip()


def parse_args(argv: Optional[Sequence[str]] = None) -> Args:
    p = argparse.ArgumentParser(description="Print salon metrics for an establishment and period")
    p.add_argument("--facet", choices=FACET_CHOICES, required=True, help="Metrics facet to compute")
    p.add_argument("--establishment", type=_establishment_arg, required=True, help="Establishment id")
    p.add_argument("--start", type=_date_arg, help="First day of the period (YYYY-MM-DD)")
    p.add_argument("--end", type=_date_arg, help="Last day of the period (YYYY-MM-DD)")
    p.add_argument(
        "--tz",
        type=_tz_arg,
        default=DEFAULT_TIMEZONE,
        help=f"Report timezone (default: {DEFAULT_TIMEZONE})",
    )
    p.add_argument("--json", action="store_true", help="Print JSON instead of text")
    p.add_argument("--quiet", action="store_true", help="Less logging")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    a = p.parse_args(argv)
    if a.facet != "dashboard" and (a.start is None or a.end is None):
        p.error(f"--start and --end are required for --facet {a.facet}")
    return Args(
        facet=a.facet,
        establishment=a.establishment,
        start=a.start,
        end=a.end,
        tz=a.tz,
        json=a.json,
        quiet=a.quiet,
        verbose=a.verbose,
    )


def _log_level(args: Args) -> int:
    if args.verbose:
        return logging.DEBUG
    return logging.WARNING if args.quiet else logging.INFO


def run(args: Args, source: RecordSource) -> str:
    """Compute the requested facet and render it as text or JSON."""
    if args.facet == "dashboard":
        result: Any = get_dashboard_summary(source, args.establishment, tz=args.tz)
        text = format_dashboard_for_console(result)
    else:
        result = get_metrics(args.facet, source, args.establishment, args.start, args.end, tz=args.tz)
        text = FORMATTERS[args.facet](result)

    if args.json:
        return json.dumps(result.to_dict(), indent=2, ensure_ascii=False, default=str)
    return text


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=_log_level(args), format="%(levelname)s: %(message)s")

    try:
        source = PostgrestSource(SourceConfig.from_env())
        output = run(args, source)
    except (ConfigError, FetchFailure) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
