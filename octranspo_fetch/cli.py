"""
Print upcoming trips (or the routes) for an OC Transpo stop.

Credentials come from OCTRANSPO_APPLICATION_ID / OCTRANSPO_APPLICATION_KEY or a .env file.
  octranspo-fetch 3017 --route 95 --limit 5
  octranspo-fetch 3017 --summary
"""
import argparse
import logging
import sys

from octranspo_fetch.api.errors import OCTranspoError
from octranspo_fetch.client import OCTranspo
from octranspo_fetch.settings import get_settings


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Next OC Transpo trips for a stop")
    parser.add_argument("stop", help="Stop number, e.g. 3017")
    parser.add_argument(
        "--route",
        action="append",
        dest="routes",
        help="Route number (repeatable). Default: every route serving the stop",
    )
    parser.add_argument("--label", help="Only trips whose route label matches, e.g. Baseline")
    parser.add_argument("--limit", type=int, default=0, help="Print at most this many trips")
    parser.add_argument("--summary", action="store_true", help="List the routes serving the stop instead")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log API and cache activity")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s %(message)s",
    )

    settings = get_settings()
    if not settings.application_id or not settings.application_key:
        print("Error: set OCTRANSPO_APPLICATION_ID and OCTRANSPO_APPLICATION_KEY", file=sys.stderr)
        return 1

    client = OCTranspo.from_settings(settings)
    try:
        if args.summary:
            summary = client.get_route_summary_for_stop(args.stop)
            print(f"{summary.stop_id} {summary.stop_description}")
            for r in summary.routes:
                print(f"  {r.route_no:>4} {r.direction:<12} {r.heading}")
            return 0

        trips = client.simple_get_next_trips_for_stop(args.stop, args.routes, args.label)
    except OCTranspoError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.limit > 0:
        trips = trips[: args.limit]
    if not trips:
        print(f"No upcoming trips for stop {args.stop}")
        return 0
    for t in trips:
        marker = "*" if t.live else " "
        print(f"{t.arrival_in_minutes:>4} min{marker} {t.route_no:>4} {t.route_label} -> {t.destination}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
