# backend/run_local.py
import argparse
import logging
import sys
from pathlib import Path

from backend.lib.home_energy_core.estimator import round_currency
from backend.lib.home_energy_core.io import load_slabs_json, parse_appliances_csv
from backend.lib.home_energy_core.models import Month, UsageContext, VACATION_MULTIPLIER
from backend.lib.home_energy_core.presets import DEFAULT_SLABS
from backend.lib.home_energy_core.summary import summarize


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Estimate electricity usage and bill from an appliance CSV.")
    parser.add_argument("csv", nargs="?", default="tests/sample_appliances.csv")
    parser.add_argument("--month", help="Jan..Dec (default: current month)")
    parser.add_argument("--vacation", action="store_true", help="reduce usage to 20%%")
    parser.add_argument("--slabs", help="JSON file with price slabs")
    parser.add_argument("--daily-limit", type=float, default=20.0)
    parser.add_argument("--monthly-limit", type=float, default=500.0)
    return parser


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)

    try:
        appliances = parse_appliances_csv(Path(args.csv).read_text())
        slabs = load_slabs_json(Path(args.slabs).read_text()) if args.slabs else list(DEFAULT_SLABS)
        month = Month.parse(args.month) if args.month else Month.current()
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    context = UsageContext(month, VACATION_MULTIPLIER if args.vacation else 1.0)
    result = summarize(appliances, slabs, context, args.daily_limit, args.monthly_limit)

    print(f"Parsed {len(appliances)} appliances ({result.active_count} on), month {month.value}:")
    for a in appliances:
        print(f" - {a.name} [{a.usage_type.value}] : {result.breakdown[a.id]:.3f} units/day")
    print(f"Daily usage:   {result.daily_units:.2f} units, cost {round_currency(result.daily_cost):.2f}")
    print(f"Monthly usage: {result.monthly_units:.2f} units, cost {round_currency(result.monthly_cost):.2f}"
          f" (incl. {result.buffer:.0f} buffer)")
    print(f"Status: {result.status} ({result.usage_pct:.0f}% of average household)")
    if result.breaches.daily:
        print(f"WARNING: daily usage above {args.daily_limit} units")
    if result.breaches.monthly:
        print(f"WARNING: monthly usage above {args.monthly_limit} units")
    for problem in result.slab_problems:
        print(f"slab config: {problem}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
