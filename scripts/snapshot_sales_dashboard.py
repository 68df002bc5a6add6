from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Dict

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def load_env_file(env_path: str) -> None:
    if not os.path.exists(env_path):
        return
    with open(env_path, "r", encoding="utf-8") as env_file:
        for line in env_file:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            os.environ.setdefault(key, value)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print a sales dashboard snapshot built from the live sheets.")
    parser.add_argument(
        "--preset",
        default="MTD",
        choices=["MTD", "QTD", "YTD", "PREV_MONTH", "CUSTOM"],
        help="Date range preset (default: MTD).",
    )
    parser.add_argument("--start", help="Custom range start, YYYY-MM-DD.")
    parser.add_argument("--end", help="Custom range end, YYYY-MM-DD.")
    parser.add_argument("--unit", default="All", help="Unit filter (default: All).")
    parser.add_argument("--advisor", default="All", help="Advisor filter (default: All).")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Environment file path (default: .env).",
    )
    parser.add_argument(
        "--output",
        help="Write the JSON snapshot to this path instead of stdout.",
    )
    return parser.parse_args()


def build_snapshot(args: argparse.Namespace) -> Dict[str, Any]:
    from salesboard.api.dependencies import get_sales_dashboard_service
    from salesboard.core.logging import configure_logging
    from salesboard.schemas.sales import SalesDashboardFilters
    from salesboard.shared.time import RangePreset

    configure_logging(os.environ.get("LOG_LEVEL"))
    filters = SalesDashboardFilters(
        preset=RangePreset(args.preset),
        start=args.start,
        end=args.end,
        unit=args.unit,
        advisor=args.advisor,
    )
    dashboard = get_sales_dashboard_service().get_dashboard(filters)
    return dashboard.model_dump(mode="json", by_alias=True)


def main() -> None:
    args = parse_args()
    load_env_file(os.path.join(PROJECT_ROOT, args.env_file))
    snapshot = json.dumps(build_snapshot(args), indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as output_file:
            output_file.write(snapshot)
        print(f"Wrote dashboard snapshot to {args.output}")
        return
    print(snapshot)


if __name__ == "__main__":
    main()
