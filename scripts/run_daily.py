#!/usr/bin/env python3
"""
MACRO BIAS daily report.

Usage:
    python scripts/run_daily.py --observations data/observations.parquet
    python scripts/run_daily.py --observations obs.csv --correlations corr.parquet
    FRED_API_KEY=... python scripts/run_daily.py
    python scripts/run_daily.py --observations obs.csv --json
    python scripts/run_daily.py -v
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

# Ensure macro_bias is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from macro_bias.config import load_config
from macro_bias.pipeline.engine import MacroBiasPipeline
from macro_bias.stores.base import StoreError
from macro_bias.stores.frame import FrameCorrelationStore, FrameObservationStore
from macro_bias.stores.fred import FredObservationStore


async def _report(args: argparse.Namespace) -> dict:
    config = load_config(Path(args.config) if args.config else None)
    correlations = FrameCorrelationStore.from_file(Path(args.correlations)) if args.correlations else None

    if args.observations:
        observations = FrameObservationStore.from_file(Path(args.observations))
        pipeline = MacroBiasPipeline(config, observations, correlations)
        return await pipeline.report()

    async with FredObservationStore(os.environ.get("FRED_API_KEY", "")) as fred:
        pipeline = MacroBiasPipeline(config, fred, correlations)
        return await pipeline.report()


def _print_report(report: dict) -> None:
    diag = report["diagnosis"]
    print()
    print("=" * 60)
    print("MACRO BIAS DIAGNOSTIC")
    print("=" * 60)
    print(f"Last update: {diag['last_updated'] or 'n/a'}")
    print(f"Regime:      {diag['regime']}  (score {diag['score']:+.3f}, threshold {diag['threshold']})")
    print(f"USD:         {diag['usd_strength']}")
    print(f"Quadrant:    {diag['quadrant']}")
    print(
        f"Indicators:  {diag['counts']['with_value']}/{diag['counts']['total']} with data, "
        f"{diag['improving']} improving, {diag['deteriorating']} deteriorating"
    )
    for ccy, cr in diag["currency_regimes"].items():
        print(f"  {ccy}: {cr['regime']} ({cr['probability']:.0%}) {cr['description']}")
    print("-" * 60)
    print("Tactical bias:")
    for row in report["tactical"]:
        corr = f"{row['corr12m']:+.2f}" if row["corr12m"] is not None else "  n/a"
        print(
            f"  {row['pair']:<8} {row['action']:<5} {row['tactical']:<8} "
            f"{row['confidence']:<5} corr12m {corr} {row['corr_shift'] or '-':<11} {row['rationale']}"
        )
    print("-" * 60)
    print("Scenarios:")
    for s in report["scenarios"] or [{"title": "none", "severity": "-"}]:
        print(f"  [{s['severity']}] {s['title']}")
    print("-" * 60)
    for name in ("active", "watchlist"):
        print(f"Setups ({name}):")
        for s in report["setups"][name]:
            print(f"  {s['pair']:<8} {s['direction']:<4} {s['confidence']:<5} {s['setup_text']}")
    print("=" * 60)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Run the MACRO BIAS diagnosis, tactical table and setups",
    )
    parser.add_argument(
        "--observations", "-o", type=str, default=None,
        help="Observations file (Parquet/CSV: series_id, date, value); default: FRED",
    )
    parser.add_argument(
        "--correlations", "-c", type=str, default=None,
        help="Correlations file (Parquet/CSV: symbol, benchmark, window, value, sample_size, as_of)",
    )
    parser.add_argument("--config", type=str, default=None, help="Config directory")
    parser.add_argument("--json", "-j", action="store_true", help="Output JSON only")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if not args.observations and not os.environ.get("FRED_API_KEY"):
        print("Error: pass --observations FILE or set FRED_API_KEY.")
        return 1

    try:
        report = asyncio.run(_report(args))
    except StoreError as exc:
        print(f"Error: {exc}")
        return 1

    if args.json:
        print(json.dumps(report, indent=2, ensure_ascii=False))
    else:
        _print_report(report)

    return 0


if __name__ == "__main__":
    sys.exit(main())
