#!/usr/bin/env python3
"""
Fit piecewise release policies over a grid of water weeks and horizons.

Reads the weekly CSV written by 01_prepare_weekly.py and writes one row
per (water_week, horizon) with the fitted parameters and fit quality.

Usage:
    python 02_fit_policies.py --dam-id usbr_hoover
    python 02_fit_policies.py --dam-id usbr_hoover --weeks 1 10 20 --max-horizon 12 --cutoff-year 1995
"""
import os
import argparse
import logging

import pandas as pd

from dampolicy.config import PROCESSED_DATA_DIR, OUTPUT_DIR, MIN_ALLOWABLE_POINTS, WEEKS_PER_YEAR
from dampolicy.pipeline import scan_horizons

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)


def parse_args():
    p = argparse.ArgumentParser(description=__doc__,
                                formatter_class=argparse.RawDescriptionHelpFormatter)
    p.add_argument("--dam-id", required=True)
    p.add_argument("--weekly-dir", default=PROCESSED_DATA_DIR)
    p.add_argument("--weeks", type=int, nargs="*", default=None,
                   help="Target water weeks (default: all 52).")
    p.add_argument("--max-horizon", type=int, default=26)
    p.add_argument("--min-points", type=int, default=MIN_ALLOWABLE_POINTS)
    p.add_argument("--cutoff-year", type=int, default=None)
    p.add_argument("--exclude-target-week", action="store_true",
                   help="Start the inflow window the week after the target week.")
    p.add_argument("--out-dir", default=OUTPUT_DIR)
    return p.parse_args()


if __name__ == "__main__":
    args = parse_args()
    os.makedirs(args.out_dir, exist_ok=True)

    weekly = pd.read_csv(os.path.join(args.weekly_dir, f"{args.dam_id}_weekly.csv"),
                         parse_dates=["date_start"])

    weeks = args.weeks or list(range(1, WEEKS_PER_YEAR + 1))
    horizons = list(range(1, args.max_horizon + 1))

    scan = scan_horizons(
        weekly, weeks, horizons,
        min_allowable_points=args.min_points,
        cutoff_year=args.cutoff_year,
        include_target_week=not args.exclude_target_week,
    )

    outfile = os.path.join(args.out_dir, f"{args.dam_id}_horizon_scan.csv")
    scan.to_csv(outfile, index=False)

    ok = scan[scan["status"] == "ok"]
    print(f"{args.dam_id}: {len(ok)} of {len(scan)} (week, horizon) fits succeeded")
    if len(ok):
        best = ok.loc[ok.groupby("water_week")["r_squared"].idxmax(), ["water_week", "horizon", "r_squared"]]
        print("Best horizon by water week:")
        print(best.to_string(index=False))
    print(f"Saved: {outfile}")
