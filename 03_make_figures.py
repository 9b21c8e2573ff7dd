#!/usr/bin/env python3
"""
Figures for one dam: weekly water balance, horizon scan heatmap, and the
availability-release scatter with fitted policy for selected queries.

Usage:
    python 03_make_figures.py --dam-id usbr_hoover --week 1 --horizon 4
"""
import os
import argparse
import logging

import pandas as pd
import matplotlib
matplotlib.use("Agg")

from dampolicy.config import PROCESSED_DATA_DIR, OUTPUT_DIR, FIG_DIR, MIN_ALLOWABLE_POINTS
from dampolicy.pipeline import infer_policy
from dampolicy.plotting import plot_weekly_dynamics, plot_policy_fit, plot_horizon_scan

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
    p.add_argument("--scan-dir", default=OUTPUT_DIR)
    p.add_argument("--week", type=int, nargs="*", default=[1])
    p.add_argument("--horizon", type=int, nargs="*", default=[1])
    p.add_argument("--min-points", type=int, default=MIN_ALLOWABLE_POINTS)
    p.add_argument("--cutoff-year", type=int, default=None)
    p.add_argument("--fig-dir", default=FIG_DIR)
    return p.parse_args()


if __name__ == "__main__":
    args = parse_args()

    weekly = pd.read_csv(os.path.join(args.weekly_dir, f"{args.dam_id}_weekly.csv"),
                         parse_dates=["date_start"])
    plot_weekly_dynamics(weekly, args.dam_id, save_dir=args.fig_dir)

    scan_file = os.path.join(args.scan_dir, f"{args.dam_id}_horizon_scan.csv")
    if os.path.exists(scan_file):
        plot_horizon_scan(pd.read_csv(scan_file), args.dam_id, save_dir=args.fig_dir)
    else:
        print(f"No horizon scan found at {scan_file}; run 02_fit_policies.py first.")

    for week in args.week:
        for horizon in args.horizon:
            samples, fit = infer_policy(weekly, week, horizon,
                                        min_allowable_points=args.min_points,
                                        cutoff_year=args.cutoff_year)
            plot_policy_fit(samples, fit, args.dam_id, save_dir=args.fig_dir)
            print(f"week {week}, horizon {horizon}: breakpoint={fit.breakpoint_x:.1f}, "
                  f"slopes=({fit.slope1:.3f}, {fit.slope2:.3f}), "
                  f"R2={fit.residual_summary['r_squared']:.3f}")
