#!/usr/bin/env python3
"""
Convert raw daily dam records into reconciled water-week records.

Usage:
    python 01_prepare_weekly.py --dam-id usbr_hoover --units imperial
    python 01_prepare_weekly.py --dam-id usace_beltzville --units mgd --compute-from r
"""
import os
import argparse
import logging

from dampolicy.config import RAW_DATA_DIR, PROCESSED_DATA_DIR, MAX_FILL_GAP, COMPUTE_FROM_OPTIONS
from dampolicy.load import CSVDamSource
from dampolicy.pipeline import load_weekly_series

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)


def parse_args():
    p = argparse.ArgumentParser(description=__doc__,
                                formatter_class=argparse.RawDescriptionHelpFormatter)
    p.add_argument("--dam-id", required=True, help="Dam identifier '<source>_<damname>'.")
    p.add_argument("--data-dir", default=RAW_DATA_DIR,
                   help="Directory holding <source>/<damname>.csv files.")
    p.add_argument("--units", default="imperial",
                   help="Unit system of the raw file: imperial, metric or mgd.")
    p.add_argument("--max-fill-gap", type=int, default=MAX_FILL_GAP)
    p.add_argument("--compute-from", choices=COMPUTE_FROM_OPTIONS, default="i")
    p.add_argument("--drop-insufficient", action="store_true",
                   help="Flag weeks without any flow data invalid instead of failing.")
    p.add_argument("--out-dir", default=PROCESSED_DATA_DIR)
    return p.parse_args()


if __name__ == "__main__":
    args = parse_args()
    os.makedirs(args.out_dir, exist_ok=True)

    source = CSVDamSource(data_dir=args.data_dir)
    weekly = load_weekly_series(
        source, args.dam_id,
        units_in=args.units,
        max_fill_gap=args.max_fill_gap,
        compute_from=args.compute_from,
        on_insufficient="drop" if args.drop_insufficient else "raise",
    )

    outfile = os.path.join(args.out_dir, f"{args.dam_id}_weekly.csv")
    weekly.to_csv(outfile, index=False)

    n_valid = int(weekly["valid"].sum())
    print(f"{args.dam_id}: {n_valid} of {len(weekly)} water weeks valid "
          f"({weekly['water_year'].min()}-{weekly['water_year'].max()})")
    print(f"Saved: {outfile}")
