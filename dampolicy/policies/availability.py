import logging

import numpy as np
import pandas as pd

from dampolicy.config import MIN_ALLOWABLE_POINTS, INCLUDE_TARGET_WEEK, WEEKS_PER_YEAR
from dampolicy.errors import InsufficientSamples

logger = logging.getLogger(__name__)

AVAILABILITY_COLUMNS = ["year", "water_week", "horizon_weeks", "availability", "release"]


def _week_number(water_year, water_week):
    """Consecutive week count, so that horizon windows can cross water years."""
    return np.asarray(water_year, dtype=int) * WEEKS_PER_YEAR + np.asarray(water_week, dtype=int) - 1


def compute_availability(weekly,
                         water_week,
                         horizon,
                         min_allowable_points=MIN_ALLOWABLE_POINTS,
                         cutoff_year=None,
                         include_target_week=INCLUDE_TARGET_WEEK):
    """
    Pair water availability with release for one week of the year.

    For each water year, availability is the storage at the start of the
    target week plus the inflow summed over the horizon window. The window
    is the target week and the following ``horizon - 1`` weeks, or the
    ``horizon`` weeks after the target when ``include_target_week`` is
    False. Windows running past week 52 continue into the next water year.

    Years whose target week or any window week is missing or invalid are
    dropped. Years before ``cutoff_year`` are excluded.

    Args:
        weekly (pd.DataFrame): Reconciled weekly records.
        water_week (int): Target week of the water year, 1..52.
        horizon (int): Number of weeks of inflow assumed known, >= 1.
        min_allowable_points (int): Minimum number of samples required.
        cutoff_year (int or None): Earliest water year to include.
        include_target_week (bool): Whether the window starts at the
            target week.

    Returns:
        pd.DataFrame: One row per qualifying year, columns AVAILABILITY_COLUMNS.

    Raises:
        InsufficientSamples: Fewer than ``min_allowable_points`` samples.
    """
    if not 1 <= int(water_week) <= WEEKS_PER_YEAR:
        raise ValueError(f"water_week must be in [1, {WEEKS_PER_YEAR}], got {water_week}.")
    if int(horizon) < 1:
        raise ValueError(f"horizon must be >= 1, got {horizon}.")
    water_week = int(water_week)
    horizon = int(horizon)

    usable = weekly
    if "valid" in weekly.columns:
        usable = weekly[weekly["valid"].astype(bool)]
    keyed = usable.set_index(
        pd.Index(_week_number(usable["water_year"], usable["water_week"]), name="week_number")
    )
    inflow = keyed["i_"]

    offset = 0 if include_target_week else 1
    years = np.sort(weekly["water_year"].unique())
    if cutoff_year is not None:
        years = years[years >= int(cutoff_year)]

    rows = []
    n_dropped = 0
    for year in years:
        target = int(_week_number(year, water_week))
        if target not in keyed.index:
            n_dropped += 1
            continue
        s_start = keyed.at[target, "s_start"]
        release = keyed.at[target, "r_"]
        window = inflow.reindex(np.arange(target + offset, target + offset + horizon))
        if pd.isna(s_start) or pd.isna(release) or window.isna().any():
            n_dropped += 1
            continue
        rows.append({
            "year": int(year),
            "water_week": water_week,
            "horizon_weeks": horizon,
            "availability": float(s_start + window.sum()),
            "release": float(release),
        })

    if n_dropped:
        logger.debug("Week %d, horizon %d: dropped %d years with incomplete windows",
                     water_week, horizon, n_dropped)

    samples = pd.DataFrame(rows, columns=AVAILABILITY_COLUMNS)
    if len(samples) < min_allowable_points:
        raise InsufficientSamples(
            f"Week {water_week}, horizon {horizon}: {len(samples)} qualifying years, "
            f"fewer than min_allowable_points={min_allowable_points}.",
            n_samples=len(samples),
        )
    return samples
