import logging

import numpy as np
import pandas as pd

from dampolicy.utils.timeseries import align_daily_series
from dampolicy.utils.water_calendar import (
    EPOCH_MONTH,
    EPOCH_DAY,
    from_water_calendar,
    water_calendar_frame,
    week_length,
)

logger = logging.getLogger(__name__)

WEEK_KEYS = ["water_year", "water_week"]

WEEKLY_COLUMNS = [
    "water_year", "water_week", "date_start",
    "s_start", "s_end", "s_change",
    "i_", "r_", "i_estimated", "r_estimated",
    "n_days", "n_days_observed", "n_days_filled", "n_days_i", "n_days_r",
    "valid",
]


def _storage_provenance(daily):
    if "storage_filled" in daily.columns:
        filled = daily["storage_filled"].astype(bool)
    else:
        filled = pd.Series(False, index=daily.index)
    present = daily["storage"].notna()
    return present & ~filled, present & filled


def aggregate_to_water_weeks(series, epoch_month=EPOCH_MONTH, epoch_day=EPOCH_DAY):
    """
    Aggregate a daily series into water-week records.

    For each (water_year, water_week):
    - s_start is the storage on the first day of the week, or the previous
      week's s_end when that day is missing
    - s_end is the storage on the last day of the week
    - s_change = s_end - s_start
    - i_ and r_ are the summed daily inflow / release volumes over the
      days that have a value, NaN when no day does

    A week is flagged ``valid=False`` when it is only partly covered by the
    series, has no observed storage day, or its start/end storage cannot
    be resolved. Invalid weeks are kept in the output and reported.

    Args:
        series (pd.DataFrame): Daily series in volume units (see
            ``convert_to_metric``), optionally with '<col>_filled' flags.
        epoch_month, epoch_day (int): Start of the water year.

    Returns:
        pd.DataFrame: One row per water week, columns WEEKLY_COLUMNS.
    """
    daily = align_daily_series(series)
    if daily.empty:
        return pd.DataFrame(columns=WEEKLY_COLUMNS)

    calendar = water_calendar_frame(daily.index, epoch_month, epoch_day)
    frame = daily[["storage", "inflow", "release"]].copy()
    for col in calendar.columns:
        frame[col] = calendar[col].to_numpy()
    frame["s_observed"], frame["s_filled"] = _storage_provenance(daily)

    grouped = frame.groupby(WEEK_KEYS, sort=True)
    first = grouped.head(1).set_index(WEEK_KEYS)
    last = grouped.tail(1).set_index(WEEK_KEYS)

    weekly = pd.DataFrame({
        "s_first": first["storage"],
        "s_end": last["storage"],
        "n_days": grouped.size(),
        "n_days_observed": grouped["s_observed"].sum(),
        "n_days_filled": grouped["s_filled"].sum(),
        "n_days_i": grouped["inflow"].count(),
        "n_days_r": grouped["release"].count(),
        "i_sum": grouped["inflow"].sum(min_count=1),
        "r_sum": grouped["release"].sum(min_count=1),
    })

    expected_days = np.array([
        week_length(wy, ww, epoch_month, epoch_day) for wy, ww in weekly.index
    ])
    complete = weekly["n_days"].to_numpy() == expected_days

    # carry the prior week's closing storage when the first day is missing
    weekly["s_start"] = weekly["s_first"].where(
        weekly["s_first"].notna(), weekly["s_end"].shift(1)
    )
    weekly["s_change"] = weekly["s_end"] - weekly["s_start"]

    # n_days_i / n_days_r record how many days each total covers
    weekly["i_"] = weekly["i_sum"]
    weekly["r_"] = weekly["r_sum"]
    weekly["i_estimated"] = False
    weekly["r_estimated"] = False

    weekly["valid"] = (
        complete
        & (weekly["n_days_observed"] > 0)
        & weekly["s_start"].notna()
        & weekly["s_end"].notna()
    )

    weekly = weekly.reset_index()
    weekly["date_start"] = pd.to_datetime([
        from_water_calendar(wy, ww, 1, epoch_month, epoch_day)
        for wy, ww in zip(weekly["water_year"], weekly["water_week"])
    ])
    for col in ["water_year", "water_week", "n_days", "n_days_observed",
                "n_days_filled", "n_days_i", "n_days_r"]:
        weekly[col] = weekly[col].astype(int)
    weekly["valid"] = weekly["valid"].astype(bool)

    n_invalid = int((~weekly["valid"]).sum())
    if n_invalid:
        logger.warning(
            "%d of %d water weeks have no storage basis or are incomplete; flagged invalid",
            n_invalid, len(weekly),
        )
    return weekly[WEEKLY_COLUMNS]
