import logging

import numpy as np
from scipy.interpolate import PchipInterpolator

from dampolicy.config import MAX_FILL_GAP
from dampolicy.utils.timeseries import DAILY_COLUMNS, align_daily_series, find_missing_runs

logger = logging.getLogger(__name__)


def fill_gaps(series, max_fill_gap=MAX_FILL_GAP, columns=DAILY_COLUMNS):
    """
    Fill short interior gaps in a daily series.

    Each maximal run of missing values with a valid value on both sides,
    and no longer than ``max_fill_gap`` days, is filled by monotone cubic
    (PCHIP) interpolation through the valid points. Longer runs and runs
    touching either end of the series stay missing. Values outside a
    filled run are never changed.

    Each column gains a boolean ``<column>_filled`` flag; flags already
    present on the input are kept.

    Args:
        series (pd.DataFrame): Daily series indexed by date.
        max_fill_gap (int): Longest run of missing days to fill.
        columns (list): Columns to fill independently.

    Returns:
        pd.DataFrame: A new contiguous daily series with provenance flags.
    """
    if max_fill_gap < 0:
        raise ValueError(f"max_fill_gap must be >= 0, got {max_fill_gap}.")

    daily = align_daily_series(series)
    n_days = len(daily)

    for col in columns:
        if col not in daily.columns:
            continue
        values = daily[col].to_numpy(dtype=float, copy=True)
        flag = f"{col}_filled"
        filled = (
            daily[flag].to_numpy(dtype=bool, copy=True)
            if flag in daily.columns else np.zeros(n_days, dtype=bool)
        )

        missing = np.isnan(values)
        runs = [
            (start, stop) for start, stop in find_missing_runs(missing)
            if start > 0 and stop < n_days and (stop - start) <= max_fill_gap
        ]

        if runs:
            valid_pos = np.flatnonzero(~missing)
            interpolator = PchipInterpolator(valid_pos, values[valid_pos])
            for start, stop in runs:
                pos = np.arange(start, stop)
                values[pos] = interpolator(pos)
                filled[pos] = True

        n_filled = sum(stop - start for start, stop in runs)
        n_left = int(missing.sum()) - n_filled
        logger.debug("%s: filled %d days in %d gaps, %d days left missing",
                     col, n_filled, len(runs), n_left)

        daily[col] = values
        daily[flag] = filled

    return daily
