import logging

import pandas as pd
import numpy as np

from dampolicy.errors import MalformedSeries

logger = logging.getLogger(__name__)

DAILY_COLUMNS = ["storage", "inflow", "release"]


def validate_daily_series(series):
    """
    Check that a daily series has a usable date index.

    Args:
        series (pd.DataFrame): Daily records indexed by date, with at least
            a 'storage' column.

    Returns:
        pd.DatetimeIndex: The validated index.

    Raises:
        MalformedSeries: If dates are duplicated, out of order, not parseable,
            or carry a time-of-day component.
    """
    if not isinstance(series, pd.DataFrame):
        raise TypeError(f"Daily series must be a pandas DataFrame, got {type(series)}.")
    if "storage" not in series.columns:
        raise MalformedSeries(
            f"Daily series requires a 'storage' column. Columns: {series.columns.to_list()}"
        )

    try:
        idx = pd.DatetimeIndex(series.index)
    except (TypeError, ValueError) as e:
        raise MalformedSeries("Daily series index could not be parsed as dates.") from e

    if idx.hasnans:
        raise MalformedSeries("Daily series index contains missing dates.")
    if idx.has_duplicates:
        dupes = idx[idx.duplicated()].unique()
        raise MalformedSeries(
            f"Daily series has {len(dupes)} duplicate dates, e.g. {dupes[0].date()}."
        )
    if not idx.is_monotonic_increasing:
        raise MalformedSeries("Daily series dates must be strictly increasing.")
    if not (idx == idx.normalize()).all():
        raise MalformedSeries("Daily series index has sub-daily timestamps.")
    return idx


def align_daily_series(series):
    """
    Reindex a daily series onto every calendar day in its range.

    Days absent from the input become explicit NaN slots, so that
    adjacent rows always differ by exactly one day. Missing flow columns
    are added as all-NaN.

    Args:
        series (pd.DataFrame): Daily records indexed by date.

    Returns:
        pd.DataFrame: A new, contiguous daily series.
    """
    idx = validate_daily_series(series)
    daily = series.copy()
    daily.index = idx

    for col in DAILY_COLUMNS:
        if col not in daily.columns:
            daily[col] = np.nan
        daily[col] = pd.to_numeric(daily[col], errors="coerce").astype(float)

    if len(idx) == 0:
        daily.index.name = "date"
        return daily

    full_range = pd.date_range(idx[0], idx[-1], freq="D", name="date")
    n_inserted = len(full_range) - len(idx)
    if n_inserted > 0:
        logger.debug("Inserted %d missing calendar days into daily series", n_inserted)
    daily = daily.reindex(full_range)

    # provenance flags must stay boolean after reindexing
    for col in DAILY_COLUMNS:
        flag = f"{col}_filled"
        if flag in daily.columns:
            daily[flag] = daily[flag].fillna(False).astype(bool)
    return daily


def find_missing_runs(missing):
    """
    Locate maximal runs of True in a boolean mask.

    Args:
        missing (array-like of bool): True where a value is missing.

    Returns:
        list of tuple: Half-open (start, stop) positions of each run.
    """
    missing = np.asarray(missing, dtype=bool)
    if not missing.any():
        return []
    padded = np.concatenate([[False], missing, [False]]).astype(np.int8)
    edges = np.flatnonzero(np.diff(padded))
    return [(int(start), int(stop)) for start, stop in zip(edges[::2], edges[1::2])]
