"""
Water year / water week calendar.

Water year N runs from the epoch date (Oct 1 by default) of calendar year
N-1 through the day before the epoch in year N. Each water year is split
into 52 weeks; week 52 absorbs the leftover day (or two, in a leap year).
"""
from datetime import date, timedelta
from typing import NamedTuple

import numpy as np
import pandas as pd

from dampolicy.config import WATER_YEAR_EPOCH, WEEKS_PER_YEAR, DAYS_PER_WEEK

EPOCH_MONTH, EPOCH_DAY = WATER_YEAR_EPOCH


class WaterCalendarPosition(NamedTuple):
    water_year: int
    water_week: int
    day_in_week: int


def _validate_epoch(epoch_month, epoch_day):
    # use a non-leap year so that Feb 29 is rejected
    try:
        date(2001, epoch_month, epoch_day)
    except (TypeError, ValueError) as e:
        raise ValueError(
            f"Invalid water year epoch month={epoch_month}, day={epoch_day}."
        ) from e


def _label_offset(epoch_month, epoch_day):
    # A Jan 1 epoch labels the water year by its own calendar year,
    # otherwise by the calendar year in which it ends.
    return 0 if (epoch_month, epoch_day) == (1, 1) else 1


def water_year_start(water_year, epoch_month=EPOCH_MONTH, epoch_day=EPOCH_DAY):
    """First calendar date of the given water year."""
    _validate_epoch(epoch_month, epoch_day)
    start_year = int(water_year) - _label_offset(epoch_month, epoch_day)
    return date(start_year, epoch_month, epoch_day)


def water_year_length(water_year, epoch_month=EPOCH_MONTH, epoch_day=EPOCH_DAY):
    """Number of days in the water year (365 or 366)."""
    start = water_year_start(water_year, epoch_month, epoch_day)
    end = water_year_start(water_year + 1, epoch_month, epoch_day)
    return (end - start).days


def week_length(water_year, water_week, epoch_month=EPOCH_MONTH, epoch_day=EPOCH_DAY):
    """Number of days in a water week; week 52 holds 8 or 9 days."""
    if not 1 <= water_week <= WEEKS_PER_YEAR:
        raise ValueError(f"water_week must be in [1, {WEEKS_PER_YEAR}], got {water_week}.")
    if water_week < WEEKS_PER_YEAR:
        return DAYS_PER_WEEK
    n_days = water_year_length(water_year, epoch_month, epoch_day)
    return n_days - DAYS_PER_WEEK * (WEEKS_PER_YEAR - 1)


def to_water_calendar(day, epoch_month=EPOCH_MONTH, epoch_day=EPOCH_DAY):
    """
    Map a calendar date onto the water calendar.

    Parameters
    ----------
    day : date-like
        Anything accepted by ``pd.Timestamp``; any time component is dropped.
    epoch_month, epoch_day : int
        Calendar date on which each water year begins.

    Returns
    -------
    WaterCalendarPosition
    """
    _validate_epoch(epoch_month, epoch_day)
    day = pd.Timestamp(day).date()

    start_year = day.year if (day.month, day.day) >= (epoch_month, epoch_day) else day.year - 1
    start = date(start_year, epoch_month, epoch_day)
    ordinal = (day - start).days + 1

    water_week = min(WEEKS_PER_YEAR, 1 + (ordinal - 1) // DAYS_PER_WEEK)
    day_in_week = ordinal - DAYS_PER_WEEK * (water_week - 1)
    water_year = start_year + _label_offset(epoch_month, epoch_day)
    return WaterCalendarPosition(int(water_year), int(water_week), int(day_in_week))


def from_water_calendar(water_year, water_week, day_in_week=1,
                        epoch_month=EPOCH_MONTH, epoch_day=EPOCH_DAY):
    """Inverse of ``to_water_calendar``; returns a ``datetime.date``."""
    n_days = week_length(water_year, water_week, epoch_month, epoch_day)
    if not 1 <= day_in_week <= n_days:
        raise ValueError(
            f"day_in_week must be in [1, {n_days}] for water year {water_year} "
            f"week {water_week}, got {day_in_week}."
        )
    start = water_year_start(water_year, epoch_month, epoch_day)
    offset = DAYS_PER_WEEK * (water_week - 1) + (day_in_week - 1)
    return start + timedelta(days=offset)


def water_calendar_frame(dates, epoch_month=EPOCH_MONTH, epoch_day=EPOCH_DAY):
    """
    Vectorised ``to_water_calendar`` over a sequence of dates.

    Returns a DataFrame indexed by the (normalized) dates with columns
    ``water_year``, ``water_week`` and ``day_in_week``.
    """
    _validate_epoch(epoch_month, epoch_day)
    idx = pd.DatetimeIndex(dates).normalize()
    columns = ["water_year", "water_week", "day_in_week"]
    if len(idx) == 0:
        return pd.DataFrame(columns=columns, index=idx, dtype=int)

    year = idx.year.to_numpy()
    month = idx.month.to_numpy()
    day = idx.day.to_numpy()

    after_epoch = (month > epoch_month) | ((month == epoch_month) & (day >= epoch_day))
    start_year = np.where(after_epoch, year, year - 1)
    starts = pd.to_datetime(pd.DataFrame({
        "year": start_year,
        "month": epoch_month,
        "day": epoch_day,
    }))
    ordinal = (idx - pd.DatetimeIndex(starts)).days.to_numpy() + 1

    water_week = np.minimum(WEEKS_PER_YEAR, 1 + (ordinal - 1) // DAYS_PER_WEEK)
    day_in_week = ordinal - DAYS_PER_WEEK * (water_week - 1)
    water_year = start_year + _label_offset(epoch_month, epoch_day)

    return pd.DataFrame({
        "water_year": water_year.astype(int),
        "water_week": water_week.astype(int),
        "day_in_week": day_in_week.astype(int),
    }, index=idx)
