import numpy as np
import pytest

from dampolicy.errors import InsufficientSamples
from dampolicy.policies import compute_availability, AVAILABILITY_COLUMNS

from conftest import make_weekly


def lookup(weekly, year, week, col):
    row = weekly[(weekly["water_year"] == year) & (weekly["water_week"] == week)]
    return float(row[col].iloc[0])


def test_cutoff_year_and_min_points(synthetic_weekly):
    # 55 water years, 1962-2016
    samples = compute_availability(synthetic_weekly, water_week=1, horizon=1,
                                   min_allowable_points=10, cutoff_year=1995)
    assert list(samples.columns) == AVAILABILITY_COLUMNS
    assert len(samples) == 22
    assert samples["year"].min() == 1995
    assert (samples["year"] >= 1995).all()

    with pytest.raises(InsufficientSamples) as excinfo:
        compute_availability(synthetic_weekly, water_week=1, horizon=1,
                             min_allowable_points=30, cutoff_year=1995)
    assert excinfo.value.n_samples == 22


def test_availability_includes_target_week(synthetic_weekly):
    samples = compute_availability(synthetic_weekly, water_week=10, horizon=3)
    row = samples[samples["year"] == 1970].iloc[0]
    expected = (lookup(synthetic_weekly, 1970, 10, "s_start")
                + sum(lookup(synthetic_weekly, 1970, w, "i_") for w in (10, 11, 12)))
    assert np.isclose(row["availability"], expected)
    assert np.isclose(row["release"], lookup(synthetic_weekly, 1970, 10, "r_"))
    assert row["horizon_weeks"] == 3
    assert row["water_week"] == 10


def test_availability_excluding_target_week(synthetic_weekly):
    samples = compute_availability(synthetic_weekly, water_week=10, horizon=3,
                                   include_target_week=False)
    row = samples[samples["year"] == 1970].iloc[0]
    expected = (lookup(synthetic_weekly, 1970, 10, "s_start")
                + sum(lookup(synthetic_weekly, 1970, w, "i_") for w in (11, 12, 13)))
    assert np.isclose(row["availability"], expected)


def test_horizon_wraps_into_next_water_year(synthetic_weekly):
    samples = compute_availability(synthetic_weekly, water_week=51, horizon=4)
    # the final water year has no following year to complete its window
    assert len(samples) == 54
    assert 2016 not in set(samples["year"])
    row = samples[samples["year"] == 1980].iloc[0]
    expected = (lookup(synthetic_weekly, 1980, 51, "s_start")
                + lookup(synthetic_weekly, 1980, 51, "i_")
                + lookup(synthetic_weekly, 1980, 52, "i_")
                + lookup(synthetic_weekly, 1981, 1, "i_")
                + lookup(synthetic_weekly, 1981, 2, "i_"))
    assert np.isclose(row["availability"], expected)


def test_missing_next_year_drops_only_that_sample():
    weekly = make_weekly(first_year=2000, n_years=12)
    weekly = weekly[weekly["water_year"] != 2005]
    samples = compute_availability(weekly, water_week=52, horizon=2,
                                   min_allowable_points=1)
    # 2004 loses its window and 2005 is absent; 2011 has no following year
    assert sorted(samples["year"]) == [2000, 2001, 2002, 2003, 2006, 2007, 2008, 2009, 2010]


def test_invalid_weeks_are_skipped(synthetic_weekly):
    weekly = synthetic_weekly.copy()
    mask = (weekly["water_year"] == 1990) & (weekly["water_week"] == 3)
    weekly.loc[mask, "valid"] = False
    samples = compute_availability(weekly, water_week=1, horizon=3)
    assert 1990 not in set(samples["year"])
    assert len(samples) == 54


def test_missing_release_drops_year(synthetic_weekly):
    weekly = synthetic_weekly.copy()
    mask = (weekly["water_year"] == 1990) & (weekly["water_week"] == 1)
    weekly.loc[mask, "r_"] = np.nan
    samples = compute_availability(weekly, water_week=1, horizon=1)
    assert 1990 not in set(samples["year"])


@pytest.mark.parametrize("water_week, horizon", [(0, 1), (53, 1), (1, 0)])
def test_bad_query_rejected(synthetic_weekly, water_week, horizon):
    with pytest.raises(ValueError):
        compute_availability(synthetic_weekly, water_week=water_week, horizon=horizon)
