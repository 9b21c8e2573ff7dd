import numpy as np
import pytest

from dampolicy.config import get_pipeline_options, BASE_PIPELINE_OPTIONS
from dampolicy.load import InMemoryDamSource
from dampolicy.pipeline import (
    SCAN_COLUMNS,
    infer_policy,
    load_weekly_series,
    prepare_weekly_series,
    scan_horizons,
)
from dampolicy.preprocessing import WEEKLY_COLUMNS

from conftest import make_daily, make_weekly


def test_prepare_constant_series(constant_daily):
    weekly = prepare_weekly_series(constant_daily)
    assert list(weekly.columns) == WEEKLY_COLUMNS
    assert len(weekly) == 3 * 52
    assert weekly["valid"].all()
    assert (weekly["i_"] == weekly["r_"]).all()
    assert weekly["r_estimated"].all()


def test_prepare_converts_units():
    daily = make_daily(storage=1000.0, inflow=100.0, release=100.0)
    weekly = prepare_weekly_series(daily, units_in="imperial")
    # 1000 acre-feet is about 1.2335 MCM
    assert np.isclose(weekly["s_start"].iloc[0], 1.2334818, rtol=1e-6)
    # 100 cfs for seven days
    assert np.isclose(weekly["i_"].iloc[0], 7 * 100 * 0.028316846592 * 86400 / 1e6)


def test_prepare_fills_short_gaps(constant_daily):
    daily = constant_daily.copy()
    daily.loc["2000-03-01":"2000-03-04", "storage"] = np.nan
    weekly = prepare_weekly_series(daily, max_fill_gap=10)
    assert weekly["valid"].all()
    assert weekly["n_days_filled"].sum() == 4


def test_prepare_keeps_partially_observed_weeks(constant_daily):
    daily = constant_daily.copy()
    daily.loc["2000-02-11", "inflow"] = np.nan
    daily.loc["2000-02-11":"2000-02-17", "release"] = np.nan
    weekly = prepare_weekly_series(daily, max_fill_gap=0)
    assert weekly["valid"].all()
    row = weekly[(weekly["water_year"] == 2000) & (weekly["water_week"] == 20)].iloc[0]
    assert row["n_days_i"] == 6
    assert row["r_"] == row["i_"] == 60.0


def test_load_weekly_series_from_source(constant_daily):
    source = InMemoryDamSource({"nid_blue_marsh": constant_daily})
    weekly = load_weekly_series(source, "nid_blue_marsh", compute_from="r")
    assert len(weekly) == 3 * 52
    assert weekly["i_estimated"].all()


def test_infer_policy(synthetic_weekly):
    samples, fit = infer_policy(synthetic_weekly, water_week=20, horizon=1)
    assert len(samples) == 55
    assert fit.is_converged
    assert fit.breakpoint_x == pytest.approx(120.0, rel=0.1)


def test_scan_horizons(synthetic_weekly):
    scan = scan_horizons(synthetic_weekly, water_weeks=[1, 2], horizons=[1, 4])
    assert list(scan.columns) == SCAN_COLUMNS
    assert len(scan) == 4
    assert (scan["status"] == "ok").all()
    assert (scan["n_samples"] == 55).all()
    h1 = scan[scan["horizon"] == 1]
    assert (h1["r_squared"] > 0.9).all()


def test_scan_reports_insufficient_samples():
    weekly = make_weekly(n_years=3)
    scan = scan_horizons(weekly, water_weeks=[1], horizons=[1, 2])
    assert (scan["status"] == "insufficient_samples").all()
    # three qualifying years, below the default minimum of ten
    assert (scan["n_samples"] == 3).all()
    assert scan["breakpoint_x"].isna().all()


def test_scan_counts_samples_when_fit_has_too_few():
    weekly = make_weekly(n_years=3)
    scan = scan_horizons(weekly, water_weeks=[1], horizons=[1], min_allowable_points=1)
    assert scan["status"].tolist() == ["insufficient_samples"]
    assert scan["n_samples"].tolist() == [3]


def test_scan_reports_non_convergence(synthetic_weekly):
    scan = scan_horizons(synthetic_weekly, water_weeks=[5], horizons=[1], max_iterations=1)
    assert scan["status"].tolist() == ["did_not_converge"]
    assert scan["n_samples"].tolist() == [55]
    assert scan["breakpoint_x"].isna().all()


def test_pipeline_options_defaults():
    opts = get_pipeline_options()
    assert opts == BASE_PIPELINE_OPTIONS
    assert opts is not BASE_PIPELINE_OPTIONS


def test_pipeline_options_unknown_key():
    with pytest.raises(KeyError):
        get_pipeline_options(max_gap=3)


@pytest.mark.parametrize("overrides", [
    {"max_fill_gap": -1},
    {"compute_from": "both"},
    {"on_insufficient": "ignore"},
    {"min_allowable_points": 0},
    {"tolerance": 0.0},
])
def test_pipeline_options_bad_values(overrides):
    with pytest.raises(ValueError):
        get_pipeline_options(**overrides)
