import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from dampolicy.policies.piecewise import piecewise_release


def make_daily(start="1999-10-01", end="2002-09-30",
               storage=100.0, inflow=10.0, release=10.0):
    """Daily series with constant (or array) storage, inflow and release."""
    dates = pd.date_range(start, end, freq="D", name="date")
    return pd.DataFrame({
        "storage": storage,
        "inflow": inflow,
        "release": release,
    }, index=dates)


def make_balanced_daily(start="1999-10-01", end="2002-09-30", seed=0):
    """Daily series obeying s_t = s_{t-1} + i_t - r_t with seasonal inflow."""
    rng = np.random.default_rng(seed)
    dates = pd.date_range(start, end, freq="D", name="date")
    doy = dates.dayofyear.to_numpy()
    inflow = 20.0 + 15.0 * np.sin(2 * np.pi * doy / 365.25) + rng.uniform(0, 5, len(dates))
    release = 18.0 + rng.uniform(0, 5, len(dates))
    storage = 1000.0 + np.cumsum(inflow - release)
    return pd.DataFrame({
        "storage": storage,
        "inflow": inflow,
        "release": release,
    }, index=dates)


def make_weekly(first_year=1962, n_years=55, seed=1,
                breakpoint_x=120.0, slope1=0.1, slope2=0.7, noise=0.5):
    """
    Synthetic reconciled weekly records in which each week's release
    follows a piecewise policy of that week's storage plus inflow.
    """
    rng = np.random.default_rng(seed)
    years = np.repeat(np.arange(first_year, first_year + n_years), 52)
    weeks = np.tile(np.arange(1, 53), n_years)
    n = len(years)
    s_start = rng.uniform(50.0, 150.0, n)
    i_ = rng.uniform(0.0, 40.0, n)
    r_ = piecewise_release(s_start + i_, breakpoint_x, slope1, slope2, 0.0)
    r_ = r_ + rng.normal(0.0, noise, n)
    s_change = i_ - r_
    return pd.DataFrame({
        "water_year": years,
        "water_week": weeks,
        "s_start": s_start,
        "s_end": s_start + s_change,
        "s_change": s_change,
        "i_": i_,
        "r_": r_,
        "i_estimated": False,
        "r_estimated": True,
        "valid": True,
    })


@pytest.fixture
def constant_daily():
    return make_daily()


@pytest.fixture
def balanced_daily():
    return make_balanced_daily()


@pytest.fixture
def synthetic_weekly():
    return make_weekly()
