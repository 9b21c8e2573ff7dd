"""
Infer dam release policies from daily storage, inflow and release records,
and measure how far ahead (horizon) inflow explains release decisions.
"""
from dampolicy.errors import (
    DamPolicyError,
    FitDidNotConverge,
    InsufficientData,
    InsufficientSamples,
    InvalidUnit,
    MalformedSeries,
)
from dampolicy.utils import convert_to_metric, to_water_calendar, from_water_calendar
from dampolicy.preprocessing import fill_gaps, aggregate_to_water_weeks, back_calc_missing_flows
from dampolicy.policies import compute_availability, fit_piecewise, PiecewisePolicyFit
from dampolicy.pipeline import prepare_weekly_series, load_weekly_series, infer_policy, scan_horizons

__version__ = "0.1.0"
