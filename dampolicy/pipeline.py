"""
End-to-end policy inference: daily records -> weekly records ->
availability samples -> piecewise policy fits.
"""
import logging

import numpy as np
import pandas as pd

from dampolicy.config import get_pipeline_options, PIECEWISE_PARAM_NAMES
from dampolicy.errors import FitDidNotConverge, InsufficientSamples
from dampolicy.utils.conversions import convert_to_metric
from dampolicy.preprocessing import fill_gaps, aggregate_to_water_weeks, back_calc_missing_flows
from dampolicy.policies import compute_availability, fit_piecewise

logger = logging.getLogger(__name__)

SCAN_COLUMNS = (
    ["water_week", "horizon", "status", "n_samples"]
    + PIECEWISE_PARAM_NAMES
    + ["r_squared", "nse", "rmse"]
)


def prepare_weekly_series(daily, units_in=None, **options):
    """
    Run the preprocessing stages on one dam's daily series.

    Args:
        daily (pd.DataFrame): Raw daily series (storage, inflow, release).
        units_in (str, Mapping or None): Units of the raw series; None if
            it is already in MCM and MCM/day.
        **options: Overrides for ``get_pipeline_options``.

    Returns:
        pd.DataFrame: Reconciled weekly records.
    """
    opts = get_pipeline_options(**options)
    epoch_month, epoch_day = opts["water_year_epoch"]

    if units_in is not None:
        daily = convert_to_metric(daily, units_in)
    daily = fill_gaps(daily, max_fill_gap=opts["max_fill_gap"])
    weekly = aggregate_to_water_weeks(daily, epoch_month=epoch_month, epoch_day=epoch_day)
    return back_calc_missing_flows(weekly,
                                   compute_from=opts["compute_from"],
                                   on_insufficient=opts["on_insufficient"])


def load_weekly_series(source, dam_id, units_in=None, **options):
    """
    Resolve a dam through a DamSource and prepare its weekly records.
    """
    daily = source.resolve(dam_id)
    logger.info("Preparing weekly series for %s", dam_id)
    return prepare_weekly_series(daily, units_in=units_in, **options)


def _availability_samples(weekly, water_week, horizon, opts):
    return compute_availability(
        weekly,
        water_week=water_week,
        horizon=horizon,
        min_allowable_points=opts["min_allowable_points"],
        cutoff_year=opts["cutoff_year"],
        include_target_week=opts["include_target_week"],
    )


def _fit(samples, opts):
    return fit_piecewise(samples,
                         max_iterations=opts["max_iterations"],
                         tolerance=opts["tolerance"])


def infer_policy(weekly, water_week, horizon, **options):
    """
    Build availability samples for one (water_week, horizon) query and
    fit the piecewise policy to them.

    Returns:
        tuple: (samples DataFrame, PiecewisePolicyFit)
    """
    opts = get_pipeline_options(**options)
    samples = _availability_samples(weekly, water_week, horizon, opts)
    return samples, _fit(samples, opts)


def scan_horizons(weekly, water_weeks, horizons, **options):
    """
    Fit the policy over a grid of target weeks and horizons.

    Each cell is independent: a cell without enough samples, or whose fit
    does not converge, is reported through its 'status' column and does
    not affect the others. 'n_samples' is the number of availability
    samples the cell produced, whether or not the fit succeeded.

    Returns:
        pd.DataFrame: One row per (water_week, horizon), columns SCAN_COLUMNS.
    """
    opts = get_pipeline_options(**options)
    rows = []
    for water_week in water_weeks:
        for horizon in horizons:
            row = {"water_week": int(water_week), "horizon": int(horizon)}
            rows.append(row)
            try:
                samples = _availability_samples(weekly, water_week, horizon, opts)
            except InsufficientSamples as e:
                logger.info("Skipping week %s horizon %s: %s", water_week, horizon, e)
                row.update(status="insufficient_samples", n_samples=e.n_samples or 0)
                continue

            row["n_samples"] = len(samples)
            try:
                fit = _fit(samples, opts)
            except InsufficientSamples as e:
                logger.info("Skipping week %s horizon %s: %s", water_week, horizon, e)
                row["status"] = "insufficient_samples"
            except FitDidNotConverge as e:
                logger.warning("Week %s horizon %s: %s", water_week, horizon, e)
                row["status"] = "did_not_converge"
            else:
                row["status"] = "ok"
                row.update(dict(zip(PIECEWISE_PARAM_NAMES, fit.params.tolist())))
                for key in ["r_squared", "nse", "rmse"]:
                    row[key] = fit.residual_summary.get(key, np.nan)
    return pd.DataFrame(rows, columns=SCAN_COLUMNS)
