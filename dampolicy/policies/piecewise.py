import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from scipy.optimize import least_squares

from dampolicy.config import (
    FIT_MAX_ITERATIONS,
    FIT_TOLERANCE,
    FIT_METRICS,
    MIN_FIT_POINTS,
    PIECEWISE_PARAM_NAMES,
)
from dampolicy.errors import FitDidNotConverge, InsufficientSamples
from dampolicy.metrics.objectives import ObjectiveCalculator

logger = logging.getLogger(__name__)


def piecewise_release(availability, breakpoint_x, slope1, slope2, intercept):
    """
    Two-segment piecewise linear release function.

    Uses function:
    f(a) = intercept + slope1 * min(a, b) + slope2 * max(0, a - b)

    where b is the breakpoint; the two segments meet at a = b.
    """
    a = np.asarray(availability, dtype=float)
    return (intercept
            + slope1 * np.minimum(a, breakpoint_x)
            + slope2 * np.maximum(0.0, a - breakpoint_x))


@dataclass
class PiecewisePolicyFit:
    """
    Fitted release = f(availability) policy.

    Attributes:
        breakpoint_x (float): Availability at which the slope changes.
        slope1 (float): Slope below the breakpoint.
        slope2 (float): Slope above the breakpoint.
        intercept (float): Release at zero availability.
        is_converged (bool): Whether the optimizer met its tolerance.
        residual_summary (dict): Goodness-of-fit statistics.
    """
    breakpoint_x: float
    slope1: float
    slope2: float
    intercept: float
    is_converged: bool
    residual_summary: dict = field(default_factory=dict)

    @property
    def params(self):
        return np.array([self.breakpoint_x, self.slope1, self.slope2, self.intercept])

    def predict(self, availability):
        return piecewise_release(availability, *self.params)

    def to_dict(self):
        out = dict(zip(PIECEWISE_PARAM_NAMES, self.params.tolist()))
        out["is_converged"] = self.is_converged
        out.update(self.residual_summary)
        return out


def _linear_fit(x, y):
    """Return (slope, intercept), or None with fewer than 2 distinct x."""
    if np.unique(x).size < 2:
        return None
    slope, intercept = np.polyfit(x, y, 1)
    return float(slope), float(intercept)


def initial_guess(availability, release):
    """
    Starting parameters [breakpoint_x, slope1, slope2, intercept].

    The breakpoint starts at the median availability; each slope comes
    from a linear regression on its side of the split.
    """
    x = np.asarray(availability, dtype=float)
    y = np.asarray(release, dtype=float)
    breakpoint_x = float(np.median(x))

    overall = _linear_fit(x, y)
    below = _linear_fit(x[x <= breakpoint_x], y[x <= breakpoint_x]) or overall
    above = _linear_fit(x[x > breakpoint_x], y[x > breakpoint_x]) or overall

    slope1, intercept = below
    slope2, _ = above
    return np.array([breakpoint_x, slope1, slope2, intercept])


def _residuals(params, x, y):
    return piecewise_release(x, *params) - y


def _residual_summary(x, y, params, n_evaluations):
    fitted = piecewise_release(x, *params)
    resid = y - fitted
    sse = float(np.sum(resid ** 2))
    sst = float(np.sum((y - y.mean()) ** 2))

    summary = {"n_samples": int(x.size), "sse": sse}
    summary.update(ObjectiveCalculator(metrics=FIT_METRICS).calculate(obs=y, sim=fitted))
    summary["r_squared"] = 1.0 - sse / sst if sst > 0 else np.nan
    summary["n_evaluations"] = int(n_evaluations)
    return summary


def fit_piecewise(samples,
                  max_iterations=FIT_MAX_ITERATIONS,
                  tolerance=FIT_TOLERANCE,
                  raise_on_failure=True):
    """
    Fit the piecewise linear policy to availability / release samples.

    All four parameters are fit jointly by nonlinear least squares
    (trust region reflective), with the breakpoint bounded to the
    observed availability range.

    Args:
        samples (pd.DataFrame): Output of ``compute_availability``, or any
            frame with 'availability' and 'release' columns.
        max_iterations (int): Cap on residual function evaluations.
        tolerance (float): Convergence tolerance on cost, step and gradient.
        raise_on_failure (bool): If False, a non-converged fit is returned
            with ``is_converged=False`` instead of raising.

    Returns:
        PiecewisePolicyFit

    Raises:
        InsufficientSamples: Fewer than 4 samples, or no spread in availability.
        FitDidNotConverge: The optimizer hit the iteration cap or returned
            non-finite parameters.
    """
    if not isinstance(samples, pd.DataFrame):
        raise TypeError(f"samples must be a pandas DataFrame, got {type(samples)}.")
    data = samples[["availability", "release"]].dropna()
    x = data["availability"].to_numpy(dtype=float)
    y = data["release"].to_numpy(dtype=float)

    if x.size < MIN_FIT_POINTS:
        raise InsufficientSamples(
            f"Piecewise fit needs at least {MIN_FIT_POINTS} samples, got {x.size}.",
            n_samples=int(x.size),
        )
    x_min, x_max = float(x.min()), float(x.max())
    if not x_max > x_min:
        raise InsufficientSamples("Availability has no spread; breakpoint is not identifiable.",
                                  n_samples=int(x.size))

    x0 = initial_guess(x, y)
    lower = [x_min, -np.inf, -np.inf, -np.inf]
    upper = [x_max, np.inf, np.inf, np.inf]

    result = least_squares(
        _residuals, x0, args=(x, y),
        bounds=(lower, upper),
        method="trf",
        x_scale="jac",
        max_nfev=int(max_iterations),
        ftol=tolerance, xtol=tolerance, gtol=tolerance,
    )

    params = result.x
    converged = bool(result.success) and bool(np.all(np.isfinite(params)))
    if not converged:
        msg = (f"Piecewise fit did not converge after {result.nfev} evaluations "
               f"(status {result.status}: {result.message})")
        if raise_on_failure:
            raise FitDidNotConverge(msg)
        logger.warning(msg)

    return PiecewisePolicyFit(
        breakpoint_x=float(params[0]),
        slope1=float(params[1]),
        slope2=float(params[2]),
        intercept=float(params[3]),
        is_converged=converged,
        residual_summary=_residual_summary(x, y, params, result.nfev),
    )
