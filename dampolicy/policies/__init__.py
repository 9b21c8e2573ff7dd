from dampolicy.policies.availability import AVAILABILITY_COLUMNS, compute_availability
from dampolicy.policies.piecewise import (
    PiecewisePolicyFit,
    fit_piecewise,
    initial_guess,
    piecewise_release,
)
