"""
Contains configuration defaults for the policy inference pipeline.
"""
import os
from copy import deepcopy

### Directories ###########
# Get the directory of this file
CONFIG_DIR = os.path.dirname(os.path.abspath(__file__))

# Other directories relative to this file
DATA_DIR = os.path.join(CONFIG_DIR, "../data")
RAW_DATA_DIR = os.path.join(DATA_DIR, "raw")
PROCESSED_DATA_DIR = os.path.join(DATA_DIR, "processed")
OUTPUT_DIR = os.path.join(CONFIG_DIR, "../outputs")
FIG_DIR = os.path.join(CONFIG_DIR, "../figures")

### Calendar ################
# Water year starts Oct 1 (US convention)
WATER_YEAR_EPOCH = (10, 1)
WEEKS_PER_YEAR = 52
DAYS_PER_WEEK = 7

### Preprocessing ###########
# Longest run of missing days (per variable) filled by interpolation
MAX_FILL_GAP = 10

# "i": inflow is authoritative, release is back-calculated
# "r": release is authoritative, inflow is back-calculated
COMPUTE_FROM_OPTIONS = ("i", "r")
COMPUTE_FROM = "i"

ON_INSUFFICIENT_OPTIONS = ("raise", "drop")

### Availability ############
MIN_ALLOWABLE_POINTS = 10
INCLUDE_TARGET_WEEK = True

### Policy fit ##############
FIT_MAX_ITERATIONS = 1000
FIT_TOLERANCE = 1e-8
MIN_FIT_POINTS = 4      # one per free parameter

FIT_METRICS = ["nse", "rmse", "kge", "pbias"]

PIECEWISE_PARAM_NAMES = ["breakpoint_x", "slope1", "slope2", "intercept"]


# --- Defaults for a single pipeline run ---
BASE_PIPELINE_OPTIONS = {
    "max_fill_gap": MAX_FILL_GAP,
    "water_year_epoch": WATER_YEAR_EPOCH,
    "compute_from": COMPUTE_FROM,
    "on_insufficient": "raise",
    "min_allowable_points": MIN_ALLOWABLE_POINTS,
    "cutoff_year": None,
    "include_target_week": INCLUDE_TARGET_WEEK,
    "max_iterations": FIT_MAX_ITERATIONS,
    "tolerance": FIT_TOLERANCE,
}


def get_pipeline_options(**overrides) -> dict:
    """
    Return the pipeline options with overrides applied and validated.

    Unknown option names raise KeyError; invalid values raise ValueError.
    """
    options = deepcopy(BASE_PIPELINE_OPTIONS)
    for key, value in overrides.items():
        if key not in options:
            available = ", ".join(sorted(options))
            raise KeyError(f"Unknown pipeline option '{key}'. Known: {available}")
        options[key] = value

    if int(options["max_fill_gap"]) < 0:
        raise ValueError(f"max_fill_gap must be >= 0, got {options['max_fill_gap']}.")
    options["max_fill_gap"] = int(options["max_fill_gap"])

    epoch = tuple(options["water_year_epoch"])
    if len(epoch) != 2:
        raise ValueError(f"water_year_epoch must be (month, day), got {epoch}.")
    options["water_year_epoch"] = (int(epoch[0]), int(epoch[1]))

    if options["compute_from"] not in COMPUTE_FROM_OPTIONS:
        raise ValueError(
            f"compute_from must be one of {COMPUTE_FROM_OPTIONS}, got '{options['compute_from']}'."
        )
    if options["on_insufficient"] not in ON_INSUFFICIENT_OPTIONS:
        raise ValueError(
            f"on_insufficient must be one of {ON_INSUFFICIENT_OPTIONS}, got '{options['on_insufficient']}'."
        )
    if int(options["min_allowable_points"]) < 1:
        raise ValueError("min_allowable_points must be a positive integer.")
    options["min_allowable_points"] = int(options["min_allowable_points"])

    if options["cutoff_year"] is not None:
        options["cutoff_year"] = int(options["cutoff_year"])
    if int(options["max_iterations"]) < 1:
        raise ValueError("max_iterations must be a positive integer.")
    if not (float(options["tolerance"]) > 0.0):
        raise ValueError("tolerance must be > 0.")
    return options
