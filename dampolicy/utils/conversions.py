"""
Unit conversion to the canonical metric basis.

Storage is expressed in million cubic metres (MCM); inflow and release
rates are turned into daily volumes (MCM/day).
"""
from collections.abc import Mapping

from dampolicy.errors import InvalidUnit
from dampolicy.utils.timeseries import validate_daily_series

SECONDS_PER_DAY = 86400.0
M3_PER_MCM = 1.0e6

CUBIC_FEET_TO_M3 = 0.028316846592
ACRE_FEET_TO_M3 = 1233.48183754752
MILLION_GALLONS_TO_M3 = 3785.411784

# storage unit -> MCM
STORAGE_TO_MCM = {
    "mcm": 1.0,
    "m3": 1.0 / M3_PER_MCM,
    "acre_feet": ACRE_FEET_TO_M3 / M3_PER_MCM,
    "taf": 1000.0 * ACRE_FEET_TO_M3 / M3_PER_MCM,
    "mg": MILLION_GALLONS_TO_M3 / M3_PER_MCM,
}

# flow unit -> m3/s
FLOW_TO_CMS = {
    "cms": 1.0,
    "cfs": CUBIC_FEET_TO_M3,
    "mgd": MILLION_GALLONS_TO_M3 / SECONDS_PER_DAY,
    "mcm_per_day": M3_PER_MCM / SECONDS_PER_DAY,
}

UNIT_ALIASES = {
    "af": "acre_feet",
    "acre-feet": "acre_feet",
    "acre-ft": "acre_feet",
    "acft": "acre_feet",
    "m^3": "m3",
    "m3/s": "cms",
    "m3s": "cms",
    "ft3/s": "cfs",
    "mcm/day": "mcm_per_day",
}

UNIT_SYSTEMS = {
    "imperial": {"storage": "acre_feet", "flow": "cfs"},
    "metric": {"storage": "mcm", "flow": "cms"},
    "mgd": {"storage": "mg", "flow": "mgd"},
}


def cfs_to_mcm_per_day(cfs):
    """Converts cubic feet per second to million cubic metres per day."""
    return cfs * CUBIC_FEET_TO_M3 * SECONDS_PER_DAY / M3_PER_MCM


def _normalize_tag(tag):
    if not isinstance(tag, str):
        raise InvalidUnit(f"Unit tag must be a string, got {tag!r}.")
    tag = tag.strip().lower()
    return UNIT_ALIASES.get(tag, tag)


def resolve_units(units_in):
    """
    Resolve a unit specification into (storage_unit, flow_unit) tags.

    Args:
        units_in (str or Mapping): A preset name from UNIT_SYSTEMS, or a
            mapping with 'storage' and 'flow' unit tags.

    Returns:
        tuple: Canonical (storage_unit, flow_unit).
    """
    if isinstance(units_in, str):
        key = units_in.strip().lower()
        if key not in UNIT_SYSTEMS:
            raise InvalidUnit(
                f"Unknown unit system '{units_in}'. Options: {sorted(UNIT_SYSTEMS)}."
            )
        units_in = UNIT_SYSTEMS[key]
    elif not isinstance(units_in, Mapping):
        raise InvalidUnit(f"Unsupported unit specification: {units_in!r}")

    missing = {"storage", "flow"} - set(units_in)
    if missing:
        raise InvalidUnit(f"Unit specification missing {sorted(missing)}.")

    storage_unit = _normalize_tag(units_in["storage"])
    flow_unit = _normalize_tag(units_in["flow"])
    if storage_unit not in STORAGE_TO_MCM:
        raise InvalidUnit(
            f"Unknown storage unit '{units_in['storage']}'. Options: {sorted(STORAGE_TO_MCM)}."
        )
    if flow_unit not in FLOW_TO_CMS:
        raise InvalidUnit(
            f"Unknown flow unit '{units_in['flow']}'. Options: {sorted(FLOW_TO_CMS)}."
        )
    return storage_unit, flow_unit


def convert_to_metric(series, units_in):
    """
    Convert a daily series to MCM storage and MCM/day flow volumes.

    Args:
        series (pd.DataFrame): Daily series with 'storage' and optional
            'inflow' / 'release' columns.
        units_in (str or Mapping): Units of the input, see ``resolve_units``.

    Returns:
        pd.DataFrame: A converted copy of the series.
    """
    storage_unit, flow_unit = resolve_units(units_in)
    validate_daily_series(series)

    converted = series.copy()
    converted["storage"] = converted["storage"].astype(float) * STORAGE_TO_MCM[storage_unit]

    flow_factor = FLOW_TO_CMS[flow_unit] * SECONDS_PER_DAY / M3_PER_MCM
    for col in ["inflow", "release"]:
        if col in converted.columns:
            converted[col] = converted[col].astype(float) * flow_factor
    return converted
