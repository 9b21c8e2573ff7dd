import logging

from dampolicy.config import COMPUTE_FROM_OPTIONS, ON_INSUFFICIENT_OPTIONS
from dampolicy.errors import InsufficientData

logger = logging.getLogger(__name__)


def _coverage(weekly, col, count_col):
    """
    0 = no daily observations, 1 = some days observed, 2 = every day observed.

    Frames without day counts treat any present total as complete.
    """
    has = weekly[col].notna()
    if count_col in weekly.columns and "n_days" in weekly.columns:
        has = has & (weekly[count_col] > 0)
        complete = has & (weekly[count_col] >= weekly["n_days"])
    else:
        complete = has
    return has.astype(int) + complete.astype(int)


def back_calc_missing_flows(weekly, compute_from, on_insufficient="raise"):
    """
    Close the weekly mass balance i_ - r_ = s_change.

    ``compute_from`` names the authoritative flow variable:

    - "i": release is recomputed from inflow, ``r_ = i_ - s_change``.
    - "r": inflow is recomputed from release, ``i_ = r_ + s_change``.

    The authoritative side is used whenever it has daily observations,
    unless the other side covers strictly more of the week (for example a
    complete release record against a partial inflow record); then the
    authoritative side is derived from the other one instead. Every
    back-calculated value has its ``i_estimated`` / ``r_estimated`` flag
    set. Weeks already flagged invalid are left untouched.

    Args:
        weekly (pd.DataFrame): Output of ``aggregate_to_water_weeks``.
        compute_from (str): "i" or "r".
        on_insufficient (str): "raise" to fail when a valid week has no
            daily inflow or release observations at all, "drop" to flag
            such weeks invalid.

    Returns:
        pd.DataFrame: A reconciled copy of the weekly records.

    Raises:
        InsufficientData: A valid week has no inflow or release
            observations and ``on_insufficient="raise"``.
    """
    if compute_from not in COMPUTE_FROM_OPTIONS:
        raise ValueError(
            f"compute_from must be one of {COMPUTE_FROM_OPTIONS}, got '{compute_from}'."
        )
    if on_insufficient not in ON_INSUFFICIENT_OPTIONS:
        raise ValueError(
            f"on_insufficient must be one of {ON_INSUFFICIENT_OPTIONS}, got '{on_insufficient}'."
        )

    out = weekly.copy()
    if "valid" not in out.columns:
        out["valid"] = True
    for flag in ["i_estimated", "r_estimated"]:
        if flag not in out.columns:
            out[flag] = False

    i_cover = _coverage(out, "i_", "n_days_i")
    r_cover = _coverage(out, "r_", "n_days_r")

    neither = out["valid"].astype(bool) & (i_cover == 0) & (r_cover == 0)
    if neither.any():
        bad = out.loc[neither, ["water_year", "water_week"]]
        first_wy, first_ww = bad.iloc[0]
        msg = (f"{len(bad)} water weeks have no daily inflow or release observations "
               f"(first: water year {first_wy}, week {first_ww}).")
        if on_insufficient == "raise":
            raise InsufficientData(msg)
        logger.warning("%s Flagging them invalid.", msg)
        out.loc[neither, "valid"] = False

    valid = out["valid"].astype(bool)
    if compute_from == "i":
        derive_r = valid & (i_cover > 0) & (i_cover >= r_cover)
        derive_i = valid & (r_cover > i_cover)
    else:
        derive_i = valid & (r_cover > 0) & (r_cover >= i_cover)
        derive_r = valid & (i_cover > r_cover)

    n_partial = int((derive_r & (i_cover == 1)).sum() + (derive_i & (r_cover == 1)).sum())
    if n_partial:
        logger.info("%d weeks reconciled from partially observed flow totals", n_partial)

    out.loc[derive_r, "r_"] = out.loc[derive_r, "i_"] - out.loc[derive_r, "s_change"]
    out.loc[derive_r, "r_estimated"] = True
    out.loc[derive_i, "i_"] = out.loc[derive_i, "r_"] + out.loc[derive_i, "s_change"]
    out.loc[derive_i, "i_estimated"] = True

    n_negative = int(((out["r_"] < 0) & derive_r).sum() + ((out["i_"] < 0) & derive_i).sum())
    if n_negative:
        logger.warning("%d back-calculated weekly flows are negative", n_negative)

    out["i_estimated"] = out["i_estimated"].astype(bool)
    out["r_estimated"] = out["r_estimated"].astype(bool)
    return out
