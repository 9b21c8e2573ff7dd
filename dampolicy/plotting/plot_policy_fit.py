import os
import logging

import numpy as np
import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)


def plot_policy_fit(samples, fit, dam_name,
                    ax=None,
                    title=None,
                    save=True,
                    save_dir="figures",
                    show=False):
    """
    Scatter of availability vs. release with the fitted piecewise policy.

    Args:
        samples (pd.DataFrame): Output of ``compute_availability``.
        fit (PiecewisePolicyFit): Policy fitted to ``samples``.
        dam_name (str): Used in the title and file name.
        ax (matplotlib.axes.Axes, optional): Axes to draw on.

    Returns:
        matplotlib.figure.Figure
    """
    if save:
        os.makedirs(save_dir, exist_ok=True)

    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 5))
    else:
        fig = ax.figure

    water_week = int(samples["water_week"].iloc[0])
    horizon = int(samples["horizon_weeks"].iloc[0])

    ax.scatter(samples["availability"], samples["release"],
               s=14, alpha=0.7, color="tab:blue", label="Observed")

    xs = np.linspace(samples["availability"].min(), samples["availability"].max(), 200)
    r2 = fit.residual_summary.get("r_squared", np.nan)
    ax.plot(xs, fit.predict(xs), color="k", lw=1.5, label=f"Policy (R² = {r2:.2f})")
    ax.axvline(fit.breakpoint_x, color="k", linestyle="--", alpha=0.5, label="Breakpoint")

    ax.set_xlabel(f"Availability: storage + {horizon}-week inflow (MCM)")
    ax.set_ylabel("Release (MCM/week)")
    ax.set_title(title or f"{dam_name} – water week {water_week}, horizon {horizon}")
    ax.legend()

    if save:
        safe_name = dam_name.replace(" ", "_").lower()
        fname = f"{safe_name}_week{water_week:02d}_h{horizon:02d}_policy.png"
        full_path = os.path.join(save_dir, fname)
        fig.savefig(full_path, dpi=300)
        logger.info("Saved plot to: %s", full_path)

    if show:
        plt.show()
    return fig
