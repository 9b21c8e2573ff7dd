import os
import logging

import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)


def plot_weekly_dynamics(weekly, dam_name,
                         start_year=None,
                         end_year=None,
                         log=False,
                         title=None,
                         save=True,
                         save_dir="figures",
                         show=False):
    """
    Three panel plot of weekly storage, inflow and release.

    Back-calculated (estimated) flows are marked, and invalid weeks are
    left out.

    Returns:
        matplotlib.figure.Figure
    """
    # Ensure output folder exists if saving
    if save:
        os.makedirs(save_dir, exist_ok=True)

    df = weekly[weekly["valid"].astype(bool)] if "valid" in weekly.columns else weekly
    if start_year is not None:
        df = df[df["water_year"] >= start_year]
    if end_year is not None:
        df = df[df["water_year"] <= end_year]

    fig, axs = plt.subplots(3, 1, figsize=(10, 10), sharex=True)

    # Storage
    axs[0].plot(df["date_start"], df["s_start"], label="Storage (start of week)")
    axs[0].set_ylabel("Storage (MCM)")

    # Inflow and release, estimated values highlighted
    for ax, col, flag, label in [(axs[1], "i_", "i_estimated", "Inflow"),
                                 (axs[2], "r_", "r_estimated", "Release")]:
        ax.plot(df["date_start"], df[col], label=label)
        est = df[df[flag].astype(bool)]
        if len(est):
            ax.scatter(est["date_start"], est[col], s=6, color="tab:orange",
                       label=f"{label} (mass balance)")
        ax.set_ylabel(f"{label} (MCM/week)")
        ax.legend(loc="upper right")

    axs[2].set_xlabel("Date")

    if log:
        for ax in axs:
            ax.set_yscale("log")

    fig.suptitle(title or f"{dam_name} weekly water balance")
    fig.tight_layout()

    if save:
        safe_name = dam_name.replace(" ", "_").lower()
        full_path = os.path.join(save_dir, f"{safe_name}_weekly_dynamics.png")
        fig.savefig(full_path, dpi=300)
        logger.info("Saved plot to: %s", full_path)

    if show:
        plt.show()
    return fig
