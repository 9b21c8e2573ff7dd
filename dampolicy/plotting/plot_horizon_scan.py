import os
import logging

import matplotlib.pyplot as plt

logger = logging.getLogger(__name__)


def plot_horizon_scan(scan, dam_name,
                      metric="r_squared",
                      title=None,
                      save=True,
                      save_dir="figures",
                      show=False):
    """
    Heatmap of fit quality across target weeks (x) and horizons (y).

    Cells that failed (insufficient samples, no convergence) are blank.

    Args:
        scan (pd.DataFrame): Output of ``scan_horizons``.
        dam_name (str): Used in the title and file name.
        metric (str): Column of ``scan`` to show.

    Returns:
        matplotlib.figure.Figure
    """
    if save:
        os.makedirs(save_dir, exist_ok=True)

    grid = scan.pivot(index="horizon", columns="water_week", values=metric).astype(float)

    fig, ax = plt.subplots(figsize=(12, 4))
    mesh = ax.pcolormesh(grid.columns, grid.index, grid.values,
                         shading="nearest", cmap="viridis")
    fig.colorbar(mesh, ax=ax, label=metric)
    ax.set_xlabel("Water week")
    ax.set_ylabel("Horizon (weeks)")
    ax.set_title(title or f"{dam_name} – policy fit by horizon")
    fig.tight_layout()

    if save:
        safe_name = dam_name.replace(" ", "_").lower()
        full_path = os.path.join(save_dir, f"{safe_name}_horizon_scan_{metric}.png")
        fig.savefig(full_path, dpi=300)
        logger.info("Saved plot to: %s", full_path)

    if show:
        plt.show()
    return fig
