import matplotlib.pyplot as plt
import pytest

from dampolicy.pipeline import infer_policy, prepare_weekly_series, scan_horizons
from dampolicy.plotting import plot_horizon_scan, plot_policy_fit, plot_weekly_dynamics


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


def test_plot_weekly_dynamics(balanced_daily, tmp_path):
    weekly = prepare_weekly_series(balanced_daily)
    fig = plot_weekly_dynamics(weekly, "Blue Marsh", start_year=2000, end_year=2001,
                               save_dir=str(tmp_path))
    assert len(fig.axes) == 3
    assert (tmp_path / "blue_marsh_weekly_dynamics.png").exists()


def test_plot_policy_fit(synthetic_weekly, tmp_path):
    samples, fit = infer_policy(synthetic_weekly, water_week=3, horizon=2)
    plot_policy_fit(samples, fit, "Blue Marsh", save_dir=str(tmp_path))
    assert (tmp_path / "blue_marsh_week03_h02_policy.png").exists()


def test_plot_policy_fit_on_given_axes(synthetic_weekly):
    samples, fit = infer_policy(synthetic_weekly, water_week=3, horizon=2)
    fig, ax = plt.subplots()
    assert plot_policy_fit(samples, fit, "Blue Marsh", ax=ax, save=False) is fig


def test_plot_horizon_scan(synthetic_weekly, tmp_path):
    scan = scan_horizons(synthetic_weekly, water_weeks=[1, 2, 3], horizons=[1, 2])
    plot_horizon_scan(scan, "Blue Marsh", metric="nse", save_dir=str(tmp_path))
    assert (tmp_path / "blue_marsh_horizon_scan_nse.png").exists()
