from dampolicy.plotting.plot_weekly_dynamics import plot_weekly_dynamics
from dampolicy.plotting.plot_policy_fit import plot_policy_fit
from dampolicy.plotting.plot_horizon_scan import plot_horizon_scan
