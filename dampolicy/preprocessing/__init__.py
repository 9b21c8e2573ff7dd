from dampolicy.preprocessing.gap_filling import fill_gaps
from dampolicy.preprocessing.aggregation import WEEKLY_COLUMNS, aggregate_to_water_weeks
from dampolicy.preprocessing.reconcile import back_calc_missing_flows
