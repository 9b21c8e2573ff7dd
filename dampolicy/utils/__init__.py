from dampolicy.utils.timeseries import (
    DAILY_COLUMNS,
    align_daily_series,
    find_missing_runs,
    validate_daily_series,
)
from dampolicy.utils.water_calendar import (
    WaterCalendarPosition,
    from_water_calendar,
    to_water_calendar,
    water_calendar_frame,
    water_year_length,
    water_year_start,
    week_length,
)
from dampolicy.utils.conversions import convert_to_metric, resolve_units
