"""OpenWeatherMap daily forecasts for trip dates."""

from .service import (
    MAX_FORECAST_DAYS,
    OpenWeatherService,
    build_daily_forecasts,
    check_start_date,
    group_by_day,
    parse_start_date,
)

__all__ = [
    "MAX_FORECAST_DAYS",
    "OpenWeatherService",
    "build_daily_forecasts",
    "check_start_date",
    "group_by_day",
    "parse_start_date",
]
