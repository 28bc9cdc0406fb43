"""OpenWeatherMap forecast service.

Uses the free 5-day / 3-hour forecast API and folds the 3-hour slots into
one summary per calendar day (UTC). The free tier cannot see further
than five days ahead, which bounds both the trip length and how far in
the future the trip may start.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import httpx
from pydantic import ValidationError

from travelbuddy.models import (
    DailyForecast,
    DateRange,
    ForecastEntry,
    ForecastResponse,
    RequestValidationFailed,
    TemperatureSummary,
    UpstreamError,
    UpstreamTimeoutError,
    WeatherForecastResponse,
    WeatherSummary,
)

logger = logging.getLogger(__name__)

MAX_FORECAST_DAYS = 5

WEATHER_DESCRIPTIONS = {
    "clear": "clear sky",
    "clouds": "scattered clouds",
    "rain": "light rain",
    "snow": "light snow",
    "thunderstorm": "thunderstorm",
    "drizzle": "light drizzle",
    "mist": "mist",
    "fog": "mist",
}


def _round(value: float) -> int:
    """Round half up, matching what the client displays."""
    return math.floor(value + 0.5)


@dataclass
class DayAccumulator:
    """3-hour slots collected for one day."""
    temps: list[float] = field(default_factory=list)
    min_temp: float = math.inf
    max_temp: float = -math.inf
    conditions: Counter = field(default_factory=Counter)
    humidity: list[float] = field(default_factory=list)
    wind_speed: list[float] = field(default_factory=list)
    precipitation: list[float] = field(default_factory=list)

    def add(self, entry: ForecastEntry) -> None:
        self.temps.append(entry.main.temp)
        self.min_temp = min(self.min_temp, entry.main.temp_min)
        self.max_temp = max(self.max_temp, entry.main.temp_max)
        self.humidity.append(entry.main.humidity)
        self.wind_speed.append(entry.wind.speed)
        self.precipitation.append(entry.pop)
        if entry.weather:
            self.conditions[entry.weather[0].main] += 1

    def most_common_condition(self) -> str:
        # Counter.most_common keeps first-seen order on ties.
        common = self.conditions.most_common(1)
        return common[0][0] if common else "Clear"

    def to_forecast(self, date_key: str) -> DailyForecast:
        condition = self.most_common_condition()
        return DailyForecast(
            date=date_key,
            temp=TemperatureSummary(
                min=_round(self.min_temp),
                max=_round(self.max_temp),
                day=_round(self.temps[len(self.temps) // 2]),
                night=_round(self.temps[0]),
            ),
            weather=WeatherSummary(
                main=condition,
                description=WEATHER_DESCRIPTIONS.get(condition.lower(), "partly cloudy"),
                icon="01d" if condition.lower() == "clear" else "02d",
            ),
            humidity=_round(sum(self.humidity) / len(self.humidity)),
            windSpeed=_round(sum(self.wind_speed) / len(self.wind_speed) * 3.6),
            precipitation=_round(sum(self.precipitation) / len(self.precipitation) * 100),
        )


def group_by_day(entries: list[ForecastEntry]) -> dict[str, DayAccumulator]:
    """Group 3-hour slots by their UTC calendar date, in time order."""
    daily: dict[str, DayAccumulator] = {}
    for entry in entries:
        date_key = datetime.fromtimestamp(entry.dt, tz=timezone.utc).date().isoformat()
        daily.setdefault(date_key, DayAccumulator()).add(entry)
    return daily


def unavailable_forecast(date_key: str) -> DailyForecast:
    return DailyForecast(
        date=date_key,
        temp=TemperatureSummary(min=0, max=0, day=0, night=0),
        weather=WeatherSummary(main="Unknown", description="forecast not available", icon="02d"),
        humidity=0,
        windSpeed=0,
        precipitation=0,
        unavailable=True,
    )


def build_daily_forecasts(
    entries: list[ForecastEntry], start: date, days: int
) -> tuple[list[DailyForecast], dict[str, DayAccumulator]]:
    """One forecast per trip day; placeholders where the API has no data."""
    daily = group_by_day(entries)
    forecasts = []
    for offset in range(days):
        date_key = (start + timedelta(days=offset)).isoformat()
        accumulator = daily.get(date_key)
        if accumulator is None:
            forecasts.append(unavailable_forecast(date_key))
        else:
            forecasts.append(accumulator.to_forecast(date_key))
    return forecasts, daily


def parse_start_date(value: str) -> date:
    """Accept ``YYYY-MM-DD`` or a full ISO timestamp."""
    try:
        return date.fromisoformat(value[:10])
    except ValueError as e:
        raise RequestValidationFailed(
            "Invalid start date",
            details="startDate must be an ISO date (YYYY-MM-DD)",
        ) from e


def check_start_date(start_date: str, start: date, today: date) -> int:
    """Return how many days ahead the trip starts, or reject the date.

    Rejections are ``RequestValidationFailed`` (HTTP 400) whose body keeps
    ``success: false`` plus the date context.
    """
    days_from_today = (start - today).days
    if days_from_today > MAX_FORECAST_DAYS:
        raise RequestValidationFailed(
            "Weather forecast not available for selected dates",
            extra={
                "success": False,
                "message": (
                    f"Your trip starts {days_from_today} days from now, but the free weather "
                    f"API only provides forecasts up to {MAX_FORECAST_DAYS} days ahead. "
                    f"Please select a start date within the next {MAX_FORECAST_DAYS} days."
                ),
                "selectedStartDate": start_date,
                "daysFromToday": days_from_today,
                "maxDaysAhead": MAX_FORECAST_DAYS,
            },
        )
    if days_from_today < 0:
        raise RequestValidationFailed(
            "Invalid start date",
            extra={
                "success": False,
                "message": "Trip start date cannot be in the past. Please select a future date.",
                "selectedStartDate": start_date,
                "daysFromToday": days_from_today,
            },
        )
    return days_from_today


class OpenWeatherService:
    """OpenWeatherMap 5-day forecast client."""

    FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ValueError("OPENWEATHER_API_KEY not provided")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def fetch_forecast(self, lat: str, lon: str) -> ForecastResponse:
        params = {"lat": lat, "lon": lon, "units": "metric", "appid": self._api_key}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self.FORECAST_URL, params=params)
                response.raise_for_status()
                return ForecastResponse.model_validate(response.json())
        except httpx.TimeoutException as e:
            logger.error(f"[WEATHER] Timeout for ({lat}, {lon})")
            raise UpstreamTimeoutError("Weather service timeout. Please try again.") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"[WEATHER] API error {e.response.status_code}: {e.response.text[:200]}")
            raise UpstreamError(
                "Failed to fetch weather data", upstream_status=e.response.status_code
            ) from e
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error(f"[WEATHER] Forecast request failed: {e}")
            raise UpstreamError("Failed to fetch weather data") from e

    async def trip_forecast(
        self,
        lat: str,
        lon: str,
        start_date: str,
        days: int,
        today: Optional[date] = None,
    ) -> WeatherForecastResponse:
        """Daily forecasts for a trip of ``days`` days starting ``start_date``.

        Raises:
            RequestValidationFailed: The start date is unparsable, in the
                past, or beyond the 5-day horizon.
        """
        start = parse_start_date(start_date)
        today = today or date.today()
        days_from_today = check_start_date(start_date, start, today)

        data = await self.fetch_forecast(lat, lon)
        forecasts, daily = build_daily_forecasts(data.entries, start, days)

        end_date = (start + timedelta(days=days - 1)).isoformat()
        available = sum(1 for f in forecasts if not f.unavailable)
        date_keys = list(daily)

        logger.info(
            f"[WEATHER] {start_date} to {end_date}: {available}/{days} days available "
            f"(API covers {date_keys[0] if date_keys else '-'}..{date_keys[-1] if date_keys else '-'})"
        )

        if days_from_today > 0:
            message = f"Weather forecast for {start_date} to {end_date} ({days} days)"
        else:
            message = f"Weather forecast for today and next {days} days"

        return WeatherForecastResponse(
            forecasts=forecasts,
            location={"lat": lat, "lon": lon},
            tripDuration=days,
            selectedStartDate=start_date,
            endDate=end_date,
            daysFromToday=days_from_today,
            note="Using free tier API (5-day forecast limit)",
            availableDays=available,
            unavailableDays=len(forecasts) - available,
            availableDateRange=DateRange(
                from_=date_keys[0] if date_keys else "No data",
                to=date_keys[-1] if date_keys else "No data",
            ),
            message=message,
        )
