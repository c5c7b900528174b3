"""
WeatherStack Weather Client
===========================
Current conditions and daily forecast for a free-form location string

API Used:
- GET /current  (access_key, query, units=m)
- GET /forecast (access_key, query, units=m, forecast_days)

Failure Modes:
- LocationNotFoundError: WeatherStack cannot resolve the query (codes 601/615)
- WeatherServiceError: everything else (missing key, HTTP error, timeout, bad payload)

Plans without forecast access answer /forecast with error 105. In that case
a deterministic forecast is derived from the current conditions so callers
always receive the same shape.
"""

import logging
import os
from collections import Counter
from datetime import date, timedelta
from typing import Any, Literal, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

# WeatherStack API Configuration
WEATHERSTACK_BASE_URL = os.getenv("WEATHERSTACK_BASE_URL", "http://api.weatherstack.com")
WEATHER_TIMEOUT_SECONDS = float(os.getenv("WEATHER_TIMEOUT_SECONDS", "10"))
WEATHER_FORECAST_DAYS = int(os.getenv("WEATHER_FORECAST_DAYS", "10"))

# WeatherStack error codes
LOCATION_NOT_FOUND_CODES = {601, 615}
FORECAST_UNAVAILABLE_CODES = {105, 603}

Suitability = Literal["good", "fair", "poor"]


class WeatherServiceError(Exception):
    """Exception raised when the weather provider cannot answer"""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


class LocationNotFoundError(WeatherServiceError):
    """Exception raised when the provider does not recognise the location"""

    def __init__(self, location: str, message: str | None = None, code: int | None = None):
        super().__init__(message or f"Location not found: {location}", code=code)
        self.location = location


# ===== Models =====


class CurrentWeather(BaseModel):
    """Current conditions at a location (metric units)"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    location: str = Field(description="Resolved location, e.g. 'Paris, France'")
    temperature: float = Field(description="Temperature in °C")
    feels_like: float = Field(description="Apparent temperature in °C")
    condition_description: str = Field(description="Provider condition text, e.g. 'Light Rain'")
    humidity: int = Field(default=0, description="Relative humidity in %")
    wind_speed: float = Field(default=0.0, description="Wind speed in m/s")
    rain_mm: float = Field(default=0.0, description="Precipitation in mm")
    observed_at: str | None = Field(default=None, description="Local observation time")


class DailySummary(BaseModel):
    """One day of forecast"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    day: date = Field(alias="date", description="Forecast day")
    date_string: str = Field(description="Display label, e.g. 'Mon, Oct 19'")
    min_temp: float
    max_temp: float
    conditions: str
    precipitation_probability: int = Field(default=0, ge=0, le=100)
    suitability: Suitability = "good"


class WeatherReport(BaseModel):
    """Current conditions plus the daily forecast for one location"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    location: str
    current: CurrentWeather
    forecast: list[DailySummary] = Field(default_factory=list)


class WeatherProvider(Protocol):
    """Interface consumed by the turn pipeline"""

    async def get_current(self, location: str) -> CurrentWeather: ...

    async def get_forecast(self, location: str, days: int = WEATHER_FORECAST_DAYS) -> list[DailySummary]: ...


# ===== Helpers =====


def format_day_label(day: date) -> str:
    return f"{day:%a}, {day:%b} {day.day}"


def assess_suitability(precipitation_probability: float, has_rain: bool, conditions: str) -> Suitability:
    """
    Rate a day for outdoor activities

    poor: likely rain, measured rain or thunderstorms
    fair: moderate rain chance or rainy conditions
    good: otherwise
    """
    lowered = conditions.lower()
    if precipitation_probability > 70 or has_rain or "thunder" in lowered:
        return "poor"
    if precipitation_probability > 40 or "rain" in lowered:
        return "fair"
    return "good"


def synthesize_forecast(current: CurrentWeather, days: int, start: date) -> list[DailySummary]:
    """
    Build a forecast from current conditions when the plan has no forecast access

    Deterministic: the same observation always yields the same forecast.
    """
    if current.rain_mm > 0:
        probability = min(100, 60 + int(current.rain_mm * 5))
    else:
        probability = max(0, min(100, current.humidity - 50))

    # Gentle weekly temperature swing around the observed value
    swings = (0, 1, 2, 1, 0, -1, -2)
    summaries = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        swing = swings[offset % len(swings)]
        summaries.append(
            DailySummary(
                day=day,
                date_string=format_day_label(day),
                min_temp=round(current.temperature - 3 + swing),
                max_temp=round(current.temperature + 3 + swing),
                conditions=current.condition_description,
                precipitation_probability=probability,
                suitability=assess_suitability(
                    probability, current.rain_mm > 0, current.condition_description
                ),
            )
        )
    return summaries


# ===== Client =====


class WeatherStackClient:
    """
    Async WeatherStack client

    Args:
        api_key: WeatherStack access key (default: WEATHERSTACK_API_KEY)
        base_url: API base URL
        timeout: per-request timeout in seconds
        transport: optional httpx transport (tests use httpx.MockTransport)
        today: date provider for synthesized forecasts
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = WEATHER_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        today: Any = date.today,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("WEATHERSTACK_API_KEY", "")
        self.base_url = base_url or WEATHERSTACK_BASE_URL
        self.timeout = timeout
        self._transport = transport
        self._today = today

    async def _request(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        if not self.api_key:
            raise WeatherServiceError("WEATHERSTACK_API_KEY is not configured")

        query = {"access_key": self.api_key, "units": "m", **params}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(f"/{endpoint}", params=query)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[Weather] HTTP error: {e.response.status_code}")
            raise WeatherServiceError(f"Weather provider returned HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"[Weather] Request error: {e}")
            raise WeatherServiceError("Weather provider is unreachable") from e
        except ValueError as e:
            raise WeatherServiceError("Weather provider returned malformed data") from e

        if not isinstance(data, dict):
            raise WeatherServiceError("Weather provider returned malformed data")

        error = data.get("error")
        if error:
            code = error.get("code")
            info = error.get("info") or "Unable to fetch weather data"
            if code in LOCATION_NOT_FOUND_CODES:
                raise LocationNotFoundError(str(params.get("query", "")), info, code=code)
            raise WeatherServiceError(info, code=code)
        return data

    async def get_current(self, location: str) -> CurrentWeather:
        """
        Fetch current conditions

        Raises:
            LocationNotFoundError: empty or unknown location
            WeatherServiceError: any other provider failure
        """
        if not location or not location.strip():
            raise LocationNotFoundError(location or "", "No location given")

        data = await self._request("current", {"query": location.strip()})
        try:
            place = data["location"]
            current = data["current"]
            descriptions = current.get("weather_descriptions") or ["Unknown"]
            name = ", ".join(part for part in (place.get("name"), place.get("country")) if part)
            weather = CurrentWeather(
                location=name or location,
                temperature=round(current["temperature"]),
                feels_like=round(current.get("feelslike", current["temperature"])),
                condition_description=descriptions[0],
                humidity=int(current.get("humidity") or 0),
                wind_speed=round((current.get("wind_speed") or 0) / 3.6, 1),
                rain_mm=float(current.get("precip") or 0),
                observed_at=place.get("localtime"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise WeatherServiceError("Weather provider returned malformed data") from e

        logger.info(
            "[Weather] %s: %s°C, %s", weather.location, weather.temperature, weather.condition_description
        )
        return weather

    async def get_forecast(self, location: str, days: int = WEATHER_FORECAST_DAYS) -> list[DailySummary]:
        """
        Fetch a daily forecast

        Falls back to a forecast synthesized from current conditions when
        the subscription plan does not include forecasts.
        """
        try:
            data = await self._request(
                "forecast", {"query": location.strip(), "forecast_days": days, "hourly": 1}
            )
        except LocationNotFoundError:
            raise
        except WeatherServiceError as e:
            if e.code not in FORECAST_UNAVAILABLE_CODES:
                raise
            logger.info("[Weather] Forecast not available on this plan, deriving from current")
            current = await self.get_current(location)
            return synthesize_forecast(current, days, self._today())

        return _parse_forecast(data.get("forecast") or {}, days)


def _parse_forecast(raw: dict[str, Any], days: int) -> list[DailySummary]:
    summaries = []
    for key in sorted(raw)[:days]:
        entry = raw[key] or {}
        try:
            day = date.fromisoformat(entry.get("date") or key)
        except ValueError:
            continue
        hourly = entry.get("hourly") or []
        descriptions = [
            (hour.get("weather_descriptions") or ["Unknown"])[0] for hour in hourly
        ] or ["Unknown"]
        conditions = Counter(descriptions).most_common(1)[0][0]
        probability = max((int(hour.get("chanceofrain") or 0) for hour in hourly), default=0)
        has_rain = any(float(hour.get("precip") or 0) > 0 for hour in hourly)
        summaries.append(
            DailySummary(
                day=day,
                date_string=format_day_label(day),
                min_temp=round(entry.get("mintemp", 0)),
                max_temp=round(entry.get("maxtemp", 0)),
                conditions=conditions,
                precipitation_probability=min(100, probability),
                suitability=assess_suitability(probability, has_rain, conditions),
            )
        )
    return summaries


async def fetch_weather_report(
    provider: WeatherProvider,
    location: str,
    days: int = WEATHER_FORECAST_DAYS,
) -> WeatherReport:
    """
    Current conditions plus forecast for one location

    A failing forecast does not discard the current conditions; a failing
    current lookup propagates.
    """
    current = await provider.get_current(location)
    try:
        forecast = await provider.get_forecast(location, days)
    except LocationNotFoundError:
        raise
    except WeatherServiceError as e:
        logger.warning(f"[Weather] Forecast unavailable for {location}: {e}")
        forecast = []
    return WeatherReport(location=current.location, current=current, forecast=forecast)
