"""
Unit tests - WeatherStack client
================================
HTTP calls are served by httpx.MockTransport
"""

import asyncio
from datetime import date

import httpx
import pytest

from conftest import TODAY, make_current
from tripzz_agent.services.weather import (
    LocationNotFoundError,
    WeatherServiceError,
    WeatherStackClient,
    assess_suitability,
    fetch_weather_report,
    synthesize_forecast,
)

CURRENT_PAYLOAD = {
    "location": {"name": "Paris", "country": "France", "localtime": "2026-10-19 14:00"},
    "current": {
        "temperature": 18,
        "feelslike": 17,
        "weather_descriptions": ["Partly cloudy"],
        "humidity": 60,
        "wind_speed": 36,
        "precip": 0.2,
    },
}

FORECAST_PAYLOAD = {
    "forecast": {
        "2026-10-20": {
            "date": "2026-10-20",
            "mintemp": 11,
            "maxtemp": 19,
            "hourly": [
                {"weather_descriptions": ["Sunny"], "chanceofrain": 10, "precip": 0},
                {"weather_descriptions": ["Sunny"], "chanceofrain": 20, "precip": 0},
                {"weather_descriptions": ["Cloudy"], "chanceofrain": 30, "precip": 0},
            ],
        },
        "2026-10-21": {
            "date": "2026-10-21",
            "mintemp": 10,
            "maxtemp": 14,
            "hourly": [
                {"weather_descriptions": ["Moderate rain"], "chanceofrain": 85, "precip": 2.5},
            ],
        },
    }
}


def error_payload(code: int, info: str = "error") -> dict:
    return {"success": False, "error": {"code": code, "type": "error", "info": info}}


def client_for(handler, **kwargs) -> WeatherStackClient:
    return WeatherStackClient(
        api_key="test-key",
        base_url="http://weather.test",
        transport=httpx.MockTransport(handler),
        today=lambda: TODAY,
        **kwargs,
    )


class TestGetCurrent:
    def test_parses_current_conditions(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=CURRENT_PAYLOAD)

        current = asyncio.run(client_for(handler).get_current(" Paris "))

        assert seen["path"] == "/current"
        assert seen["params"] == {"access_key": "test-key", "units": "m", "query": "Paris"}
        assert current.location == "Paris, France"
        assert current.temperature == 18
        assert current.feels_like == 17
        assert current.condition_description == "Partly cloudy"
        assert current.wind_speed == 10.0
        assert current.rain_mm == 0.2

    @pytest.mark.parametrize("code", [601, 615])
    def test_unknown_location(self, code: int):
        client = client_for(lambda request: httpx.Response(200, json=error_payload(code, "Request failed")))

        with pytest.raises(LocationNotFoundError) as exc_info:
            asyncio.run(client.get_current("Atlantis"))

        assert exc_info.value.location == "Atlantis"
        assert exc_info.value.code == code

    def test_empty_location_never_hits_network(self):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(LocationNotFoundError):
            asyncio.run(client_for(handler).get_current("   "))

    def test_other_provider_error_is_generic(self):
        client = client_for(lambda request: httpx.Response(200, json=error_payload(101, "Invalid access key")))

        with pytest.raises(WeatherServiceError) as exc_info:
            asyncio.run(client.get_current("Paris"))

        assert not isinstance(exc_info.value, LocationNotFoundError)
        assert str(exc_info.value) == "Invalid access key"

    def test_http_error(self):
        client = client_for(lambda request: httpx.Response(503))

        with pytest.raises(WeatherServiceError, match="HTTP 503"):
            asyncio.run(client.get_current("Paris"))

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(WeatherServiceError, match="unreachable"):
            asyncio.run(client_for(handler).get_current("Paris"))

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("WEATHERSTACK_API_KEY", raising=False)
        client = WeatherStackClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))

        with pytest.raises(WeatherServiceError, match="WEATHERSTACK_API_KEY"):
            asyncio.run(client.get_current("Paris"))


class TestGetForecast:
    def test_parses_daily_summaries(self):
        forecast = asyncio.run(client_for(lambda request: httpx.Response(200, json=FORECAST_PAYLOAD)).get_forecast("Paris", 7))

        assert [day.day for day in forecast] == [date(2026, 10, 20), date(2026, 10, 21)]
        first, second = forecast
        assert first.conditions == "Sunny"
        assert first.precipitation_probability == 30
        assert first.suitability == "good"
        assert first.date_string == "Tue, Oct 20"
        assert second.suitability == "poor"

    def test_plan_without_forecast_is_synthesized(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/forecast":
                return httpx.Response(200, json=error_payload(105, "Function access restricted"))
            return httpx.Response(200, json=CURRENT_PAYLOAD)

        forecast = asyncio.run(client_for(handler).get_forecast("Paris", 4))

        assert len(forecast) == 4
        assert forecast[0].day == TODAY
        assert [day.max_temp for day in forecast] == [21, 22, 23, 22]

    def test_forecast_for_unknown_location(self):
        client = client_for(lambda request: httpx.Response(200, json=error_payload(615)))

        with pytest.raises(LocationNotFoundError):
            asyncio.run(client.get_forecast("Atlantis"))


class TestWeatherReport:
    def test_forecast_failure_keeps_current(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/forecast":
                return httpx.Response(500)
            return httpx.Response(200, json=CURRENT_PAYLOAD)

        report = asyncio.run(fetch_weather_report(client_for(handler), "Paris", 5))

        assert report.location == "Paris, France"
        assert report.current.temperature == 18
        assert report.forecast == []

    def test_current_failure_propagates(self):
        client = client_for(lambda request: httpx.Response(500))

        with pytest.raises(WeatherServiceError):
            asyncio.run(fetch_weather_report(client, "Paris"))


class TestHelpers:
    @pytest.mark.parametrize(
        ("probability", "has_rain", "conditions", "expected"),
        [
            (80, False, "Cloudy", "poor"),
            (10, True, "Sunny", "poor"),
            (0, False, "Thunderstorm", "poor"),
            (50, False, "Cloudy", "fair"),
            (0, False, "Light rain shower", "fair"),
            (10, False, "Sunny", "good"),
        ],
    )
    def test_assess_suitability(self, probability, has_rain, conditions, expected):
        assert assess_suitability(probability, has_rain, conditions) == expected

    def test_synthesized_forecast_is_deterministic(self):
        current = make_current(rain_mm=2.0)

        first = synthesize_forecast(current, 3, TODAY)
        second = synthesize_forecast(current, 3, TODAY)

        assert first == second
        assert first[0].precipitation_probability == 70
        assert first[0].suitability == "poor"
