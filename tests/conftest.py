"""
Shared test fixtures
====================
In-memory weather provider, fixed calendar date and a fully wired
orchestrator running on the rule-based paths (no LLM configured)
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage

from tripzz_agent.context import ContextStore
from tripzz_agent.nodes import IntentClassifier, ResponseComposer, TripAnalyzer
from tripzz_agent.orchestrator import TurnOrchestrator
from tripzz_agent.services.itinerary import ItineraryClient
from tripzz_agent.services.weather import (
    CurrentWeather,
    LocationNotFoundError,
    WeatherReport,
    WeatherServiceError,
    synthesize_forecast,
)

# A Monday; April already lies in the past, so "April" means next year
TODAY = date(2026, 10, 19)


def make_current(
    location: str = "Goa, India",
    temperature: float = 24,
    condition: str = "Sunny",
    rain_mm: float = 0.0,
    humidity: int = 55,
) -> CurrentWeather:
    return CurrentWeather(
        location=location,
        temperature=temperature,
        feels_like=temperature,
        condition_description=condition,
        humidity=humidity,
        wind_speed=3.0,
        rain_mm=rain_mm,
    )


def make_report(days: int = 5, **kwargs) -> WeatherReport:
    current = make_current(**kwargs)
    return WeatherReport(
        location=current.location,
        current=current,
        forecast=synthesize_forecast(current, days, TODAY),
    )


def make_llm(content: str = "", side_effect=None) -> MagicMock:
    """Chat model double whose ainvoke returns ``content`` or raises ``side_effect``"""
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=AIMessage(content=content), side_effect=side_effect)
    return llm


class FakeWeatherProvider:
    """WeatherProvider double that records every location it was asked about"""

    def __init__(self, unknown: tuple[str, ...] = (), failing: bool = False, **weather):
        self.calls: list[str] = []
        self.unknown = {location.lower() for location in unknown}
        self.failing = failing
        self.weather = weather

    def _lookup(self, location: str) -> CurrentWeather:
        if location.lower() in self.unknown:
            raise LocationNotFoundError(location)
        if self.failing:
            raise WeatherServiceError("Weather provider is unreachable")
        return make_current(location=location, **self.weather)

    async def get_current(self, location: str) -> CurrentWeather:
        self.calls.append(location)
        return self._lookup(location)

    async def get_forecast(self, location: str, days: int = 10):
        return synthesize_forecast(self._lookup(location), days, TODAY)


@pytest.fixture
def store() -> ContextStore:
    return ContextStore()


@pytest.fixture
def weather_provider() -> FakeWeatherProvider:
    return FakeWeatherProvider()


@pytest.fixture
def orchestrator(store: ContextStore, weather_provider: FakeWeatherProvider) -> TurnOrchestrator:
    return TurnOrchestrator(
        store=store,
        classifier=IntentClassifier(today=lambda: TODAY),
        composer=ResponseComposer(),
        analyzer=TripAnalyzer(),
        weather=weather_provider,
        itinerary=ItineraryClient(base_url=""),
    )
