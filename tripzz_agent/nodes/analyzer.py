"""
Trip Analyzer
=============
Weather-versus-activity assessment once destination, dates, activities and
weather are all known

Primary path: LLM analysis returned as JSON (TripAnalysis shape).
Fallback path: rule-based matching against ACTIVITY_PROFILES plus a
threshold-driven packing list.
"""

import logging
from typing import Any

from langchain_core.language_models import BaseChatModel

from tripzz_agent.middleware.fallback import extract_json_block, generate_or_fallback
from tripzz_agent.prompts.analyzer import build_analysis_prompt
from tripzz_agent.services.weather import CurrentWeather, DailySummary, WeatherReport
from tripzz_agent.state import (
    ActivityAlternative,
    ActivityRecommendation,
    ConversationContext,
    TripAnalysis,
    WeatherConflict,
)

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 0.7
RAIN_CONFLICT_MM = 5.0

# Activity-weather compatibility
ACTIVITY_PROFILES: dict[str, dict[str, Any]] = {
    "hiking": {"avoid": ("rain", "thunder", "snow"), "temp": (15, 28), "outdoor": True},
    "sightseeing": {"avoid": ("thunder", "snow"), "temp": (10, 30), "outdoor": True},
    "beach": {"avoid": ("rain", "thunder", "cloud", "overcast"), "temp": (22, 35), "outdoor": True},
    "photography": {"avoid": ("rain", "thunder", "fog", "mist"), "temp": (5, 32), "outdoor": True},
    "cycling": {"avoid": ("rain", "thunder", "snow"), "temp": (12, 28), "outdoor": True},
    "water sports": {"avoid": ("thunder", "rain"), "temp": (20, 35), "outdoor": True},
    "picnic": {"avoid": ("rain", "thunder"), "temp": (18, 30), "outdoor": True},
    "city tour": {"avoid": ("thunder", "snow"), "temp": (10, 30), "outdoor": True},
    "museum": {"avoid": (), "temp": (-10, 40), "outdoor": False},
    "shopping": {"avoid": (), "temp": (-10, 40), "outdoor": False},
    "art gallery": {"avoid": (), "temp": (-10, 40), "outdoor": False},
    "spa": {"avoid": (), "temp": (-10, 40), "outdoor": False},
    "theater": {"avoid": (), "temp": (-10, 40), "outdoor": False},
}

INDOOR_ALTERNATIVES = {
    "hiking": "Museum visits",
    "beach": "Spa or indoor pools",
    "cycling": "Guided city tour by bus",
    "picnic": "Food market or cafe hopping",
    "water sports": "Aquarium visit",
    "photography": "Art gallery visit",
    "sightseeing": "Museums and cafes",
    "city tour": "Museums and cafes",
}

BASE_PACKING = ["Comfortable walking shoes", "Phone charger", "Travel documents"]
COLD_PACKING = ["Warm jacket", "Long pants", "Sweater"]
HOT_PACKING = ["Sunscreen", "Sunglasses", "Light clothing"]
WET_PACKING = ["Umbrella", "Rain jacket", "Waterproof bag"]


def match_profile(activity: str) -> tuple[str, dict[str, Any]] | None:
    """Profile whose key appears in the activity label ('Beach Activities' -> beach)"""
    lowered = activity.lower()
    for key, profile in ACTIVITY_PROFILES.items():
        if key in lowered:
            return key, profile
    return None


def _conflict_for(activity: str, profile: dict[str, Any], current: CurrentWeather) -> WeatherConflict | None:
    if not profile["outdoor"]:
        return None

    conditions = current.condition_description.lower()
    avoided = next((word for word in profile["avoid"] if word in conditions), None)
    if avoided or current.rain_mm > RAIN_CONFLICT_MM:
        wet = "rain" in conditions or current.rain_mm > RAIN_CONFLICT_MM
        return WeatherConflict(
            activity=activity,
            issue="High chance of rain" if wet else f"{current.condition_description} expected",
            severity="high" if "thunder" in conditions else "medium",
        )

    low, high = profile["temp"]
    if not low <= current.temperature <= high:
        return WeatherConflict(
            activity=activity,
            issue=f"{current.temperature:.0f}°C is outside the ideal {low}-{high}°C range",
            severity="low",
        )
    return None


def _best_day(profile: dict[str, Any], forecast: list[DailySummary]) -> DailySummary | None:
    low, high = profile["temp"]
    candidates = [day for day in forecast if day.suitability != "poor" or not profile["outdoor"]]
    if not candidates:
        return None

    def score(day: DailySummary) -> tuple[int, int, float]:
        in_range = low <= (day.min_temp + day.max_temp) / 2 <= high
        return (day.suitability == "good", in_range, -day.precipitation_probability)

    return max(candidates, key=score)


def build_packing_list(current: CurrentWeather, forecast: list[DailySummary]) -> list[str]:
    items = list(BASE_PACKING)
    if current.temperature < 15:
        items.extend(COLD_PACKING)
    if current.temperature > 25:
        items.extend(HOT_PACKING)
    wet_forecast = any(day.suitability == "poor" for day in forecast)
    if current.rain_mm > 0 or current.humidity > 70 or wet_forecast:
        items.extend(WET_PACKING)
    return items


def fallback_analysis(weather: WeatherReport, activities: list[str]) -> TripAnalysis:
    """Rule-based trip analysis"""
    conflicts: list[WeatherConflict] = []
    recommendations: list[ActivityRecommendation] = []
    alternatives: list[ActivityAlternative] = []

    for activity in activities:
        matched = match_profile(activity)
        if matched is None:
            continue
        key, profile = matched

        conflict = _conflict_for(activity, profile, weather.current)
        if conflict:
            conflicts.append(conflict)
            if key in INDOOR_ALTERNATIVES:
                alternatives.append(
                    ActivityAlternative(
                        original=activity,
                        suggested=INDOOR_ALTERNATIVES[key],
                        reason=conflict.issue,
                    )
                )

        best = _best_day(profile, weather.forecast)
        if best is not None:
            recommendations.append(
                ActivityRecommendation(
                    activity=activity,
                    best_time=best.date_string,
                    reason=f"{best.conditions}, {best.min_temp:.0f}-{best.max_temp:.0f}°C",
                )
            )

    return TripAnalysis(
        conflicts=conflicts,
        recommendations=recommendations,
        alternatives=alternatives,
        packing_list=build_packing_list(weather.current, weather.forecast),
        overall_assessment=(
            "Some weather challenges expected. Review alternatives."
            if conflicts
            else "Weather conditions are generally favorable."
        ),
        confidence=FALLBACK_CONFIDENCE,
        is_ai_generated=False,
    )


def parse_analysis_response(text: str) -> TripAnalysis:
    data = extract_json_block(text)
    data["isAiGenerated"] = True
    data.pop("is_ai_generated", None)
    return TripAnalysis.model_validate(data)


class TripAnalyzer:
    """
    LLM-first trip analysis with a rule-based fallback

    Args:
        llm: chat model, or None to always use the rules
        timeout: seconds allowed for the LLM path
    """

    def __init__(self, llm: BaseChatModel | None = None, timeout: float | None = None):
        self.llm = llm
        self.timeout = timeout

    async def analyze(self, context: ConversationContext, weather: WeatherReport) -> TripAnalysis:
        analysis = await generate_or_fallback(
            self.llm,
            prompt=build_analysis_prompt(context, weather),
            parse=parse_analysis_response,
            fallback=lambda: fallback_analysis(weather, context.activities),
            label="Analyzer",
            timeout=self.timeout,
        )
        logger.info(
            "[Analyzer] %d conflicts, %d recommendations (ai=%s)",
            len(analysis.conflicts),
            len(analysis.recommendations),
            analysis.is_ai_generated,
        )
        return analysis
