"""
Response Composer
=================
Final reply: text + data + suggestions + actions

Text comes from the LLM (used verbatim) or from fallback_text(), a
template cascade whose every branch reads only fields its precondition
guarantees. Suggestions and actions never depend on the model output,
so they are identical on both paths.
"""

import logging
from typing import Any

from langchain_core.language_models import BaseChatModel

from tripzz_agent.middleware.fallback import generate_or_fallback
from tripzz_agent.nodes.stage import (
    COLLECTION_STAGES,
    collected_fields,
    missing_fields,
    step_name,
    suggestions_for_stage,
)
from tripzz_agent.prompts.composer import build_response_prompt
from tripzz_agent.services.itinerary import format_itinerary_preview
from tripzz_agent.services.weather import WeatherReport
from tripzz_agent.state import (
    ConversationContext,
    IntentEnvelope,
    ResponseAction,
    ResponsePayload,
    Stage,
    TripAnalysis,
)

logger = logging.getLogger(__name__)

MAX_SMART_SUGGESTIONS = 4
MAX_TEXT_SUGGESTIONS = 3
FORECAST_DAYS_IN_TEXT = 3
ACTIVITY_IDEAS_IN_TEXT = 3

LOCATION_NOT_FOUND_SUGGESTIONS = ["Try a major city", "Include country name"]


# ===== Fallback text =====


def _current_weather_phrase(weather: WeatherReport) -> str:
    current = weather.current
    return f"{current.temperature:.0f}°C with {current.condition_description.lower()}"


def _next_question(context: ConversationContext) -> str:
    if not context.has_destination:
        return "Where are you planning to travel?"
    if not context.has_dates:
        return f"When are you planning to visit {context.destination}?"
    if not context.has_activities:
        return "What activities are you planning to do during your trip?"
    return "Want a day-by-day suggestion for the best time to do each activity?"


def _weather_answer(weather: WeatherReport | None, weather_error: str | None, context: ConversationContext) -> str:
    if weather is None:
        if not context.has_destination:
            return "Which city should I check the weather for?"
        return f"I couldn't get the weather right now ({weather_error or 'unknown error'}). {_next_question(context)}"

    lines = [f"Right now in {weather.location} it's {_current_weather_phrase(weather)} "
             f"(feels like {weather.current.feels_like:.0f}°C, humidity {weather.current.humidity}%)."]
    if weather.forecast:
        lines.append("Coming days:")
        lines.extend(
            f"- {day.date_string}: {day.min_temp:.0f}-{day.max_temp:.0f}°C, {day.conditions}"
            for day in weather.forecast[:FORECAST_DAYS_IN_TEXT]
        )
    lines.append("")
    lines.append(_next_question(context))
    return "\n".join(lines)


def _activity_answer(context: ConversationContext, analysis: TripAnalysis | None) -> str:
    if not context.has_destination:
        return "Tell me where you're headed and I'll suggest activities that suit the weather there."

    if analysis is not None and analysis.recommendations:
        lines = [f"Best times for your activities in {context.destination}:"]
        lines.extend(f"- {rec.activity}: {rec.best_time}" for rec in analysis.recommendations)
        lines.extend(f"- Instead of {alt.original}: {alt.suggested}" for alt in analysis.alternatives)
        return "\n".join(lines)

    ideas = ", ".join(idea.lower() for idea in suggestions_for_stage(Stage.COLLECT_ACTIVITIES)[:ACTIVITY_IDEAS_IN_TEXT])
    return f"Popular things to do in {context.destination} include {ideas}.\n\n{_next_question(context)}"


def fallback_text(
    message: str,
    context: ConversationContext,
    intent: IntentEnvelope,
    weather: WeatherReport | None = None,
    weather_error: str | None = None,
    analysis: TripAnalysis | None = None,
    itinerary: dict[str, Any] | None = None,
) -> str:
    """
    Template reply

    Order: greeting, weather question, activity question, general question
    without a destination, destination without dates, destination + dates
    without activities, everything known, default.
    """
    if intent.intent == "greeting" and not context.has_destination:
        return (
            "Hi there! 👋 I'm your travel planning assistant. I can help you plan your trip "
            "with real-time weather insights and personalized recommendations.\n\n"
            "Where would you like to travel?"
        )

    if intent.intent == "ask_weather":
        return _weather_answer(weather, weather_error, context)

    if intent.intent == "ask_activity":
        return _activity_answer(context, analysis)

    if intent.intent == "ask_general" and not context.has_destination:
        return "Happy to help with that once I know a bit about your trip. Where are you planning to travel?"

    if context.has_destination and not context.has_dates:
        text = f"Great choice! {context.destination} "
        if weather is not None:
            text += f"is currently {_current_weather_phrase(weather)}. "
        if context.partial_date_info:
            month = context.partial_date_info
            text += (
                f"\n\n{month} sounds good. Could you give me specific dates? "
                f'For example, "{month} 15-20" or "{month} 10 to {month} 15".'
            )
        else:
            text += "\n\nWhen are you planning to visit? Please provide your travel dates."
        return text

    if context.has_destination and context.has_dates and not context.has_activities:
        return (
            f"Perfect! You're visiting {context.destination} from {context.travel_dates.start} "
            f"to {context.travel_dates.end}.\n\nWhat activities are you planning to do during your trip?"
        )

    if context.has_destination and context.has_dates and context.has_activities:
        text = (
            f"Awesome! You're visiting {context.destination} from {context.travel_dates.start} "
            f"to {context.travel_dates.end} and you're planning: {', '.join(context.activities)}."
        )
        if weather is not None:
            text += f"\n\nRight now it's {_current_weather_phrase(weather)}."
        else:
            text += "\n\nI couldn't reach the weather service, so recommendations are not weather-aware yet."
        if analysis is not None:
            text += f" {analysis.overall_assessment}"
            if analysis.packing_list:
                text += f"\n\nPack: {', '.join(analysis.packing_list[:6])}."
        if itinerary:
            text += f"\n\n{format_itinerary_preview(itinerary)}"
        text += "\n\nWant a day-by-day suggestion for the best time to do each activity?"
        return text

    return "I'm here to help you plan your trip! To get started, please tell me where you'd like to travel."


def location_not_found_text(location: str) -> str:
    return (
        f'I couldn\'t find weather information for "{location}". Could you please provide a valid '
        f"city name? Try including the country name for better results (e.g., \"Paris, France\")."
    )


# ===== Deterministic suggestions / actions / data =====


def suggestions_from_text(text: str) -> list[str]:
    """Quick replies keyed off lexical cues in the reply"""
    lowered = text.lower()
    suggestions: list[str] = []
    if "destination" in lowered or "where" in lowered:
        suggestions.extend(["Paris, France", "Tokyo, Japan", "New York, USA"])
    if "dates" in lowered or "when" in lowered:
        suggestions.extend(["Next week", "March 15-20", "This weekend"])
    if "activities" in lowered:
        suggestions.extend(["Sightseeing", "Beach activities", "Museums and cafes"])
    return suggestions[:MAX_TEXT_SUGGESTIONS]


def smart_suggestions(analysis: TripAnalysis) -> list[str]:
    suggestions = []
    if analysis.alternatives:
        suggestions.append("View alternative activities")
    if analysis.recommendations:
        suggestions.append("See best days for each activity")
    if analysis.packing_list:
        suggestions.append("View complete packing list")
    suggestions.extend(["Get detailed forecast", "Plan another trip"])
    return suggestions[:MAX_SMART_SUGGESTIONS]


def build_suggestions(stage: Stage, text: str, analysis: TripAnalysis | None = None) -> list[str]:
    if stage == Stage.RESPOND and analysis is not None:
        return smart_suggestions(analysis)
    return suggestions_for_stage(stage) or suggestions_from_text(text)


def build_actions(analysis: TripAnalysis | None) -> list[ResponseAction]:
    if analysis is None:
        return []
    actions = []
    if analysis.conflicts:
        count = len(analysis.conflicts)
        actions.append(
            ResponseAction(
                type="warning",
                message=f"{count} weather conflict{'s' if count != 1 else ''} detected",
                action_text="View alternatives",
            )
        )
    if analysis.recommendations:
        actions.append(
            ResponseAction(type="info", message="Best times identified for your activities", action_text="View schedule")
        )
    return actions


def build_response_data(
    stage: Stage,
    context: ConversationContext,
    weather: WeatherReport | None = None,
    weather_error: str | None = None,
    analysis: TripAnalysis | None = None,
    itinerary: dict[str, Any] | None = None,
) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if weather is not None:
        data["weather"] = weather.model_dump(by_alias=True, mode="json")
    elif weather_error:
        data["weather"] = {"error": weather_error}

    if stage in COLLECTION_STAGES:
        data["collected"] = collected_fields(context)
        data["missing"] = missing_fields(context)
        data["currentStep"] = step_name(stage)

    if analysis is not None:
        data["analysis"] = analysis.model_dump(by_alias=True, mode="json")
    if itinerary is not None:
        data["itinerary"] = itinerary
    return data


# ===== Composer =====


class ResponseComposer:
    """
    LLM-first reply composer with a template fallback

    Args:
        llm: chat model, or None to always use templates
        timeout: seconds allowed for the LLM path
    """

    def __init__(self, llm: BaseChatModel | None = None, timeout: float | None = None):
        self.llm = llm
        self.timeout = timeout

    async def compose(
        self,
        message: str,
        context: ConversationContext,
        stage: Stage,
        intent: IntentEnvelope,
        weather: WeatherReport | None = None,
        weather_error: str | None = None,
        analysis: TripAnalysis | None = None,
        itinerary: dict[str, Any] | None = None,
    ) -> ResponsePayload:
        plan = itinerary if itinerary and "error" not in itinerary else None
        text = await generate_or_fallback(
            self.llm,
            prompt=build_response_prompt(
                message,
                context,
                intent,
                weather=weather,
                weather_error=weather_error,
                analysis=analysis,
                itinerary_preview=format_itinerary_preview(plan) if plan else None,
            ),
            parse=_parse_prose,
            fallback=lambda: fallback_text(message, context, intent, weather, weather_error, analysis, plan),
            label="Composer",
            timeout=self.timeout,
        )
        return ResponsePayload(
            text=text,
            data=build_response_data(stage, context, weather, weather_error, analysis, itinerary),
            suggestions=build_suggestions(stage, text, analysis),
            actions=build_actions(analysis),
        )

    def location_not_found(self, location: str, context: ConversationContext) -> ResponsePayload:
        """Reply used when the weather provider cannot resolve the destination"""
        return ResponsePayload(
            text=location_not_found_text(location),
            data=build_response_data(Stage.COLLECT_DESTINATION, context),
            suggestions=list(LOCATION_NOT_FOUND_SUGGESTIONS),
        )


def _parse_prose(text: str) -> str:
    if not text.strip():
        raise ValueError("Empty reply from model")
    return text
