"""
Unit tests - Response composer
==============================
Template cascade, deterministic suggestions/actions/data and the AI path
"""

import asyncio
from unittest.mock import patch

import pytest

from conftest import make_llm, make_report
from tripzz_agent.nodes.composer import (
    LOCATION_NOT_FOUND_SUGGESTIONS,
    ResponseComposer,
    build_actions,
    build_response_data,
    build_suggestions,
    fallback_text,
    suggestions_from_text,
)
from tripzz_agent.nodes.stage import DESTINATION_SUGGESTIONS
from tripzz_agent.prompts.composer import build_response_prompt
from tripzz_agent.state import (
    ActivityRecommendation,
    ContextDelta,
    ConversationContext,
    IntentEnvelope,
    Stage,
    TripAnalysis,
    WeatherConflict,
)


def context_with(**fields) -> ConversationContext:
    return ConversationContext().merge(ContextDelta.model_validate(fields))


DATES = {"start": "2026-11-01", "end": "2026-11-05"}
GREETING = IntentEnvelope(intent="greeting")
INFO = IntentEnvelope(intent="provide_info")
ASK_WEATHER = IntentEnvelope(intent="ask_weather", needs_weather=True)
OTHER = IntentEnvelope(intent="other")
ASK_ACTIVITY = IntentEnvelope(intent="ask_activity")
ASK_GENERAL = IntentEnvelope(intent="ask_general")


@pytest.fixture
def analysis() -> TripAnalysis:
    return TripAnalysis(
        conflicts=[WeatherConflict(activity="Hiking", issue="High chance of rain", severity="medium")],
        recommendations=[ActivityRecommendation(activity="Hiking", best_time="Tue, Oct 20")],
        packing_list=["Umbrella"],
        overall_assessment="Some weather challenges expected. Review alternatives.",
    )


# ==================== Template cascade ====================


class TestFallbackText:
    def test_greeting(self):
        text = fallback_text("Hi", ConversationContext(), GREETING)
        assert "Where would you like to travel?" in text

    def test_destination_without_dates_asks_for_dates(self):
        text = fallback_text("Goa", context_with(destination="Goa"), INFO, weather=make_report())

        assert text.startswith("Great choice! Goa")
        assert "24°C with sunny" in text
        assert "travel dates" in text

    def test_staged_month_asks_for_days(self):
        text = fallback_text("april", context_with(destination="Goa", partialDateInfo="April"), INFO)

        assert "April sounds good" in text
        assert '"April 15-20"' in text

    def test_destination_and_dates_ask_for_activities(self):
        text = fallback_text("Nov 1-5", context_with(destination="Goa", travelDates=DATES), INFO)

        assert "from 2026-11-01 to 2026-11-05" in text
        assert "What activities" in text

    def test_all_slots_summarize(self, analysis: TripAnalysis):
        context = context_with(destination="Goa", travelDates=DATES, activities=["Hiking", "Museums"])
        text = fallback_text("hiking", context, INFO, weather=make_report(), analysis=analysis)

        assert "you're planning: Hiking, Museums" in text
        assert "Review alternatives" in text
        assert "Pack: Umbrella." in text
        assert "day-by-day" in text

    def test_all_slots_without_weather(self):
        context = context_with(destination="Goa", travelDates=DATES, activities=["Hiking"])
        text = fallback_text("hiking", context, INFO, weather_error="Weather provider is unreachable")

        assert "couldn't reach the weather service" in text

    def test_weather_answer_with_forecast(self):
        text = fallback_text("weather in Goa?", context_with(destination="Goa"), ASK_WEATHER, weather=make_report())

        assert "Right now in Goa, India" in text
        assert "Coming days:" in text
        assert "When are you planning to visit Goa?" in text

    def test_weather_question_without_destination(self):
        text = fallback_text("what's the weather?", ConversationContext(), ASK_WEATHER)
        assert text == "Which city should I check the weather for?"

    def test_activity_question_lists_ideas_for_destination(self):
        text = fallback_text("what can I do there?", context_with(destination="Goa"), ASK_ACTIVITY)

        assert text.startswith("Popular things to do in Goa include sightseeing, hiking, beach.")
        assert "When are you planning to visit Goa?" in text

    def test_activity_question_uses_analysis(self, analysis: TripAnalysis):
        context = context_with(destination="Goa", travelDates=DATES, activities=["Hiking"])

        text = fallback_text("when should I hike?", context, ASK_ACTIVITY, analysis=analysis)

        assert text.splitlines() == ["Best times for your activities in Goa:", "- Hiking: Tue, Oct 20"]

    def test_activity_question_without_destination(self):
        text = fallback_text("what can I do?", ConversationContext(), ASK_ACTIVITY)
        assert "where you're headed" in text

    def test_general_question_differs_from_other(self):
        general = fallback_text("do I need a visa?", ConversationContext(), ASK_GENERAL)

        assert general != fallback_text("do I need a visa?", ConversationContext(), OTHER)
        assert general.endswith("Where are you planning to travel?")

    def test_default_never_touches_missing_fields(self):
        text = fallback_text("???", ConversationContext(), OTHER)
        assert "where you'd like to travel" in text


# ==================== Suggestions / actions / data ====================


class TestSuggestions:
    def test_collection_stage_suggestions(self):
        assert build_suggestions(Stage.COLLECT_DESTINATION, "anything") == DESTINATION_SUGGESTIONS
        assert "Next week" in build_suggestions(Stage.COLLECT_DATES, "anything")

    def test_respond_with_analysis_gets_smart_suggestions(self, analysis: TripAnalysis):
        suggestions = build_suggestions(Stage.RESPOND, "anything", analysis)

        assert suggestions == [
            "See best days for each activity",
            "View complete packing list",
            "Get detailed forecast",
            "Plan another trip",
        ]

    def test_lexical_cues_when_stage_has_none(self):
        suggestions = build_suggestions(Stage.RESPOND, "Which activities and dates suit you?")

        assert suggestions == ["Next week", "March 15-20", "This weekend"]

    def test_text_suggestions_capped(self):
        assert len(suggestions_from_text("Where? When? Which activities?")) == 3


class TestActionsAndData:
    def test_actions_from_analysis(self, analysis: TripAnalysis):
        actions = build_actions(analysis)

        assert [a.type for a in actions] == ["warning", "info"]
        assert actions[0].message == "1 weather conflict detected"
        assert build_actions(None) == []

    def test_collection_data(self):
        data = build_response_data(Stage.COLLECT_DATES, context_with(destination="Goa"))

        assert data["currentStep"] == "Travel Dates"
        assert data["collected"]["destination"] == "Goa"
        assert "start_date" in data["missing"]

    def test_soft_weather_error(self):
        data = build_response_data(Stage.RESPOND, ConversationContext(), weather_error="timeout")

        assert data == {"weather": {"error": "timeout"}}

    def test_weather_and_analysis_in_wire_form(self, analysis: TripAnalysis):
        data = build_response_data(Stage.RESPOND, ConversationContext(), weather=make_report(), analysis=analysis)

        assert data["weather"]["current"]["conditionDescription"] == "Sunny"
        assert data["weather"]["forecast"][0]["dateString"] == "Mon, Oct 19"
        assert data["analysis"]["packingList"] == ["Umbrella"]


# ==================== Composer ====================


class TestResponseComposer:
    def test_ai_text_used_verbatim_with_deterministic_suggestions(self):
        composer = ResponseComposer(make_llm("Goa is lovely in winter! When would you like to go?"))
        context = context_with(destination="Goa")

        payload = asyncio.run(composer.compose("Goa", context, Stage.COLLECT_DATES, INFO))

        assert payload.text == "Goa is lovely in winter! When would you like to go?"
        assert payload.suggestions == ["Next week", "Next month", "This weekend", "In two weeks"]
        assert payload.data["currentStep"] == "Travel Dates"

    @patch("tripzz_agent.middleware.fallback.LLM_MAX_ATTEMPTS", 1)
    def test_llm_failure_uses_template(self):
        composer = ResponseComposer(make_llm(side_effect=RuntimeError("quota exceeded")))

        payload = asyncio.run(composer.compose("Hi", ConversationContext(), Stage.GREETING, GREETING))

        assert "Where would you like to travel?" in payload.text
        assert payload.suggestions == DESTINATION_SUGGESTIONS

    def test_blank_llm_reply_uses_template(self):
        composer = ResponseComposer(make_llm("   "))

        payload = asyncio.run(composer.compose("Hi", ConversationContext(), Stage.GREETING, GREETING))

        assert payload.text.startswith("Hi there!")

    def test_location_not_found_payload(self):
        payload = ResponseComposer().location_not_found("Atlantis", ConversationContext())

        assert '"Atlantis"' in payload.text
        assert payload.suggestions == LOCATION_NOT_FOUND_SUGGESTIONS
        assert payload.data["currentStep"] == "Destination"

    def test_prompt_mentions_question_location_weather(self):
        prompt = build_response_prompt(
            "weather in Paris?",
            context_with(destination="Paris"),
            ASK_WEATHER,
            weather=make_report(location="Paris, France"),
        )

        assert "Current Weather for Paris, France" in prompt
        assert "Intent:** ask_weather" in prompt
