"""
Stage Controller
================
Which slot the dialogue needs next

Priority order (not a strict linear walk):
1. Greeting message and no destination -> GREETING
2. First missing slot of destination, dates, activities -> COLLECT_*
3. All slots present -> FETCH_WEATHER (chains into ANALYZE and RESPOND)
"""

from tripzz_agent.extraction import is_greeting
from tripzz_agent.state import ConversationContext, Stage

COLLECTION_STAGES = (Stage.COLLECT_DESTINATION, Stage.COLLECT_DATES, Stage.COLLECT_ACTIVITIES)

STEP_NAMES: dict[Stage, str] = {
    Stage.COLLECT_DESTINATION: "Destination",
    Stage.COLLECT_DATES: "Travel Dates",
    Stage.COLLECT_ACTIVITIES: "Activities",
}

DESTINATION_SUGGESTIONS = ["Paris, France", "Tokyo, Japan", "New York, USA", "London, UK"]

STAGE_SUGGESTIONS: dict[Stage, list[str]] = {
    Stage.GREETING: DESTINATION_SUGGESTIONS,
    Stage.COLLECT_DESTINATION: DESTINATION_SUGGESTIONS,
    Stage.COLLECT_DATES: ["Next week", "Next month", "This weekend", "In two weeks"],
    Stage.COLLECT_ACTIVITIES: ["Sightseeing", "Hiking", "Beach", "Museums", "Shopping", "Photography"],
}


def determine_stage(context: ConversationContext, message: str = "") -> Stage:
    """
    Stage for the current turn

    Args:
        context: merged context for this turn
        message: raw user message (only the greeting check reads it)
    """
    if is_greeting(message) and not context.has_destination:
        return Stage.GREETING
    if not context.has_destination:
        return Stage.COLLECT_DESTINATION
    if not context.has_dates:
        return Stage.COLLECT_DATES
    if not context.has_activities:
        return Stage.COLLECT_ACTIVITIES
    return Stage.FETCH_WEATHER


def missing_fields(context: ConversationContext) -> list[str]:
    missing = []
    if not context.has_destination:
        missing.append("destination")
    if context.travel_dates.start is None:
        missing.append("start_date")
    if context.travel_dates.end is None:
        missing.append("end_date")
    if not context.has_activities:
        missing.append("activities")
    return missing


def collected_fields(context: ConversationContext) -> dict[str, object]:
    """Slots gathered so far, in wire form"""
    return {
        "destination": context.destination,
        "travelDates": context.travel_dates.model_dump(by_alias=True, mode="json"),
        "partialDateInfo": context.partial_date_info,
        "activities": list(context.activities),
    }


def step_name(stage: Stage) -> str | None:
    return STEP_NAMES.get(stage)


def suggestions_for_stage(stage: Stage) -> list[str]:
    return list(STAGE_SUGGESTIONS.get(stage, []))
