"""
Trip Planner Turn Graph
=======================
LangGraph workflow for one chat turn

Flow:
1. classify: snapshot the context, classify the message
2. merge: merge extracted slots into the store, decide the stage
3. route_after_merge: weather needed -> fetch_weather, otherwise compose
4. fetch_weather: weather for the message-level location, else the context destination
5. route_after_weather: location not found -> compose (back to COLLECT_DESTINATION);
   all slots + weather -> analyze; otherwise compose
6. analyze -> plan_itinerary (when the itinerary service is configured) -> compose

Usage:
    graph = create_turn_graph(store, classifier, composer, analyzer, weather_client)
    result = await graph.ainvoke({"user_id": "u1", "message": "Goa"})
"""

import logging
from typing import Any

from langgraph.graph import END, StateGraph

from tripzz_agent.context.store import ContextStore
from tripzz_agent.nodes.analyzer import TripAnalyzer
from tripzz_agent.nodes.classifier import IntentClassifier
from tripzz_agent.nodes.composer import ResponseComposer
from tripzz_agent.nodes.stage import determine_stage
from tripzz_agent.services.itinerary import ItineraryClient, ItineraryServiceError, build_itinerary_request
from tripzz_agent.services.weather import (
    WEATHER_FORECAST_DAYS,
    LocationNotFoundError,
    WeatherProvider,
    WeatherServiceError,
    fetch_weather_report,
)
from tripzz_agent.state import ContextDelta, Stage, TurnState
from tripzz_agent.utils.progress import emit_progress

logger = logging.getLogger(__name__)

NO_DESTINATION_ERROR = "No destination specified"


def route_after_merge(state: TurnState) -> str:
    """
    Weather is fetched when every slot is known or the turn asks for it

    Returns:
        "fetch_weather" or "compose"
    """
    intent = state.get("intent")
    if state.get("stage") == Stage.FETCH_WEATHER or (intent is not None and intent.needs_weather):
        return "fetch_weather"
    return "compose"


def route_after_weather(state: TurnState) -> str:
    """
    Returns:
        "analyze" when all slots and weather are present, otherwise "compose"
    """
    if state.get("location_not_found"):
        return "compose"
    if state.get("stage") == Stage.FETCH_WEATHER and state.get("weather") is not None:
        return "analyze"
    return "compose"


def create_turn_graph(
    store: ContextStore,
    classifier: IntentClassifier,
    composer: ResponseComposer,
    analyzer: TripAnalyzer,
    weather: WeatherProvider,
    itinerary: ItineraryClient | None = None,
    forecast_days: int = WEATHER_FORECAST_DAYS,
) -> Any:
    """
    Build the turn workflow

    Args:
        store: context store (the only owner of conversation state)
        classifier: intent classifier
        composer: response composer
        analyzer: trip analyzer
        weather: weather provider
        itinerary: itinerary client; None or disabled skips the itinerary step
        forecast_days: forecast length requested from the provider

    Returns:
        Compiled LangGraph application
    """

    async def classify_node(state: TurnState) -> dict[str, Any]:
        emit_progress("classify", "Understanding your message...", 10)
        context = store.get_context(state["user_id"])
        intent = await classifier.classify(state["message"], context)
        return {"context": context, "intent": intent}

    def merge_node(state: TurnState) -> dict[str, Any]:
        user_id = state["user_id"]
        intent = state["intent"]
        context = state["context"]
        delta = intent.extracted_info

        if not delta.is_empty():
            changes = delta.model_dump(exclude_unset=True)
            changes["extracted_info"] = delta.model_dump(by_alias=True, mode="json", exclude_unset=True)
            context = store.update_context(user_id, ContextDelta.model_validate(changes))
            logger.info("[Graph] Merged %s for %s", sorted(delta.model_fields_set), user_id)

        stage = determine_stage(context, state["message"])
        emit_progress("merge", f"Stage: {stage.value}", 20)
        return {
            "context": context,
            "stage": stage,
            "weather_target": delta.destination or context.destination,
        }

    async def fetch_weather_node(state: TurnState) -> dict[str, Any]:
        target = state.get("weather_target")
        if not target:
            return {"weather": None, "weather_error": NO_DESTINATION_ERROR}

        emit_progress("weather", f"Checking the weather in {target}...", 40, location=target)
        try:
            report = await fetch_weather_report(weather, target, forecast_days)
        except LocationNotFoundError as e:
            logger.warning("[Graph] Location not found: %s (%s)", target, e)
            context = store.update_context(state["user_id"], ContextDelta(destination=None))
            return {
                "context": context,
                "stage": Stage.COLLECT_DESTINATION,
                "weather": None,
                "location_not_found": target,
            }
        except WeatherServiceError as e:
            logger.warning("[Graph] Weather unavailable for %s: %s", target, e)
            return {"weather": None, "weather_error": str(e)}

        return {"weather": report, "weather_error": None}

    async def analyze_node(state: TurnState) -> dict[str, Any]:
        emit_progress("analyze", "Matching your activities with the forecast...", 60)
        analysis = await analyzer.analyze(state["context"], state["weather"])
        return {"analysis": analysis, "stage": Stage.ANALYZE}

    def route_after_analysis(state: TurnState) -> str:
        return "plan_itinerary" if itinerary is not None and itinerary.enabled else "compose"

    async def plan_itinerary_node(state: TurnState) -> dict[str, Any]:
        emit_progress("itinerary", "Drafting your itinerary...", 75)
        try:
            request = build_itinerary_request(state["context"])
            plan = await itinerary.generate(request)
        except (ValueError, ItineraryServiceError) as e:
            logger.warning("[Graph] Itinerary unavailable: %s", e)
            plan = {"error": str(e)}
        return {"itinerary": plan}

    async def compose_node(state: TurnState) -> dict[str, Any]:
        emit_progress("compose", "Writing your answer...", 90)
        context = state["context"]

        missing_location = state.get("location_not_found")
        if missing_location:
            return {
                "response": composer.location_not_found(missing_location, context),
                "stage": Stage.COLLECT_DESTINATION,
                "success": False,
            }

        stage = state["stage"]
        if stage in (Stage.FETCH_WEATHER, Stage.ANALYZE):
            stage = Stage.RESPOND

        response = await composer.compose(
            state["message"],
            context,
            stage,
            state["intent"],
            weather=state.get("weather"),
            weather_error=state.get("weather_error"),
            analysis=state.get("analysis"),
            itinerary=state.get("itinerary"),
        )
        return {"response": response, "stage": stage, "success": True}

    workflow = StateGraph(TurnState)

    workflow.add_node("classify", classify_node)
    workflow.add_node("merge", merge_node)
    workflow.add_node("fetch_weather", fetch_weather_node)
    workflow.add_node("analyze", analyze_node)
    workflow.add_node("plan_itinerary", plan_itinerary_node)
    workflow.add_node("compose", compose_node)

    workflow.set_entry_point("classify")
    workflow.add_edge("classify", "merge")

    workflow.add_conditional_edges(
        "merge",
        route_after_merge,
        {"fetch_weather": "fetch_weather", "compose": "compose"},
    )
    workflow.add_conditional_edges(
        "fetch_weather",
        route_after_weather,
        {"analyze": "analyze", "compose": "compose"},
    )
    workflow.add_conditional_edges(
        "analyze",
        route_after_analysis,
        {"plan_itinerary": "plan_itinerary", "compose": "compose"},
    )

    workflow.add_edge("plan_itinerary", "compose")
    workflow.add_edge("compose", END)

    return workflow.compile()


__all__ = [
    "create_turn_graph",
    "route_after_merge",
    "route_after_weather",
]
