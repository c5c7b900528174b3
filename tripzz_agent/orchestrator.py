"""
Turn Orchestrator
=================
Runs one chat turn end to end and always returns a ResponseEnvelope

Steps:
1. Merge recognized client metadata into the context
2. Invoke the turn graph (classify -> merge -> weather -> analyze -> compose)
3. Record the user/assistant turn in the bounded history, plus
   last_intent and last_response
4. Any unhandled exception becomes the generic error envelope

Usage:
    orchestrator = TurnOrchestrator.from_env()
    envelope = await orchestrator.handle_turn("u1", "I want to visit Goa")
"""

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from pydantic import ValidationError

from tripzz_agent.context.store import ContextStore
from tripzz_agent.extraction import normalize_activities, normalize_destination
from tripzz_agent.graph import create_turn_graph
from tripzz_agent.llm.factory import get_optional_llm
from tripzz_agent.nodes.analyzer import TripAnalyzer
from tripzz_agent.nodes.classifier import IntentClassifier
from tripzz_agent.nodes.composer import ResponseComposer
from tripzz_agent.services.itinerary import ItineraryClient
from tripzz_agent.services.weather import WeatherProvider, WeatherStackClient
from tripzz_agent.state import (
    ContextDelta,
    HistoryEntry,
    ResponseEnvelope,
    ResponsePayload,
    Stage,
)

logger = logging.getLogger(__name__)

ERROR_TEXT = "Sorry, something went wrong. Please try again."
ERROR_SUGGESTIONS = ["Try again", "Start over"]


def error_envelope() -> ResponseEnvelope:
    """Envelope returned when a turn fails unexpectedly"""
    return ResponseEnvelope(
        success=False,
        stage=Stage.ERROR.value,
        response=ResponsePayload(text=ERROR_TEXT, suggestions=list(ERROR_SUGGESTIONS)),
        context={},
    )


def metadata_to_delta(metadata: dict[str, Any], current_preferences: dict[str, Any] | None = None) -> ContextDelta:
    """
    Translate client metadata into a context delta

    Recognized keys (camelCase or snake_case): destination, travelDates,
    startDate + endDate, partialDateInfo, activities (or interests),
    preferences, budget, travelStyle. Unknown keys are ignored.

    Args:
        metadata: request metadata
        current_preferences: stored preferences, merged with budget/travelStyle

    Raises:
        ValidationError: a recognized key carries an invalid value
    """
    changes: dict[str, Any] = {}

    raw_destination = metadata.get("destination")
    destination = normalize_destination(raw_destination) if isinstance(raw_destination, str) else None
    if destination:
        changes["destination"] = destination

    dates = metadata.get("travelDates", metadata.get("travel_dates"))
    if dates is None and metadata.get("startDate") and metadata.get("endDate"):
        dates = {"start": metadata["startDate"], "end": metadata["endDate"]}
    if dates is not None:
        changes["travel_dates"] = dates

    partial = metadata.get("partialDateInfo", metadata.get("partial_date_info"))
    if partial:
        changes["partial_date_info"] = str(partial).capitalize()

    activities = metadata.get("activities", metadata.get("interests"))
    if isinstance(activities, str):
        activities = [activities]
    if isinstance(activities, list):
        cleaned = normalize_activities([str(a) for a in activities])
        if cleaned:
            changes["activities"] = cleaned

    preferences = dict(current_preferences or {})
    if isinstance(metadata.get("preferences"), dict):
        preferences.update(metadata["preferences"])
    for key, field in (("budget", "budget"), ("travelStyle", "travel_style"), ("travel_style", "travel_style")):
        if metadata.get(key):
            preferences[field] = metadata[key]
    if preferences != (current_preferences or {}):
        changes["preferences"] = preferences

    return ContextDelta.model_validate(changes)


class TurnOrchestrator:
    """
    Owns the turn graph and the context store

    Args:
        store: context store
        classifier: intent classifier
        composer: response composer
        analyzer: trip analyzer
        weather: weather provider
        itinerary: itinerary client (optional)
    """

    def __init__(
        self,
        store: ContextStore,
        classifier: IntentClassifier,
        composer: ResponseComposer,
        analyzer: TripAnalyzer,
        weather: WeatherProvider,
        itinerary: ItineraryClient | None = None,
    ):
        self.store = store
        self.graph = create_turn_graph(store, classifier, composer, analyzer, weather, itinerary)

    @classmethod
    def from_env(
        cls,
        store: ContextStore | None = None,
        today: Callable[[], date] = date.today,
    ) -> "TurnOrchestrator":
        """Default wiring: configured LLM (if any), WeatherStack, itinerary service"""
        precise_llm = get_optional_llm(temperature=0.0)
        creative_llm = get_optional_llm(temperature=0.7)
        return cls(
            store=store or ContextStore(),
            classifier=IntentClassifier(precise_llm, today=today),
            composer=ResponseComposer(creative_llm),
            analyzer=TripAnalyzer(precise_llm),
            weather=WeatherStackClient(today=today),
            itinerary=ItineraryClient(),
        )

    def _apply_metadata(self, user_id: str, metadata: dict[str, Any]) -> None:
        current = self.store.get_context(user_id)
        try:
            delta = metadata_to_delta(metadata, current.preferences.model_dump(exclude_none=True))
        except ValidationError as e:
            logger.warning("[Orchestrator] Ignoring invalid metadata for %s: %s", user_id, e)
            return
        if not delta.is_empty():
            self.store.update_context(user_id, delta)
            logger.info("[Orchestrator] Metadata merged for %s: %s", user_id, sorted(delta.model_fields_set))

    async def handle_turn(
        self,
        user_id: str,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> ResponseEnvelope:
        """
        Process one user message

        Args:
            user_id: conversation owner
            message: raw user text
            metadata: optional client-side slot values

        Returns:
            ResponseEnvelope; success=False with stage "error" on unexpected failures
        """
        try:
            if metadata:
                self._apply_metadata(user_id, metadata)

            result = await self.graph.ainvoke({"user_id": user_id, "message": message})

            response: ResponsePayload = result["response"]
            stage: Stage = result["stage"]

            self.store.append_history(
                user_id,
                [
                    HistoryEntry(role="user", message=message, stage=stage.value),
                    HistoryEntry(role="assistant", message=response.text, stage=stage.value),
                ],
            )
            context = self.store.update_context(
                user_id,
                ContextDelta(last_intent=result["intent"].intent, last_response=response.text),
            )

            logger.info("[Orchestrator] %s -> stage=%s success=%s", user_id, stage.value, result.get("success", True))
            return ResponseEnvelope(
                success=result.get("success", True),
                stage=stage.value,
                response=response,
                context=context.to_wire(),
            )
        except Exception:
            logger.exception("[Orchestrator] Turn failed for %s", user_id)
            return error_envelope()
