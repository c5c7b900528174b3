"""
Intent Classifier
=================
Greeting, information, direct question or other -- plus any slots the
message carries

Primary path: LLM prompt (message, context snapshot, last 3 history turns)
parsed into an IntentEnvelope. Fallback path: fallback_intent(), a
deterministic cascade over the slot extractors. Both produce the same
envelope shape.
"""

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from langchain_core.language_models import BaseChatModel

from tripzz_agent.extraction import (
    extract_activities,
    extract_date_range,
    extract_day_range,
    extract_destination,
    extract_month,
    extract_weather_location,
    is_greeting,
    is_weather_question,
    normalize_activities,
    normalize_destination,
)
from tripzz_agent.middleware.fallback import extract_json_block, generate_or_fallback
from tripzz_agent.prompts.classifier import build_intent_prompt
from tripzz_agent.state import ContextDelta, ConversationContext, IntentEnvelope

logger = logging.getLogger(__name__)


# ===== Primary path: parse the LLM reply =====


def _clean_extracted_info(info: Any) -> dict[str, Any]:
    """Drop empty values and repair what the model commonly gets wrong"""
    if not isinstance(info, dict):
        return {}

    cleaned = {key: value for key, value in info.items() if value not in (None, "", "null", [], {})}

    if "destination" in cleaned:
        destination = normalize_destination(str(cleaned["destination"]))
        if destination:
            cleaned["destination"] = destination
        else:
            del cleaned["destination"]

    if "activities" in cleaned:
        raw = cleaned["activities"]
        activities = normalize_activities([str(a) for a in raw]) if isinstance(raw, list) else extract_activities(str(raw))
        if activities:
            cleaned["activities"] = activities
        else:
            del cleaned["activities"]

    dates_key = "travelDates" if "travelDates" in cleaned else "travel_dates"
    dates = cleaned.get(dates_key)
    if dates is not None and not (isinstance(dates, dict) and dates.get("start") and dates.get("end")):
        del cleaned[dates_key]

    month_key = "partialDateInfo" if "partialDateInfo" in cleaned else "partial_date_info"
    if month_key in cleaned:
        cleaned[month_key] = str(cleaned[month_key]).strip().capitalize()

    return cleaned


def parse_intent_response(text: str) -> IntentEnvelope:
    """
    Parse an LLM classification reply

    Raises:
        ValueError: no JSON, invalid JSON, or a missing/unknown intent
    """
    data = extract_json_block(text)
    info = data.pop("extractedInfo", data.pop("extracted_info", {}))
    data["extractedInfo"] = _clean_extracted_info(info)

    envelope = IntentEnvelope.model_validate(data)
    logger.info("[Classifier] Parsed intent: %s", envelope.intent)
    return envelope


# ===== Fallback path =====


def fallback_intent(message: str, context: ConversationContext, today: date | None = None) -> IntentEnvelope:
    """
    Deterministic classification

    Order:
    1. greeting
    2. destination (when none is known yet)
    3. activities (destination + dates known, non-weather message)
    4. date range / day range for a staged month / bare month (destination known, no dates)
    5. weather question, with any location it names
    6. other
    """
    today = today or date.today()
    message = message or ""

    if is_greeting(message):
        return IntentEnvelope(intent="greeting", response_type="conversational")

    if not context.has_destination:
        destination = extract_destination(message)
        if destination:
            return IntentEnvelope(
                intent="provide_info",
                extracted_info=ContextDelta(destination=destination),
                needs_weather=True,
                response_type="ask_for_info",
            )

    if context.has_destination and context.has_dates and not context.has_activities and not is_weather_question(message):
        activities = extract_activities(message)
        if activities:
            return IntentEnvelope(
                intent="provide_info",
                extracted_info=ContextDelta(activities=activities),
                needs_weather=True,
                response_type="conversational",
            )

    if context.has_destination and not context.has_dates:
        travel_dates = extract_date_range(message, today) or extract_day_range(
            message, context.partial_date_info, today
        )
        if travel_dates:
            return IntentEnvelope(
                intent="provide_info",
                extracted_info=ContextDelta(travel_dates=travel_dates),
                response_type="ask_for_info",
            )

        month = extract_month(message)
        if month:
            return IntentEnvelope(
                intent="provide_info",
                extracted_info=ContextDelta(partial_date_info=month),
                needs_more_date_info=True,
                response_type="ask_for_info",
            )

    if is_weather_question(message):
        location = extract_weather_location(message)
        return IntentEnvelope(
            intent="ask_weather",
            extracted_info=ContextDelta(destination=location) if location else ContextDelta(),
            needs_weather=True,
            response_type="detailed_weather",
        )

    return IntentEnvelope(intent="other", needs_weather=context.has_destination, response_type="conversational")


# ===== Classifier =====


class IntentClassifier:
    """
    LLM-first intent classifier with a deterministic fallback

    Args:
        llm: chat model, or None to always use the rules
        timeout: seconds allowed for the LLM path
        today: date provider (injected for tests)
    """

    def __init__(
        self,
        llm: BaseChatModel | None = None,
        timeout: float | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.llm = llm
        self.timeout = timeout
        self._today = today

    async def classify(self, message: str, context: ConversationContext) -> IntentEnvelope:
        today = self._today()
        envelope = await generate_or_fallback(
            self.llm,
            prompt=build_intent_prompt(message, context, today),
            parse=parse_intent_response,
            fallback=lambda: fallback_intent(message, context, today),
            label="Classifier",
            timeout=self.timeout,
        )
        logger.info(
            "[Classifier] intent=%s needs_weather=%s extracted=%s",
            envelope.intent,
            envelope.needs_weather,
            sorted(envelope.extracted_info.model_fields_set),
        )
        return envelope
