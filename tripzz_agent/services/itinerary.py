"""
Itinerary Pipeline Client
=========================
Hand a finished trip request to the downstream itinerary/budget service

Request: {destination, startDate, endDate, interests[], totalBudget, memberCount, pace}
Response: day-by-day plan with per-day and per-activity costs

The call is made only when ITINERARY_API_URL is set. Failures are soft:
the turn carries {"error": ...} instead of a plan.
"""

import logging
import os
from datetime import date
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tripzz_agent.state import ConversationContext

logger = logging.getLogger(__name__)

ITINERARY_TIMEOUT_SECONDS = float(os.getenv("ITINERARY_TIMEOUT_SECONDS", "30"))
PREVIEW_DAYS = 2
PREVIEW_ACTIVITIES_PER_DAY = 3

# Budget label -> total trip budget
BUDGET_AMOUNTS = {
    "budget": 25000,
    "moderate": 50000,
    "premium": 100000,
    "luxury": 200000,
}
DEFAULT_BUDGET = BUDGET_AMOUNTS["moderate"]

PACE_BY_STYLE = {
    "relaxed": "relaxed",
    "slow": "relaxed",
    "leisurely": "relaxed",
    "moderate": "moderate",
    "balanced": "moderate",
    "packed": "fast",
    "fast": "fast",
    "adventurous": "fast",
}
DEFAULT_PACE = "moderate"


class ItineraryServiceError(Exception):
    """Exception raised when the itinerary service cannot produce a plan"""

    pass


class ItineraryRequest(BaseModel):
    """Finalized trip request sent downstream"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    destination: str
    start_date: date
    end_date: date
    interests: list[str] = Field(default_factory=list)
    total_budget: int = DEFAULT_BUDGET
    member_count: int = Field(default=1, ge=1)
    pace: str = DEFAULT_PACE


def resolve_budget(budget: str | None) -> int:
    """'premium' -> 100000, '75000' -> 75000, unknown -> moderate"""
    if not budget:
        return DEFAULT_BUDGET
    label = budget.strip().lower()
    if label in BUDGET_AMOUNTS:
        return BUDGET_AMOUNTS[label]
    digits = label.replace(",", "").lstrip("$")
    return int(float(digits)) if digits.replace(".", "", 1).isdigit() else DEFAULT_BUDGET


def resolve_pace(travel_style: str | None) -> str:
    if not travel_style:
        return DEFAULT_PACE
    return PACE_BY_STYLE.get(travel_style.strip().lower(), DEFAULT_PACE)


def build_itinerary_request(context: ConversationContext) -> ItineraryRequest:
    """
    Trip request from a fully collected context

    Raises:
        ValueError: destination, dates or activities missing
    """
    if not (context.has_destination and context.has_dates and context.has_activities):
        raise ValueError("itinerary needs destination, travel dates and activities")

    return ItineraryRequest(
        destination=context.destination,
        start_date=context.travel_dates.start,
        end_date=context.travel_dates.end,
        interests=list(context.activities),
        total_budget=resolve_budget(context.preferences.budget),
        pace=resolve_pace(context.preferences.travel_style),
    )


class ItineraryClient:
    """
    Async client for the itinerary service

    Args:
        base_url: endpoint URL (default ITINERARY_API_URL; empty disables the client)
        timeout: request timeout in seconds
        transport: optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = ITINERARY_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url if base_url is not None else os.getenv("ITINERARY_API_URL", "")
        self.timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    async def generate(self, request: ItineraryRequest) -> dict[str, Any]:
        """
        Request a day-by-day plan

        Raises:
            ItineraryServiceError: disabled client, HTTP or transport failure, bad payload
        """
        if not self.enabled:
            raise ItineraryServiceError("ITINERARY_API_URL is not configured")

        payload = request.model_dump(by_alias=True, mode="json")
        logger.info("[Itinerary] Requesting plan for %s (%s)", request.destination, request.pace)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.base_url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[Itinerary] HTTP error: {e.response.status_code}")
            raise ItineraryServiceError(f"Itinerary service returned HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"[Itinerary] Request error: {e}")
            raise ItineraryServiceError("Itinerary service is unreachable") from e
        except ValueError as e:
            raise ItineraryServiceError("Itinerary service returned malformed data") from e

        if not isinstance(data, dict):
            raise ItineraryServiceError("Itinerary service returned malformed data")
        # Some deployments wrap the plan as {"itinerary": {...}}
        return data.get("itinerary", data) if isinstance(data.get("itinerary"), dict) else data


def format_itinerary_preview(itinerary: dict[str, Any]) -> str:
    """Short text preview: headline plus the first days of the plan"""
    lines = [f"Your {itinerary.get('destination', 'trip')} itinerary is ready!"]
    if itinerary.get("totalDays"):
        lines.append(f"Duration: {itinerary['totalDays']} days")
    total_budget = (itinerary.get("budgetStatus") or {}).get("totalBudget")
    if total_budget:
        lines.append(f"Budget: {total_budget}")

    days = (itinerary.get("plan") or {}).get("days") or []
    for index, day in enumerate(days[:PREVIEW_DAYS], start=1):
        lines.append(f"Day {index}: {day.get('theme') or 'Exploration'}")
        for activity in (day.get("activities") or [])[:PREVIEW_ACTIVITIES_PER_DAY]:
            lines.append(f"  - {activity.get('name') or activity.get('time') or 'Activity'}")
    if len(days) > PREVIEW_DAYS:
        lines.append(f"... and {len(days) - PREVIEW_DAYS} more days")
    return "\n".join(lines)
