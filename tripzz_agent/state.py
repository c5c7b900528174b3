"""
Trip Planner State Definitions
==============================
Conversation context, intent envelope and response envelope, plus the
LangGraph turn state passed between nodes.

Design Points:
- Pydantic BaseModel for everything that crosses a component boundary
- snake_case in Python, camelCase on the wire (alias_generator + populate_by_name)
- ContextDelta is the only way to change a stored ConversationContext:
  explicitly-set top-level fields replace the stored value wholesale
  (travel_dates and preferences are never merged field by field)
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Literal, NotRequired, TypedDict

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from tripzz_agent.services.weather import WeatherReport

# Bounded conversation history kept per user
HISTORY_LIMIT = 20

IntentType = Literal["greeting", "provide_info", "ask_weather", "ask_activity", "ask_general", "other"]
ResponseType = Literal["conversational", "detailed_weather", "quick_answer", "ask_for_info"]

CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Stage(str, Enum):
    """Position in the collection dialogue"""

    GREETING = "greeting"
    COLLECT_DESTINATION = "collect_destination"
    COLLECT_DATES = "collect_dates"
    COLLECT_ACTIVITIES = "collect_activities"
    FETCH_WEATHER = "fetch_weather"
    ANALYZE = "analyze"
    RESPOND = "respond"
    ERROR = "error"


# ===== Conversation Context =====


class TravelDates(BaseModel):
    """Closed date interval: both ends set or neither"""

    model_config = CAMEL_CONFIG

    start: date | None = None
    end: date | None = None

    @model_validator(mode="after")
    def _check_complete(self) -> "TravelDates":
        if (self.start is None) != (self.end is None):
            raise ValueError("travel dates need both start and end")
        if self.start is not None and self.end is not None and self.end < self.start:
            raise ValueError("travel end date precedes start date")
        return self

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.end is not None


class Preferences(BaseModel):
    """Optional preferences; never required to advance a stage"""

    model_config = CAMEL_CONFIG

    budget: str | None = Field(default=None, description="budget | moderate | premium | luxury or an amount")
    travel_style: str | None = Field(default=None, description="relaxed | moderate | packed ...")


class HistoryEntry(BaseModel):
    model_config = CAMEL_CONFIG

    role: Literal["user", "assistant"]
    message: str
    timestamp: datetime = Field(default_factory=utcnow)
    stage: str | None = None


class ConversationContext(BaseModel):
    """
    Everything learned about one user's trip so far

    Owned by the ContextStore; other components only ever see copies.
    """

    model_config = CAMEL_CONFIG

    destination: str | None = Field(default=None, description="Normalized place name")
    travel_dates: TravelDates = Field(default_factory=TravelDates)
    partial_date_info: str | None = Field(default=None, description="Bare month name, e.g. 'April'")
    activities: list[str] = Field(default_factory=list)
    preferences: Preferences = Field(default_factory=Preferences)
    conversation_history: list[HistoryEntry] = Field(default_factory=list)

    # Scratch fields
    extracted_info: dict[str, Any] = Field(default_factory=dict)
    last_intent: str | None = None
    last_response: str | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def has_destination(self) -> bool:
        return bool(self.destination)

    @property
    def has_dates(self) -> bool:
        return self.travel_dates.is_complete

    @property
    def has_activities(self) -> bool:
        return len(self.activities) > 0

    def merge(self, delta: "ContextDelta") -> "ConversationContext":
        """
        Shallow, top-level merge of the explicitly-set fields of ``delta``

        A complete date range supersedes a staged month, so setting one
        clears partial_date_info unless the delta sets it too.
        """
        changes = delta.model_dump(exclude_unset=True)
        if "travel_dates" in changes and delta.travel_dates is not None and delta.travel_dates.is_complete:
            changes.setdefault("partial_date_info", None)

        merged = {**self.model_dump(), **changes, "updated_at": utcnow()}
        return ConversationContext.model_validate(merged)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ContextDelta(BaseModel):
    """
    Proposed partial update to a ConversationContext

    Only fields that were explicitly set take part in a merge. An explicit
    ``None`` clears the field (``destination=None`` forgets the destination).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    destination: str | None = None
    travel_dates: TravelDates | None = None
    partial_date_info: str | None = None
    activities: list[str] | None = None
    preferences: Preferences | None = None
    conversation_history: list[HistoryEntry] | None = None
    extracted_info: dict[str, Any] | None = None
    last_intent: str | None = None
    last_response: str | None = None

    @field_validator("travel_dates", "preferences", mode="before")
    @classmethod
    def _none_means_empty_object(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("activities", "conversation_history", mode="before")
    @classmethod
    def _none_means_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("extracted_info", mode="before")
    @classmethod
    def _none_means_empty_dict(cls, value: Any) -> Any:
        return {} if value is None else value

    def is_empty(self) -> bool:
        return not self.model_fields_set


# ===== Intent Envelope =====


class IntentEnvelope(BaseModel):
    """Per-turn classification result; never persisted"""

    model_config = CAMEL_CONFIG

    intent: IntentType
    extracted_info: ContextDelta = Field(default_factory=ContextDelta)
    needs_weather: bool = False
    needs_more_date_info: bool = False
    response_type: ResponseType = "conversational"


# ===== Trip Analysis =====


class WeatherConflict(BaseModel):
    model_config = CAMEL_CONFIG

    activity: str
    issue: str
    severity: Literal["high", "medium", "low"] = "medium"


class ActivityRecommendation(BaseModel):
    model_config = CAMEL_CONFIG

    activity: str
    best_time: str
    reason: str = ""


class ActivityAlternative(BaseModel):
    model_config = CAMEL_CONFIG

    original: str
    suggested: str
    reason: str = ""


class TripAnalysis(BaseModel):
    """Weather-versus-activity assessment for a fully specified trip"""

    model_config = CAMEL_CONFIG

    conflicts: list[WeatherConflict] = Field(default_factory=list)
    recommendations: list[ActivityRecommendation] = Field(default_factory=list)
    alternatives: list[ActivityAlternative] = Field(default_factory=list)
    packing_list: list[str] = Field(default_factory=list)
    overall_assessment: str = ""
    confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    is_ai_generated: bool = False


# ===== Response Envelope =====


class ResponseAction(BaseModel):
    model_config = CAMEL_CONFIG

    type: Literal["warning", "info"]
    message: str
    action_text: str | None = None


class ResponsePayload(BaseModel):
    model_config = CAMEL_CONFIG

    text: str
    data: dict[str, Any] = Field(default_factory=dict)
    suggestions: list[str] = Field(default_factory=list)
    actions: list[ResponseAction] = Field(default_factory=list)


class ResponseEnvelope(BaseModel):
    """Externally visible result of one turn"""

    model_config = CAMEL_CONFIG

    success: bool
    stage: str
    response: ResponsePayload
    context: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utcnow)


# ===== LangGraph Turn State =====


class TurnState(TypedDict):
    """
    State passed between turn-pipeline nodes

    Nodes return dict updates; LangGraph merges them into the state.
    """

    user_id: str
    message: str

    # ===== Classification =====
    context: NotRequired[ConversationContext]
    intent: NotRequired[IntentEnvelope]
    stage: NotRequired[Stage]

    # ===== Weather =====
    weather_target: NotRequired[str | None]
    weather: NotRequired[WeatherReport | None]
    weather_error: NotRequired[str | None]
    location_not_found: NotRequired[str | None]

    # ===== Planning =====
    analysis: NotRequired[TripAnalysis | None]
    itinerary: NotRequired[dict[str, Any] | None]

    # ===== Output =====
    response: NotRequired[ResponsePayload]
    success: NotRequired[bool]
