"""
API Request/Response Schemas
============================
Pydantic models for the HTTP layer (camelCase on the wire)
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# ===== Chat API =====


class ChatRequest(BaseModel):
    """Chat request"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [{"userId": "user-123", "message": "I want to visit Goa", "metadata": {}}]
        },
    )

    user_id: str = Field(default="", description="Conversation owner")
    message: str = Field(default="", description="User message; blank messages are rejected")
    metadata: dict[str, Any] | None = Field(
        default=None,
        description="Optional slot values (destination, travelDates, activities, budget, travelStyle)",
    )


# ===== Context API =====


class ContextResponse(BaseModel):
    """Stored conversation context"""

    success: bool = Field(default=True)
    context: dict[str, Any] = Field(description="ConversationContext in wire form")


class ClearContextResponse(BaseModel):
    success: bool = Field(default=True)
    message: str = Field(description="Confirmation text")


# ===== Health API =====


class HealthResponse(BaseModel):
    """Health response"""

    status: str = Field(default="healthy", description="Service status")
    version: str = Field(default="1.0.0", description="API version")
    active_contexts: int = Field(default=0, description="Contexts currently held in memory")
