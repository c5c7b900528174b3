"""
Context API Router
==================
Inspect, patch and clear a user's conversation context

GET    /api/v1/context/{user_id}
POST   /api/v1/context/{user_id}  - partial ContextDelta body, merged wholesale per field
DELETE /api/v1/context/{user_id}
"""

import logging

from fastapi import APIRouter, Depends

from tripzz_agent.api.dependencies import get_orchestrator
from tripzz_agent.api.schemas import ClearContextResponse, ContextResponse
from tripzz_agent.orchestrator import TurnOrchestrator
from tripzz_agent.state import ContextDelta

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/context/{user_id}", response_model=ContextResponse)
async def get_context(
    user_id: str,
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
) -> ContextResponse:
    context = orchestrator.store.get_context(user_id)
    return ContextResponse(context=context.to_wire())


@router.post("/context/{user_id}", response_model=ContextResponse)
async def update_context(
    user_id: str,
    delta: ContextDelta,
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
) -> ContextResponse:
    """
    Merge a partial update into the context

    Only fields present in the body are applied; an explicit null clears the field.
    """
    context = orchestrator.store.update_context(user_id, delta)
    logger.info("[Context] Updated %s for %s", sorted(delta.model_fields_set), user_id)
    return ContextResponse(context=context.to_wire())


@router.delete("/context/{user_id}", response_model=ClearContextResponse)
async def clear_context(
    user_id: str,
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
) -> ClearContextResponse:
    orchestrator.store.clear_context(user_id)
    return ClearContextResponse(message="Conversation context cleared")
