"""
Chat API Router
===============
Chat endpoints backed by the turn graph

POST /api/v1/chat - one turn, JSON ResponseEnvelope
POST /api/v1/chat/stream - the same turn as SSE, with progress events
"""

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sse_starlette.sse import EventSourceResponse

from tripzz_agent.api.dependencies import get_orchestrator
from tripzz_agent.api.schemas import ChatRequest
from tripzz_agent.orchestrator import TurnOrchestrator
from tripzz_agent.state import ResponseEnvelope
from tripzz_agent.utils.progress import reset_progress_callback, set_progress_callback

logger = logging.getLogger(__name__)

router = APIRouter()


def _validate_request(request: ChatRequest) -> None:
    if not request.user_id.strip() or not request.message.strip():
        raise HTTPException(status_code=400, detail="userId and message are required")


@router.post("/chat", response_model=ResponseEnvelope)
async def chat(
    request: ChatRequest,
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
) -> ResponseEnvelope:
    """
    Chat endpoint

    Args:
        request: ChatRequest with userId, message and optional metadata

    Returns:
        ResponseEnvelope; turn failures come back as success=False, stage "error"

    Raises:
        HTTPException: 400 for a blank userId or message
    """
    _validate_request(request)
    logger.info("[Chat] %s: %s", request.user_id, request.message[:80])
    return await orchestrator.handle_turn(request.user_id, request.message, request.metadata)


@router.post("/chat/stream")
async def chat_stream(
    request: ChatRequest,
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
) -> EventSourceResponse:
    """
    SSE chat endpoint

    Same turn as /chat, streamed as Server-Sent Events.

    Event format:
        event: progress  data: {"stage": "weather", "message": "Checking the weather in Goa...", "percent": 40}
        event: complete  data: ResponseEnvelope JSON
    """
    _validate_request(request)

    queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    async def run_turn() -> None:
        token = set_progress_callback(queue.put_nowait)
        try:
            envelope = await orchestrator.handle_turn(request.user_id, request.message, request.metadata)
            await queue.put({"stage": "complete", "data": envelope.model_dump(by_alias=True, mode="json")})
        except Exception as e:
            logger.exception("[Chat] Stream turn failed")
            await queue.put({"stage": "error", "message": str(e)})
        finally:
            reset_progress_callback(token)

    async def event_generator():
        task = asyncio.create_task(run_turn())
        try:
            while True:
                event = await queue.get()
                if event.get("stage") == "complete":
                    yield {"event": "complete", "data": json.dumps(event["data"], ensure_ascii=False)}
                    break
                if event.get("stage") == "error":
                    yield {"event": "error", "data": json.dumps({"message": event.get("message")})}
                    break
                yield {"event": "progress", "data": json.dumps(event, ensure_ascii=False)}
        finally:
            await task

    return EventSourceResponse(event_generator())
