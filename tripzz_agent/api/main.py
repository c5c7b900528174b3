"""
Tripzz Agent API - FastAPI entry point
======================================
REST interface of the trip-planning assistant

Endpoints:
- GET /health - health check
- POST /api/v1/chat - one chat turn
- POST /api/v1/chat/stream - one chat turn as SSE
- GET/POST/DELETE /api/v1/context/{user_id} - conversation context

Run:
    uvicorn tripzz_agent.api.main:app --reload --port 8000
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tripzz_agent.api.dependencies import get_orchestrator
from tripzz_agent.api.schemas import HealthResponse
from tripzz_agent.orchestrator import TurnOrchestrator

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Start the context sweep on startup, stop it on shutdown"""
    orchestrator = app.dependency_overrides.get(get_orchestrator, get_orchestrator)()
    logger.info("Tripzz Agent API starting...")
    await orchestrator.store.start()

    yield

    await orchestrator.store.stop()
    logger.info("Tripzz Agent API shutting down...")


app = FastAPI(
    title="Tripzz Agent API",
    description="Conversational trip planner with weather-aware recommendations",
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===== Health Check =====


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check(orchestrator: TurnOrchestrator = Depends(get_orchestrator)) -> HealthResponse:
    """
    Health check

    Returns:
        Service status, version and the number of live contexts
    """
    return HealthResponse(status="healthy", version=API_VERSION, active_contexts=len(orchestrator.store))


# ===== Routers =====
# Imported late to avoid circular imports


def register_routers() -> None:
    """Register API routers"""
    from tripzz_agent.api.routers import chat, context

    app.include_router(chat.router, prefix="/api/v1", tags=["chat"])
    app.include_router(context.router, prefix="/api/v1", tags=["context"])


register_routers()


# ===== Entry point =====

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tripzz_agent.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
