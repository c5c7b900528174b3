"""
Tripzz Agent API
================
FastAPI interface layer

Endpoints:
- GET /health - health check
- POST /api/v1/chat - chat turn
- POST /api/v1/chat/stream - chat turn over SSE
- /api/v1/context/{user_id} - context inspection and reset
"""

from tripzz_agent.api.main import app

__all__ = ["app"]
