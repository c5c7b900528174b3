"""
Tripzz Trip Planner Agent
=========================
Conversational trip-planning assistant: collects destination, dates and
activities over several turns, then answers with weather-aware advice

Usage:
    import asyncio
    from tripzz_agent import TurnOrchestrator

    orchestrator = TurnOrchestrator.from_env()
    envelope = asyncio.run(orchestrator.handle_turn("user-1", "I want to visit Goa"))
    print(envelope.response.text)
"""

from tripzz_agent.context import ContextStore
from tripzz_agent.graph import create_turn_graph
from tripzz_agent.orchestrator import TurnOrchestrator
from tripzz_agent.state import ConversationContext, ContextDelta, ResponseEnvelope, Stage

__all__ = [
    "ContextDelta",
    "ContextStore",
    "ConversationContext",
    "ResponseEnvelope",
    "Stage",
    "TurnOrchestrator",
    "create_turn_graph",
]
