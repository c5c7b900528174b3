"""
API Dependencies
================
Process-wide TurnOrchestrator, injected into routes with Depends()

Tests replace it through app.dependency_overrides[get_orchestrator].
"""

from tripzz_agent.orchestrator import TurnOrchestrator

_orchestrator: TurnOrchestrator | None = None


def get_orchestrator() -> TurnOrchestrator:
    """Return the shared orchestrator, wiring it from the environment on first use"""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = TurnOrchestrator.from_env()
    return _orchestrator
