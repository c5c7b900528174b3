"""
Progress Callback Module
========================
ContextVar-based progress events for the SSE chat stream

Usage:
1. The endpoint registers a callback: token = set_progress_callback(callback)
2. Graph nodes report progress: emit_progress("weather", "Checking the weather...", 40)
3. The endpoint resets it: reset_progress_callback(token)

Without a registered callback, events are only logged.
"""

import contextvars
import logging
import sys
from collections.abc import Callable
from typing import Any

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("progress")

ProgressCallback = Callable[[dict[str, Any]], None]

# Turn graph steps, in execution order
TURN_STEPS = ("classify", "merge", "weather", "analyze", "itinerary", "compose")

# Per-task callback (each request runs in its own context)
_progress_callback: contextvars.ContextVar[ProgressCallback | None] = contextvars.ContextVar(
    "progress_callback", default=None
)


def set_progress_callback(
    callback: ProgressCallback | None,
) -> contextvars.Token[ProgressCallback | None]:
    """
    Register the progress callback for the current context

    Args:
        callback: receives each event dict

    Returns:
        Token for reset_progress_callback()

    Example:
        token = set_progress_callback(queue.put_nowait)
        try:
            await orchestrator.handle_turn(user_id, message)
        finally:
            reset_progress_callback(token)
    """
    return _progress_callback.set(callback)


def reset_progress_callback(token: contextvars.Token[ProgressCallback | None]) -> None:
    _progress_callback.reset(token)


def get_progress_callback() -> ProgressCallback | None:
    return _progress_callback.get()


def emit_progress(
    step: str,
    message: str,
    percent: int = 0,
    **extra: Any,
) -> None:
    """
    Report one turn step to the registered callback

    Args:
        step: one of TURN_STEPS
        message: user-readable progress text
        percent: clamped to 0-100
        **extra: additional fields (e.g. location)
    """
    if step not in TURN_STEPS:
        logger.debug("[Progress] Unknown step %r", step)

    event: dict[str, Any] = {"stage": step, "message": message, "percent": max(0, min(100, percent)), **extra}

    callback = get_progress_callback()
    if callback is None:
        logger.info("[Progress] %s: %s (%s%%)", step, message, event["percent"])
        return
    try:
        callback(event)
    except Exception as e:
        # A full or closed stream must not break the turn
        logger.warning("[Progress] Dropped %s event: %s", step, e)
