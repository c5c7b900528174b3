"""
Utilities
=========
Progress events for the streaming chat endpoint
"""

from tripzz_agent.utils.progress import emit_progress, reset_progress_callback, set_progress_callback

__all__ = [
    "emit_progress",
    "reset_progress_callback",
    "set_progress_callback",
]
