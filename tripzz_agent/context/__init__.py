"""
Context Store Module
====================
Per-user conversation state with idle expiry

Usage:
    from tripzz_agent.context import ContextStore

    store = ContextStore()
    context = store.get_context("user-1")
    store.update_context("user-1", {"destination": "Paris"})
"""

from tripzz_agent.context.store import ContextStore, ContextWrapper

__all__ = [
    "ContextStore",
    "ContextWrapper",
]
