"""
Conversation Context Store
==========================
In-memory, per-user conversation state with idle expiry

Lifecycle:
- A wrapper is created on the first get_context() for an unseen user
- last_accessed is refreshed on every read and write
- A wrapper idle for longer than idle_timeout is expired lazily on access
  and by the periodic sweep; an expired user silently starts over

Design Points:
- The clock is injected (time.monotonic by default) so tests control time
- Callers only ever receive deep copies; changes go through update_context()
- The sweep walks a key snapshot in chunks and yields to the event loop
  between chunks, so a large store never blocks concurrent turns
- Writes are read-merge-write with last-write-wins semantics
"""

import asyncio
import contextlib
import logging
import os
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from tripzz_agent.state import HISTORY_LIMIT, ContextDelta, ConversationContext, HistoryEntry

logger = logging.getLogger(__name__)

CONTEXT_IDLE_TIMEOUT = float(os.getenv("CONTEXT_IDLE_TIMEOUT_MINUTES", "30")) * 60
CONTEXT_SWEEP_INTERVAL = float(os.getenv("CONTEXT_SWEEP_INTERVAL_MINUTES", "10")) * 60
SWEEP_CHUNK_SIZE = 500


@dataclass
class ContextWrapper:
    """Storage envelope around one user's context"""

    data: ConversationContext
    created_at: float
    last_accessed: float


class ContextStore:
    """
    Memory-bounded cache of ConversationContext, keyed by user id

    Args:
        idle_timeout: seconds of inactivity after which a context expires
        sweep_interval: seconds between background sweeps
        clock: monotonic time source in seconds
        sweep_chunk_size: wrappers inspected per sweep slice
    """

    def __init__(
        self,
        idle_timeout: float = CONTEXT_IDLE_TIMEOUT,
        sweep_interval: float = CONTEXT_SWEEP_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sweep_chunk_size: int = SWEEP_CHUNK_SIZE,
    ):
        self.idle_timeout = idle_timeout
        self.sweep_interval = sweep_interval
        self.sweep_chunk_size = max(1, sweep_chunk_size)
        self._clock = clock
        self._contexts: dict[str, ContextWrapper] = {}
        self._sweep_task: asyncio.Task[Any] | None = None

    def __len__(self) -> int:
        return len(self._contexts)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._contexts

    def _is_expired(self, wrapper: ContextWrapper, now: float) -> bool:
        return now - wrapper.last_accessed > self.idle_timeout

    def _touch(self, user_id: str) -> ContextWrapper:
        now = self._clock()
        wrapper = self._contexts.get(user_id)

        if wrapper is not None and self._is_expired(wrapper, now):
            logger.info(
                "[Store] Context for %s expired after %.0fs idle", user_id, now - wrapper.last_accessed
            )
            del self._contexts[user_id]
            wrapper = None

        if wrapper is None:
            wrapper = ContextWrapper(data=ConversationContext(), created_at=now, last_accessed=now)
            self._contexts[user_id] = wrapper
            logger.debug("[Store] Created context for %s", user_id)

        wrapper.last_accessed = now
        return wrapper

    # ===== Public API =====

    def get_context(self, user_id: str) -> ConversationContext:
        """
        Snapshot of the user's context, creating a fresh one if absent or expired

        Args:
            user_id: conversation owner

        Returns:
            Deep copy of the stored ConversationContext
        """
        return self._touch(user_id).data.model_copy(deep=True)

    def update_context(
        self,
        user_id: str,
        delta: ContextDelta | dict[str, Any],
    ) -> ConversationContext:
        """
        Merge a partial update into the user's context

        Top-level fields set in the delta replace the stored values wholesale.

        Args:
            user_id: conversation owner
            delta: ContextDelta, or a dict validated into one (camelCase or snake_case keys)

        Returns:
            Deep copy of the merged context
        """
        if not isinstance(delta, ContextDelta):
            delta = ContextDelta.model_validate(delta)

        wrapper = self._touch(user_id)
        wrapper.data = wrapper.data.merge(delta)
        return wrapper.data.model_copy(deep=True)

    def append_history(self, user_id: str, entries: Iterable[HistoryEntry]) -> ConversationContext:
        """Append turns to the history, keeping the last HISTORY_LIMIT entries"""
        current = self._touch(user_id).data.conversation_history
        history = [*current, *entries][-HISTORY_LIMIT:]
        return self.update_context(user_id, ContextDelta(conversation_history=history))

    def clear_context(self, user_id: str) -> None:
        """Delete the user's context outright; unknown users are ignored"""
        if self._contexts.pop(user_id, None) is not None:
            logger.info("[Store] Cleared context for %s", user_id)

    async def sweep_expired(self) -> int:
        """
        Remove every wrapper idle for longer than the timeout

        Returns:
            Number of contexts removed
        """
        now = self._clock()
        user_ids = list(self._contexts)
        removed = 0

        for offset in range(0, len(user_ids), self.sweep_chunk_size):
            for user_id in user_ids[offset : offset + self.sweep_chunk_size]:
                wrapper = self._contexts.get(user_id)
                if wrapper is not None and self._is_expired(wrapper, now):
                    del self._contexts[user_id]
                    removed += 1
            await asyncio.sleep(0)

        if removed:
            logger.info("[Store] Swept %d expired contexts (%d active)", removed, len(self._contexts))
        return removed

    # ===== Sweep Lifecycle =====

    @property
    def is_running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    async def start(self) -> None:
        """Start the periodic sweep; calling it again while running is a no-op"""
        if self.is_running:
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.info("[Store] Sweep started (every %.0fs)", self.sweep_interval)

    async def stop(self) -> None:
        """Cancel the periodic sweep and wait for it to finish"""
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("[Store] Sweep stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            try:
                await self.sweep_expired()
            except Exception:
                logger.exception("[Store] Sweep failed")
