"""Cancellable per-guild turn deadlines."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DeadlineCallback = Callable[[str, int], Awaitable[None]]


@dataclass
class PendingDeadline:
    guild_id: str
    token: int
    task: "asyncio.Task[None]"


class TurnTimer:
    """At most one pending deadline per guild, keyed by the session's turn token."""

    def __init__(self, callback: DeadlineCallback) -> None:
        self._callback = callback
        self._pending: Dict[str, PendingDeadline] = {}

    def schedule(self, guild_id: str, token: int, delay: float) -> PendingDeadline:
        """Replace any pending deadline for ``guild_id`` with a new one."""
        self.cancel(guild_id)
        task = asyncio.get_running_loop().create_task(self._run(guild_id, token, delay))
        pending = PendingDeadline(guild_id=guild_id, token=token, task=task)
        self._pending[guild_id] = pending
        logger.debug("Guild %s: deadline for turn %d in %.2fs", guild_id, token, delay)
        return pending

    def cancel(self, guild_id: str) -> bool:
        pending = self._pending.pop(guild_id, None)
        if pending is None:
            return False
        if not pending.task.done() and pending.task is not asyncio.current_task():
            pending.task.cancel()
        return True

    def cancel_all(self) -> None:
        for guild_id in list(self._pending):
            self.cancel(guild_id)

    def pending(self, guild_id: str) -> Optional[PendingDeadline]:
        return self._pending.get(guild_id)

    async def _run(self, guild_id: str, token: int, delay: float) -> None:
        await asyncio.sleep(delay)
        current = self._pending.get(guild_id)
        if current is not None and current.token == token:
            del self._pending[guild_id]
        try:
            await self._callback(guild_id, token)
        except Exception:
            logger.exception("Guild %s: deadline handler for turn %d failed", guild_id, token)
