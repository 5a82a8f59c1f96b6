"""Keyed store holding at most one Hokm session per guild."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from .state import HokmSession


class GameNotFound(LookupError):
    """Raised when a guild has no active session."""


class GameAlreadyRunning(RuntimeError):
    """Raised when a guild already has an active session."""


class SessionStore:
    """One mutable slot per guild, each guarded by its own asyncio lock.

    Callers hold ``lock(guild_id)`` around any read-modify-write of a
    guild's session; different guilds never contend. A guild's lock is
    dropped once its slot is empty and no caller holds or awaits it.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, HokmSession] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @asynccontextmanager
    async def lock(self, guild_id: str) -> AsyncIterator[None]:
        guild_lock = self._locks.setdefault(guild_id, asyncio.Lock())
        self._lock_users[guild_id] = self._lock_users.get(guild_id, 0) + 1
        try:
            async with guild_lock:
                yield
        finally:
            self._lock_users[guild_id] -= 1
            if not self._lock_users[guild_id] and guild_id not in self._sessions:
                del self._lock_users[guild_id]
                del self._locks[guild_id]

    def has_lock(self, guild_id: str) -> bool:
        return guild_id in self._locks

    def add(self, session: HokmSession) -> None:
        if session.guild_id in self._sessions:
            raise GameAlreadyRunning(f"Guild {session.guild_id} already has a game in progress.")
        self._sessions[session.guild_id] = session

    def get(self, guild_id: str) -> HokmSession:
        session = self._sessions.get(guild_id)
        if session is None:
            raise GameNotFound(f"No game in progress for guild {guild_id}.")
        return session

    def find(self, guild_id: str) -> Optional[HokmSession]:
        return self._sessions.get(guild_id)

    def remove(self, guild_id: str) -> HokmSession:
        session = self._sessions.pop(guild_id, None)
        if session is None:
            raise GameNotFound(f"No game in progress for guild {guild_id}.")
        return session

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._sessions
