"""Key/value session store with per-key expiry.

Services only see the ``SessionStore`` contract (``set`` with a TTL, ``get``,
``delete``). ``SqlSessionStore`` implements it on the ``auth_sessions`` table;
each write is a single statement committed immediately, and keys past their
expiry are treated as absent.
"""

import logging
import time
from typing import Callable, Optional, Protocol

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from files_manager.sessions.models import SessionEntry

log = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "auth_"


def session_key(token: str) -> str:
    """Store key for a session token."""
    return f"{SESSION_KEY_PREFIX}{token}"


class SessionStore(Protocol):
    """Contract for the session key/value store."""

    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def get(self, key: str) -> Optional[str]: ...

    async def delete(self, key: str) -> None: ...


class SqlSessionStore:
    """SessionStore backed by the auth_sessions table."""

    def __init__(self, session: AsyncSession, clock: Callable[[], float] = time.time) -> None:
        self._session = session
        self._clock = clock

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store value under key, replacing any previous entry; expires after ttl_seconds.
        Expired entries are dropped in the same transaction so unread tokens do not pile up.
        """
        now = self._clock()
        await self._session.execute(delete(SessionEntry).where(SessionEntry.expires_at <= now))
        expires_at = now + ttl_seconds
        await self._session.merge(SessionEntry(key=key, value=value, expires_at=expires_at))
        await self._session.commit()

    async def get(self, key: str) -> Optional[str]:
        """Return the value for key, or None if missing or expired (expired entry is removed)."""
        row = await self._session.get(SessionEntry, key, populate_existing=True)
        if row is None:
            return None
        if row.expires_at <= self._clock():
            log.debug("Session key expired, removing")
            await self.delete(key)
            return None
        return row.value

    async def delete(self, key: str) -> None:
        """Remove key. Missing keys are ignored."""
        await self._session.execute(delete(SessionEntry).where(SessionEntry.key == key))
        await self._session.commit()

    async def purge_expired(self) -> int:
        """Delete every expired entry; return how many were removed."""
        result = await self._session.execute(
            delete(SessionEntry).where(SessionEntry.expires_at <= self._clock())
        )
        await self._session.commit()
        return result.rowcount or 0
