"""In-memory cache of video sessions with absolute expiry."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timedelta

from auth.errors import SessionCreationError, SessionExpiredError, SessionNotFoundError
from video.types import (
    DEFAULT_SESSION_TTL,
    CreateSessionOptions,
    CreateSessionResponse,
    SessionRecord,
    utcnow,
)

LOGGER = logging.getLogger(__name__)

CreationFn = Callable[[CreateSessionOptions | None], Awaitable[CreateSessionResponse]]

SYNTHETIC_PREFIX = "mock"


class ReadWriteLock:
    """Many concurrent readers or one writer. Waiting writers block new readers."""

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and not self._waiting_writers)
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and not self._readers)
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()


class SessionRegistry:
    """Session cache keyed by session id, searchable by topic key.

    Note: This is a single-process store. For multi-worker deployments, replace
    with Redis or another shared store.

    The lock is released while ``creation_fn`` runs, so two callers racing on the
    same unseen topic may both create a session. Both records are cached and stay
    reachable by id; topic lookups return the one written last. The cache only
    avoids redundant remote calls, so this is accepted.
    """

    def __init__(
        self,
        application_id: str = "",
        *,
        session_ttl: timedelta = DEFAULT_SESSION_TTL,
        fail_open: bool = True,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._application_id = application_id
        self._session_ttl = session_ttl
        self._fail_open = fail_open
        self._clock = clock
        self._lock = ReadWriteLock()
        self._sessions: dict[str, SessionRecord] = {}
        self._last_synthetic_suffix = 0

    @property
    def fail_open(self) -> bool:
        return self._fail_open

    async def create_for_topic(
        self,
        topic_key: str,
        creation_fn: CreationFn,
        options: CreateSessionOptions | None = None,
    ) -> SessionRecord:
        """Return the cached valid session for ``topic_key`` or create one."""

        cached = await self._find_valid(topic_key)
        if cached is not None:
            return cached
        return await self._create(creation_fn, options, topic_key)

    async def create(
        self,
        creation_fn: CreationFn,
        options: CreateSessionOptions | None = None,
    ) -> SessionRecord:
        """Always create a new session, bypassing the topic lookup."""

        return await self._create(creation_fn, options, "")

    async def get(self, session_id: str) -> SessionRecord:
        async with self._lock.read():
            record = self._sessions.get(session_id)
        if record is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        if record.is_expired(self._clock()):
            raise SessionExpiredError(f"Session expired: {session_id}")
        return record

    async def sweep(self) -> int:
        """Drop every expired record and return how many were removed."""

        now = self._clock()
        async with self._lock.write():
            expired = [sid for sid, record in self._sessions.items() if record.is_expired(now)]
            for sid in expired:
                del self._sessions[sid]

        if expired:
            LOGGER.debug("Cleaned up %d expired video sessions", len(expired))
        return len(expired)

    async def size(self) -> int:
        async with self._lock.read():
            return len(self._sessions)

    async def _find_valid(self, topic_key: str) -> SessionRecord | None:
        now = self._clock()
        async with self._lock.read():
            # Newest first, so the later of two racing writes wins the topic.
            for record in reversed(self._sessions.values()):
                if record.topic_key == topic_key and record.is_valid(now):
                    return record
        return None

    async def _create(
        self,
        creation_fn: CreationFn,
        options: CreateSessionOptions | None,
        topic_key: str,
    ) -> SessionRecord:
        try:
            response = await creation_fn(options)
        except Exception as exc:
            return await self._fallback(topic_key, exc)
        if not response.session_id:
            return await self._fallback(topic_key, SessionCreationError("empty response from API"))

        now = self._clock()
        record = SessionRecord(
            session_id=response.session_id,
            topic_key=topic_key,
            project_id=response.project_id,
            created_at=now,
            expires_at=now + self._session_ttl,
        )
        async with self._lock.write():
            self._sessions[record.session_id] = record

        LOGGER.info("Created Vonage Video session %s (topic=%s)", record.session_id, topic_key or "-")
        return record

    async def _fallback(self, topic_key: str, exc: Exception) -> SessionRecord:
        if not self._fail_open:
            if isinstance(exc, SessionCreationError):
                raise exc
            raise SessionCreationError(f"Failed to create session via API: {exc}") from exc

        LOGGER.warning("Failed to create session via API, using mock session: %s", exc)
        prefix = self._application_id[:8] if len(self._application_id) >= 8 else SYNTHETIC_PREFIX

        now = self._clock()
        async with self._lock.write():
            suffix = max(time.time_ns(), self._last_synthetic_suffix + 1)
            self._last_synthetic_suffix = suffix
            record = SessionRecord(
                session_id=f"{SYNTHETIC_PREFIX}_{prefix}_{suffix}",
                topic_key=topic_key,
                created_at=now,
                expires_at=now + self._session_ttl,
                is_synthetic=True,
            )
            self._sessions[record.session_id] = record

        LOGGER.info("Created mock video session %s (topic=%s)", record.session_id, topic_key or "-")
        return record
