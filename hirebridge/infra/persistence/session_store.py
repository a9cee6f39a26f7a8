"""
HireBridge - Session Store.

Keyed storage for interview sessions with per-session locking and eviction.

Two backends:
- InMemorySessionStore: process-lifetime state, idle TTL and LRU bounds
- JsonFileSessionStore: the same, plus a JSON snapshot per session written
  after every change and restored on a memory miss (survives restarts)

Usage:
    store = create_session_store()

    async with store.lock(session_id):
        session = await store.get(session_id)
        ...
        await store.save(session)
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import AsyncIterator, Optional

from hirebridge.core.config import Settings, get_settings
from hirebridge.core.domain.models import (
    Answered,
    AskedQuestion,
    Difficulty,
    InterviewSession,
    PENDING,
    QuestionType,
    Role,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class SessionStore(ABC):
    """Interface the orchestrator depends on."""

    @abstractmethod
    async def get(self, session_id: str) -> InterviewSession | None:
        ...

    @abstractmethod
    async def create(self, session: InterviewSession) -> None:
        ...

    @abstractmethod
    async def save(self, session: InterviewSession) -> None:
        ...

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        ...

    @abstractmethod
    def evict_expired(self) -> int:
        """Drop idle sessions. Returns how many were removed."""

    @abstractmethod
    def __len__(self) -> int:
        ...

    @asynccontextmanager
    async def lock(self, session_id: str) -> AsyncIterator[None]:
        """Serialize mutations of one session; other sessions are unaffected."""
        async with self._lock_for(session_id):
            yield

    @abstractmethod
    def _lock_for(self, session_id: str) -> asyncio.Lock:
        ...


class InMemorySessionStore(SessionStore):
    """
    Dictionary-backed store.

    Sessions idle longer than `ttl` are evicted by `evict_expired()`; creating
    a session beyond `max_entries` evicts the least recently used one.
    """

    def __init__(
        self,
        ttl: timedelta | None = timedelta(hours=2),
        max_entries: int | None = None,
    ):
        self._ttl = ttl
        self._max_entries = max_entries
        self._sessions: OrderedDict[str, InterviewSession] = OrderedDict()
        self._locks: dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock

    async def get(self, session_id: str) -> InterviewSession | None:
        session = self._sessions.get(session_id)
        if session is None:
            logger.debug(f"Session {session_id} not in memory")
            return None
        if self._is_expired(session):
            logger.info(f"Session {session_id} expired")
            self._forget(session_id)
            return None
        self._sessions.move_to_end(session_id)
        return session

    async def create(self, session: InterviewSession) -> None:
        self._sessions[session.session_id] = session
        self._sessions.move_to_end(session.session_id)
        self._enforce_capacity()

    async def save(self, session: InterviewSession) -> None:
        session.touch()
        self._sessions[session.session_id] = session
        self._sessions.move_to_end(session.session_id)

    async def delete(self, session_id: str) -> bool:
        return self._forget(session_id)

    def evict_expired(self) -> int:
        stale = [sid for sid, s in self._sessions.items() if self._is_expired(s)]
        for sid in stale:
            self._forget(sid)
            logger.info(f"Cleaned up stale session: {sid}")

        # Locks taken for ids that never resolved to a session
        orphaned = [
            sid for sid, lock in self._locks.items()
            if sid not in self._sessions and not lock.locked()
        ]
        for sid in orphaned:
            del self._locks[sid]

        return len(stale)

    def _is_expired(self, session: InterviewSession) -> bool:
        if self._ttl is None:
            return False
        return datetime.now() - session.last_active > self._ttl

    def _enforce_capacity(self) -> None:
        if not self._max_entries:
            return
        while len(self._sessions) > self._max_entries:
            oldest = next(iter(self._sessions))
            logger.info(f"Session store full; evicting {oldest}")
            self._forget(oldest)

    def _forget(self, session_id: str) -> bool:
        lock = self._locks.get(session_id)
        if lock is not None and not lock.locked():
            del self._locks[session_id]
        return self._sessions.pop(session_id, None) is not None


class JsonFileSessionStore(InMemorySessionStore):
    """
    Write-through JSON persistence on top of the in-memory store.

    Each save writes `<data_dir>/<session_id>.json` through a temp file and
    rename, so a crash never leaves a half-written snapshot.
    """

    def __init__(
        self,
        data_dir: str = "data/sessions",
        ttl: timedelta | None = timedelta(hours=2),
        max_entries: int | None = None,
    ):
        super().__init__(ttl=ttl, max_entries=max_entries)
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Session snapshots stored at: {self._data_dir}")

    @staticmethod
    def _is_safe_id(session_id: str) -> bool:
        """Only ids made of letters, digits, '-' and '_' map to a file."""
        return bool(session_id) and all(c.isalnum() or c in "-_" for c in session_id)

    def _session_path(self, session_id: str) -> Path:
        """Get file path for a session ID."""
        if not self._is_safe_id(session_id):
            raise ValueError(f"Unsafe session id: {session_id!r}")
        return self._data_dir / f"{session_id}.json"

    async def get(self, session_id: str) -> InterviewSession | None:
        session = await super().get(session_id)
        if session is not None:
            return session

        if not self._is_safe_id(session_id):
            logger.warning(f"Rejected unsafe session id: {session_id!r}")
            return None

        session = self._load(session_id)
        if session is None or self._is_expired(session):
            return None

        logger.info(f"Restored session {session_id} from disk")
        await super().create(session)
        return session

    async def create(self, session: InterviewSession) -> None:
        if not self._is_safe_id(session.session_id):
            raise ValueError(f"Unsafe session id: {session.session_id!r}")
        await super().create(session)
        self._write(session)

    async def save(self, session: InterviewSession) -> None:
        await super().save(session)
        self._write(session)

    async def delete(self, session_id: str) -> bool:
        removed = await super().delete(session_id)
        if not self._is_safe_id(session_id):
            return removed
        path = self._session_path(session_id)
        if path.exists():
            path.unlink()
            logger.info(f"Deleted session file: {session_id}")
            removed = True
        return removed

    def evict_expired(self) -> int:
        count = super().evict_expired()
        if self._ttl is None:
            return count

        cutoff = (datetime.now() - self._ttl).timestamp()
        for path in self._data_dir.glob("*.json"):
            if path.stat().st_mtime < cutoff:
                path.unlink()
                count += 1
                logger.info(f"Cleaned up old session file: {path.stem}")
        return count

    # -------------------------------------------------------------------------
    # File IO
    # -------------------------------------------------------------------------

    def _write(self, session: InterviewSession) -> None:
        data = session_to_dict(session)
        path = self._session_path(session.session_id)
        temp_path = path.with_suffix(".json.tmp")

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            temp_path.replace(path)
            logger.debug(f"Saved session {session.session_id} ({len(session.history)} questions)")
        except Exception as e:
            logger.error(f"Failed to save session {session.session_id}: {e}")
            if temp_path.exists():
                temp_path.unlink()
            raise

    def _load(self, session_id: str) -> Optional[InterviewSession]:
        path = self._session_path(session_id)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                return session_from_dict(json.load(f))
        except Exception as e:
            logger.error(f"Failed to load session {session_id}: {e}")
            return None


# -----------------------------------------------------------------------------
# Serialization Helpers
# -----------------------------------------------------------------------------

def session_to_dict(session: InterviewSession) -> dict:
    """Convert session to serializable dict."""
    return {
        "version": SCHEMA_VERSION,
        "session_id": session.session_id,
        "role": session.role.value,
        "current_question_index": session.current_question_index,
        "asked_topics": list(session.asked_topics),
        "asked_questions": list(session.asked_questions),
        "start_time": session.start_time.isoformat(),
        "last_active": session.last_active.isoformat(),
        "welcome_shown": session.welcome_shown,
        "history": [_asked_to_dict(q) for q in session.history],
    }


def _asked_to_dict(asked: AskedQuestion) -> dict:
    data = {
        "question": asked.question,
        "topic": asked.topic,
        "difficulty": asked.difficulty.value,
        "question_type": asked.question_type.value,
        "code_snippet": asked.code_snippet,
        "timestamp": asked.timestamp.isoformat(),
        "answer": None,
    }
    if isinstance(asked.state, Answered):
        data["answer"] = {
            "text": asked.state.answer,
            "score": asked.state.score,
            "answered_at": asked.state.answered_at.isoformat(),
        }
    return data


def session_from_dict(data: dict) -> InterviewSession:
    """Reconstruct session from dict."""
    session = InterviewSession(
        session_id=data["session_id"],
        role=Role.parse(data["role"]),
        current_question_index=data.get("current_question_index", 0),
        asked_topics=list(data.get("asked_topics", [])),
        asked_questions=list(data.get("asked_questions", [])),
        start_time=datetime.fromisoformat(data["start_time"]),
        welcome_shown=data.get("welcome_shown", False),
        last_active=datetime.fromisoformat(data.get("last_active") or data["start_time"]),
    )

    for q in data.get("history", []):
        answer = q.get("answer")
        state = PENDING
        if answer:
            state = Answered(
                answer=answer["text"],
                score=int(answer["score"]),
                answered_at=datetime.fromisoformat(answer["answered_at"]),
            )
        session.history.append(AskedQuestion(
            question=q["question"],
            topic=q["topic"],
            difficulty=Difficulty(q["difficulty"]),
            question_type=QuestionType(q.get("question_type", "conceptual")),
            code_snippet=q.get("code_snippet"),
            timestamp=datetime.fromisoformat(q["timestamp"]),
            state=state,
        ))

    return session


def create_session_store(settings: Settings | None = None) -> SessionStore:
    """Build the store selected by SESSION_BACKEND."""
    settings = settings or get_settings()
    ttl = timedelta(minutes=settings.SESSION_TTL_MINUTES)

    if settings.SESSION_BACKEND == "json":
        return JsonFileSessionStore(
            data_dir=settings.SESSION_DATA_DIR,
            ttl=ttl,
            max_entries=settings.SESSION_MAX_ENTRIES,
        )
    return InMemorySessionStore(ttl=ttl, max_entries=settings.SESSION_MAX_ENTRIES)
