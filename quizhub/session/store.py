"""
In-memory session store.

Holds live sessions by id for a serving layer. One store call handles
one session at a time; the store itself does no locking.
"""

from __future__ import annotations

from typing import Any

from quizhub.config import GradingConfig
from quizhub.grading import AnswerValue
from quizhub.session.engine import (
    GradingSummary,
    Session,
    SessionAnswer,
    SessionError,
    SessionProgress,
    complete_session,
    create_session,
    get_progress,
    grade_session,
    update_answer,
)


class SessionNotFoundError(SessionError):
    """No live session has this id."""
    pass


class SessionStore:
    """Live sessions keyed by session id."""

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create(self, registry: Any, user_id: str, selected_bank_ids: list[str], **options) -> Session:
        """Create a session (see create_session for options) and keep it."""
        session = create_session(registry, user_id, selected_bank_ids, **options)
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def require(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return session

    def by_user(self, user_id: str) -> list[Session]:
        return [s for s in self._sessions.values() if s.user_id == user_id]

    def update_answer(self, session_id: str, key: str, value: AnswerValue) -> SessionAnswer:
        return update_answer(self.require(session_id), key, value)

    def grade(self, session_id: str, config: GradingConfig) -> GradingSummary:
        return grade_session(self.require(session_id), config)

    def complete(self, session_id: str) -> None:
        complete_session(self.require(session_id))

    def progress(self, session_id: str) -> SessionProgress:
        return get_progress(self.require(session_id))

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def all(self) -> list[Session]:
        return list(self._sessions.values())

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
