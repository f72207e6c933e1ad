"""
Quiz sessions.

- engine: Session creation, answer storage, grading, progress
- store: In-memory sessions by id
"""

from quizhub.session.engine import (
    BankNotFoundError,
    GradingSummary,
    QuestionNotInSessionError,
    QuestionOutcome,
    Session,
    SessionAnswer,
    SessionError,
    SessionProgress,
    SessionQuestion,
    SessionStatus,
    complete_session,
    create_session,
    get_progress,
    grade_session,
    update_answer,
)
from quizhub.session.store import SessionNotFoundError, SessionStore

__all__ = [
    "BankNotFoundError",
    "GradingSummary",
    "QuestionNotInSessionError",
    "QuestionOutcome",
    "Session",
    "SessionAnswer",
    "SessionError",
    "SessionNotFoundError",
    "SessionProgress",
    "SessionQuestion",
    "SessionStatus",
    "SessionStore",
    "complete_session",
    "create_session",
    "get_progress",
    "grade_session",
    "update_answer",
]
