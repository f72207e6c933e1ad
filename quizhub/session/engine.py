"""
Session Engine: quiz session creation, answer storage and grading.

Lifecycle:
- created: questions frozen, no answers yet
- in_progress: at least one answer stored
- graded: grading has run at least once (re-gradeable)
- completed: completion stamped by the caller

Single-writer contract: a Session is mutated in place (answers, grading
metadata, completion) and must not be updated concurrently. Callers
serialize access per session.
"""

from __future__ import annotations

import random
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Protocol

from loguru import logger

from quizhub.adaptive.elo_rating import SkillLevels
from quizhub.adaptive.question_selector import Candidate, select_adaptive_questions
from quizhub.config import GradingConfig
from quizhub.grading import AnswerValue, MatchType, correct_answer_for, grade
from quizhub.questions.schema import Question, QuestionBank, composite_key


class SessionError(Exception):
    """Base class for structural session errors."""
    pass


class BankNotFoundError(SessionError):
    """A selected bank id is not in the registry."""
    pass


class QuestionNotInSessionError(SessionError):
    """An answer was submitted for a composite key the session does not hold."""
    pass


class SessionStatus(str, Enum):
    """Where a session is in its lifecycle."""

    CREATED = "created"
    IN_PROGRESS = "in_progress"
    GRADED = "graded"
    COMPLETED = "completed"


class BankLookup(Protocol):
    """Anything that resolves a bank id (BankRegistry, or a plain dict)."""

    def get(self, bank_id: str) -> QuestionBank | None:
        ...


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SessionQuestion:
    """A question bound to its bank and its position in the session."""

    bank_id: str
    question_id: str
    composite_key: str  # "bankId::questionId"
    index: int
    question: Question


@dataclass
class SessionAnswer:
    """A submitted answer and, once graded, its grading metadata."""

    value: AnswerValue
    answered_at: str = field(default_factory=_now)

    # Set by grade_session()
    is_correct: bool | None = None
    score: float | None = None  # 0-1
    match_type: MatchType | None = None
    similarity: float | None = None  # text variants only
    matched_answer: str | None = None
    feedback: str | None = None


@dataclass
class Session:
    """A quiz session for one user."""

    id: str
    user_id: str
    bank_ids: list[str]
    questions: list[SessionQuestion]
    answers: dict[str, SessionAnswer] = field(default_factory=dict)
    created_at: str = field(default_factory=_now)
    graded_at: str | None = None
    completed_at: str | None = None

    @property
    def status(self) -> SessionStatus:
        if self.completed_at is not None:
            return SessionStatus.COMPLETED
        if self.graded_at is not None:
            return SessionStatus.GRADED
        if self.answers:
            return SessionStatus.IN_PROGRESS
        return SessionStatus.CREATED

    def get_question(self, key: str) -> SessionQuestion | None:
        """Session question by composite key."""
        for session_question in self.questions:
            if session_question.composite_key == key:
                return session_question
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        for item, session_question in zip(data["questions"], self.questions):
            item["question"] = session_question.question.model_dump(by_alias=True, exclude_none=True)
        data["status"] = self.status.value
        return data


@dataclass
class QuestionOutcome:
    """Grading detail for one answered question."""

    is_correct: bool
    user_answer: AnswerValue
    correct_answer: Any
    score: float
    match_type: MatchType
    similarity: float | None = None
    feedback: str | None = None


@dataclass
class GradingSummary:
    """Whole-session grading result."""

    total_questions: int
    total_correct: float = 0.0  # partial credit adds its fraction here
    total_incorrect: float = 0.0  # ... and the complement here
    total_unanswered: int = 0
    score: float = 0.0  # percentage 0-100 of answered questions
    total_score: float = 0.0  # sum of per-question scores
    per_question: dict[str, QuestionOutcome] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class SessionProgress:
    answered: int
    total: int
    percent_complete: float


def create_session(
    registry: BankLookup | Mapping[str, QuestionBank],
    user_id: str,
    selected_bank_ids: list[str],
    randomize: bool = False,
    limit: int | None = None,
    adaptive: bool = False,
    target_accuracy: float = 0.7,
    skill_levels: SkillLevels | None = None,
    rng: random.Random | None = None,
) -> Session:
    """
    Create a new quiz session.

    Process:
    1. Resolve every selected bank id (any unknown id fails the whole call)
    2. Collect questions in selection order, then in-bank order
    3. Deduplicate by composite key (first occurrence wins)
    4. Adaptive selection when enabled and any skill is known, otherwise
       optional shuffle then truncate to ``limit``
    5. Re-index 0..n-1 in presentation order

    Raises:
        BankNotFoundError: If a selected bank id is unknown
    """
    rng = rng or random.Random()

    banks: list[QuestionBank] = []
    for bank_id in selected_bank_ids:
        bank = registry.get(bank_id)
        if bank is None:
            raise BankNotFoundError(f"Question bank not found: {bank_id}")
        banks.append(bank)

    candidates: list[Candidate] = []
    seen_keys: set[str] = set()
    for bank in banks:
        for question in bank.questions:
            key = composite_key(bank.id, question.id)
            if key in seen_keys:
                continue
            seen_keys.add(key)
            candidates.append(Candidate(question=question, composite_key=key, bank_id=bank.id))

    if adaptive and skill_levels:
        count = limit if limit is not None and limit > 0 else len(candidates)
        selected = select_adaptive_questions(
            candidates,
            skill_levels,
            count,
            target_accuracy=target_accuracy,
            randomize=randomize,
            rng=rng,
        )
    else:
        selected = list(candidates)
        if randomize:
            rng.shuffle(selected)  # Fisher-Yates
        if limit is not None and limit > 0:
            selected = selected[:limit]

    questions = []
    for index, candidate in enumerate(selected):
        questions.append(
            SessionQuestion(
                bank_id=candidate.bank_id,
                question_id=candidate.question.id,
                composite_key=candidate.composite_key,
                index=index,
                question=candidate.question,
            )
        )

    session = Session(
        id=str(uuid.uuid4()),
        user_id=user_id,
        bank_ids=list(selected_bank_ids),
        questions=questions,
    )
    logger.debug(
        f"Created session {session.id} for {user_id}: {len(questions)}/{len(candidates)} "
        f"questions from {len(banks)} bank(s), adaptive={bool(adaptive and skill_levels)}"
    )
    return session


def update_answer(session: Session, key: str, value: AnswerValue) -> SessionAnswer:
    """
    Store (or overwrite) the answer for a question. Does not grade.

    Raises:
        QuestionNotInSessionError: If ``key`` is not one of the session's questions
    """
    if session.get_question(key) is None:
        raise QuestionNotInSessionError(f"Question {key} not found in session {session.id}")

    answer = SessionAnswer(value=value)
    session.answers[key] = answer
    return answer


def grade_session(session: Session, config: GradingConfig) -> GradingSummary:
    """
    Grade every answered question and write the results onto the stored answers.

    Partial credit splits across correct/incorrect proportionally. The
    percentage score is over answered questions only (0 if none).
    """
    summary = GradingSummary(total_questions=len(session.questions))

    for session_question in session.questions:
        key = session_question.composite_key
        answer = session.answers.get(key)

        if answer is None:
            summary.total_unanswered += 1
            continue

        result = grade(session_question.question, answer.value, config)

        answer.is_correct = result.is_correct
        answer.score = result.score
        answer.match_type = result.match_type
        answer.similarity = result.similarity
        answer.matched_answer = result.matched_answer
        answer.feedback = result.feedback

        summary.total_score += result.score
        if result.score >= 1.0:
            summary.total_correct += 1
        elif result.score > 0:
            summary.total_correct += result.score
            summary.total_incorrect += 1 - result.score
        else:
            summary.total_incorrect += 1

        summary.per_question[key] = QuestionOutcome(
            is_correct=result.is_correct,
            user_answer=answer.value,
            correct_answer=correct_answer_for(session_question.question),
            score=result.score,
            match_type=result.match_type,
            similarity=result.similarity,
            feedback=result.feedback,
        )

    answered = summary.total_questions - summary.total_unanswered
    summary.score = summary.total_score / answered * 100 if answered > 0 else 0.0

    session.graded_at = _now()
    return summary


def complete_session(session: Session) -> None:
    """Stamp completion time. Calling again re-stamps."""
    session.completed_at = _now()


def get_progress(session: Session) -> SessionProgress:
    answered = len(session.answers)
    total = len(session.questions)
    return SessionProgress(
        answered=answered,
        total=total,
        percent_complete=answered / total * 100 if total > 0 else 0.0,
    )
