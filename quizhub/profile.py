"""
User profiles: completion stats, per-question history and skill levels.

This is the caller side of the adaptive loop: after a session is graded
and completed, record_completion() folds the outcome into the profile
and updates one skill level per graded question. Persisting profiles is
left to the serving layer.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

from loguru import logger

from quizhub.adaptive.elo_rating import (
    QuestionRecord,
    SkillLevels,
    create_skill_level,
    estimate_from_history,
    update_skill,
)
from quizhub.config import AdaptiveConfig
from quizhub.questions.registry import BankRegistry
from quizhub.questions.schema import composite_key, effective_category, effective_difficulty
from quizhub.session.engine import GradingSummary, Session


class ProfileNotFoundError(Exception):
    """No profile has this id."""
    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class CompletionStats:
    """Attempts and scores for one bank."""

    attempts: int
    last_score: float
    best_score: float
    last_completed_at: str


@dataclass
class QuestionPerformance:
    """History of one question (by composite key)."""

    times_seen: int
    times_correct: int
    last_answer: Any
    last_result: str  # 'correct' | 'incorrect'


@dataclass
class AdaptivePreferences:
    enabled: bool = True
    target_accuracy: float = 0.7
    adjustment_speed: float = 0.5


@dataclass
class UserProfile:
    id: str
    name: str
    created_at: str = field(default_factory=_now)
    last_active_at: str = field(default_factory=_now)
    completed_sets: dict[str, CompletionStats] = field(default_factory=dict)
    question_history: dict[str, QuestionPerformance] = field(default_factory=dict)
    skill_levels: SkillLevels = field(default_factory=dict)
    adaptive_preferences: AdaptivePreferences | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def record_completion(
    profile: UserProfile,
    session: Session,
    summary: GradingSummary,
    adaptive: AdaptiveConfig | None = None,
) -> UserProfile:
    """
    Fold a graded, completed session into a profile.

    Updates per-bank attempts/last/best score, per-question seen/correct
    counts, and the skill level of each graded question's category.
    Call once per completed session; this function does not guard
    against recording the same session twice.
    """
    adaptive = adaptive or AdaptiveConfig()
    now = _now()
    profile.last_active_at = now

    for bank_id in session.bank_ids:
        existing = profile.completed_sets.get(bank_id)
        if existing is None:
            profile.completed_sets[bank_id] = CompletionStats(
                attempts=1,
                last_score=summary.score,
                best_score=summary.score,
                last_completed_at=now,
            )
        else:
            existing.attempts += 1
            existing.last_score = summary.score
            existing.best_score = max(existing.best_score, summary.score)
            existing.last_completed_at = now

    for key, outcome in summary.per_question.items():
        history = profile.question_history.get(key)
        if history is None:
            history = profile.question_history[key] = QuestionPerformance(
                times_seen=0, times_correct=0, last_answer=None, last_result="incorrect"
            )
        history.times_seen += 1
        history.times_correct += 1 if outcome.is_correct else 0
        history.last_answer = outcome.user_answer
        history.last_result = "correct" if outcome.is_correct else "incorrect"

        session_question = session.get_question(key)
        if session_question is None:
            continue

        category = effective_category(session_question.question)
        skill = profile.skill_levels.get(category)
        if skill is None:
            skill = profile.skill_levels[category] = create_skill_level()

        update_skill(
            skill,
            effective_difficulty(session_question.question),
            outcome.score,
            k=adaptive.adjustment_speed,
        )

    logger.debug(
        f"Recorded session {session.id} for {profile.id}: score {summary.score:.1f}, "
        f"{len(summary.per_question)} graded question(s)"
    )
    return profile


def skills_for_adaptation(profile: UserProfile, min_questions: int) -> SkillLevels:
    """Skill levels with enough attempts to steer adaptive selection."""
    return {
        category: skill
        for category, skill in profile.skill_levels.items()
        if skill.questions_attempted >= min_questions
    }


def estimate_initial_skills(profile: UserProfile, registry: BankRegistry) -> SkillLevels:
    """
    Seed skill levels for categories the profile has history in but no skill for.

    Questions no longer in the registry are ignored. Returns the newly
    created skill levels (also stored on the profile).
    """
    questions = {
        composite_key(bank.id, question.id): question
        for bank in registry
        for question in bank.questions
    }
    records: dict[str, list[QuestionRecord]] = defaultdict(list)

    for key, history in profile.question_history.items():
        question = questions.get(key)
        if question is None:
            continue
        records[effective_category(question)].append(
            QuestionRecord(
                difficulty=effective_difficulty(question),
                times_correct=history.times_correct,
                times_seen=history.times_seen,
            )
        )

    created: SkillLevels = {}
    for category, category_records in records.items():
        if category in profile.skill_levels:
            continue
        skill = create_skill_level(estimate_from_history(category_records))
        profile.skill_levels[category] = created[category] = skill

    return created


class ProfileStore:
    """Profiles keyed by id."""

    def __init__(self):
        self._profiles: dict[str, UserProfile] = {}

    def create(self, profile_id: str, name: str) -> UserProfile:
        if profile_id in self._profiles:
            raise ValueError(f"Profile already exists: {profile_id}")
        profile = self._profiles[profile_id] = UserProfile(id=profile_id, name=name)
        return profile

    def get(self, profile_id: str) -> UserProfile | None:
        return self._profiles.get(profile_id)

    def require(self, profile_id: str) -> UserProfile:
        profile = self._profiles.get(profile_id)
        if profile is None:
            raise ProfileNotFoundError(f"User not found: {profile_id}")
        return profile

    def delete(self, profile_id: str) -> bool:
        return self._profiles.pop(profile_id, None) is not None

    def all(self) -> list[UserProfile]:
        return list(self._profiles.values())
