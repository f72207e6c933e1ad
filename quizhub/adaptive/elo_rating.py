"""
Elo-style skill rating for adaptive difficulty.

Estimates a learner's skill per category on the same 1-5 scale as
question difficulty and updates it from graded outcomes.

Formula:
- Expected score = 1 / (1 + 10^((difficulty - level) / 4))
- New level = clamp(level + K * (score - expected), 1, 5)
- Confidence measures consistency of the last 10 outcomes, not accuracy
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Mapping

MIN_LEVEL = 1.0
MAX_LEVEL = 5.0
DEFAULT_LEVEL = 2.5
DEFAULT_K = 32.0
PERFORMANCE_WINDOW = 10

# Maximum population variance of outcomes in [0, 1]
_MAX_VARIANCE = 0.25
_MAX_EXPONENT = 50.0


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass
class SkillLevel:
    """Skill estimate for one category."""

    estimated_level: float = DEFAULT_LEVEL  # 1-5
    confidence: float = 0.0  # 0-1
    questions_attempted: int = 0
    recent_performance: list[float] = field(default_factory=list)  # last 10 scores
    last_updated: str = field(default_factory=_now)  # ISO format

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping) -> "SkillLevel":
        """Create from dictionary (snake_case or camelCase keys)."""
        return cls(
            estimated_level=data.get("estimated_level", data.get("estimatedLevel", DEFAULT_LEVEL)),
            confidence=data.get("confidence", 0.0),
            questions_attempted=data.get(
                "questions_attempted", data.get("questionsAttempted", 0)
            ),
            recent_performance=list(
                data.get("recent_performance", data.get("recentPerformance", []))
            ),
            last_updated=data.get("last_updated", data.get("lastUpdated")) or _now(),
        )


# Category name -> skill estimate
SkillLevels = dict[str, SkillLevel]


def create_skill_level(initial_level: float = DEFAULT_LEVEL) -> SkillLevel:
    """New skill estimate with no history."""
    return SkillLevel(estimated_level=_clamp(initial_level, MIN_LEVEL, MAX_LEVEL))


def expected_score(user_level: float, question_difficulty: float) -> float:
    """
    Probability of answering correctly.

    0.5 when level equals difficulty; a 2-level gap gives about 0.76/0.24.
    """
    # Bounded so far out-of-range difficulties saturate instead of overflowing
    exponent = _clamp((question_difficulty - user_level) / 4, -_MAX_EXPONENT, _MAX_EXPONENT)
    return 1.0 / (1.0 + 10 ** exponent)


def update_level(
    current_level: float,
    question_difficulty: float,
    score: float,
    k: float = DEFAULT_K,
) -> float:
    """
    Elo update of a skill level from one outcome.

    Args:
        current_level: Current skill level (1-5)
        question_difficulty: Question difficulty (1-5)
        score: Outcome in [0, 1]; out-of-range input is clamped
        k: Adjustment speed (higher = faster adaptation)

    Returns:
        Updated level, clamped to 1-5
    """
    expected = expected_score(current_level, question_difficulty)
    actual = _clamp(score, 0.0, 1.0)
    return _clamp(current_level + k * (actual - expected), MIN_LEVEL, MAX_LEVEL)


def calculate_confidence(recent_performance: list[float]) -> float:
    """
    Confidence from the consistency of recent outcomes.

    Consistent windows (all right or all wrong) score high, alternating
    windows score low. Empty => 0, one sample => 0.3, capped at 0.95.
    """
    n = len(recent_performance)
    if n == 0:
        return 0.0
    if n == 1:
        return 0.3

    mean = sum(recent_performance) / n
    variance = sum((value - mean) ** 2 for value in recent_performance) / n

    normalized_variance = min(variance, _MAX_VARIANCE) / _MAX_VARIANCE
    scaled = 0.3 + (1 - normalized_variance) * 0.65
    data_bonus = min(n / PERFORMANCE_WINDOW, 1.0) * 0.05

    return min(0.95, scaled + data_bonus)


def update_skill(
    skill: SkillLevel,
    question_difficulty: float,
    score: float,
    k: float = DEFAULT_K,
) -> SkillLevel:
    """Apply one graded outcome to ``skill`` in place and return it."""
    skill.estimated_level = update_level(skill.estimated_level, question_difficulty, score, k)

    skill.recent_performance.append(_clamp(score, 0.0, 1.0))
    if len(skill.recent_performance) > PERFORMANCE_WINDOW:
        del skill.recent_performance[:-PERFORMANCE_WINDOW]

    skill.confidence = calculate_confidence(skill.recent_performance)
    skill.questions_attempted += 1
    skill.last_updated = _now()

    return skill


@dataclass
class QuestionRecord:
    """Aggregated history of one question, used to seed a skill level."""

    difficulty: float
    times_correct: int
    times_seen: int


def estimate_from_history(records: Iterable[QuestionRecord]) -> float:
    """
    Estimate a skill level from past question performance.

    70% accuracy at difficulty X implies a level near X; each record
    contributes ``difficulty + (accuracy - 0.7) * 2`` weighted by times seen.
    """
    total_weight = 0
    weighted_sum = 0.0

    for record in records:
        if record.times_seen <= 0:
            continue
        accuracy = record.times_correct / record.times_seen
        weighted_sum += (record.difficulty + (accuracy - 0.7) * 2) * record.times_seen
        total_weight += record.times_seen

    if total_weight == 0:
        return DEFAULT_LEVEL

    return _clamp(weighted_sum / total_weight, MIN_LEVEL, MAX_LEVEL)
