"""
Skill analytics: summaries and insights over a learner's skill levels.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum

from quizhub.adaptive.elo_rating import DEFAULT_LEVEL, MAX_LEVEL, MIN_LEVEL, SkillLevel, SkillLevels

TREND_THRESHOLD = 0.15
MIN_TREND_SAMPLES = 3
MIN_ATTEMPTS_FOR_RANKING = 5


class SkillTrend(str, Enum):
    """Direction of recent performance."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"
    INSUFFICIENT_DATA = "insufficient_data"


@dataclass
class CategorySummary:
    """Performance summary for one category."""

    category: str
    current_level: float
    confidence: float
    questions_attempted: int
    recent_accuracy: float  # 0-1
    trend: SkillTrend


@dataclass
class SkillSummary:
    """Overall summary across categories."""

    overall_level: float
    total_questions_attempted: int
    category_summaries: list[CategorySummary] = field(default_factory=list)
    strongest_category: str | None = None
    weakest_category: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class DifficultyRange:
    min: float
    max: float
    optimal: float


def recent_accuracy(recent_performance: list[float]) -> float:
    """Mean of recent scores, 0 when there are none."""
    if not recent_performance:
        return 0.0
    return sum(recent_performance) / len(recent_performance)


def skill_trend(recent_performance: list[float]) -> SkillTrend:
    """Compare the second half of the window with the first half."""
    if len(recent_performance) < MIN_TREND_SAMPLES:
        return SkillTrend.INSUFFICIENT_DATA

    midpoint = len(recent_performance) // 2
    first_half = recent_performance[:midpoint]
    second_half = recent_performance[midpoint:]

    difference = recent_accuracy(second_half) - recent_accuracy(first_half)

    if difference > TREND_THRESHOLD:
        return SkillTrend.IMPROVING
    if difference < -TREND_THRESHOLD:
        return SkillTrend.DECLINING
    return SkillTrend.STABLE


def category_summary(category: str, skill: SkillLevel) -> CategorySummary:
    return CategorySummary(
        category=category,
        current_level=skill.estimated_level,
        confidence=skill.confidence,
        questions_attempted=skill.questions_attempted,
        recent_accuracy=recent_accuracy(skill.recent_performance),
        trend=skill_trend(skill.recent_performance),
    )


def skill_summary(skill_levels: SkillLevels) -> SkillSummary:
    """
    Summarize all categories.

    The overall level is weighted by confidence x attempts (2.5 when no
    category carries weight). Strongest/weakest only consider categories
    with at least 5 attempts.
    """
    if not skill_levels:
        return SkillSummary(overall_level=DEFAULT_LEVEL, total_questions_attempted=0)

    summaries = [category_summary(category, skill) for category, skill in skill_levels.items()]

    total_weight = 0.0
    weighted_sum = 0.0
    for summary in summaries:
        weight = summary.confidence * summary.questions_attempted
        weighted_sum += summary.current_level * weight
        total_weight += weight

    ranked = sorted(
        (s for s in summaries if s.questions_attempted >= MIN_ATTEMPTS_FOR_RANKING),
        key=lambda s: s.current_level,
        reverse=True,
    )

    return SkillSummary(
        overall_level=weighted_sum / total_weight if total_weight > 0 else DEFAULT_LEVEL,
        total_questions_attempted=sum(s.questions_attempted for s in summaries),
        category_summaries=summaries,
        strongest_category=ranked[0].category if ranked else None,
        weakest_category=ranked[-1].category if ranked else None,
    )


def recommended_difficulty(skill_level: float, target_accuracy: float = 0.7) -> DifficultyRange:
    """Difficulty band for the next questions: optimal +/- 1, rounded to 0.1."""
    offset = (0.7 - target_accuracy) * 2
    optimal = max(MIN_LEVEL, min(MAX_LEVEL, skill_level + offset))

    return DifficultyRange(
        min=round(max(MIN_LEVEL, optimal - 1), 1),
        max=round(min(MAX_LEVEL, optimal + 1), 1),
        optimal=round(optimal, 1),
    )


def growth_rate(recent_performance: list[float]) -> float:
    """Least-squares slope of recent scores, scaled x10 and clamped to [-1, 1]."""
    n = len(recent_performance)
    if n < MIN_TREND_SAMPLES:
        return 0.0

    sum_x = n * (n - 1) / 2
    sum_y = sum(recent_performance)
    sum_xy = sum(x * y for x, y in enumerate(recent_performance))
    sum_x2 = sum(x * x for x in range(n))

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
    return max(-1.0, min(1.0, slope * 10))


def insights(summary: SkillSummary) -> list[str]:
    """Human-readable observations about a skill summary."""
    messages: list[str] = []

    level = summary.overall_level
    if level < 2:
        messages.append("You're just getting started. Keep practicing!")
    elif level < 3:
        messages.append("You're building a solid foundation.")
    elif level < 4:
        messages.append("You're developing strong skills!")
    elif level < 4.5:
        messages.append("You're approaching expert level!")
    else:
        messages.append("Outstanding performance! You're a master!")

    improving = [s.category for s in summary.category_summaries if s.trend == SkillTrend.IMPROVING]
    declining = [s.category for s in summary.category_summaries if s.trend == SkillTrend.DECLINING]

    if improving:
        messages.append(f"Strong improvement in: {', '.join(improving)}")
    if declining:
        messages.append(f"Consider reviewing: {', '.join(declining)}")

    if (
        summary.strongest_category
        and summary.weakest_category
        and summary.strongest_category != summary.weakest_category
    ):
        messages.append(f"Strongest area: {summary.strongest_category}")
        messages.append(f"Focus area: {summary.weakest_category}")

    if summary.total_questions_attempted < 10:
        messages.append("Complete more questions for better skill estimates.")

    return messages
