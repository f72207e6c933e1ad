"""
Adaptive Question Selection.

Selects questions near the learner's skill level using weighted sampling
without replacement:
- Weight decays exponentially with |skill - difficulty|
- Target accuracy above 0.7 favors easier questions, below 0.7 harder ones
- Weights only decide WHICH questions are picked; presentation order is
  an independent shuffle
"""

from __future__ import annotations

import math
import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence, TypeVar

from loguru import logger

from quizhub.adaptive.elo_rating import DEFAULT_LEVEL, SkillLevels
from quizhub.questions.schema import BaseQuestion, effective_category, effective_difficulty

BASELINE_ACCURACY = 0.7
DECAY_RATE = 0.7
MIN_ADJUSTMENT = 0.1

T = TypeVar("T")


@dataclass
class Candidate:
    """A question eligible for selection, with its composite key."""

    question: BaseQuestion
    composite_key: str
    bank_id: str = ""


def question_weight(
    question: BaseQuestion,
    skill_levels: SkillLevels,
    target_accuracy: float = BASELINE_ACCURACY,
) -> float:
    """
    Selection weight of a question for this learner.

    Peaks at 1.0 when difficulty equals skill (about 0.5 at a 1-level gap),
    then scaled by the target-accuracy adjustment (never below 0.1).
    """
    difficulty = effective_difficulty(question)
    skill = skill_levels.get(effective_category(question))
    user_level = skill.estimated_level if skill is not None else DEFAULT_LEVEL

    base_weight = math.exp(-abs(user_level - difficulty) * DECAY_RATE)

    adjustment = 1.0
    if target_accuracy > BASELINE_ACCURACY:
        if difficulty < user_level:
            adjustment = 1 + (target_accuracy - BASELINE_ACCURACY) * 2  # up to +0.6
        elif difficulty > user_level:
            adjustment = 1 - (target_accuracy - BASELINE_ACCURACY) * 1.5
    elif target_accuracy < BASELINE_ACCURACY:
        if difficulty > user_level:
            adjustment = 1 + (BASELINE_ACCURACY - target_accuracy) * 2  # up to +1.4

    return base_weight * max(MIN_ADJUSTMENT, adjustment)


def weighted_sample(
    items: Sequence[T],
    weights: Sequence[float],
    count: int,
    rng: random.Random | None = None,
) -> list[T]:
    """
    Draw up to ``count`` distinct items with probability proportional to weight.

    When every remaining weight is zero the draw is uniform.
    """
    rng = rng or random.Random()
    remaining = list(zip(items, weights))
    selected: list[T] = []

    while remaining and len(selected) < count:
        total = sum(weight for _, weight in remaining)

        if total <= 0:
            idx = rng.randrange(len(remaining))
        else:
            threshold = rng.random() * total
            cumulative = 0.0
            idx = len(remaining) - 1  # float round-off lands on the last item
            for j, (_, weight) in enumerate(remaining):
                cumulative += weight
                if threshold < cumulative:
                    idx = j
                    break

        selected.append(remaining.pop(idx)[0])

    return selected


def select_adaptive_questions(
    candidates: Sequence[Candidate],
    skill_levels: SkillLevels,
    count: int,
    target_accuracy: float = BASELINE_ACCURACY,
    randomize: bool = True,
    rng: random.Random | None = None,
) -> list[Candidate]:
    """
    Pick ``min(count, len(candidates))`` questions biased toward the learner's level.

    Args:
        candidates: Deduplicated questions with composite keys
        skill_levels: Learner skill by category (read only)
        count: Number of questions wanted
        target_accuracy: Desired fraction correct (0-1)
        randomize: Shuffle the chosen questions' presentation order
        rng: Random source (seed it for reproducible selection)

    Returns:
        Selected candidates, no duplicates
    """
    rng = rng or random.Random()
    weights = [question_weight(c.question, skill_levels, target_accuracy) for c in candidates]
    selected = weighted_sample(candidates, weights, count, rng)

    if randomize:
        rng.shuffle(selected)

    logger.debug(
        f"Adaptive selection: {len(selected)}/{len(candidates)} questions "
        f"(target accuracy {target_accuracy:.2f}, avg difficulty "
        f"{average_difficulty([c.question for c in selected]):.2f})"
    )
    return selected


def difficulty_distribution(questions: Sequence[BaseQuestion]) -> dict[float, int]:
    """Count of questions per effective difficulty."""
    return dict(Counter(effective_difficulty(q) for q in questions))


def average_difficulty(questions: Sequence[BaseQuestion]) -> float:
    """Mean effective difficulty, 3 for an empty list."""
    if not questions:
        return 3.0
    return sum(effective_difficulty(q) for q in questions) / len(questions)


@dataclass
class AdaptiveReadiness:
    """Whether a pool carries enough metadata for adaptive selection."""

    valid: bool
    missing_difficulty: int
    missing_category: int
    warnings: list[str] = field(default_factory=list)


def validate_for_adaptive(questions: Sequence[BaseQuestion]) -> AdaptiveReadiness:
    """
    Check difficulty/category metadata coverage of a question pool.

    Invalid only when every question lacks a difficulty.
    """
    missing_difficulty = sum(1 for q in questions if q.meta is None or q.meta.difficulty is None)
    missing_category = sum(1 for q in questions if q.meta is None or not q.meta.category)

    warnings: list[str] = []
    if missing_difficulty:
        warnings.append(
            f"{missing_difficulty} questions missing difficulty rating (will default to 3)"
        )
    if missing_category:
        warnings.append(f'{missing_category} questions missing category (will use "general")')

    return AdaptiveReadiness(
        valid=missing_difficulty < len(questions),
        missing_difficulty=missing_difficulty,
        missing_category=missing_category,
        warnings=warnings,
    )
