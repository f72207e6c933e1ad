"""
Adaptive difficulty.

Components:
- elo_rating: Per-category skill estimate (Elo on a 1-5 scale)
- question_selector: Weighted sampling of questions near the learner's level
- skill_analytics: Summaries, trends and insights over skill levels
"""
from quizhub.adaptive.elo_rating import (
    QuestionRecord,
    SkillLevel,
    SkillLevels,
    calculate_confidence,
    create_skill_level,
    estimate_from_history,
    expected_score,
    update_level,
    update_skill,
)
from quizhub.adaptive.question_selector import (
    AdaptiveReadiness,
    Candidate,
    average_difficulty,
    difficulty_distribution,
    question_weight,
    select_adaptive_questions,
    validate_for_adaptive,
    weighted_sample,
)
from quizhub.adaptive.skill_analytics import (
    CategorySummary,
    SkillSummary,
    SkillTrend,
    insights,
    recommended_difficulty,
    skill_summary,
)

__all__ = [
    # Skill estimation
    "QuestionRecord",
    "SkillLevel",
    "SkillLevels",
    "calculate_confidence",
    "create_skill_level",
    "estimate_from_history",
    "expected_score",
    "update_level",
    "update_skill",
    # Selection
    "AdaptiveReadiness",
    "Candidate",
    "average_difficulty",
    "difficulty_distribution",
    "question_weight",
    "select_adaptive_questions",
    "validate_for_adaptive",
    "weighted_sample",
    # Analytics
    "CategorySummary",
    "SkillSummary",
    "SkillTrend",
    "insights",
    "recommended_difficulty",
    "skill_summary",
]
