"""
Unit tests for the Elo skill estimator.
"""

import itertools

import pytest

from quizhub.adaptive.elo_rating import (
    DEFAULT_LEVEL,
    PERFORMANCE_WINDOW,
    QuestionRecord,
    SkillLevel,
    calculate_confidence,
    create_skill_level,
    estimate_from_history,
    expected_score,
    update_level,
    update_skill,
)

LEVELS = [1.0, 1.5, 2.5, 3.0, 4.2, 5.0]


class TestExpectedScore:
    """Logistic expected score."""

    def test_equal_level_is_half(self):
        assert expected_score(3.0, 3.0) == pytest.approx(0.5)

    def test_two_level_gap(self):
        """A 2-level gap gives roughly 0.76 / 0.24."""
        assert expected_score(4.0, 2.0) == pytest.approx(0.7597, abs=1e-3)
        assert expected_score(2.0, 4.0) == pytest.approx(0.2403, abs=1e-3)

    def test_symmetry(self):
        assert expected_score(1.0, 5.0) + expected_score(5.0, 1.0) == pytest.approx(1.0)

    def test_far_out_of_range_difficulty_saturates(self):
        """Authored difficulties far off the scale do not overflow."""
        assert expected_score(2.5, 2000.0) == pytest.approx(0.0)
        assert expected_score(2.5, -2000.0) == pytest.approx(1.0)

    def test_update_skill_with_extreme_difficulty(self):
        skill = update_skill(create_skill_level(), 2000.0, 1.0)
        assert skill.estimated_level == 5.0
        assert skill.questions_attempted == 1

        skill = update_skill(create_skill_level(), -2000.0, 0.0)
        assert skill.estimated_level == 1.0


class TestUpdateLevel:
    """Single-outcome level update."""

    def test_correct_at_equal_level(self):
        """K * (1 - 0.5) = 16 with the default K, clamped to 5."""
        assert update_level(3.0, 3.0, 1.0) == 5.0

    def test_small_k(self):
        assert update_level(3.0, 3.0, 1.0, k=0.5) == pytest.approx(3.25)
        assert update_level(3.0, 3.0, 0.0, k=0.5) == pytest.approx(2.75)

    @pytest.mark.parametrize("level,difficulty", itertools.product(LEVELS, LEVELS))
    def test_monotonic_and_bounded(self, level, difficulty):
        """Correct never lowers, incorrect never raises, both stay in [1, 5]."""
        for k in (0.5, 32):
            up = update_level(level, difficulty, 1.0, k=k)
            down = update_level(level, difficulty, 0.0, k=k)
            assert level <= up <= 5.0
            assert 1.0 <= down <= level

    def test_score_is_clamped(self):
        """Out-of-range scores behave like 0 or 1."""
        assert update_level(3.0, 3.0, 7.0, k=0.5) == update_level(3.0, 3.0, 1.0, k=0.5)
        assert update_level(3.0, 3.0, -2.0, k=0.5) == update_level(3.0, 3.0, 0.0, k=0.5)

    def test_partial_score(self):
        """A score equal to the expectation leaves the level unchanged."""
        assert update_level(3.0, 3.0, 0.5, k=0.5) == pytest.approx(3.0)


class TestConfidence:
    """Consistency-based confidence."""

    def test_empty_window(self):
        assert calculate_confidence([]) == 0.0

    def test_single_sample(self):
        assert calculate_confidence([1.0]) == 0.3

    def test_consistent_window_is_capped(self):
        """Zero variance with a full window hits the 0.95 cap."""
        assert calculate_confidence([1.0] * 10) == pytest.approx(0.95)
        assert calculate_confidence([0.0] * 10) == pytest.approx(0.95)

    def test_alternating_window(self):
        """Maximum variance leaves only the base and the data bonus."""
        assert calculate_confidence([1.0, 0.0] * 5) == pytest.approx(0.35)

    def test_consistent_beats_alternating(self):
        alternating = calculate_confidence([1.0, 0.0] * 5)
        assert calculate_confidence([1.0] * 10) > alternating
        assert calculate_confidence([0.0] * 10) > alternating

    def test_small_window_bonus(self):
        # variance 0, n=2: 0.3 + 0.65 + 0.01, capped at 0.95
        assert calculate_confidence([1.0, 1.0]) == pytest.approx(0.95)
        # variance 0.0625 => normalized 0.25
        assert calculate_confidence([1.0, 0.5]) == pytest.approx(0.3 + 0.65 * 0.75 + 0.01)


class TestUpdateSkill:
    """In-place skill updates."""

    def test_new_skill_defaults(self):
        skill = create_skill_level()
        assert skill.estimated_level == DEFAULT_LEVEL
        assert skill.confidence == 0.0
        assert skill.questions_attempted == 0
        assert skill.recent_performance == []

    def test_initial_level_is_clamped(self):
        assert create_skill_level(9.0).estimated_level == 5.0

    def test_mutates_in_place(self):
        skill = create_skill_level(3.0)
        result = update_skill(skill, 3.0, 1.0, k=0.5)

        assert result is skill
        assert skill.estimated_level == pytest.approx(3.25)
        assert skill.questions_attempted == 1
        assert skill.recent_performance == [1.0]
        assert skill.confidence == 0.3

    def test_window_keeps_last_ten(self):
        skill = create_skill_level()
        for i in range(15):
            update_skill(skill, 3.0, 1.0 if i >= 5 else 0.0, k=0.5)

        assert len(skill.recent_performance) == PERFORMANCE_WINDOW
        assert skill.recent_performance == [1.0] * 10
        assert skill.questions_attempted == 15
        assert skill.confidence == pytest.approx(0.95)

    def test_stored_score_is_clamped(self):
        skill = create_skill_level()
        update_skill(skill, 3.0, 1.5, k=0.5)
        assert skill.recent_performance == [1.0]

    def test_refreshes_timestamp(self):
        skill = SkillLevel(last_updated="2000-01-01T00:00:00+00:00")
        update_skill(skill, 3.0, 1.0)
        assert skill.last_updated != "2000-01-01T00:00:00+00:00"

    def test_from_dict_accepts_camel_case(self):
        skill = SkillLevel.from_dict(
            {
                "estimatedLevel": 3.5,
                "confidence": 0.6,
                "questionsAttempted": 12,
                "recentPerformance": [1, 0, 1],
                "lastUpdated": "2024-05-01T10:00:00Z",
            }
        )
        assert skill.estimated_level == 3.5
        assert skill.questions_attempted == 12
        assert skill.recent_performance == [1, 0, 1]
        assert SkillLevel.from_dict(skill.to_dict()) == skill


class TestEstimateFromHistory:
    """Seeding a level from past question performance."""

    def test_no_history(self):
        assert estimate_from_history([]) == DEFAULT_LEVEL

    def test_unseen_records_skipped(self):
        assert estimate_from_history([QuestionRecord(4.0, 0, 0)]) == DEFAULT_LEVEL

    def test_seventy_percent_matches_difficulty(self):
        assert estimate_from_history([QuestionRecord(3.0, 7, 10)]) == pytest.approx(3.0)

    def test_weighted_by_times_seen(self):
        records = [
            QuestionRecord(difficulty=2.0, times_correct=3, times_seen=3),  # 2.6
            QuestionRecord(difficulty=4.0, times_correct=0, times_seen=1),  # 2.6
        ]
        assert estimate_from_history(records) == pytest.approx(2.6)

    def test_clamped(self):
        assert estimate_from_history([QuestionRecord(5.0, 10, 10)]) == 5.0
        assert estimate_from_history([QuestionRecord(1.0, 0, 10)]) == 1.0
