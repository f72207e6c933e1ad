"""
Unit tests for the session engine.

Tests session creation (dedup, ordering, limits, adaptive path), answer
storage, whole-session grading and progress.
"""

import random

import pytest

from quizhub.adaptive.elo_rating import create_skill_level
from quizhub.config import GradingConfig
from quizhub.grading import MANUAL_GRADING_REQUIRED, MatchType
from quizhub.session.engine import (
    BankNotFoundError,
    QuestionNotInSessionError,
    SessionError,
    SessionStatus,
    complete_session,
    create_session,
    get_progress,
    grade_session,
    update_answer,
)


class TestCreateSession:
    """Session creation."""

    def test_collects_in_bank_order(self, registry):
        session = create_session(registry, "user-1", ["general"])

        assert [q.question_id for q in session.questions] == ["q1", "q2", "q3", "q4", "q5"]
        assert [q.index for q in session.questions] == [0, 1, 2, 3, 4]
        assert session.questions[0].composite_key == "general::q1"
        assert session.answers == {}
        assert session.user_id == "user-1"
        assert session.status == SessionStatus.CREATED

    def test_same_question_id_in_two_banks(self, registry):
        """Bank id disambiguates; selection order decides the order."""
        session = create_session(registry, "u", ["bank-a", "bank-b"])
        keys = [q.composite_key for q in session.questions]

        assert keys == ["bank-a::q1", "bank-a::q2", "bank-b::q1"]
        assert keys.index("bank-a::q1") < keys.index("bank-b::q1")

        reversed_session = create_session(registry, "u", ["bank-b", "bank-a"])
        assert reversed_session.questions[0].composite_key == "bank-b::q1"

    def test_duplicate_selection_is_deduplicated(self, registry):
        """First occurrence of a composite key wins."""
        session = create_session(registry, "u", ["bank-a", "bank-a"])
        assert [q.composite_key for q in session.questions] == ["bank-a::q1", "bank-a::q2"]

    def test_bank_id_containing_separator(self, bank_factory):
        """Bank and question ids come from the bank, not from splitting the key."""
        bank = bank_factory("a::b", [{"id": "q", "type": "true_false", "text": "x", "correct": True}])
        session = create_session({"a::b": bank}, "u", ["a::b"])

        question = session.questions[0]
        assert question.bank_id == "a::b"
        assert question.question_id == "q"
        assert question.composite_key == "a::b::q"

    def test_unknown_bank_fails_whole_call(self, registry):
        with pytest.raises(BankNotFoundError, match="missing"):
            create_session(registry, "u", ["general", "missing"])

    def test_bank_not_found_is_a_session_error(self):
        assert issubclass(BankNotFoundError, SessionError)

    def test_accepts_plain_mapping(self, sample_bank):
        session = create_session({"general": sample_bank}, "u", ["general"])
        assert len(session.questions) == 5

    def test_limit_truncates(self, registry):
        session = create_session(registry, "u", ["general"], limit=2)
        assert [q.question_id for q in session.questions] == ["q1", "q2"]

    @pytest.mark.parametrize("limit", [0, -1, None])
    def test_non_positive_limit_means_all(self, registry, limit):
        assert len(create_session(registry, "u", ["general"], limit=limit).questions) == 5

    def test_shuffle_is_seeded(self, registry):
        first = create_session(registry, "u", ["general"], randomize=True, rng=random.Random(5))
        second = create_session(registry, "u", ["general"], randomize=True, rng=random.Random(5))

        assert [q.composite_key for q in first.questions] == [q.composite_key for q in second.questions]
        assert sorted(q.question_id for q in first.questions) == ["q1", "q2", "q3", "q4", "q5"]
        assert [q.index for q in first.questions] == [0, 1, 2, 3, 4]

    def test_unique_ids(self, registry):
        assert create_session(registry, "u", ["general"]).id != create_session(registry, "u", ["general"]).id

    def test_adaptive_path_respects_limit(self, registry, rng):
        session = create_session(
            registry,
            "u",
            ["general", "bank-a"],
            limit=3,
            adaptive=True,
            skill_levels={"math": create_skill_level(3.0)},
            rng=rng,
        )
        keys = [q.composite_key for q in session.questions]
        assert len(keys) == 3
        assert len(set(keys)) == 3
        assert [q.index for q in session.questions] == [0, 1, 2]

    def test_adaptive_without_limit_takes_all(self, registry, rng):
        session = create_session(
            registry,
            "u",
            ["general"],
            adaptive=True,
            skill_levels={"general": create_skill_level(2.0)},
            rng=rng,
        )
        assert len(session.questions) == 5

    def test_adaptive_without_skills_uses_default_path(self, registry):
        session = create_session(registry, "u", ["general"], limit=2, adaptive=True, skill_levels={})
        assert [q.question_id for q in session.questions] == ["q1", "q2"]


class TestUpdateAnswer:
    """Answer storage."""

    def test_stores_answer(self, registry):
        session = create_session(registry, "u", ["general"])
        answer = update_answer(session, "general::q3", True)

        assert session.answers["general::q3"] is answer
        assert answer.value is True
        assert answer.is_correct is None
        assert session.status == SessionStatus.IN_PROGRESS

    def test_last_write_wins(self, registry):
        session = create_session(registry, "u", ["general"])
        update_answer(session, "general::q3", True)
        update_answer(session, "general::q3", False)

        assert len(session.answers) == 1
        assert session.answers["general::q3"].value is False

    def test_unknown_key_leaves_session_unchanged(self, registry):
        session = create_session(registry, "u", ["general"])
        update_answer(session, "general::q1", 2)
        before = dict(session.answers)

        with pytest.raises(QuestionNotInSessionError):
            update_answer(session, "bank-a::q1", True)

        assert session.answers == before

    def test_bare_question_id_is_not_a_key(self, registry):
        session = create_session(registry, "u", ["general"])
        with pytest.raises(QuestionNotInSessionError):
            update_answer(session, "q1", 2)


class TestGradeSession:
    """Whole-session grading."""

    @pytest.fixture
    def session(self, registry):
        return create_session(registry, "u", ["general"])

    def test_nothing_answered(self, session, grading_config):
        summary = grade_session(session, grading_config)

        assert summary.total_questions == 5
        assert summary.total_unanswered == 5
        assert summary.score == 0.0
        assert summary.per_question == {}

    def test_score_over_answered_only(self, session, grading_config):
        update_answer(session, "general::q1", 2)  # correct
        update_answer(session, "general::q2", [2, 0])  # correct
        update_answer(session, "general::q3", False)  # wrong

        summary = grade_session(session, grading_config)

        assert summary.total_unanswered == 2
        assert summary.total_correct == 2
        assert summary.total_incorrect == 1
        assert summary.total_score == 2
        assert summary.score == pytest.approx(100 * 2 / 3)

    def test_writes_results_onto_answers(self, session, grading_config):
        update_answer(session, "general::q4", "Pariz")
        grade_session(session, grading_config)

        answer = session.answers["general::q4"]
        assert answer.is_correct is True
        assert answer.score == 1.0
        assert answer.match_type == MatchType.FUZZY
        assert answer.similarity == pytest.approx(0.8)
        assert answer.matched_answer == "Paris"
        assert session.status == SessionStatus.GRADED

    def test_partial_credit_splits_buckets(self, session):
        config = GradingConfig(
            fuzzy_match_threshold=0.9,
            enable_partial_credit=True,
            partial_credit_threshold=0.6,
            partial_credit_value=0.5,
        )
        update_answer(session, "general::q4", "Pariz")  # partial 0.5
        update_answer(session, "general::q3", True)  # correct

        summary = grade_session(session, config)

        assert summary.total_correct == pytest.approx(1.5)
        assert summary.total_incorrect == pytest.approx(0.5)
        assert summary.total_score == pytest.approx(1.5)
        assert summary.score == pytest.approx(75.0)

    def test_per_question_detail(self, session, grading_config):
        update_answer(session, "general::q1", 0)
        update_answer(session, "general::q5", "Shakespeare")

        summary = grade_session(session, grading_config)

        wrong = summary.per_question["general::q1"]
        assert wrong.is_correct is False
        assert wrong.user_answer == 0
        assert wrong.correct_answer == [2]

        right = summary.per_question["general::q5"]
        assert right.is_correct is True
        assert right.correct_answer == "Shakespeare"
        assert right.match_type == MatchType.EXACT

    def test_wrong_shape_does_not_raise(self, session, grading_config):
        update_answer(session, "general::q3", "yes")
        summary = grade_session(session, grading_config)
        assert summary.per_question["general::q3"].match_type == MatchType.NONE
        assert summary.score == 0.0

    def test_regrading_is_deterministic(self, session):
        update_answer(session, "general::q4", "Pariz")
        strict = GradingConfig(enable_fuzzy_matching=False)
        lenient = GradingConfig()

        first = grade_session(session, lenient)
        assert grade_session(session, strict).score == 0.0
        assert session.answers["general::q4"].match_type == MatchType.NONE

        again = grade_session(session, lenient)
        assert again.score == first.score
        assert session.answers["general::q4"].match_type == MatchType.FUZZY

    def test_manual_grading_marker(self, bank_factory, grading_config):
        bank = bank_factory("essay", [{"id": "e1", "type": "short_answer", "text": "Discuss."}])
        session = create_session({"essay": bank}, "u", ["essay"])
        update_answer(session, "essay::e1", "Some thoughts")

        summary = grade_session(session, grading_config)
        outcome = summary.per_question["essay::e1"]
        assert outcome.is_correct is False
        assert outcome.correct_answer == MANUAL_GRADING_REQUIRED


class TestCompletionAndProgress:
    """Completion stamp and progress."""

    def test_progress(self, registry):
        session = create_session(registry, "u", ["general"])
        update_answer(session, "general::q1", 2)
        update_answer(session, "general::q2", [0])

        progress = get_progress(session)
        assert progress.answered == 2
        assert progress.total == 5
        assert progress.percent_complete == pytest.approx(40.0)

    def test_progress_of_empty_session(self):
        from quizhub.session.engine import Session

        progress = get_progress(Session(id="s", user_id="u", bank_ids=[], questions=[]))
        assert progress.percent_complete == 0.0

    def test_complete_is_terminal_status(self, registry, grading_config):
        session = create_session(registry, "u", ["general"])
        update_answer(session, "general::q1", 2)
        grade_session(session, grading_config)
        complete_session(session)

        assert session.completed_at is not None
        assert session.status == SessionStatus.COMPLETED

        grade_session(session, grading_config)
        assert session.status == SessionStatus.COMPLETED

    def test_to_dict(self, registry):
        session = create_session(registry, "u", ["general"])
        update_answer(session, "general::q4", "Paris")

        data = session.to_dict()
        assert data["status"] == "in_progress"
        assert data["questions"][3]["question"]["acceptableAnswers"] == ["Paris"]
        assert data["answers"]["general::q4"]["value"] == "Paris"
