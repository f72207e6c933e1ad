"""
Answer grading.

Each question variant has its own grader module with:
- check(): Grade a submitted value against the question
- correct_answer(): The expected answer for display

Graders register themselves by variant; importing this package fails if
any QuestionType is left without a grader.
"""

from typing import TYPE_CHECKING, Any

from quizhub.config import GradingConfig
from quizhub.questions.schema import BaseQuestion, QuestionType, question_type

if TYPE_CHECKING:
    from .base import GradeResult, QuestionGrader


# Grader registry - populated by @register decorator
GRADERS: dict[QuestionType, "QuestionGrader"] = {}


def register(qtype: QuestionType):
    """Decorator to register a grader for a question variant."""
    def decorator(cls):
        GRADERS[qtype] = cls()
        return cls
    return decorator


def get_grader(qtype: str | QuestionType) -> "QuestionGrader | None":
    """Get the grader for a question variant."""
    if isinstance(qtype, str):
        try:
            qtype = QuestionType(qtype.lower())
        except ValueError:
            return None
    return GRADERS.get(qtype)


# Import graders to trigger registration
from . import choice
from . import true_false
from . import text_answer

_missing = [t.value for t in QuestionType if t not in GRADERS]
if _missing:
    raise RuntimeError(f"No grader registered for question type(s): {', '.join(_missing)}")


def grade(question: BaseQuestion, answer: Any, config: GradingConfig) -> "GradeResult":
    """Grade one submitted value against a question."""
    return GRADERS[question_type(question)].check(question, answer, config)


def correct_answer_for(question: BaseQuestion) -> Any:
    """Expected answer of a question, for display."""
    return GRADERS[question_type(question)].correct_answer(question)


from .base import MANUAL_GRADING_REQUIRED, AnswerValue, GradeResult  # noqa: E402
from .fuzzy_match import MatchResult, MatchType, find_best_match, grade_text_answer  # noqa: E402
from .text_similarity import edit_distance, normalize, similarity  # noqa: E402

__all__ = [
    "GRADERS",
    "AnswerValue",
    "GradeResult",
    "MANUAL_GRADING_REQUIRED",
    "MatchResult",
    "MatchType",
    "correct_answer_for",
    "edit_distance",
    "find_best_match",
    "get_grader",
    "grade",
    "grade_text_answer",
    "normalize",
    "register",
    "similarity",
]
