"""
Base protocol and types for question graders.
"""

from dataclasses import dataclass
from typing import Any, Protocol, Union

from quizhub.config import GradingConfig
from quizhub.grading.fuzzy_match import MatchResult, MatchType

# number | number[] | bool | str, depending on the question variant
AnswerValue = Union[int, float, list, bool, str]

MANUAL_GRADING_REQUIRED = "Manual grading required"


@dataclass
class GradeResult:
    """Result of grading one submitted answer."""

    is_correct: bool
    score: float  # 0-1, supports partial credit
    match_type: MatchType
    similarity: float | None = None  # text variants only
    matched_answer: str | None = None
    feedback: str | None = None

    @classmethod
    def binary(cls, is_correct: bool) -> "GradeResult":
        """All-or-nothing result for the non-text variants."""
        return cls(
            is_correct=is_correct,
            score=1.0 if is_correct else 0.0,
            match_type=MatchType.EXACT if is_correct else MatchType.NONE,
        )

    @classmethod
    def wrong_shape(cls) -> "GradeResult":
        """Submitted value has the wrong type for the question."""
        return cls(is_correct=False, score=0.0, match_type=MatchType.NONE)

    @classmethod
    def from_match(cls, match: MatchResult) -> "GradeResult":
        return cls(
            is_correct=match.matched,
            score=match.score,
            match_type=match.match_type,
            similarity=match.similarity,
            matched_answer=match.matched_answer,
            feedback=match.feedback,
        )


def as_index(value: Any) -> int | None:
    """Interpret a submitted value as a choice index, None if it is not one."""
    # bool is an int subclass but never an index
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


class QuestionGrader(Protocol):
    """Protocol for per-variant graders."""

    def check(self, question: Any, answer: Any, config: GradingConfig) -> GradeResult:
        """Grade a submitted value. Never raises on a wrong value shape."""
        ...

    def correct_answer(self, question: Any) -> Any:
        """The expected answer, for display alongside a graded result."""
        ...
