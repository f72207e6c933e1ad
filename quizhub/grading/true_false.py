"""
True/False grader.
"""

from typing import Any

from quizhub.config import GradingConfig
from quizhub.questions.schema import QuestionType, TrueFalseQuestion

from . import register
from .base import GradeResult


@register(QuestionType.TRUE_FALSE)
class TrueFalseGrader:
    """Grader for true/false statements."""

    def check(self, question: TrueFalseQuestion, answer: Any, config: GradingConfig) -> GradeResult:
        if not isinstance(answer, bool):
            return GradeResult.wrong_shape()

        return GradeResult.binary(answer == question.correct)

    def correct_answer(self, question: TrueFalseQuestion) -> bool:
        return question.correct
