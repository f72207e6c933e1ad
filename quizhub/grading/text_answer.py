"""
Free-text graders: fill in the blank and short answer.

Both delegate to the fuzzy matcher. A short answer is graded against its
single reference answer; without one it cannot be auto-graded and is
marked incorrect pending manual review.
"""

from typing import Any

from loguru import logger

from quizhub.config import GradingConfig
from quizhub.grading.fuzzy_match import grade_text_answer
from quizhub.questions.schema import (
    AcceptableAnswer,
    FillInBlankQuestion,
    QuestionType,
    ShortAnswerQuestion,
)

from . import register
from .base import MANUAL_GRADING_REQUIRED, GradeResult


@register(QuestionType.FILL_IN_BLANK)
class FillInBlankGrader:
    """Grader for fill-in-the-blank questions."""

    def check(self, question: FillInBlankQuestion, answer: Any, config: GradingConfig) -> GradeResult:
        if not isinstance(answer, str):
            return GradeResult.wrong_shape()

        match = grade_text_answer(answer, question.acceptable_answers, config)
        return GradeResult.from_match(match)

    def correct_answer(self, question: FillInBlankQuestion) -> list[AcceptableAnswer]:
        return list(question.acceptable_answers)


@register(QuestionType.SHORT_ANSWER)
class ShortAnswerGrader:
    """Grader for short answer questions with an optional reference answer."""

    def check(self, question: ShortAnswerQuestion, answer: Any, config: GradingConfig) -> GradeResult:
        if not isinstance(answer, str):
            return GradeResult.wrong_shape()

        if not question.correct:
            logger.debug(f"Short answer {question.id} has no reference answer, needs manual grading")
            return GradeResult.wrong_shape()

        match = grade_text_answer(answer, [question.correct], config)
        return GradeResult.from_match(match)

    def correct_answer(self, question: ShortAnswerQuestion) -> str:
        return question.correct or MANUAL_GRADING_REQUIRED
