"""
Multiple choice graders.

- Single: the submitted index must be in the correct set.
- Multi: the submitted index set must equal the correct set. Order and
  repeats do not matter; a partial overlap is simply wrong.
"""

from typing import Any

from quizhub.config import GradingConfig
from quizhub.questions.schema import (
    MultipleChoiceMultiQuestion,
    MultipleChoiceSingleQuestion,
    QuestionType,
)

from . import register
from .base import GradeResult, as_index


@register(QuestionType.MULTIPLE_CHOICE_SINGLE)
class MultipleChoiceSingleGrader:
    """Grader for select-one questions."""

    def check(
        self, question: MultipleChoiceSingleQuestion, answer: Any, config: GradingConfig
    ) -> GradeResult:
        index = as_index(answer)
        if index is None:
            return GradeResult.wrong_shape()

        return GradeResult.binary(index in question.correct)

    def correct_answer(self, question: MultipleChoiceSingleQuestion) -> list[int]:
        return list(question.correct)


@register(QuestionType.MULTIPLE_CHOICE_MULTI)
class MultipleChoiceMultiGrader:
    """Grader for select-many questions (all or nothing)."""

    def check(
        self, question: MultipleChoiceMultiQuestion, answer: Any, config: GradingConfig
    ) -> GradeResult:
        if not isinstance(answer, (list, tuple, set, frozenset)):
            return GradeResult.wrong_shape()

        indices = [as_index(value) for value in answer]
        if any(index is None for index in indices):
            return GradeResult.binary(False)

        return GradeResult.binary(set(indices) == set(question.correct))

    def correct_answer(self, question: MultipleChoiceMultiQuestion) -> list[int]:
        return list(question.correct)
