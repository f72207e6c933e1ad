"""
Question bank schema.

Questions are authored as JSON and parsed into a tagged union keyed on
``type``. Parsed questions are frozen: a session binds them as-is and
never edits them.

The metadata defaults (difficulty 3, category "general") live only in
effective_difficulty() and effective_category(); everything that needs a
question's difficulty or category goes through those two functions.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_DIFFICULTY = 3.0
DEFAULT_CATEGORY = "general"
COMPOSITE_KEY_SEPARATOR = "::"


class QuestionType(str, Enum):
    """Supported question variants."""

    MULTIPLE_CHOICE_SINGLE = "multiple_choice_single"
    MULTIPLE_CHOICE_MULTI = "multiple_choice_multi"
    TRUE_FALSE = "true_false"
    FILL_IN_BLANK = "fill_in_blank"
    SHORT_ANSWER = "short_answer"


class QuizModel(BaseModel):
    """Base for authored content: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class AnswerVariant(QuizModel):
    """An acceptable answer with per-answer matching overrides."""

    value: str
    normalize: bool | None = None  # legacy flag, checked before case_sensitive
    case_sensitive: bool | None = None
    exact_match: bool = False
    partial_credit: float | None = Field(default=None, ge=0.0, le=1.0)
    feedback: str | None = None


AcceptableAnswer = Union[str, AnswerVariant]


class QuestionMeta(QuizModel):
    """Optional question metadata. Extra authored keys are kept."""

    model_config = ConfigDict(extra="allow")

    difficulty: float | None = None
    category: str | None = None


class BaseQuestion(QuizModel):
    id: str
    text: str
    explanation: str | None = None
    meta: QuestionMeta | None = None


class MultipleChoiceSingleQuestion(BaseQuestion):
    type: Literal["multiple_choice_single"] = "multiple_choice_single"
    choices: list[str]
    correct: list[int]  # typically one index


class MultipleChoiceMultiQuestion(BaseQuestion):
    type: Literal["multiple_choice_multi"] = "multiple_choice_multi"
    choices: list[str]
    correct: list[int]


class TrueFalseQuestion(BaseQuestion):
    type: Literal["true_false"] = "true_false"
    correct: bool = Field(strict=True)


class FillInBlankQuestion(BaseQuestion):
    type: Literal["fill_in_blank"] = "fill_in_blank"
    acceptable_answers: list[AcceptableAnswer]


class ShortAnswerQuestion(BaseQuestion):
    type: Literal["short_answer"] = "short_answer"
    correct: str | None = None  # reference answer; absent means manual grading


Question = Annotated[
    Union[
        MultipleChoiceSingleQuestion,
        MultipleChoiceMultiQuestion,
        TrueFalseQuestion,
        FillInBlankQuestion,
        ShortAnswerQuestion,
    ],
    Field(discriminator="type"),
]


class QuestionBank(QuizModel):
    """A named, versioned collection of questions (one JSON file)."""

    id: str
    title: str
    description: str | None = None
    tags: list[str] | None = None
    version: float | None = None
    author: str | None = None
    allow_random_subset: bool | None = None
    default_question_count: int | None = None
    questions: list[Question] = Field(default_factory=list)


class _QuestionEnvelope(BaseModel):
    question: Question


def parse_question(data: dict[str, Any]) -> Question:
    """Parse one raw question dict into its typed variant."""
    return _QuestionEnvelope(question=data).question


def question_type(question: BaseQuestion) -> QuestionType:
    """Return the variant tag of a parsed question as an enum."""
    return QuestionType(question.type)


def effective_difficulty(question: BaseQuestion) -> float:
    """Difficulty on the 1-5 scale, 3 when the author gave none."""
    if question.meta is None or question.meta.difficulty is None:
        return DEFAULT_DIFFICULTY
    return float(question.meta.difficulty)


def effective_category(question: BaseQuestion) -> str:
    """Category name, "general" when the author gave none."""
    if question.meta is None or not question.meta.category:
        return DEFAULT_CATEGORY
    return question.meta.category


def composite_key(bank_id: str, question_id: str) -> str:
    """Build the session-wide identity of a question: ``bankId::questionId``."""
    return f"{bank_id}{COMPOSITE_KEY_SEPARATOR}{question_id}"


def split_composite_key(key: str) -> tuple[str, str]:
    """Split ``bankId::questionId`` back into its parts."""
    bank_id, _, question_id = key.partition(COMPOSITE_KEY_SEPARATOR)
    return bank_id, question_id
