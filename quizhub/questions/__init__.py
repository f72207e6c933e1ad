"""
Questions: authored question banks.

- schema: Question variants, QuestionBank, metadata defaults, composite keys
- validator: Raw bank validation (errors and warnings)
- registry: Bank discovery and lookup by id
"""

from quizhub.questions.registry import BankRegistry, load_bank_file
from quizhub.questions.schema import (
    AcceptableAnswer,
    AnswerVariant,
    FillInBlankQuestion,
    MultipleChoiceMultiQuestion,
    MultipleChoiceSingleQuestion,
    Question,
    QuestionBank,
    QuestionMeta,
    QuestionType,
    ShortAnswerQuestion,
    TrueFalseQuestion,
    composite_key,
    effective_category,
    effective_difficulty,
    parse_question,
    split_composite_key,
)
from quizhub.questions.validator import (
    ValidationIssue,
    ValidationResult,
    filter_valid_questions,
    validate_bank,
)

__all__ = [
    # Schema
    "AcceptableAnswer",
    "AnswerVariant",
    "FillInBlankQuestion",
    "MultipleChoiceMultiQuestion",
    "MultipleChoiceSingleQuestion",
    "Question",
    "QuestionBank",
    "QuestionMeta",
    "QuestionType",
    "ShortAnswerQuestion",
    "TrueFalseQuestion",
    "composite_key",
    "effective_category",
    "effective_difficulty",
    "parse_question",
    "split_composite_key",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    "filter_valid_questions",
    "validate_bank",
    # Registry
    "BankRegistry",
    "load_bank_file",
]
