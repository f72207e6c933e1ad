"""
Question bank validator.

Validates raw (decoded JSON) bank data before it is parsed into models.

Rules:
- Bank ``id`` and ``title`` must be non-empty strings
- ``questions`` must be a non-empty list
- Question ``id`` must be unique within a bank
- Unknown question ``type`` => question skipped with a warning
- A bank with no valid questions is invalid
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from pydantic import ValidationError

from quizhub.questions.schema import Question, QuestionType, parse_question

SUPPORTED_QUESTION_TYPES = {t.value for t in QuestionType}


@dataclass
class ValidationIssue:
    """A single error or warning, located by field path."""

    field: str
    message: str
    value: Any = None


@dataclass
class ValidationResult:
    """Outcome of validating a bank or a question."""

    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _is_index(value: Any) -> bool:
    # bool is an int subclass; True is not a choice index
    return isinstance(value, int) and not isinstance(value, bool)


def validate_bank(data: Any) -> ValidationResult:
    """Validate a raw question bank dict."""
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    if not isinstance(data, dict):
        errors.append(ValidationIssue("", "Question bank must be a JSON object", data))
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    if not _non_empty_str(data.get("id")):
        errors.append(ValidationIssue("id", "Bank must have a non-empty string id", data.get("id")))

    if not _non_empty_str(data.get("title")):
        errors.append(
            ValidationIssue("title", "Bank must have a non-empty string title", data.get("title"))
        )

    questions = data.get("questions")
    if not isinstance(questions, list):
        errors.append(ValidationIssue("questions", "Bank must have a questions array", questions))
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    if not questions:
        errors.append(
            ValidationIssue("questions", "Bank must have at least one question", questions)
        )
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    seen_ids: set[str] = set()
    valid_count = 0

    for i, raw in enumerate(questions):
        result = validate_question(raw, i)
        errors.extend(result.errors)
        warnings.extend(result.warnings)

        question_id = raw.get("id") if isinstance(raw, dict) else None
        if isinstance(question_id, str):
            if question_id in seen_ids:
                errors.append(
                    ValidationIssue(
                        f"questions[{i}].id", f"Duplicate question id: {question_id}", question_id
                    )
                )
            else:
                seen_ids.add(question_id)

        if result.valid:
            valid_count += 1

    if valid_count == 0:
        errors.append(
            ValidationIssue(
                "questions", "Bank has no valid questions after validation", len(questions)
            )
        )

    # Optional fields are ignored when malformed
    if "tags" in data and not isinstance(data["tags"], list):
        warnings.append(ValidationIssue("tags", "tags should be an array, ignoring", data["tags"]))

    for key in ("version", "defaultQuestionCount"):
        value = data.get(key)
        if key in data and (not isinstance(value, (int, float)) or isinstance(value, bool)):
            warnings.append(ValidationIssue(key, f"{key} should be a number, ignoring", value))

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def validate_question(q: Any, index: int) -> ValidationResult:
    """Validate a single raw question dict at position ``index``."""
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    prefix = f"questions[{index}]"

    if not isinstance(q, dict):
        errors.append(ValidationIssue(prefix, "Question must be a JSON object", q))
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    if not _non_empty_str(q.get("id")):
        errors.append(
            ValidationIssue(f"{prefix}.id", "Question must have a non-empty string id", q.get("id"))
        )

    qtype = q.get("type")
    if not isinstance(qtype, str) or not qtype:
        errors.append(ValidationIssue(f"{prefix}.type", "Question must have a string type", qtype))
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    if qtype not in SUPPORTED_QUESTION_TYPES:
        warnings.append(
            ValidationIssue(
                f"{prefix}.type", f"Unknown question type: {qtype}, skipping question", qtype
            )
        )
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    if not _non_empty_str(q.get("text")):
        errors.append(
            ValidationIssue(f"{prefix}.text", "Question must have non-empty text", q.get("text"))
        )

    if qtype in (QuestionType.MULTIPLE_CHOICE_SINGLE.value, QuestionType.MULTIPLE_CHOICE_MULTI.value):
        choices = q.get("choices")
        correct = q.get("correct")
        if not isinstance(choices, list) or not choices:
            errors.append(
                ValidationIssue(
                    f"{prefix}.choices",
                    "Multiple choice question must have a non-empty choices array",
                    choices,
                )
            )
        if not isinstance(correct, list) or not correct:
            errors.append(
                ValidationIssue(
                    f"{prefix}.correct",
                    "Multiple choice question must have a non-empty correct array",
                    correct,
                )
            )
        else:
            max_index = len(choices) - 1 if isinstance(choices, list) else -1
            for idx in correct:
                if not _is_index(idx) or idx < 0 or idx > max_index:
                    errors.append(
                        ValidationIssue(
                            f"{prefix}.correct",
                            f"Invalid choice index: {idx} (must be 0-{max_index})",
                            idx,
                        )
                    )

    elif qtype == QuestionType.TRUE_FALSE.value:
        if not isinstance(q.get("correct"), bool):
            errors.append(
                ValidationIssue(
                    f"{prefix}.correct",
                    "True/false question must have a boolean correct value",
                    q.get("correct"),
                )
            )

    elif qtype == QuestionType.FILL_IN_BLANK.value:
        answers = q.get("acceptableAnswers")
        if not isinstance(answers, list) or not answers:
            errors.append(
                ValidationIssue(
                    f"{prefix}.acceptableAnswers",
                    "Fill-in-blank question must have non-empty acceptableAnswers array",
                    answers,
                )
            )
        else:
            for i, ans in enumerate(answers):
                if isinstance(ans, str):
                    continue
                if isinstance(ans, dict):
                    if not _non_empty_str(ans.get("value")):
                        errors.append(
                            ValidationIssue(
                                f"{prefix}.acceptableAnswers[{i}]",
                                "Answer object must have a string value",
                                ans,
                            )
                        )
                else:
                    errors.append(
                        ValidationIssue(
                            f"{prefix}.acceptableAnswers[{i}]",
                            "Answer must be a string or object with value",
                            ans,
                        )
                    )

    elif qtype == QuestionType.SHORT_ANSWER.value:
        correct = q.get("correct")
        if correct is not None and not isinstance(correct, str):
            warnings.append(
                ValidationIssue(
                    f"{prefix}.correct",
                    "Short answer correct field should be a string if provided",
                    correct,
                )
            )

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def filter_valid_questions(questions: list[Any]) -> list[Question]:
    """
    Keep the valid questions of a raw list as parsed models.

    Invalid questions and repeated ids are skipped with a warning; the
    first occurrence of an id wins.
    """
    valid: list[Question] = []
    seen_ids: set[str] = set()

    for i, raw in enumerate(questions):
        result = validate_question(raw, i)

        for warning in result.warnings:
            logger.warning(f"[Bank Validation] {warning.message}")

        if not result.valid:
            if result.errors:
                logger.warning(f"[Bank Validation] Skipping question {i}: {result.errors[0].message}")
            continue

        if raw["id"] in seen_ids:
            logger.warning(f"[Bank Validation] Skipping duplicate question id: {raw['id']}")
            continue

        raw = dict(raw)
        if raw.get("type") == QuestionType.SHORT_ANSWER.value and not isinstance(
            raw.get("correct"), str
        ):
            # Reference answer of the wrong type is dropped, leaving manual grading
            raw.pop("correct", None)

        try:
            question = parse_question(raw)
        except ValidationError as e:
            logger.warning(f"[Bank Validation] Skipping question {i}: {e.errors()[0]['msg']}")
            continue

        seen_ids.add(raw["id"])
        valid.append(question)

    return valid
