"""
Fuzzy matching of free-text answers.

Accepts answers with minor typos and variations by comparing the
submitted text against every acceptable answer and keeping the best.

Per-answer overrides (AnswerVariant):
- normalize: legacy flag, wins when set
- case_sensitive: True means compare raw text, no fuzzy attempt
- exact_match: never fuzzy-match this answer
- partial_credit: score for an exact or partial match on this answer
- feedback: returned with a match on this answer
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from quizhub.config import GradingConfig
from quizhub.grading.text_similarity import normalize, similarity
from quizhub.questions.schema import AcceptableAnswer, AnswerVariant


class MatchType(str, Enum):
    """How a submitted answer was matched."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    PARTIAL = "partial"
    NONE = "none"


@dataclass
class MatchResult:
    """Result of matching submitted text against acceptable answers."""

    matched: bool
    score: float  # 0-1
    match_type: MatchType
    similarity: float  # 0-1
    matched_answer: str
    feedback: str | None = None


def no_match() -> MatchResult:
    return MatchResult(
        matched=False,
        score=0.0,
        match_type=MatchType.NONE,
        similarity=0.0,
        matched_answer="",
    )


def answer_value(answer: AcceptableAnswer) -> str:
    return answer if isinstance(answer, str) else answer.value


def wants_normalization(answer: AcceptableAnswer) -> bool:
    """Whether this answer is compared normalized (and so may fuzzy-match)."""
    if isinstance(answer, str):
        return True

    # The legacy flag wins over case_sensitive when both are present
    if answer.normalize is not None:
        return answer.normalize

    if answer.case_sensitive is not None:
        return not answer.case_sensitive

    return True


def _exact_only(answer: AcceptableAnswer) -> bool:
    return isinstance(answer, AnswerVariant) and answer.exact_match


def _partial_credit(answer: AcceptableAnswer) -> float | None:
    return answer.partial_credit if isinstance(answer, AnswerVariant) else None


def _feedback(answer: AcceptableAnswer) -> str | None:
    return answer.feedback if isinstance(answer, AnswerVariant) else None


def find_best_match(
    user_answer: str,
    acceptable_answers: list[AcceptableAnswer],
    config: GradingConfig,
) -> MatchResult:
    """
    Find the best matching acceptable answer.

    An exact (post-normalization) match returns immediately. Otherwise the
    candidate with the highest similarity is kept, classified as fuzzy,
    partial or no match against the configured thresholds.
    """
    best = no_match()

    for answer in acceptable_answers:
        value = answer_value(answer)
        answer_normalizes = wants_normalization(answer)

        # With fuzzy matching off the comparison is strict on raw text
        apply_normalization = config.enable_fuzzy_matching and answer_normalizes
        submitted = normalize(user_answer) if apply_normalization else user_answer
        expected = normalize(value) if apply_normalization else value

        if submitted == expected:
            credit = _partial_credit(answer)
            return MatchResult(
                matched=True,
                score=credit if credit is not None else 1.0,
                match_type=MatchType.EXACT,
                similarity=1.0,
                matched_answer=value,
                feedback=_feedback(answer),
            )

        if _exact_only(answer) or not config.enable_fuzzy_matching or not answer_normalizes:
            continue

        score = similarity(submitted, expected)
        if score <= best.similarity:
            continue

        if score >= config.fuzzy_match_threshold:
            best = MatchResult(
                matched=True,
                score=1.0,
                match_type=MatchType.FUZZY,
                similarity=score,
                matched_answer=value,
                feedback=_feedback(answer),
            )
        elif config.enable_partial_credit and score >= config.partial_credit_threshold:
            credit = _partial_credit(answer)
            best = MatchResult(
                matched=True,
                score=credit if credit is not None else config.partial_credit_value,
                match_type=MatchType.PARTIAL,
                similarity=score,
                matched_answer=value,
                feedback=_feedback(answer),
            )
        else:
            # Not accepted, but later candidates must beat this similarity
            best = MatchResult(
                matched=False,
                score=0.0,
                match_type=MatchType.NONE,
                similarity=score,
                matched_answer=value,
                feedback=_feedback(answer),
            )

    return best


def grade_text_answer(
    user_answer: str,
    acceptable_answers: list[AcceptableAnswer],
    config: GradingConfig,
) -> MatchResult:
    """Grade free text; blank input is never matched."""
    if not user_answer or not user_answer.strip():
        return no_match()

    return find_best_match(user_answer, acceptable_answers, config)
