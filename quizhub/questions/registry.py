"""
Question bank registry.

Discovers bank JSON files in a folder, validates them and indexes the
valid ones by id. Loading never raises for a bad file: invalid JSON,
invalid banks and duplicate bank ids are logged and skipped.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Iterator

from loguru import logger

from quizhub.questions.schema import QuestionBank
from quizhub.questions.validator import filter_valid_questions, validate_bank


class BankRegistry:
    """Banks indexed by id, in load order."""

    def __init__(self, banks: Iterable[QuestionBank] = ()):
        self.by_id: dict[str, QuestionBank] = {}
        self.all: list[QuestionBank] = []
        for bank in banks:
            self.add(bank)

    def add(self, bank: QuestionBank) -> bool:
        """Register a bank. Returns False (and keeps the first) on a duplicate id."""
        if bank.id in self.by_id:
            logger.error(f"[Bank Loader] Duplicate bank id '{bank.id}', skipping")
            return False
        self.by_id[bank.id] = bank
        self.all.append(bank)
        return True

    def get(self, bank_id: str) -> QuestionBank | None:
        return self.by_id.get(bank_id)

    def require(self, bank_id: str) -> QuestionBank:
        """Get a bank by id, raising KeyError if it is not registered."""
        bank = self.by_id.get(bank_id)
        if bank is None:
            raise KeyError(f"Question bank not found: {bank_id}")
        return bank

    def by_tags(self, tags: Iterable[str]) -> list[QuestionBank]:
        """Banks carrying at least one of ``tags``."""
        wanted = set(tags)
        return [bank for bank in self.all if bank.tags and wanted.intersection(bank.tags)]

    def __contains__(self, bank_id: object) -> bool:
        return bank_id in self.by_id

    def __iter__(self) -> Iterator[QuestionBank]:
        return iter(self.all)

    def __len__(self) -> int:
        return len(self.all)

    @classmethod
    def load_directory(cls, folder: str | Path) -> "BankRegistry":
        """Load every ``*.json`` bank in ``folder`` (sorted by file name)."""
        registry = cls()
        folder = Path(folder)

        if not folder.is_dir():
            logger.warning(f"Bank folder not found: {folder}")
            return registry

        files = sorted(folder.glob("*.json"))
        if not files:
            logger.warning(f"No bank files found in {folder}")
            return registry

        logger.info(f"Found {len(files)} bank file(s) in {folder}")

        for path in files:
            bank = load_bank_file(path)
            if bank is not None and registry.add(bank):
                logger.info(f"Loaded bank: {bank.id} ({len(bank.questions)} questions)")

        logger.info(f"Bank registry built with {len(registry)} bank(s)")
        return registry


def load_bank_file(path: Path) -> QuestionBank | None:
    """Read, validate and parse one bank file. Returns None if unusable."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError:
        logger.error(f"[Bank Loader] Invalid JSON in {path.name}")
        return None
    except OSError as e:
        logger.error(f"[Bank Loader] Failed to read {path.name}: {e}")
        return None

    result = validate_bank(raw)

    for warning in result.warnings:
        logger.warning(f"[Bank Validation] {path.name}: {warning.field}: {warning.message}")

    if not result.valid:
        for error in result.errors:
            logger.error(f"[Bank Validation] {path.name}: {error.field}: {error.message}")
        return None

    questions = filter_valid_questions(raw["questions"])
    if not questions:
        logger.error(f"[Bank Validation] No valid questions in {path.name}, skipping")
        return None

    return QuestionBank(
        id=raw["id"],
        title=raw["title"],
        description=_str_or_none(raw.get("description")),
        tags=raw["tags"] if isinstance(raw.get("tags"), list) else None,
        version=_number_or_none(raw.get("version")),
        author=_str_or_none(raw.get("author")),
        allow_random_subset=(
            raw["allowRandomSubset"] if isinstance(raw.get("allowRandomSubset"), bool) else None
        ),
        default_question_count=_int_or_none(raw.get("defaultQuestionCount")),
        questions=questions,
    )


def _number_or_none(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _int_or_none(value):
    number = _number_or_none(value)
    return int(number) if number is not None else None


def _str_or_none(value):
    return value if isinstance(value, str) else None
