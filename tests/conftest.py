"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import json
import random
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from quizhub.config import GradingConfig  # noqa: E402
from quizhub.questions.registry import BankRegistry  # noqa: E402
from quizhub.questions.schema import QuestionBank, parse_question  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def make_bank(bank_id: str, questions: list[dict], **fields) -> QuestionBank:
    """Build a bank from raw question dicts."""
    return QuestionBank(
        id=bank_id,
        title=fields.pop("title", bank_id.title()),
        questions=[parse_question(q) for q in questions],
        **fields,
    )


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def bank_factory():
    """Factory building banks from raw question dicts."""
    return make_bank


@pytest.fixture
def rng():
    """Seeded random source for reproducible selection and shuffles."""
    return random.Random(1234)


@pytest.fixture
def grading_config():
    """Default grading config."""
    return GradingConfig()


@pytest.fixture
def raw_questions():
    """One raw question of every variant."""
    return [
        {
            "id": "q1",
            "type": "multiple_choice_single",
            "text": "Which layer of the OSI model handles routing?",
            "choices": ["Physical", "Data Link", "Network", "Transport"],
            "correct": [2],
            "meta": {"difficulty": 2, "category": "networking"},
        },
        {
            "id": "q2",
            "type": "multiple_choice_multi",
            "text": "Which of these are prime?",
            "choices": ["2", "4", "5", "9"],
            "correct": [0, 2],
            "meta": {"difficulty": 3, "category": "math"},
        },
        {
            "id": "q3",
            "type": "true_false",
            "text": "The Pacific is the largest ocean.",
            "correct": True,
        },
        {
            "id": "q4",
            "type": "fill_in_blank",
            "text": "The capital of France is ___.",
            "acceptableAnswers": ["Paris"],
            "meta": {"difficulty": 1, "category": "geography"},
        },
        {
            "id": "q5",
            "type": "short_answer",
            "text": "Who wrote Hamlet?",
            "correct": "Shakespeare",
            "meta": {"difficulty": 2, "category": "literature"},
        },
    ]


@pytest.fixture
def sample_bank(raw_questions):
    """A bank holding one question of every variant."""
    return make_bank("general", raw_questions)


@pytest.fixture
def registry(sample_bank):
    """Registry with the sample bank and two banks that share a question id."""
    bank_a = make_bank(
        "bank-a",
        [
            {"id": "q1", "type": "true_false", "text": "A says yes", "correct": True},
            {"id": "q2", "type": "true_false", "text": "A says no", "correct": False},
        ],
    )
    bank_b = make_bank(
        "bank-b",
        [{"id": "q1", "type": "true_false", "text": "B says yes", "correct": True}],
    )
    return BankRegistry([sample_bank, bank_a, bank_b])


@pytest.fixture
def bank_folder(tmp_path, raw_questions):
    """Folder holding one valid bank file and one broken file."""
    folder = tmp_path / "quizzes"
    folder.mkdir()
    (folder / "general.json").write_text(
        json.dumps({"id": "general", "title": "General", "tags": ["mixed"], "questions": raw_questions}),
        encoding="utf-8",
    )
    (folder / "broken.json").write_text("{not json", encoding="utf-8")
    return folder
