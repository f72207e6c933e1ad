"""
Quiz Hub CLI - run question banks from the terminal.

Usage:
    quizhub validate quizzes/                      # Validate bank files
    quizhub quiz quizzes/ --bank geo --limit 10    # Take a quiz
    quizhub quiz quizzes/ --bank geo --adaptive --skill geography=3.5
    quizhub skills --skill geography=3.5 --skill history=2
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from quizhub.adaptive.elo_rating import SkillLevels, create_skill_level
from quizhub.adaptive.question_selector import validate_for_adaptive
from quizhub.adaptive.skill_analytics import insights, skill_summary
from quizhub.config import ConfigError, Settings, get_settings, load_settings
from quizhub.questions.registry import BankRegistry
from quizhub.questions.schema import QuestionType, question_type
from quizhub.questions.validator import validate_bank
from quizhub.session.engine import (
    SessionError,
    SessionQuestion,
    complete_session,
    create_session,
    grade_session,
    update_answer,
)

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="quizhub",
    help="Local Quiz Hub - adaptive quizzes from JSON question banks",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def configure_logging(settings: Settings) -> None:
    """Route loguru output to stderr (and the optional log file)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB")


def _settings(config: Path | None) -> Settings:
    if config is None:
        return get_settings()
    try:
        settings = load_settings(config)
    except ConfigError as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(1)

    # The file may set its own log level and log file
    configure_logging(settings)
    return settings


def parse_skills(values: list[str] | None) -> SkillLevels:
    """Parse ``category=level`` options into skill levels."""
    skills: SkillLevels = {}
    for value in values or []:
        category, sep, level = value.partition("=")
        if not sep or not category.strip():
            raise typer.BadParameter(f"Expected category=level, got '{value}'")
        try:
            skills[category.strip()] = create_skill_level(float(level))
        except ValueError:
            raise typer.BadParameter(f"Skill level must be a number, got '{level}'")
    return skills


# =============================================================================
# Commands
# =============================================================================


@app.command()
def validate(
    folder: Annotated[Path, typer.Argument(help="Folder of question bank JSON files")],
) -> None:
    """Validate every bank file in a folder."""
    files = sorted(folder.glob("*.json")) if folder.is_dir() else []
    if not files:
        console.print(f"[yellow]No bank files found in {folder}[/]")
        raise typer.Exit(1)

    table = Table(title="Bank Validation", box=box.MINIMAL)
    table.add_column("File", style="cyan")
    table.add_column("Status")
    table.add_column("Errors", justify="right")
    table.add_column("Warnings", justify="right")

    failed = 0
    details: list[str] = []
    for path in files:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            failed += 1
            table.add_row(path.name, "[red]invalid JSON[/]", "-", "-")
            continue

        result = validate_bank(raw)
        if not result.valid:
            failed += 1
        status = "[green]valid[/]" if result.valid else "[red]invalid[/]"
        table.add_row(path.name, status, str(len(result.errors)), str(len(result.warnings)))
        details.extend(f"[red]{path.name}[/] {e.field}: {e.message}" for e in result.errors)
        details.extend(f"[yellow]{path.name}[/] {w.field}: {w.message}" for w in result.warnings)

    console.print(table)
    for line in details:
        console.print(f"  {line}")

    if failed:
        raise typer.Exit(1)


@app.command()
def quiz(
    folder: Annotated[Path, typer.Argument(help="Folder of question bank JSON files")],
    bank: Annotated[list[str], typer.Option("--bank", "-b", help="Bank id (repeatable)")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Max questions (0 = all)")] = 0,
    shuffle: Annotated[
        bool | None, typer.Option("--shuffle/--no-shuffle", help="Randomize question order")
    ] = None,
    adaptive: Annotated[
        bool, typer.Option("--adaptive", help="Pick questions near your skill level")
    ] = False,
    skill: Annotated[
        list[str] | None, typer.Option("--skill", "-s", help="Skill as category=level")
    ] = None,
    target: Annotated[
        float | None, typer.Option("--target", help="Target accuracy for adaptive mode")
    ] = None,
    user: Annotated[str, typer.Option("--user", "-u", help="User id")] = "local",
    config: Annotated[Path | None, typer.Option("--config", help="JSON config file")] = None,
) -> None:
    """Take a quiz from one or more banks."""
    settings = _settings(config)
    registry = BankRegistry.load_directory(folder)
    skills = parse_skills(skill)

    try:
        session = create_session(
            registry,
            user_id=user,
            selected_bank_ids=bank,
            randomize=settings.randomize_order_by_default if shuffle is None else shuffle,
            limit=limit,
            adaptive=adaptive and settings.adaptive.enabled,
            target_accuracy=(
                settings.adaptive.default_target_accuracy if target is None else target
            ),
            skill_levels=skills,
        )
    except SessionError as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(1)

    if adaptive:
        readiness = validate_for_adaptive([q.question for q in session.questions])
        for warning in readiness.warnings:
            console.print(f"[dim]{warning}[/dim]")

    if not session.questions:
        console.print("[yellow]No questions to ask[/]")
        raise typer.Exit(1)

    for session_question in session.questions:
        value = _ask(session_question, len(session.questions))
        if value is not None:
            update_answer(session, session_question.composite_key, value)

    summary = grade_session(session, settings.grading)
    complete_session(session)

    table = Table(title="Results", box=box.MINIMAL)
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Question")
    table.add_column("Result")
    table.add_column("Score", justify="right")

    for session_question in session.questions:
        outcome = summary.per_question.get(session_question.composite_key)
        if outcome is None:
            result, score = "[dim]unanswered[/dim]", "-"
        elif outcome.is_correct:
            result, score = f"[green]{outcome.match_type.value}[/]", f"{outcome.score:.2f}"
        else:
            expected = _display(session_question.question, outcome.correct_answer)
            result = f"[red]wrong[/] [dim](expected {expected})[/dim]"
            score = f"{outcome.score:.2f}"
        table.add_row(str(session_question.index + 1), session_question.question.text, result, score)

    console.print(table)
    console.print(
        Panel(
            f"Score: [bold]{summary.score:.1f}%[/bold]  "
            f"Correct: {summary.total_correct:g}  Incorrect: {summary.total_incorrect:g}  "
            f"Unanswered: {summary.total_unanswered}",
            border_style="green" if summary.score >= 70 else "yellow",
        )
    )


@app.command()
def skills(
    skill: Annotated[
        list[str] | None, typer.Option("--skill", "-s", help="Skill as category=level")
    ] = None,
) -> None:
    """Summarize skill levels."""
    summary = skill_summary(parse_skills(skill))

    table = Table(title=f"Overall level {summary.overall_level:.1f}", box=box.MINIMAL)
    table.add_column("Category", style="cyan")
    table.add_column("Level", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Trend")

    for category in summary.category_summaries:
        table.add_row(
            category.category,
            f"{category.current_level:.1f}",
            f"{category.confidence:.0%}",
            category.trend.value,
        )

    console.print(table)
    for message in insights(summary):
        console.print(f"- {message}")


# =============================================================================
# Answer input
# =============================================================================


def _ask(session_question: SessionQuestion, total: int) -> Any:
    """Present one question and read an answer. Returns None when skipped."""
    question = session_question.question
    qtype = question_type(question)

    console.print(
        Panel(
            question.text,
            title=f"[bold cyan]{session_question.index + 1}/{total}[/bold cyan]",
            border_style="cyan",
            box=box.HEAVY,
        )
    )

    if qtype in (QuestionType.MULTIPLE_CHOICE_SINGLE, QuestionType.MULTIPLE_CHOICE_MULTI):
        for i, choice in enumerate(question.choices, start=1):
            console.print(f"  [cyan][{i}][/cyan] {choice}")

    raw = Prompt.ask(_prompt_hint(qtype), default="", show_default=False).strip()
    if not raw:
        return None

    if qtype == QuestionType.MULTIPLE_CHOICE_SINGLE:
        return int(raw) - 1 if raw.isdigit() else raw
    if qtype == QuestionType.MULTIPLE_CHOICE_MULTI:
        parts = raw.replace(",", " ").split()
        return [int(p) - 1 for p in parts if p.isdigit()]
    if qtype == QuestionType.TRUE_FALSE:
        lowered = raw.lower()
        if lowered in ("t", "true"):
            return True
        if lowered in ("f", "false"):
            return False
        return raw
    return raw


def _prompt_hint(qtype: QuestionType) -> str:
    return {
        QuestionType.MULTIPLE_CHOICE_SINGLE: "Choice",
        QuestionType.MULTIPLE_CHOICE_MULTI: "Choices (e.g. 1 3)",
        QuestionType.TRUE_FALSE: "T/F",
        QuestionType.FILL_IN_BLANK: "Answer",
        QuestionType.SHORT_ANSWER: "Answer",
    }[qtype]


def _display(question: Any, value: Any) -> str:
    """Render an expected answer the way the question was presented."""
    if question_type(question) in (
        QuestionType.MULTIPLE_CHOICE_SINGLE,
        QuestionType.MULTIPLE_CHOICE_MULTI,
    ):
        # Choices are shown numbered from 1
        return ", ".join(f"{i + 1} ({question.choices[i]})" for i in value)
    if isinstance(value, list):
        return ", ".join(v if isinstance(v, str) else getattr(v, "value", str(v)) for v in value)
    return str(value)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    main()
