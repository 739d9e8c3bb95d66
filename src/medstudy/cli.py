"""
MedStudy: terminal interface for the study tracker.

Commands:
- medstudy log                - Record a study session
- medstudy disciplines        - List built-in and custom disciplines
- medstudy add-discipline     - Add a custom discipline
- medstudy remove-discipline  - Delete a custom discipline
- medstudy topics             - Show topics for a discipline
- medstudy goal               - Show or set the daily goal
- medstudy history            - List recorded sessions
- medstudy export / import    - Back up or restore all data
- medstudy clear              - Remove all user data
"""
from __future__ import annotations

import sys
from datetime import date
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from config import Settings, get_settings

from .errors import ErrorKind, StoreResult
from .models import TopicChoice
from .seed import load_seed_disciplines
from .storage import JsonFileStore
from .study_store import StudyStore

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="medstudy",
    help="MedStudy: track study sessions, disciplines and daily goals",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Styling
# =============================================================================

STYLES = {
    "success": "bold green",
    "warning": "bold yellow",
    "error": "bold red",
    "info": "bold cyan",
    "dim": "dim",
}

OTHER_TOPIC_TEXT = "Other (type it)"


def topic_label(topic: str | TopicChoice) -> str:
    """Display text for a topic list entry."""
    return OTHER_TOPIC_TEXT if topic is TopicChoice.OTHER else topic


def notify(result: StoreResult) -> None:
    """Print the outcome of an operation; exit 1 on failure."""
    if result:
        console.print(f"[{STYLES['success']}]Success:[/] {result.message}")
        return

    if result.error is ErrorKind.PERSISTENCE:
        console.print(f"[{STYLES['error']}]Error:[/] {result.message}")
    else:
        console.print(f"[{STYLES['warning']}]Warning:[/] {result.message}")
    raise typer.Exit(1)


# =============================================================================
# Store Construction
# =============================================================================


def build_store(settings: Settings) -> StudyStore:
    """Create and initialize a StudyStore from settings."""
    store = StudyStore(
        JsonFileStore(settings.data_dir),
        key=settings.storage_key,
        seed_disciplines=load_seed_disciplines(settings.seed_file),
        rollback_on_failure=settings.rollback_on_save_failure,
    )
    store.initialize()
    return store


def configure_logging(settings: Settings) -> None:
    """Route loguru output to stderr (and a log file if configured)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<level>{message}</level>",
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            level="DEBUG",
            rotation="1 MB",
            retention=3,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
        )


# =============================================================================
# Study Commands
# =============================================================================


@app.command()
def log(
    discipline: str = typer.Option(..., "--discipline", "-d", help="Discipline name"),
    topic: Optional[str] = typer.Option(
        None,
        "--topic", "-t",
        help="Topic from the discipline's list (omit to type your own)",
    ),
    custom_topic: str = typer.Option(
        "",
        "--custom-topic", "-c",
        help="Typed topic, used when --topic is omitted",
    ),
    questions: str = typer.Option("0", "--questions", "-q", help="Total questions"),
    correct: str = typer.Option("0", "--correct", help="Correct answers"),
    study_date: Optional[str] = typer.Option(None, "--date", help="Study date (default: today)"),
    minutes: str = typer.Option("0", "--minutes", "-m", help="Time spent in minutes"),
    notes: str = typer.Option("", "--notes", "-n", help="Observations"),
) -> None:
    """Record a study session."""
    store = build_store(get_settings())
    result = store.add_study_record(
        discipline_name=discipline,
        topic=topic or TopicChoice.OTHER,
        total_questions=questions,
        correct_answers=correct,
        date=study_date or date.today().isoformat(),
        duration_minutes=minutes,
        notes=notes,
        custom_topic=custom_topic,
    )
    notify(result)

    record = result.value
    console.print(
        f"  {record.discipline_name} / {record.topic}: "
        f"{record.correct_answers}/{record.total_questions} in {record.duration_minutes} min"
    )


@app.command()
def history(
    discipline: Optional[str] = typer.Option(
        None,
        "--discipline", "-d",
        help="Only sessions for this discipline",
    ),
) -> None:
    """List recorded study sessions."""
    store = build_store(get_settings())
    studies = store.list_studies(discipline)

    if not studies:
        console.print(f"[{STYLES['dim']}]No study sessions recorded[/]")
        return

    table = Table(title="Study History")
    table.add_column("Date")
    table.add_column("Discipline")
    table.add_column("Topic")
    table.add_column("Questions", justify="right")
    table.add_column("Correct", justify="right")
    table.add_column("Minutes", justify="right")
    table.add_column("Notes")

    for s in studies:
        name = s.discipline_name
        if store.find_discipline(name) is None:
            name += f" [{STYLES['dim']}](removed)[/]"
        table.add_row(
            s.date,
            name,
            s.topic,
            str(s.total_questions),
            str(s.correct_answers),
            str(s.duration_minutes),
            s.notes,
        )

    console.print(table)


# =============================================================================
# Discipline Commands
# =============================================================================


@app.command()
def disciplines() -> None:
    """List built-in and custom disciplines."""
    store = build_store(get_settings())
    all_disciplines = store.list_all_disciplines()

    if not all_disciplines:
        console.print(f"[{STYLES['dim']}]No disciplines added[/]")
        return

    table = Table(title="Disciplines")
    table.add_column("ID")
    table.add_column("Name", style="bold")
    table.add_column("Topics")
    table.add_column("Type")

    for d in all_disciplines:
        kind = "[cyan]custom[/cyan]" if d.is_custom else "[dim]built-in[/dim]"
        table.add_row(str(d.id), d.name, ", ".join(d.topics), kind)

    console.print(table)


@app.command("add-discipline")
def add_discipline(
    name: str = typer.Argument(..., help="Discipline name"),
    topics: str = typer.Option(
        "",
        "--topics", "-t",
        help="Comma-separated topics (default: General)",
    ),
) -> None:
    """Add a custom discipline."""
    store = build_store(get_settings())
    result = store.add_custom_discipline(name, topics)
    notify(result)
    console.print(f"  {result.value.name}: {', '.join(result.value.topics)}")


@app.command("remove-discipline")
def remove_discipline(
    discipline_id: int = typer.Argument(..., help="ID shown by 'disciplines'"),
) -> None:
    """Delete a custom discipline (recorded sessions are kept)."""
    store = build_store(get_settings())
    notify(store.delete_custom_discipline(discipline_id))


@app.command()
def topics(
    name: str = typer.Argument(..., help="Discipline name"),
) -> None:
    """Show the topics offered for a discipline."""
    store = build_store(get_settings())
    for topic in store.list_topics_for_discipline(name):
        style = STYLES["dim"] if topic is TopicChoice.OTHER else "white"
        console.print(f"  [{style}]{topic_label(topic)}[/]")


# =============================================================================
# Settings Commands
# =============================================================================


@app.command()
def goal(
    value: Optional[str] = typer.Argument(None, help="New daily goal (omit to show)"),
) -> None:
    """Show or set the daily study goal."""
    store = build_store(get_settings())

    if value is None:
        console.print(f"Daily goal: [{STYLES['info']}]{store.settings.daily_goal}[/]")
        return

    result = store.update_daily_goal(value)
    notify(result)
    console.print(f"Daily goal: [{STYLES['info']}]{result.value}[/]")


# =============================================================================
# Data Commands
# =============================================================================


@app.command()
def export(
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Write to file instead of stdout",
    ),
) -> None:
    """Export all data as JSON."""
    store = build_store(get_settings())
    data = store.export_data()

    if output is None:
        typer.echo(data)
        return

    output.write_text(data, encoding="utf-8")
    console.print(f"[{STYLES['success']}]Exported to {output}[/]")


@app.command("import")
def import_(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="Exported JSON file"),
) -> None:
    """Replace all data with an exported file."""
    store = build_store(get_settings())
    notify(store.import_data(source.read_text(encoding="utf-8")))


@app.command()
def clear(
    confirm: bool = typer.Option(
        False,
        "--yes", "-y",
        help="Skip confirmation",
    ),
) -> None:
    """Remove custom disciplines, study sessions and settings."""
    if not confirm and not Confirm.ask("Clear ALL study data? This cannot be undone!", default=False):
        raise typer.Exit(0)

    store = build_store(get_settings())
    notify(store.clear_data())


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    main()
