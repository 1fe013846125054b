"""
Typer CLI for procap question notebooks.

Commands:
    procap db init                          - Create database tables
    procap db seed questions.json           - Load questions, notebooks and favorites
    procap notebook list --user U           - List notebooks (plus the pseudo notebooks)
    procap notebook create NAME --user U -q ID -q ID
    procap notebook play ID --user U        - Answer questions interactively
    procap notebook stats ID --user U       - Progress and leaderboard
    procap notebook reset ID --user U       - Clear your answers and start over
    procap question stats ID                - First-try distribution for one question
    procap profile show U                   - XP, level, stats and achievements

Usage:
    procap --help
    procap notebook play all_questions --user ana
"""

from __future__ import annotations

import json
import os
import sys

# Fix Windows encoding issues for Unicode characters (box drawing, stars)
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    if hasattr(sys.stderr, "reconfigure"):
        sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from pathlib import Path

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from config import Settings, get_settings
from src.cli import render
from src.notebook.aggregation import question_stats
from src.notebook.errors import AnswerValidationError, NotebookError
from src.notebook.models import (
    ALL_QUESTIONS_ID,
    ALL_QUESTIONS_NAME,
    FAVORITES_NOTEBOOK_ID,
    FAVORITES_NOTEBOOK_NAME,
    Question,
)
from src.notebook.session import MAX_WRONG_ANSWERS

console = Console()

app = typer.Typer(
    help="procap: question notebooks with three-strike scoring, XP and achievements",
    no_args_is_help=True,
)
db_app = typer.Typer(help="Database setup", no_args_is_help=True)
notebook_app = typer.Typer(help="Answer and manage question notebooks", no_args_is_help=True)
question_app = typer.Typer(help="Per-question statistics", no_args_is_help=True)
profile_app = typer.Typer(help="User profiles", no_args_is_help=True)

app.add_typer(db_app, name="db")
app.add_typer(notebook_app, name="notebook")
app.add_typer(question_app, name="question")
app.add_typer(profile_app, name="profile")

UserOption = typer.Option(..., "--user", "-u", help="User id")


def configure_logging(settings: Settings) -> None:
    """Route loguru to stderr at the configured level, plus an optional file."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(settings.log_file, level="DEBUG", rotation="10 MB", retention=5)


@app.callback()
def main_callback() -> None:
    configure_logging(get_settings())


def _get_stores():
    """Lazy load stores so --help works without a database."""
    from src.store import build_stores

    return build_stores(get_settings())


def _get_driver():
    from src.notebook.driver import NotebookDriver

    content_store, profile_store = _get_stores()
    return NotebookDriver(content_store, profile_store, default_topic=get_settings().default_topic)


# =============================================================================
# db
# =============================================================================


@db_app.command("init")
def db_init() -> None:
    """Create all tables in settings.database_url."""
    from src.db.database import init_db

    init_db()
    rprint("[green]Database tables initialized[/green]")


@db_app.command("seed")
def db_seed(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file to load"),
) -> None:
    """
    Load questions, notebooks and favorites from JSON.

    Format: {"questions": [...], "notebooks": [{"id", "user_id", "name",
    "question_ids"}], "favorites": [{"user_id", "question_id"}]}
    """
    from src.store.sql_store import SqlContentStore

    data = json.loads(path.read_text(encoding="utf-8"))
    store = SqlContentStore()

    questions = [Question.from_dict(q) for q in data.get("questions", [])]
    store.add_questions(questions)
    for nb in data.get("notebooks", []):
        store.create_notebook(nb["user_id"], nb["name"], nb.get("question_ids", []), notebook_id=nb.get("id"))
    for fav in data.get("favorites", []):
        store.set_interaction(fav["user_id"], fav["question_id"], "question", is_favorite=True)

    rprint(
        f"[green]Seeded[/green] {len(questions)} questions, "
        f"{len(data.get('notebooks', []))} notebooks, {len(data.get('favorites', []))} favorites"
    )


# =============================================================================
# notebook
# =============================================================================


@notebook_app.command("list")
def notebook_list(user: str = UserOption) -> None:
    """List the user's notebooks and the pseudo notebooks."""
    content_store, _ = _get_stores()
    table = Table(title="Notebooks")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Questions", justify="right")
    table.add_column("Answered", justify="right", style="dim")

    rows = [(ALL_QUESTIONS_ID, ALL_QUESTIONS_NAME, len(content_store.list_questions()))]
    favorites = content_store.favorite_question_ids(user)
    if favorites:
        rows.append((FAVORITES_NOTEBOOK_ID, FAVORITES_NOTEBOOK_NAME, len(favorites)))
    rows.extend((nb.id, nb.name, len(nb.question_ids)) for nb in content_store.list_notebooks(user))

    for notebook_id, name, count in rows:
        answered = len(content_store.list_answers(notebook_id=notebook_id, user_id=user))
        table.add_row(notebook_id, name, str(count), str(answered))
    console.print(table)


@notebook_app.command("create")
def notebook_create(
    name: str = typer.Argument(..., help="Notebook name"),
    user: str = UserOption,
    question: list[str] = typer.Option([], "--question", "-q", help="Question id (repeatable)"),
) -> None:
    """Create a notebook from question ids."""
    content_store, _ = _get_stores()
    known = {q.id for q in content_store.list_questions()}
    missing = [q for q in question if q not in known]
    if missing:
        rprint(f"[yellow]Skipping unknown questions:[/yellow] {', '.join(missing)}")
    notebook = content_store.create_notebook(user, name, [q for q in question if q in known])
    rprint(f"[green]Created notebook[/green] {notebook.id} with {len(notebook.question_ids)} questions")


@notebook_app.command("play")
def notebook_play(
    notebook_id: str = typer.Argument(..., help="Notebook id, 'all_questions' or 'favorites_notebook'"),
    user: str = UserOption,
    resume: bool = typer.Option(True, help="Start at the first unanswered question"),
) -> None:
    """
    Answer a notebook interactively.

    Keys: A-D answer, n next, p previous, u next unanswered, r retry save, q quit.
    """
    driver = _get_driver()
    try:
        state = driver.open(user, notebook_id)
    except NotebookError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if state is None:
        rprint("[yellow]No questions found in this notebook.[/yellow]")
        return
    if resume and state.is_completed:
        try:
            driver.go_next_unanswered()
        except NotebookError as e:
            rprint(f"[yellow]Could not jump to the next unanswered question:[/yellow] {e}")

    while True:
        state = driver.state
        console.print(render.question_panel(state, driver.cursor))
        hints = render.hints_panel(state)
        if hints is not None:
            console.print(hints)
        if state.is_completed:
            console.print(render.result_panel(state))

        choice = Prompt.ask("[bold cyan]>[/bold cyan] Answer (A-D), n/p/u, r, q").strip().lower()
        if choice == "q":
            break
        try:
            _play_choice(driver, state, choice)
        except AnswerValidationError as e:
            rprint(f"[yellow]{e}[/yellow]")
        except NotebookError as e:
            # Store errors leave the driver where it was
            logger.warning(f"Action {choice!r} in notebook {notebook_id} failed: {e}")
            rprint(f"[yellow]{e}. Nothing changed, try again.[/yellow]")

    try:
        progress = driver.progress()
    except NotebookError as e:
        rprint(f"[yellow]Could not load progress:[/yellow] {e}")
        return
    console.print(render.progress_panel(driver.notebook.name, progress))


def _play_choice(driver, state, choice: str) -> None:
    """Run one non-quit key of `notebook play`."""
    if choice == "n":
        driver.go_next()
        return
    if choice == "p":
        driver.go_previous()
        return
    if choice == "u":
        if driver.go_next_unanswered() is None:
            rprint("[green]All questions in this notebook are answered.[/green]")
        return
    if choice == "r":
        outcome = driver.retry_pending()
        if outcome is None:
            rprint("[dim]Nothing to retry.[/dim]")
        elif outcome.notice:
            rprint(f"[yellow]{outcome.notice}[/yellow]")
        else:
            console.print(render.result_panel(outcome.state, outcome.xp_gained, outcome.new_achievements))
        return

    options = state.question.options
    index = ord(choice[:1]) - ord("a") if len(choice) == 1 else -1
    if not 0 <= index < len(options):
        rprint("[yellow]Unknown choice.[/yellow]")
        return

    outcome = driver.submit(options[index])
    if outcome.notice:
        rprint(f"[yellow]{outcome.notice}[/yellow]")
    if outcome.state.is_completed:
        console.print(render.result_panel(outcome.state, outcome.xp_gained, outcome.new_achievements))
        if driver.cursor.all_answered:
            rprint("[green]Notebook complete![/green]")
    else:
        rprint(f"[red]✗ Wrong.[/red] {MAX_WRONG_ANSWERS - len(outcome.state.wrong_answers)} attempts left.")


@notebook_app.command("stats")
def notebook_stats(
    notebook_id: str = typer.Argument(..., help="Notebook id"),
    user: str = UserOption,
) -> None:
    """Show progress, accuracy and the notebook leaderboard."""
    driver = _get_driver()
    try:
        driver.open(user, notebook_id)
        progress = driver.progress()
        entries = driver.leaderboard()
    except NotebookError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(render.progress_panel(driver.notebook.name, progress))
    if entries:
        console.print(render.leaderboard_table(entries, current_user_id=user))
    else:
        rprint("[dim]Nobody has answered this notebook yet.[/dim]")


@notebook_app.command("reset")
def notebook_reset(
    notebook_id: str = typer.Argument(..., help="Notebook id"),
    user: str = UserOption,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete your answers in a notebook. XP and stats already earned are kept."""
    if not yes and not Confirm.ask("Clear your answers for this notebook? Your progress will be reset."):
        raise typer.Abort()

    driver = _get_driver()
    try:
        driver.open(user, notebook_id)
        removed = driver.reset_progress()
    except NotebookError as e:
        rprint(f"[red]Could not clear answers:[/red] {e}")
        raise typer.Exit(1)
    rprint(f"[green]Cleared {removed} answers.[/green]")


# =============================================================================
# question / profile
# =============================================================================


@question_app.command("stats")
def question_stats_cmd(question_id: str = typer.Argument(..., help="Question id")) -> None:
    """First-try answer distribution across every notebook."""
    content_store, _ = _get_stores()
    question = next((q for q in content_store.list_questions() if q.id == question_id), None)
    if question is None:
        rprint(f"[red]Question not found:[/red] {question_id}")
        raise typer.Exit(1)

    stats = question_stats(question, content_store.answers_for_question(question_id))
    rprint(f"[bold]{question.question_text}[/bold]")
    if stats.total == 0:
        rprint("[dim]Nobody has answered this question yet.[/dim]")
        return
    console.print(render.question_stats_table(stats))


@profile_app.command("show")
def profile_show(user: str = typer.Argument(..., help="User id")) -> None:
    """Show XP, level, stats and achievements."""
    _, profile_store = _get_stores()
    console.print(render.profile_panel(profile_store.get_profile(user)))


if __name__ == "__main__":
    app()
