"""CLI commands for quizdesk.

Commands:
- init-db: Create the SQLite schema
- create-admin: Bootstrap a verified administrator
- users: List pending and verified users
- approve: Approve a pending user
- check-asc: Highlight and parse an ASC answer sheet
- check-bulk: Parse a bulk question file
- serve: Run the Web API with uvicorn
"""

from pathlib import Path

import typer
from rich.cells import cell_len
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from quizdesk.config.app_config import load_app_config
from quizdesk.core import admin
from quizdesk.core.accounts import create_admin as do_create_admin
from quizdesk.core.asc_highlight import render_rich, tokenize_asc
from quizdesk.core.asc_parser import parse_asc
from quizdesk.core.bulk_questions import parse_bulk_questions
from quizdesk.core.errors import ASCParseError, BulkParseError, QuizdeskError
from quizdesk.db.database import init_db as do_init_db
from quizdesk.logging_setup import configure_logging

app = typer.Typer(
    name="quizdesk",
    help="Assignments, quizzes and grading for instructors and students.",
    no_args_is_help=True,
)

console = Console()


def _truncate(text: str, max_len: int = 60) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def _caret_offset(text: str, position: int) -> int | None:
    """Columns before the character at `position`, or None when a caret can't line up."""
    if "\n" in text or "\t" in text:
        return None
    return cell_len(text[:position])


def _answer_label(question_type: str, correct_answer: int | None, model_answer: str) -> str:
    if question_type == "free_response":
        return f"FRQ {_truncate(model_answer, 40)}" if model_answer else "FRQ"
    return str((correct_answer or 0) + 1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    configure_logging("debug" if verbose else load_app_config().server.log_level)


# =============================================================================
# DATABASE AND USERS
# =============================================================================


@app.command(name="init-db")
def init_db(
    db_path: Path | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Create the database schema if missing."""
    path = do_init_db(db_path)
    console.print("[green]✓ Database ready[/green]")
    console.print(f"  [dim]path:[/dim] {path}")


@app.command(name="create-admin")
def create_admin(
    email: str = typer.Argument(..., help="Admin email"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True),
    name: str = typer.Option("Administrator", "--name", "-n", help="Full name"),
) -> None:
    """Create a verified administrator account."""
    do_init_db()
    try:
        user = do_create_admin(email, password, name)
    except QuizdeskError as e:
        console.print(f"[red]✗ {escape(e.message)}[/red]")
        raise typer.Exit(code=1)

    console.print("[green]✓ Admin created[/green]")
    console.print(f"  [dim]id:[/dim]    {user.id}")
    console.print(f"  [dim]email:[/dim] {user.email}")


@app.command()
def users() -> None:
    """List pending and verified users."""
    do_init_db()
    pending, verified = admin.list_users()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Email", style="cyan")
    table.add_column("Name")
    table.add_column("Role", width=12)
    table.add_column("Status", justify="center", width=10)
    table.add_column("ID", style="dim")

    for user in pending:
        table.add_row(user.email, user.full_name, user.role, "[yellow]pending[/yellow]", user.id)
    for user in verified:
        table.add_row(user.email, user.full_name, user.role, "[green]verified[/green]", user.id)

    console.print(table)
    console.print(f"[dim]{len(pending)} pending, {len(verified)} verified[/dim]")


@app.command()
def approve(user_id: str = typer.Argument(..., help="User ID")) -> None:
    """Approve a pending user."""
    do_init_db()
    try:
        admin.approve_user(user_id)
    except QuizdeskError as e:
        console.print(f"[red]✗ {escape(e.message)}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Approved {user_id}[/green]")


# =============================================================================
# QUESTION ENTRY
# =============================================================================


@app.command(name="check-asc")
def check_asc(text: str = typer.Argument(..., help='ASC text, e.g. "5: 123FF(x=1)"')) -> None:
    """Highlight an ASC answer sheet and show what it parses to."""
    console.print(render_rich(tokenize_asc(text)))

    try:
        questions = parse_asc(text)
    except ASCParseError as e:
        if e.position is not None:
            offset = _caret_offset(text, e.position)
            if offset is not None:
                console.print(" " * offset + "[red]^[/red]")
            console.print(f"[red]✗ {escape(e.message)} (position {e.position})[/red]")
        else:
            console.print(f"[red]✗ {escape(e.message)}[/red]")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Question", style="cyan", width=14)
    table.add_column("Type", width=16)
    table.add_column("Answer")
    for q in questions:
        table.add_row(q.text, q.question_type, _answer_label(q.question_type, q.correct_answer, q.model_answer))
    console.print(table)
    console.print(f"[green]✓ {len(questions)} questions[/green]")


@app.command(name="check-bulk")
def check_bulk(file: Path = typer.Argument(..., help="Text file with question blocks")) -> None:
    """Parse a bulk question file and list the questions found."""
    if not file.exists():
        console.print(f"[red]✗ File not found: {file}[/red]")
        raise typer.Exit(code=1)

    try:
        questions = parse_bulk_questions(file.read_text(encoding="utf-8"))
    except BulkParseError as e:
        console.print(f"[red]✗ {escape(e.message)}[/red]")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", width=4)
    table.add_column("Question", style="cyan")
    table.add_column("Answer")
    for i, q in enumerate(questions, start=1):
        table.add_row(
            str(i),
            _truncate(q.text),
            _answer_label(q.question_type, q.correct_answer, q.model_answer),
        )
    console.print(table)
    console.print(f"[green]✓ {len(questions)} questions[/green]")


# =============================================================================
# SERVER
# =============================================================================


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default from config)"),
    port: int | None = typer.Option(None, "--port", help="Port (default from config)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the Web API."""
    import uvicorn

    config = load_app_config()
    configure_logging(config.server.log_level, config.server.json_logs)
    uvicorn.run(
        "quizdesk.web.api:app",
        host=host or config.server.host,
        port=port or config.server.port,
        reload=reload,
        log_level=config.server.log_level,
    )


if __name__ == "__main__":
    app()
