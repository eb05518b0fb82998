"""
Command-line interface for sessionrag.

Commands:
    ingest   - Build a new session from a folder of documents
    chat     - Ask a question against an existing session
    sessions - List stored sessions
    health   - Check the Ollama server
    version  - Show version information

Exit codes: 0 on success, 1 for a blank question, 2 when an operation fails.
Invalid options and arguments are rejected by Click with its usage error code.
"""

from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from sessionrag.exceptions import SessionRAGError

EXIT_USAGE = 1
EXIT_FAILURE = 2

app = typer.Typer(
    name="sessionrag",
    help="Per-session RAG over folders of documents",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@app.callback()
def main(
    log_level: Optional[LogLevel] = typer.Option(
        None, "--log-level", "-l", case_sensitive=False, help="Logging level (default from settings)"
    ),
) -> None:
    """Configure logging before any command runs."""
    from sessionrag.config import settings
    from sessionrag.logging_utils import setup_logging

    level = log_level.value if log_level else settings.log_level
    setup_logging(level, console=err_console)


def _fail(error: SessionRAGError) -> None:
    err_console.print(f"[red]Error:[/red] {error.message}")
    raise typer.Exit(EXIT_FAILURE)


@app.command()
def ingest(
    folder: Path = typer.Argument(..., help="Folder of documents to ingest (recursive)"),
) -> None:
    """Create a session from every document under FOLDER."""
    from sessionrag.retrieval.resources import get_session_manager

    manager = get_session_manager()

    try:
        with console.status(f"[bold green]Ingesting {folder}..."):
            session_id = manager.create_session_from_folder(folder)
    except SessionRAGError as e:
        _fail(e)

    console.print(f"Session ID: {session_id}")


@app.command()
def chat(
    session_id: str = typer.Argument(..., help="Session id printed by 'ingest'"),
    question: list[str] = typer.Argument(..., help="Question to ask"),
    top_k: Optional[int] = typer.Option(
        None, "--top-k", "-k", min=1, help="Maximum chunks used as context"
    ),
    threshold: Optional[float] = typer.Option(
        None, "--threshold", "-t", min=-1.0, max=1.0, help="Minimum similarity score"
    ),
) -> None:
    """Ask QUESTION against session SESSION_ID."""
    from sessionrag.config import settings
    from sessionrag.retrieval.resources import get_session_manager

    message = " ".join(question).strip()
    if not message:
        err_console.print("[red]Provide a question[/red]")
        raise typer.Exit(EXIT_USAGE)

    manager = get_session_manager()

    try:
        with console.status("[bold green]Thinking..."):
            answer = manager.chat(
                session_id,
                message,
                k=top_k if top_k is not None else settings.retrieval_top_k,
                score_threshold=threshold if threshold is not None else settings.similarity_threshold,
            )
    except SessionRAGError as e:
        _fail(e)

    console.print(f"Answer: {answer}")


@app.command()
def sessions() -> None:
    """List stored sessions."""
    from sessionrag.retrieval.resources import get_index_store

    store = get_index_store()
    session_ids = store.list_sessions()

    if not session_ids:
        console.print(f"[yellow]No sessions found in {store.base_dir}[/yellow]")
        return

    table = Table(title=f"Sessions in {store.base_dir}")
    table.add_column("Session ID", style="cyan")
    table.add_column("Chunks", style="green", justify="right")

    for session_id in session_ids:
        try:
            index = store.load(session_id)
        except SessionRAGError as e:
            table.add_row(session_id, f"[red]{e.message}[/red]")
            continue
        table.add_row(session_id, str(index.size if index else 0))

    console.print(table)


@app.command()
def health() -> None:
    """Check that the Ollama server is reachable and the chat model is available."""
    from sessionrag.llm import create_ollama_llm

    is_healthy, message = create_ollama_llm().health_check()
    if is_healthy:
        console.print(f"[green]✓ {message}[/green]")
        return

    err_console.print(f"[red]✗ {message}[/red]")
    raise typer.Exit(EXIT_FAILURE)


@app.command()
def version() -> None:
    """Show version information."""
    from sessionrag import __version__

    console.print(f"sessionrag v{__version__}")


if __name__ == "__main__":
    app()
