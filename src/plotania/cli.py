"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from plotania.clients.text_service import build_text_service
from plotania.config import AppConfig, load_config
from plotania.editor.document import TextDocument
from plotania.errors import InvalidRangeError
from plotania.logging.event_store import EventStore
from plotania.models.persona import PERSONAS, CommentStatus, PersonaId, persona_name
from plotania.models.suggestion import MODE_LABELS, ActionMode
from plotania.pipeline.session import EditorSession

app = typer.Typer(
    name="plotania",
    help="AI writing assistant: transforms, persona feedback and attribution",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _open_event_store(config: AppConfig) -> EventStore | None:
    """Event store for this run; None when disabled or the database can't be opened."""
    if not config.events.enabled:
        return None
    try:
        return EventStore(config.events.resolved_db_path)
    except (OSError, sqlite3.Error) as e:
        logger.warning("Event logging disabled: %s", e)
        return None


def _open_session(config: AppConfig, file: Path, start: int | None, end: int | None) -> EditorSession:
    if not file.exists():
        console.print(f"[red]File not found: {file}[/red]")
        raise typer.Exit(1)

    text = file.read_text(encoding="utf-8")
    start = start if start is not None else 0
    end = end if end is not None else start
    try:
        document = TextDocument(text, selection=(start, end))
    except (InvalidRangeError, ValueError) as exc:
        console.print(f"[red]Invalid selection: {exc}[/red]")
        raise typer.Exit(1)

    session = EditorSession(
        build_text_service(config),
        document=document,
        sink=_open_event_store(config),
        config=config.editor,
    )
    session.start()
    return session


@app.command()
def transform(
    file: Path = typer.Argument(help="Text file to edit"),
    mode: ActionMode = typer.Option(ActionMode.REWRITE, "--mode", "-m", help="Transform action"),
    start: int = typer.Option(None, "--start", help="Selection start offset"),
    end: int = typer.Option(None, "--end", help="Selection end offset"),
    apply: bool = typer.Option(False, "--apply", help="Apply the suggestion to the document"),
    output: Path = typer.Option(None, "--output", "-o", help="Where to write the edited text"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Suggest a rewrite/expand/shorten/tone change for the selected passage."""
    _setup_logging(verbose)
    config = load_config()
    session = _open_session(config, file, start, end)
    controller = session.suggestions

    with console.status(f"{MODE_LABELS[mode]}..."):
        suggestion = asyncio.run(controller.request(mode))

    if suggestion is None:
        console.print(f"[red]{controller.message}[/red]")
        raise typer.Exit(1)

    console.print(Panel(suggestion.original, title="Original"))
    console.print(Panel(suggestion.suggestion, title="AI Suggestion"))
    console.print(f"[dim]Mode: {suggestion.mode.value}  Δwords: {suggestion.word_diff:+d}[/dim]")

    if not apply:
        return

    if controller.apply() is None:
        console.print(f"[red]{controller.message}[/red]")
        raise typer.Exit(1)

    target = output or file.with_name(f"{file.stem}.revised{file.suffix}")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(session.document.text, encoding="utf-8")
    console.print(f"[green]Saved: {target}[/green]")

    stats = session.attribution()
    console.print(
        Panel(
            f"AI: {stats.ai_percent}% ({stats.ai_chars} chars) | "
            f"Human: {stats.human_percent}% ({stats.human_chars} chars)",
            title="Attribution",
        )
    )


@app.command()
def feedback(
    file: Path = typer.Argument(help="Text file to critique"),
    persona: PersonaId = typer.Option(PersonaId.RUTHLESS_REVIEWER, "--persona", "-p", help="Reader persona"),
    start: int = typer.Option(None, "--start", help="Selection start offset"),
    end: int = typer.Option(None, "--end", help="Selection end offset"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Collect persona comments on the selection (or the whole file)."""
    _setup_logging(verbose)
    config = load_config()
    session = _open_session(config, file, start, end)
    controller = session.feedback

    with console.status(f"{persona_name(persona)} is reading..."):
        comments = asyncio.run(controller.request_feedback(persona))

    if not comments:
        console.print(f"[yellow]{controller.message or 'No comments returned.'}[/yellow]")
        return

    table = Table(title=f"{persona_name(persona)} feedback")
    table.add_column("ID", style="dim")
    table.add_column("Excerpt")
    table.add_column("Comment")
    table.add_column("Suggestion")
    for c in comments:
        table.add_row(c.id, f"“{c.excerpt}”", c.comment, c.suggestion)
    console.print(table)
    visible = sum(1 for c in controller.comments if c.status is not CommentStatus.HIDDEN)
    console.print(f"[dim]{visible} visible comment(s)[/dim]")


@app.command()
def personas() -> None:
    """List the available reader personas."""
    for config in PERSONAS.values():
        console.print(f"  [bold]{config.id.value}[/bold]: {config.name}")
        console.print(f"    {config.tagline}")
        console.print(f"    [dim]{config.focus}[/dim]")


@app.command()
def events(
    session: str = typer.Option(None, "--session", "-s", help="Only this session id"),
    event_type: str = typer.Option(None, "--type", "-t", help="Only this event type"),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum rows"),
) -> None:
    """Show recently recorded editor events."""
    config = load_config()
    store = EventStore(config.events.resolved_db_path)
    rows = store.get_events(session_id=session, event_type=event_type, limit=limit)
    if not rows:
        console.print("[yellow]No events recorded.[/yellow]")
        return

    table = Table(title="Editor events")
    table.add_column("Time", style="dim")
    table.add_column("Type")
    table.add_column("Tool")
    table.add_column("Selection")
    table.add_column("Length", justify="right")
    for e in rows:
        selection = (
            f"{e.selection_start}-{e.selection_end}" if e.selection_start is not None else ""
        )
        table.add_row(
            e.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            e.event_type,
            e.tool_name or "",
            selection,
            str(e.doc_length) if e.doc_length is not None else "",
        )
    console.print(table)

    counts = store.count_by_type(session_id=session)
    summary = ", ".join(f"{k}={v}" for k, v in sorted(counts.items()))
    console.print(f"[dim]{summary}[/dim]")


if __name__ == "__main__":
    app()
