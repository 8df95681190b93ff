"""CLI interface for FocusPad."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import pydantic
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from focuspad import __version__
from focuspad.config import Settings, get_settings
from focuspad.database.repository import KeyValueRepository
from focuspad.services.preferences import PreferencesOverlay
from focuspad.services.session import Principal, Session
from focuspad.services.sync_engine import SyncEngine, SyncListener, SyncResult

app = typer.Typer(
    name="focuspad",
    help="Note editor backed by Supabase, with debounced autosave and local pin order.",
    no_args_is_help=True,
)
console = Console()


class EditorBuffer:
    """Stands in for the editor: holds the markup the engine saves."""

    def __init__(self, content: Optional[str] = None):
        self.content = content

    def __call__(self) -> Optional[str]:
        return self.content


class ConsoleListener(SyncListener):
    """Prints save progress."""

    def on_unsaved_changed(self, note_id: str, is_unsaved: bool) -> None:
        if is_unsaved:
            console.print(f"  [yellow]●[/yellow] {note_id}: unsaved changes")
        else:
            console.print(f"  [green]✓[/green] {note_id}: saving")


def load_settings() -> Settings:
    """Get settings or exit with a readable error."""
    try:
        return get_settings()
    except Exception as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        console.print("\nMake sure you have a .env file with FOCUSPAD_ settings.")
        raise typer.Exit(1)


def get_local_store(settings: Settings) -> KeyValueRepository:
    """Get local storage, ensuring data directory exists."""
    settings.database_path.parent.mkdir(parents=True, exist_ok=True)
    return KeyValueRepository(settings.database_url)


def build_engine(
    settings: Settings,
    content_source: Optional[EditorBuffer] = None,
    listener: Optional[SyncListener] = None,
) -> SyncEngine:
    """Wire a session and a sync engine from settings."""
    principal = Principal(id=settings.user_id) if settings.user_id else None
    session = Session(
        principal,
        get_local_store(settings),
        pin_order_key=settings.pin_order_key,
        settings_key=settings.settings_key,
    )

    store = None
    if settings.supabase_url:
        from focuspad.services.supabase_client import SupabaseStore

        store = SupabaseStore(
            url=settings.supabase_url,
            api_key=settings.supabase_key,
            access_token=settings.access_token or None,
            timeout=settings.request_timeout,
        )

    return SyncEngine(
        session,
        store,
        content_source=content_source,
        listener=listener,
        save_delay=settings.save_delay,
    )


def check(result: SyncResult, action: str) -> None:
    """Exit with an error message when *result* failed."""
    if result.success:
        return
    console.print(f"[red]Error {action}: {result.error}[/red]")
    raise typer.Exit(1)


async def started(engine: SyncEngine) -> SyncEngine:
    check(await engine.start(), "loading notes")
    return engine


@app.command("list")
def list_notes():
    """List notes, pinned first."""
    settings = load_settings()

    async def run() -> None:
        engine = await started(build_engine(settings))

        table = Table(title="Notes")
        table.add_column("", style="bold")
        table.add_column("ID", style="dim")
        table.add_column("Title", style="cyan")
        table.add_column("Pinned")
        table.add_column("Public")
        table.add_column("Updated", style="green")

        for note in engine.ordered_notes():
            table.add_row(
                "*" if note.id == engine.active_id else "",
                note.id,
                note.title,
                "✓" if note.is_pinned else "",
                "✓" if note.is_public else "",
                note.updated_at.strftime("%Y-%m-%d %H:%M"),
            )
        console.print(table)

    asyncio.run(run())


@app.command()
def show(note_id: str = typer.Argument(..., help="ID of the note")):
    """Show a note's content."""
    settings = load_settings()

    async def run() -> None:
        engine = await started(build_engine(settings))
        note = engine.collection.find_by_id(note_id)
        if note is None:
            console.print(f"[red]Note {note_id} not found[/red]")
            raise typer.Exit(1)

        console.print(f"[bold cyan]─── {note.title} ───[/bold cyan]")
        console.print(f"  [bold]Pinned:[/bold] {'yes' if note.is_pinned else 'no'}")
        console.print(f"  [bold]Public:[/bold] {'yes' if note.is_public else 'no'}")
        console.print(f"  [bold]Updated:[/bold] {note.updated_at}")
        console.print()
        console.print(note.content, markup=False)

    asyncio.run(run())


@app.command()
def new(title: str = typer.Argument("Untitled", help="Title of the new note")):
    """Create a note."""
    settings = load_settings()

    async def run() -> None:
        engine = await started(build_engine(settings))
        result = await engine.create_note(title)
        check(result, "creating note")
        console.print(f"[green]✓[/green] Created note {result.note_id}")

    asyncio.run(run())


@app.command()
def rename(
    note_id: str = typer.Argument(..., help="ID of the note"),
    title: str = typer.Argument(..., help="New title"),
):
    """Rename a note."""
    settings = load_settings()

    async def run() -> None:
        engine = await started(build_engine(settings))
        check(await engine.update_title(note_id, title), "renaming note")
        console.print(f"[green]✓[/green] Renamed note {note_id}")

    asyncio.run(run())


@app.command()
def write(
    note_id: str = typer.Argument(..., help="ID of the note"),
    text: Optional[str] = typer.Argument(None, help="New content (markup)"),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="Read the new content from a file"
    ),
):
    """Replace a note's content."""
    if file is not None:
        text = file.read_text(encoding="utf-8")
    if text is None:
        console.print("[red]Give the content as an argument or with --file[/red]")
        raise typer.Exit(1)

    settings = load_settings()

    async def run() -> None:
        buffer = EditorBuffer()
        engine = await started(build_engine(settings, buffer, ConsoleListener()))
        check(await engine.switch_note(note_id), "opening note")

        buffer.content = text
        engine.request_save()
        result = await engine.flush()
        await engine.close()
        check(result, "saving note")
        console.print(f"[green]✓[/green] Saved note {note_id}")

    asyncio.run(run())


@app.command()
def delete(
    note_id: str = typer.Argument(..., help="ID of the note"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete a note."""
    if not yes and not typer.confirm(f"Delete note {note_id}?"):
        raise typer.Exit(0)

    settings = load_settings()

    async def run() -> None:
        engine = await started(build_engine(settings))
        result = await engine.delete_note(note_id)
        if result.success or result.deleted:
            console.print(f"[green]✓[/green] Deleted note {note_id}")
        check(result, "deleting note")

    asyncio.run(run())


def _set_pinned(note_id: str, pinned: bool) -> None:
    settings = load_settings()

    async def run() -> None:
        engine = await started(build_engine(settings))
        check(await engine.toggle_pin(note_id, pinned), "updating pin")
        state = "Pinned" if pinned else "Unpinned"
        console.print(f"[green]✓[/green] {state} note {note_id}")

    asyncio.run(run())


@app.command()
def pin(note_id: str = typer.Argument(..., help="ID of the note")):
    """Pin a note to the top of the list."""
    _set_pinned(note_id, True)


@app.command()
def unpin(note_id: str = typer.Argument(..., help="ID of the note")):
    """Unpin a note."""
    _set_pinned(note_id, False)


@app.command()
def publish(
    note_id: str = typer.Argument(..., help="ID of the note"),
    private: bool = typer.Option(False, "--private", help="Make the note private again"),
):
    """Share a note publicly."""
    settings = load_settings()

    async def run() -> None:
        engine = await started(build_engine(settings))
        check(await engine.toggle_public(note_id, not private), "updating visibility")
        state = "private" if private else "public"
        console.print(f"[green]✓[/green] Note {note_id} is now {state}")

    asyncio.run(run())


@app.command()
def prefs(
    theme: Optional[str] = typer.Option(None, "--theme", help="Color theme"),
    font: Optional[str] = typer.Option(None, "--font", help="Editor font"),
    font_size: Optional[str] = typer.Option(None, "--font-size", help="Editor font size"),
    auto_save: Optional[bool] = typer.Option(
        None, "--auto-save/--no-auto-save", help="Save edits after the idle window"
    ),
    reset: bool = typer.Option(False, "--reset", help="Restore the defaults"),
):
    """Show or change editor preferences."""
    settings = load_settings()
    overlay = PreferencesOverlay(get_local_store(settings), settings.settings_key)
    overlay.load()

    changes = {
        name: value
        for name, value in (
            ("theme", theme),
            ("editor_font", font),
            ("editor_font_size", font_size),
            ("auto_save", auto_save),
        )
        if value is not None
    }
    try:
        if reset:
            overlay.reset()
        if changes:
            overlay.update(**changes)
    except pydantic.ValidationError as e:
        console.print(f"[red]Invalid preference: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Editor Preferences")
    table.add_column("Preference", style="cyan")
    table.add_column("Value", style="green")
    current = overlay.preferences
    table.add_row("Theme", current.theme)
    table.add_row("Editor Font", current.editor_font)
    table.add_row("Editor Font Size", current.editor_font_size)
    table.add_row("Auto Save", "on" if current.auto_save else "off")
    console.print(table)


@app.command()
def config():
    """Show current configuration."""
    settings = load_settings()

    table = Table(title="FocusPad Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    # Mask sensitive values
    key_masked = (
        settings.supabase_key[:10] + "..." if len(settings.supabase_key) > 10 else "***"
    ) if settings.supabase_key else "(not set)"
    token_masked = (
        settings.access_token[:10] + "..." if len(settings.access_token) > 10 else "***"
    ) if settings.access_token else "(anon key)"

    table.add_row("Supabase URL", settings.supabase_url or "(not set)")
    table.add_row("Supabase Key", key_masked)
    table.add_row("Access Token", token_masked)
    table.add_row("User ID", settings.user_id or "(not logged in)")
    table.add_row("Save Delay", f"{settings.save_delay}s")
    table.add_row("Request Timeout", f"{settings.request_timeout}s")
    table.add_row("Database Path", str(settings.database_path))
    table.add_row("Log Level", settings.log_level)

    console.print(table)


@app.command()
def version():
    """Show version information."""
    console.print(f"FocusPad v{__version__}")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """
    FocusPad - note editor sync engine.

    Keeps notes in Supabase, autosaves edits after a short idle window and
    remembers the order of pinned notes locally.
    """
    level = "DEBUG" if verbose else load_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


if __name__ == "__main__":
    app()
