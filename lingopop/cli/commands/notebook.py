"""Notebook management commands."""

from pathlib import Path

import typer
from rich.prompt import Prompt

from lingopop.cli.utils.async_runner import run_async
from lingopop.cli.utils.console import console, error_console
from lingopop.cli.utils.display import entry_panel, notebook_table
from lingopop.cli.utils.progress import create_spinner
from lingopop.cli.utils.services import open_notebook, require_gateway
from lingopop.config import settings
from lingopop.errors import GatewayError, ImportFormatInvalid
from lingopop.schemas import DictionaryEntry
from lingopop.services.flashcards import FlashcardDeck
from lingopop.services.notebook import NotebookStore, export_filename
from lingopop.services.story import MIN_STORY_TERMS, generate_story

app = typer.Typer(
    name="notebook",
    help="Saved words: list, export, import, stories and flashcards",
    no_args_is_help=True,
)


@app.command(name="list")
def list_entries() -> None:
    """List saved entries, newest first."""
    run_async(_list())


async def _list() -> None:
    notebook = await open_notebook()
    if not len(notebook):
        console.print("[dim]Your notebook is empty. Use 'lingopop lookup TERM --save'.[/]")
        return
    console.print(notebook_table(notebook.entries))


@app.command(name="show")
def show(term: str = typer.Argument(..., help="Saved term (exact match)")) -> None:
    """Show a saved entry."""
    run_async(_show(term))


async def _show(term: str) -> None:
    notebook = await open_notebook()
    entry = notebook.get(term)
    if entry is None:
        error_console.print(f"[error]'{term}' is not in your notebook.[/]")
        raise typer.Exit(1)
    console.print(entry_panel(entry, saved=True))


def _resolve_entry(notebook: NotebookStore, entry_id: str) -> DictionaryEntry | None:
    """Accept a full id or a unique prefix as shown by 'notebook list'."""
    entry = notebook.find_by_id(entry_id)
    if entry is not None:
        return entry
    matches = [e for e in notebook.entries if e.id.startswith(entry_id)]
    return matches[0] if len(matches) == 1 else None


@app.command(name="delete")
def delete(entry_id: str = typer.Argument(..., help="Entry id (or unique prefix)")) -> None:
    """Delete a saved entry by id."""
    run_async(_delete(entry_id))


async def _delete(entry_id: str) -> None:
    notebook = await open_notebook()
    entry = _resolve_entry(notebook, entry_id)
    if entry is None:
        error_console.print(f"[error]No single entry matches id '{entry_id}'.[/]")
        raise typer.Exit(1)

    await notebook.delete(entry.id)
    console.print(f"[success]Deleted '{entry.term}'.[/]")


@app.command(name="export")
def export(
    output: Path | None = typer.Option(None, "--output", "-o", help="Backup file path"),
) -> None:
    """Write the notebook to a dated JSON backup file."""
    run_async(_export(output))


async def _export(output: Path | None) -> Path:
    notebook = await open_notebook()
    path = output or settings.export_dir / export_filename()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(notebook.export(), encoding="utf-8")
    console.print(f"[success]Exported {len(notebook)} entries to {path}[/]")
    return path


@app.command(name="import")
def import_backup(path: Path = typer.Argument(..., help="Backup file to merge")) -> None:
    """Merge a backup into the notebook. Existing words are kept."""
    if not path.exists():
        error_console.print(f"[error]File not found: {path}[/]")
        raise typer.Exit(1)
    run_async(_import(path))


async def _import(path: Path) -> int:
    notebook = await open_notebook()
    try:
        added = await notebook.import_json(path.read_text(encoding="utf-8"))
    except ImportFormatInvalid as e:
        error_console.print(f"[error]Invalid backup file format: {e}[/]")
        raise typer.Exit(1) from None

    console.print(f"[success]Notebook restored: {added} new entries added.[/]")
    return added


@app.command(name="story")
def story(
    target: str = typer.Option("", "--target", "-t", help="Story language"),
    native: str = typer.Option("", "--native", "-n", help="Summary language"),
    model: str = typer.Option("", "--model", "-m", help="Gemini text model id"),
) -> None:
    """Write a short story using your saved words."""
    run_async(_story(target, native, model))


async def _story(target: str, native: str, model: str) -> str:
    notebook = await open_notebook()
    if len(notebook) < MIN_STORY_TERMS:
        error_console.print(
            f"[warning]Save at least {MIN_STORY_TERMS} words to generate a story![/]"
        )
        raise typer.Exit(1)

    gateway = await require_gateway()
    with create_spinner() as progress:
        progress.add_task("Writing a story...", total=None)
        try:
            text = await generate_story(
                gateway, notebook.terms(), target or None, native or None, model or None
            )
        except GatewayError as e:
            error_console.print(f"[error]Story generation failed: {e}[/]")
            raise typer.Exit(1) from None

    console.print(text)
    return text


@app.command(name="review")
def review() -> None:
    """Review saved words as flashcards."""
    run_async(_review())


async def _review() -> None:
    notebook = await open_notebook()
    if not len(notebook):
        console.print("[dim]Add words to your notebook to unlock flashcards.[/]")
        return

    deck = FlashcardDeck(notebook.entries)
    while True:
        index, total = deck.position
        card = deck.current
        if deck.flipped:
            console.print(entry_panel(card, saved=True))
        else:
            console.print(f"\n[dim]{index} / {total}[/]  [term]{card.term}[/]")

        choice = Prompt.ask(
            "[dim](f)lip, (n)ext, (q)uit[/]",
            choices=["f", "n", "q"],
            default="f",
            console=console,
        )
        if choice == "q":
            break
        if choice == "f":
            deck.flip()
        else:
            deck.next()
