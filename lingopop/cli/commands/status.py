"""Status command for displaying notebook and configuration state."""

from rich.panel import Panel
from rich.table import Table

from lingopop.cli.utils.async_runner import run_async
from lingopop.cli.utils.console import console
from lingopop.cli.utils.services import get_storage, open_notebook
from lingopop.config import settings
from lingopop.services.gemini import is_advanced_model, resolve_api_key


def status() -> None:
    """Show notebook and configuration status."""
    run_async(_status())


async def _status() -> None:
    """Async implementation of status command."""
    storage = get_storage()
    notebook = await open_notebook(storage)
    api_key = await resolve_api_key(storage)

    with_images = sum(1 for entry in notebook.entries if entry.has_image)

    notebook_table = Table(show_header=False, box=None, padding=(0, 2))
    notebook_table.add_column("Label", style="bold")
    notebook_table.add_column("Value", justify="right")
    notebook_table.add_row("Saved words", str(len(notebook)))
    notebook_table.add_row("With illustration", str(with_images))
    latest = notebook.entries[0].term if len(notebook) else "-"
    notebook_table.add_row("Latest", latest)

    gemini_table = Table(show_header=False, box=None, padding=(0, 2))
    gemini_table.add_column("Label", style="bold")
    gemini_table.add_column("Value", justify="right")
    gemini_table.add_row("API key", "[green]Configured[/]" if api_key else "[red]Missing[/]")
    gemini_table.add_row("Text model", settings.text_model)
    gemini_table.add_row(
        "Image model",
        settings.pro_image_model
        if is_advanced_model(settings.text_model)
        else settings.fast_image_model,
    )
    gemini_table.add_row("Languages", f"{settings.native_lang} → {settings.target_lang}")

    console.print()
    console.print(Panel(notebook_table, title="[bold]Notebook[/]", border_style="blue"))
    console.print(Panel(gemini_table, title="[bold]Gemini[/]", border_style="blue"))
    console.print()
