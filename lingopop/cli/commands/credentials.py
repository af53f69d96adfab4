"""API key and settings commands."""

import typer
from rich.table import Table

from lingopop.cli.utils.async_runner import run_async
from lingopop.cli.utils.console import console, error_console
from lingopop.cli.utils.services import get_storage
from lingopop.config import settings
from lingopop.languages import SUPPORTED_LANGUAGES, TEXT_MODELS
from lingopop.storage import API_KEY_KEY

app = typer.Typer(
    name="config",
    help="API key and model configuration",
    no_args_is_help=True,
)


def mask_key(key: str) -> str:
    """Show only the last four characters of a credential."""
    if len(key) <= 4:
        return "*" * len(key)
    return "*" * 8 + key[-4:]


@app.command(name="set-key")
def set_key(
    key: str = typer.Option(..., prompt="Gemini API key", hide_input=True, help="Gemini API key"),
) -> None:
    """Store a Gemini API key in local storage."""
    key = key.strip()
    if not key:
        error_console.print("[error]API key cannot be empty.[/]")
        raise typer.Exit(1)
    run_async(get_storage().set_item(API_KEY_KEY, key))
    console.print("[success]API key saved.[/]")


@app.command(name="clear-key")
def clear_key() -> None:
    """Remove the stored Gemini API key."""
    removed = run_async(get_storage().remove_item(API_KEY_KEY))
    console.print("[success]API key removed.[/]" if removed else "[dim]No stored API key.[/]")


@app.command(name="show")
def show() -> None:
    """Show the active configuration and available models."""
    run_async(_show())


async def _show() -> None:
    stored_key = await get_storage().get_item(API_KEY_KEY)
    if settings.gemini_api_key:
        key_status = f"{mask_key(settings.gemini_api_key)} [dim](environment)[/]"
    elif stored_key:
        key_status = f"{mask_key(stored_key)} [dim](local storage)[/]"
    else:
        key_status = "[red]not set[/]"

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Label", style="bold")
    table.add_column("Value")
    table.add_row("API key", key_status)
    table.add_row("Text model", settings.text_model)
    table.add_row("Languages", f"{settings.native_lang} → {settings.target_lang}")
    table.add_row("Voice", settings.speech_voice)
    table.add_row("Data dir", str(settings.data_dir))
    console.print(table)

    models = Table(title="Text models")
    models.add_column("Id", style="bold")
    models.add_column("Name")
    models.add_column("Notes", style="dim")
    for model in TEXT_MODELS:
        models.add_row(model.id, model.name, model.description)
    console.print(models)

    console.print(
        "[dim]Languages: "
        + ", ".join(f"{lang.flag} {lang.code}" for lang in SUPPORTED_LANGUAGES)
        + "[/]"
    )
