"""Wiring of storage, notebook and gateway for CLI commands."""

import typer

from lingopop.cli.utils.console import error_console
from lingopop.errors import ConfigError
from lingopop.services.gemini import GeminiGateway, create_gateway
from lingopop.services.notebook import NotebookStore
from lingopop.storage import LocalStorage


def get_storage() -> LocalStorage:
    return LocalStorage()


async def open_notebook(storage: LocalStorage | None = None) -> NotebookStore:
    return await NotebookStore.open(storage or get_storage())


async def require_gateway(storage: LocalStorage | None = None) -> GeminiGateway:
    """Create the gateway or exit with a configuration error."""
    try:
        return await create_gateway(storage or get_storage())
    except ConfigError as e:
        error_console.print(f"[error]{e}[/]")
        raise typer.Exit(1) from None
