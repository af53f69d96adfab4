"""Main CLI application entry point."""

import typer

from lingopop import __version__
from lingopop.cli.commands import credentials, lookup, notebook, status
from lingopop.cli.utils.async_runner import run_async
from lingopop.cli.utils.console import console, error_console
from lingopop.config import settings
from lingopop.database import init_db
from lingopop.logging_config import setup_logging

app = typer.Typer(
    name="lingopop",
    help="Pop-up dictionary: AI explanations, illustrations and a personal notebook",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"lingopop {__version__}")
        raise typer.Exit()


@app.callback()
def startup(
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version"
    ),
) -> None:
    """Initialize application on startup."""
    setup_logging("DEBUG" if verbose else None)

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    try:
        run_async(init_db())
    except Exception as e:
        error_console.print(f"[error]Failed to initialize database: {e}[/]")
        raise typer.Exit(1) from None


app.command(name="lookup", help="Look up a word or phrase")(lookup.lookup)
app.command(name="chat", help="Ask the tutor about a word")(lookup.chat)
app.command(name="speak", help="Read text aloud")(lookup.speak)
app.command(name="status", help="Show notebook and configuration status")(status.status)

app.add_typer(notebook.app, name="notebook")
app.add_typer(credentials.app, name="config")


if __name__ == "__main__":
    app()
