"""CLI utility modules."""

from lingopop.cli.utils.async_runner import run_async
from lingopop.cli.utils.console import console, error_console
from lingopop.cli.utils.progress import create_spinner

__all__ = ["run_async", "console", "error_console", "create_spinner"]
