"""Rich spinner for waiting on Gemini requests."""

from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from lingopop.cli.utils.console import console


def create_spinner() -> Progress:
    """Create a transient spinner with elapsed time, for open-ended waits."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
