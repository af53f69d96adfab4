"""Shared Rich consoles with the LingoPop colour theme."""

from rich.console import Console
from rich.theme import Theme

LINGOPOP_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "term": "magenta bold",
        "example": "italic",
        "tutor": "blue",
        "dim": "dim",
    }
)

# Entries contain arbitrary prose; automatic number/URL highlighting only adds noise
console = Console(theme=LINGOPOP_THEME, highlight=False)

# Errors and warnings go to stderr
error_console = Console(theme=LINGOPOP_THEME, stderr=True, highlight=False)
