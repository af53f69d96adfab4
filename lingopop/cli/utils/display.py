"""Rendering helpers for entries and notebooks."""

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from lingopop.schemas import DictionaryEntry


def entry_panel(entry: DictionaryEntry, saved: bool = False) -> Panel:
    """Build a panel showing a dictionary entry."""
    parts: list[Text | Table] = [
        Text(entry.definition),
        Text(""),
    ]

    if entry.examples:
        examples = Table(show_header=False, box=None, padding=(0, 1))
        examples.add_column("Original", style="example")
        examples.add_column("Translation", style="dim")
        for example in entry.examples:
            examples.add_row(example.original, example.translation)
        parts.extend([Text("Examples", style="bold"), examples, Text("")])

    parts.extend([Text("Fun explanation", style="bold"), Text(entry.fun_explanation)])

    image = "[green]image ready[/]" if entry.has_image else "[dim]no image[/]"
    star = " [yellow]★ saved[/]" if saved else ""
    return Panel(
        Group(*parts),
        title=f"[term]{entry.term}[/]{star}",
        subtitle=image,
        border_style="blue",
    )


def notebook_table(entries: list[DictionaryEntry]) -> Table:
    """Build a table listing notebook entries."""
    table = Table(title="Notebook", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Term", style="term")
    table.add_column("Definition")
    table.add_column("Saved", style="dim")
    table.add_column("ID", style="dim")

    for index, entry in enumerate(entries, 1):
        definition = entry.definition
        if len(definition) > 60:
            definition = definition[:57] + "..."
        table.add_row(
            str(index),
            entry.term,
            definition,
            entry.created_at.strftime("%Y-%m-%d"),
            entry.id[:8],
        )
    return table
