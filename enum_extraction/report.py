"""Rich table rendering for the enum inventory."""

from __future__ import annotations

from typing import Iterable, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from enum_extraction.config import REPORT_COLUMNS
from enum_extraction.models import EnumRecord


def build_enum_table(record: EnumRecord) -> Table:
    """One markdown-bordered table per enum: Name / Value / Comment.

    Cell text is wrapped in ``Text`` so brackets in initializers or comments
    are printed literally instead of being read as rich markup. The table is
    at least as wide as its title so the title stays on one line.
    """
    table = Table(
        title=Text(record.title),
        box=box.MARKDOWN,
        min_width=len(record.title),
    )
    for column in REPORT_COLUMNS:
        table.add_column(column)
    for member in record.values:
        table.add_row(
            Text(member.name),
            Text(member.value_text),
            Text(member.comment_text),
        )
    return table


def render_inventory(
    records: Iterable[EnumRecord],
    console: Optional[Console] = None,
) -> int:
    """Print a table for every record, in the given order.

    Returns:
        Number of tables rendered.
    """
    console = console or Console()
    count = 0
    for record in records:
        console.print(build_enum_table(record))
        count += 1
    return count


def render_failures(
    failed_projects: list[str],
    failed_documents: list[str],
    console: Optional[Console] = None,
) -> None:
    """Print the projects and documents that did not contribute records."""
    console = console or Console(stderr=True)
    for name in failed_projects:
        console.print(Text(f"Project failed: {name}", style="red"))
    for name in failed_documents:
        console.print(Text(f"Document skipped (no syntax tree): {name}", style="yellow"))
