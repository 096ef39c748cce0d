"""Rich output formatting for the athenaq CLI.

Result tables are rendered with ASCII borders so that output piped to files
or other tools stays readable regardless of terminal encoding.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

from rich import box
from rich.measure import Measurement
from rich.table import Table
from rich.text import Text

from athena_engine.formatting import format_cell, iter_result_lines

# Measurement bound large enough that no realistic result table is clamped.
_UNBOUNDED_WIDTH = 1_000_000

if TYPE_CHECKING:
    from rich.console import Console

    from athena_engine.models.execution import QueryResult


# ---------------------------------------------------------------------------
# Table mode
# ---------------------------------------------------------------------------


def build_result_table(result: QueryResult) -> Table:
    """Build a bordered table with a header row from the result's column names.

    Cells are wrapped in :class:`rich.text.Text` so that square brackets in
    data are shown literally instead of being parsed as console markup.
    """
    table = Table(
        box=box.ASCII,
        show_header=True,
        show_lines=False,
        pad_edge=True,
        expand=False,
    )
    for name in result.column_names:
        table.add_column(Text(name), overflow="fold")

    for row in result.rows():
        table.add_row(*(Text(format_cell(v)) for v in row))

    return table


def result_table_width(console: Console, table: Table) -> int:
    """Return the width *table* needs to render without wrapping any cell."""
    options = console.options.update_width(_UNBOUNDED_WIDTH)
    return Measurement.get(console, options, table).maximum


def display_result_table(console: Console, result: QueryResult) -> None:
    """Render *result* as a table to *console* at the table's natural width.

    The console is widened when the table does not fit, so that a piped
    stdout (fixed at 80 columns) never folds headers or values.

    Parameters
    ----------
    console:
        Rich console to write to (stdout for query results).
    result:
        The fully fetched query result.
    """
    table = build_result_table(result)
    natural_width = result_table_width(console, table)
    if natural_width > console.width:
        console.width = natural_width
    console.print(table)


# ---------------------------------------------------------------------------
# Line mode
# ---------------------------------------------------------------------------


def write_result_lines(stream: TextIO, result: QueryResult) -> None:
    """Write one comma-joined line per row to *stream*."""
    for line in iter_result_lines(result):
        stream.write(line + "\n")
