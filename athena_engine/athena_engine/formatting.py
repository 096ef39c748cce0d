"""Plain-text line rendering of query results.

Each row becomes one line of comma-joined cell values.  Values are not
quoted, so a cell that itself contains a comma cannot be told apart from two
cells in the output.
"""

from __future__ import annotations

from collections.abc import Iterator

from athena_engine.models.execution import QueryResult, Row

NULL_TEXT = "null"
FIELD_SEPARATOR = ","


def format_cell(value: str | None) -> str:
    """Return the display text for a single cell; NULL renders as ``null``."""
    if value is None:
        return NULL_TEXT
    return str(value)


def format_row(row: Row) -> str:
    return FIELD_SEPARATOR.join(format_cell(v) for v in row)


def iter_result_lines(result: QueryResult) -> Iterator[str]:
    """Yield one formatted line per row, in fetch order."""
    for row in result.rows():
        yield format_row(row)
