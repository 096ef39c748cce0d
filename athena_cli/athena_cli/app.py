"""athenaq CLI application -- Typer-based interface to Amazon Athena.

Runs one SQL query per invocation: submits it, waits for completion, fetches
every result page and prints the rows to *stdout*, either as comma-joined
lines or as a bordered table.  Diagnostics and errors go to *stderr* via
Rich so that result output can be piped cleanly.
"""

from __future__ import annotations

import logging
import sys

import click
import typer
from rich.console import Console
from rich.markup import escape

from athena_cli.display import display_result_table, write_result_lines

# ---------------------------------------------------------------------------
# App & global state
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="athenaq",
    help="athenaq - run a SQL query on Amazon Athena and print the results",
    add_completion=False,
)
console = Console(stderr=True)

_LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _configure_logging(debug: bool) -> None:
    """Send engine logs to stderr; DEBUG when requested, otherwise WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
    )


# ---------------------------------------------------------------------------
# query
# ---------------------------------------------------------------------------


@app.command()
def query(
    sql: str = typer.Option(
        "",
        "--query",
        "-q",
        help="SQL query string to execute (required).",
        show_default=False,
    ),
    human_readable: bool = typer.Option(
        False,
        "--human-readable",
        "-h",
        help="Show results as a human-readable table.",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        click_type=click.FloatRange(min=0.0, min_open=True),
        help="Give up (and stop the query) after this many seconds. Overrides ATHENA_POLL_TIMEOUT.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log progress to stderr.",
    ),
) -> None:
    """Execute a query, wait for it to finish, and print every result row."""
    from athena_engine.config import load_settings
    from athena_engine.errors import ConfigurationError
    from athena_engine.executor import AthenaExecutor

    try:
        settings = load_settings()
        _configure_logging(verbose or settings.debug)

        if not sql.strip():
            raise ConfigurationError("A query string is required (use -q/--query)")

        executor = AthenaExecutor.from_settings(settings, poll_timeout=timeout)
        result = executor.run_query(sql)

        if human_readable:
            display_result_table(Console(highlight=False), result)
        else:
            write_result_lines(sys.stdout, result)

    except typer.Exit:
        raise
    except Exception as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=3) from exc
