"""Query execution models: lifecycle state, column metadata, and result pages.

A ``QueryResult`` is the fully materialized output of one query execution.
Its column metadata is taken from the first fetched page only; pages are kept
in fetch order so that flattening them reproduces the service's row order.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

Row = list[str | None]


class ExecutionState(str, Enum):
    """Lifecycle state of an Athena query execution."""

    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str | None) -> ExecutionState:
        """Map a raw service state onto the enum; unrecognised values become UNKNOWN."""
        if value is None:
            return cls.UNKNOWN
        try:
            return cls(value.upper())
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_pending(self) -> bool:
        return self in (ExecutionState.QUEUED, ExecutionState.RUNNING)

    @property
    def is_terminal(self) -> bool:
        return not self.is_pending


class ExecutionStatus(BaseModel):
    """Snapshot of a single ``GetQueryExecution`` observation."""

    execution_id: str = Field(
        ...,
        min_length=1,
        description="Identifier returned by StartQueryExecution.",
    )
    state: ExecutionState = Field(
        ...,
        description="Lifecycle state reported by the service.",
    )
    state_change_reason: str | None = Field(
        default=None,
        description="Service-provided explanation for the latest state change.",
    )
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Raw QueryExecution structure, kept for diagnostics.",
    )


class ColumnInfo(BaseModel):
    """Name and declared type of a single result column."""

    name: str
    type: str = ""


class ResultPage(BaseModel):
    """One page of results exactly as reported by the service."""

    columns: list[ColumnInfo] = Field(default_factory=list)
    rows: list[Row] = Field(default_factory=list)


class QueryResult(BaseModel):
    """All result pages of a completed query, in fetch order."""

    execution_id: str = Field(..., min_length=1)
    columns: list[ColumnInfo] = Field(
        default_factory=list,
        description="Column metadata captured from the first page.",
    )
    pages: list[list[Row]] = Field(default_factory=list)

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def row_count(self) -> int:
        return sum(len(page) for page in self.pages)

    def rows(self) -> Iterator[Row]:
        """Yield every row across all pages, preserving page and row order."""
        for page in self.pages:
            yield from page
