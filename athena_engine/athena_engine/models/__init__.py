"""Domain models for the Athena query engine."""

from athena_engine.models.execution import (
    ColumnInfo,
    ExecutionState,
    ExecutionStatus,
    QueryResult,
    ResultPage,
    Row,
)

__all__ = [
    "ColumnInfo",
    "ExecutionState",
    "ExecutionStatus",
    "QueryResult",
    "ResultPage",
    "Row",
]
