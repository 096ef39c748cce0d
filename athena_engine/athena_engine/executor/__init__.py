"""Query execution against Amazon Athena."""

from __future__ import annotations

from athena_engine.executor.athena_executor import AthenaExecutor

__all__ = [
    "AthenaExecutor",
]
