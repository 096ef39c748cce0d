"""Error taxonomy for query submission, polling, and result fetching.

Every failure raised by the engine derives from :class:`AthenaQueryError` so
the CLI can report all of them through a single abort path.  Nothing in the
engine retries; each of these is fatal to the current query.
"""

from __future__ import annotations

import json
from typing import Any

from botocore.exceptions import ClientError


class AthenaQueryError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(AthenaQueryError):
    """Raised when a required input (e.g. the query text) is missing or invalid."""


class ServiceError(AthenaQueryError):
    """Raised when an Athena API call fails at the transport or API level.

    Parameters
    ----------
    operation:
        Name of the Athena operation that failed, e.g. ``StartQueryExecution``.
    cause:
        The botocore exception that was raised by the SDK.
    """

    def __init__(self, operation: str, cause: Exception) -> None:
        self.operation = operation
        self.cause = cause
        self.error_code: str | None = None
        if isinstance(cause, ClientError):
            self.error_code = cause.response.get("Error", {}).get("Code")
        super().__init__(f"{operation} failed: {cause}")


class QueryExecutionError(AthenaQueryError):
    """Raised when a query reaches a terminal state other than SUCCEEDED.

    The full ``QueryExecution`` payload reported by the service is kept on
    :attr:`payload` and rendered verbatim into the message.
    """

    def __init__(
        self,
        execution_id: str,
        state: str,
        reason: str | None,
        payload: dict[str, Any],
    ) -> None:
        self.execution_id = execution_id
        self.state = state
        self.reason = reason
        self.payload = payload
        detail = json.dumps(payload, indent=2, sort_keys=True, default=str)
        summary = f"Query execution {execution_id} finished in state {state}"
        if reason:
            summary = f"{summary}: {reason}"
        super().__init__(f"{summary}\n{detail}")


class QueryTimeoutError(AthenaQueryError):
    """Raised when a query does not reach a terminal state before the poll deadline."""

    def __init__(self, execution_id: str, timeout: float) -> None:
        self.execution_id = execution_id
        self.timeout = timeout
        super().__init__(f"Query execution {execution_id} did not complete within {timeout:g}s")
