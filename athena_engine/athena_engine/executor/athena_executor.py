"""Amazon Athena executor: submit a query, wait for it, and fetch its results.

Submits SQL through the official AWS SDK, polls ``GetQueryExecution`` on a
fixed interval until the execution reaches a terminal state, and pages
through ``GetQueryResults`` to materialize the result set.  SDK failures are
surfaced as :class:`ServiceError` and are never retried.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from athena_engine.config import DEFAULT_PAGE_SIZE, DEFAULT_POLL_INTERVAL, DEFAULT_REGION
from athena_engine.errors import (
    ConfigurationError,
    QueryExecutionError,
    QueryTimeoutError,
    ServiceError,
)
from athena_engine.models.execution import (
    ColumnInfo,
    ExecutionState,
    ExecutionStatus,
    QueryResult,
    ResultPage,
    Row,
)

if TYPE_CHECKING:
    from athena_engine.config import Settings

logger = logging.getLogger(__name__)

_SDK_ERRORS = (BotoCoreError, ClientError)


# ---------------------------------------------------------------------------
# Response parsing helpers
# ---------------------------------------------------------------------------


def _parse_columns(result_set: dict[str, Any]) -> list[ColumnInfo]:
    column_info = result_set.get("ResultSetMetadata", {}).get("ColumnInfo", [])
    return [ColumnInfo(name=c.get("Name", ""), type=c.get("Type", "")) for c in column_info]


def _parse_row(row: dict[str, Any]) -> Row:
    """Convert an Athena ``Row`` into a list of nullable strings.

    A datum without ``VarCharValue`` (or a missing datum) is a SQL NULL.
    """
    return [datum.get("VarCharValue") if datum else None for datum in row.get("Data", [])]


def _parse_page(page: dict[str, Any]) -> ResultPage:
    result_set = page.get("ResultSet", {})
    return ResultPage(
        columns=_parse_columns(result_set),
        rows=[_parse_row(r) for r in result_set.get("Rows", [])],
    )


# ---------------------------------------------------------------------------
# AthenaExecutor
# ---------------------------------------------------------------------------


class AthenaExecutor:
    """Run a single SQL query on Amazon Athena.

    Parameters
    ----------
    client:
        A boto3 Athena client.  When omitted, one is created from a new
        :class:`boto3.Session` bound to *region*, using the SDK's default
        credential chain.
    region:
        AWS region used when *client* is not supplied.
    output_location:
        S3 URI where Athena writes query results.  Passed through unvalidated;
        when ``None`` the parameter is omitted and the workgroup's own
        setting (if any) applies.
    workgroup:
        Optional Athena workgroup to run the query in.
    database:
        Optional default database for unqualified table names.
    poll_interval:
        Fixed number of seconds to sleep between status checks.
    poll_timeout:
        Default upper bound in seconds on the wait for a terminal state.
        ``None`` waits indefinitely.
    page_size:
        Number of rows requested per ``GetQueryResults`` call.
    """

    def __init__(
        self,
        client: Any | None = None,
        region: str = DEFAULT_REGION,
        output_location: str | None = None,
        workgroup: str | None = None,
        database: str | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        poll_timeout: float | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if client is None:
            client = boto3.Session(region_name=region).client("athena")
        self._client = client
        self._output_location = output_location
        self._workgroup = workgroup
        self._database = database
        self._poll_interval = poll_interval
        self._poll_timeout = poll_timeout
        self._page_size = page_size

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: Any | None = None,
        poll_timeout: float | None = None,
    ) -> AthenaExecutor:
        """Build an executor from :class:`Settings`.

        *poll_timeout* overrides ``settings.poll_timeout`` when given.
        """
        if not settings.is_output_location_configured():
            logger.warning("No output location configured; relying on the workgroup's result configuration")
        return cls(
            client=client,
            region=settings.region,
            output_location=settings.output_location,
            workgroup=settings.workgroup,
            database=settings.database,
            poll_interval=settings.poll_interval,
            poll_timeout=poll_timeout if poll_timeout is not None else settings.poll_timeout,
            page_size=settings.page_size,
        )

    # -- Pipeline ------------------------------------------------------------

    def run_query(self, query: str, timeout: float | None = None) -> QueryResult:
        """Submit *query*, block until it succeeds, and return all result pages."""
        execution_id = self.submit(query)
        self.wait_for_completion(execution_id, timeout=timeout)
        return self.fetch_results(execution_id)

    # -- Submitter -----------------------------------------------------------

    def submit(self, query: str) -> str:
        """Start a query execution and return its execution id."""
        if not query or not query.strip():
            raise ConfigurationError("A non-empty query string is required")

        params: dict[str, Any] = {"QueryString": query}
        if self._output_location:
            params["ResultConfiguration"] = {"OutputLocation": self._output_location}
        if self._workgroup:
            params["WorkGroup"] = self._workgroup
        if self._database:
            params["QueryExecutionContext"] = {"Database": self._database}

        try:
            response = self._client.start_query_execution(**params)
        except _SDK_ERRORS as exc:
            raise ServiceError("StartQueryExecution", exc) from exc

        execution_id: str = response["QueryExecutionId"]
        logger.info("Submitted query execution %s", execution_id)
        return execution_id

    # -- Poller --------------------------------------------------------------

    def poll_status(self, execution_id: str) -> ExecutionStatus:
        """Fetch the current status of *execution_id* with a single API call."""
        try:
            response = self._client.get_query_execution(QueryExecutionId=execution_id)
        except _SDK_ERRORS as exc:
            raise ServiceError("GetQueryExecution", exc) from exc

        execution = response.get("QueryExecution", {})
        status = execution.get("Status", {})
        return ExecutionStatus(
            execution_id=execution_id,
            state=ExecutionState.parse(status.get("State")),
            state_change_reason=status.get("StateChangeReason"),
            payload=execution,
        )

    def wait_for_completion(self, execution_id: str, timeout: float | None = None) -> str:
        """Block until *execution_id* reaches a terminal state.

        Sleeps ``poll_interval`` seconds between observations of QUEUED or
        RUNNING, with no backoff.  Returns the execution id once the query
        has SUCCEEDED; any other terminal state raises
        :class:`QueryExecutionError`.  When a timeout applies and expires,
        the execution is stopped and :class:`QueryTimeoutError` is raised.
        """
        limit = timeout if timeout is not None else self._poll_timeout
        deadline = time.monotonic() + limit if limit is not None else 0.0

        while True:
            status = self.poll_status(execution_id)
            logger.debug("Query execution %s is %s", execution_id, status.state.value)

            if status.state == ExecutionState.SUCCEEDED:
                self._log_statistics(status)
                return execution_id

            if status.state.is_terminal:
                logger.info("Query execution %s finished with state %s", execution_id, status.state.value)
                raise QueryExecutionError(
                    execution_id=execution_id,
                    state=status.state.value,
                    reason=status.state_change_reason,
                    payload=status.payload,
                )

            if limit is not None and time.monotonic() >= deadline:
                logger.error("Query execution %s exceeded timeout of %gs", execution_id, limit)
                self._stop_quietly(execution_id)
                raise QueryTimeoutError(execution_id, limit)

            time.sleep(self._poll_interval)

    def stop(self, execution_id: str) -> None:
        """Ask the service to stop a running query execution."""
        logger.info("Stopping query execution %s", execution_id)
        try:
            self._client.stop_query_execution(QueryExecutionId=execution_id)
        except _SDK_ERRORS as exc:
            raise ServiceError("StopQueryExecution", exc) from exc

    # -- Paginator -----------------------------------------------------------

    def iter_result_pages(self, execution_id: str) -> Iterator[ResultPage]:
        """Lazily yield result pages in fetch order.

        The underlying SDK paginator follows ``NextToken`` until the service
        reports the last page.  The iterator is finite and not restartable.
        """
        paginator = self._client.get_paginator("get_query_results")
        pages = paginator.paginate(
            QueryExecutionId=execution_id,
            PaginationConfig={"PageSize": self._page_size},
        )
        try:
            for page_number, page in enumerate(pages, start=1):
                parsed = _parse_page(page)
                logger.debug(
                    "Fetched page %d of %s (%d rows)",
                    page_number,
                    execution_id,
                    len(parsed.rows),
                )
                yield parsed
        except _SDK_ERRORS as exc:
            raise ServiceError("GetQueryResults", exc) from exc

    def fetch_results(self, execution_id: str) -> QueryResult:
        """Fetch every result page of a succeeded execution into memory.

        Column metadata is captured from the first page only.  On any fetch
        error nothing is returned; pages already read are discarded.
        """
        columns: list[ColumnInfo] | None = None
        pages: list[list[Row]] = []
        for page in self.iter_result_pages(execution_id):
            if columns is None:
                columns = page.columns
            pages.append(page.rows)

        result = QueryResult(execution_id=execution_id, columns=columns or [], pages=pages)
        logger.info(
            "Fetched %d rows in %d pages for query execution %s",
            result.row_count,
            len(pages),
            execution_id,
        )
        return result

    # -- Internal helpers ----------------------------------------------------

    def _stop_quietly(self, execution_id: str) -> None:
        try:
            self.stop(execution_id)
        except ServiceError:
            logger.warning("Failed to stop timed-out query execution %s", execution_id)

    @staticmethod
    def _log_statistics(status: ExecutionStatus) -> None:
        stats = status.payload.get("Statistics", {})
        logger.info(
            "Query execution %s succeeded (scanned %s bytes in %s ms)",
            status.execution_id,
            stats.get("DataScannedInBytes", "?"),
            stats.get("EngineExecutionTimeInMillis", "?"),
        )
