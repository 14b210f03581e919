"""Athena query service contract and its boto3 implementation.

The dispatcher only talks to an AsyncQueryService; AthenaService wraps a
boto3 Athena client with pagination, status mapping, and exception mapping
to the AthenaToolError hierarchy.
"""

from __future__ import annotations

import time
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import sentry_sdk
import structlog
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel

from athena_tool.core.exceptions import RemoteCallError

if TYPE_CHECKING:
    from collections.abc import Callable

# BatchGetNamedQuery accepts at most 50 ids per call.
_BATCH_GET_LIMIT = 50
_RESULT_PAGE_SIZE = 1000


class ExecutionStatus(StrEnum):
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_ATHENA_STATES: dict[str, ExecutionStatus] = {
    "QUEUED": ExecutionStatus.RUNNING,
    "RUNNING": ExecutionStatus.RUNNING,
    "SUCCEEDED": ExecutionStatus.SUCCEEDED,
    "FAILED": ExecutionStatus.FAILED,
    "CANCELLED": ExecutionStatus.FAILED,
}


class NamedQueryDefinition(BaseModel):
    """A stored query as returned by BatchGetNamedQuery."""

    id: str
    name: str
    query_string: str
    work_group: str
    database: str | None = None


@runtime_checkable
class AsyncQueryService(Protocol):
    """Remote asynchronous SQL service used by the dispatcher."""

    def submit(
        self,
        query_string: str,
        work_group: str,
        output_location: str,
        database: str | None = None,
    ) -> str: ...

    def poll(self, execution_id: str) -> ExecutionStatus: ...

    def fetch_result(self, execution_id: str) -> dict[str, Any]: ...

    def list_named_queries(self, work_group: str) -> list[str]: ...

    def batch_get_named_queries(
        self, query_ids: list[str]
    ) -> list[NamedQueryDefinition]: ...

    def get_output_location(self, work_group: str) -> str | None: ...


class AthenaService:
    """AsyncQueryService backed by a boto3 ``athena`` client."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def _call(self, operation: str, **kwargs: Any) -> dict[str, Any]:
        log = structlog.get_logger()
        method: Callable[..., dict[str, Any]] = getattr(self.client, operation)
        with sentry_sdk.start_span(op="athena.api", description=operation) as span:
            start_time = time.monotonic()
            try:
                response = method(**kwargs)
            except ClientError as e:
                code = e.response.get("Error", {}).get("Code", "Unknown")
                span.set_status("internal_error")
                log.error("athena call failed", operation=operation, code=code)
                raise RemoteCallError(f"Athena {operation} failed ({code}): {e}") from e
            except BotoCoreError as e:
                span.set_status("unavailable")
                log.error("athena unreachable", operation=operation, error=str(e))
                raise RemoteCallError(f"Athena {operation} failed: {e}") from e
            duration_ms = (time.monotonic() - start_time) * 1000
            span.set_data("duration_ms", duration_ms)
            log.debug(
                "athena call complete",
                operation=operation,
                duration_ms=f"{duration_ms:.1f}",
            )
            return response

    def submit(
        self,
        query_string: str,
        work_group: str,
        output_location: str,
        database: str | None = None,
    ) -> str:
        kwargs: dict[str, Any] = {
            "QueryString": query_string,
            "WorkGroup": work_group,
            "ResultConfiguration": {"OutputLocation": output_location},
        }
        if database:
            kwargs["QueryExecutionContext"] = {"Database": database}
        response = self._call("start_query_execution", **kwargs)
        return str(response["QueryExecutionId"])

    def poll(self, execution_id: str) -> ExecutionStatus:
        response = self._call("get_query_execution", QueryExecutionId=execution_id)
        state = response["QueryExecution"]["Status"]["State"]
        return _ATHENA_STATES.get(state, ExecutionStatus.RUNNING)

    def fetch_result(self, execution_id: str) -> dict[str, Any]:
        """Return the full ResultSet, concatenating rows across pages."""
        kwargs: dict[str, Any] = {
            "QueryExecutionId": execution_id,
            "MaxResults": _RESULT_PAGE_SIZE,
        }
        response = self._call("get_query_results", **kwargs)
        result_set = response["ResultSet"]
        rows = list(result_set.get("Rows", []))
        while response.get("NextToken"):
            kwargs["NextToken"] = response["NextToken"]
            response = self._call("get_query_results", **kwargs)
            rows.extend(response["ResultSet"].get("Rows", []))
        return {
            "ResultSetMetadata": result_set.get("ResultSetMetadata", {}),
            "Rows": rows,
        }

    def list_named_queries(self, work_group: str) -> list[str]:
        kwargs: dict[str, Any] = {"WorkGroup": work_group}
        ids: list[str] = []
        while True:
            response = self._call("list_named_queries", **kwargs)
            ids.extend(response.get("NamedQueryIds", []))
            token = response.get("NextToken")
            if not token:
                return ids
            kwargs["NextToken"] = token

    def batch_get_named_queries(
        self, query_ids: list[str]
    ) -> list[NamedQueryDefinition]:
        definitions: list[NamedQueryDefinition] = []
        for start in range(0, len(query_ids), _BATCH_GET_LIMIT):
            chunk = query_ids[start : start + _BATCH_GET_LIMIT]
            response = self._call("batch_get_named_query", NamedQueryIds=chunk)
            for q in response.get("NamedQueries", []):
                definitions.append(
                    NamedQueryDefinition(
                        id=q["NamedQueryId"],
                        name=q["Name"],
                        query_string=q["QueryString"],
                        work_group=q.get("WorkGroup", ""),
                        database=q.get("Database"),
                    )
                )
            unprocessed = response.get("UnprocessedNamedQueryIds", [])
            if unprocessed:
                structlog.get_logger().warning(
                    "named queries not returned", count=len(unprocessed)
                )
        # responses are unordered; keep the listing order
        position = {qid: i for i, qid in enumerate(query_ids)}
        definitions.sort(key=lambda d: position.get(d.id, len(position)))
        return definitions

    def get_output_location(self, work_group: str) -> str | None:
        response = self._call("get_work_group", WorkGroup=work_group)
        configuration = response.get("WorkGroup", {}).get("Configuration", {})
        location = configuration.get("ResultConfiguration", {}).get("OutputLocation")
        return location or None
