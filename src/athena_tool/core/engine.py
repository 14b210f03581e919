"""Query execution: submit, poll until terminal state, retrieve results.

Polling is a blocking loop on the caller's thread: one status check every
poll_interval seconds, at most ceil(poll_timeout / poll_interval) checks.
The wait between checks is a cancellable Event wait.
"""

from __future__ import annotations

import math
import threading
from enum import StrEnum
from typing import TYPE_CHECKING

import sentry_sdk
import structlog

from athena_tool.core.cache import CACHE_TTL
from athena_tool.core.exceptions import (
    ExecutionFailedError,
    QueryCancelledError,
    RemoteCallError,
    TimedOutError,
)
from athena_tool.core.parser import parse_result_set
from athena_tool.core.service import ExecutionStatus

if TYPE_CHECKING:
    from datetime import timedelta

    from athena_tool.core.cache import CacheStore
    from athena_tool.core.models import NormalizedResult, QueryOption
    from athena_tool.core.service import AsyncQueryService, NamedQueryDefinition

POLL_INTERVAL = 0.5
POLL_TIMEOUT = 60.0


class ExecutionState(StrEnum):
    SUBMITTED = "SUBMITTED"
    POLLING = "POLLING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"
    CANCELLED = "CANCELLED"


class ExecutionEngine:
    def __init__(
        self,
        service: AsyncQueryService,
        cache: CacheStore,
        poll_interval: float = POLL_INTERVAL,
        poll_timeout: float = POLL_TIMEOUT,
        cache_ttl: timedelta = CACHE_TTL,
    ) -> None:
        if poll_interval <= 0:
            msg = f"poll_interval must be > 0, got {poll_interval}"
            raise ValueError(msg)
        self.service = service
        self.cache = cache
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self.cache_ttl = cache_ttl

    @property
    def max_polls(self) -> int:
        return max(1, math.ceil(self.poll_timeout / self.poll_interval))

    def submit(self, definition: NamedQueryDefinition, output_location: str) -> str:
        execution_id = self.service.submit(
            definition.query_string,
            definition.work_group,
            output_location,
            database=definition.database,
        )
        structlog.get_logger().debug(
            "query submitted", name=definition.name, execution_id=execution_id
        )
        return execution_id

    def wait(
        self, execution_id: str, cancel: threading.Event | None = None
    ) -> ExecutionState:
        """Block until execution_id succeeds; raise on any other outcome."""
        log = structlog.get_logger()
        cancel = cancel or threading.Event()
        last_status = ExecutionStatus.RUNNING

        with sentry_sdk.start_span(
            op="athena.wait", description=f"Wait for {execution_id}"
        ) as span:
            for attempt in range(1, self.max_polls + 1):
                if cancel.wait(self.poll_interval):
                    span.set_status("cancelled")
                    log.info("execution wait cancelled", execution_id=execution_id)
                    msg = f"Cancelled while waiting for execution {execution_id}"
                    raise QueryCancelledError(msg)
                try:
                    last_status = self.service.poll(execution_id)
                except RemoteCallError as e:
                    span.set_status("unavailable")
                    msg = (
                        f"Error executing request.. ExecState is "
                        f"{ExecutionState.FAILED} ({e.message})"
                    )
                    raise ExecutionFailedError(msg, state=ExecutionState.FAILED) from e
                log.debug(
                    "execution polled",
                    execution_id=execution_id,
                    attempt=attempt,
                    status=last_status.value,
                )
                if last_status == ExecutionStatus.SUCCEEDED:
                    span.set_data("polls", attempt)
                    return ExecutionState.SUCCEEDED
                if last_status == ExecutionStatus.FAILED:
                    span.set_status("internal_error")
                    msg = (
                        f"Error executing request.. ExecState is "
                        f"{ExecutionState.FAILED}"
                    )
                    raise ExecutionFailedError(msg, state=ExecutionState.FAILED)

            span.set_status("deadline_exceeded")
        log.error(
            "execution timed out",
            execution_id=execution_id,
            timeout_seconds=self.poll_timeout,
        )
        msg = (
            f"Execution {execution_id} did not succeed within "
            f"{self.poll_timeout}s (last status: {last_status.value})"
        )
        raise TimedOutError(msg)

    def execute(
        self,
        definition: NamedQueryDefinition,
        output_location: str,
        cancel: threading.Event | None = None,
    ) -> str:
        """Run a named query to completion and cache its execution id."""
        cancel = cancel or threading.Event()
        if cancel.is_set():
            raise QueryCancelledError(f"Cancelled before submitting {definition.name}")
        execution_id = self.submit(definition, output_location)
        self.wait(execution_id, cancel)
        if cancel.is_set():
            raise QueryCancelledError(f"Cancelled after execution {execution_id}")
        self.cache.put(
            definition.id,
            self.cache.new_entry(
                definition.name,
                execution_id,
                work_group=definition.work_group,
                ttl=self.cache_ttl,
            ),
        )
        return execution_id

    def retrieve(self, execution_id: str, option: QueryOption) -> NormalizedResult:
        payload = self.service.fetch_result(execution_id)
        result = parse_result_set(payload, option)
        structlog.get_logger().debug(
            "results retrieved", execution_id=execution_id, row_count=result.row_count
        )
        return result
