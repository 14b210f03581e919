"""Query dispatch: pick the handling mode and run it to a NormalizedResult.

Named queries are resolved against the work group directory, served from the
execution cache when allowed, otherwise executed fresh. Expired cache entries
are swept after every request, whatever its outcome.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from athena_tool.core.cache import CacheStore
from athena_tool.core.engine import ExecutionEngine
from athena_tool.core.exceptions import InvalidQueryError, MissingOutputLocationError
from athena_tool.core.models import ColumnInfo, ColumnType, NormalizedResult, QueryMode
from athena_tool.core.resolver import NamedQueryResolver

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable

    from athena_tool.core.models import QueryOption
    from athena_tool.core.service import AsyncQueryService


class QueryDispatcher:
    def __init__(
        self,
        service_factory: Callable[[QueryOption], AsyncQueryService],
        cache: CacheStore | None = None,
        engine_factory: Callable[[AsyncQueryService, CacheStore], ExecutionEngine]
        | None = None,
    ) -> None:
        self.service_factory = service_factory
        self.cache = cache if cache is not None else CacheStore()
        self.engine_factory = engine_factory or ExecutionEngine

    def handle(
        self, option: QueryOption, cancel: threading.Event | None = None
    ) -> NormalizedResult:
        log = structlog.get_logger().bind(ref_id=option.ref_id, mode=option.mode.value)
        log.debug("handling query", work_group=option.work_group)
        try:
            service = self.service_factory(option)
            if option.mode == QueryMode.NAMED_QUERY:
                return self._handle_named_query(option, service, cancel)
            if option.mode == QueryMode.EXECUTION_QUERY:
                return self._handle_execution_query(option, service)
            if option.mode == QueryMode.NAMED_QUERY_METRICS:
                return self._handle_metrics_query(option, service)
            return self._handle_test_query(option, service)
        finally:
            self.cache.sweep()

    def _handle_named_query(
        self,
        option: QueryOption,
        service: AsyncQueryService,
        cancel: threading.Event | None,
    ) -> NormalizedResult:
        if not option.named_query or not option.work_group:
            msg = "Invalid named query: namedQuery and workGroup are required"
            raise InvalidQueryError(msg)
        log = structlog.get_logger().bind(
            ref_id=option.ref_id, named_query=option.named_query
        )

        resolver = NamedQueryResolver(service)
        query_ids, definitions = resolver.list_work_group(option.work_group)
        self.cache.reconcile(option.work_group, query_ids)
        target = resolver.find(definitions, option.named_query, option.work_group)

        engine = self.engine_factory(service, self.cache)
        with self.cache.hold(target.id):
            entry = self.cache.get_fresh(target.id) if option.use_cache else None
            if entry is not None:
                log.debug("cache hit", execution_id=entry.execution_id)
                execution_id = entry.execution_id
            else:
                log.debug("cache miss or bypassed, firing new request")
                output_location = service.get_output_location(target.work_group)
                if output_location is None:
                    msg = (
                        "Please configure output location for work group "
                        f"'{target.work_group}'"
                    )
                    raise MissingOutputLocationError(msg)
                execution_id = engine.execute(target, output_location, cancel)

        return engine.retrieve(execution_id, option)

    def _handle_execution_query(
        self, option: QueryOption, service: AsyncQueryService
    ) -> NormalizedResult:
        if not option.execution_id:
            raise InvalidQueryError("Invalid execution query: executionId is required")
        engine = self.engine_factory(service, self.cache)
        return engine.retrieve(option.execution_id, option)

    def _handle_metrics_query(
        self, option: QueryOption, service: AsyncQueryService
    ) -> NormalizedResult:
        definitions = NamedQueryResolver(service).list_definitions(option.work_group)
        return NormalizedResult(
            columns=[
                ColumnInfo(name="text", type=ColumnType.STRING),
                ColumnInfo(name="value", type=ColumnType.STRING),
            ],
            rows=[[d.name, d.name] for d in definitions],
            option=option,
        )

    def _handle_test_query(
        self, option: QueryOption, service: AsyncQueryService
    ) -> NormalizedResult:
        service.list_named_queries(option.work_group)
        return NormalizedResult(columns=[], rows=[], option=option)
