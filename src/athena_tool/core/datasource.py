"""Dashboard host boundary: build query options, dispatch, render responses.

Inbound settings and query models arrive already decoded (dicts); this module
merges them into QueryOptions and turns each NormalizedResult into the
series or table shape requested by the query's format.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import sentry_sdk
import structlog

from athena_tool.core.credentials import create_service
from athena_tool.core.dispatcher import QueryDispatcher
from athena_tool.core.exceptions import UnsupportedFormatError
from athena_tool.core.models import (
    OutputFormat,
    QueryMode,
    QueryOption,
    QueryResponse,
)
from athena_tool.core.series import to_time_series
from athena_tool.core.table import to_table

if TYPE_CHECKING:
    import threading
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from athena_tool.core.models import NormalizedResult

SECRET_KEY_FIELD = "secretAccessKey"  # pragma: allowlist secret


def build_query_options(
    settings: Mapping[str, Any],
    secure_settings: Mapping[str, str],
    queries: Iterable[Mapping[str, Any]],
    time_from: datetime | None = None,
    time_to: datetime | None = None,
) -> list[QueryOption]:
    """Merge datasource settings with each query model; query keys win."""
    options: list[QueryOption] = []
    for query in queries:
        data: dict[str, Any] = {SECRET_KEY_FIELD: secure_settings.get(SECRET_KEY_FIELD)}
        data.update(settings)
        data.update(query)
        data["from"] = time_from
        data["to"] = time_to
        options.append(QueryOption.model_validate(data))
    return options


def render_result(result: NormalizedResult) -> QueryResponse:
    """Shape a NormalizedResult per its option's format."""
    option = result.option
    response = QueryResponse(
        ref_id=option.ref_id, meta_json=json.dumps(result.metadata())
    )
    if option.format == OutputFormat.TIMESERIES:
        response.series = to_time_series(result)
    elif option.format == OutputFormat.TABLE:
        response.tables = [to_table(result)]
    else:
        raise UnsupportedFormatError(f"Unexpected format type: '{option.format}'")
    return response


class AthenaDatasource:
    def __init__(self, dispatcher: QueryDispatcher | None = None) -> None:
        self.dispatcher = dispatcher or QueryDispatcher(create_service)

    def query(
        self, options: Iterable[QueryOption], cancel: threading.Event | None = None
    ) -> list[QueryResponse]:
        """Run each query in order; the first failure aborts the batch."""
        log = structlog.get_logger()
        responses: list[QueryResponse] = []
        with sentry_sdk.start_span(op="athena.batch", description="Datasource query"):
            for option in options:
                with sentry_sdk.start_span(op="athena.query", description=option.ref_id):
                    result = self.dispatcher.handle(option, cancel)
                    responses.append(render_result(result))
                log.debug(
                    "query rendered",
                    ref_id=option.ref_id,
                    row_count=result.row_count,
                )
        return responses

    def metric_find_query(
        self, base: QueryOption | None = None, work_group: str | None = None
    ) -> list[dict[str, str]]:
        """Named queries of a work group as text/value pairs for selection widgets."""
        base = base or QueryOption()
        update: dict[str, Any] = {
            "ref_id": "metricFindQuery",
            "mode": QueryMode.NAMED_QUERY_METRICS,
            "format": OutputFormat.TABLE.value,
        }
        if work_group is not None:
            update["work_group"] = work_group
        option = base.model_copy(update=update)
        response = self.query([option])[0]
        return [
            {"text": row.values[0].string_value, "value": row.values[1].string_value}
            for row in response.tables[0].rows
        ]
