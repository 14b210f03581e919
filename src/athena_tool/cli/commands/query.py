"""Query commands, one per dispatch mode: run, fetch, list, ping."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Annotated, Any

import typer

from athena_tool.cli.commands._shared import (
    get_datasource,
    get_resolved_config,
    output_response,
)
from athena_tool.core.models import OutputFormat, QueryMode

_TIME_FORMATS = ["%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"]

ShapeOption = Annotated[
    OutputFormat,
    typer.Option("--as", help="Result shape: table|timeseries"),
]
TimeColumnOption = Annotated[
    str, typer.Option("--time-column", help="Column holding the row timestamp")
]
MetricColumnOption = Annotated[
    str, typer.Option("--metric-column", help="Column naming the metric")
]
ValueColumnsOption = Annotated[
    str,
    typer.Option(
        "--value-columns", help="Comma-separated value columns (default: all numeric)"
    ),
]
FromOption = Annotated[
    datetime | None,
    typer.Option("--from", formats=_TIME_FORMATS, help="Window start (UTC)"),
]
ToOption = Annotated[
    datetime | None,
    typer.Option("--to", formats=_TIME_FORMATS, help="Window end (UTC)"),
]


def _run(ctx: typer.Context, **fields: Any) -> None:
    resolved = get_resolved_config(ctx)
    option = resolved.to_query_option(**fields)
    response = get_datasource(ctx).query([option])[0]
    output_response(ctx, resolved, response)


def run_command(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Named query to execute")],
    no_cache: Annotated[
        bool,
        typer.Option("--no-cache", help="Always start a fresh execution"),
    ] = False,
    shape: ShapeOption = OutputFormat.TABLE,
    time_column: TimeColumnOption = "time",
    metric_column: MetricColumnOption = "metric",
    value_columns: ValueColumnsOption = "",
    time_from: FromOption = None,
    time_to: ToOption = None,
) -> None:
    """Execute a named query of the work group and print its results."""
    _run(
        ctx,
        ref_id=name,
        mode=QueryMode.NAMED_QUERY,
        named_query=name,
        use_cache=not no_cache,
        format=shape.value,
        time_column=time_column,
        metric_column=metric_column,
        value_columns=value_columns,
        time_from=time_from,
        time_to=time_to,
    )


def fetch_command(
    ctx: typer.Context,
    execution_id: Annotated[str, typer.Argument(help="Query execution id")],
    shape: ShapeOption = OutputFormat.TABLE,
    time_column: TimeColumnOption = "time",
    metric_column: MetricColumnOption = "metric",
    value_columns: ValueColumnsOption = "",
    time_from: FromOption = None,
    time_to: ToOption = None,
) -> None:
    """Fetch the results of an earlier query execution."""
    _run(
        ctx,
        ref_id=execution_id,
        mode=QueryMode.EXECUTION_QUERY,
        execution_id=execution_id,
        format=shape.value,
        time_column=time_column,
        metric_column=metric_column,
        value_columns=value_columns,
        time_from=time_from,
        time_to=time_to,
    )


def list_command(ctx: typer.Context) -> None:
    """List the named queries of the work group."""
    _run(
        ctx,
        ref_id="metricFindQuery",
        mode=QueryMode.NAMED_QUERY_METRICS,
        format=OutputFormat.TABLE.value,
    )


def ping_command(ctx: typer.Context) -> None:
    """Check that Athena is reachable with the resolved settings."""
    resolved = get_resolved_config(ctx)
    option = resolved.to_query_option(
        ref_id="test", mode=QueryMode.TEST, format=OutputFormat.TABLE.value
    )
    get_datasource(ctx).query([option])
    typer.echo(f"OK: work group '{resolved.work_group}' reachable")
