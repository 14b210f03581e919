"""Shared CLI plumbing for command modules.

Config resolution, datasource creation, and output helpers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from athena_tool.cli.output import get_formatter, write_output
from athena_tool.core.config import load_config, resolve_config
from athena_tool.core.datasource import AthenaDatasource

if TYPE_CHECKING:
    import typer

    from athena_tool.core.config import ResolvedConfig
    from athena_tool.core.models import QueryResponse


def get_resolved_config(ctx: typer.Context) -> ResolvedConfig:
    obj = ctx.ensure_object(dict)
    config = load_config(obj.get("config_file"))

    cli_overrides: dict[str, Any] = {}
    for key in ("region", "work_group", "format"):
        val = obj.get(key)
        if val is not None:
            cli_overrides[key] = val

    return resolve_config(config, profile_name=obj.get("profile"), **cli_overrides)


def get_datasource(ctx: typer.Context) -> AthenaDatasource:
    """Datasource shared by every command of one CLI invocation."""
    obj = ctx.ensure_object(dict)
    datasource = obj.get("datasource")
    if datasource is None:
        datasource = obj["datasource"] = AthenaDatasource()
    return datasource


def format_options(ctx: typer.Context, resolved: ResolvedConfig) -> dict[str, Any]:
    obj = ctx.ensure_object(dict)
    return {
        "format_flag": resolved.default_format,
        "compact": obj.get("compact", False),
        "width": obj.get("width", 40),
        "no_header": obj.get("no_header", False),
    }


def output_response(
    ctx: typer.Context, resolved: ResolvedConfig, response: QueryResponse
) -> None:
    formatter = get_formatter(**format_options(ctx, resolved))
    write_output(formatter, response)
