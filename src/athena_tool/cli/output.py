"""Output format selection for query responses.

An explicit --format wins; otherwise a terminal gets a table and a pipe
gets CSV.
"""

from __future__ import annotations

import sys
from enum import StrEnum
from typing import TYPE_CHECKING

from athena_tool.formatters import registry

if TYPE_CHECKING:
    from athena_tool.core.models import QueryResponse
    from athena_tool.formatters.base import Formatter


class OutputFormat(StrEnum):
    TABLE = "table"
    JSON = "json"
    CSV = "csv"


# Formatter constructor keyword each format understands.
_FORMAT_OPTION: dict[str, str] = {
    OutputFormat.TABLE: "width",
    OutputFormat.JSON: "compact",
    OutputFormat.CSV: "no_header",
}


def detect_tty() -> bool:
    return sys.stdout.isatty()


def resolve_format(format_flag: str | None) -> str:
    if format_flag is not None:
        return format_flag
    return OutputFormat.TABLE.value if detect_tty() else OutputFormat.CSV.value


def get_formatter(
    format_flag: str | None = None,
    *,
    compact: bool = False,
    width: int = 40,
    no_header: bool = False,
) -> Formatter:
    """Formatter for the resolved format, given only the option it accepts."""
    fmt_name = resolve_format(format_flag)
    options = {"width": width, "compact": compact, "no_header": no_header}
    kwargs: dict[str, object] = {}
    option_name = _FORMAT_OPTION.get(fmt_name)
    if option_name is not None:
        kwargs[option_name] = options[option_name]
    return registry.get(fmt_name, **kwargs)


def write_output(formatter: Formatter, response: QueryResponse) -> None:
    for line in formatter.format(response):
        sys.stdout.write(line + "\n")
