"""Rich table formatter for QueryResponse output."""

from __future__ import annotations

import shutil
from io import StringIO
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from athena_tool.formatters.base import flatten, registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from athena_tool.core.models import QueryResponse

_NO_RESULTS = "No results"


def _truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    return value[: width - 1] + "…"


class TableFormatter:
    def __init__(self, width: int = 40) -> None:
        self.width = width

    def format(self, response: QueryResponse) -> Iterator[str]:
        headers, rows = flatten(response)
        if not rows:
            yield _NO_RESULTS
            return

        table = Table(show_edge=True, pad_edge=True, title=response.ref_id)
        for name in headers:
            table.add_column(name, no_wrap=True)

        for row in rows:
            table.add_row(*(_truncate(v, self.width) for v in row))

        buf = StringIO()
        term_width = shutil.get_terminal_size((120, 24)).columns
        console = Console(file=buf, force_terminal=True, width=term_width)
        console.print(table)
        yield buf.getvalue().rstrip("\n")


registry.register("table", TableFormatter)
