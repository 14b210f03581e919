"""CSV formatter for QueryResponse output (RFC 4180 compliant)."""

from __future__ import annotations

import csv
from io import StringIO
from typing import TYPE_CHECKING

from athena_tool.formatters.base import flatten, registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from athena_tool.core.models import QueryResponse


def _write_row(values: list[str]) -> str:
    buf = StringIO()
    writer = csv.writer(buf)
    writer.writerow(values)
    return buf.getvalue().rstrip("\r\n")


class CSVFormatter:
    def __init__(self, no_header: bool = False) -> None:
        self.no_header = no_header

    def format(self, response: QueryResponse) -> Iterator[str]:
        headers, rows = flatten(response)
        if not self.no_header:
            yield _write_row(headers)

        for row in rows:
            yield _write_row(row)


registry.register("csv", CSVFormatter)
