"""JSON formatter for QueryResponse output.

Tables become a list of row objects with typed values; series use the
``{"target", "tags", "datapoints": [[value, timestamp], ...]}`` shape that
dashboard panels consume.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from athena_tool.core.models import ColumnType
from athena_tool.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from athena_tool.core.models import QueryResponse, TableValue


def _typed_value(cell: TableValue) -> Any:
    if cell.kind == ColumnType.INT64:
        return cell.int64_value
    if cell.kind == ColumnType.DOUBLE:
        return cell.double_value
    return cell.string_value


def _payload(response: QueryResponse) -> list[dict[str, Any]]:
    if response.tables:
        table = response.tables[0]
        return [
            {
                col.name: _typed_value(cell)
                for col, cell in zip(table.columns, row.values, strict=True)
            }
            for row in table.rows
        ]
    return [
        {
            "target": serie.name,
            "tags": serie.tags,
            "datapoints": [[p.value, p.timestamp] for p in serie.points],
        }
        for serie in response.series
    ]


class JSONFormatter:
    def __init__(self, compact: bool = False) -> None:
        self.compact = compact

    def format(self, response: QueryResponse) -> Iterator[str]:
        payload = _payload(response)
        if self.compact:
            yield json.dumps(payload, default=str)
        else:
            yield json.dumps(payload, indent=2, default=str)


registry.register("json", JSONFormatter)
