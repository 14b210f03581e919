"""Table transformation of a NormalizedResult."""

from __future__ import annotations

from typing import TYPE_CHECKING

from athena_tool.core.models import ColumnType, Table, TableColumn, TableRow, TableValue
from athena_tool.core.timestamps import parse_timestamp_ms

if TYPE_CHECKING:
    from athena_tool.core.models import NormalizedResult


def coerce_cell(kind: ColumnType, value: str) -> TableValue:
    """Type one cell; unparsable numbers become 0 and keep their text."""
    cell = TableValue(kind=kind, string_value=value)
    if kind == ColumnType.INT64:
        # timestamp columns are INT64 too, so try the timestamp layout first
        millis = parse_timestamp_ms(value)
        if millis is not None:
            cell.int64_value = millis
        else:
            try:
                cell.int64_value = int(value)
            except ValueError:
                pass
    elif kind == ColumnType.DOUBLE:
        try:
            cell.double_value = float(value)
        except ValueError:
            pass
    return cell


def to_table(result: NormalizedResult) -> Table:
    columns = [TableColumn(name=col.name) for col in result.columns]
    rows = [
        TableRow(
            values=[
                coerce_cell(col.type, cell)
                for col, cell in zip(result.columns, row, strict=False)
            ]
        )
        for row in result.rows
    ]
    return Table(columns=columns, rows=rows)
