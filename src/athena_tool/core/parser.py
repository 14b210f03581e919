"""Athena ResultSet parsing into a NormalizedResult."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from athena_tool.core.models import ColumnInfo, ColumnType, NormalizedResult

if TYPE_CHECKING:
    from athena_tool.core.models import QueryOption

# Athena type name -> host row value kind. Unknown names are strings.
_ATHENA_TYPES: dict[str, ColumnType] = {
    "varchar": ColumnType.STRING,
    "char": ColumnType.STRING,
    "string": ColumnType.STRING,
    "json": ColumnType.STRING,
    "date": ColumnType.STRING,
    "boolean": ColumnType.STRING,
    "tinyint": ColumnType.INT64,
    "smallint": ColumnType.INT64,
    "integer": ColumnType.INT64,
    "int": ColumnType.INT64,
    "bigint": ColumnType.INT64,
    "timestamp": ColumnType.INT64,
    "real": ColumnType.DOUBLE,
    "float": ColumnType.DOUBLE,
    "double": ColumnType.DOUBLE,
    "decimal": ColumnType.DOUBLE,
}


def athena_column_type(type_name: str) -> ColumnType:
    """Map an Athena column type, e.g. ``decimal(10,2)``, to a ColumnType."""
    base = type_name.split("(", 1)[0].strip().lower()
    return _ATHENA_TYPES.get(base, ColumnType.STRING)


def parse_result_set(result_set: dict[str, Any], option: QueryOption) -> NormalizedResult:
    """Build column metadata and string rows; row 0 is the header and is dropped."""
    metadata = result_set.get("ResultSetMetadata", {}).get("ColumnInfo", [])
    columns = [
        ColumnInfo(name=info["Name"], type=athena_column_type(info.get("Type", "")))
        for info in metadata
    ]

    raw_rows = result_set.get("Rows", [])
    rows: list[list[str]] = []
    if len(raw_rows) > 1:
        for raw in raw_rows[1:]:
            rows.append([cell.get("VarCharValue", "") for cell in raw.get("Data", [])])

    return NormalizedResult(columns=columns, rows=rows, option=option)
