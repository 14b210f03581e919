"""Tests for TableFormatter."""

import pytest

from athena_tool.core.models import (
    ColumnType,
    QueryResponse,
    Table,
    TableColumn,
    TableRow,
    TableValue,
    TimeSeries,
    TimeSeriesPoint,
)
from athena_tool.formatters.base import Formatter
from athena_tool.formatters.table import TableFormatter


def _make_response(rows=None):
    if rows is None:
        rows = [["alice"], ["bob"]]
    return QueryResponse(
        ref_id="users",
        meta_json="{}",
        tables=[
            Table(
                columns=[TableColumn(name="name")],
                rows=[
                    TableRow(
                        values=[TableValue(kind=ColumnType.STRING, string_value=v) for v in row]
                    )
                    for row in rows
                ],
            )
        ],
    )


@pytest.mark.unit
def test_table_formatter_implements_protocol():
    assert isinstance(TableFormatter(), Formatter)


@pytest.mark.unit
def test_table_formatter_outputs_headers_and_rows():
    output = "\n".join(TableFormatter().format(_make_response()))
    assert "name" in output
    assert "alice" in output
    assert "bob" in output


@pytest.mark.unit
def test_table_formatter_title_is_ref_id():
    output = "\n".join(TableFormatter().format(_make_response()))
    assert "users" in output


@pytest.mark.unit
def test_table_formatter_empty_result_shows_no_results():
    lines = list(TableFormatter().format(_make_response(rows=[])))
    assert lines == ["No results"]


@pytest.mark.unit
def test_table_formatter_truncates_wide_values():
    long_val = "x" * 60
    output = "\n".join(TableFormatter(width=10).format(_make_response([[long_val]])))
    assert long_val not in output
    assert "x" * 9 + "…" in output


@pytest.mark.unit
def test_table_formatter_series():
    response = QueryResponse(
        ref_id="A",
        meta_json="{}",
        series=[
            TimeSeries(
                name="requests",
                points=[TimeSeriesPoint(timestamp=1704067200000, value=42.0)],
            )
        ],
    )
    output = "\n".join(TableFormatter().format(response))
    assert "requests" in output
    assert "1704067200000" in output
    assert "42.0" in output
