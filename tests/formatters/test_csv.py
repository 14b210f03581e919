"""Tests for CSVFormatter."""

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
from athena_tool.formatters.csv import CSVFormatter


def _make_response(rows):
    return QueryResponse(
        ref_id="A",
        meta_json="{}",
        tables=[
            Table(
                columns=[TableColumn(name="id"), TableColumn(name="note")],
                rows=[
                    TableRow(
                        values=[
                            TableValue(kind=ColumnType.INT64, int64_value=int(i), string_value=i),
                            TableValue(kind=ColumnType.STRING, string_value=note),
                        ]
                    )
                    for i, note in rows
                ],
            )
        ],
    )


@pytest.mark.unit
def test_csv_formatter_implements_protocol():
    assert isinstance(CSVFormatter(), Formatter)


@pytest.mark.unit
def test_csv_header_and_rows():
    lines = list(CSVFormatter().format(_make_response([("1", "ok"), ("2", "fine")])))
    assert lines == ["id,note", "1,ok", "2,fine"]


@pytest.mark.unit
def test_csv_no_header():
    lines = list(CSVFormatter(no_header=True).format(_make_response([("1", "ok")])))
    assert lines == ["1,ok"]


@pytest.mark.unit
def test_csv_quotes_commas_and_quotes():
    lines = list(CSVFormatter().format(_make_response([("1", 'a,"b"')])))
    assert lines[1] == '1,"a,""b"""'


@pytest.mark.unit
def test_csv_empty_result_header_only():
    assert list(CSVFormatter().format(_make_response([]))) == ["id,note"]


@pytest.mark.unit
def test_csv_series():
    response = QueryResponse(
        ref_id="A",
        meta_json="{}",
        series=[
            TimeSeries(
                name="cpu v",
                tags={"host": "a", "az": "1"},
                points=[TimeSeriesPoint(timestamp=1000, value=0.5)],
            )
        ],
    )
    lines = list(CSVFormatter().format(response))
    assert lines == ["series,timestamp,value,tags", 'cpu v,1000,0.5,"az=1,host=a"']
