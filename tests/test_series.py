"""Tests for the time-series transformer."""

from datetime import UTC, datetime

import pytest

from athena_tool.core.models import ColumnInfo, ColumnType, NormalizedResult, QueryOption
from athena_tool.core.series import series_name, to_time_series

T0 = "2024-01-01 00:00:00"
T1 = "2024-01-01 00:01:00"
T2 = "2024-01-01 00:02:00"
T0_MS = 1704067200000
T1_MS = T0_MS + 60_000
T2_MS = T0_MS + 120_000

COLUMNS = [
    ColumnInfo(name="time", type=ColumnType.INT64),
    ColumnInfo(name="metric", type=ColumnType.STRING),
    ColumnInfo(name="host", type=ColumnType.STRING),
    ColumnInfo(name="cpu", type=ColumnType.DOUBLE),
    ColumnInfo(name="mem", type=ColumnType.INT64),
]


def _result(rows, columns=COLUMNS, **opt):
    return NormalizedResult(columns=columns, rows=rows, option=QueryOption(**opt))


def _by_name(series):
    return {s.name: s for s in series}


@pytest.mark.unit
class TestSeriesName:
    def test_with_metric(self):
        assert series_name("web", "cpu") == "web cpu"

    def test_without_metric(self):
        assert series_name("", "cpu") == "cpu"


@pytest.mark.unit
class TestToTimeSeries:
    def test_one_series_per_metric_and_value_column(self):
        series = _by_name(to_time_series(_result([[T0, "web", "a", "1.5", "10"]])))
        assert set(series) == {"web cpu", "web mem"}
        assert series["web cpu"].points[0].timestamp == T0_MS
        assert series["web cpu"].points[0].value == 1.5
        assert series["web mem"].points[0].value == 10.0

    def test_non_numeric_columns_become_tags(self):
        series = to_time_series(_result([[T0, "web", "a", "1", "2"]]))
        for serie in series:
            assert serie.tags == {"host": "a"}

    def test_same_series_points_sorted(self):
        rows = [
            [T2, "web", "a", "3", "0"],
            [T0, "web", "a", "1", "0"],
            [T1, "web", "a", "2", "0"],
        ]
        serie = _by_name(to_time_series(_result(rows, value_columns="cpu")))["web cpu"]
        assert [p.timestamp for p in serie.points] == [T0_MS, T1_MS, T2_MS]
        assert [p.value for p in serie.points] == [1.0, 2.0, 3.0]

    def test_two_rows_one_series_two_points(self):
        rows = [[T1, "web", "a", "2", "0"], [T0, "web", "a", "1", "0"]]
        series = to_time_series(_result(rows, value_columns="cpu"))
        assert len(series) == 1
        assert [p.timestamp for p in series[0].points] == [T0_MS, T1_MS]

    def test_allowlist_limits_value_columns(self):
        series = to_time_series(_result([[T0, "web", "a", "1", "2"]], value_columns=" mem "))
        assert [s.name for s in series] == ["web mem"]

    def test_empty_metric_uses_column_name(self):
        series = to_time_series(_result([[T0, "", "a", "1", "2"]], value_columns="cpu"))
        assert [s.name for s in series] == ["cpu"]

    def test_rows_outside_window_dropped(self):
        rows = [
            [T0, "web", "a", "1", "0"],
            [T1, "web", "a", "2", "0"],
            [T2, "web", "a", "3", "0"],
        ]
        series = to_time_series(
            _result(
                rows,
                value_columns="cpu",
                time_from=datetime(2024, 1, 1, 0, 0, 30, tzinfo=UTC),
                time_to=datetime(2024, 1, 1, 0, 1, 30, tzinfo=UTC),
            )
        )
        assert [p.timestamp for p in series[0].points] == [T1_MS]

    def test_window_bounds_inclusive(self):
        rows = [[T0, "web", "a", "1", "0"], [T1, "web", "a", "2", "0"]]
        series = to_time_series(
            _result(
                rows,
                value_columns="cpu",
                time_from=datetime(2024, 1, 1, 0, 0, 0, tzinfo=UTC),
                time_to=datetime(2024, 1, 1, 0, 1, 0, tzinfo=UTC),
            )
        )
        assert len(series[0].points) == 2

    def test_row_outside_window_produces_no_points(self):
        series = to_time_series(
            _result(
                [[T0, "web", "a", "1", "0"]],
                time_from=datetime(2025, 1, 1, tzinfo=UTC),
                time_to=datetime(2025, 1, 2, tzinfo=UTC),
            )
        )
        assert series == []

    def test_rows_without_time_column_kept(self):
        columns = [c for c in COLUMNS if c.name != "time"]
        series = to_time_series(
            _result(
                [["web", "a", "1", "2"]],
                columns=columns,
                value_columns="cpu",
                time_from=datetime(2025, 1, 1, tzinfo=UTC),
                time_to=datetime(2025, 1, 2, tzinfo=UTC),
            )
        )
        assert series[0].points[0].timestamp == 0

    def test_unparsable_timestamp_degrades_to_zero(self):
        series = to_time_series(
            _result(
                [["not a time", "web", "a", "1", "0"]],
                value_columns="cpu",
                time_from=datetime(2025, 1, 1, tzinfo=UTC),
                time_to=datetime(2025, 1, 2, tzinfo=UTC),
            )
        )
        assert series[0].points[0].timestamp == 0

    def test_unparsable_number_degrades_to_zero(self):
        series = to_time_series(_result([[T0, "web", "a", "n/a", "0"]], value_columns="cpu"))
        assert series[0].points[0].value == 0.0

    def test_tags_last_row_wins(self):
        rows = [[T0, "web", "a", "1", "0"], [T1, "web", "b", "2", "0"]]
        series = to_time_series(_result(rows, value_columns="cpu"))
        assert series[0].tags == {"host": "b"}

    def test_custom_time_and_metric_columns(self):
        columns = [
            ColumnInfo(name="ts", type=ColumnType.INT64),
            ColumnInfo(name="name", type=ColumnType.STRING),
            ColumnInfo(name="v", type=ColumnType.DOUBLE),
        ]
        series = to_time_series(
            _result([[T0, "api", "4"]], columns=columns, time_column="ts", metric_column="name")
        )
        assert series[0].name == "api v"
        assert series[0].points[0].timestamp == T0_MS
        assert series[0].tags == {}

    def test_empty_result(self):
        assert to_time_series(_result([])) == []
