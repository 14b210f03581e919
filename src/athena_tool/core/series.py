"""Time-series transformation of a NormalizedResult.

Each row contributes one point per value column. Series are named
``"<metric> <value column>"`` (or just the value column when the metric cell
is empty); non-numeric columns other than time and metric become tags.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from athena_tool.core.models import TimeSeries, TimeSeriesPoint
from athena_tool.core.timestamps import parse_timestamp_ms, to_epoch_ms

if TYPE_CHECKING:
    from athena_tool.core.models import NormalizedResult


def _to_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def series_name(metric: str, value_column: str) -> str:
    if not metric:
        return value_column
    return f"{metric} {value_column}"


def to_time_series(result: NormalizedResult) -> list[TimeSeries]:
    opt = result.option
    allowlist = opt.value_column_set
    from_ms = to_epoch_ms(opt.time_from) if opt.time_from is not None else None
    to_ms = to_epoch_ms(opt.time_to) if opt.time_to is not None else None

    series_map: dict[str, TimeSeries] = {}
    for row in result.rows:
        timestamp: int | None = None
        metric = ""
        tags: dict[str, str] = {}
        values: dict[str, float] = {}

        for col, cell in zip(result.columns, row, strict=False):
            if col.name == opt.time_column:
                timestamp = parse_timestamp_ms(cell) or 0
            elif col.name == opt.metric_column:
                metric = cell
            elif not col.type.is_numeric:
                tags[col.name] = cell
            elif not allowlist or col.name in allowlist:
                values[col.name] = _to_float(cell)

        # A zero timestamp means the row has no usable time; keep it.
        if timestamp:
            if from_ms is not None and timestamp < from_ms:
                continue
            if to_ms is not None and timestamp > to_ms:
                continue

        for col_name, value in values.items():
            name = series_name(metric, col_name)
            serie = series_map.get(name)
            if serie is None:
                serie = series_map[name] = TimeSeries(name=name)
            serie.tags = dict(tags)
            serie.points.append(TimeSeriesPoint(timestamp=timestamp or 0, value=value))

    for serie in series_map.values():
        serie.points.sort(key=lambda p: p.timestamp)
    return list(series_map.values())
