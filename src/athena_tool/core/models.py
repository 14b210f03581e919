"""Query option, normalized result and output models for Athena Tool.

QueryOption mirrors the query model sent by the dashboard host, so every field
also accepts the host's camelCase key. NormalizedResult is the common input of
both output transformers.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import IntEnum, StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class QueryMode(StrEnum):
    NAMED_QUERY = "NamedQuery"
    EXECUTION_QUERY = "ExecutionQuery"
    NAMED_QUERY_METRICS = "GetNamedQueryMetrics"
    TEST = ""


class OutputFormat(StrEnum):
    TIMESERIES = "timeseries"
    TABLE = "table"


class AuthType(StrEnum):
    DEFAULT = ""
    STATIC = "Static"
    ROLE_ARN = "RoleArn"


class ColumnType(IntEnum):
    """Row value kinds understood by the dashboard host."""

    DOUBLE = 1
    INT64 = 2
    STRING = 4

    @property
    def is_numeric(self) -> bool:
        return self in (ColumnType.DOUBLE, ColumnType.INT64)


class QueryOption(BaseModel):
    """Per-query configuration, immutable for the duration of one invocation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    ref_id: str = Field("A", alias="refId")
    mode: QueryMode = Field(QueryMode.TEST, alias="queryType")
    work_group: str = Field("", alias="workGroup")
    named_query: str = Field("", alias="namedQuery")
    execution_id: str = Field("", alias="executionId")
    time_column: str = Field("time", alias="timeColumn")
    metric_column: str = Field("metric", alias="metricColumn")
    value_columns: str = Field("", alias="valueColumns")
    use_cache: bool = Field(True, alias="useCache")
    format: str = Field(OutputFormat.TIMESERIES.value)
    time_from: datetime | None = Field(None, alias="from")
    time_to: datetime | None = Field(None, alias="to")
    region: str = ""
    auth_type: AuthType = Field(AuthType.DEFAULT, alias="authType")
    access_key: str = Field("", alias="accessKey")
    secret_key: str = Field("", alias="secretAccessKey", repr=False)
    session_token: str = Field("", alias="sessionToken", repr=False)
    role_arn: str = Field("", alias="roleArn")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("mode", mode="before")
    @classmethod
    def unknown_mode_is_test(cls, v: Any) -> Any:
        if isinstance(v, QueryMode):
            return v
        try:
            return QueryMode(v)
        except ValueError:
            return QueryMode.TEST

    @field_validator("auth_type", mode="before")
    @classmethod
    def unknown_auth_is_default(cls, v: Any) -> Any:
        if isinstance(v, AuthType):
            return v
        try:
            return AuthType(v)
        except ValueError:
            return AuthType.DEFAULT

    @field_validator("time_from", "time_to")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @property
    def value_column_set(self) -> set[str]:
        """Allowlisted value columns; empty means every numeric column."""
        return {c.strip() for c in self.value_columns.split(",") if c.strip()}


class ColumnInfo(BaseModel):
    name: str
    type: ColumnType


class NormalizedResult(BaseModel):
    """Header-stripped result; columns[i] describes cell i of every row."""

    columns: list[ColumnInfo]
    rows: list[list[str]]
    option: QueryOption

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def metadata(self) -> dict[str, Any]:
        """Column metadata in the shape the dashboard host introspects."""
        return {
            "colInfos": [
                {"colName": col.name, "colType": int(col.type)} for col in self.columns
            ]
        }


class TimeSeriesPoint(BaseModel):
    timestamp: int
    value: float


class TimeSeries(BaseModel):
    name: str
    tags: dict[str, str] = {}
    points: list[TimeSeriesPoint] = []


class TableValue(BaseModel):
    """One typed cell; string_value always keeps the original text."""

    kind: ColumnType
    int64_value: int = 0
    double_value: float = 0.0
    string_value: str = ""


class TableColumn(BaseModel):
    name: str


class TableRow(BaseModel):
    values: list[TableValue]


class Table(BaseModel):
    columns: list[TableColumn]
    rows: list[TableRow]


class QueryResponse(BaseModel):
    """Rendered result for one query, keyed by the host's refId."""

    ref_id: str
    meta_json: str
    series: list[TimeSeries] = []
    tables: list[Table] = []
