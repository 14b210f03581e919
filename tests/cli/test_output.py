"""Tests for output format selection and TTY detection."""

import pytest

from athena_tool.cli.output import OutputFormat, get_formatter, resolve_format, write_output
from athena_tool.core.models import QueryResponse
from athena_tool.formatters.csv import CSVFormatter
from athena_tool.formatters.json import JSONFormatter
from athena_tool.formatters.table import TableFormatter


@pytest.mark.unit
def test_output_format_enum_values():
    assert OutputFormat.TABLE.value == "table"
    assert OutputFormat.JSON.value == "json"
    assert OutputFormat.CSV.value == "csv"


@pytest.mark.unit
@pytest.mark.parametrize("fmt", ["table", "json", "csv"])
def test_resolve_format_explicit(fmt):
    assert resolve_format(fmt) == fmt


@pytest.mark.unit
def test_resolve_format_tty_defaults_to_table(monkeypatch):
    monkeypatch.setattr("athena_tool.cli.output.detect_tty", lambda: True)
    assert resolve_format(None) == "table"


@pytest.mark.unit
def test_resolve_format_non_tty_defaults_to_csv(monkeypatch):
    monkeypatch.setattr("athena_tool.cli.output.detect_tty", lambda: False)
    assert resolve_format(None) == "csv"


@pytest.mark.unit
def test_resolve_format_explicit_overrides_tty(monkeypatch):
    monkeypatch.setattr("athena_tool.cli.output.detect_tty", lambda: True)
    assert resolve_format("json") == "json"


@pytest.mark.unit
def test_get_formatter_passes_width_to_table():
    fmt = get_formatter("table", width=80)
    assert isinstance(fmt, TableFormatter)
    assert fmt.width == 80


@pytest.mark.unit
def test_get_formatter_passes_compact_to_json():
    fmt = get_formatter("json", compact=True)
    assert isinstance(fmt, JSONFormatter)
    assert fmt.compact is True


@pytest.mark.unit
def test_get_formatter_passes_no_header_to_csv():
    fmt = get_formatter("csv", no_header=True)
    assert isinstance(fmt, CSVFormatter)
    assert fmt.no_header is True


@pytest.mark.unit
def test_get_formatter_unknown_format_raises():
    with pytest.raises(KeyError, match="Unknown format 'nope'"):
        get_formatter("nope")


@pytest.mark.unit
def test_write_output_one_line_per_item(capsys):
    write_output(get_formatter("json", compact=True), QueryResponse(ref_id="A", meta_json="{}"))
    assert capsys.readouterr().out == "[]\n"
