"""Tests for exit code mapping through run()."""

from unittest.mock import patch

import pytest

from athena_tool.cli.main import run
from athena_tool.core.exceptions import (
    ConfigError,
    ExecutionFailedError,
    InvalidQueryError,
    NotFoundError,
    RemoteCallError,
    TimedOutError,
)
from athena_tool.core.exit_codes import ExitCode


@pytest.mark.unit
@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (RemoteCallError("unreachable"), ExitCode.NETWORK_ERROR),
        (InvalidQueryError("bad query"), ExitCode.INPUT_ERROR),
        (ConfigError("bad config"), ExitCode.CONFIG_ERROR),
        (NotFoundError("missing"), ExitCode.NOT_FOUND),
        (ExecutionFailedError("failed"), ExitCode.EXECUTION_ERROR),
        (TimedOutError("timed out"), ExitCode.TIMEOUT),
    ],
)
def test_run_maps_tool_errors(error, expected, capsys):
    with patch("athena_tool.cli.main.app", side_effect=error):
        with pytest.raises(SystemExit) as exc_info:
            run()
    assert exc_info.value.code == expected
    assert f"Error: {error.message}" in capsys.readouterr().err


@pytest.mark.unit
def test_run_keyboard_interrupt_maps_to_130():
    with patch("athena_tool.cli.main.app", side_effect=KeyboardInterrupt):
        with pytest.raises(SystemExit) as exc_info:
            run()
    assert exc_info.value.code == 130


@pytest.mark.unit
def test_run_unexpected_exception_maps_to_1():
    with patch("athena_tool.cli.main.app", side_effect=RuntimeError("boom")):
        with pytest.raises(SystemExit) as exc_info:
            run()
    assert exc_info.value.code == 1


@pytest.mark.unit
def test_run_system_exit_passes_through():
    with patch("athena_tool.cli.main.app", side_effect=SystemExit(42)):
        with pytest.raises(SystemExit) as exc_info:
            run()
    assert exc_info.value.code == 42
