"""Exception hierarchy for Athena Tool.

All exceptions carry an exit_code for CLI return value mapping.
Exit codes are defined in exit_codes.py.
"""

from __future__ import annotations

from athena_tool.core.exit_codes import ExitCode


class AthenaToolError(Exception):
    """Base exception for all Athena Tool errors."""

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidQueryError(AthenaToolError):
    """Query option lacks the identifying fields its mode requires."""

    exit_code: int = ExitCode.INPUT_ERROR


class UnsupportedFormatError(AthenaToolError):
    """Output format is neither timeseries nor table."""

    exit_code: int = ExitCode.INPUT_ERROR


class NotFoundError(AthenaToolError):
    """Named query absent from the work group directory."""

    exit_code: int = ExitCode.NOT_FOUND


class ConfigError(AthenaToolError):
    """Malformed config, missing profile."""

    exit_code: int = ExitCode.CONFIG_ERROR


class MissingOutputLocationError(ConfigError):
    """Work group has no result output location configured."""


class RemoteCallError(AthenaToolError):
    """Transport or service error from Athena/STS."""

    exit_code: int = ExitCode.NETWORK_ERROR


class ExecutionFailedError(AthenaToolError):
    """Query execution did not reach SUCCEEDED."""

    exit_code: int = ExitCode.EXECUTION_ERROR

    def __init__(self, message: str, state: str = "FAILED") -> None:
        self.state = state
        super().__init__(message)


class TimedOutError(ExecutionFailedError):
    """Polling budget exhausted before the execution succeeded."""

    exit_code: int = ExitCode.TIMEOUT

    def __init__(self, message: str, state: str = "TIMED_OUT") -> None:
        super().__init__(message, state=state)


class QueryCancelledError(ExecutionFailedError):
    """Caller cancelled the wait for an execution."""

    def __init__(self, message: str, state: str = "CANCELLED") -> None:
        super().__init__(message, state=state)
