"""Shared test fixtures for Athena Tool."""

from datetime import UTC, datetime, timedelta
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from typer.testing import CliRunner

from athena_tool.cli.main import app
from athena_tool.core.cache import CacheStore
from athena_tool.core.dispatcher import QueryDispatcher
from athena_tool.core.engine import ExecutionEngine
from tests.fakes import FakeQueryService, named_query


class FrozenClock:
    """Settable clock for cache expiry tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


_AWS_ENV_VARS = (
    "AWS_DEFAULT_REGION",
    "AWS_REGION",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",  # pragma: allowlist secret
    "AWS_SESSION_TOKEN",
    "ATHENA_WORK_GROUP",
    "ATHENA_ROLE_ARN",
    "ATHENA_PROFILE",
    "ATHENA_TOOL_SENTRY_DSN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's AWS settings out of config resolution."""
    for name in _AWS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner):
    """Invoke the CLI app with the given arguments."""

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, list(args), **kwargs)

    return invoke


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def cache(clock):
    return CacheStore(clock=clock)


@pytest.fixture
def service():
    return FakeQueryService(definitions=[named_query("id-1", "Q1")])


@pytest.fixture
def fast_engine_factory():
    """Engine factory with a tiny poll interval so tests don't sleep."""

    def factory(service, cache):
        return ExecutionEngine(service, cache, poll_interval=0.001, poll_timeout=0.01)

    return factory


@pytest.fixture
def dispatcher(service, cache, fast_engine_factory):
    return QueryDispatcher(
        lambda option: service, cache=cache, engine_factory=fast_engine_factory
    )
