"""Sentry integration for error tracking and performance monitoring.

Sentry is initialized early in main() after logging setup. Without a DSN
in the environment the SDK stays disabled and spans are no-ops.
"""

import os

import sentry_sdk

from athena_tool.__about__ import __version__

SENTRY_DSN_ENV = "ATHENA_TOOL_SENTRY_DSN"


def setup_sentry(environment: str = "local") -> None:
    """Initialize Sentry from ATHENA_TOOL_SENTRY_DSN when it is set."""
    sentry_sdk.init(
        dsn=os.environ.get(SENTRY_DSN_ENV) or None,
        traces_sample_rate=0.03,
        environment=environment,
        release=__version__,
        attach_stacktrace=True,
        send_default_pii=False,
    )
