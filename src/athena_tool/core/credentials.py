"""AWS credential resolution and Athena client construction.

A query either carries a static key pair, names a role to assume, or carries
nothing, in which case boto3's default credential chain applies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from athena_tool.core.exceptions import RemoteCallError
from athena_tool.core.models import AuthType
from athena_tool.core.service import AthenaService

if TYPE_CHECKING:
    from collections.abc import Callable

    from athena_tool.core.models import QueryOption

ROLE_SESSION_NAME = "athena-tool"


@dataclass(frozen=True)
class SessionCredentials:
    access_key: str
    secret_key: str = field(repr=False)
    session_token: str | None = field(default=None, repr=False)


def _static_credentials(option: QueryOption) -> SessionCredentials | None:
    if option.access_key and option.secret_key:
        return SessionCredentials(
            option.access_key, option.secret_key, option.session_token or None
        )
    return None


def _role_credentials(
    option: QueryOption, sts_factory: Callable[..., Any]
) -> SessionCredentials | None:
    if not option.role_arn:
        return None
    log = structlog.get_logger()
    sts = sts_factory("sts", region_name=option.region or None)
    try:
        response = sts.assume_role(
            RoleArn=option.role_arn, RoleSessionName=ROLE_SESSION_NAME
        )
    except (ClientError, BotoCoreError) as e:
        log.error("assume role failed", role_arn=option.role_arn, error=str(e))
        raise RemoteCallError(f"Cannot assume role {option.role_arn}: {e}") from e
    creds = response["Credentials"]
    log.debug("assumed role", role_arn=option.role_arn)
    return SessionCredentials(
        access_key=creds["AccessKeyId"],
        secret_key=creds["SecretAccessKey"],
        session_token=creds["SessionToken"],
    )


def resolve_credentials(
    option: QueryOption, sts_factory: Callable[..., Any] | None = None
) -> SessionCredentials | None:
    """Credentials for option's auth type, or None for the default chain."""
    if option.auth_type == AuthType.STATIC:
        return _static_credentials(option)
    if option.auth_type == AuthType.ROLE_ARN:
        return _role_credentials(option, sts_factory or boto3.client)
    return None


def create_session(
    option: QueryOption, sts_factory: Callable[..., Any] | None = None
) -> boto3.Session:
    creds = resolve_credentials(option, sts_factory)
    kwargs: dict[str, Any] = {}
    if option.region:
        kwargs["region_name"] = option.region
    if creds is not None:
        kwargs["aws_access_key_id"] = creds.access_key
        kwargs["aws_secret_access_key"] = creds.secret_key
        if creds.session_token:
            kwargs["aws_session_token"] = creds.session_token
    return boto3.Session(**kwargs)


def create_service(option: QueryOption) -> AthenaService:
    """Build an AthenaService with the option's region and credentials."""
    session = create_session(option)
    return AthenaService(session.client("athena"))
