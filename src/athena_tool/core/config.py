"""Configuration management for Athena Tool.

Handles TOML config files, environment variables, named profiles,
and configuration precedence resolution.

Precedence order (highest to lowest):
1. CLI flags (--region, --work-group)
2. Environment variables (AWS_REGION, AWS_ACCESS_KEY_ID, ATHENA_WORK_GROUP, ...)
3. Named profile (--profile or ATHENA_PROFILE env var)
4. Config file defaults
5. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, field_validator, model_validator

from athena_tool.core.exceptions import ConfigError
from athena_tool.core.models import AuthType, QueryOption

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "athena-tool" / "config.toml"

# Later entries win when several are set (AWS_REGION over AWS_DEFAULT_REGION).
_ENV_VARS: list[tuple[str, str]] = [
    ("AWS_DEFAULT_REGION", "region"),
    ("AWS_REGION", "region"),
    ("AWS_ACCESS_KEY_ID", "access_key"),
    ("AWS_SECRET_ACCESS_KEY", "secret_key"),  # pragma: allowlist secret
    ("AWS_SESSION_TOKEN", "session_token"),
    ("ATHENA_WORK_GROUP", "work_group"),
    ("ATHENA_ROLE_ARN", "role_arn"),
]

_PROFILE_DEFAULTS: dict[str, Any] = {
    "region": "",
    "work_group": "primary",
    "auth_type": AuthType.DEFAULT,
    "access_key": None,
    "secret_key": None,
    "session_token": None,
    "role_arn": None,
}

_VALID_FORMATS = {"table", "json", "csv"}


class AthenaProfile(BaseModel):
    region: str = ""
    work_group: str = "primary"
    auth_type: AuthType = AuthType.DEFAULT
    access_key: str | None = None
    secret_key: str | None = None
    session_token: str | None = None
    role_arn: str | None = None

    @model_validator(mode="after")
    def check_auth_fields(self) -> AthenaProfile:
        if self.auth_type == AuthType.ROLE_ARN and not self.role_arn:
            raise ValueError("auth_type 'RoleArn' requires role_arn")
        return self


class AppConfig(BaseModel):
    default_format: str | None = None
    default_profile: str | None = None
    profiles: dict[str, AthenaProfile] = {}

    @field_validator("default_format")
    @classmethod
    def validate_format(cls, v: str | None) -> str | None:
        if v is not None and v not in _VALID_FORMATS:
            msg = f"Invalid default_format: '{v}'. Must be one of: {', '.join(sorted(_VALID_FORMATS))}"
            raise ValueError(msg)
        return v


class ResolvedConfig(BaseModel):
    region: str = ""
    work_group: str = "primary"
    auth_type: AuthType = AuthType.DEFAULT
    access_key: str | None = None
    secret_key: str | None = None
    session_token: str | None = None
    role_arn: str | None = None
    default_format: str | None = None
    active_profile: str | None = None
    sources: dict[str, str] = {}

    @property
    def effective_auth_type(self) -> AuthType:
        """Explicit auth type, else inferred from which credentials are present."""
        if self.auth_type != AuthType.DEFAULT:
            return self.auth_type
        if self.role_arn:
            return AuthType.ROLE_ARN
        if self.access_key and self.secret_key:
            return AuthType.STATIC
        return AuthType.DEFAULT

    def to_query_option(self, **fields: Any) -> QueryOption:
        """Build a QueryOption carrying these connection settings."""
        data: dict[str, Any] = {
            "region": self.region,
            "work_group": self.work_group,
            "auth_type": self.effective_auth_type,
            "access_key": self.access_key,
            "secret_key": self.secret_key,
            "session_token": self.session_token,
            "role_arn": self.role_arn,
        }
        data.update(fields)
        return QueryOption.model_validate(data)


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Returns default AppConfig if file doesn't exist.
    Raises ConfigError on malformed TOML or invalid config.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return AppConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e


def resolve_config(
    config: AppConfig,
    profile_name: str | None = None,
    **cli_overrides: Any,
) -> ResolvedConfig:
    """Resolve configuration using precedence chain.

    CLI > env > profile > config defaults > built-in defaults.
    """
    sources: dict[str, str] = {}
    resolved: dict[str, Any] = {}

    # Layer 1: Built-in defaults
    resolved.update(_PROFILE_DEFAULTS)
    resolved["default_format"] = None
    for key in resolved:
        sources[key] = "default"

    # Layer 2: Config file global defaults
    if config.default_format is not None:
        resolved["default_format"] = config.default_format
        sources["default_format"] = "config"

    # Layer 3: Named profile
    effective_profile = profile_name
    if not effective_profile:
        effective_profile = os.environ.get("ATHENA_PROFILE")
    if not effective_profile:
        effective_profile = config.default_profile

    if effective_profile:
        if effective_profile not in config.profiles:
            available = (
                ", ".join(sorted(config.profiles.keys())) if config.profiles else "none"
            )
            msg = f"Unknown profile: '{effective_profile}'. Available profiles: {available}"
            raise ConfigError(msg)
        profile = config.profiles[effective_profile]
        for key in profile.model_fields_set:
            if key in resolved:
                resolved[key] = getattr(profile, key)
                sources[key] = f"profile: {effective_profile}"

    # Layer 4: Environment variables
    for env_var, field_name in _ENV_VARS:
        value = os.environ.get(env_var)
        if value:
            resolved[field_name] = value
            sources[field_name] = f"env: {env_var}"

    # Layer 5: CLI flags (highest priority)
    cli_to_field = {
        "region": "region",
        "work_group": "work_group",
        "format": "default_format",
    }
    for cli_name, field_name in cli_to_field.items():
        value = cli_overrides.get(cli_name)
        if value is not None:
            resolved[field_name] = value
            sources[field_name] = f"cli: --{cli_name.replace('_', '-')}"

    resolved["active_profile"] = effective_profile
    resolved["sources"] = sources
    return ResolvedConfig(**resolved)
