"""Application configuration management.

Settings are read from environment variables (prefixed ``INTEGRATION_HUB_``)
with an optional ``.env`` file, converted to typed values and validated.

Architecture:
- EnvironmentLoader: environment variable loading with type conversion
- HttpTransportConfig: outbound HTTP client settings
- ExecutionConfig: execution, persistence retry and query paging settings
- Settings: main configuration object
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any, TypeVar

from integration_hub.core.enums import Environment, LogFormat, LogLevel
from integration_hub.core.errors import ConfigurationError

ENV_PREFIX = "INTEGRATION_HUB_"

TEnum = TypeVar("TEnum", bound=Enum)


# =====================================================================================
# ENVIRONMENT LOADER
# =====================================================================================


class EnvironmentLoader:
    """
    Environment variable loader with type conversion and validation.

    Values already present in the process environment win over the ``.env``
    file. All keys are looked up with the ``INTEGRATION_HUB_`` prefix.
    """

    def __init__(self, env_file: str = ".env", prefix: str = ENV_PREFIX):
        """
        Initialize environment loader.

        Args:
            env_file: Optional environment file to load
            prefix: Prefix applied to every key
        """
        self.env_file = env_file
        self.prefix = prefix
        self._load_env_file()

    def _load_env_file(self) -> None:
        """Load environment variables from file if it exists."""
        if not os.path.exists(self.env_file):
            return

        try:
            with open(self.env_file, encoding="utf-8") as f:
                for raw_line in f:
                    line = raw_line.strip()
                    if not line or line.startswith("#") or "=" not in line:
                        continue

                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()

                    if (value.startswith('"') and value.endswith('"')) or (
                        value.startswith("'") and value.endswith("'")
                    ):
                        value = value[1:-1]

                    if key not in os.environ:
                        os.environ[key] = value
        except OSError as e:
            raise ConfigurationError(
                f"Failed to load environment file {self.env_file}: {e}"
            ) from e

    def _raw(self, key: str) -> str | None:
        return os.environ.get(f"{self.prefix}{key}")

    def get_string(self, key: str, default: str | None = None) -> str | None:
        value = self._raw(key)
        return default if value is None else value

    def get_integer(
        self,
        key: str,
        default: int,
        min_value: int | None = None,
        max_value: int | None = None,
    ) -> int:
        raw = self._raw(key)
        if raw is None:
            return default
        try:
            value = int(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"{key} must be an integer", config_key=key
            ) from e
        if min_value is not None and value < min_value:
            raise ConfigurationError(f"{key} must be >= {min_value}", config_key=key)
        if max_value is not None and value > max_value:
            raise ConfigurationError(f"{key} must be <= {max_value}", config_key=key)
        return value

    def get_float(self, key: str, default: float, min_value: float | None = None) -> float:
        raw = self._raw(key)
        if raw is None:
            return default
        try:
            value = float(raw)
        except ValueError as e:
            raise ConfigurationError(f"{key} must be a number", config_key=key) from e
        if min_value is not None and value < min_value:
            raise ConfigurationError(f"{key} must be >= {min_value}", config_key=key)
        return value

    def get_boolean(self, key: str, default: bool) -> bool:
        raw = self._raw(key)
        if raw is None:
            return default
        return raw.strip().lower() in ("true", "1", "yes", "on")

    def get_enum(self, key: str, enum_class: type[TEnum], default: TEnum) -> TEnum:
        raw = self._raw(key)
        if raw is None:
            return default
        for member in enum_class:
            candidates = {member.name.lower()}
            if isinstance(member.value, str):
                candidates.add(member.value.lower())
            if raw.strip().lower() in candidates:
                return member
        raise ConfigurationError(
            f"{key} must be one of: {', '.join(m.name.lower() for m in enum_class)}",
            config_key=key,
        )


# =====================================================================================
# CONFIGURATION SECTIONS
# =====================================================================================


@dataclass
class HttpTransportConfig:
    """Outbound HTTP client settings."""

    timeout_seconds: float = field(default=30.0)
    verify_ssl: bool = field(default=True)
    user_agent: str = field(default="integration-hub/0.1")
    max_connections: int = field(default=100)

    def __post_init__(self):
        if self.timeout_seconds <= 0:
            raise ConfigurationError("HTTP timeout must be positive")
        if self.max_connections < 1:
            raise ConfigurationError("HTTP max connections must be at least 1")


@dataclass
class ExecutionConfig:
    """Execution, persistence and query paging settings."""

    save_conflict_retries: int = field(default=3)
    history_limit: int = field(default=1000)
    default_page_size: int = field(default=10)
    max_page_size: int = field(default=100)

    def __post_init__(self):
        if self.save_conflict_retries < 1:
            raise ConfigurationError("Save conflict retries must be at least 1")
        if self.default_page_size > self.max_page_size:
            raise ConfigurationError("Default page size cannot exceed max page size")


# =====================================================================================
# SETTINGS
# =====================================================================================


class Settings:
    """Main configuration object for the integration hub."""

    def __init__(self, env_file: str = ".env"):
        self._loader = EnvironmentLoader(env_file)
        loader = self._loader

        self.app_name = loader.get_string("APP_NAME", "integration-hub")
        self.app_version = loader.get_string("APP_VERSION", "0.1.0")
        self.environment = loader.get_enum(
            "ENVIRONMENT", Environment, Environment.DEVELOPMENT
        )
        self.log_level = loader.get_enum("LOG_LEVEL", LogLevel, LogLevel.INFO)
        self.log_format = loader.get_enum(
            "LOG_FORMAT",
            LogFormat,
            LogFormat.JSON if self.environment.is_production else LogFormat.CONSOLE,
        )

        self.http = HttpTransportConfig(
            timeout_seconds=loader.get_float("HTTP_TIMEOUT_SECONDS", 30.0, min_value=0.1),
            verify_ssl=loader.get_boolean("HTTP_VERIFY_SSL", True),
            user_agent=loader.get_string("HTTP_USER_AGENT", "integration-hub/0.1"),
            max_connections=loader.get_integer("HTTP_MAX_CONNECTIONS", 100, min_value=1),
        )
        self.execution = ExecutionConfig(
            save_conflict_retries=loader.get_integer(
                "SAVE_CONFLICT_RETRIES", 3, min_value=1, max_value=20
            ),
            history_limit=loader.get_integer("HISTORY_LIMIT", 1000, min_value=1),
            default_page_size=loader.get_integer("DEFAULT_PAGE_SIZE", 10, min_value=1),
            max_page_size=loader.get_integer("MAX_PAGE_SIZE", 100, min_value=1),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary."""
        return {
            "app_name": self.app_name,
            "app_version": self.app_version,
            "environment": self.environment.value,
            "log_level": self.log_level.level_name,
            "log_format": self.log_format.value,
            "http_timeout_seconds": self.http.timeout_seconds,
            "http_verify_ssl": self.http.verify_ssl,
            "http_user_agent": self.http.user_agent,
            "http_max_connections": self.http.max_connections,
            "save_conflict_retries": self.execution.save_conflict_retries,
            "history_limit": self.execution.history_limit,
            "default_page_size": self.execution.default_page_size,
            "max_page_size": self.execution.max_page_size,
        }


@lru_cache
def get_settings(env_file: str = ".env") -> Settings:
    """
    Get cached settings instance.

    Args:
        env_file: Environment file to load

    Returns:
        Settings: Application settings
    """
    return Settings(env_file)


__all__ = [
    "ENV_PREFIX",
    "EnvironmentLoader",
    "ExecutionConfig",
    "HttpTransportConfig",
    "Settings",
    "get_settings",
]
