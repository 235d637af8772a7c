"""Enums shared by configuration and logging.

Domain enums live with their module.
"""

from enum import Enum


class Environment(Enum):
    """Deployment environment, selected with ``INTEGRATION_HUB_ENVIRONMENT``."""

    DEVELOPMENT = "dev"
    TESTING = "test"
    STAGING = "staging"
    PRODUCTION = "prod"

    @property
    def is_production(self) -> bool:
        return self == Environment.PRODUCTION


class LogLevel(Enum):
    """Log levels paired with their standard library priority."""

    DEBUG = ("DEBUG", 10)
    INFO = ("INFO", 20)
    WARNING = ("WARNING", 30)
    ERROR = ("ERROR", 40)
    CRITICAL = ("CRITICAL", 50)

    def __init__(self, level_name: str, priority: int):
        self.level_name = level_name
        self.priority = priority

    def to_logging_level(self) -> int:
        return self.priority


class LogFormat(Enum):
    """Log renderers: JSON lines, coloured-free console, or key=value."""

    JSON = "json"
    CONSOLE = "console"
    PLAIN = "plain"
