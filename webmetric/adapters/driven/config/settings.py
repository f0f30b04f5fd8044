"""Process-level provider settings loaded from environment variables."""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

__all__ = ["ProviderSettings", "load_settings"]

load_dotenv()

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ProviderSettings(BaseModel):
    """Defaults shared by every web metric provider in the process.

    Attributes:
        default_timeout_sec: Request timeout for metrics without a positive
            timeoutSeconds.
        log_level: Level of the webmetric logger.
    """

    default_timeout_sec: int = Field(
        default=10, gt=0, description="Timeout used when a metric sets none."
    )
    log_level: str = Field(default="INFO", description="Level of the webmetric logger.")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that the log level is a standard level name.

        Args:
            v: Level name, case insensitive.

        Returns:
            The upper-cased level name.

        Raises:
            ValueError: If the level is unknown.
        """
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level {v!r}, allowed: {', '.join(_LOG_LEVELS)}")
        return level


def load_settings() -> ProviderSettings:
    """Load and validate settings from the environment.

    Optional environment variables:
    - WEB_METRIC_DEFAULT_TIMEOUT_SECONDS: Positive integer, default 10.
    - WEB_METRIC_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL.

    Returns:
        Validated ProviderSettings object.

    Raises:
        RuntimeError: If a variable is set to an invalid value.
    """
    timeout_raw = os.getenv("WEB_METRIC_DEFAULT_TIMEOUT_SECONDS", "10")
    log_level = os.getenv("WEB_METRIC_LOG_LEVEL", "INFO")

    try:
        timeout_sec = int(timeout_raw)
        if timeout_sec <= 0:
            raise ValueError("Must be positive")
    except ValueError as e:
        raise RuntimeError(
            f"WEB_METRIC_DEFAULT_TIMEOUT_SECONDS must be a positive integer (got: {timeout_raw})"
        ) from e

    try:
        settings = ProviderSettings(default_timeout_sec=timeout_sec, log_level=log_level)
    except ValueError as e:
        raise RuntimeError(f"Invalid web metric settings: {e}") from e

    logger.debug(
        f"Web metric settings: default_timeout={settings.default_timeout_sec}s, "
        f"log_level={settings.log_level}"
    )
    return settings
