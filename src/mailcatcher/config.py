"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.
"""

import logging
from functools import lru_cache
from typing import Any

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_SMTP_PORT = 1025
DEFAULT_HTTP_PORT = 8025

# Long single lines are common in generated HTML mail. The limit counts the
# line terminator, so a 16 MiB line needs a little headroom.
MAX_BODY_LINE = 16 * 1024 * 1024
DEFAULT_MAX_LINE_LENGTH = MAX_BODY_LINE + 1024


class Settings(BaseSettings):
    """Settings loaded from MAILCATCHER_* environment variables.

    Environment Variables:
        MAILCATCHER_SMTP_PORT: SMTP listener port (default 1025)
        MAILCATCHER_HTTP_PORT: HTTP API port (default 8025)
        MAILCATCHER_HOST: Interface both listeners bind to (default all)
        MAILCATCHER_SMTP_DOMAIN: Hostname announced in the SMTP greeting
        MAILCATCHER_SMTP_MAX_LINE_LENGTH: Longest accepted SMTP line in bytes
        MAILCATCHER_SMTP_DATA_SIZE_LIMIT: Largest accepted message, 0 = unlimited
        MAILCATCHER_ACCEPT_ANY_CREDENTIALS: Accept every AUTH attempt.
            Only suitable for local testing.
        MAILCATCHER_LOG_LEVEL: Logging level (default INFO)
        MAILCATCHER_LOG_JSON: Emit JSON log lines (default False)
    """

    model_config = SettingsConfigDict(
        env_prefix="MAILCATCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    SMTP_PORT: int = DEFAULT_SMTP_PORT
    HTTP_PORT: int = DEFAULT_HTTP_PORT
    HOST: str = "0.0.0.0"

    SMTP_DOMAIN: str = "localhost"
    SMTP_MAX_LINE_LENGTH: int = DEFAULT_MAX_LINE_LENGTH
    SMTP_DATA_SIZE_LIMIT: int = 0
    ACCEPT_ANY_CREDENTIALS: bool = True

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    @field_validator("SMTP_PORT", "HTTP_PORT", mode="before")
    @classmethod
    def _fallback_on_invalid_port(cls, value: Any, info: ValidationInfo) -> Any:
        """Replace an unparsable port with the default instead of failing."""
        default = cls.model_fields[info.field_name].default
        if value is None or value == "":
            return default
        try:
            port = int(value)
        except (TypeError, ValueError):
            logger.warning(
                f"Invalid MAILCATCHER_{info.field_name} value '{value}', "
                f"using default {default}"
            )
            return default
        if not 0 <= port <= 65535:
            logger.warning(
                f"MAILCATCHER_{info.field_name} value {port} out of range, "
                f"using default {default}"
            )
            return default
        return port


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
