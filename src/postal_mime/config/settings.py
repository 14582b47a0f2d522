"""
Pydantic Settings configuration for postal-mime.

Loads configuration from environment variables prefixed with ``POSTAL_MIME_``.
The host application reads these once at startup; the codec itself only
receives plain values (size cap, hostname) as arguments.
"""

import socket
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Largest message read by decode() when no explicit cap is given
DEFAULT_MAX_SIZE = 1 << 20

FALLBACK_HOSTNAME = "localhost.localdomain"


def resolve_hostname() -> str:
    """Return the local hostname, or a fixed fallback if it cannot be resolved."""
    try:
        hostname = socket.gethostname()
    except OSError:
        return FALLBACK_HOSTNAME
    return hostname or FALLBACK_HOSTNAME


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Decoder size cap in bytes
    max_message_size: int = Field(DEFAULT_MAX_SIZE, ge=1)

    # Right-hand side of generated Message-Id values
    hostname: str = Field(default_factory=resolve_hostname)

    # Logging settings
    log_format: str = Field("console", pattern=r"^(console|json)$")
    debug: bool = Field(False)

    model_config = {
        "env_prefix": "POSTAL_MIME_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @field_validator("hostname")
    @classmethod
    def _fallback_blank_hostname(cls, value: str) -> str:
        value = value.strip()
        return value or resolve_hostname()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure only one Settings instance is created,
    so the environment and hostname are resolved once per process.
    """
    return Settings()
