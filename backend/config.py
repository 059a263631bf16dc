"""
Tracker configuration - all environment variables in one place.

Read from environment at import time.
"""

from __future__ import annotations

import os


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc


class Settings:
    """Application settings from environment variables."""

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
    PORT: int = _int_env("PORT", 8080)

    # Transport limits
    MAX_BODY_BYTES: int = _int_env("MAX_BODY_BYTES", 512 * 1024)  # 512 KiB

    # Contracts directory; empty means the schemas packaged with the kernel
    SCHEMA_ROOT: str = os.environ.get("SCHEMA_ROOT", "")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


# Singleton instance
settings = Settings()

if settings.MAX_BODY_BYTES <= 0:
    raise RuntimeError("MAX_BODY_BYTES must be positive")
