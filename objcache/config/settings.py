"""
objcache Configuration Settings

This module contains the configuration constants for the object cache.
Values can be overridden through environment variables.
"""

import os
from dataclasses import dataclass

# Entries never expire and must be deleted explicitly.
NO_EXPIRY: float = 0.0

# One hour, in seconds.
DEFAULT_EXPIRY: float = 3600.0


@dataclass
class Settings:
    """Object cache configuration settings."""

    # Cache settings
    MAX_SIZE: int = int(os.environ.get("OBJCACHE_MAX_SIZE", str(64 * 1024 * 1024)))
    BUFFER_RATIO: int = 10  # max_entry_size = max_size // BUFFER_RATIO

    # Expiry settings
    EXPIRY: float = float(os.environ.get("OBJCACHE_EXPIRY", str(DEFAULT_EXPIRY)))
    SWEEP_DIVISOR: int = 4  # Janitor wakes every EXPIRY / SWEEP_DIVISOR seconds

    # Buffer pool settings
    POOL_MAX_BUFFERS: int = int(os.environ.get("OBJCACHE_POOL_MAX_BUFFERS", "64"))

    # Logging settings
    DEBUG: bool = os.environ.get("OBJCACHE_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("OBJCACHE_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
