"""Configuration module for objcache."""

from .settings import DEFAULT_EXPIRY, NO_EXPIRY, Settings, settings

__all__ = ["DEFAULT_EXPIRY", "NO_EXPIRY", "Settings", "settings"]
