"""Configuration error classes."""

from __future__ import annotations


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class InvalidSettingError(ConfigError):
    """Raised when settings cannot produce valid search parameters."""

    pass
