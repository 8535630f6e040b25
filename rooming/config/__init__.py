"""
Configuration for the rooming solver.

Usage:
    from rooming.config import get_settings

    settings = get_settings()
    params = settings.build_params()
"""

from __future__ import annotations

from .errors import ConfigError, InvalidSettingError
from .settings import STRATEGIES, SolverSettings, get_settings

__all__ = [
    "ConfigError",
    "InvalidSettingError",
    "STRATEGIES",
    "SolverSettings",
    "get_settings",
]
