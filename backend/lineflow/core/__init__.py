"""Core application configuration and utilities.

This package contains core functionality including:
- Configuration management (config.py)
- Logging setup (logging.py)
- Base exceptions (exceptions.py)
"""

from lineflow.core.config import Settings, get_settings, settings
from lineflow.core.exceptions import AppError

__all__ = [
    "AppError",
    "Settings",
    "get_settings",
    "settings",
]
