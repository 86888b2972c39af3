"""Common exception classes shared across the application."""

from __future__ import annotations


class AppError(Exception):
    """Base class for application errors."""


__all__ = [
    "AppError",
]
