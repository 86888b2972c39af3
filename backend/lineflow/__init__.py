"""Production line topology validation and live state reconciliation."""

__version__ = "0.1.0"
