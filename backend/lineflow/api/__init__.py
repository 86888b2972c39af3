"""API package."""

from lineflow.api.v1 import router

__all__ = ["router"]
