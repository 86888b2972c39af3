"""API v1 routing configuration.

This module defines all v1 API routes.
"""

from fastapi import APIRouter

from lineflow.api.v1 import validation

router = APIRouter()

router.include_router(validation.router, tags=["Validation"])


@router.get("/status", tags=["Status"])
async def api_status() -> dict[str, str]:
    """API v1 status check."""
    return {"status": "ok", "version": "v1"}
