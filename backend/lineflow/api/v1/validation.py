"""Validation API Router.

Validates a topology snapshot submitted by the editor before a run is
started. Topology problems come back as a 200 with ``isValid=false``;
snapshots that break the data contract are rejected with 422.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from lineflow.api.deps import Validator
from lineflow.schemas.topology import TopologySnapshot
from lineflow.schemas.validation import ValidationResult
from lineflow.services.topology import Topology, TopologyError

router = APIRouter(prefix="/validation", tags=["validation"])


@router.post(
    "/topology",
    response_model=ValidationResult,
    summary="Validate Topology",
    description="Check whether a production line topology is safe to simulate.",
    responses={
        200: {"description": "Validation completed"},
        422: {"description": "Snapshot violates the data contract"},
    },
)
async def validate_topology(
    snapshot: TopologySnapshot,
    validator: Validator,
) -> ValidationResult:
    """Validate a full topology snapshot.

    Args:
        snapshot: Nodes and connections to validate.
        validator: Topology validator (injected).

    Returns:
        ValidationResult with errors, warnings and structured issues.

    Raises:
        HTTPException: If the snapshot cannot be loaded (422).
    """
    try:
        topology = Topology.from_snapshot(snapshot)
    except TopologyError as e:
        raise HTTPException(
            status_code=422,
            detail={"error_code": e.error_code, "message": e.message},
        ) from e

    return validator.validate_topology(topology)
