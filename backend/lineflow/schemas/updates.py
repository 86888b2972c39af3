"""Push update records delivered by the simulation backend.

Two shapes arrive on the push channel, in any order and at any rate:
queue size changes and machine status changes.
"""

from __future__ import annotations

from pydantic import ConfigDict, Field

from lineflow.models.enums import MachineStatus
from lineflow.schemas.base import BaseSchema


class QueueUpdate(BaseSchema):
    """Queue size change."""

    model_config = ConfigDict(frozen=True)

    queue_id: str = Field(..., min_length=1, description="Target queue id")
    current_size: int = Field(..., ge=0, description="Number of held items")


class MachineUpdate(BaseSchema):
    """Machine status change.

    ``machine_id`` may carry either the machine's id or its display name.
    """

    model_config = ConfigDict(frozen=True)

    machine_id: str = Field(..., min_length=1, description="Target machine id or name")
    status: MachineStatus = Field(..., description="New machine status")
    product_color: str | None = Field(
        default=None,
        description="Color of the product being processed, if any",
    )


PushUpdate = QueueUpdate | MachineUpdate

__all__ = [
    "MachineUpdate",
    "PushUpdate",
    "QueueUpdate",
]
