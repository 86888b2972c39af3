"""Pydantic schemas for topology snapshots.

Snapshots are what the entity-management collaborator hands to the core:
``{id, kind, x, y, ...kind-specific fields}`` for nodes and
``{id?, fromId, toId}`` for connections.
"""

from __future__ import annotations

from pydantic import Field

from lineflow.models.enums import MachineStatus, NodeKind
from lineflow.models.topology import (
    DEFAULT_MACHINE_COLOR,
    Connection,
    Item,
    MachineNode,
    Node,
    QueueNode,
)
from lineflow.schemas.base import BaseSchema


class ItemPayload(BaseSchema):
    """Product held by a queue."""

    id: str = Field(..., min_length=1)
    color: str = Field(..., description="Display color of the product")


class NodePayload(BaseSchema):
    """Node snapshot.

    Kind-specific fields that do not apply to ``kind`` are ignored.
    """

    id: str = Field(..., min_length=1, description="Globally unique node id")
    kind: NodeKind = Field(..., description="Node kind")
    x: float = Field(default=0.0, description="Canvas X coordinate")
    y: float = Field(default=0.0, description="Canvas Y coordinate")

    # Queue fields
    size: int | None = Field(default=None, ge=0)
    capacity: int | None = Field(default=None, ge=0)
    items: list[ItemPayload] | None = Field(default=None)

    # Machine fields
    name: str | None = Field(default=None, description="Human-readable machine name")
    status: MachineStatus | None = Field(default=None)
    service_time_ms: int | None = Field(default=None, gt=0)
    color: str | None = Field(default=None)
    default_color: str | None = Field(default=None)
    ready: bool | None = Field(default=None)

    def to_entity(self) -> Node:
        """Build the in-memory entity for this snapshot.

        An explicit item list wins over ``size`` so the two never disagree.
        """
        if self.kind == NodeKind.QUEUE:
            items = (
                [Item(id=item.id, color=item.color) for item in self.items]
                if self.items is not None
                else None
            )
            return QueueNode(
                id=self.id,
                x=self.x,
                y=self.y,
                size=len(items) if items is not None else (self.size or 0),
                capacity=self.capacity,
                items=items,
            )

        default_color = self.default_color or DEFAULT_MACHINE_COLOR
        return MachineNode(
            id=self.id,
            x=self.x,
            y=self.y,
            name=self.name,
            status=MachineStatus(self.status) if self.status else MachineStatus.IDLE,
            service_time_ms=self.service_time_ms or 1000,
            color=self.color or default_color,
            default_color=default_color,
            ready=True if self.ready is None else self.ready,
        )


class ConnectionPayload(BaseSchema):
    """Connection snapshot or creation response.

    Endpoints are optional because creation responses have been observed
    to omit them; see ``Topology.register_created_connection``.
    """

    id: str | None = Field(default=None, description="Backend-assigned id")
    from_id: str | None = Field(default=None, description="Source node id")
    to_id: str | None = Field(default=None, description="Target node id")
    from_x: float | None = None
    from_y: float | None = None
    to_x: float | None = None
    to_y: float | None = None

    def to_entity(self) -> Connection:
        """Build the in-memory connection.

        Raises:
            ValueError: If either endpoint is missing.
        """
        if not self.from_id or not self.to_id:
            raise ValueError("Connection snapshot requires both fromId and toId")
        return Connection(
            id=self.id,
            from_id=self.from_id,
            to_id=self.to_id,
            from_x=self.from_x,
            from_y=self.from_y,
            to_x=self.to_x,
            to_y=self.to_y,
        )


class TopologySnapshot(BaseSchema):
    """Full topology as submitted for validation or bulk load."""

    nodes: list[NodePayload] = Field(default_factory=list)
    connections: list[ConnectionPayload] = Field(default_factory=list)


__all__ = [
    "ConnectionPayload",
    "ItemPayload",
    "NodePayload",
    "TopologySnapshot",
]
