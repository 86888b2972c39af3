"""Connection geometry resolver.

Recomputes each connection's cached endpoints from the current positions of
its two nodes. A connection starts at its source node's exit anchor and ends
at its target node's entry anchor; anchors are the node position plus a
per-kind offset. The result depends only on node positions, so recomputing
is always safe.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lineflow.core.config import Offset, settings
from lineflow.core.logging import get_logger
from lineflow.models.enums import NodeKind

if TYPE_CHECKING:
    from lineflow.models.topology import Connection, Node
    from lineflow.services.topology.model import Topology

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConnectorOffsets:
    """Exit and entry connector offsets for one node kind."""

    exit: Offset
    entry: Offset


def default_offsets() -> dict[NodeKind, ConnectorOffsets]:
    """Offsets taken from settings."""
    return {
        NodeKind.QUEUE: ConnectorOffsets(
            exit=settings.QUEUE_EXIT_OFFSET,
            entry=settings.QUEUE_ENTRY_OFFSET,
        ),
        NodeKind.MACHINE: ConnectorOffsets(
            exit=settings.MACHINE_EXIT_OFFSET,
            entry=settings.MACHINE_ENTRY_OFFSET,
        ),
    }


class ConnectionGeometryResolver:
    """Keeps connection endpoint caches in step with node positions.

    Call ``recompute_all`` after a bulk load or node move. When either
    endpoint node is missing, the cached geometry is left as it was.
    """

    def __init__(self, offsets: dict[NodeKind, ConnectorOffsets] | None = None) -> None:
        self.offsets = offsets if offsets is not None else default_offsets()

    def exit_anchor(self, node: Node) -> tuple[float, float]:
        dx, dy = self.offsets[node.kind].exit
        return node.x + dx, node.y + dy

    def entry_anchor(self, node: Node) -> tuple[float, float]:
        dx, dy = self.offsets[node.kind].entry
        return node.x + dx, node.y + dy

    def resolve(self, topology: Topology, connection: Connection) -> bool:
        """Recompute one connection. Returns False if an endpoint is missing."""
        source = topology.get_node(connection.from_id)
        target = topology.get_node(connection.to_id)
        if source is None or target is None:
            return False

        from_x, from_y = self.exit_anchor(source)
        to_x, to_y = self.entry_anchor(target)
        connection.from_x, connection.from_y = from_x, from_y
        connection.to_x, connection.to_y = to_x, to_y
        return True

    def recompute_all(self, topology: Topology) -> int:
        """Recompute every connection.

        Returns:
            Number of connections whose geometry was updated.
        """
        connections = topology.all_connections()
        updated = sum(1 for conn in connections if self.resolve(topology, conn))
        if updated != len(connections):
            logger.debug(
                f"Kept stale geometry for {len(connections) - updated} connection(s)",
                extra={"context": {"updated": updated, "total": len(connections)}},
            )
        return updated

    def recompute_for_node(self, topology: Topology, node_id: str) -> int:
        """Recompute only the connections touching ``node_id``."""
        return sum(
            1 for conn in topology.connections_of(node_id) if self.resolve(topology, conn)
        )


__all__ = [
    "ConnectionGeometryResolver",
    "ConnectorOffsets",
    "default_offsets",
]
