"""Topology model: the in-memory container for nodes and connections.

Nodes are keyed by id. Connections are keyed by their backend id when they
have one, otherwise by the ordered ``(from_id, to_id)`` pair, so a reversed
edge is a distinct connection. Iteration follows insertion order.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from lineflow.core.config import settings
from lineflow.core.logging import get_logger
from lineflow.models.enums import NodeKind
from lineflow.models.topology import Connection, ConnectionKey, MachineNode, Node, QueueNode
from lineflow.schemas.topology import ConnectionPayload, TopologySnapshot
from lineflow.services.topology.exceptions import ContractViolationError, ImmutableFieldError

logger = get_logger(__name__)


class Topology:
    """Mutable container of queues, machines and connections.

    Removing a node also removes every connection that references it unless
    ``cascade`` is False, in which case those connections are left dangling
    for the validator to report.

    Example:
        >>> topology = Topology()
        >>> topology.upsert_node(QueueNode(id="Q1"))
        >>> topology.upsert_node(MachineNode(id="M1"))
        >>> topology.upsert_connection(Connection(from_id="Q1", to_id="M1"))
    """

    __slots__ = ("_connections", "_machine_names", "_nodes", "cascade")

    def __init__(self, cascade: bool | None = None) -> None:
        self._nodes: dict[str, Node] = {}
        self._connections: dict[ConnectionKey, Connection] = {}
        self._machine_names: dict[str, str] = {}
        self.cascade = settings.REMOVE_NODE_CASCADE if cascade is None else cascade

    @classmethod
    def from_snapshot(
        cls,
        snapshot: TopologySnapshot,
        cascade: bool | None = None,
    ) -> Topology:
        """Bulk load a topology from a snapshot.

        Connection geometry is loaded as given; callers recompute it
        afterwards with the geometry resolver.
        """
        topology = cls(cascade=cascade)
        for node in snapshot.nodes:
            topology.upsert_node(node.to_entity())
        for connection in snapshot.connections:
            try:
                entity = connection.to_entity()
            except ValueError as e:
                raise ContractViolationError("connection endpoints", str(e)) from e
            topology.upsert_connection(entity)
        logger.debug(
            "Topology loaded from snapshot",
            extra={
                "context": {
                    "nodes": len(topology._nodes),
                    "connections": len(topology._connections),
                }
            },
        )
        return topology

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def upsert_node(self, node: Node) -> Node:
        """Insert a node or replace the stored node with the same id.

        Raises:
            ContractViolationError: If the node or its id is missing.
            ImmutableFieldError: If a node with this id exists with another kind.
        """
        if node is None:
            raise ContractViolationError("node")
        if not node.id:
            raise ContractViolationError("node.id")

        existing = self._nodes.get(node.id)
        if existing is not None and existing.kind != node.kind:
            raise ImmutableFieldError(node.id, str(existing.kind), str(node.kind))

        if isinstance(existing, MachineNode) and existing.name:
            self._machine_names.pop(existing.name, None)
        if isinstance(node, MachineNode) and node.name:
            self._machine_names[node.name] = node.id

        self._nodes[node.id] = node
        return node

    def remove_node(self, node_id: str) -> Node | None:
        """Remove a node, cascading to its connections when configured.

        Returns:
            The removed node, or None if no node had this id.
        """
        node = self._nodes.pop(node_id, None)
        if node is None:
            return None

        if isinstance(node, MachineNode) and node.name:
            self._machine_names.pop(node.name, None)

        if self.cascade:
            stale = [key for key, conn in self._connections.items() if conn.touches(node_id)]
            for key in stale:
                del self._connections[key]
            if stale:
                logger.debug(
                    f"Removed {len(stale)} connection(s) with node {node_id}",
                    extra={"context": {"node_id": node_id, "connections": len(stale)}},
                )
        return node

    def get_node(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def find_machine_by_name(self, name: str) -> MachineNode | None:
        node_id = self._machine_names.get(name)
        node = self._nodes.get(node_id) if node_id is not None else None
        return node if isinstance(node, MachineNode) else None

    def all_nodes(self) -> list[Node]:
        return list(self._nodes.values())

    def queues(self) -> list[QueueNode]:
        return [node for node in self._nodes.values() if isinstance(node, QueueNode)]

    def machines(self) -> list[MachineNode]:
        return [node for node in self._nodes.values() if isinstance(node, MachineNode)]

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        """Update a node's position only. Returns False for unknown ids."""
        node = self._nodes.get(node_id)
        if node is None:
            return False
        node.move_to(x, y)
        return True

    def collect_dirty(self) -> list[str]:
        """Return ids of nodes marked dirty and clear their flags."""
        dirty = [node.id for node in self._nodes.values() if node.dirty]
        for node_id in dirty:
            self._nodes[node_id].dirty = False
        return dirty

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def upsert_connection(self, connection: Connection) -> Connection:
        """Insert or replace a connection.

        A connection that gains a backend id replaces the id-less entry for
        the same endpoint pair in place.

        Raises:
            ContractViolationError: If the connection or an endpoint is missing.
        """
        if connection is None:
            raise ContractViolationError("connection")
        if not connection.from_id:
            raise ContractViolationError("connection.from_id")
        if not connection.to_id:
            raise ContractViolationError("connection.to_id")

        pair = (connection.from_id, connection.to_id)
        pending = self._connections.get(pair)
        if connection.id is not None and pending is not None and pending.id is None:
            self._connections = {
                (connection.key if key == pair else key): (connection if key == pair else value)
                for key, value in self._connections.items()
            }
            return connection

        self._connections[connection.key] = connection
        return connection

    def register_created_connection(
        self,
        from_id: str,
        to_id: str,
        response: ConnectionPayload | None = None,
    ) -> Connection:
        """Store a connection returned by the creation collaborator.

        Endpoints missing from the response are back-filled from the
        request.
        """
        payload = response or ConnectionPayload()
        return self.upsert_connection(
            Connection(
                id=payload.id,
                from_id=payload.from_id or from_id,
                to_id=payload.to_id or to_id,
                from_x=payload.from_x,
                from_y=payload.from_y,
                to_x=payload.to_x,
                to_y=payload.to_y,
            )
        )

    def remove_connection(self, key: ConnectionKey) -> Connection | None:
        return self._connections.pop(key, None)

    def get_connection(self, key: ConnectionKey) -> Connection | None:
        return self._connections.get(key)

    def all_connections(self) -> list[Connection]:
        return list(self._connections.values())

    def connections_of(self, node_id: str) -> list[Connection]:
        return [conn for conn in self._connections.values() if conn.touches(node_id)]

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """Deep, field-for-field copy of the current state."""
        return {
            "nodes": [
                {"kind": str(node.kind), **asdict(node)} for node in self._nodes.values()
            ],
            "connections": [asdict(conn) for conn in self._connections.values()],
        }

    def count(self, kind: NodeKind) -> int:
        return sum(1 for node in self._nodes.values() if node.kind == kind)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return (
            f"Topology(queues={self.count(NodeKind.QUEUE)}, "
            f"machines={self.count(NodeKind.MACHINE)}, "
            f"connections={len(self._connections)})"
        )


__all__ = [
    "Topology",
]
