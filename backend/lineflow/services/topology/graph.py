"""Directed graph data structure for topology analysis.

Adjacency lists keep connection insertion order so every traversal, and
therefore every diagnostic it produces, is deterministic.

Time Complexity:
- Node/Edge addition: O(1)
- Successor/predecessor lookup: O(1)

Space Complexity: O(V + E)
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Hashable, Iterable
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from lineflow.models.topology import Connection

NodeId = TypeVar("NodeId", bound=Hashable)


class Graph(Generic[NodeId]):
    """Directed multigraph with forward and reverse adjacency.

    Nodes are remembered in first-seen order. Duplicate edges are kept,
    matching duplicate connections on the canvas.

    Example:
        >>> graph = Graph[str]()
        >>> graph.add_edge("Q1", "M1")
        >>> graph.get_successors("Q1")
        ['M1']
    """

    __slots__ = ("_adjacency", "_edge_count", "_nodes", "_reverse_adjacency")

    def __init__(self) -> None:
        self._adjacency: defaultdict[NodeId, list[NodeId]] = defaultdict(list)
        self._reverse_adjacency: defaultdict[NodeId, list[NodeId]] = defaultdict(list)
        self._nodes: dict[NodeId, None] = {}
        self._edge_count: int = 0

    @classmethod
    def from_connections(
        cls,
        connections: Iterable[Connection],
        node_ids: Iterable[str] = (),
    ) -> Graph[str]:
        """Build a graph from connections.

        Args:
            connections: Connections in stored order.
            node_ids: Extra nodes to include even when unconnected.
        """
        graph = Graph[str]()
        for node_id in node_ids:
            graph.add_node(node_id)
        for connection in connections:
            graph.add_edge(connection.from_id, connection.to_id)
        return graph

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return self._edge_count

    @property
    def nodes(self) -> list[NodeId]:
        """Nodes in first-seen order."""
        return list(self._nodes)

    def add_node(self, node_id: NodeId) -> None:
        """Add a node. Existing nodes are left as they are."""
        self._nodes.setdefault(node_id, None)

    def add_edge(self, source: NodeId, target: NodeId) -> None:
        """Add a directed edge, adding either endpoint if unseen."""
        self._nodes.setdefault(source, None)
        self._nodes.setdefault(target, None)
        self._adjacency[source].append(target)
        self._reverse_adjacency[target].append(source)
        self._edge_count += 1

    def has_edge(self, source: NodeId, target: NodeId) -> bool:
        return target in self._adjacency.get(source, [])

    def get_successors(self, node_id: NodeId) -> list[NodeId]:
        """Outgoing neighbors in edge insertion order."""
        return self._adjacency.get(node_id, [])

    def get_predecessors(self, node_id: NodeId) -> list[NodeId]:
        """Incoming neighbors in edge insertion order."""
        return self._reverse_adjacency.get(node_id, [])

    def get_in_degree(self, node_id: NodeId) -> int:
        return len(self._reverse_adjacency.get(node_id, []))

    def get_out_degree(self, node_id: NodeId) -> int:
        return len(self._adjacency.get(node_id, []))

    def adjacency(self) -> dict[NodeId, list[NodeId]]:
        """Copy of the adjacency mapping, every node included."""
        return {node: list(self._adjacency.get(node, [])) for node in self._nodes}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"Graph(nodes={self.node_count}, edges={self.edge_count})"
