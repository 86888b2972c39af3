"""Graph algorithms for production line topology analysis.

All functions are pure and total: malformed input such as dangling
references or self-loops never raises. A node that is not in the graph is
simply not expanded. Well-formedness is the validator's business.

Time Complexity:
- Reachability: O(V + E)
- Complete path search: O(V + E)
- Cycle detection: O(V + E)

Space Complexity: O(V + E) for all algorithms.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING

from lineflow.models.enums import NodeKind
from lineflow.services.topology.graph import Graph

if TYPE_CHECKING:
    from lineflow.models.topology import Connection

# DFS colors
_WHITE, _GRAY, _BLACK = 0, 1, 2


class GraphAlgorithms:
    """Stateless algorithms over a snapshot of the topology graph.

    Example:
        >>> graph = GraphAlgorithms.build_graph(topology.all_connections())
        >>> GraphAlgorithms.reachable_from(graph, "Q1")
        {'Q1', 'M1', 'Q2'}
    """

    @staticmethod
    def build_graph(connections: Iterable[Connection]) -> Graph[str]:
        """Graph induced by the given connections, in their stored order."""
        return Graph.from_connections(connections)

    @staticmethod
    def build_adjacency(connections: Iterable[Connection]) -> dict[str, list[str]]:
        """Map each node id to its directly reachable node ids.

        Successor order follows connection insertion order.
        """
        return Graph.from_connections(connections).adjacency()

    @staticmethod
    def reachable_from(graph: Graph[str], start_id: str) -> set[str]:
        """Node ids reachable from ``start_id`` by BFS, including itself.

        Returns an empty set when ``start_id`` is not in the graph.

        Example:
            >>> graph.add_edge("Q1", "M1")
            >>> GraphAlgorithms.reachable_from(graph, "Q1")
            {'Q1', 'M1'}
        """
        if start_id not in graph:
            return set()

        reachable: set[str] = set()
        queue: deque[str] = deque([start_id])

        while queue:
            current = queue.popleft()
            if current in reachable:
                continue

            reachable.add(current)

            for successor in graph.get_successors(current):
                if successor not in reachable:
                    queue.append(successor)

        return reachable

    @staticmethod
    def find_complete_path(
        graph: Graph[str],
        queue_ids: Iterable[str],
        kinds: Mapping[str, NodeKind],
    ) -> tuple[str, str, str] | None:
        """Find the first queue -> machine -> queue path.

        Queues are tried in the given order, then each queue's outgoing
        edges in stored order; the first match wins. The two queues may be
        the same node.

        Args:
            graph: The topology graph.
            queue_ids: Queue ids in stored order.
            kinds: Resolved kind of every known node id.

        Returns:
            ``(queue, machine, queue)`` or None when no such path exists.
        """
        for queue_id in queue_ids:
            for machine_id in graph.get_successors(queue_id):
                if kinds.get(machine_id) != NodeKind.MACHINE:
                    continue
                for target_id in graph.get_successors(machine_id):
                    if kinds.get(target_id) == NodeKind.QUEUE:
                        return queue_id, machine_id, target_id
        return None

    @staticmethod
    def has_complete_path(
        graph: Graph[str],
        queue_ids: Iterable[str],
        kinds: Mapping[str, NodeKind],
    ) -> bool:
        """Whether any queue -> machine -> queue path exists."""
        return GraphAlgorithms.find_complete_path(graph, queue_ids, kinds) is not None

    @staticmethod
    def detect_cycles(graph: Graph[str]) -> list[list[str]]:
        """Find cycles with white/gray/black DFS.

        Each back edge to a node on the current DFS stack closes one cycle,
        reported as the stack slice from that node to the top, followed by
        the node again. A fully explored node is never re-entered, so the
        whole pass is O(V + E) and a cycle is not reported twice from
        different start nodes. A self-loop yields ``[a, a]``.

        Example:
            >>> graph.add_edge("a", "b")
            >>> graph.add_edge("b", "c")
            >>> graph.add_edge("c", "a")
            >>> GraphAlgorithms.detect_cycles(graph)
            [['a', 'b', 'c', 'a']]
        """
        color: dict[str, int] = {}
        path: list[str] = []
        cycles: list[list[str]] = []

        for root in graph.nodes:
            if color.get(root, _WHITE) != _WHITE:
                continue

            # Frames are (node, remaining successors)
            color[root] = _GRAY
            path.append(root)
            stack: list[tuple[str, Iterator[str]]] = [
                (root, iter(graph.get_successors(root)))
            ]

            while stack:
                node, successors = stack[-1]
                neighbor = next(successors, None)

                if neighbor is None:
                    stack.pop()
                    path.pop()
                    color[node] = _BLACK
                    continue

                state = color.get(neighbor, _WHITE)
                if state == _WHITE:
                    color[neighbor] = _GRAY
                    path.append(neighbor)
                    stack.append((neighbor, iter(graph.get_successors(neighbor))))
                elif state == _GRAY:
                    cycle_start = path.index(neighbor)
                    cycles.append([*path[cycle_start:], neighbor])

        return cycles


__all__ = [
    "GraphAlgorithms",
]
