"""Topology validation service.

Decides whether a user-built production line is safe to simulate. Rules run
in a fixed order and every finding is collected, so an operator can fix all
problems in one pass. Only an empty topology or a missing node/connection
category stops evaluation early.

Problems with the topology are returned as data. Exceptions are reserved
for contract violations such as a None node or connection endpoint.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from lineflow.core.logging import get_logger
from lineflow.models.enums import IssueSeverity, NodeKind
from lineflow.schemas.validation import (
    ValidationIssue,
    ValidationIssueCode,
    ValidationResult,
)
from lineflow.services.topology.algorithms import GraphAlgorithms
from lineflow.services.topology.exceptions import ContractViolationError
from lineflow.services.topology.graph import Graph

if TYPE_CHECKING:
    from lineflow.models.topology import Connection, Node
    from lineflow.services.topology.model import Topology

logger = get_logger(__name__)


class _Findings:
    """Accumulates issues while the rules run."""

    def __init__(self) -> None:
        self.issues: list[ValidationIssue] = []

    def error(
        self,
        code: ValidationIssueCode,
        message: str,
        node_ids: list[str] | None = None,
    ) -> None:
        self.issues.append(
            ValidationIssue(
                code=code,
                severity=IssueSeverity.ERROR,
                message=message,
                node_ids=node_ids or [],
            )
        )

    def warning(
        self,
        code: ValidationIssueCode,
        message: str,
        node_ids: list[str] | None = None,
    ) -> None:
        self.issues.append(
            ValidationIssue(
                code=code,
                severity=IssueSeverity.WARNING,
                message=message,
                node_ids=node_ids or [],
            )
        )

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == IssueSeverity.ERROR for issue in self.issues)

    def to_result(
        self,
        complete_path: tuple[str, str, str] | None = None,
        cycles: list[list[str]] | None = None,
    ) -> ValidationResult:
        errors = [i.message for i in self.issues if i.severity == IssueSeverity.ERROR]
        warnings = [i.message for i in self.issues if i.severity == IssueSeverity.WARNING]
        return ValidationResult(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            issues=self.issues,
            complete_path=list(complete_path) if complete_path else None,
            cycles=cycles or [],
        )


class TopologyValidator:
    """Pre-start validation of a production line.

    Stateless; one instance can validate any number of topologies.

    Example:
        >>> validator = TopologyValidator()
        >>> result = validator.validate(topology.all_nodes(), topology.all_connections())
        >>> if not result.is_valid:
        ...     print(result.summary())
    """

    def validate_topology(self, topology: Topology) -> ValidationResult:
        """Validate the current contents of a topology model."""
        return self.validate(topology.all_nodes(), topology.all_connections())

    def validate(
        self,
        nodes: Iterable[Node],
        connections: Iterable[Connection],
    ) -> ValidationResult:
        """Run every rule against the given nodes and connections.

        Raises:
            ContractViolationError: If a node, connection or required id is None.
        """
        node_list = self._checked_nodes(nodes)
        connection_list = self._checked_connections(connections)

        queues = [node for node in node_list if node.kind == NodeKind.QUEUE]
        machines = [node for node in node_list if node.kind == NodeKind.MACHINE]
        findings = _Findings()

        if not queues and not machines:
            findings.error(
                ValidationIssueCode.EMPTY_TOPOLOGY,
                "No nodes exist. Add at least one queue and one machine.",
            )
            return self._finish(findings)

        self._check_prerequisites(queues, machines, connection_list, findings)
        if findings.has_errors:
            return self._finish(findings)

        graph = Graph.from_connections(connection_list)
        kinds = {node.id: node.kind for node in node_list}

        self._check_node_connections(graph, queues, machines, findings)
        self._check_source_queue(graph, queues, findings)

        complete_path = GraphAlgorithms.find_complete_path(
            graph, [queue.id for queue in queues], kinds
        )
        if complete_path is None:
            findings.error(
                ValidationIssueCode.NO_COMPLETE_PATH,
                "No complete production path (Q→M→Q) exists. "
                "Products need a full journey from source to destination.",
            )

        cycles = GraphAlgorithms.detect_cycles(graph)
        if cycles:
            findings.warning(
                ValidationIssueCode.CYCLE_DETECTED,
                f"Detected {len(cycles)} circular path(s). Products may loop indefinitely.",
                node_ids=list(dict.fromkeys(node for cycle in cycles for node in cycle)),
            )

        self._check_connection_patterns(connection_list, kinds, findings)
        self._check_orphaned_queues(graph, queues, kinds, findings)

        return self._finish(findings, complete_path, cycles)

    # ------------------------------------------------------------------
    # Contract checks
    # ------------------------------------------------------------------

    @staticmethod
    def _checked_nodes(nodes: Iterable[Node]) -> list[Node]:
        if nodes is None:
            raise ContractViolationError("nodes")
        node_list = list(nodes)
        for index, node in enumerate(node_list):
            if node is None:
                raise ContractViolationError(f"nodes[{index}]")
            if not node.id:
                raise ContractViolationError(f"nodes[{index}].id")
        return node_list

    @staticmethod
    def _checked_connections(connections: Iterable[Connection]) -> list[Connection]:
        if connections is None:
            raise ContractViolationError("connections")
        connection_list = list(connections)
        for index, connection in enumerate(connection_list):
            if connection is None:
                raise ContractViolationError(f"connections[{index}]")
            if not connection.from_id:
                raise ContractViolationError(f"connections[{index}].from_id")
            if not connection.to_id:
                raise ContractViolationError(f"connections[{index}].to_id")
        return connection_list

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    @staticmethod
    def _check_prerequisites(
        queues: list[Node],
        machines: list[Node],
        connections: list[Connection],
        findings: _Findings,
    ) -> None:
        if not queues:
            findings.error(
                ValidationIssueCode.NO_QUEUES,
                "No queues exist. Add at least one queue to hold products.",
            )
        if not machines:
            findings.error(
                ValidationIssueCode.NO_MACHINES,
                "No machines exist. Add at least one machine to process products.",
            )
        if not connections:
            findings.error(
                ValidationIssueCode.NO_CONNECTIONS,
                "No connections exist. Connect queues to machines (Q→M→Q pattern).",
            )

    @staticmethod
    def _check_node_connections(
        graph: Graph[str],
        queues: list[Node],
        machines: list[Node],
        findings: _Findings,
    ) -> None:
        """Isolated nodes, dead-end machines and sourceless machines."""
        for node in [*queues, *machines]:
            if graph.get_in_degree(node.id) == 0 and graph.get_out_degree(node.id) == 0:
                findings.error(
                    ValidationIssueCode.ISOLATED_NODE,
                    f'{str(node.kind).upper()} "{node.label}" is isolated (no connections)',
                    node_ids=[node.id],
                )

        for machine in machines:
            if graph.get_in_degree(machine.id) > 0 and graph.get_out_degree(machine.id) == 0:
                findings.error(
                    ValidationIssueCode.DEAD_END_MACHINE,
                    f'Machine "{machine.label}" has input but no output queue '
                    "(products will be stuck)",
                    node_ids=[machine.id],
                )

        for machine in machines:
            if graph.get_in_degree(machine.id) == 0 and graph.get_out_degree(machine.id) > 0:
                findings.error(
                    ValidationIssueCode.SOURCELESS_MACHINE,
                    f'Machine "{machine.label}" has output but no input queue '
                    "(will never receive products)",
                    node_ids=[machine.id],
                )

    @staticmethod
    def _check_source_queue(
        graph: Graph[str],
        queues: list[Node],
        findings: _Findings,
    ) -> None:
        has_source = any(
            graph.get_in_degree(queue.id) == 0 and graph.get_out_degree(queue.id) > 0
            for queue in queues
        )
        if not has_source:
            findings.error(
                ValidationIssueCode.NO_SOURCE_QUEUE,
                "No source queue found. At least one queue must have no input "
                "(entry point for products).",
            )

    @staticmethod
    def _check_connection_patterns(
        connections: list[Connection],
        kinds: dict[str, NodeKind],
        findings: _Findings,
    ) -> None:
        """Every connection must join one queue and one machine."""
        for connection in connections:
            from_kind = kinds.get(connection.from_id)
            to_kind = kinds.get(connection.to_id)

            if from_kind is None or to_kind is None:
                missing = [
                    node_id
                    for node_id in (connection.from_id, connection.to_id)
                    if node_id not in kinds
                ]
                findings.error(
                    ValidationIssueCode.DANGLING_CONNECTION,
                    f"Invalid connection: {connection.from_id} → {connection.to_id}. "
                    f"References missing node(s): {', '.join(dict.fromkeys(missing))}.",
                    node_ids=[connection.from_id, connection.to_id],
                )
            elif from_kind == to_kind:
                findings.error(
                    ValidationIssueCode.INVALID_CONNECTION_PATTERN,
                    f"Invalid connection: {connection.from_id} → {connection.to_id}. "
                    "Must follow Q→M or M→Q pattern.",
                    node_ids=[connection.from_id, connection.to_id],
                )

    @staticmethod
    def _check_orphaned_queues(
        graph: Graph[str],
        queues: list[Node],
        kinds: dict[str, NodeKind],
        findings: _Findings,
    ) -> None:
        """Queues that can feed no machine.

        A queue fed directly by a machine is a destination and is exempt.
        """
        for queue in queues:
            if any(
                kinds.get(source_id) == NodeKind.MACHINE
                for source_id in graph.get_predecessors(queue.id)
            ):
                continue
            reachable = GraphAlgorithms.reachable_from(graph, queue.id)
            if not any(kinds.get(node_id) == NodeKind.MACHINE for node_id in reachable):
                findings.warning(
                    ValidationIssueCode.ORPHANED_QUEUE,
                    f'Queue "{queue.label}" has no reachable machines. '
                    "Consider adding connections.",
                    node_ids=[queue.id],
                )

    # ------------------------------------------------------------------
    # Result
    # ------------------------------------------------------------------

    @staticmethod
    def _finish(
        findings: _Findings,
        complete_path: tuple[str, str, str] | None = None,
        cycles: list[list[str]] | None = None,
    ) -> ValidationResult:
        result = findings.to_result(complete_path, cycles)
        logger.info(
            "Topology validated",
            extra={
                "context": {
                    "is_valid": result.is_valid,
                    "errors": len(result.errors),
                    "warnings": len(result.warnings),
                }
            },
        )
        return result


__all__ = [
    "TopologyValidator",
]
