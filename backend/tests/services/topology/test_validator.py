"""Tests for TopologyValidator.

Each rule is exercised in isolation; scenario tests pin the exact set of
findings for small lines.
"""

import pytest

from lineflow.models import Connection, MachineNode, QueueNode
from lineflow.schemas import ValidationIssueCode
from lineflow.services.topology import ContractViolationError, TopologyValidator


@pytest.fixture
def validator() -> TopologyValidator:
    return TopologyValidator()


def _codes(result) -> list[str]:
    return [issue.code for issue in result.issues]


class TestStructuralRules:
    """Tests for rules that stop evaluation early."""

    def test_empty_topology(self, validator, make_topology) -> None:
        result = validator.validate_topology(make_topology())
        assert not result.is_valid
        assert result.errors == ["No nodes exist. Add at least one queue and one machine."]
        assert result.warnings == []

    def test_missing_categories_reported_together(self, validator, make_topology) -> None:
        result = validator.validate_topology(make_topology(["Q1"]))
        assert _codes(result) == [
            ValidationIssueCode.NO_MACHINES,
            ValidationIssueCode.NO_CONNECTIONS,
        ]

    def test_no_connections(self, validator, make_topology) -> None:
        result = validator.validate_topology(make_topology(["Q1"], ["M1"]))
        assert result.errors == [
            "No connections exist. Connect queues to machines (Q→M→Q pattern)."
        ]


class TestScenarios:
    """End-to-end verdicts for small lines."""

    def test_minimal_line_is_valid(self, validator, line_topology) -> None:
        result = validator.validate_topology(line_topology)
        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []
        assert result.complete_path == ["Q1", "M1", "Q2"]
        assert result.summary() == "Configuration is valid and ready to run!"

    def test_dead_end_machine(self, validator, make_topology) -> None:
        result = validator.validate_topology(make_topology(["Q1"], ["M1"], [("Q1", "M1")]))
        assert result.errors == [
            'Machine "Machine-M1" has input but no output queue (products will be stuck)',
            "No complete production path (Q→M→Q) exists. "
            "Products need a full journey from source to destination.",
        ]
        assert result.issues[0].node_ids == ["M1"]

    def test_unnamed_machine_is_labelled_by_id(self, validator) -> None:
        nodes = [QueueNode(id="Q1"), MachineNode(id="M1")]
        result = validator.validate(nodes, [Connection(from_id="Q1", to_id="M1")])
        assert result.errors[0].startswith('Machine "M1" has input')

    def test_machine_to_machine_connection(self, validator, make_topology) -> None:
        topology = make_topology(
            ["Q1", "Q2"],
            ["M1", "M2"],
            [("Q1", "M1"), ("M1", "Q2"), ("M1", "M2"), ("M2", "Q2")],
        )
        result = validator.validate_topology(topology)
        assert result.errors == [
            "Invalid connection: M1 → M2. Must follow Q→M or M→Q pattern."
        ]

    def test_isolated_nodes_queues_first(self, validator, make_topology) -> None:
        topology = make_topology(
            ["Q1", "Q2", "Q3"],
            ["M1", "M2"],
            [("Q1", "M1"), ("M1", "Q2")],
        )
        result = validator.validate_topology(topology)
        assert result.errors == [
            'QUEUE "Q3" is isolated (no connections)',
            'MACHINE "Machine-M2" is isolated (no connections)',
        ]

    def test_sourceless_machine(self, validator, make_topology) -> None:
        topology = make_topology(
            ["Q1", "Q2"],
            ["M1", "M2"],
            [("Q1", "M1"), ("M1", "Q2"), ("M2", "Q2")],
        )
        result = validator.validate_topology(topology)
        assert result.errors == [
            'Machine "Machine-M2" has output but no input queue (will never receive products)'
        ]

    def test_loop_without_source_queue(self, validator, make_topology) -> None:
        topology = make_topology(["Q1"], ["M1"], [("Q1", "M1"), ("M1", "Q1")])
        result = validator.validate_topology(topology)
        assert result.errors == [
            "No source queue found. At least one queue must have no input "
            "(entry point for products)."
        ]
        assert result.warnings == [
            "Detected 1 circular path(s). Products may loop indefinitely."
        ]
        assert result.cycles == [["Q1", "M1", "Q1"]]

    def test_cycle_is_only_a_warning(self, validator, make_topology) -> None:
        topology = make_topology(
            ["Q1", "Q2"],
            ["M1", "M2"],
            [("Q1", "M1"), ("M1", "Q2"), ("Q2", "M2"), ("M2", "Q2")],
        )
        result = validator.validate_topology(topology)
        assert result.is_valid
        assert result.requires_confirmation
        assert _codes(result) == [ValidationIssueCode.CYCLE_DETECTED]
        assert result.summary().startswith("Configuration is valid and ready to run!\n\nWarnings:\n")

    def test_orphaned_queue_warning(self, validator, make_topology) -> None:
        topology = make_topology(
            ["Q1", "Q2", "Q3", "Q4"],
            ["M1"],
            [("Q1", "M1"), ("M1", "Q2"), ("Q3", "Q4")],
        )
        result = validator.validate_topology(topology)
        assert 'Queue "Q3" has no reachable machines. Consider adding connections.' in (
            result.warnings
        )
        assert not any('"Q2"' in warning for warning in result.warnings)

    def test_errors_summary(self, validator, make_topology) -> None:
        result = validator.validate_topology(make_topology(["Q1"], ["M1"]))
        assert result.summary() == (
            "Configuration has errors:\n\n"
            "No connections exist. Connect queues to machines (Q→M→Q pattern)."
        )

    def test_node_stays_in_scope_after_losing_connections(
        self, validator, make_topology
    ) -> None:
        topology = make_topology(
            ["Q1", "Q2", "Q3"],
            ["M1", "M2"],
            [("Q1", "M1"), ("M1", "Q2"), ("Q3", "M2"), ("M2", "Q2")],
        )
        for connection in topology.connections_of("Q3"):
            topology.remove_connection(connection.key)

        result = validator.validate_topology(topology)
        assert "Q3" in topology
        assert 'QUEUE "Q3" is isolated (no connections)' in result.errors

    def test_long_line_is_valid(self, validator, make_topology) -> None:
        length = 2000
        queues = [f"Q{i}" for i in range(length + 1)]
        machines = [f"M{i}" for i in range(length)]
        edges = []
        for i in range(length):
            edges.append((f"Q{i}", f"M{i}"))
            edges.append((f"M{i}", f"Q{i + 1}"))

        result = validator.validate_topology(make_topology(queues, machines, edges))
        assert result.is_valid
        assert result.warnings == []
        assert result.complete_path == ["Q0", "M0", "Q1"]


class TestDanglingConnections:
    """Connections that reference unknown nodes are reported, never raised."""

    def test_dangling_connection_error(self, validator, make_topology) -> None:
        topology = make_topology(
            ["Q1", "Q2"],
            ["M1"],
            [("Q1", "M1"), ("M1", "Q2"), ("Q2", "GHOST")],
            cascade=False,
        )
        result = validator.validate_topology(topology)
        assert (
            "Invalid connection: Q2 → GHOST. References missing node(s): GHOST."
            in result.errors
        )

    def test_removed_node_without_cascade(self, validator, make_topology) -> None:
        topology = make_topology(
            ["Q1", "Q2"],
            ["M1"],
            [("Q1", "M1"), ("M1", "Q2")],
            cascade=False,
        )
        topology.remove_node("M1")
        result = validator.validate_topology(topology)
        assert ValidationIssueCode.NO_MACHINES in _codes(result)


class TestContract:
    """Contract violations raise instead of producing findings."""

    def test_none_nodes(self, validator) -> None:
        with pytest.raises(ContractViolationError) as exc_info:
            validator.validate(None, [])
        assert exc_info.value.field == "nodes"

    def test_none_node_entry(self, validator) -> None:
        with pytest.raises(ContractViolationError) as exc_info:
            validator.validate([QueueNode(id="Q1"), None], [])
        assert exc_info.value.field == "nodes[1]"

    def test_none_connection_endpoint(self, validator) -> None:
        nodes = [QueueNode(id="Q1"), MachineNode(id="M1")]
        connections = [Connection(from_id="Q1", to_id="M1"), Connection(from_id=None, to_id="M1")]
        with pytest.raises(ContractViolationError) as exc_info:
            validator.validate(nodes, connections)
        assert exc_info.value.field == "connections[1].from_id"
        assert exc_info.value.error_code == "CONTRACT_VIOLATION"

    def test_validate_does_not_mutate_input(self, validator, line_topology) -> None:
        before = line_topology.snapshot()
        validator.validate_topology(line_topology)
        assert line_topology.snapshot() == before
