"""Tests for topology and validation schemas."""

import pytest
from pydantic import ValidationError

from lineflow.models import DEFAULT_MACHINE_COLOR, MachineNode, MachineStatus, QueueNode
from lineflow.schemas import (
    ConnectionPayload,
    NodePayload,
    ValidationIssue,
    ValidationIssueCode,
    ValidationResult,
)


class TestNodePayload:
    def test_queue_from_camel_case(self) -> None:
        payload = NodePayload.model_validate(
            {"id": "Q1", "kind": "queue", "x": 5, "y": 6, "size": 3, "capacity": 10}
        )
        node = payload.to_entity()
        assert isinstance(node, QueueNode)
        assert (node.x, node.y, node.size, node.capacity) == (5.0, 6.0, 3, 10)
        assert node.items is None

    def test_items_win_over_size(self) -> None:
        payload = NodePayload.model_validate(
            {
                "id": "Q1",
                "kind": "queue",
                "size": 9,
                "items": [{"id": "p1", "color": "#f00"}],
            }
        )
        node = payload.to_entity()
        assert node.size == 1
        assert node.held_items[0].color == "#f00"

    def test_machine_defaults(self) -> None:
        node = NodePayload.model_validate({"id": "M1", "kind": "machine"}).to_entity()
        assert isinstance(node, MachineNode)
        assert node.status == MachineStatus.IDLE
        assert node.color == DEFAULT_MACHINE_COLOR
        assert node.service_time_ms == 1000

    def test_machine_fields(self) -> None:
        node = NodePayload.model_validate(
            {
                "id": "M1",
                "kind": "machine",
                "name": "Press",
                "status": "error",
                "serviceTimeMs": 250,
                "defaultColor": "#000",
                "ready": False,
            }
        ).to_entity()
        assert node.name == "Press"
        assert node.status == MachineStatus.ERROR
        assert node.service_time_ms == 250
        assert node.color == "#000"
        assert not node.ready

    @pytest.mark.parametrize(
        "payload",
        [
            {"id": "", "kind": "queue"},
            {"id": "Q1", "kind": "conveyor"},
            {"id": "Q1", "kind": "queue", "size": -1},
            {"id": "M1", "kind": "machine", "serviceTimeMs": 0},
        ],
    )
    def test_rejects_invalid(self, payload) -> None:
        with pytest.raises(ValidationError):
            NodePayload.model_validate(payload)


class TestConnectionPayload:
    def test_to_entity(self) -> None:
        conn = ConnectionPayload.model_validate({"id": "c1", "fromId": "Q1", "toId": "M1"})
        entity = conn.to_entity()
        assert entity.key == "c1"

    def test_missing_endpoint(self) -> None:
        with pytest.raises(ValueError):
            ConnectionPayload(from_id="Q1").to_entity()


class TestValidationResult:
    def test_serializes_with_camel_case(self) -> None:
        result = ValidationResult(
            is_valid=True,
            issues=[
                ValidationIssue(
                    code=ValidationIssueCode.CYCLE_DETECTED,
                    severity="warning",
                    message="loop",
                    node_ids=["Q1"],
                )
            ],
            warnings=["loop"],
        )
        data = result.model_dump(by_alias=True)
        assert data["isValid"] is True
        assert data["issues"][0]["nodeIds"] == ["Q1"]
        assert data["issues"][0]["code"] == "CYCLE_DETECTED"

    def test_requires_confirmation(self) -> None:
        assert ValidationResult(is_valid=True, warnings=["w"]).requires_confirmation
        assert not ValidationResult(is_valid=True).requires_confirmation
        assert not ValidationResult(is_valid=False, errors=["e"], warnings=["w"]).requires_confirmation

    def test_summary_with_errors_and_warnings(self) -> None:
        result = ValidationResult(is_valid=False, errors=["e1", "e2"], warnings=["w1"])
        assert result.summary() == "Configuration has errors:\n\ne1\ne2\n\nWarnings:\nw1"
