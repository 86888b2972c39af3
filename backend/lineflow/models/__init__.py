"""Domain enums and in-memory topology entities."""

from lineflow.models.enums import IssueSeverity, MachineStatus, NodeKind, SimulationState
from lineflow.models.topology import (
    DEFAULT_MACHINE_COLOR,
    Connection,
    ConnectionKey,
    Item,
    MachineNode,
    Node,
    QueueNode,
)

__all__ = [
    "DEFAULT_MACHINE_COLOR",
    "Connection",
    "ConnectionKey",
    "IssueSeverity",
    "Item",
    "MachineNode",
    "MachineStatus",
    "Node",
    "NodeKind",
    "QueueNode",
    "SimulationState",
]
