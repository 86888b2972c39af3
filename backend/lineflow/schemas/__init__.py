"""Pydantic boundary records for lineflow."""

from lineflow.schemas.base import BaseSchema
from lineflow.schemas.topology import (
    ConnectionPayload,
    ItemPayload,
    NodePayload,
    TopologySnapshot,
)
from lineflow.schemas.updates import MachineUpdate, PushUpdate, QueueUpdate
from lineflow.schemas.validation import (
    ValidationIssue,
    ValidationIssueCode,
    ValidationResult,
)

__all__ = [
    "BaseSchema",
    "ConnectionPayload",
    "ItemPayload",
    "MachineUpdate",
    "NodePayload",
    "PushUpdate",
    "QueueUpdate",
    "TopologySnapshot",
    "ValidationIssue",
    "ValidationIssueCode",
    "ValidationResult",
]
