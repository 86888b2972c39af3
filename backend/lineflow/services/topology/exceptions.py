"""Topology custom exceptions.

These signal programming errors (contract violations), never problems with
user-built topologies. A dangling connection or an update for an unknown
node is data, reported through validation results or dropped; a None where
a required field belongs is a bug and raises.
"""

from typing import Any

from lineflow.core.exceptions import AppError


class TopologyError(AppError):
    """Base exception for topology errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code.
        details: Additional error context as dictionary.
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ContractViolationError(TopologyError):
    """Raised when a required value is missing or of the wrong shape.

    Attributes:
        field: Name of the offending field or argument.
    """

    def __init__(self, field: str, reason: str = "is required") -> None:
        super().__init__(
            message=f"Contract violation: {field} {reason}",
            error_code="CONTRACT_VIOLATION",
            details={"field": field, "reason": reason},
        )
        self.field = field


class ImmutableFieldError(TopologyError):
    """Raised when an upsert would change a node's kind.

    Attributes:
        node_id: Id of the existing node.
    """

    def __init__(self, node_id: str, existing: str, proposed: str) -> None:
        super().__init__(
            message=f"Node {node_id!r} is a {existing}; cannot become a {proposed}",
            error_code="IMMUTABLE_FIELD",
            details={"node_id": node_id, "existing": existing, "proposed": proposed},
        )
        self.node_id = node_id


__all__ = [
    "ContractViolationError",
    "ImmutableFieldError",
    "TopologyError",
]
