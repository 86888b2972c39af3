"""Pydantic schemas for topology validation results.

The verdict keeps the plain ``isValid/errors/warnings`` shape consumed by
callers, plus structured issues with stable codes for programmatic use.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from lineflow.models.enums import IssueSeverity
from lineflow.schemas.base import BaseSchema


class ValidationIssueCode(str, Enum):
    """Stable codes for every validation rule."""

    # Structural errors
    EMPTY_TOPOLOGY = "EMPTY_TOPOLOGY"
    NO_QUEUES = "NO_QUEUES"
    NO_MACHINES = "NO_MACHINES"
    NO_CONNECTIONS = "NO_CONNECTIONS"

    # Topological errors
    ISOLATED_NODE = "ISOLATED_NODE"
    DEAD_END_MACHINE = "DEAD_END_MACHINE"
    SOURCELESS_MACHINE = "SOURCELESS_MACHINE"
    NO_SOURCE_QUEUE = "NO_SOURCE_QUEUE"
    NO_COMPLETE_PATH = "NO_COMPLETE_PATH"
    INVALID_CONNECTION_PATTERN = "INVALID_CONNECTION_PATTERN"
    DANGLING_CONNECTION = "DANGLING_CONNECTION"

    # Advisory warnings
    CYCLE_DETECTED = "CYCLE_DETECTED"
    ORPHANED_QUEUE = "ORPHANED_QUEUE"


class ValidationIssue(BaseSchema):
    """Single validation finding."""

    code: ValidationIssueCode = Field(..., description="Machine-readable issue code")
    severity: IssueSeverity = Field(..., description="error blocks, warning advises")
    message: str = Field(..., description="Human-readable message")
    node_ids: list[str] = Field(
        default_factory=list,
        description="Affected node ids",
    )


class ValidationResult(BaseSchema):
    """Verdict on whether a topology may be simulated.

    ``is_valid`` is True iff ``errors`` is empty; warnings never affect it.
    """

    is_valid: bool = Field(..., description="Whether the topology may start")
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    issues: list[ValidationIssue] = Field(default_factory=list)
    complete_path: list[str] | None = Field(
        default=None,
        description="First queue -> machine -> queue path found",
    )
    cycles: list[list[str]] = Field(
        default_factory=list,
        description="Detected cycles, each closed by repeating its first node",
    )

    @property
    def requires_confirmation(self) -> bool:
        """Valid, but the operator should confirm the warnings first."""
        return self.is_valid and bool(self.warnings)

    def summary(self) -> str:
        """Render the verdict as display text."""
        if self.is_valid:
            text = "Configuration is valid and ready to run!"
            if self.warnings:
                text += "\n\nWarnings:\n" + "\n".join(self.warnings)
            return text

        text = "Configuration has errors:\n\n" + "\n".join(self.errors)
        if self.warnings:
            text += "\n\nWarnings:\n" + "\n".join(self.warnings)
        return text


__all__ = [
    "ValidationIssue",
    "ValidationIssueCode",
    "ValidationResult",
]
