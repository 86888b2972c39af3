"""Domain enum definitions for lineflow.

This module defines all enum types used across the application for
type-safe representation of domain-specific values.
"""

from enum import Enum


class NodeKind(str, Enum):
    """Production line node classification.

    A topology is bipartite over these kinds: every connection joins
    exactly one queue and one machine.
    """

    QUEUE = "queue"
    MACHINE = "machine"

    def __str__(self) -> str:
        """Return the string value for serialization."""
        return self.value


class MachineStatus(str, Enum):
    """Machine processing state as reported by the simulation backend."""

    IDLE = "idle"
    PROCESSING = "processing"
    FLASHING = "flashing"
    ERROR = "error"

    def __str__(self) -> str:
        """Return the string value for serialization."""
        return self.value


class SimulationState(str, Enum):
    """Run state of the remote simulation as tracked locally."""

    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"
    REPLAYING = "replaying"

    def __str__(self) -> str:
        """Return the string value for serialization."""
        return self.value


class IssueSeverity(str, Enum):
    """Severity of a validation finding.

    Errors block a simulation start; warnings only ask for confirmation.
    """

    ERROR = "error"
    WARNING = "warning"

    def __str__(self) -> str:
        """Return the string value for serialization."""
        return self.value
