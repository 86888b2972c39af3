"""Simulation run-state control guarded by topology validation."""

from lineflow.services.simulation.exceptions import (
    ConfirmationRequiredError,
    InvalidTransitionError,
    SimulationControlError,
    SnapshotUnavailableError,
    StartBlockedError,
)
from lineflow.services.simulation.state_machine import (
    SimulationStateMachine,
    StateObserver,
)

__all__ = [
    "ConfirmationRequiredError",
    "InvalidTransitionError",
    "SimulationControlError",
    "SimulationStateMachine",
    "SnapshotUnavailableError",
    "StartBlockedError",
    "StateObserver",
]
