"""Simulation control exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from lineflow.core.exceptions import AppError

if TYPE_CHECKING:
    from lineflow.models.enums import SimulationState
    from lineflow.schemas.validation import ValidationResult


class SimulationControlError(AppError):
    """Base exception for run-state control errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidTransitionError(SimulationControlError):
    """Raised when an action is not allowed in the current state.

    Attributes:
        state: State the machine was in.
        action: Requested action.
    """

    def __init__(self, state: SimulationState, action: str, reason: str | None = None) -> None:
        message = f"Cannot {action} while {state}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.state = state
        self.action = action


class StartBlockedError(SimulationControlError):
    """Raised when validation errors block a start.

    Attributes:
        result: The failing validation result.
    """

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(f"Simulation start blocked by {len(result.errors)} validation error(s)")
        self.result = result


class ConfirmationRequiredError(SimulationControlError):
    """Raised when a valid topology has warnings the operator has not confirmed.

    Attributes:
        result: The validation result carrying the warnings.
    """

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(
            f"Simulation start needs confirmation of {len(result.warnings)} warning(s)"
        )
        self.result = result


class SnapshotUnavailableError(SimulationControlError):
    """Raised when replay is requested without a recorded run."""

    def __init__(self) -> None:
        super().__init__("No snapshot available. Run a simulation first.")


__all__ = [
    "ConfirmationRequiredError",
    "InvalidTransitionError",
    "SimulationControlError",
    "SnapshotUnavailableError",
    "StartBlockedError",
]
