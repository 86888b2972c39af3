"""Simulation run-state machine.

Tracks whether the remote simulation is stopped, running, paused or
replaying, and guards the start transition with the topology validator.
Observers subscribe to transitions instead of polling shared flags.

Transitions::

    STOPPED   --start-->   RUNNING   (validation must pass)
    RUNNING   --pause-->   PAUSED
    PAUSED    --resume-->  RUNNING   (start while paused also resumes)
    RUNNING/PAUSED/REPLAYING --stop--> STOPPED
    STOPPED   --replay-->  REPLAYING (a run must have been recorded)
    REPLAYING --finish_replay--> STOPPED
    any       --clear-->   STOPPED   (forgets the snapshot)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from lineflow.core.logging import get_logger
from lineflow.models.enums import SimulationState
from lineflow.services.simulation.exceptions import (
    ConfirmationRequiredError,
    InvalidTransitionError,
    SnapshotUnavailableError,
    StartBlockedError,
)
from lineflow.services.topology.validator import TopologyValidator

if TYPE_CHECKING:
    from lineflow.schemas.validation import ValidationResult
    from lineflow.services.topology.model import Topology

logger = get_logger(__name__)

StateObserver = Callable[[SimulationState, SimulationState], None]

_STATUS_TEXT = {
    SimulationState.STOPPED: "Stopped",
    SimulationState.RUNNING: "Running",
    SimulationState.PAUSED: "Paused",
    SimulationState.REPLAYING: "Replaying",
}


class SimulationStateMachine:
    """Local view of the simulation run state.

    Example:
        >>> machine = SimulationStateMachine()
        >>> machine.subscribe(lambda old, new: print(old, "->", new))
        >>> machine.start(topology)
        stopped -> running
    """

    def __init__(self, validator: TopologyValidator | None = None) -> None:
        self.validator = validator or TopologyValidator()
        self._state = SimulationState.STOPPED
        self._observers: list[StateObserver] = []
        self.snapshot_available = False

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def status_text(self) -> str:
        return _STATUS_TEXT[self._state]

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """Register an observer; returns a callable that unregisters it.

        An observer that raises is logged; the transition still stands.
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def start(self, topology: Topology, confirmed: bool = False) -> ValidationResult | None:
        """Start a run, or resume a paused one.

        Args:
            topology: Topology to validate before starting.
            confirmed: Operator accepted the validation warnings.

        Returns:
            The validation result, or None when resuming.

        Raises:
            InvalidTransitionError: If already running or replaying.
            StartBlockedError: If validation reports errors.
            ConfirmationRequiredError: If there are unconfirmed warnings.
        """
        if self._state == SimulationState.PAUSED:
            self.resume()
            return None
        if self._state != SimulationState.STOPPED:
            raise InvalidTransitionError(self._state, "start")

        result = self.validator.validate_topology(topology)
        if not result.is_valid:
            logger.warning(
                "Simulation start blocked by validation errors",
                extra={"context": {"errors": result.errors}},
            )
            raise StartBlockedError(result)
        if result.requires_confirmation and not confirmed:
            raise ConfirmationRequiredError(result)

        self._transition(SimulationState.RUNNING)
        return result

    def pause(self) -> None:
        if self._state != SimulationState.RUNNING:
            raise InvalidTransitionError(self._state, "pause")
        self._transition(SimulationState.PAUSED)

    def resume(self) -> None:
        if self._state != SimulationState.PAUSED:
            raise InvalidTransitionError(self._state, "resume")
        self._transition(SimulationState.RUNNING)

    def stop(self) -> None:
        """Stop any run or replay. Stopping while stopped does nothing.

        Stopping a run, paused or not, records it for replay.
        """
        if self._state == SimulationState.STOPPED:
            return
        if self._state in (SimulationState.RUNNING, SimulationState.PAUSED):
            self.snapshot_available = True
        self._transition(SimulationState.STOPPED)

    def record_snapshot(self) -> None:
        """Mark a recorded run as available, e.g. one reported by the backend."""
        self.snapshot_available = True

    def replay(self) -> None:
        """Replay the last recorded run.

        Raises:
            InvalidTransitionError: If not stopped.
            SnapshotUnavailableError: If no run has been recorded.
        """
        if self._state != SimulationState.STOPPED:
            raise InvalidTransitionError(self._state, "replay", "stop the simulation first")
        if not self.snapshot_available:
            raise SnapshotUnavailableError()
        self._transition(SimulationState.REPLAYING)

    def finish_replay(self) -> None:
        """Record that the backend reports the replay as finished."""
        if self._state != SimulationState.REPLAYING:
            raise InvalidTransitionError(self._state, "finish replay")
        self._transition(SimulationState.STOPPED)

    def clear(self) -> None:
        """Reset to stopped and forget any recorded run."""
        self.snapshot_available = False
        if self._state != SimulationState.STOPPED:
            self._transition(SimulationState.STOPPED)

    def _transition(self, new_state: SimulationState) -> None:
        old_state = self._state
        self._state = new_state
        logger.info(
            f"Simulation {old_state} -> {new_state}",
            extra={"context": {"from": str(old_state), "to": str(new_state)}},
        )
        for observer in list(self._observers):
            try:
                observer(old_state, new_state)
            except Exception:
                logger.exception(
                    "Simulation state observer failed",
                    extra={
                        "context": {
                            "from": str(old_state),
                            "to": str(new_state),
                            "observer": repr(observer),
                        }
                    },
                )


__all__ = [
    "SimulationStateMachine",
    "StateObserver",
]
