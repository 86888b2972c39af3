"""Tests for SimulationStateMachine."""

import pytest

from lineflow.models import SimulationState
from lineflow.services.simulation import (
    ConfirmationRequiredError,
    InvalidTransitionError,
    SimulationStateMachine,
    SnapshotUnavailableError,
    StartBlockedError,
)


@pytest.fixture
def machine() -> SimulationStateMachine:
    return SimulationStateMachine()


@pytest.fixture
def looping_topology(make_topology):
    """Valid line with a cycle, so validation carries a warning."""
    return make_topology(
        ["Q1", "Q2"],
        ["M1", "M2"],
        [("Q1", "M1"), ("M1", "Q2"), ("Q2", "M2"), ("M2", "Q2")],
    )


class TestStart:
    """Start is guarded by validation."""

    def test_start_valid_topology(self, machine, line_topology) -> None:
        result = machine.start(line_topology)
        assert result.is_valid
        assert machine.state == SimulationState.RUNNING
        assert machine.status_text == "Running"

    def test_start_blocked_by_errors(self, machine, make_topology) -> None:
        with pytest.raises(StartBlockedError) as exc_info:
            machine.start(make_topology())
        assert not exc_info.value.result.is_valid
        assert machine.state == SimulationState.STOPPED

    def test_warnings_need_confirmation(self, machine, looping_topology) -> None:
        with pytest.raises(ConfirmationRequiredError) as exc_info:
            machine.start(looping_topology)
        assert exc_info.value.result.warnings
        assert machine.state == SimulationState.STOPPED

        machine.start(looping_topology, confirmed=True)
        assert machine.state == SimulationState.RUNNING

    def test_start_while_running(self, machine, line_topology) -> None:
        machine.start(line_topology)
        with pytest.raises(InvalidTransitionError) as exc_info:
            machine.start(line_topology)
        assert str(exc_info.value) == "Cannot start while running"

    def test_start_while_paused_resumes(self, machine, line_topology) -> None:
        machine.start(line_topology)
        machine.pause()
        assert machine.start(line_topology) is None
        assert machine.state == SimulationState.RUNNING


class TestTransitions:
    """Pause, resume, stop and replay."""

    def test_pause_requires_running(self, machine) -> None:
        with pytest.raises(InvalidTransitionError):
            machine.pause()

    def test_resume_requires_paused(self, machine) -> None:
        with pytest.raises(InvalidTransitionError):
            machine.resume()

    def test_stop_when_stopped_is_noop(self, machine) -> None:
        calls: list[tuple] = []
        machine.subscribe(lambda old, new: calls.append((old, new)))
        machine.stop()
        assert calls == []

    def test_stop_from_paused(self, machine, line_topology) -> None:
        machine.start(line_topology)
        machine.pause()
        machine.stop()
        assert machine.status_text == "Stopped"

    def test_replay_without_snapshot(self, machine) -> None:
        with pytest.raises(SnapshotUnavailableError) as exc_info:
            machine.replay()
        assert exc_info.value.message == "No snapshot available. Run a simulation first."

    def test_replay_requires_stopped(self, machine, line_topology) -> None:
        machine.record_snapshot()
        machine.start(line_topology)
        with pytest.raises(InvalidTransitionError) as exc_info:
            machine.replay()
        assert str(exc_info.value) == "Cannot replay while running: stop the simulation first"

    def test_replay_round_trip(self, machine) -> None:
        machine.record_snapshot()
        machine.replay()
        assert machine.state == SimulationState.REPLAYING
        machine.finish_replay()
        assert machine.state == SimulationState.STOPPED

    def test_stopping_a_run_enables_replay(self, machine, line_topology) -> None:
        machine.start(line_topology)
        machine.pause()
        machine.stop()
        assert machine.snapshot_available
        machine.replay()
        assert machine.state == SimulationState.REPLAYING

    def test_stopping_a_replay_keeps_snapshot(self, machine) -> None:
        machine.record_snapshot()
        machine.replay()
        machine.stop()
        assert machine.snapshot_available

    def test_finish_replay_requires_replaying(self, machine) -> None:
        with pytest.raises(InvalidTransitionError):
            machine.finish_replay()

    def test_clear_forgets_snapshot(self, machine) -> None:
        machine.record_snapshot()
        machine.replay()
        machine.clear()
        assert machine.state == SimulationState.STOPPED
        assert not machine.snapshot_available


class TestObservers:
    """Observers are told about every transition."""

    def test_observer_receives_transitions(self, machine, line_topology) -> None:
        calls: list[tuple] = []
        machine.subscribe(lambda old, new: calls.append((old, new)))
        machine.start(line_topology)
        machine.pause()
        machine.stop()
        assert calls == [
            (SimulationState.STOPPED, SimulationState.RUNNING),
            (SimulationState.RUNNING, SimulationState.PAUSED),
            (SimulationState.PAUSED, SimulationState.STOPPED),
        ]

    def test_unsubscribe(self, machine, line_topology) -> None:
        calls: list[tuple] = []
        unsubscribe = machine.subscribe(lambda old, new: calls.append((old, new)))
        unsubscribe()
        machine.start(line_topology)
        assert calls == []

    def test_failing_observer_does_not_undo_transition(self, machine, line_topology) -> None:
        calls: list[tuple] = []

        def broken(old, new) -> None:
            raise RuntimeError("observer failed")

        machine.subscribe(broken)
        machine.subscribe(lambda old, new: calls.append((old, new)))

        result = machine.start(line_topology)
        assert result.is_valid
        assert machine.state == SimulationState.RUNNING
        assert calls == [(SimulationState.STOPPED, SimulationState.RUNNING)]
