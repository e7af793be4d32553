"""
Unit Tests for Stepper Control State

Tests for:
- Initial state
- pause / play / ffwd transitions
- toggle_pause remembering the previous speed
- Single-step grants
- Change listeners
"""

import pytest
from unittest.mock import Mock

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from core.stepper.control import ControlState, ControlSurface
from core.stepper.config import StepperConfig
from core.stepper.types import Speed, PlaybackMode


@pytest.fixture
def state():
    return ControlState(delay_ms=1000, paused=True, check_interval_ms=100,
                        normal_delay_ms=1000, fast_delay_ms=500)


@pytest.fixture
def controls(state):
    return ControlSurface(state)


class TestControlState:
    """Tests for the ControlState record."""

    def test_defaults_start_paused(self):
        """A fresh state is paused at normal speed."""
        state = ControlState()
        assert state.paused is True
        assert state.delay_ms == 1000
        assert state.check_interval_ms == 100

    def test_from_config(self):
        """Config values are copied into the live state."""
        config = StepperConfig(normal_delay_ms=300, fast_delay_ms=50,
                               check_interval_ms=10, start_paused=False)
        state = ControlState.from_config(config)
        assert state.delay_ms == 300
        assert state.normal_delay_ms == 300
        assert state.fast_delay_ms == 50
        assert state.check_interval_ms == 10
        assert state.paused is False

    def test_step_grants(self, state):
        """Grants are counted and consumed one at a time."""
        assert state.take_step_grant() is False
        assert state.grant_step() == 1
        assert state.grant_step() == 2
        assert state.take_step_grant() is True
        assert state.step_grants == 1
        state.clear_step_grants()
        assert state.take_step_grant() is False

    def test_to_dict(self, state):
        """Status dict exposes the live values."""
        d = state.to_dict()
        assert d["delay_ms"] == 1000
        assert d["paused"] is True
        assert d["check_interval_ms"] == 100
        assert d["step_grants"] == 0


class TestTransitions:
    """Tests for pause/play/ffwd."""

    def test_initial_mode_paused(self, controls):
        """Initial mode is paused, resuming at play speed."""
        assert controls.mode == PlaybackMode.PAUSED
        assert controls.resume_speed == Speed.PLAY

    def test_play(self, controls, state):
        """play() unpauses at normal speed."""
        status = controls.play()
        assert state.paused is False
        assert state.delay_ms == 1000
        assert status["mode"] == "playing"

    def test_ffwd(self, controls, state):
        """ffwd() unpauses at fast speed."""
        status = controls.ffwd()
        assert state.paused is False
        assert state.delay_ms == 500
        assert status["mode"] == "fast_forward"

    def test_pause_keeps_delay(self, controls, state):
        """pause() only sets the flag."""
        controls.ffwd()
        controls.pause()
        assert state.paused is True
        assert state.delay_ms == 500

    def test_play_after_ffwd_restores_normal_delay(self, controls, state):
        """Switching speed while running changes the delay in place."""
        controls.ffwd()
        controls.play()
        assert state.delay_ms == 1000
        assert controls.mode == PlaybackMode.PLAYING


class TestTogglePause:
    """Tests for toggle_pause()."""

    def test_toggle_from_initial_plays(self, controls, state):
        """Toggling the initial paused state resumes at play speed."""
        controls.toggle_pause()
        assert state.paused is False
        assert state.delay_ms == 1000

    def test_toggle_remembers_ffwd(self, controls, state):
        """ffwd -> toggle -> toggle returns to fast speed, not play."""
        controls.ffwd()
        assert (state.paused, state.delay_ms) == (False, 500)

        controls.toggle_pause()
        assert state.paused is True

        controls.toggle_pause()
        assert (state.paused, state.delay_ms) == (False, 500)
        assert controls.mode == PlaybackMode.FAST_FORWARD

    def test_toggle_remembers_play(self, controls, state):
        """play -> toggle -> toggle returns to play speed."""
        controls.ffwd()
        controls.play()
        controls.toggle_pause()
        controls.toggle_pause()
        assert state.delay_ms == 1000
        assert controls.resume_speed == Speed.PLAY

    def test_pause_while_paused_keeps_remembered_speed(self, controls, state):
        """A second pause() does not forget the speed."""
        controls.ffwd()
        controls.pause()
        controls.pause()
        controls.toggle_pause()
        assert state.delay_ms == 500


class TestSingleStep:
    """Tests for step_once()."""

    def test_step_once_while_paused_grants(self, controls, state):
        """Each call while paused adds one grant."""
        controls.step_once()
        status = controls.step_once()
        assert status["step_grants"] == 2
        assert state.paused is True
        assert status["granted"] is True

    def test_step_once_while_playing_is_noop(self, controls, state):
        """No grant is recorded while playing."""
        controls.play()
        status = controls.step_once()
        assert status["step_grants"] == 0
        assert status["granted"] is False

    def test_resume_clears_grants(self, controls, state):
        """Pending grants do not outlive a resume."""
        controls.step_once()
        controls.play()
        assert state.step_grants == 0

    def test_granted_reported_to_listeners(self, controls, state):
        """Listeners see the same granted flag as the caller."""
        listener = Mock()
        controls.on_change(listener)
        controls.step_once()
        controls.play()
        status = controls.step_once()
        assert status["granted"] is False
        assert status["paused"] is False
        assert listener.call_args[0][0]["granted"] is False


class TestListeners:
    """Tests for change listeners."""

    def test_listener_receives_status(self, controls):
        """Every transition notifies listeners with the new status."""
        listener = Mock()
        controls.on_change(listener)
        controls.ffwd()
        controls.pause()
        assert listener.call_count == 2
        assert listener.call_args_list[0][0][0]["mode"] == "fast_forward"
        assert listener.call_args_list[1][0][0]["mode"] == "paused"

    def test_off_change(self, controls):
        """Unregistered listeners are not called."""
        listener = Mock()
        controls.on_change(listener)
        controls.off_change(listener)
        controls.play()
        listener.assert_not_called()

    def test_failing_listener_does_not_undo_transition(self, controls, state):
        """A listener error is logged, the transition stands."""
        controls.on_change(Mock(side_effect=RuntimeError("ui gone")))
        good = Mock()
        controls.on_change(good)
        controls.play()
        assert state.paused is False
        good.assert_called_once()
