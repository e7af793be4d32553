"""
Stepper Control - Shared Control State and Pause/Play/FFWD Transitions

ControlState is the live record every Step consults: the current delay, the
pause flag and the pause poll interval. Steps read these attributes at the
moment they need them, so a change made by the control surface reaches
Steps that are already scheduled but have not run yet.

ControlSurface owns the only writes to that record. It models the three
user-visible states {playing, fast-forwarding, paused} and remembers which
speed was active when pausing, so toggling resumes at that speed.

Usage:
    state = ControlState.from_config(StepperConfig())
    controls = ControlSurface(state)
    controls.on_change(lambda status: print(status))

    controls.ffwd()          # {paused: False, delay_ms: 500}
    controls.toggle_pause()  # {paused: True}
    controls.toggle_pause()  # back to fast-forward
"""

from typing import Any, Callable, Dict, List
import logging
import threading

from .config import StepperConfig, NORMAL_DELAY_MS, FAST_DELAY_MS, PAUSE_CHECK_INTERVAL_MS
from .types import Speed, PlaybackMode

logger = logging.getLogger(__name__)


class ControlState:
    """
    Externally mutable delay/pause record shared by all Steps.

    Plain attributes, read without locking. delay_ms and paused are
    independent reads; a Step may see a new pause flag together with a stale
    delay and the next Step picks up the rest.

    Attributes:
        delay_ms: Delay paid by each Step before running its action
        paused: While True, Steps wait at their pause check
        check_interval_ms: How often a waiting Step re-reads ``paused``
        normal_delay_ms: Delay used by play()
        fast_delay_ms: Delay used by ffwd()
    """

    def __init__(
        self,
        delay_ms: int = NORMAL_DELAY_MS,
        paused: bool = True,
        check_interval_ms: int = PAUSE_CHECK_INTERVAL_MS,
        normal_delay_ms: int = NORMAL_DELAY_MS,
        fast_delay_ms: int = FAST_DELAY_MS,
    ):
        self.delay_ms = delay_ms
        self.paused = paused
        self.check_interval_ms = check_interval_ms
        self.normal_delay_ms = normal_delay_ms
        self.fast_delay_ms = fast_delay_ms
        self._step_grants = 0
        self._grant_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: StepperConfig) -> "ControlState":
        return cls(
            delay_ms=config.normal_delay_ms,
            paused=config.start_paused,
            check_interval_ms=config.check_interval_ms,
            normal_delay_ms=config.normal_delay_ms,
            fast_delay_ms=config.fast_delay_ms,
        )

    @property
    def step_grants(self) -> int:
        return self._step_grants

    def grant_step(self) -> int:
        """Allow one more Step through the pause gate. Returns pending grants."""
        with self._grant_lock:
            self._step_grants += 1
            return self._step_grants

    def take_step_grant(self) -> bool:
        """Consume a pending single-step grant, if any."""
        with self._grant_lock:
            if self._step_grants <= 0:
                return False
            self._step_grants -= 1
            return True

    def clear_step_grants(self) -> None:
        with self._grant_lock:
            self._step_grants = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "delay_ms": self.delay_ms,
            "paused": self.paused,
            "check_interval_ms": self.check_interval_ms,
            "normal_delay_ms": self.normal_delay_ms,
            "fast_delay_ms": self.fast_delay_ms,
            "step_grants": self._step_grants,
        }


class ControlSurface:
    """
    The pause/play/ffwd/toggle transitions over a ControlState.

    Transitions are serialised with a lock because HTTP handlers may call
    them from several worker threads. Each returns the resulting status dict
    and notifies change listeners.
    """

    def __init__(self, state: ControlState):
        self.state = state
        self.lock = threading.Lock()
        self._resume_speed = Speed.PLAY
        self._listeners: List[Callable[[Dict[str, Any]], None]] = []

    @property
    def resume_speed(self) -> Speed:
        """Speed that toggle_pause() returns to."""
        return self._resume_speed

    @property
    def mode(self) -> PlaybackMode:
        if self.state.paused:
            return PlaybackMode.PAUSED
        if self._resume_speed == Speed.FFWD:
            return PlaybackMode.FAST_FORWARD
        return PlaybackMode.PLAYING

    # ─────────────────────────────────────────────────────────
    # Listeners
    # ─────────────────────────────────────────────────────────

    def on_change(self, callback: Callable[[Dict[str, Any]], None]) -> None:
        self._listeners.append(callback)

    def off_change(self, callback: Callable[[Dict[str, Any]], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, status: Dict[str, Any]) -> None:
        for callback in list(self._listeners):
            try:
                callback(status)
            except Exception as e:
                logger.error(f"Control listener error: {e}")

    # ─────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────

    def pause(self) -> Dict[str, Any]:
        """Enter the paused state, remembering the speed in use."""
        with self.lock:
            self._pause_locked()
            status = self._status_locked()
        logger.info(f"Paused (resume at {self._resume_speed.value})")
        self._notify(status)
        return status

    def play(self) -> Dict[str, Any]:
        """Leave the paused state at normal speed."""
        with self.lock:
            self._resume_locked(Speed.PLAY)
            status = self._status_locked()
        logger.info(f"Playing (delay={self.state.delay_ms}ms)")
        self._notify(status)
        return status

    def ffwd(self) -> Dict[str, Any]:
        """Leave the paused state at fast speed."""
        with self.lock:
            self._resume_locked(Speed.FFWD)
            status = self._status_locked()
        logger.info(f"Fast-forward (delay={self.state.delay_ms}ms)")
        self._notify(status)
        return status

    def toggle_pause(self) -> Dict[str, Any]:
        """Pause if running, otherwise resume at the remembered speed."""
        with self.lock:
            if not self.state.paused:
                self._pause_locked()
            else:
                self._resume_locked(self._resume_speed)
            status = self._status_locked()
        logger.info(f"Toggled pause -> {status['mode']}")
        self._notify(status)
        return status

    def step_once(self) -> Dict[str, Any]:
        """
        Let exactly one waiting Step through while paused.

        Has no effect while playing. The grant applies to whichever Step
        reaches its pause check next, at any nesting depth. The returned
        status carries ``granted`` so callers need not re-check ``paused``.
        """
        with self.lock:
            granted = self.state.paused
            if granted:
                self.state.grant_step()
            status = self._status_locked()
            status["granted"] = granted
        self._notify(status)
        return status

    def get_status(self) -> Dict[str, Any]:
        with self.lock:
            return self._status_locked()

    def _pause_locked(self) -> None:
        # _resume_speed already holds the speed in use
        self.state.paused = True

    def _resume_locked(self, speed: Speed) -> None:
        if speed == Speed.FFWD:
            self.state.delay_ms = self.state.fast_delay_ms
        else:
            self.state.delay_ms = self.state.normal_delay_ms
        self._resume_speed = speed
        self.state.paused = False
        self.state.clear_step_grants()

    def _status_locked(self) -> Dict[str, Any]:
        status = self.state.to_dict()
        status["mode"] = self.mode.value
        status["resume_speed"] = self._resume_speed.value
        return status
