"""
Stepper Configuration - Speeds, Poll Interval and Run Bound

Defaults match the reference demo: one second per step at normal speed,
half a second when fast-forwarding, and the pause flag re-checked every
100ms. Any of them can be overridden through STEPPER_* environment variables.

Zero or negative durations are accepted as given. A zero check interval
turns the pause gate into a tight poll loop; that is a caller error and is
not corrected here.
"""

import os
from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional

# Constants
PAUSE_CHECK_INTERVAL_MS = 100
NORMAL_DELAY_MS = 1000
FAST_DELAY_MS = 500
DEFAULT_MAX_ITERATIONS = 100
RETURNING_STEP_WORK_MS = 500

_TRUTHY = ("1", "true", "yes", "on")


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class StepperConfig:
    """
    Startup settings for the control state and sequencer.

    Attributes:
        normal_delay_ms: Delay before each step at play speed
        fast_delay_ms: Delay before each step at fast-forward speed
        check_interval_ms: Pause flag poll interval
        max_iterations: Safety bound on sequencer iterations, None = unbounded
        start_paused: Start suspended so index 0 can be observed
    """
    normal_delay_ms: int = NORMAL_DELAY_MS
    fast_delay_ms: int = FAST_DELAY_MS
    check_interval_ms: int = PAUSE_CHECK_INTERVAL_MS
    max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS
    start_paused: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StepperConfig":
        """Build config from STEPPER_* variables, falling back to defaults."""
        if environ is None:
            environ = os.environ

        max_iterations: Optional[int] = _env_int(
            environ, "STEPPER_MAX_ITERATIONS", DEFAULT_MAX_ITERATIONS
        )
        if max_iterations == 0:
            max_iterations = None

        start_paused = environ.get("STEPPER_START_PAUSED", "1").strip().lower() in _TRUTHY

        return cls(
            normal_delay_ms=_env_int(environ, "STEPPER_NORMAL_DELAY_MS", NORMAL_DELAY_MS),
            fast_delay_ms=_env_int(environ, "STEPPER_FAST_DELAY_MS", FAST_DELAY_MS),
            check_interval_ms=_env_int(environ, "STEPPER_CHECK_INTERVAL_MS", PAUSE_CHECK_INTERVAL_MS),
            max_iterations=max_iterations,
            start_paused=start_paused,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
