"""
Stepper Module - Pausable, Speed-Controlled Step Sequences

This module runs an ordered sequence of actions where every action is
delayed by a configurable time and held while a shared pause flag is set.
Both controls can be changed while the sequence is running, which makes a
running sequence watchable and reviewable one step at a time.

Key Components:
- ControlState: Live delay/pause record read by every Step
- ControlSurface: pause / play / ffwd / toggle_pause / step_once transitions
- Step: pause stage -> delay stage -> invoke stage around an action
- Sequencer: Awaits the top-level Step once per index, strictly in order

Usage:
    from core.stepper import ControlState, ControlSurface, Sequencer, StepperConfig, make_step

    state = ControlState.from_config(StepperConfig.from_env())
    controls = ControlSurface(state)
    paint = make_step(lambda index, color: sink.apply_effect(color, index), state)

    async def perform(index):
        await paint(index, "red")
        await paint(index, "green")

    await Sequencer(max_iterations=100).run(perform)

Version: 0.1.0
"""

from .types import (
    Speed,
    PlaybackMode,
    StepperError,
    SequencerBusyError,
)

from .config import (
    StepperConfig,
    PAUSE_CHECK_INTERVAL_MS,
    NORMAL_DELAY_MS,
    FAST_DELAY_MS,
    DEFAULT_MAX_ITERATIONS,
)
from .clock import delay
from .control import ControlState, ControlSurface
from .gate import wait_while_paused
from .step import Step, make_step, step, composite
from .sequencer import Sequencer

__all__ = [
    # Types
    "Speed",
    "PlaybackMode",
    "StepperError",
    "SequencerBusyError",
    # Config
    "StepperConfig",
    "PAUSE_CHECK_INTERVAL_MS",
    "NORMAL_DELAY_MS",
    "FAST_DELAY_MS",
    "DEFAULT_MAX_ITERATIONS",
    # Primitives
    "delay",
    "wait_while_paused",
    # Control
    "ControlState",
    "ControlSurface",
    # Steps
    "Step",
    "make_step",
    "step",
    "composite",
    # Sequencer
    "Sequencer",
]

__version__ = "0.1.0"
