"""
Stepper Type Definitions - Enums and Exceptions

This module contains the small shared vocabulary of the stepper subsystem.
Action failures are never wrapped in these types: whatever an action raises
reaches the Sequencer's caller unchanged.

Classes:
    Speed: Which speed a paused run resumes at
    PlaybackMode: Externally visible state of the control surface
    StepperError: Base class for scheduler errors
    SequencerBusyError: A run was requested while another is active
"""

from enum import Enum


class Speed(Enum):
    """Playback speeds selectable from the control surface."""
    PLAY = "play"
    FFWD = "ffwd"


class PlaybackMode(Enum):
    """Runtime state as seen by the control surface."""
    PAUSED = "paused"
    PLAYING = "playing"
    FAST_FORWARD = "fast_forward"


class StepperError(Exception):
    """Base exception for stepper errors."""
    pass


class SequencerBusyError(StepperError):
    """Sequencer.run() called while a run is already in progress."""
    pass
