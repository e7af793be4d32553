"""
Pause Gate - Hold a Task While the Shared Pause Flag Is Set

The pause flag is flipped from outside the scheduler (an HTTP request, a
key press), so the gate re-samples it every ``check_interval_ms`` instead of
blocking on a signal. A resume is noticed within one interval.
"""

from typing import Awaitable, Callable
import logging

from .clock import delay
from .control import ControlState

logger = logging.getLogger(__name__)


async def wait_while_paused(
    state: ControlState,
    sleep: Callable[[float], Awaitable[None]] = delay,
) -> int:
    """
    Suspend while ``state.paused`` is True.

    Returns immediately when not paused at entry. A pending single-step
    grant lets the caller through once even though the flag is still set.

    Args:
        state: Shared control state, read fresh on every poll
        sleep: Delay primitive used between polls

    Returns:
        Number of polls spent waiting
    """
    polls = 0
    while state.paused:
        if state.take_step_grant():
            logger.debug("Single-step grant consumed")
            break
        logger.debug(f"Pausing for {state.check_interval_ms}ms")
        await sleep(state.check_interval_ms)
        polls += 1
    return polls
