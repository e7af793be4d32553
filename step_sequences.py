"""
Step Sequences - The demo step graph played by the stepper host

Each iteration paints red, green, then a composite of blue and yellow, then
a returning step that works for a while, paints brown and hands back a value.
Every leaf passes the iteration index through so the effect sink can show
that steps run in order.

Steps are built once here and reused for every iteration.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Tuple

from core.stepper import ControlState, Step, make_step, composite, step
from core.stepper.config import RETURNING_STEP_WORK_MS

logger = logging.getLogger(__name__)


@dataclass
class DemoSequence:
    """The assembled steps; `perform` is what the Sequencer runs"""
    simple: Step
    composite: Step
    returning: Step
    perform: Callable[[int], Any]


def build_demo_sequence(control: ControlState, sink, work_ms: int = RETURNING_STEP_WORK_MS,
                        rng: random.Random = None) -> DemoSequence:
    """
    Assemble the demo steps around an effect sink.

    Args:
        control: Shared control state every step reads
        sink: Object with apply_effect(label, index)
        work_ms: Simulated work inside the returning step
        rng: Random source for the returned value (seed it in tests)
    """
    rng = rng or random.Random()

    def set_color(index: int, color: str) -> None:
        sink.apply_effect(color, index)

    # Step that does one thing.
    simple_step = make_step(set_color, control, name="simple_step")

    # Step which is made up of other steps.
    composite_step = composite(
        control,
        [partial(simple_step, color="blue"), partial(simple_step, color="yellow")],
        name="composite_step",
    )

    # Step which returns a value asynchronously.
    @step(control, name="returning_step")
    async def returning_step(index: int) -> Tuple[float, int]:
        await asyncio.sleep(work_ms / 1000.0)
        set_color(index, "brown")
        return (rng.random(), index)

    async def perform_steps(index: int) -> Tuple[float, int]:
        await simple_step(index, "red")
        await simple_step(index, "green")
        await composite_step(index)
        result = await returning_step(index)
        logger.info(f"Returned {result!r}")
        return result

    return DemoSequence(
        simple=simple_step,
        composite=composite_step,
        returning=returning_step,
        perform=perform_steps,
    )
