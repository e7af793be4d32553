"""
Step - An Action Run Through Pause, Delay and Invoke Stages

A Step wraps an action ``action(index, *args, **kwargs)`` with three stages
that always run in this order:

1. pause stage: wait while the shared ControlState is paused
2. delay stage: wait ``state.delay_ms``, read at this moment
3. invoke stage: call the action and await its result if it is awaitable

The action's result comes back unchanged, and anything the action raises
propagates to whoever awaited the Step. Because a Step is itself an async
callable of the same shape, an action may await other Steps; nesting works
to any depth and siblings awaited in order never overlap.

Usage:
    state = ControlState()

    paint = make_step(lambda index, color: sink.apply_effect(color, index), state)

    @step(state)
    async def blue_then_yellow(index):
        await paint(index, "blue")
        await paint(index, "yellow")

    both = composite(state, [partial(paint, color="red"), blue_then_yellow])
    results = await both(3)
"""

from typing import Any, Awaitable, Callable, Optional, Sequence, Tuple
import inspect
import logging

from .clock import delay
from .control import ControlState
from .gate import wait_while_paused

logger = logging.getLogger(__name__)

Action = Callable[..., Any]
Sleep = Callable[[float], Awaitable[None]]


class Step:
    """
    Pause/delay wrapper around an action.

    Holds only the action and the ControlState reference; nothing about a
    call is stored on the instance, so one Step is built at setup and reused
    for every iteration.

    Attributes:
        action: Wrapped callable, sync or async, possibly another Step
        control: Shared state read at each decision point
        name: Label used in log output
    """

    def __init__(
        self,
        action: Action,
        control: ControlState,
        name: Optional[str] = None,
        clock: Sleep = delay,
    ):
        self.action = action
        self.control = control
        self.name = name or getattr(action, "__name__", None) or repr(action)
        self._clock = clock

    def __repr__(self) -> str:
        return f"Step({self.name})"

    async def __call__(self, index: int, *args: Any, **kwargs: Any) -> Any:
        await self._pause_stage()
        await self._delay_stage()
        return await self._invoke_stage(index, *args, **kwargs)

    async def _pause_stage(self) -> None:
        polls = await wait_while_paused(self.control, self._clock)
        if polls:
            logger.debug(f"{self.name}: resumed after {polls} pause checks")

    async def _delay_stage(self) -> None:
        delay_ms = self.control.delay_ms
        await self._clock(delay_ms)
        logger.debug(f"{self.name}: delayed by {delay_ms}ms")

    async def _invoke_stage(self, index: int, *args: Any, **kwargs: Any) -> Any:
        result = self.action(index, *args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result


def make_step(
    action: Action,
    control: ControlState,
    name: Optional[str] = None,
    clock: Sleep = delay,
) -> Step:
    """Wrap ``action`` as a Step reading ``control``."""
    return Step(action, control, name=name, clock=clock)


def step(control: ControlState, name: Optional[str] = None, clock: Sleep = delay) -> Callable[[Action], Step]:
    """Decorator form of make_step()."""
    def decorator(action: Action) -> Step:
        return Step(action, control, name=name, clock=clock)
    return decorator


def composite(
    control: ControlState,
    children: Sequence[Callable[[int], Any]],
    name: Optional[str] = None,
    clock: Sleep = delay,
) -> Step:
    """
    Build a Step whose action awaits each child in order.

    Every child is called as ``child(index)``; bind extra arguments with
    functools.partial. The composite resolves to the tuple of child results
    in program order. A child that raises stops the remaining children.

    Args:
        control: Shared control state for the composite itself
        children: Callables (usually Steps) run one after another
        name: Label for log output

    Returns:
        A Step wrapping the ordered child calls
    """
    children = tuple(children)

    async def run_children(index: int) -> Tuple[Any, ...]:
        results = []
        for child in children:
            result = child(index)
            if inspect.isawaitable(result):
                result = await result
            results.append(result)
        return tuple(results)

    return Step(run_children, control, name=name or "composite", clock=clock)
