"""
Sequencer - Drive a Top-Level Step Once per Index, Strictly in Order

The Sequencer awaits ``top(index)`` to full completion, nested Steps
included, before issuing ``top(index + 1)``. Two iterations never overlap.

The iteration bound is a safety valve against runaway loops during
development, not a business rule; ``max_iterations=None`` runs until the
host stops the process.

Events (for result observers):
    iteration_started(index)
    iteration_complete(index, result)
    run_complete(count)
    run_error(index, exc)

Usage:
    sequencer = Sequencer(max_iterations=100)
    sequencer.on("iteration_complete", lambda i, r: print(i, r))
    count = await sequencer.run(perform_steps)
"""

from typing import Any, Callable, Dict, List, Optional
import inspect
import itertools
import logging

from .config import DEFAULT_MAX_ITERATIONS
from .types import SequencerBusyError

logger = logging.getLogger(__name__)

_UNSET = object()


class Sequencer:
    """
    Sequential index driver for a top-level Step.

    Attributes:
        max_iterations: Default iteration bound, None = unbounded
    """

    def __init__(self, max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS):
        self.max_iterations = max_iterations
        self._callbacks: Dict[str, List[Callable]] = {}
        self._running = False
        self._index: Optional[int] = None
        self._completed = 0
        self._bound: Optional[int] = max_iterations
        self._error: Optional[str] = None

    # ─────────────────────────────────────────────────────────
    # Events
    # ─────────────────────────────────────────────────────────

    def on(self, event: str, callback: Callable) -> None:
        """Register an event callback."""
        self._callbacks.setdefault(event, []).append(callback)

    def off(self, event: str, callback: Callable) -> None:
        """Unregister an event callback."""
        if event in self._callbacks and callback in self._callbacks[event]:
            self._callbacks[event].remove(callback)

    def _emit(self, event: str, *args: Any) -> None:
        for callback in self._callbacks.get(event, []):
            try:
                callback(*args)
            except Exception as e:
                logger.error(f"Sequencer callback error ({event}): {e}")

    # ─────────────────────────────────────────────────────────
    # Run
    # ─────────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._running

    async def run(self, top: Callable[[int], Any], max_iterations: Any = _UNSET) -> int:
        """
        Run ``top`` for index 0, 1, 2, ... one iteration at a time.

        Args:
            top: Top-level Step or any async callable taking the index
            max_iterations: Overrides the configured bound for this run

        Returns:
            Number of iterations completed

        Raises:
            SequencerBusyError: If a run is already in progress
            Exception: Whatever ``top`` raised; the run stops at that index
        """
        if self._running:
            raise SequencerBusyError("Sequencer is already running")

        bound = self.max_iterations if max_iterations is _UNSET else max_iterations
        indices = itertools.count() if bound is None else range(bound)

        self._running = True
        self._bound = bound
        self._completed = 0
        self._index = None
        self._error = None
        logger.info(f"Sequencer started (max_iterations={bound})")

        try:
            for index in indices:
                self._index = index
                self._emit("iteration_started", index)

                try:
                    result = top(index)
                    if inspect.isawaitable(result):
                        result = await result
                except Exception as e:
                    self._error = f"{type(e).__name__}: {e}"
                    logger.error(f"Sequencer aborted at index {index}: {self._error}")
                    self._emit("run_error", index, e)
                    raise

                self._completed += 1
                self._emit("iteration_complete", index, result)
        finally:
            self._running = False

        logger.info(f"Sequencer finished after {self._completed} iterations")
        self._emit("run_complete", self._completed)
        return self._completed

    def get_status(self) -> Dict[str, Any]:
        """Get sequencer status for diagnostics."""
        return {
            "running": self._running,
            "index": self._index,
            "completed": self._completed,
            "max_iterations": self._bound,
            "error": self._error,
        }
