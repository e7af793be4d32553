"""
Demo Step Sequence Tests

Tests cover the sequence the host plays:
1. Color order inside an iteration
2. Index passed to every effect
3. Returned value per iteration
4. Pause at startup and single-step review
5. Failure inside the composite step
"""

import pytest
import asyncio
import random
import sys
import os
from unittest.mock import Mock, call

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.stepper import ControlState, ControlSurface, Sequencer
from step_sequences import build_demo_sequence


COLORS = ["red", "green", "blue", "yellow", "brown"]


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def fast_state():
    """Unpaused state with no delays"""
    return ControlState(delay_ms=0, paused=False, check_interval_ms=1,
                        normal_delay_ms=0, fast_delay_ms=0)


@pytest.fixture
def sink():
    return Mock()


# ============================================================
# Sequence Tests
# ============================================================

class TestDemoSequence:
    """The demo graph played by the Sequencer"""

    @pytest.mark.asyncio
    async def test_color_order_per_iteration(self, fast_state, sink):
        """red, green, blue, yellow, brown for every index in turn"""
        demo = build_demo_sequence(fast_state, sink, work_ms=0)
        await Sequencer().run(demo.perform, max_iterations=3)

        expected = [call(color, i) for i in range(3) for color in COLORS]
        assert sink.apply_effect.call_args_list == expected

    @pytest.mark.asyncio
    async def test_returns_random_and_index(self, fast_state, sink):
        """The returning step hands back (random float, index)"""
        demo = build_demo_sequence(fast_state, sink, work_ms=0, rng=random.Random(7))
        expected_value = random.Random(7).random()

        results = []
        sequencer = Sequencer()
        sequencer.on("iteration_complete", lambda i, r: results.append(r))
        await sequencer.run(demo.perform, max_iterations=1)

        assert results == [(expected_value, 0)]

    @pytest.mark.asyncio
    async def test_composite_step_returns_children(self, fast_state, sink):
        """The blue/yellow composite resolves to its children's results"""
        demo = build_demo_sequence(fast_state, sink, work_ms=0)
        assert await demo.composite(4) == (None, None)
        assert sink.apply_effect.call_args_list == [call("blue", 4), call("yellow", 4)]

    @pytest.mark.asyncio
    async def test_steps_reused_across_iterations(self, fast_state, sink):
        """Building once gives the same Step objects for every run"""
        demo = build_demo_sequence(fast_state, sink, work_ms=0)
        simple = demo.simple
        await Sequencer().run(demo.perform, max_iterations=2)
        assert demo.simple is simple

    @pytest.mark.asyncio
    async def test_sink_failure_aborts(self, fast_state):
        """An effect failure inside the composite step stops the run"""
        def apply_effect(color, index):
            if color == "yellow" and index == 1:
                raise IOError("node offline")

        sink = Mock()
        sink.apply_effect.side_effect = apply_effect
        demo = build_demo_sequence(fast_state, sink, work_ms=0)

        with pytest.raises(IOError):
            await Sequencer().run(demo.perform, max_iterations=5)

        indices = [c[0][1] for c in sink.apply_effect.call_args_list]
        assert max(indices) == 1
        assert sink.apply_effect.call_args_list[-1] == call("yellow", 1)


class TestDemoControl:
    """Starting paused and stepping through"""

    @pytest.mark.asyncio
    async def test_starts_paused_until_play(self, sink):
        """Nothing is painted until play()"""
        state = ControlState(delay_ms=0, paused=True, check_interval_ms=5,
                             normal_delay_ms=0, fast_delay_ms=0)
        controls = ControlSurface(state)
        demo = build_demo_sequence(state, sink, work_ms=0)

        task = asyncio.create_task(Sequencer().run(demo.perform, max_iterations=1))
        await asyncio.sleep(0.05)
        sink.apply_effect.assert_not_called()

        controls.play()
        assert await asyncio.wait_for(task, timeout=2.0) == 1
        assert sink.apply_effect.call_count == 5

    @pytest.mark.asyncio
    async def test_single_step_review(self, sink):
        """Each grant lets exactly one step through"""
        state = ControlState(delay_ms=0, paused=True, check_interval_ms=5,
                             normal_delay_ms=0, fast_delay_ms=0)
        controls = ControlSurface(state)
        demo = build_demo_sequence(state, sink, work_ms=0)
        task = asyncio.create_task(Sequencer().run(demo.perform, max_iterations=1))

        controls.step_once()
        await asyncio.sleep(0.05)
        assert sink.apply_effect.call_args_list == [call("red", 0)]

        controls.step_once()
        await asyncio.sleep(0.05)
        assert sink.apply_effect.call_args_list == [call("red", 0), call("green", 0)]

        # The composite step itself takes one grant, then blue
        controls.step_once()
        controls.step_once()
        await asyncio.sleep(0.05)
        assert sink.apply_effect.call_args_list[-1] == call("blue", 0)

        controls.play()
        await asyncio.wait_for(task, timeout=2.0)
        assert sink.apply_effect.call_count == 5
