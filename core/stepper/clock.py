"""
Clock - Cooperative Delay Primitive

Suspends the calling task for a number of milliseconds. Resolution is
whatever the event loop's timer gives us; there is no cancellation hook.
"""

import asyncio


async def delay(duration_ms: float) -> None:
    """
    Suspend the current task for ``duration_ms`` milliseconds.

    Zero or negative durations do not wait but still yield once to the
    event loop, so other tasks get a turn.
    """
    if duration_ms <= 0:
        await asyncio.sleep(0)
        return
    await asyncio.sleep(duration_ms / 1000.0)
