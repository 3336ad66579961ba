"""Per-frame callback scheduling driven by a fixed-rate asyncio loop."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Callable, Iterable, List, Protocol

LOGGER = logging.getLogger(__name__)

FrameCallback = Callable[[], None]


class FrameScheduler(Protocol):
    """Anything that can run a callback on the next rendered frame."""

    def request_frame(self, callback: FrameCallback) -> None:
        ...


class FrameClock:
    """Queue of callbacks run once on the next :meth:`tick`.

    Callbacks requested while a tick is running wait for the following tick,
    so a callback that re-requests itself runs exactly once per frame.
    """

    def __init__(self) -> None:
        self._pending: List[FrameCallback] = []
        self._frame = 0

    @property
    def frame(self) -> int:
        return self._frame

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> None:
        self._pending.append(callback)

    def tick(self) -> int:
        """Run the callbacks queued before this frame; return how many ran."""
        self._frame += 1
        callbacks, self._pending = self._pending, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                LOGGER.exception("Frame callback %r failed", callback)
        return len(callbacks)


async def frame_loop(
    clock: FrameClock,
    frame_hz: float,
    before_frame: Iterable[Callable[[], None]] = (),
) -> None:
    """Tick ``clock`` at ``frame_hz`` until cancelled."""
    if frame_hz <= 0:
        raise ValueError("frame_hz must be greater than zero")
    hooks = list(before_frame)
    frame_interval = 1.0 / frame_hz
    next_frame = perf_counter()
    try:
        while True:
            next_frame += frame_interval
            for hook in hooks:
                hook()
            clock.tick()
            sleep_time = max(0.0, next_frame - perf_counter())
            # Yield every frame, even when running late.
            await asyncio.sleep(sleep_time)
    except asyncio.CancelledError:
        LOGGER.info("Frame loop cancelled after %d frames", clock.frame)
        raise


__all__ = ["FrameCallback", "FrameClock", "FrameScheduler", "frame_loop"]
