"""Frame schedulers that drive ``Animation.play()``.

A scheduler owns at most one outstanding frame request. The engine asks for
the next frame only after the current one has been processed, so frame
updates never overlap.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any, Callable, Optional, Protocol


FrameCallback = Callable[[], None]

# ~60 frames per second
DEFAULT_FRAME_INTERVAL_MS = 1000.0 / 60


class FrameScheduler(Protocol):
    """Host timer the play loop runs on."""

    def now(self) -> float:
        """Current wall-clock time in milliseconds."""
        ...

    def request_frame(self, callback: FrameCallback) -> Any:
        """Schedule ``callback`` for the next frame and return a handle."""
        ...

    def cancel_frame(self, handle: Any) -> None:
        """Cancel a pending frame; unknown or stale handles are ignored."""
        ...


class ManualFrameScheduler:
    """Scheduler driven by the host, with a virtual clock.

    Usage:
        scheduler = ManualFrameScheduler()
        animation = Animation(layers, adapter, scheduler=scheduler)
        animation.play()
        scheduler.advance(250)   # 250ms pass, one frame runs
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._clock = float(start_ms)
        self._ids = itertools.count(1)
        self._pending: Optional[tuple[int, FrameCallback]] = None

    def now(self) -> float:
        return self._clock

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._pending = (handle, callback)
        return handle

    def cancel_frame(self, handle: Any) -> None:
        if self._pending and self._pending[0] == handle:
            self._pending = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def advance(self, ms: float) -> bool:
        """Move the clock by ``ms`` and run the pending frame, if any."""
        self._clock += ms
        return self.run_frame()

    def run_frame(self) -> bool:
        """Run the pending frame without moving the clock."""
        if self._pending is None:
            return False
        _, callback = self._pending
        self._pending = None
        callback()
        return True

    def run_frames(self, count: int, interval_ms: float = DEFAULT_FRAME_INTERVAL_MS) -> int:
        """Advance ``count`` frames of ``interval_ms``; stop early if idle."""
        ran = 0
        for _ in range(count):
            if not self.advance(interval_ms):
                break
            ran += 1
        return ran


class AsyncioFrameScheduler:
    """Scheduler running frames on an asyncio event loop."""

    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        frame_interval_ms: float = DEFAULT_FRAME_INTERVAL_MS,
    ) -> None:
        self._loop = loop
        self.frame_interval_ms = frame_interval_ms

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time() * 1000

    def request_frame(self, callback: FrameCallback) -> asyncio.TimerHandle:
        return self.loop.call_later(self.frame_interval_ms / 1000, callback)

    def cancel_frame(self, handle: Any) -> None:
        if handle is not None:
            handle.cancel()
