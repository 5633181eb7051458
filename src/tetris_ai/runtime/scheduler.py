from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, List, Optional, Protocol, Tuple


Callback = Callable[[], None]

_TOLERANCE = 1e-9


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callback) -> TimerHandle: ...

    def call_every(self, interval: float, callback: Callback) -> TimerHandle: ...


class _ManualTimer:
    def __init__(self, callback: Callback, interval: Optional[float]) -> None:
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock. Nothing fires until `advance` moves time forward.

    Due callbacks run on the caller's thread in time order (ties in
    scheduling order).
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, _ManualTimer]] = []
        self._seq = itertools.count()

    def _push(self, due: float, timer: _ManualTimer) -> None:
        heapq.heappush(self._queue, (due, next(self._seq), timer))

    def call_later(self, delay: float, callback: Callback) -> _ManualTimer:
        timer = _ManualTimer(callback, None)
        self._push(self.now + delay, timer)
        return timer

    def call_every(self, interval: float, callback: Callback) -> _ManualTimer:
        if interval <= 0:
            raise ValueError("interval must be positive")
        timer = _ManualTimer(callback, interval)
        self._push(self.now + interval, timer)
        return timer

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target + _TOLERANCE:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now = due
            if timer.interval is not None:
                self._push(due + timer.interval, timer)
            timer.callback()
        self.now = max(self.now, target)

    def pending(self) -> int:
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)


class _AsyncioTimer:
    def __init__(self, loop: asyncio.AbstractEventLoop, delay: float, callback: Callback,
                 repeat: bool) -> None:
        self._loop = loop
        self._delay = delay
        self._callback = callback
        self._repeat = repeat
        self.cancelled = False
        self._handle = loop.call_later(delay, self._fire)

    def _fire(self) -> None:
        if self.cancelled:
            return
        if self._repeat:
            self._handle = self._loop.call_later(self._delay, self._fire)
        self._callback()

    def cancel(self) -> None:
        self.cancelled = True
        self._handle.cancel()


class AsyncioScheduler:
    """Timers on an asyncio event loop; callbacks run on the loop thread."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callback) -> _AsyncioTimer:
        return _AsyncioTimer(self.loop, delay, callback, repeat=False)

    def call_every(self, interval: float, callback: Callback) -> _AsyncioTimer:
        if interval <= 0:
            raise ValueError("interval must be positive")
        return _AsyncioTimer(self.loop, interval, callback, repeat=True)
