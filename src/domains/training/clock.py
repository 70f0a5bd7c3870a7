# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""External tick sources for trial engines.

Engines never read the wall clock. A host subscribes an engine (usually via
SessionController.attach) to a clock, and the clock calls it with the
elapsed milliseconds at a fixed interval:

- ManualClock: deterministic, advanced explicitly (tests, replays)
- AsyncioClock: cooperative loop on the running asyncio event loop

Both deliver callbacks sequentially on a single thread, so an engine never
sees two events at once.
"""

import asyncio
import logging
import time
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[float], None]
Unsubscribe = Callable[[], None]


class Clock(Protocol):
    """Anything that can deliver periodic ticks."""

    interval_ms: float

    def on_tick(self, callback: TickCallback) -> Unsubscribe:
        """Subscribe to ticks; returns a function that unsubscribes."""
        ...


class _Subscribers:
    """Ordered callback list shared by the clock implementations."""

    def __init__(self) -> None:
        self._callbacks: list[TickCallback] = []

    def add(self, callback: TickCallback) -> Unsubscribe:
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def fire(self, delta_ms: float) -> None:
        # Copy: callbacks may unsubscribe while we iterate
        for callback in list(self._callbacks):
            callback(delta_ms)

    def __len__(self) -> int:
        return len(self._callbacks)


class ManualClock:
    """Clock advanced explicitly by the caller.

    Example:
        >>> clock = ManualClock(interval_ms=100)
        >>> clock.on_tick(engine.tick)
        >>> clock.advance(1000)  # ten ticks of 100 ms
    """

    def __init__(self, interval_ms: float = 100) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.interval_ms = interval_ms
        self.elapsed_ms = 0.0
        self._subscribers = _Subscribers()

    def on_tick(self, callback: TickCallback) -> Unsubscribe:
        return self._subscribers.add(callback)

    def advance(self, ms: float) -> int:
        """Advance time, firing one tick per interval and one for the rest.

        Returns:
            Number of ticks fired.
        """
        ticks = 0
        remaining = ms
        while remaining > 0:
            step = min(self.interval_ms, remaining)
            remaining -= step
            self.elapsed_ms += step
            self._subscribers.fire(step)
            ticks += 1
        return ticks

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)


class AsyncioClock:
    """Clock driven by the running asyncio event loop.

    Deltas are measured with a monotonic timer so late wake-ups are not
    lost. The loop runs until ``stop()`` is called or ``duration_ms`` has
    elapsed.
    """

    def __init__(
        self,
        interval_ms: float = 100,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.interval_ms = interval_ms
        self._timer = timer
        self._subscribers = _Subscribers()
        self._running = False

    def on_tick(self, callback: TickCallback) -> Unsubscribe:
        return self._subscribers.add(callback)

    @property
    def running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Stop the loop after the current tick."""
        self._running = False

    async def run(self, duration_ms: float | None = None) -> float:
        """Deliver ticks until stopped.

        Args:
            duration_ms: Optional total time after which the loop ends.

        Returns:
            Total milliseconds delivered to subscribers.
        """
        self._running = True
        delivered = 0.0
        last = self._timer()
        logger.debug("Asyncio clock started (interval=%sms)", self.interval_ms)
        try:
            while self._running:
                await asyncio.sleep(self.interval_ms / 1000.0)
                now = self._timer()
                delta = (now - last) * 1000.0
                last = now
                if duration_ms is not None:
                    delta = min(delta, duration_ms - delivered)
                if delta > 0:
                    delivered += delta
                    self._subscribers.fire(delta)
                if duration_ms is not None and delivered >= duration_ms:
                    break
        finally:
            self._running = False
            logger.debug("Asyncio clock stopped after %.0fms", delivered)
        return delivered
