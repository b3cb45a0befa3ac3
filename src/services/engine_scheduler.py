"""
Cancellable "thinking" delay before an engine move.

The engine answers after a random delay. While it waits, the game may get paused or reset: the pending action must then be
thrown away instead of being played on a board that no longer exists.
Every scheduled action carries a generation number; scheduling again or cancelling bumps the generation, and an action
that fires with an outdated generation does nothing.
"""

import logging
import random
import threading
from typing import Any, Callable, Optional, Protocol

_log = logging.getLogger(__name__)


class Timer(Protocol):
    """The parts of threading.Timer we use"""

    daemon: bool

    def start(self) -> None: ...
    def cancel(self) -> None: ...


TimerFactory = Callable[..., Timer]


class EngineMoveScheduler:
    """Holds at most one pending engine action."""

    def __init__(
        self,
        lock: threading.RLock,
        delay_range: tuple[float, float] = (0.8, 1.5),
        rng: Optional[random.Random] = None,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        # NOTE: share the lock of the owner (the Match), so a cancellation can never interleave with a firing action
        self._lock = lock
        self.delay_range = delay_range
        self._rng = rng or random.Random()
        self._timer_factory = timer_factory
        self._timer: Optional[Timer] = None
        self._generation = 0

    @property
    def is_pending(self) -> bool:
        return self._timer is not None

    def schedule(self, action: Callable[[], Any]) -> float:
        """Run `action` after the thinking delay. Replaces any action still pending. Returns the chosen delay."""
        with self._lock:
            self._cancel_pending()
            self._generation += 1
            delay = self._rng.uniform(*self.delay_range)
            timer = self._timer_factory(
                delay, self._fire, args=(self._generation, action)
            )
            timer.daemon = True
            self._timer = timer
            timer.start()
            _log.debug("Engine move %d scheduled in %.2fs", self._generation, delay)
            return delay

    def cancel(self) -> bool:
        """Discard the pending action. Returns True if there was one."""
        with self._lock:
            was_pending = self.is_pending
            self._cancel_pending()
            self._generation += 1
            return was_pending

    def _cancel_pending(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, generation: int, action: Callable[[], Any]) -> None:
        with self._lock:
            if generation != self._generation:
                _log.debug("Discarding stale engine move %d", generation)
                return
            self._timer = None
            action()
