"""Countdown clock for both players."""

import time
from dataclasses import dataclass
from typing import Callable, Optional

from src.core.shared_types import Color

DEFAULT_CLOCK_SECONDS = 600.0


@dataclass(frozen=True)
class ClockSnapshot:
    white_remaining: float
    black_remaining: float
    active_color: Optional[Color]
    is_running: bool


class GameClock:
    """
    Dual chess clock tracking remaining time for both players.
    ---

    Only the clock of the side to move runs. The clock can be paused (ex. while the engine is "thinking")
    and resumed for the same side. Uses a monotonic time source, which tests can replace.
    """

    def __init__(
        self,
        initial_seconds: float = DEFAULT_CLOCK_SECONDS,
        time_source: Callable[[], float] = time.monotonic,
    ) -> None:
        self.initial_seconds = initial_seconds
        self._time_source = time_source
        self._remaining: dict[Color, float] = {}
        self._active_color: Optional[Color] = None
        self._last_tick = 0.0
        self._running = False
        self.reset()

    def reset(self) -> None:
        self._remaining = {
            Color.WHITE: self.initial_seconds,
            Color.BLACK: self.initial_seconds,
        }
        self._active_color = None
        self._running = False

    def start(self, color: Color) -> None:
        self._active_color = color
        self._last_tick = self._time_source()
        self._running = True

    def stop(self) -> None:
        if self._running:
            self._consume_elapsed()
            self._running = False

    def pause(self) -> None:
        """Stop the countdown but remember whose clock it is."""
        self.stop()

    def resume(self) -> None:
        if self._active_color is not None and not self._running:
            self.start(self._active_color)

    def switch(self) -> None:
        """Stop current player's clock, start the other player's."""
        if self._active_color is None:
            return
        if self._running:
            self._consume_elapsed()
        self._active_color = self._active_color.opponent
        self._last_tick = self._time_source()

    def remaining(self, color: Color) -> float:
        if self._running and self._active_color == color:
            elapsed = self._time_source() - self._last_tick
            return max(0.0, self._remaining[color] - elapsed)
        return max(0.0, self._remaining[color])

    def is_flag_fallen(self, color: Color) -> bool:
        return self.remaining(color) <= 0.0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def active_color(self) -> Optional[Color]:
        return self._active_color

    def snapshot(self) -> ClockSnapshot:
        return ClockSnapshot(
            white_remaining=self.remaining(Color.WHITE),
            black_remaining=self.remaining(Color.BLACK),
            active_color=self._active_color,
            is_running=self._running,
        )

    def _consume_elapsed(self) -> None:
        if self._active_color is None:
            return
        now = self._time_source()
        elapsed = now - self._last_tick
        self._remaining[self._active_color] = max(
            0.0, self._remaining[self._active_color] - elapsed
        )
        self._last_tick = now


def format_time(seconds: float) -> str:
    """m:ss, rounding down to whole seconds: 600 --> '10:00'"""
    whole_seconds = int(seconds)
    return f"{whole_seconds // 60}:{whole_seconds % 60:02d}"
