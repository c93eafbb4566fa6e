"""Cursor pulse animation, FPS readout and hotbar slot selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

MIN_CURSOR_SCALE = 1.0
MAX_CURSOR_SCALE = MIN_CURSOR_SCALE + 0.15
CURSOR_ANIMATION_SPEED = 2.0
CURSOR_FOREGROUND_COLOR: Tuple[float, float, float] = (1.0, 0.08, 0.58)
CURSOR_BACKGROUND_COLOR: Tuple[float, float, float] = (0.9, 0.9, 0.9)

FPS_UPDATE_INTERVAL = 0.5
CELLS_IN_ROW = 10


class AnimationDirection(Enum):
    """Which way the cursor pulse is currently running."""

    BACKWARD = 0
    FORWARD = 1


@dataclass
class CursorAnimation:
    """A cursor that grows and shrinks back and forth between two scales."""

    progress: float = 0.0
    direction: AnimationDirection = AnimationDirection.BACKWARD
    scale: float = MIN_CURSOR_SCALE

    def update(self, delta_seconds: float) -> float:
        """Advance the pulse by ``delta_seconds`` and return the new scale."""
        if self.progress >= 1.0:
            self.direction = AnimationDirection.BACKWARD
        elif self.progress <= 0.0:
            self.direction = AnimationDirection.FORWARD

        step = CURSOR_ANIMATION_SPEED * delta_seconds
        if self.direction is AnimationDirection.BACKWARD:
            self.progress -= step
        else:
            self.progress += step

        self.progress = min(max(self.progress, 0.0), 1.0)
        self.scale = MIN_CURSOR_SCALE + self.progress * (MAX_CURSOR_SCALE - MIN_CURSOR_SCALE)
        return self.scale

    @property
    def brightness(self) -> float:
        """Factor applied to the foreground colour; brighter as the cursor grows."""
        return 0.7 + 0.3 * self.progress

    @property
    def foreground_color(self) -> Tuple[float, float, float]:
        factor = self.brightness
        r, g, b = CURSOR_FOREGROUND_COLOR
        return (r * factor, g * factor, b * factor)


@dataclass
class _RepeatingTimer:
    duration: float
    elapsed: float = 0.0
    just_finished: bool = False

    def set_finished(self) -> None:
        self.elapsed = self.duration

    def tick(self, delta: float) -> bool:
        self.elapsed += delta
        self.just_finished = self.elapsed >= self.duration
        if self.just_finished:
            self.elapsed -= self.duration
            if self.elapsed >= self.duration:
                self.elapsed %= self.duration
        return self.just_finished


@dataclass
class FpsCounter:
    """Frames-per-second text, refreshed at a fixed interval while shown."""

    enabled: bool = False
    update_interval: float = FPS_UPDATE_INTERVAL
    text: str = ""
    _timer: _RepeatingTimer = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.update_interval <= 0:
            raise ValueError("update interval must be positive")
        self._timer = _RepeatingTimer(self.update_interval)
        self._timer.set_finished()

    def toggle(self) -> bool:
        """Show or hide the counter; return whether it is now shown."""
        self.enabled = not self.enabled
        return self.enabled

    def fixed_update(self, delta_seconds: float, fixed_delta: float) -> str:
        """Step the refresh timer and, when it fires, recompute the text."""
        if self.enabled and delta_seconds > 0.0 and self._timer.tick(fixed_delta):
            self.text = str(int(1.0 / delta_seconds))
        return self.text


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def scroll_slot(current: int, scroll: float, cells_in_row: int = CELLS_IN_ROW) -> int:
    """Hotbar slot after one scroll event; scrolling up moves left, wrapping around."""
    if cells_in_row <= 0:
        raise ValueError("cells_in_row must be positive")
    return (current - _sign(scroll)) % cells_in_row


def digit_slot(digit: int) -> int:
    """Hotbar slot chosen by a number key: 1 to 9 pick the first nine, 0 the tenth."""
    if not 0 <= digit <= 9:
        raise ValueError(f"not a digit key: {digit}")
    return (digit - 1) % 10