"""Tile positions, rectangles and neighbourhoods on the world grid."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, Tuple, TypeVar

T = TypeVar("T")

RENDER_CHUNK_SIZE = 50


class Offset(Enum):
    """Direction to a neighbouring tile; y grows downwards."""

    LEFT = (-1, 0)
    RIGHT = (1, 0)
    TOP = (0, -1)
    BOTTOM = (0, 1)
    TOP_LEFT = (-1, -1)
    TOP_RIGHT = (1, -1)
    BOTTOM_LEFT = (-1, 1)
    BOTTOM_RIGHT = (1, 1)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]


@dataclass(frozen=True)
class TilePos:
    """Integer position of a tile in the world."""

    x: int
    y: int

    def offset(self, direction: Offset) -> "TilePos":
        """Return the position of the neighbour in ``direction``."""
        return TilePos(self.x + direction.dx, self.y + direction.dy)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle spanning ``[min, max)`` on both axes."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_center_half_size(
        cls, center: Tuple[float, float], half_size: Tuple[float, float]
    ) -> "Rect":
        cx, cy = center
        hx, hy = half_size
        return cls(cx - hx, cy - hy, cx + hx, cy + hy)

    @classmethod
    def from_top_left(
        cls, top_left: Tuple[float, float], size: Tuple[float, float]
    ) -> "Rect":
        x, y = top_left
        w, h = size
        return cls(x, y, x + w, y + h)

    def width(self) -> float:
        return self.max_x - self.min_x

    def height(self) -> float:
        return self.max_y - self.min_y

    def contains(self, x: float, y: float) -> bool:
        """True when the point lies inside; the max edges are excluded."""
        return self.min_x <= x < self.max_x and self.min_y <= y < self.max_y

    def clamp(self, other: "Rect") -> "Rect":
        """Restrict this rectangle to the bounds of ``other``."""
        return Rect(
            max(self.min_x, other.min_x),
            max(self.min_y, other.min_y),
            min(self.max_x, other.max_x),
            min(self.max_y, other.max_y),
        )

    def scaled(self, factor: float) -> "Rect":
        """Multiply both corners by ``factor``."""
        return Rect(
            self.min_x * factor,
            self.min_y * factor,
            self.max_x * factor,
            self.max_y * factor,
        )


@dataclass
class Neighbors(Generic[T]):
    """The eight tiles surrounding a position; ``None`` where there is none."""

    top: Optional[T] = None
    bottom: Optional[T] = None
    left: Optional[T] = None
    right: Optional[T] = None
    top_left: Optional[T] = None
    top_right: Optional[T] = None
    bottom_left: Optional[T] = None
    bottom_right: Optional[T] = None

    def any_missing(self) -> bool:
        """True when at least one neighbour is absent."""
        return any(
            value is None
            for value in (
                self.top,
                self.bottom,
                self.left,
                self.right,
                self.top_left,
                self.top_right,
                self.bottom_left,
                self.bottom_right,
            )
        )


def chunk_pos(pos: TilePos, chunk_size: int = RENDER_CHUNK_SIZE) -> Tuple[int, int]:
    """Index of the render chunk holding ``pos``."""
    return pos.x // chunk_size, pos.y // chunk_size


def camera_fov(camera_pos: Tuple[float, float], projection_area: Rect) -> Rect:
    """World-space area seen by a camera at ``camera_pos``."""
    cx, cy = camera_pos
    return Rect(
        cx + projection_area.min_x,
        cy + projection_area.min_y,
        cx + projection_area.max_x,
        cy + projection_area.max_y,
    )