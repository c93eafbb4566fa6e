"""Light maps: per-subtile colours spread out from open sky by repeated blurring."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Sequence, Tuple

from .geometry import Rect

SUBDIVISION = 8
LIGHT_EPSILON = 0.0185

# Subdivision -> (decay through solid tiles, decay through air, decay steps).
_DECAY_TABLE = {
    8: (0.92, 0.975, 24),
    4: (0.84, 0.942, 12),
}
_DEFAULT_DECAY = (0.74, 0.935, 7)

Vec3 = Tuple[float, float, float]


def light_decay(solid: bool) -> float:
    """Factor light keeps when it passes one subtile, solid or open."""
    solid_decay, air_decay, _steps = _DECAY_TABLE.get(SUBDIVISION, _DEFAULT_DECAY)
    return solid_decay if solid else air_decay


def light_decay_steps() -> int:
    """How many tiles light travels before it has faded away."""
    return _DECAY_TABLE.get(SUBDIVISION, _DEFAULT_DECAY)[2]


def _to_byte(value: float) -> int:
    return max(0, min(255, int(value * 255.0)))


@dataclass(frozen=True)
class Color:
    """An 8-bit RGBA colour."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 0xFF

    @classmethod
    def from_floats(cls, color: Sequence[float]) -> "Color":
        """Quantise a colour with channels in ``[0, 1]``."""
        r, g, b = color
        return cls(_to_byte(r), _to_byte(g), _to_byte(b))

    def as_floats(self) -> Vec3:
        return (self.r / 255.0, self.g / 255.0, self.b / 255.0)


_BLACK = Color()


@dataclass
class LightMapResult:
    """A finished light map of part of the world and where it belongs."""

    colors: List[Color]
    masks: List[bool]
    width: int
    height: int
    offset_x: int = 0
    offset_y: int = 0
    is_complete: bool = False


class LightMap:
    """Colours and solidity masks at ``SUBDIVISION`` cells per tile edge."""

    def __init__(self, tiles_width: int = 0, tiles_height: int = 0) -> None:
        self.width = tiles_width * SUBDIVISION
        self.height = tiles_height * SUBDIVISION
        size = self.width * self.height
        self.colors: List[Color] = [_BLACK] * size
        self.masks: List[bool] = [False] * size

    def __len__(self) -> int:
        return self.width * self.height

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self):
            raise IndexError(f"light map index {index} out of range")

    def get_color(self, index: int) -> Vec3:
        """Colour at ``index``; black outside the map."""
        if not 0 <= index < len(self):
            return (0.0, 0.0, 0.0)
        return self.colors[index].as_floats()

    def get_color_at(self, x: int, y: int) -> Vec3:
        return self.get_color(y * self.width + x)

    def set_color(self, index: int, color: Sequence[float]) -> None:
        self._check(index)
        self.colors[index] = Color.from_floats(color)

    def set_color_at(self, x: int, y: int, color: Sequence[float]) -> None:
        self.set_color(y * self.width + x, color)

    def get_mask(self, index: int) -> bool:
        """Whether the cell at ``index`` is solid; false outside the map."""
        if not 0 <= index < len(self):
            return False
        return self.masks[index]

    def get_mask_at(self, x: int, y: int) -> bool:
        return self.get_mask(y * self.width + x)

    def set_mask(self, index: int, mask: bool) -> None:
        self._check(index)
        self.masks[index] = bool(mask)

    def set_mask_at(self, x: int, y: int, mask: bool) -> None:
        self.set_mask(y * self.width + x, mask)

    def apply(self, result: LightMapResult) -> None:
        """Copy a computed area into this map at its offset, clipped to the map."""
        x0 = max(0, result.offset_x)
        x1 = min(self.width, result.offset_x + result.width)
        if x0 >= x1:
            return
        count = x1 - x0
        for row in range(result.height):
            y = result.offset_y + row
            if not 0 <= y < self.height:
                continue
            src = row * result.width + (x0 - result.offset_x)
            dst = y * self.width + x0
            self.colors[dst:dst + count] = result.colors[src:src + count]
            self.masks[dst:dst + count] = result.masks[src:src + count]


def blur_line(
    lightmap: LightMap,
    start: int,
    end: int,
    stride: int,
    prev_light: Sequence[float],
    prev_decay: float,
) -> Tuple[Vec3, float]:
    """Carry light along one line from ``start`` to ``end`` inclusive.

    Returns the light and decay left over after the last cell.
    """
    light = list(prev_light)
    for index in range(start, end + stride, stride):
        this_light = list(lightmap.get_color(index))

        light[0] = 0.0 if light[0] < LIGHT_EPSILON else light[0]
        light[1] = 0.0 if light[1] < LIGHT_EPSILON else light[0]
        light[2] = 0.0 if light[2] < LIGHT_EPSILON else light[0]

        for channel in range(3):
            if light[channel] < this_light[channel]:
                light[channel] = this_light[channel]
            else:
                this_light[channel] = light[channel]

        lightmap.set_color(index, this_light)

        light = [value * prev_decay for value in light]
        prev_decay = light_decay(lightmap.get_mask(index))
    return (light[0], light[1], light[2]), prev_decay


def init_area(
    world: Any,
    lightmap: LightMap,
    area: Rect,
    tile_offset: Tuple[int, int] = (0, 0),
) -> None:
    """Seed ``lightmap`` with sky light and solidity for the tiles in ``area``.

    ``area`` is in tiles, relative to the light map; ``tile_offset`` moves it
    into world coordinates.
    """
    min_x = int(area.min_x) * SUBDIVISION
    max_x = int(area.max_x) * SUBDIVISION
    min_y = int(area.min_y) * SUBDIVISION
    max_y = int(area.max_y) * SUBDIVISION
    off_x, off_y = tile_offset
    underground = world.layers.underground * SUBDIVISION
    playable = world.playable_area
    dark = (0.0, 0.0, 0.0)
    lit = (1.0, 1.0, 1.0)

    # Imported here to keep this module free of a cycle with the world data.
    from .geometry import TilePos

    for y in range(min_y, max_y):
        for x in range(min_x, max_x):
            tile = TilePos(off_x + x // SUBDIVISION, off_y + y // SUBDIVISION)
            solid = world.block_exists(tile)
            lightmap.set_mask_at(x, y, solid)

            if off_y * SUBDIVISION + y >= underground:
                lightmap.set_color_at(x, y, dark)
                continue

            if (
                tile.x <= playable.min_x
                or tile.x >= playable.max_x - 1
                or solid
                or world.wall_exists(tile)
            ):
                lightmap.set_color_at(x, y, dark)
            else:
                lightmap.set_color_at(x, y, lit)


def blur_area(
    world: Any,
    lightmap: LightMap,
    area: Rect,
    tile_offset: Tuple[int, int] = (0, 0),
) -> None:
    """Spread light through ``area`` with three rounds of sweeps in all four directions.

    Light entering from the edges is read from the world's own light map.
    """
    min_x = int(area.min_x) * SUBDIVISION
    max_x = int(area.max_x) * SUBDIVISION
    min_y = int(area.min_y) * SUBDIVISION
    max_y = int(area.max_y) * SUBDIVISION
    off_x = tile_offset[0] * SUBDIVISION
    off_y = tile_offset[1] * SUBDIVISION
    source: LightMap = world.lightmap
    width = lightmap.width

    for _ in range(3):
        for y in range(min_y, max_y):
            prev = source.get_color_at(off_x + min_x, off_y + y)
            decay = light_decay(source.get_mask_at(off_x + min_x - 1, off_y + y))
            blur_line(lightmap, y * width + min_x, y * width + max_x - 1, 1, prev, decay)

        for x in range(min_x, max_x):
            prev = source.get_color_at(off_x + x, off_y + min_y)
            decay = light_decay(source.get_mask_at(off_x + x, off_y + min_y - 1))
            blur_line(lightmap, min_y * width + x, (max_y - 1) * width + x, width, prev, decay)

        for y in range(min_y, max_y):
            prev = source.get_color_at(off_x + max_x - 1, off_y + y)
            decay = light_decay(source.get_mask_at(off_x + max_x, off_y + y))
            blur_line(lightmap, y * width + max_x - 1, y * width + min_x, -1, prev, decay)

        for x in range(min_x, max_x):
            prev = source.get_color_at(off_x + x, off_y + max_y - 1)
            decay = light_decay(source.get_mask_at(off_x + x, off_y + max_y))
            blur_line(lightmap, (max_y - 1) * width + x, min_y * width + x, -width, prev, decay)


def compute_area(world: Any, area: Rect) -> LightMapResult:
    """Compute the light of the tiles in ``area`` into a fresh, detached map."""
    tiles_w = int(area.width())
    tiles_h = int(area.height())
    origin = (int(area.min_x), int(area.min_y))
    lightmap = LightMap(tiles_w, tiles_h)
    local = Rect.from_top_left((0, 0), (tiles_w, tiles_h))

    init_area(world, lightmap, local, origin)
    blur_area(world, lightmap, local, origin)

    return LightMapResult(
        colors=lightmap.colors,
        masks=lightmap.masks,
        width=lightmap.width,
        height=lightmap.height,
        offset_x=origin[0] * SUBDIVISION,
        offset_y=origin[1] * SUBDIVISION,
        is_complete=True,
    )


__all__ = [
    "SUBDIVISION",
    "LIGHT_EPSILON",
    "Color",
    "LightMap",
    "LightMapResult",
    "light_decay",
    "light_decay_steps",
    "blur_line",
    "init_area",
    "blur_area",
    "compute_area",
]

_unused = field  # dataclasses.field kept available for result construction helpers