"""Tile storage of a world, with neighbour queries and light map upkeep."""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .autotile import UNMERGED, Tile
from .geometry import Neighbors, Offset, Rect, TilePos
from .lighting import LightMap, LightMapResult, blur_area, compute_area, init_area


@dataclass
class Layers:
    """Depths, in tiles, at which the world's layers begin."""

    surface: int = 0
    underground: int = 0
    cavern: int = 0
    dirt_height: int = 0


class _LightMapTask:
    """A light map area computed on a background thread."""

    def __init__(self, world: "WorldData", area: Rect) -> None:
        self.result: Optional[LightMapResult] = None
        self.error: Optional[BaseException] = None
        self.thread = threading.Thread(target=self._run, args=(world, area), daemon=True)
        self.thread.start()

    def _run(self, world: "WorldData", area: Rect) -> None:
        try:
            self.result = compute_area(world, area)
        except BaseException as exc:  # surfaced again by the waiter
            self.error = exc

    @property
    def is_complete(self) -> bool:
        return self.result is not None and self.result.is_complete


class WorldData:
    """Blocks, walls and light of a rectangular world."""

    def __init__(
        self,
        area: Rect,
        playable_area: Optional[Rect] = None,
        layers: Optional[Layers] = None,
        spawn_point: Tuple[int, int] = (0, 0),
    ) -> None:
        self.area = area
        self.playable_area = playable_area if playable_area is not None else area
        self.layers = layers if layers is not None else Layers()
        self.spawn_point = spawn_point
        width = int(area.width())
        height = int(area.height())
        self.blocks: List[Optional[Tile]] = [None] * (width * height)
        self.walls: List[Optional[Tile]] = [None] * (width * height)
        self.lightmap = LightMap(width, height)
        self.lightmap_tasks: List[_LightMapTask] = []

    def tile_index(self, pos: TilePos) -> int:
        return pos.y * int(self.area.width()) + pos.x

    def is_tilepos_valid(self, pos: TilePos) -> bool:
        return 0 <= pos.x < self.area.width() and 0 <= pos.y < self.area.height()

    def _checked_index(self, pos: TilePos) -> int:
        if not self.is_tilepos_valid(pos):
            raise IndexError(f"tile position {pos} outside the world")
        return self.tile_index(pos)

    def get_block(self, pos: TilePos) -> Optional[Tile]:
        """The block at ``pos``, or ``None`` if empty or outside the world."""
        if not self.is_tilepos_valid(pos):
            return None
        return self.blocks[self.tile_index(pos)]

    def get_wall(self, pos: TilePos) -> Optional[Tile]:
        """The wall at ``pos``, or ``None`` if empty or outside the world."""
        if not self.is_tilepos_valid(pos):
            return None
        return self.walls[self.tile_index(pos)]

    def put_block(self, pos: TilePos, block: Optional[Tile]) -> None:
        """Store ``block`` at ``pos``; ``None`` clears it."""
        self.blocks[self._checked_index(pos)] = block

    def put_wall(self, pos: TilePos, wall: Optional[Tile]) -> None:
        """Store ``wall`` at ``pos``; ``None`` clears it."""
        self.walls[self._checked_index(pos)] = wall

    def block_exists(self, pos: TilePos) -> bool:
        return self.get_block(pos) is not None

    def wall_exists(self, pos: TilePos) -> bool:
        return self.get_wall(pos) is not None

    def get_block_type(self, pos: TilePos):
        block = self.get_block(pos)
        return block.type if block is not None else None

    def block_exists_with_type(self, pos: TilePos, block_type) -> bool:
        block_kind = self.get_block_type(pos)
        return block_kind is not None and block_kind == block_type

    @staticmethod
    def _neighbors(getter: Callable[[TilePos], Optional[Tile]], pos: TilePos) -> Neighbors:
        def at(direction: Offset) -> Optional[Tile]:
            tile = getter(pos.offset(direction))
            return copy.copy(tile) if tile is not None else None

        return Neighbors(
            top=at(Offset.TOP),
            bottom=at(Offset.BOTTOM),
            left=at(Offset.LEFT),
            right=at(Offset.RIGHT),
            top_left=at(Offset.TOP_LEFT),
            top_right=at(Offset.TOP_RIGHT),
            bottom_left=at(Offset.BOTTOM_LEFT),
            bottom_right=at(Offset.BOTTOM_RIGHT),
        )

    def get_block_neighbors(self, pos: TilePos) -> Neighbors:
        """Copies of the eight blocks around ``pos``."""
        return self._neighbors(self.get_block, pos)

    def get_wall_neighbors(self, pos: TilePos) -> Neighbors:
        """Copies of the eight walls around ``pos``."""
        return self._neighbors(self.get_wall, pos)

    def reset_tiles(self, pos: TilePos) -> None:
        """Mark blocks near ``pos`` as needing their merge state worked out again."""
        for y in range(pos.y - 3, pos.y + 3):
            for x in range(pos.x - 3, pos.x + 3):
                block = self.get_block(TilePos(x, y))
                if block is not None:
                    block.is_merged = False
                    block.merge_id = UNMERGED

    def lightmap_init_area(self, area: Rect) -> None:
        init_area(self, self.lightmap, area)

    def lightmap_blur_area_sync(self, area: Rect) -> None:
        blur_area(self, self.lightmap, area)

    def lightmap_update_area_async(self, area: Rect) -> None:
        """Start computing the light of ``area`` on a background thread."""
        self.lightmap_tasks.append(_LightMapTask(self, area))

    def lightmap_tasks_wait(self) -> List[LightMapResult]:
        """Wait for every light task and return the results they produced.

        An error raised inside a task is raised again here.
        """
        for task in self.lightmap_tasks:
            task.thread.join()
        for task in self.lightmap_tasks:
            if task.error is not None:
                raise task.error
        return [task.result for task in self.lightmap_tasks if task.result is not None]