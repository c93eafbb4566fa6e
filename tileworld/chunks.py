"""Render chunks: per-chunk tile instance lists and the manager that keeps them in view."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, Hashable, List, Set, Tuple

from .geometry import RENDER_CHUNK_SIZE, Rect, TilePos, chunk_pos

TILE_SIZE = 16.0

TILE_TYPE_BLOCK = 0
TILE_TYPE_WALL = 1

ChunkIndex = Tuple[int, int]


def pack_tile_data(tile_id: int, tile_type: int) -> int:
    """Pack a tile kind into 16 bits: 6 low bits of type, 10 high bits of id."""
    return ((tile_type & 0x3F) | (tile_id << 6)) & 0xFFFF


def _type_id(tile_type: Hashable) -> int:
    value = getattr(tile_type, "value", tile_type)
    return int(value)


@dataclass(frozen=True)
class ChunkInstance:
    """One tile to draw: its cell inside the chunk, atlas cell and packed kind."""

    position: Tuple[float, float]
    atlas_pos: Tuple[float, float]
    world_pos: Tuple[float, float]
    tile_data: int


class RenderChunk:
    """A square of tiles whose block and wall instances are rebuilt when dirty."""

    def __init__(self, index: ChunkIndex, world_pos: Tuple[float, float], world: Any) -> None:
        self.index = (int(index[0]), int(index[1]))
        self.world_pos = (
            world_pos[0] * RENDER_CHUNK_SIZE,
            world_pos[1] * RENDER_CHUNK_SIZE,
        )
        self.block_instances: List[ChunkInstance] = []
        self.wall_instances: List[ChunkInstance] = []
        self.blocks_count = 0
        self.walls_count = 0
        self.blocks_dirty = True
        self.walls_dirty = True
        self.build_mesh(world)

    def _instances(self, getter, tile_type: int) -> List[ChunkInstance]:
        base_x = self.index[0] * RENDER_CHUNK_SIZE
        base_y = self.index[1] * RENDER_CHUNK_SIZE
        instances = []
        for y in range(RENDER_CHUNK_SIZE):
            for x in range(RENDER_CHUNK_SIZE):
                tile = getter(TilePos(base_x + x, base_y + y))
                if tile is None:
                    continue
                instances.append(
                    ChunkInstance(
                        position=(float(x), float(y)),
                        atlas_pos=(float(tile.atlas_pos.x), float(tile.atlas_pos.y)),
                        world_pos=self.world_pos,
                        tile_data=pack_tile_data(_type_id(tile.type), tile_type),
                    )
                )
        return instances

    def build_mesh(self, world: Any) -> None:
        """Rebuild the instance lists whose tiles have changed."""
        if self.blocks_dirty:
            self.block_instances = self._instances(world.get_block, TILE_TYPE_BLOCK)
            self.blocks_count = len(self.block_instances)
        if self.walls_dirty:
            self.wall_instances = self._instances(world.get_wall, TILE_TYPE_WALL)
            self.walls_count = len(self.wall_instances)
        self.blocks_dirty = False
        self.walls_dirty = False

    def dirty(self) -> bool:
        return self.blocks_dirty or self.walls_dirty

    def blocks_empty(self) -> bool:
        return self.blocks_count == 0

    def walls_empty(self) -> bool:
        return self.walls_count == 0

    def _release(self) -> None:
        self.block_instances = []
        self.wall_instances = []


def chunk_range(camera_fov: Rect, world_size: Tuple[int, int], expand: int = 0) -> Rect:
    """Chunk indices covering ``camera_fov``, widened by ``expand`` and clipped to the world."""
    span = TILE_SIZE * RENDER_CHUNK_SIZE
    left = right = top = bottom = 0

    if camera_fov.min_x > TILE_SIZE:
        left = math.floor((camera_fov.min_x - TILE_SIZE) / span)
        if left >= expand:
            left -= expand
    if camera_fov.max_x > 0.0:
        right = math.ceil((camera_fov.max_x + TILE_SIZE) / span) + expand
    if camera_fov.min_y > TILE_SIZE:
        top = math.floor((camera_fov.min_y - TILE_SIZE) / span)
        if top >= expand:
            top -= expand
    if camera_fov.max_y > 0.0:
        bottom = math.ceil((camera_fov.max_y + TILE_SIZE) / span) + expand

    max_x = (int(world_size[0]) + RENDER_CHUNK_SIZE - 1) // RENDER_CHUNK_SIZE
    max_y = (int(world_size[1]) + RENDER_CHUNK_SIZE - 1) // RENDER_CHUNK_SIZE
    right = min(right, max_x)
    bottom = min(bottom, max_y)

    return Rect(left, top, right, bottom)


class ChunkManager:
    """Keeps render chunks around the camera built and retires the ones out of range."""

    def __init__(self) -> None:
        self.render_chunks: Dict[ChunkIndex, RenderChunk] = {}
        self.visible_chunks: Set[ChunkIndex] = set()
        self.chunks_to_destroy: Deque[RenderChunk] = deque()

    def manage_chunks(self, world: Any, camera_fov: Rect) -> None:
        """Retire far chunks, rebuild dirty ones and create newly visible ones."""
        world_size = (int(world.area.width()), int(world.area.height()))
        keep_range = chunk_range(camera_fov, world_size, 2)
        render_range = chunk_range(camera_fov, world_size)

        for index in list(self.render_chunks):
            chunk = self.render_chunks[index]
            if not keep_range.contains(*index):
                self.chunks_to_destroy.append(chunk)
                del self.render_chunks[index]
                continue
            if chunk.dirty():
                chunk.build_mesh(world)

        self.visible_chunks.clear()
        for y in range(int(render_range.min_y), int(render_range.max_y)):
            for x in range(int(render_range.min_x), int(render_range.max_x)):
                index = (x, y)
                self.visible_chunks.add(index)
                if index not in self.render_chunks:
                    world_pos = (x * TILE_SIZE, y * TILE_SIZE)
                    self.render_chunks[index] = RenderChunk(index, world_pos, world)

    def set_blocks_changed(self, pos: TilePos) -> None:
        chunk = self.render_chunks.get(chunk_pos(pos))
        if chunk is not None:
            chunk.blocks_dirty = True

    def set_walls_changed(self, pos: TilePos) -> None:
        chunk = self.render_chunks.get(chunk_pos(pos))
        if chunk is not None:
            chunk.walls_dirty = True

    def destroy_hidden_chunks(self) -> List[RenderChunk]:
        """Release every retired chunk, newest first, and return them."""
        destroyed = []
        while self.chunks_to_destroy:
            chunk = self.chunks_to_destroy.pop()
            chunk._release()
            destroyed.append(chunk)
        return destroyed