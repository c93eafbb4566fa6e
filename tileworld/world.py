"""A world of blocks and walls that keeps sprites, chunks and light up to date."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional

from .autotile import AutoTiler, Tile
from .chunks import ChunkManager
from .geometry import Neighbors, Offset, Rect, TilePos
from .lighting import light_decay_steps
from .tilerules import AtlasPos
from .worlddata import Layers, WorldData

DIG_ANIMATION_SPEED = 8.0


@dataclass
class BlockDigAnimation:
    """A block popping out of the world after it was dug."""

    tile_pos: TilePos
    atlas_pos: AtlasPos
    progress: float
    scale: float
    block_type: Hashable


@dataclass
class TileCracks:
    """Crack overlay drawn on a tile that is being dug."""

    tile_pos: TilePos
    cracks_index: int


class World:
    """Edits tiles of a :class:`WorldData` and keeps everything derived from them in step."""

    def __init__(self, data: WorldData, autotiler: Optional[AutoTiler] = None) -> None:
        self._data = data
        self._autotiler = autotiler if autotiler is not None else AutoTiler()
        self._chunk_manager = ChunkManager()
        self._block_dig_animations: List[BlockDigAnimation] = []
        self._tile_cracks: Dict[TilePos, TileCracks] = {}
        self._changed = False

    @property
    def data(self) -> WorldData:
        return self._data

    @property
    def chunk_manager(self) -> ChunkManager:
        return self._chunk_manager

    @property
    def autotiler(self) -> AutoTiler:
        return self._autotiler

    @property
    def is_changed(self) -> bool:
        """True when a tile changed since the last :meth:`update`."""
        return self._changed

    @property
    def area(self) -> Rect:
        return self._data.area

    @property
    def playable_area(self) -> Rect:
        return self._data.playable_area

    @property
    def spawn_point(self):
        return self._data.spawn_point

    @property
    def layers(self) -> Layers:
        return self._data.layers

    @property
    def block_dig_animations(self) -> List[BlockDigAnimation]:
        return list(self._block_dig_animations)

    @property
    def tile_cracks(self) -> Dict[TilePos, TileCracks]:
        return dict(self._tile_cracks)

    def get_block(self, pos: TilePos) -> Optional[Tile]:
        return self._data.get_block(pos)

    def get_wall(self, pos: TilePos) -> Optional[Tile]:
        return self._data.get_wall(pos)

    def get_block_type(self, pos: TilePos):
        return self._data.get_block_type(pos)

    def block_exists(self, pos: TilePos) -> bool:
        return self._data.block_exists(pos)

    def block_exists_with_type(self, pos: TilePos, block_type) -> bool:
        return self._data.block_exists_with_type(pos, block_type)

    def wall_exists(self, pos: TilePos) -> bool:
        return self._data.wall_exists(pos)

    def get_block_neighbors(self, pos: TilePos) -> Neighbors:
        return self._data.get_block_neighbors(pos)

    def get_wall_neighbors(self, pos: TilePos) -> Neighbors:
        return self._data.get_wall_neighbors(pos)

    def _refresh_light(self, pos: TilePos) -> None:
        steps = light_decay_steps()
        area = Rect.from_center_half_size((pos.x, pos.y), (steps, steps)).clamp(
            self._data.playable_area
        )
        self._data.lightmap_update_area_async(area)

    def set_block(self, pos: TilePos, block: Tile) -> None:
        """Store a copy of ``block`` at ``pos``; positions outside the world are ignored."""
        if not self._data.is_tilepos_valid(pos):
            return
        self._data.put_block(pos, copy.copy(block))
        self._changed = True
        self._refresh_light(pos)
        self._chunk_manager.set_blocks_changed(pos)
        self._update_neighbors(pos)

    def place_block(self, pos: TilePos, block_type: Hashable) -> None:
        """Put a fresh block of ``block_type`` at ``pos`` and re-tile around it."""
        if not self._data.is_tilepos_valid(pos):
            return
        self._data.put_block(pos, Tile(block_type))
        self._data.reset_tiles(pos)
        self._update_neighbors(pos)
        self._changed = True
        self._refresh_light(pos)
        self._chunk_manager.set_blocks_changed(pos)

    def remove_block(self, pos: TilePos) -> None:
        """Clear the block at ``pos``; positions outside the world are ignored."""
        if not self._data.is_tilepos_valid(pos):
            return
        if self._data.block_exists(pos):
            self._chunk_manager.set_blocks_changed(pos)
        self._data.put_block(pos, None)
        self._changed = True
        self._refresh_light(pos)
        self._data.reset_tiles(pos)
        self._update_neighbors(pos)

    def update_block(self, pos: TilePos, new_type: Hashable, new_variant: int) -> None:
        """Change the type and variant of the existing block at ``pos``."""
        block = self._data.get_block(pos)
        if block is None:
            raise LookupError(f"no block at {pos}")
        block.type = new_type
        block.variant = new_variant
        self._changed = True
        self._data.reset_tiles(pos)
        self._update_neighbors(pos)

    def set_wall(self, pos: TilePos, wall_type: Hashable) -> None:
        """Put a fresh wall of ``wall_type`` at ``pos``; positions outside are ignored."""
        if not self._data.is_tilepos_valid(pos):
            return
        self._data.put_wall(pos, Tile(wall_type))
        self._changed = True
        self._refresh_light(pos)
        self._update_neighbors(pos)
        self._chunk_manager.set_walls_changed(pos)

    def update_tile_sprite_index(self, pos: TilePos) -> None:
        """Re-pick the sprites of the block and wall at ``pos``."""
        block = self._data.get_block(pos)
        wall = self._data.get_wall(pos)

        if block is not None:
            self._autotiler.update_block(block, self._data.get_block_neighbors(pos))
            self._chunk_manager.set_blocks_changed(pos)

        if wall is not None:
            self._autotiler.update_wall(wall, self._data.get_wall_neighbors(pos))
            self._chunk_manager.set_walls_changed(pos)

    def _update_neighbors(self, center: TilePos) -> None:
        for y in range(center.y - 3, center.y + 3):
            for x in range(center.x - 3, center.x + 3):
                pos = TilePos(x, y)
                for direction in (Offset.LEFT, Offset.RIGHT, Offset.TOP, Offset.BOTTOM):
                    self.update_tile_sprite_index(pos.offset(direction))

    def update(self, camera_fov: Rect, delta_seconds: float) -> None:
        """Advance one frame: manage chunks and step dig animations."""
        self._changed = False
        self._chunk_manager.manage_chunks(self._data, camera_fov)

        remaining = []
        for anim in self._block_dig_animations:
            if anim.progress >= 1.0:
                continue
            anim.progress += DIG_ANIMATION_SPEED * delta_seconds
            anim.scale = 1.0 - anim.progress if anim.progress >= 0.5 else anim.progress
            remaining.append(anim)
        self._block_dig_animations = remaining

    def create_dig_block_animation(self, block: Tile, pos: TilePos) -> None:
        self._block_dig_animations.append(
            BlockDigAnimation(
                tile_pos=pos,
                atlas_pos=block.atlas_pos,
                progress=0.0,
                scale=0.0,
                block_type=block.type,
            )
        )

    def create_tile_cracks(self, pos: TilePos, cracks_index: int) -> None:
        self._tile_cracks[pos] = TileCracks(tile_pos=pos, cracks_index=cracks_index)

    def remove_tile_cracks(self, pos: TilePos) -> None:
        self._tile_cracks.pop(pos, None)