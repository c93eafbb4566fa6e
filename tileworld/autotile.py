"""Choose atlas sprites for blocks and walls from their surroundings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Iterable, Optional

from .geometry import Neighbors
from .tilerules import AtlasPos, TileRule, TileRules, bucket_id, build_tile_rules, merge_id_at

UNMERGED = 0xFF

_NEIGHBOR_BITS = (
    ("right", 0x00000001),
    ("top", 0x00000010),
    ("left", 0x00000100),
    ("bottom", 0x00001000),
    ("top_right", 0x00010000),
    ("top_left", 0x00100000),
    ("bottom_left", 0x01000000),
    ("bottom_right", 0x10000000),
)

# Edge neighbour, the bit it owns in the neighbour mask, and how a merge id
# maps onto that bit.
_EDGE_MERGE = (
    ("right", 0x00000001, lambda merge_id: (merge_id & 0x04) >> 2),
    ("top", 0x00000010, lambda merge_id: (merge_id & 0x08) << 1),
    ("left", 0x00000100, lambda merge_id: (merge_id & 0x01) << 8),
    ("bottom", 0x00001000, lambda merge_id: (merge_id & 0x02) << 11),
)

_ALL_BITS = 0x11111111


@dataclass
class Tile:
    """A block or wall with the sprite state the autotiler maintains."""

    type: Hashable
    variant: int = 0
    atlas_pos: AtlasPos = field(default_factory=AtlasPos)
    merge_id: int = UNMERGED
    is_merged: bool = False


def neighbor_mask(neighbors: Neighbors, predicate: Callable[[Any], bool]) -> int:
    """Bit mask of the neighbours that exist and satisfy ``predicate``."""
    mask = 0
    for name, bit in _NEIGHBOR_BITS:
        value = getattr(neighbors, name)
        if value is not None and predicate(value):
            mask |= bit
    return mask


def _first_index(
    rules: Iterable[TileRule],
    neighbors_mask: int,
    blend_mask: int,
    variant: int,
    relaxed: bool = False,
) -> Optional[AtlasPos]:
    for rule in rules:
        matched = (
            rule.matches_relaxed(neighbors_mask, blend_mask)
            if relaxed
            else rule.matches(neighbors_mask, blend_mask)
        )
        if matched:
            return rule.indexes[variant]
    return None


class AutoTiler:
    """Applies tile rules, parameterised by how tile types relate to each other."""

    def __init__(
        self,
        rules: Optional[TileRules] = None,
        *,
        is_stone: Optional[Callable[[Hashable], bool]] = None,
        merges_with: Optional[Callable[[Hashable, Hashable], bool]] = None,
        merge_with: Optional[Callable[[Hashable], Optional[Hashable]]] = None,
        grass_type: Optional[Hashable] = None,
    ) -> None:
        self.rules = rules if rules is not None else build_tile_rules()
        self.is_stone = is_stone or (lambda _type: False)
        self.merges_with = merges_with or (lambda _a, _b: False)
        self.merge_with = merge_with or (lambda _type: None)
        self.grass_type = grass_type

    def _merging(self, block: Tile, neighbor: Optional[Tile]) -> bool:
        return neighbor is not None and self.merges_with(block.type, neighbor.type)

    def update_block(self, block: Tile, neighbors: Neighbors) -> None:
        """Pick the sprite of ``block`` and record its merge id, in place."""
        if block.is_merged:
            return

        if self.is_stone(block.type):
            mask = neighbor_mask(neighbors, lambda other: self.is_stone(other.type))
        else:
            mask = neighbor_mask(
                neighbors,
                lambda other: self.merges_with(block.type, other.type)
                or other.type == block.type,
            )

        edges = [(getattr(neighbors, name), bit, to_bit) for name, bit, to_bit in _EDGE_MERGE]
        ready = all(
            not self._merging(block, neighbor) or neighbor.merge_id != UNMERGED
            for neighbor, _bit, _to_bit in edges
        )
        if ready:
            for neighbor, bit, to_bit in edges:
                keep = to_bit(neighbor.merge_id) if self._merging(block, neighbor) else bit
                mask &= (_ALL_BITS & ~bit) | keep
            block.is_merged = True

        blend_mask = 0
        bucket = bucket_id(mask)
        merge_target = self.merge_with(block.type)
        index: Optional[AtlasPos]

        if self.grass_type is not None and block.type == self.grass_type:
            index = _first_index(
                self.rules.grass[bucket], mask, blend_mask, block.variant, relaxed=True
            )
            if index is None:
                mask |= blend_mask
                bucket = bucket_id(mask)
                index = _first_index(self.rules.base[bucket], mask, blend_mask, block.variant)
        elif merge_target is not None:
            blend_mask = neighbor_mask(neighbors, lambda other: other.type == merge_target)
            index = _first_index(self.rules.blend[bucket], mask, blend_mask, block.variant)
        else:
            index = _first_index(self.rules.base[bucket], mask, blend_mask, block.variant)

        if index is None:
            index = AtlasPos()
        block.merge_id = merge_id_at(index)
        block.atlas_pos = index

    def update_wall(self, wall: Tile, neighbors: Neighbors) -> None:
        """Pick the sprite of ``wall`` from walls of the same type around it."""
        mask = neighbor_mask(neighbors, lambda other: other.type == wall.type)
        index = _first_index(self.rules.base[bucket_id(mask)], mask, 0, wall.variant)
        wall.atlas_pos = index if index is not None else AtlasPos()