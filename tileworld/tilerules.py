"""Autotiling rules that pick a sprite from the masks of a tile's neighbours."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

_MASK32 = 0xFFFFFFFF

MERGE_VALIDATION: Tuple[Tuple[int, ...], ...] = (
    (11, 13, 13, 13, 14, 10, 8, 8, 8, 1, 15, 15, 4, 13, 13, 13),
    (11, 15, 15, 15, 14, 10, 15, 15, 15, 1, 15, 15, 4, 7, 7, 7),
    (11, 7, 7, 7, 14, 10, 15, 15, 15, 1, 15, 15, 4, 11, 11, 11),
    (9, 12, 9, 12, 9, 12, 2, 2, 2, 0, 0, 0, 0, 14, 14, 14),
    (3, 6, 3, 6, 3, 6, 5, 5, 5, 0, 0, 0, 0, 0, 0, 0),
    (15, 15, 15, 15, 11, 14, 8, 10, 15, 15, 15, 15, 15, 0, 0, 0),
    (15, 15, 15, 15, 11, 14, 8, 10, 15, 15, 15, 15, 15, 0, 0, 0),
    (15, 15, 15, 15, 11, 14, 8, 10, 15, 15, 15, 15, 15, 0, 0, 0),
    (15, 15, 15, 15, 11, 14, 2, 10, 15, 15, 15, 15, 15, 0, 0, 0),
    (15, 15, 15, 15, 11, 14, 2, 10, 15, 15, 15, 15, 15, 0, 0, 0),
    (15, 15, 15, 15, 11, 14, 2, 10, 15, 15, 15, 15, 15, 0, 0, 0),
    (13, 13, 13, 13, 13, 13, 15, 15, 15, 5, 5, 5, 0, 0, 0, 0),
    (7, 7, 7, 7, 7, 7, 10, 9, 13, 12, 9, 13, 12, 9, 13, 12),
    (4, 4, 4, 1, 1, 1, 10, 11, 15, 14, 11, 15, 14, 11, 15, 14),
    (5, 5, 5, 5, 5, 5, 10, 3, 7, 6, 3, 7, 6, 3, 7, 6),
    (11, 14, 13, 13, 13, 9, 9, 9, 12, 12, 12, 15, 15, 15, 0, 0),
    (11, 14, 7, 7, 7, 3, 3, 3, 6, 6, 6, 15, 15, 15, 0, 0),
    (11, 14, 15, 15, 15, 15, 15, 15, 15, 15, 15, 15, 15, 15, 0, 0),
    (13, 13, 13, 13, 13, 13, 15, 15, 15, 0, 0, 0, 0, 0, 0, 0),
    (7, 7, 7, 7, 7, 7, 15, 15, 15, 0, 0, 0, 0, 0, 0, 0),
    (11, 11, 11, 11, 11, 11, 15, 15, 15, 0, 0, 0, 0, 0, 0, 0),
    (14, 14, 14, 14, 14, 14, 15, 15, 15, 0, 0, 0, 0, 0, 0, 0),
)

BUCKET_COUNT = 16


@dataclass(frozen=True)
class AtlasPos:
    """Cell of a sprite in a texture atlas."""

    x: int = 0
    y: int = 0


def _parse_cell(cell: str) -> Tuple[int, int]:
    """Parse a spreadsheet-style cell such as ``"D10"`` into ``(x, y)``."""
    if len(cell) < 2 or not ("A" <= cell[0] <= "Z"):
        raise ValueError(f"invalid atlas cell {cell!r}")
    try:
        column = int(cell[1:])
    except ValueError:
        raise ValueError(f"invalid atlas cell {cell!r}") from None
    return column - 1, ord(cell[0]) - ord("A")


def _half_toward_zero(value: int) -> int:
    return int(value / 2)


@dataclass(frozen=True)
class TileRule:
    """A sprite choice with the neighbour and blend masks that select it."""

    indexes: Tuple[AtlasPos, AtlasPos, AtlasPos]
    corner_exclusion_mask: int = 0
    blend_exclusion_mask: int = 0
    blend_inclusion_mask: int = 0
    corner_inclusion_mask: int = 0

    @classmethod
    def from_cells(
        cls,
        start: str,
        end: str,
        corner_exclusion_mask: int = 0,
        blend_exclusion_mask: int = 0,
        blend_inclusion_mask: int = 0,
        corner_inclusion_mask: int = 0,
    ) -> "TileRule":
        """Build a rule whose three variants span the cells ``start`` to ``end``.

        The blend exclusion mask is moved into the corner half of a 32-bit word.
        """
        x1, y1 = _parse_cell(start)
        x2, y2 = _parse_cell(end)
        y3 = y2 - _half_toward_zero(y2 - y1)
        x3 = x2 - _half_toward_zero(x2 - x1)
        return cls(
            indexes=(AtlasPos(x1, y1), AtlasPos(x3, y3), AtlasPos(x2, y2)),
            corner_exclusion_mask=corner_exclusion_mask & _MASK32,
            blend_exclusion_mask=(blend_exclusion_mask << 16) & _MASK32,
            blend_inclusion_mask=blend_inclusion_mask & _MASK32,
            corner_inclusion_mask=corner_inclusion_mask & _MASK32,
        )

    def _tail_matches(self, neighbors_mask: int, blend_mask: int) -> bool:
        lower_blend_inclusion = self.blend_inclusion_mask & 0x00001111
        if lower_blend_inclusion and lower_blend_inclusion ^ (blend_mask & 0x00001111):
            return False
        if (self.blend_exclusion_mask & 0x00001111) & blend_mask:
            return False
        upper_blend_exclusion = self.blend_exclusion_mask & 0x11110000
        if upper_blend_exclusion and upper_blend_exclusion & blend_mask:
            return False
        return True

    def _corner_excluded(self, neighbors_mask: int) -> bool:
        upper_corner_exclusion = (self.corner_exclusion_mask << 16) & 0x11110000
        return bool(upper_corner_exclusion and upper_corner_exclusion & neighbors_mask)

    def matches(self, neighbors_mask: int, blend_mask: int) -> bool:
        """Strict match: every required corner and blend bit must be present."""
        upper_corner_inclusion = (self.corner_inclusion_mask << 16) & 0x11110000
        if upper_corner_inclusion & neighbors_mask != upper_corner_inclusion:
            return False
        if self._corner_excluded(neighbors_mask):
            return False
        lower_blend_inclusion = self.blend_inclusion_mask & 0x00001111
        if lower_blend_inclusion and lower_blend_inclusion ^ (blend_mask & 0x00001111):
            return False
        upper_blend_inclusion = self.blend_inclusion_mask & 0x11110000
        if upper_blend_inclusion & blend_mask != upper_blend_inclusion:
            return False
        if (self.blend_exclusion_mask & 0x00001111) & blend_mask:
            return False
        upper_blend_exclusion = self.blend_exclusion_mask & 0x11110000
        if upper_blend_exclusion and upper_blend_exclusion & blend_mask:
            return False
        return True

    def matches_relaxed(self, neighbors_mask: int, blend_mask: int) -> bool:
        """Like :meth:`matches`, but a corner required by both masks may come from either."""
        for shift in range(4):
            column = 0x00010000 << (4 * shift)
            corner_inclusion = (self.corner_inclusion_mask << 16) & column
            blend_inclusion = self.blend_inclusion_mask & column
            if corner_inclusion & blend_inclusion == 0:
                if corner_inclusion and not corner_inclusion & neighbors_mask:
                    return False
                if blend_inclusion and not blend_inclusion & blend_mask:
                    return False
            elif not corner_inclusion & neighbors_mask and not blend_inclusion & blend_mask:
                return False
        if self._corner_excluded(neighbors_mask):
            return False
        return self._tail_matches(neighbors_mask, blend_mask)


RuleBuckets = Tuple[Tuple[TileRule, ...], ...]


@dataclass(frozen=True)
class TileRules:
    """Rule lists per bucket for plain tiles, blending tiles and grass."""

    base: RuleBuckets
    blend: RuleBuckets
    grass: RuleBuckets


_BASE_RULES = (
    (0, "D10", "D12", 0),
    (1, "A10", "C10", 0),
    (2, "D7", "D9", 0),
    (3, "E1", "E5", 0),
    (4, "A13", "C13", 0),
    (5, "E7", "E9", 0),
    (6, "E2", "E6", 0),
    (7, "C2", "C4", 0),
    (8, "A7", "A9", 0),
    (9, "D1", "D5", 0),
    (10, "A6", "C6", 0),
    (11, "A1", "C1", 0),
    (12, "D2", "D6", 0),
    (13, "A2", "A4", 0),
    (14, "A5", "C5", 0),
    (15, "B2", "B4", 0),
    (15, "A11", "C11", 0x0110),
    (15, "A12", "C12", 0x1001),
    (15, "B7", "B9", 0x0011),
    (15, "C7", "C9", 0x1100),
)

_BLEND_RULES = (
    (0, "N4", "N6", 0x00000001),
    (0, "I7", "K7", 0x00000010),
    (0, "N1", "N3", 0x00000100),
    (0, "F7", "H7", 0x00001000),
    (0, "L10", "L12", 0x00000101),
    (0, "M7", "O7", 0x00001010),
    (0, "L7", "L9", 0x00001111),
    (1, "O1", "O3", 0x00000100),
    (2, "F8", "H8", 0x00001000),
    (3, "M1", "M3", 0x00000100),
    (3, "F5", "H5", 0x00001000),
    (3, "G3", "K3", 0x00001100),
    (4, "O4", "O6", 0x00000001),
    (5, "K9", "K11", 0x00001010),
    (6, "M4", "M6", 0x00000001),
    (6, "F6", "H6", 0x00001000),
    (6, "G4", "K4", 0x00001001),
    (7, "F9", "F11", 0x00001000),
    (8, "I8", "K8", 0x00000010),
    (9, "I5", "K5", 0x00000010),
    (9, "L1", "L3", 0x00000100),
    (9, "F3", "J3", 0x00000110),
    (10, "H11", "J11", 0x00000101),
    (11, "H10", "J10", 0x00000100),
    (12, "L4", "L6", 0x00000001),
    (12, "I6", "K6", 0x00000010),
    (12, "F4", "J4", 0x00000011),
    (13, "G9", "G11", 0x00000010),
    (14, "H9", "J9", 0x00000001),
)

_EXTRA_BLEND_RULES = (
    (1, "F13", "H13", 0x00001110),
    (2, "I12", "K12", 0x00001101),
    (4, "I13", "K13", 0x00001011),
    (5, "B14", "B16", 0x00000010),
    (5, "A14", "A16", 0x00001000),
    (8, "F12", "H12", 0x00000111),
    (10, "C14", "C16", 0x00000001),
    (10, "D14", "D16", 0x00000100),
    (15, "G1", "K1", 0x00010000),
    (15, "G2", "K2", 0x00100000),
    (15, "F2", "J2", 0x01000000),
    (15, "F1", "J1", 0x10000000),
)

_GRASS_DROP_FIRST = (7, 11, 13, 14, 3, 6, 9, 12)

# (insert at front, bucket, start, end, corner excl., blend excl., blend incl., corner incl.)
_GRASS_RULES = (
    (False, 1, "P1", "R1", 0x0000, 0x00000000, 0x00001010, 0x0000),
    (False, 1, "R9", "R11", 0x0000, 0x00000000, 0x00001110, 0x0000),
    (False, 2, "Q3", "Q5", 0x0000, 0x00000000, 0x00000101, 0x0000),
    (False, 2, "Q12", "Q14", 0x0000, 0x00000000, 0x00001101, 0x0000),
    (False, 3, "Q6", "Q8", 0x0001, 0x00010000, 0x00000000, 0x0000),
    (False, 4, "P2", "R2", 0x0000, 0x00000000, 0x00001010, 0x0000),
    (False, 4, "R12", "R14", 0x0000, 0x00000000, 0x00001011, 0x0000),
    (False, 6, "Q9", "Q11", 0x0010, 0x00100000, 0x00000000, 0x0000),
    (False, 7, "O9", "O15", 0x0011, 0x00111000, 0x00000000, 0x0000),
    (False, 7, "T1", "T3", 0x0001, 0x00011000, 0x00100000, 0x0010),
    (False, 7, "T4", "T6", 0x0010, 0x00101000, 0x00010000, 0x0001),
    (False, 8, "P3", "P5", 0x0000, 0x00000000, 0x00000101, 0x0000),
    (False, 8, "P12", "P14", 0x0000, 0x00000000, 0x00000111, 0x0000),
    (False, 9, "P6", "P8", 0x1000, 0x10000000, 0x00000000, 0x0000),
    (False, 11, "N8", "N14", 0x1001, 0x10010100, 0x00000000, 0x0000),
    (False, 11, "U1", "U3", 0x0001, 0x00010100, 0x10000000, 0x1000),
    (False, 11, "U4", "U6", 0x1000, 0x10000100, 0x00010000, 0x0001),
    (False, 12, "P9", "P11", 0x0100, 0x01000000, 0x00000000, 0x0000),
    (False, 13, "M9", "M15", 0x1100, 0x11000010, 0x00000000, 0x0000),
    (False, 13, "S1", "S3", 0x1000, 0x10000010, 0x01000000, 0x0100),
    (False, 13, "S4", "S6", 0x0100, 0x01000010, 0x10000000, 0x1000),
    (False, 14, "N10", "N16", 0x0110, 0x01100001, 0x00000000, 0x0000),
    (False, 14, "V1", "V3", 0x0100, 0x01000001, 0x00100000, 0x0010),
    (False, 14, "V4", "V6", 0x0010, 0x00100001, 0x01000000, 0x0100),
    (False, 15, "N9", "N15", 0x1111, 0x11110000, 0x00000000, 0x0000),
    (False, 15, "S7", "S9", 0x0111, 0x01110000, 0x10000000, 0x0000),
    (False, 15, "T7", "T9", 0x1110, 0x11100000, 0x00010000, 0x0000),
    (False, 15, "U7", "U9", 0x1011, 0x10110000, 0x01000000, 0x0000),
    (False, 15, "V7", "V9", 0x1101, 0x11010000, 0x00100000, 0x0000),
    (False, 15, "R3", "R5", 0x1010, 0x10100000, 0x00000000, 0x0000),
    (False, 15, "R6", "R8", 0x0101, 0x01010000, 0x00000000, 0x0000),
    (True, 0, "P2", "R2", 0x0000, 0x00000001, 0x00001110, 0x0000),
    (True, 0, "P3", "P5", 0x0000, 0x00000010, 0x00001101, 0x0000),
    (True, 0, "P1", "R1", 0x0000, 0x00000100, 0x00001011, 0x0000),
    (True, 0, "Q3", "Q5", 0x0000, 0x00001000, 0x00000111, 0x0000),
    (True, 1, "M1", "M3", 0x0000, 0x00001001, 0x00000110, 0x0000),
    (True, 1, "L1", "L3", 0x0000, 0x00000011, 0x00001100, 0x0000),
    (True, 2, "F5", "H5", 0x0000, 0x00000110, 0x00001001, 0x0000),
    (True, 2, "F6", "H6", 0x0000, 0x00000011, 0x00001100, 0x0000),
    (True, 3, "G3", "K3", 0x0001, 0x00010000, 0x00001100, 0x0000),
    (True, 4, "M4", "M6", 0x0000, 0x00001100, 0x00000011, 0x0000),
    (True, 4, "L4", "L6", 0x0000, 0x00000110, 0x00001001, 0x0000),
    (True, 6, "G4", "K4", 0x0010, 0x00100000, 0x00001001, 0x0000),
    (False, 7, "B7", "B9", 0x0011, 0x00110000, 0x00001000, 0x0000),
    (False, 7, "G3", "K3", 0x0001, 0x00010000, 0x00001000, 0x0000),
    (False, 7, "G4", "K4", 0x0010, 0x00100000, 0x00001000, 0x0000),
    (True, 8, "I5", "K5", 0x0000, 0x00001100, 0x00000011, 0x0000),
    (True, 8, "I6", "K6", 0x0000, 0x00001001, 0x00000110, 0x0000),
    (True, 9, "F3", "J3", 0x1000, 0x10000000, 0x00000110, 0x0000),
    (False, 11, "A12", "C12", 0x1001, 0x10010000, 0x00000100, 0x0000),
    (False, 11, "G3", "K3", 0x0001, 0x00010000, 0x00000100, 0x0000),
    (False, 11, "F3", "J3", 0x1000, 0x10000000, 0x00000100, 0x0000),
    (True, 12, "F4", "J4", 0x0100, 0x01000000, 0x00000011, 0x0000),
    (False, 13, "C7", "C9", 0x1100, 0x11000000, 0x00000010, 0x0000),
    (False, 13, "F4", "J4", 0x0100, 0x01000000, 0x00000010, 0x0000),
    (False, 13, "F3", "J3", 0x1000, 0x10000000, 0x00000010, 0x0000),
    (False, 14, "A11", "C11", 0x0110, 0x01100000, 0x00000001, 0x0000),
    (False, 14, "G4", "K4", 0x0010, 0x00100000, 0x00000001, 0x0000),
    (False, 14, "F4", "J4", 0x0100, 0x01000000, 0x00000001, 0x0000),
    (False, 15, "B7", "B9", 0x0011, 0x00110000, 0x00000000, 0x0000),
    (False, 15, "C7", "C9", 0x1100, 0x11000000, 0x00000000, 0x0000),
    (False, 15, "A11", "C11", 0x0110, 0x01100000, 0x00000000, 0x0000),
    (False, 15, "A12", "C12", 0x1001, 0x10010000, 0x00000000, 0x0000),
    (False, 15, "G3", "K3", 0x0001, 0x00010000, 0x00000000, 0x0000),
    (False, 15, "G4", "K4", 0x0010, 0x00100000, 0x00000000, 0x0000),
    (False, 15, "F4", "J4", 0x0100, 0x01000000, 0x00000000, 0x0000),
    (False, 15, "F3", "J3", 0x1000, 0x10000000, 0x00000000, 0x0000),
)


def build_tile_rules() -> TileRules:
    """Assemble the base, blend and grass rule buckets in priority order."""
    base: List[List[TileRule]] = [[] for _ in range(BUCKET_COUNT)]
    blend: List[List[TileRule]] = [[] for _ in range(BUCKET_COUNT)]

    for bucket, start, end, corner_exclusion in _BASE_RULES:
        base[bucket].insert(0, TileRule.from_cells(start, end, corner_exclusion))

    for bucket, start, end, blend_inclusion in _BLEND_RULES:
        blend[bucket].insert(0, TileRule.from_cells(start, end, 0, 0, blend_inclusion))

    grass = [list(rules) for rules in blend]
    for blend_bucket, base_bucket in zip(blend, base):
        blend_bucket.extend(base_bucket)

    for bucket, start, end, blend_inclusion in _EXTRA_BLEND_RULES:
        blend[bucket].insert(0, TileRule.from_cells(start, end, 0, 0, blend_inclusion))

    for bucket in _GRASS_DROP_FIRST:
        del grass[bucket][0]

    for at_front, bucket, start, end, *masks in _GRASS_RULES:
        rule = TileRule.from_cells(start, end, *masks)
        if at_front:
            grass[bucket].insert(0, rule)
        else:
            grass[bucket].append(rule)

    return TileRules(
        base=tuple(tuple(rules) for rules in base),
        blend=tuple(tuple(rules) for rules in blend),
        grass=tuple(tuple(rules) for rules in grass),
    )


def bucket_id(neighbors_mask: int) -> int:
    """Bucket index from the four edge bits: bottom, left, top, right."""
    return (
        ((neighbors_mask & 0x00001000) >> 9)
        + ((neighbors_mask & 0x00000100) >> 6)
        + ((neighbors_mask & 0x00000010) >> 3)
        + (neighbors_mask & 0x00000001)
    )


def merge_id_at(pos: AtlasPos) -> int:
    """Merge id recorded for the sprite at ``pos`` in the atlas."""
    if pos.x < 0 or pos.y < 0:
        raise IndexError(f"atlas position out of range: {pos}")
    return MERGE_VALIDATION[pos.y][pos.x]