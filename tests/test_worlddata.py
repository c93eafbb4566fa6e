import pytest

from tileworld.autotile import UNMERGED, Tile
from tileworld.geometry import Rect, TilePos
from tileworld.lighting import SUBDIVISION, compute_area
from tileworld.worlddata import Layers, WorldData


def _world():
    return WorldData(Rect(0, 0, 10, 8), layers=Layers(surface=1, underground=5, cavern=6))


def test_storage_sizes_follow_area():
    world = _world()
    assert len(world.blocks) == 10 * 8
    assert len(world.walls) == 10 * 8
    assert world.lightmap.width == 10 * SUBDIVISION
    assert world.lightmap.height == 8 * SUBDIVISION


def test_tile_index_is_row_major():
    world = _world()
    assert world.tile_index(TilePos(3, 2)) == 23
    assert world.tile_index(TilePos(0, 1)) == world.tile_index(TilePos(9, 0)) + 1


@pytest.mark.parametrize(
    "pos, valid",
    [
        (TilePos(0, 0), True),
        (TilePos(9, 7), True),
        (TilePos(10, 0), False),
        (TilePos(0, 8), False),
        (TilePos(-1, 3), False),
    ],
)
def test_is_tilepos_valid(pos, valid):
    assert _world().is_tilepos_valid(pos) is valid


def test_block_round_trip_and_types():
    world = _world()
    pos = TilePos(4, 4)
    world.put_block(pos, Tile("dirt"))
    assert world.get_block(pos).type == "dirt"
    assert world.block_exists(pos)
    assert world.get_block_type(pos) == "dirt"
    assert world.block_exists_with_type(pos, "dirt")
    assert not world.block_exists_with_type(pos, "stone")
    world.put_block(pos, None)
    assert not world.block_exists(pos)
    assert world.get_block_type(pos) is None


def test_wall_round_trip():
    world = _world()
    pos = TilePos(1, 1)
    world.put_wall(pos, Tile("dirt_wall"))
    assert world.wall_exists(pos)
    assert world.get_wall(pos).type == "dirt_wall"
    assert not world.block_exists(pos)


def test_outside_reads_are_empty_and_writes_raise():
    world = _world()
    assert world.get_block(TilePos(-1, 0)) is None
    assert not world.wall_exists(TilePos(10, 0))
    with pytest.raises(IndexError):
        world.put_block(TilePos(-1, 0), Tile("dirt"))
    with pytest.raises(IndexError):
        world.put_wall(TilePos(0, 8), Tile("dirt_wall"))


def test_block_neighbors_are_copies():
    world = _world()
    center = TilePos(5, 5)
    world.put_block(TilePos(6, 5), Tile("stone"))
    world.put_block(TilePos(5, 4), Tile("dirt"))
    neighbors = world.get_block_neighbors(center)
    assert neighbors.right.type == "stone"
    assert neighbors.top.type == "dirt"
    assert neighbors.left is None
    assert neighbors.any_missing()
    neighbors.right.merge_id = 3
    assert world.get_block(TilePos(6, 5)).merge_id == UNMERGED


def test_wall_neighbors_at_corner():
    world = _world()
    world.put_wall(TilePos(1, 1), Tile("dirt_wall"))
    neighbors = world.get_wall_neighbors(TilePos(0, 0))
    assert neighbors.bottom_right.type == "dirt_wall"
    assert neighbors.top_left is None


def test_reset_tiles_window():
    world = _world()
    inside = TilePos(4, 4)
    outside = TilePos(8, 4)
    for pos in (inside, outside):
        world.put_block(pos, Tile("dirt", merge_id=5, is_merged=True))
    world.reset_tiles(TilePos(5, 5))
    assert world.get_block(inside).is_merged is False
    assert world.get_block(inside).merge_id == UNMERGED
    assert world.get_block(outside).is_merged is True
    assert world.get_block(outside).merge_id == 5


def test_lightmap_init_area_lights_open_sky():
    world = _world()
    world.put_block(TilePos(4, 2), Tile("dirt"))
    world.lightmap_init_area(world.playable_area)
    half = SUBDIVISION // 2
    assert world.lightmap.get_color_at(3 * SUBDIVISION + half, 2 * SUBDIVISION) == (1.0, 1.0, 1.0)
    assert world.lightmap.get_color_at(4 * SUBDIVISION + half, 2 * SUBDIVISION) == (0.0, 0.0, 0.0)
    assert world.lightmap.get_mask_at(4 * SUBDIVISION + half, 2 * SUBDIVISION) is True


def test_lightmap_blur_area_sync_spreads_light():
    world = _world()
    world.put_block(TilePos(4, 2), Tile("dirt"))
    world.lightmap_init_area(world.playable_area)
    world.lightmap_blur_area_sync(world.playable_area)
    value = world.lightmap.get_color_at(4 * SUBDIVISION + 1, 2 * SUBDIVISION + 4)[0]
    assert 0.0 < value < 1.0


def test_async_update_matches_sync_computation():
    world = _world()
    world.put_block(TilePos(4, 2), Tile("dirt"))
    area = Rect(2, 1, 6, 4)
    world.lightmap_update_area_async(area)
    results = world.lightmap_tasks_wait()
    assert len(results) == 1
    result = results[0]
    assert result.is_complete
    assert result.offset_x == 2 * SUBDIVISION
    assert result.offset_y == 1 * SUBDIVISION
    assert result.colors == compute_area(world, area).colors
    assert world.lightmap_tasks[0].is_complete


def test_async_result_applies_to_world_lightmap():
    world = _world()
    area = Rect(2, 1, 6, 4)
    world.lightmap_update_area_async(area)
    (result,) = world.lightmap_tasks_wait()
    world.lightmap.apply(result)
    assert world.lightmap.get_color_at(result.offset_x, result.offset_y) == result.colors[0].as_floats()