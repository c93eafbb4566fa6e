import pytest

from tileworld.autotile import Tile
from tileworld.geometry import Rect, TilePos
from tileworld.tilerules import build_tile_rules
from tileworld.world import World
from tileworld.worlddata import WorldData


@pytest.fixture
def world():
    w = World(WorldData(Rect(0, 0, 8, 8)))
    yield w
    w.data.lightmap_tasks_wait()


def test_place_block_stores_block_and_marks_changed(world):
    world.place_block(TilePos(3, 3), "dirt")
    block = world.get_block(TilePos(3, 3))
    assert block.type == "dirt"
    assert world.is_changed is True
    assert world.block_exists_with_type(TilePos(3, 3), "dirt")


def test_isolated_block_gets_lone_sprite(world):
    world.place_block(TilePos(3, 3), "dirt")
    rules = build_tile_rules()
    assert world.get_block(TilePos(3, 3)).atlas_pos == rules.base[0][0].indexes[0]


def test_neighbouring_block_updates_sprite(world):
    world.place_block(TilePos(3, 3), "dirt")
    world.place_block(TilePos(4, 3), "dirt")
    rules = build_tile_rules()
    # Left block now has a right neighbour: bucket 1.
    assert world.get_block(TilePos(3, 3)).atlas_pos == rules.base[1][0].indexes[0]
    # Right block has a left neighbour: bucket 4.
    assert world.get_block(TilePos(4, 3)).atlas_pos == rules.base[4][0].indexes[0]


def test_out_of_world_edits_are_ignored(world):
    world.place_block(TilePos(-1, 2), "dirt")
    world.set_wall(TilePos(8, 0), "wall")
    world.remove_block(TilePos(0, 100))
    assert world.is_changed is False
    assert world.data.lightmap_tasks == []


def test_set_block_stores_copy(world):
    block = Tile("stone", variant=2)
    world.set_block(TilePos(1, 1), block)
    stored = world.get_block(TilePos(1, 1))
    assert stored is not block
    assert stored.type == "stone"
    assert stored.variant == 2


def test_update_block_changes_type_and_variant(world):
    world.place_block(TilePos(2, 2), "dirt")
    world.update_block(TilePos(2, 2), "grass", 1)
    block = world.get_block(TilePos(2, 2))
    assert block.type == "grass"
    assert block.variant == 1


def test_update_block_without_block_raises(world):
    with pytest.raises(LookupError):
        world.update_block(TilePos(2, 2), "grass", 0)


def test_set_wall(world):
    world.set_wall(TilePos(5, 5), "dirt_wall")
    assert world.wall_exists(TilePos(5, 5))
    assert world.get_wall(TilePos(5, 5)).type == "dirt_wall"
    rules = build_tile_rules()
    assert world.get_wall(TilePos(5, 5)).atlas_pos == rules.base[0][0].indexes[0]


def test_light_task_started_for_edit(world):
    world.place_block(TilePos(3, 3), "dirt")
    results = world.data.lightmap_tasks_wait()
    assert len(results) == 1
    assert results[0].is_complete
    # The light area is clamped to the playable area, which starts at the origin.
    assert (results[0].offset_x, results[0].offset_y) == (0, 0)


def test_dig_animation_progress_and_removal(world):
    block = Tile("dirt")
    world.create_dig_block_animation(block, TilePos(1, 1))
    fov = Rect(0, 0, 64, 64)

    world.update(fov, 0.0625)
    anim = world.block_dig_animations[0]
    assert anim.progress == pytest.approx(0.5)
    assert anim.scale == pytest.approx(1.0 - anim.progress)

    world.update(fov, 0.0625)
    anim = world.block_dig_animations[0]
    assert anim.progress == pytest.approx(1.0)
    assert anim.scale == pytest.approx(0.0)

    world.update(fov, 0.0625)
    assert world.block_dig_animations == []


def test_dig_animation_early_scale_follows_progress(world):
    world.create_dig_block_animation(Tile("dirt"), TilePos(0, 0))
    world.update(Rect(0, 0, 64, 64), 0.01)
    anim = world.block_dig_animations[0]
    assert anim.progress < 0.5
    assert anim.scale == pytest.approx(anim.progress)
    assert anim.block_type == "dirt"


def test_tile_cracks_create_replace_remove(world):
    pos = TilePos(2, 3)
    world.create_tile_cracks(pos, 1)
    world.create_tile_cracks(pos, 2)
    assert world.tile_cracks[pos].cracks_index == 2
    world.remove_tile_cracks(pos)
    assert pos not in world.tile_cracks
    world.remove_tile_cracks(pos)
    assert world.tile_cracks == {}