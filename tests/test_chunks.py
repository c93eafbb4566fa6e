import pytest

from tileworld.autotile import Tile
from tileworld.chunks import (
    TILE_TYPE_BLOCK,
    TILE_TYPE_WALL,
    ChunkManager,
    RenderChunk,
    chunk_range,
    pack_tile_data,
)
from tileworld.geometry import RENDER_CHUNK_SIZE, Rect, TilePos
from tileworld.tilerules import AtlasPos
from tileworld.worlddata import WorldData


def make_world(width=120, height=60):
    return WorldData(Rect(0, 0, width, height))


@pytest.mark.parametrize("tile_id,tile_type", [(0, 0), (1, 0), (5, 1), (1023, 63), (300, 17)])
def test_pack_tile_data_roundtrip(tile_id, tile_type):
    packed = pack_tile_data(tile_id, tile_type)
    assert packed & 0x3F == tile_type
    assert packed >> 6 == tile_id
    assert 0 <= packed <= 0xFFFF


def test_pack_tile_data_truncates_type_to_six_bits():
    assert pack_tile_data(0, 0x40 | 3) == 3


def test_build_mesh_collects_blocks_and_walls():
    world = make_world()
    world.put_block(TilePos(1, 2), Tile(type=7, atlas_pos=AtlasPos(3, 4)))
    world.put_wall(TilePos(5, 6), Tile(type=2))
    world.put_block(TilePos(60, 2), Tile(type=7))

    chunk = RenderChunk((0, 0), (0.0, 0.0), world)

    assert chunk.blocks_count == 1
    assert chunk.walls_count == 1
    block = chunk.block_instances[0]
    assert block.position == (1.0, 2.0)
    assert block.atlas_pos == (3.0, 4.0)
    assert block.tile_data >> 6 == 7
    assert block.tile_data & 0x3F == TILE_TYPE_BLOCK
    wall = chunk.wall_instances[0]
    assert wall.position == (5.0, 6.0)
    assert wall.tile_data & 0x3F == TILE_TYPE_WALL
    assert not chunk.dirty()


def test_chunk_positions_are_local_and_world_pos_scaled():
    world = make_world()
    world.put_block(TilePos(RENDER_CHUNK_SIZE + 4, 9), Tile(type=1))
    chunk = RenderChunk((1, 0), (16.0, 0.0), world)
    assert chunk.world_pos == (16.0 * RENDER_CHUNK_SIZE, 0.0)
    assert [i.position for i in chunk.block_instances] == [(4.0, 9.0)]
    assert chunk.block_instances[0].world_pos == chunk.world_pos


def test_empty_chunk():
    chunk = RenderChunk((0, 0), (0.0, 0.0), make_world())
    assert chunk.blocks_empty()
    assert chunk.walls_empty()


def test_chunk_range_stays_within_world():
    size = (120, 60)
    max_x = (size[0] + RENDER_CHUNK_SIZE - 1) // RENDER_CHUNK_SIZE
    max_y = (size[1] + RENDER_CHUNK_SIZE - 1) // RENDER_CHUNK_SIZE
    result = chunk_range(Rect(0, 0, 100000, 100000), size, 2)
    assert result.min_x == 0 and result.min_y == 0
    assert result.max_x == max_x
    assert result.max_y == max_y


def test_chunk_range_expand_contains_plain_range():
    fov = Rect(3000, 2000, 4000, 2600)
    size = (1000, 1000)
    plain = chunk_range(fov, size)
    wide = chunk_range(fov, size, 2)
    assert wide.min_x <= plain.min_x and wide.min_y <= plain.min_y
    assert wide.max_x >= plain.max_x and wide.max_y >= plain.max_y
    assert plain.min_x - wide.min_x == 2


def test_chunk_range_negative_view_is_empty():
    result = chunk_range(Rect(-500, -500, -100, -100), (120, 60))
    assert result.width() == 0 and result.height() == 0


def test_manage_chunks_creates_visible_chunks():
    world = make_world()
    manager = ChunkManager()
    manager.manage_chunks(world, Rect(0, 0, 800, 800))
    assert (0, 0) in manager.visible_chunks
    assert manager.visible_chunks <= set(manager.render_chunks)
    assert not manager.chunks_to_destroy


def test_set_blocks_changed_marks_and_rebuilds():
    world = make_world()
    manager = ChunkManager()
    fov = Rect(0, 0, 800, 800)
    manager.manage_chunks(world, fov)
    world.put_block(TilePos(3, 3), Tile(type=4))
    manager.set_blocks_changed(TilePos(3, 3))
    chunk = manager.render_chunks[(0, 0)]
    assert chunk.blocks_dirty
    assert not chunk.walls_dirty
    manager.manage_chunks(world, fov)
    assert not chunk.dirty()
    assert chunk.blocks_count == 1


def test_set_walls_changed_marks_dirty():
    world = make_world()
    manager = ChunkManager()
    manager.manage_chunks(world, Rect(0, 0, 800, 800))
    manager.set_walls_changed(TilePos(10, 10))
    assert manager.render_chunks[(0, 0)].walls_dirty
    manager.set_walls_changed(TilePos(10000, 10000))
    assert not manager.render_chunks[(0, 0)].blocks_dirty


def test_far_chunks_are_retired_and_destroyed():
    world = make_world(width=400, height=60)
    manager = ChunkManager()
    manager.manage_chunks(world, Rect(0, 0, 800, 800))
    assert (0, 0) in manager.render_chunks

    manager.manage_chunks(world, Rect(5000, 0, 5800, 800))
    assert (0, 0) not in manager.render_chunks
    retired = {chunk.index for chunk in manager.chunks_to_destroy}
    assert (0, 0) in retired

    destroyed = manager.destroy_hidden_chunks()
    assert {chunk.index for chunk in destroyed} == retired
    assert len(manager.chunks_to_destroy) == 0
    assert all(chunk.block_instances == [] for chunk in destroyed)