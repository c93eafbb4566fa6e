# tileworld

The core of a 2D tile-based sandbox world, in plain Python with no third-party dependencies.

- `tileworld.geometry`: tile positions (`TilePos`), directions (`Offset`), rectangles (`Rect`), the eight-tile neighbourhood (`Neighbors`) and the helpers `chunk_pos` and `camera_fov`.
- `tileworld.tilerules`: autotiling rules (`TileRule`, `TileRules`, `build_tile_rules`), the bucket of a neighbour mask (`bucket_id`) and the merge id of an atlas cell (`merge_id_at`).
- `tileworld.autotile`: `Tile`, the block or wall record, and `AutoTiler`, which chooses a texture-atlas cell for it from its neighbours.
- `tileworld.lighting`: a subdivided `LightMap` that is seeded from the world and then blurred in four directions, with separate decay through solid and open cells.
- `tileworld.worlddata`: `WorldData`, which stores blocks and walls and answers neighbour queries. It also keeps the lightmap up to date, synchronously or on background threads.
- `tileworld.chunks`: `RenderChunk` instance lists, rebuilt only when dirty, and a `ChunkManager` that keeps the chunks around a camera's field of view.
- `tileworld.world`: `World`, for placing, removing and updating blocks and walls, with dig animations and tile cracks.
- `tileworld.cursor`: cursor pulse animation, an FPS counter and hotbar slot selection.
- `tileworld.textutil`: a file existence check, UTF-8 code point decoding and text bounds measurement.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Usage

### A world

```python
from tileworld.geometry import Rect, TilePos
from tileworld.worlddata import Layers, WorldData
from tileworld.world import World

data = WorldData(Rect(0, 0, 100, 100), layers=Layers(underground=60))
world = World(data)

world.place_block(TilePos(10, 10), 1)   # block types are small integers or int-valued enums
world.set_wall(TilePos(10, 11), 2)

# Each edit starts a background lightmap update for the area around the tile.
for result in data.lightmap_tasks_wait():
    data.lightmap.apply(result)

# Once per frame: refresh the render chunks for the camera and step the dig animations.
world.update(Rect(0, 0, 800, 600), 1 / 60)
print(world.chunk_manager.visible_chunks)
```

Positions outside the world are ignored by `set_block`, `place_block`, `remove_block` and `set_wall`. `update_block` raises `LookupError` when no block is there. `is_changed` reports whether a tile changed since the last `update`.

### Autotiling

```python
from tileworld.autotile import AutoTiler, Tile
from tileworld.tilerules import build_tile_rules

tiler = AutoTiler(
    build_tile_rules(),
    is_stone=lambda kind: kind == 1,
    merges_with=lambda a, b: {a, b} == {0, 3},
    merge_with=lambda kind: 0 if kind == 3 else None,
    grass_type=3,
)
# tiler.update_block(block, neighbors) sets block.atlas_pos and block.merge_id
# tiler.update_wall(wall, neighbors) sets wall.atlas_pos
```

Each of these keyword arguments is optional. Without them no type counts as stone, no types merge and no type is grass.

Neighbour masks use one hex digit per direction: right `0x1`, top `0x10`, left `0x100`, bottom `0x1000`. The diagonals use the upper four digits: top-right `0x10000`, top-left `0x100000`, bottom-left `0x1000000` and bottom-right `0x10000000`. `bucket_id(mask)` turns the four edge bits into a rule bucket from 0 to 15. `neighbor_mask(neighbors, predicate)` builds such a mask.

### Geometry

```python
from tileworld.geometry import Offset, Rect, TilePos, chunk_pos

pos = TilePos(10, 20)
above = pos.offset(Offset.TOP)          # TilePos(10, 19)
area = Rect.from_center_half_size((10, 20), (24, 24))
chunk = chunk_pos(pos, 50)              # (0, 0)
```

`Rect.contains` excludes the maximum edges.

### Lighting

```python
from tileworld.lighting import light_decay, light_decay_steps

light_decay(True)     # 0.92, the decay through solid cells
light_decay(False)    # 0.975, the decay through open cells
light_decay_steps()   # 24, the reach in tiles of a light change
```

`WorldData.lightmap_init_area` and `WorldData.lightmap_blur_area_sync` rebuild the lightmap of an area in place. `WorldData.lightmap_update_area_async` computes an area on a background thread. `WorldData.lightmap_tasks_wait` joins those threads and returns their `LightMapResult`s, raising again any error a task hit. `LightMap.apply(result)` copies a result into a lightmap.

### Cursor and hotbar

```python
from tileworld.cursor import CursorAnimation, FpsCounter, digit_slot, scroll_slot

cursor = CursorAnimation()
cursor.update(0.1)        # returns the new scale, between 1.0 and 1.15

fps = FpsCounter(enabled=True)
fps.fixed_update(1 / 60, 1 / 60)   # "60"

scroll_slot(0, 1.0, 10)   # scrolling up from slot 0 wraps to slot 9
digit_slot(0)             # the "0" key selects slot 9
```

### Text

```python
from tileworld.textutil import iter_codepoints, text_bounds

list(iter_codepoints("añ"))                     # [97, 241]
text_bounds("ab\nc", 16.0, 16.0, {97: 640, 98: 640, 99: 640})   # (20.0, 16.0)
```

Glyph advances are given in 26.6 fixed point. A missing glyph raises `KeyError`.

## What the package does not do

There is no world generator: a `WorldData` starts empty and its tiles are filled in by the caller. The package does not draw anything, open windows, load textures or fonts, or read input. Render chunks hold instance lists for a renderer to upload, and the cursor and hotbar helpers only compute state. There is no command-line program and no saving or loading of worlds.