import os
import sys
import random

import numpy as np

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import pytest

import config
import mapgen
from config import CHUNK_SIZE, CHUNK_HEIGHT, SEA_LEVEL
from blocks import BlockType, BLOCK_LIGHT_LEVELS
from chunk import Chunk, ChunkCoordinate, column_heights
from mapgen import Biome, WorldGenerator, classify_biome, classify_biome_codes

ORE_IDS = [s['block'] for s in mapgen.ORE_SETTINGS]


def _format_height_map(h_map, title=None):
    lines = []
    if title:
        lines.append(title)
    for row in h_map:
        lines.append(" ".join(f"{min(255, int(v)):02X}" for v in row))
    return "\n".join(lines)


def _stone_chunk(top=64):
    chunk = Chunk((0, 0))
    chunk.fill_region(0, 0, 0, CHUNK_SIZE, top, CHUNK_SIZE, BlockType.STONE)
    chunk.mark_clean()
    return chunk


def test_generate_chunk_is_deterministic():
    for coord in [(0, 0), (-3, 5), (40, -17)]:
        a = mapgen.generate_chunk(42, coord)
        b = WorldGenerator(42).generate_chunk(ChunkCoordinate(*coord))
        assert a.coordinate == ChunkCoordinate(*coord)
        assert (a.blocks == b.blocks).all()
        assert (a.height_map == b.height_map).all()
        assert (a.light_levels == b.light_levels).all()


def test_ore_positions_repeat():
    gen = WorldGenerator(7)
    found = []
    for _ in range(2):
        chunk = gen.generate_chunk(ChunkCoordinate(1, 2))
        found.append(set(map(tuple, np.argwhere(np.isin(chunk.grid(), ORE_IDS)))))
    assert found[0] == found[1]


def test_seeds_change_the_world():
    a = mapgen.generate_chunk(1, (0, 0))
    b = mapgen.generate_chunk(2, (0, 0))
    assert not (a.blocks == b.blocks).all()


def test_generated_chunk_invariants():
    gen = WorldGenerator(42)
    for coord in [(0, 0), (5, -5)]:
        chunk = gen.generate_chunk(ChunkCoordinate(*coord))
        grid = chunk.grid()
        assert (grid[0] == BlockType.STONE).all()
        assert not chunk.dirty
        assert (chunk.height_map.reshape(CHUNK_SIZE, CHUNK_SIZE) == column_heights(grid)).all()
        # Deep columns hold water up to sea level, above anything a tree could
        # push into it.
        heights = gen.terrain_heights(chunk.coordinate, gen.biome_codes(chunk.coordinate))
        for z, x in np.argwhere(heights < SEA_LEVEL - 8):
            h = heights[z, x]
            assert (grid[h + 8:SEA_LEVEL + 1, z, x] == BlockType.WATER).all()
        sky = chunk.light_levels >> 4
        assert sky.max() <= 15
        for x, z in [(0, 0), (7, 9), (15, 15)]:
            column = [chunk.get_sky_light(x, y, z) for y in range(CHUNK_HEIGHT - 1, -1, -1)]
            assert column[0] == 15
            assert all(a >= b for a, b in zip(column, column[1:]))
        print(_format_height_map(chunk.height_map.reshape(CHUNK_SIZE, CHUNK_SIZE), title=str(coord)))


def test_block_light_is_emission_after_generation():
    chunk = mapgen.generate_chunk(42, (0, 0))
    assert ((chunk.light_levels & 0x0F) == BLOCK_LIGHT_LEVELS[chunk.blocks]).all()


def test_chunk_seed_wraps_to_64_bits():
    assert mapgen.chunk_seed(5, (0, 0)) == 5
    assert mapgen.chunk_seed(5, (1, 2)) == 5 + (16 << 32) + 32
    seed = mapgen.chunk_seed(0, (-1, -1))
    assert 0 <= seed < 2**64
    assert seed == ((-16 << 32) - 16) % 2**64


def test_biome_rules_are_ordered():
    # Cold beats everything, even desert-like humidity.
    assert classify_biome(-0.6, -0.9) is Biome.MOUNTAINS
    assert classify_biome(0.6, -0.4) is Biome.DESERT
    # Desert is checked before ocean.
    assert classify_biome(0.6, -0.7) is Biome.DESERT
    assert classify_biome(0.1, 0.5) is Biome.SWAMP
    # Swamp wins over forest for mild, wet columns.
    assert classify_biome(0.15, 0.35) is Biome.SWAMP
    assert classify_biome(0.0, -0.7) is Biome.OCEAN
    assert classify_biome(0.3, 0.1) is Biome.FOREST
    assert classify_biome(0.3, -0.1) is Biome.HILLS
    assert classify_biome(0.1, -0.1) is Biome.PLAINS
    assert classify_biome(0.0, 0.0) is Biome.PLAINS
    assert Biome.OCEAN.display_name == 'Ocean'


def test_vectorised_biomes_match_scalar_rules():
    rng = np.random.RandomState(5)
    t = rng.uniform(-1, 1, size=500)
    h = rng.uniform(-1, 1, size=500)
    codes = classify_biome_codes(t, h)
    for ti, hi, code in zip(t, h, codes):
        assert mapgen.BIOMES[code] is classify_biome(ti, hi)


def test_chunk_biomes_match_point_queries():
    gen = WorldGenerator(42)
    coord = ChunkCoordinate(-2, 3)
    codes = gen.biome_codes(coord)
    heights = gen.terrain_heights(coord, codes)
    wx, wz = coord.world_position()
    for x, z in [(0, 0), (3, 11), (15, 15), (8, 1)]:
        biome = gen.get_biome(wx + x, wz + z)
        assert mapgen.BIOMES[codes[z, x]] is biome
        assert abs(gen.get_terrain_height(wx + x, wz + z) - heights[z, x]) <= 1


def test_terrain_heights_in_range():
    gen = WorldGenerator(3)
    for coord in [(0, 0), (10, 10), (-20, 4)]:
        coord = ChunkCoordinate(*coord)
        heights = gen.terrain_heights(coord, gen.biome_codes(coord))
        assert heights.min() >= config.MIN_TERRAIN_HEIGHT
        assert heights.max() <= config.MAX_TERRAIN_HEIGHT


def test_ore_vein_replaces_only_stone():
    gen = WorldGenerator(1)
    chunk = _stone_chunk(top=20)
    chunk.set_block(5, 10, 5, BlockType.DIRT)
    placed = gen.place_ore_vein(chunk, 5, 10, 5, BlockType.IRON_ORE, 6, random.Random(0))
    assert placed == 0
    placed = gen.place_ore_vein(chunk, 2, 2, 2, BlockType.IRON_ORE, 6, random.Random(0))
    assert 1 <= placed <= 6
    assert int(np.count_nonzero(chunk.blocks == BlockType.IRON_ORE)) == placed
    assert chunk.get_block(2, 2, 2) is BlockType.IRON_ORE


def test_ore_vein_stays_connected_and_bounded():
    gen = WorldGenerator(1)
    for traversal in ('stack', 'queue'):
        for seed in range(20):
            chunk = _stone_chunk()
            placed = gen.place_ore_vein(chunk, 0, 30, 0, BlockType.COAL_ORE, 8, random.Random(seed),
                traversal=traversal)
            cells = set(map(tuple, np.argwhere(chunk.grid() == BlockType.COAL_ORE)))
            assert len(cells) == placed <= 8
            # Every cell touches another one unless the vein is a single block.
            if placed > 1:
                for y, z, x in cells:
                    assert any((y + dy, z + dz, x + dx) in cells
                        for dx, dy, dz in mapgen.VEIN_STEPS)


def test_ore_vein_always_spreading_fills_max_size():
    gen = WorldGenerator(1)

    class AlwaysSpread(random.Random):
        def random(self):
            return 0.0

    for traversal in ('stack', 'queue'):
        chunk = _stone_chunk()
        placed = gen.place_ore_vein(chunk, 8, 30, 8, BlockType.GOLD_ORE, 7, AlwaysSpread(), traversal=traversal)
        assert placed == 7
    # Breadth-first growth fills the six neighbours first; depth-first runs
    # off along the last pushed direction (-z).
    chunk = _stone_chunk()
    gen.place_ore_vein(chunk, 8, 30, 8, BlockType.GOLD_ORE, 7, AlwaysSpread(), traversal='queue')
    cells = set(map(tuple, np.argwhere(chunk.grid() == BlockType.GOLD_ORE)))
    assert cells == {(30, 8, 8), (30, 8, 9), (30, 8, 7), (31, 8, 8), (29, 8, 8), (30, 9, 8), (30, 7, 8)}
    chunk = _stone_chunk()
    gen.place_ore_vein(chunk, 8, 30, 8, BlockType.GOLD_ORE, 7, AlwaysSpread(), traversal='stack')
    cells = set(map(tuple, np.argwhere(chunk.grid() == BlockType.GOLD_ORE)))
    assert cells == set((30, z, 8) for z in range(2, 9))


def test_unknown_traversal_raises():
    with pytest.raises(ValueError):
        WorldGenerator(1, vein_traversal='spiral')
    gen = WorldGenerator(1)
    with pytest.raises(ValueError):
        gen.place_ore_vein(_stone_chunk(), 1, 1, 1, BlockType.COAL_ORE, 3, random.Random(0), traversal='heap')


def test_queue_traversal_from_config():
    prev = config.ORE_VEIN_TRAVERSAL
    config.ORE_VEIN_TRAVERSAL = 'queue'
    try:
        gen = WorldGenerator(9)
        assert gen.vein_traversal == 'queue'
        a = gen.generate_chunk(ChunkCoordinate(0, 0))
        b = gen.generate_chunk(ChunkCoordinate(0, 0))
        assert (a.blocks == b.blocks).all()
    finally:
        config.ORE_VEIN_TRAVERSAL = prev


def test_tree_shape():
    gen = WorldGenerator(1)
    chunk = Chunk((0, 0))
    chunk.fill_region(0, 0, 0, CHUNK_SIZE, 60, CHUNK_SIZE, BlockType.GRASS)
    rng = random.Random(4)
    height = random.Random(4).randrange(4, 8)
    gen.place_tree(chunk, 8, 60, 8, rng)
    for dy in range(height):
        assert chunk.get_block(8, 60 + dy, 8) is BlockType.LOG
    leaves = np.argwhere(chunk.grid() == BlockType.LEAVES)
    assert len(leaves) > 0
    top = 60 + height
    for y, z, x in leaves:
        assert top - 3 <= y <= top + 1
        radius = 1 if y >= top else 2
        assert (x - 8)**2 + (z - 8)**2 <= radius * radius


def test_tree_at_chunk_edge_stays_inside():
    gen = WorldGenerator(1)
    chunk = Chunk((0, 0))
    gen.place_tree(chunk, 0, 100, 15, random.Random(1))
    assert chunk.get_block(0, 100, 15) is BlockType.LOG
    assert chunk.block_count() > 4


def test_surface_features_follow_biome():
    gen = WorldGenerator(1)
    chunk = Chunk((0, 0))
    chunk.fill_region(0, 0, 0, CHUNK_SIZE, 70, CHUNK_SIZE, BlockType.GRASS)
    ocean = np.full((CHUNK_SIZE, CHUNK_SIZE), mapgen.BIOMES.index(Biome.OCEAN))
    gen.generate_surface_features(chunk, ocean, random.Random(0))
    assert chunk.block_count() == CHUNK_SIZE * CHUNK_SIZE * 70

    forest = np.full((CHUNK_SIZE, CHUNK_SIZE), mapgen.BIOMES.index(Biome.FOREST))
    gen.generate_surface_features(chunk, forest, random.Random(0))
    above = chunk.grid()[70:]
    kinds = set(int(v) for v in np.unique(above)) - {int(BlockType.AIR)}
    assert kinds <= {int(BlockType.LOG), int(BlockType.LEAVES), int(BlockType.TALL_GRASS)}
    assert int(BlockType.TALL_GRASS) in kinds


def test_surface_level_ignores_water():
    chunk = Chunk((0, 0))
    chunk.fill_region(0, 0, 0, 1, 40, 1, BlockType.SAND)
    chunk.fill_region(0, 40, 0, 1, 65, 1, BlockType.WATER)
    assert mapgen.surface_level(chunk.grid(), 0, 0) == 39
    assert mapgen.surface_level(chunk.grid(), 1, 1) is None
