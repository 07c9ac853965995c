import os
import sys

import numpy as np

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from voxel_worldgen import blocks, climate, vegetation
from voxel_worldgen.vegetation import GridOffsets

NO_OFFSET = GridOffsets(0, 0, 0, 0)


def grassland(size=30, max_height=20, surface_code=blocks.GRASS):
    codes = np.zeros((size, max_height, size), dtype=np.uint8)
    codes[:, 0, :] = blocks.LAVA
    codes[:, 1:6, :] = blocks.STONE
    codes[:, 6, :] = surface_code
    return codes


def test_grid_offsets_stay_within_spacing():
    offsets = GridOffsets.draw(np.random.default_rng(9))
    assert 0 <= offsets.tree_x < 5 and 0 <= offsets.tree_z < 5
    assert 0 <= offsets.cactus_x < 7 and 0 <= offsets.cactus_z < 7


def test_cactus_probability_bands():
    assert vegetation.cactus_probability(0.9) == 0.35
    assert vegetation.cactus_probability(0.75) == 0.3
    assert vegetation.cactus_probability(0.65) == 0.25
    assert vegetation.cactus_probability(0.1) == 0.2


def test_surface_at_ignores_water():
    codes = grassland(size=2)
    codes[0, 7:9, 0] = blocks.WATER
    assert vegetation.surface_at(codes, 0, 0) == 6
    codes[1, :, 1] = blocks.AIR
    assert vegetation.surface_at(codes, 1, 1) == 0


def test_trees_grow_in_forests():
    codes = grassland()
    before = codes.copy()
    biomes = np.full((30, 30), climate.FOREST, dtype=np.uint8)
    placed = vegetation.place_trees(codes, biomes, np.random.default_rng(1), NO_OFFSET)

    assert placed > 0
    assert placed == int(np.count_nonzero(codes != before))
    assert np.all(codes[:, :7, :] == before[:, :7, :])
    zs, _, xs = np.nonzero(codes == blocks.LOG)
    assert np.all(zs % 5 == 0) and np.all(xs % 5 == 0)
    assert (codes == blocks.OAK_LEAVES).any()
    assert not (codes == blocks.POPLAR_LOG).any()


def test_snowy_trees_are_poplars():
    codes = grassland(surface_code=blocks.SNOW)
    biomes = np.full((30, 30), climate.SNOWY_FOREST, dtype=np.uint8)
    vegetation.place_trees(codes, biomes, np.random.default_rng(2), NO_OFFSET)
    assert (codes == blocks.POPLAR_LOG).any()
    assert not (codes == blocks.LOG).any()
    assert not (codes == blocks.OAK_LEAVES).any()


def test_trees_need_headroom():
    codes = grassland(max_height=9)
    before = codes.copy()
    biomes = np.full((30, 30), climate.FOREST, dtype=np.uint8)
    assert vegetation.place_trees(codes, biomes, np.random.default_rng(1), NO_OFFSET) == 0
    assert np.array_equal(codes, before)


def test_trees_never_replace_blocks():
    codes = np.full((10, 8, 10), blocks.STONE, dtype=np.uint8)
    biomes = np.full((10, 10), climate.FOREST, dtype=np.uint8)
    assert vegetation.place_trees(codes, biomes, np.random.default_rng(1), NO_OFFSET) == 0
    assert np.all(codes == blocks.STONE)


def test_cacti_grow_on_hot_desert_sand():
    codes = grassland(surface_code=blocks.SAND)
    before = codes.copy()
    biomes = np.full((30, 30), climate.DESERT, dtype=np.uint8)
    temperature = np.full((30, 30), 0.9)
    placed = vegetation.place_cacti(codes, biomes, temperature, np.random.default_rng(3), NO_OFFSET)

    assert placed > 0
    assert placed == int(np.count_nonzero(codes == blocks.CACTUS))
    assert np.all(codes[:, :7, :] == before[:, :7, :])
    zs, ys, xs = np.nonzero(codes == blocks.CACTUS)
    assert np.all(zs % 7 == 0) and np.all(xs % 7 == 0)
    assert ys.min() == 7 and ys.max() <= 10


def test_cacti_skip_non_sand_surfaces():
    codes = grassland()
    biomes = np.full((30, 30), climate.DESERT, dtype=np.uint8)
    temperature = np.full((30, 30), 0.9)
    assert vegetation.place_cacti(codes, biomes, temperature, np.random.default_rng(3), NO_OFFSET) == 0


def test_dunes_only_fill_free_cells():
    codes = grassland(surface_code=blocks.SAND)
    codes[:, 7, ::2] = blocks.CACTUS
    before = codes.copy()
    biomes = np.full((30, 30), climate.DESERT, dtype=np.uint8)
    placed = vegetation.place_dunes(codes, biomes, np.random.default_rng(4))

    changed = codes != before
    assert placed > 0
    assert placed == int(np.count_nonzero(changed))
    assert np.all(before[changed] == blocks.AIR)
    assert np.all(codes[changed] == blocks.SANDSTONE)
    assert np.all(codes[:, 7, ::2] == blocks.CACTUS)


def test_dunes_stay_in_desert():
    codes = grassland(surface_code=blocks.SAND)
    biomes = np.full((30, 30), climate.PLAINS, dtype=np.uint8)
    assert vegetation.place_dunes(codes, biomes, np.random.default_rng(4)) == 0


def test_dunes_never_pile_on_cacti():
    for seed in range(50):
        codes = np.zeros((1, 12, 1), dtype=np.uint8)
        codes[0, 0, 0] = blocks.LAVA
        codes[0, 1:6, 0] = blocks.SAND
        codes[0, 6:9, 0] = blocks.CACTUS
        before = codes.copy()
        biomes = np.full((1, 1), climate.DESERT, dtype=np.uint8)
        assert vegetation.place_dunes(codes, biomes, np.random.default_rng(seed)) == 0
        assert np.array_equal(codes, before)


def test_dunes_skip_leaf_and_stone_tops():
    codes = grassland(size=6, surface_code=blocks.SAND)
    codes[:3, 7, :] = blocks.OAK_LEAVES
    codes[3:, 6, :] = blocks.STONE
    biomes = np.full((6, 6), climate.DESERT, dtype=np.uint8)
    assert vegetation.place_dunes(codes, biomes, np.random.default_rng(1)) == 0
