import os
import sys

import numpy as np

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from voxel_worldgen import blocks, climate, columns, density
from voxel_worldgen.settings import GenerationSettings


def flat_columns(biome_row, rock_value=0.0, sea_level=32):
    width = len(biome_row)
    settings = GenerationSettings(width=width, length=2, max_height=40, sea_level=sea_level,
                                  is_completely_flat=True)
    biomes = np.array([biome_row, biome_row], dtype=np.uint8)
    field = density.build_density_field(settings, 0, biomes, np.full((2, width), 0.25))
    rock = np.full((2, width), rock_value)
    return columns.build_columns(settings, field, biomes, rock)


def test_flat_column_layout():
    codes = flat_columns([climate.PLAINS, climate.SNOWY_TAIGA, climate.DESERT])
    assert codes.shape == (2, 40, 3)
    assert np.all(codes[:, 0, :] == blocks.LAVA)
    assert np.all(codes[:, 1:21, :] == blocks.STONE)
    assert np.all(codes[:, 25:, :] == blocks.AIR)

    plains, snowy, desert = codes[0, :, 0], codes[0, :, 1], codes[0, :, 2]
    assert np.all(plains[21:24] == blocks.DIRT) and plains[24] == blocks.GRASS
    assert np.all(snowy[21:25] == blocks.SNOW)
    assert np.all(desert[21:25] == blocks.SAND)


def test_rock_outcrops_become_cobblestone():
    codes = flat_columns([climate.FOREST, climate.DESERT], rock_value=0.9)
    assert np.all(codes[:, 21:25, 0] == blocks.COBBLESTONE)
    assert np.all(codes[:, 21:25, 1] == blocks.SAND)


def test_ocean_columns_below_sea_are_gravel():
    codes = flat_columns([climate.OCEAN, climate.PLAINS])
    assert np.all(codes[:, 21:25, 0] == blocks.GRAVEL)
    assert np.all(codes[:, 1:21, 0] == blocks.STONE)
    assert codes[0, 24, 1] == blocks.GRASS


def test_ocean_columns_above_sea_keep_grass():
    codes = flat_columns([climate.OCEAN], sea_level=10)
    assert codes[0, 24, 0] == blocks.GRASS
    assert np.all(codes[0, 21:24, 0] == blocks.DIRT)


def test_column_materials_lookup():
    biomes = np.array([[climate.SWAMP, climate.SAVANNA, climate.OCEAN]], dtype=np.uint8)
    subsurface, surface, underwater = columns.column_materials(biomes, np.zeros((1, 3)))
    assert subsurface.tolist() == [[blocks.DIRT, blocks.SAND, blocks.DIRT]]
    assert surface.tolist() == [[blocks.GRASS, blocks.SAND, blocks.GRASS]]
    assert underwater.tolist() == [[blocks.AIR, blocks.AIR, blocks.GRAVEL]]
