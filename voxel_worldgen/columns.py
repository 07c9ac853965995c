# voxel_worldgen/columns.py

"""
================================================================================
COLUMN BUILDER
================================================================================
Turns the density field into the initial voxel code array: a lava floor,
stone, a three-block biome subsurface and a biome surface block.

Data Contract:
---------------
- Inputs:
    - settings (GenerationSettings)
    - density (np.ndarray): float32 (length, max_height, width) field.
    - biomes (np.ndarray): uint8 biome map (length, width).
    - rock (np.ndarray): Rock noise (length, width) in [0, 1].
- Outputs:
    - uint8 block code array (length, max_height, width), indexed [z, y, x].
- Side Effects: None, apart from optional progress reports.
- Invariants: y = 0 is lava in every column. Every other solid density voxel
  receives exactly one code; air stays blocks.AIR.
================================================================================
"""

import numpy as np

from . import blocks
from . import climate
from . import config as DEFAULTS
from .density import surface_heights


def _material_luts():
    biome_count = len(climate.BIOME_NAMES)
    subsurface = np.zeros(biome_count, dtype=np.uint8)
    surface = np.zeros(biome_count, dtype=np.uint8)
    underwater = np.zeros(biome_count, dtype=np.uint8)
    for biome_id, materials in climate.BIOME_MATERIALS.items():
        subsurface[biome_id] = materials.subsurface
        surface[biome_id] = materials.surface
        underwater[biome_id] = materials.underwater or blocks.AIR
    return subsurface, surface, underwater


def column_materials(biomes: np.ndarray, rock: np.ndarray):
    """
    Per-column (subsurface, surface, underwater) codes. Rock noise above the
    outcrop threshold turns dirt and grass into cobblestone. A zero
    underwater code means no override.
    """
    subsurface_lut, surface_lut, underwater_lut = _material_luts()
    subsurface = subsurface_lut[biomes]
    surface = surface_lut[biomes]
    underwater = underwater_lut[biomes]

    rocky = rock > DEFAULTS.ROCK_OUTCROP_THRESHOLD
    subsurface = np.where(rocky & (subsurface == blocks.DIRT), blocks.COBBLESTONE, subsurface)
    surface = np.where(rocky & (surface == blocks.GRASS), blocks.COBBLESTONE, surface)
    return subsurface.astype(np.uint8), surface.astype(np.uint8), underwater


def build_columns(settings, density: np.ndarray, biomes: np.ndarray, rock: np.ndarray,
                  progress=None) -> np.ndarray:
    length, max_height, width = density.shape
    surface_height = surface_heights(density)
    subsurface, surface, underwater = column_materials(biomes, rock)

    y = np.arange(max_height)[:, np.newaxis]
    below_sea = y < settings.sea_level
    codes = np.zeros((length, max_height, width), dtype=np.uint8)

    for z in range(length):
        top = surface_height[z][np.newaxis, :]
        row = np.where(
            y < top - DEFAULTS.SUBSURFACE_DEPTH,
            blocks.STONE,
            np.where(y < top, subsurface[z][np.newaxis, :], surface[z][np.newaxis, :]),
        )
        flooded = (underwater[z] != blocks.AIR)[np.newaxis, :] & below_sea \
            & (y >= top - DEFAULTS.SUBSURFACE_DEPTH)
        row = np.where(flooded, underwater[z][np.newaxis, :], row)

        codes[z] = np.where(density[z] >= 0, row, blocks.AIR)
        codes[z, 0, :] = blocks.LAVA

        if progress is not None:
            progress.report_rows("Building terrain", z, length,
                                 DEFAULTS.PROGRESS["columns"], DEFAULTS.PROGRESS["columns_end"])
    return codes
