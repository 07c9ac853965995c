# voxel_worldgen/climate.py

"""
================================================================================
CLIMATE & BIOME CLASSIFIER
================================================================================
Generates the temperature and humidity maps and classifies every column into
one of a fixed set of biomes.

Data Contract:
---------------
- Inputs:
    - settings (GenerationSettings): Supplies the global temperature bias.
    - seed (int): The world seed.
- Outputs:
    - ClimateMaps: 'temperature' (float64, biased) and 'humidity' (float32)
      maps and a uint8
      'biomes' map, all of shape (length, width) indexed [z, x].
- Side Effects: None.
- Invariants: Classification is total. Every (temperature, humidity) pair,
  including values pushed outside [0, 1] by the temperature bias, maps to
  exactly one biome.
================================================================================
"""

from collections import namedtuple
from dataclasses import dataclass

import numpy as np

from . import blocks
from . import config as DEFAULTS
from .noise import noise_layer_2d

# --- Biome ID Constants ---
SNOWY_PLAINS = 0
SNOWY_FOREST = 1
SNOWY_TAIGA = 2
PLAINS = 3
FOREST = 4
TAIGA = 5
SWAMP = 6
SAVANNA = 7
JUNGLE = 8
DESERT = 9
OCEAN = 10

BIOME_NAMES = (
    "snowy_plains",
    "snowy_forest",
    "snowy_taiga",
    "plains",
    "forest",
    "taiga",
    "swamp",
    "savanna",
    "jungle",
    "desert",
    "ocean",
)
BIOME_IDS = {name: biome_id for biome_id, name in enumerate(BIOME_NAMES)}

SNOWY_BIOMES = (SNOWY_PLAINS, SNOWY_FOREST, SNOWY_TAIGA)

# Rows are temperature bands, columns humidity bands (both below-threshold,
# with a final catch-all band).
BIOME_TABLE = np.array([
    [SNOWY_PLAINS, SNOWY_FOREST, SNOWY_TAIGA],
    [PLAINS, FOREST, TAIGA],
    [PLAINS, FOREST, SWAMP],
    [SAVANNA, JUNGLE, SWAMP],
    [DESERT, SAVANNA, JUNGLE],
], dtype=np.uint8)

# --- Biome Materials ---
# 'underwater' replaces both layers below sea level; None keeps them.
BiomeMaterials = namedtuple("BiomeMaterials", ["subsurface", "surface", "underwater"])

_TEMPERATE = BiomeMaterials(blocks.DIRT, blocks.GRASS, None)
_SANDY = BiomeMaterials(blocks.SAND, blocks.SAND, None)
_SNOWY = BiomeMaterials(blocks.SNOW, blocks.SNOW, None)

BIOME_MATERIALS = {
    SNOWY_PLAINS: _SNOWY,
    SNOWY_FOREST: _SNOWY,
    SNOWY_TAIGA: _SNOWY,
    PLAINS: _TEMPERATE,
    FOREST: _TEMPERATE,
    TAIGA: _TEMPERATE,
    SWAMP: _TEMPERATE,
    SAVANNA: _SANDY,
    JUNGLE: _TEMPERATE,
    DESERT: _SANDY,
    OCEAN: BiomeMaterials(blocks.DIRT, blocks.GRASS, blocks.GRAVEL),
}


@dataclass
class ClimateMaps:
    temperature: np.ndarray
    humidity: np.ndarray
    biomes: np.ndarray


def classify_biome(temperature: float, humidity: float) -> int:
    """Returns the biome ID for a single (temperature, humidity) pair."""
    t_band = 0
    for threshold in DEFAULTS.TEMPERATURE_BANDS:
        if temperature < threshold:
            break
        t_band += 1
    h_band = 0
    for threshold in DEFAULTS.HUMIDITY_BANDS:
        if humidity < threshold:
            break
        h_band += 1
    return int(BIOME_TABLE[t_band, h_band])


def classify_biomes(temperature: np.ndarray, humidity: np.ndarray) -> np.ndarray:
    """Vectorized classify_biome. Band edges are exclusive upper bounds."""
    t_band = np.searchsorted(np.asarray(DEFAULTS.TEMPERATURE_BANDS), temperature, side='right')
    h_band = np.searchsorted(np.asarray(DEFAULTS.HUMIDITY_BANDS), humidity, side='right')
    return BIOME_TABLE[t_band, h_band]


def build_climate(settings, seed: int) -> ClimateMaps:
    """Generates the climate maps and the biome map for one world."""
    width, length = settings.width, settings.length

    temperature = noise_layer_2d(width, length, DEFAULTS.CLIMATE_NOISE,
                                 seed + DEFAULTS.TEMPERATURE_SEED_OFFSET)
    humidity = noise_layer_2d(width, length, DEFAULTS.CLIMATE_NOISE,
                              seed + DEFAULTS.HUMIDITY_SEED_OFFSET)

    # The bias may push temperatures outside [0, 1]; the outer bands absorb them.
    temperature = temperature.astype(np.float64) + (settings.temperature - 0.5)

    return ClimateMaps(
        temperature=temperature,
        humidity=humidity,
        biomes=classify_biomes(temperature, humidity),
    )
