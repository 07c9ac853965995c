# voxel_worldgen/density.py

"""
================================================================================
DENSITY FIELD GENERATOR
================================================================================
Builds the signed 3D density field that decides which voxels are solid. A
value >= 0 is solid and < 0 is air.

Data Contract:
---------------
- Inputs:
    - settings (GenerationSettings)
    - seed (int)
    - biomes (np.ndarray): uint8 biome map (length, width).
    - height (np.ndarray): Final normalized heightmap (length, width). Only
      flat worlds read it.
- Outputs:
    - float32 array of shape (length, max_height, width) indexed [z, y, x].
- Side Effects: None.
- Invariants: Voxels at y <= 1 are always solid, so every column has a floor.
================================================================================
"""

import numpy as np

from . import climate
from . import config as DEFAULTS
from .noise import noise_layer_3d


def noise_amplitude(roughness: float) -> float:
    """How strongly the continentalness noise perturbs the density gradient."""
    if roughness < 0.5:
        return 4.0 + (roughness - 0.3) * 4.0
    if roughness > 1.5:
        return 6.0 + (roughness - 1.5) * 2.0
    return 6.0


def flat_surface_heights(height: np.ndarray) -> np.ndarray:
    """round(16 + h * 32) per column, rounding halves up."""
    raw = DEFAULTS.FLAT_SURFACE_BASE + height.astype(np.float64) * DEFAULTS.FLAT_SURFACE_RANGE
    return np.floor(raw + 0.5).astype(np.int64)


def build_density_field(settings, seed: int, biomes: np.ndarray, height: np.ndarray) -> np.ndarray:
    width, length, max_height = settings.width, settings.length, settings.max_height
    y = np.arange(max_height, dtype=np.float64)[np.newaxis, :, np.newaxis]

    if settings.is_completely_flat:
        surface = flat_surface_heights(height)[:, np.newaxis, :]
        density = np.where(y <= surface, DEFAULTS.FLOOR_DENSITY, -DEFAULTS.FLOOR_DENSITY)
        return density.astype(np.float32)

    continentalness = noise_layer_3d(width, max_height, length, DEFAULTS.CONTINENTALNESS_NOISE_3D,
                                     seed + DEFAULTS.CONTINENTAL_SEED_OFFSET, settings.scale)

    biome_factor = np.select(
        [biomes == climate.DESERT, biomes == climate.FOREST],
        [DEFAULTS.DESERT_DENSITY_FACTOR, DEFAULTS.FOREST_DENSITY_FACTOR],
        default=1.0,
    )[:, np.newaxis, :]

    density = (DEFAULTS.REFERENCE_HEIGHT - y) * biome_factor
    density = density + continentalness * noise_amplitude(settings.roughness) * (1.0 - settings.flatness_factor)
    density[:, :2, :] = DEFAULTS.FLOOR_DENSITY
    return density.astype(np.float32)


def surface_heights(density: np.ndarray) -> np.ndarray:
    """
    Per column, the highest y >= 1 that is solid with air (or the world top)
    directly above it. Columns with no such voxel get 0.
    """
    solid = density >= 0
    open_above = np.ones_like(solid)
    open_above[:, :-1, :] = ~solid[:, 1:, :]
    candidates = solid & open_above
    candidates[:, 0, :] = False

    max_height = density.shape[1]
    flipped = candidates[:, ::-1, :]
    top = max_height - 1 - np.argmax(flipped, axis=1)
    return np.where(flipped.any(axis=1), top, 0).astype(np.int64)
