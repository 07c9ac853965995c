# voxel_worldgen/heightmap.py

"""
================================================================================
HEIGHTMAP BUILDER
================================================================================
Composites the continental, hill, detail and depth noise layers into a
normalized elevation map, then smooths and erodes it. Also produces the rock
noise layer the column builder uses to pick rocky surface material.

Data Contract:
---------------
- Inputs:
    - settings (GenerationSettings): Validated generation settings.
    - seed (int): The world seed. Layers use seed + their config.py offset.
- Outputs:
    - HeightLayers: 'height' and 'rock', float32 arrays of shape
      (length, width) indexed [z, x], both within [0, 1].
- Side Effects: None.
- Invariants: Output is deterministic for a given (settings, seed).
================================================================================
"""

from dataclasses import dataclass

import numpy as np
from numba import njit
from scipy.ndimage import convolve

from . import config as DEFAULTS
from .noise import noise_layer_2d


@dataclass
class HeightLayers:
    height: np.ndarray
    rock: np.ndarray


def radial_kernel(radius: int) -> np.ndarray:
    """Weights 1 / (1 + distance) over a (2r+1) x (2r+1) window."""
    offsets = np.arange(-radius, radius + 1)
    dz, dx = np.meshgrid(offsets, offsets, indexing='ij')
    return 1.0 / (1.0 + np.sqrt(dx * dx + dz * dz))


def radial_blur(values: np.ndarray, radius: int) -> np.ndarray:
    """
    Weighted mean over the radial kernel. Cells outside the map contribute
    nothing; each cell is normalized by the weight actually in bounds.
    """
    kernel = radial_kernel(radius)
    values = values.astype(np.float64)
    total = convolve(values, kernel, mode='constant', cval=0.0)
    weight = convolve(np.ones_like(values), kernel, mode='constant', cval=0.0)
    return total / weight


def composite_height(continental: np.ndarray, hill: np.ndarray, detail: np.ndarray,
                     depth: np.ndarray, flatness: float) -> np.ndarray:
    """
    height = (continental + hill(1-f) + detail(1-f)0.5) * (1 + depth(1-f)0.3),
    divided by its largest attainable value so it stays within [0, 1], then
    blended toward the flat target by the flatness factor f.
    """
    relief = 1.0 - flatness
    height = (continental + hill * relief + detail * relief * DEFAULTS.HILL_DETAIL_WEIGHT) \
        * (1.0 + depth * relief * DEFAULTS.DEPTH_MODULATION)
    max_height = (1.0 + relief + DEFAULTS.HILL_DETAIL_WEIGHT * relief) \
        * (1.0 + DEFAULTS.DEPTH_MODULATION * relief)
    height = height / max_height

    final = height * relief + DEFAULTS.FLAT_BLEND_TARGET * flatness
    return np.clip(final, 0.0, 1.0).astype(np.float32)


def smooth_height(height: np.ndarray, terrain_blend: float, smoothing: float) -> np.ndarray:
    """Blends the radial blur (radius floor(2 + 2 * terrain_blend)) with the raw map."""
    radius = int(np.floor(2 + terrain_blend * 2))
    blurred = radial_blur(height, radius)
    smoothed = blurred * smoothing + height * (1.0 - smoothing)
    return np.clip(smoothed, 0.0, 1.0).astype(np.float32)


@njit
def _erode_block_heights(block_heights):
    length, width = block_heights.shape
    eroded = np.empty_like(block_heights)
    for z in range(length):
        for x in range(width):
            height = block_heights[z, x]
            for dz in range(-1, 2):
                for dx in range(-1, 2):
                    nz = z + dz
                    nx = x + dx
                    if 0 <= nz < length and 0 <= nx < width:
                        neighbor_height = block_heights[nz, nx]
                        if neighbor_height < height - 1:
                            height = max(height - 1, neighbor_height + 1)
            eroded[z, x] = height
    return eroded


def erode_height(smoothed: np.ndarray, roughness: float) -> np.ndarray:
    """
    Converts to integer block heights floor(36 + s * 28 * roughness), steps
    each cell down by one for every 3x3 neighbour sitting more than one block
    lower, and converts back to normalized form.
    """
    scale = DEFAULTS.EROSION_RANGE_BLOCKS * roughness
    block_heights = np.floor(DEFAULTS.EROSION_BASE_BLOCKS + smoothed.astype(np.float64) * scale).astype(np.int64)
    eroded = _erode_block_heights(block_heights)
    normalized = (eroded - DEFAULTS.EROSION_BASE_BLOCKS) / scale
    return np.clip(normalized, 0.0, 1.0).astype(np.float32)


def build_heightmap(settings, seed: int, progress=None) -> HeightLayers:
    """
    Runs the full heightmap pipeline for one world. Smoothing and erosion
    milestones go to the optional ProgressReporter.
    """
    width, length, scale = settings.width, settings.length, settings.scale

    rock = noise_layer_2d(width, length, DEFAULTS.ROCK_NOISE, seed + DEFAULTS.ROCK_SEED_OFFSET, scale)

    if settings.is_completely_flat:
        height = np.full((length, width), DEFAULTS.FLAT_HEIGHT, dtype=np.float32)
        return HeightLayers(height=height, rock=rock)

    continental = noise_layer_2d(width, length, DEFAULTS.CONTINENTAL_NOISE,
                                 seed + DEFAULTS.CONTINENTAL_SEED_OFFSET, scale)
    hill = noise_layer_2d(width, length, DEFAULTS.HILL_NOISE, seed + DEFAULTS.HILL_SEED_OFFSET, scale)
    detail = noise_layer_2d(width, length, DEFAULTS.DETAIL_NOISE, seed + DEFAULTS.DETAIL_SEED_OFFSET, scale)
    depth = noise_layer_2d(width, length, DEFAULTS.DEPTH_NOISE, seed + DEFAULTS.DEPTH_SEED_OFFSET)

    height = composite_height(continental, hill, detail, depth, settings.flatness_factor)
    if progress is not None:
        progress.report("Smoothing heightmap...", DEFAULTS.PROGRESS["smoothing"])
    smoothed = smooth_height(height, settings.terrain_blend, settings.smoothing)
    if progress is not None:
        progress.report("Applying erosion...", DEFAULTS.PROGRESS["erosion"])
    eroded = erode_height(smoothed, settings.roughness)
    return HeightLayers(height=eroded, rock=rock)
