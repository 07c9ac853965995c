# voxel_worldgen/mountains.py

"""
================================================================================
MOUNTAIN RANGE OVERLAY
================================================================================
Raises a range of mountains along all four world borders, highest at the
edges and corners, and optionally caps them with snow.

Data Contract:
---------------
- Inputs:
    - codes (np.ndarray): uint8 block codes, modified in place.
    - settings (GenerationSettings): Reads settings.mountain_range.
    - seed (int): Seeds the snow-cap draws.
- Outputs:
    - The number of voxels placed.
- Side Effects: Mutates 'codes'.
- Invariants: Columns are only ever raised, never lowered, and never above
  max_height - 1.
================================================================================
"""

import numpy as np

from . import blocks
from . import config as DEFAULTS
from .hydrology import top_solid_heights
from .noise import stage_rng


def mountain_dimensions(settings):
    """(base height, snow line, band width) for the configured range."""
    mountain_range = settings.mountain_range
    size_adjustment = max(DEFAULTS.MOUNTAIN_MIN_SIZE_ADJUSTMENT, 1.0 - mountain_range.size * 4.0)
    base_height = mountain_range.height * 2 * (1 + size_adjustment * 0.5)
    snow_height = mountain_range.snow_height * DEFAULTS.SNOW_HEIGHT_MULTIPLIER
    band_width = max(DEFAULTS.MOUNTAIN_MIN_WIDTH,
                     int(np.floor(settings.width * DEFAULTS.MOUNTAIN_WIDTH_FRACTION * size_adjustment)))
    return base_height, snow_height, band_width


def mountain_heights(width: int, length: int, base_height: float, band_width: int) -> np.ndarray:
    """
    Target peak height for every column, or 0 outside the border band.

    Height falls off with a quarter cosine of the distance to the nearest
    edge, plus a corner boost of up to 40% where two edges meet. Fixed
    sinusoidal ridge and edge terms add jaggedness.
    """
    x = np.arange(width, dtype=np.float64)[np.newaxis, :]
    z = np.arange(length, dtype=np.float64)[:, np.newaxis]
    shape = (length, width)

    from_west = np.broadcast_to(x, shape)
    from_east = np.broadcast_to(width - x - 1, shape)
    from_north = np.broadcast_to(z, shape)
    from_south = np.broadcast_to(length - z - 1, shape)
    from_edge = np.minimum.reduce([from_west, from_east, from_north, from_south])

    near_west = from_west <= band_width
    near_east = from_east <= band_width
    near_north = from_north <= band_width
    near_south = from_south <= band_width

    height_factor = np.cos(from_edge / band_width * (np.pi * 0.5))

    corners = [near_west & near_north, near_west & near_south,
               near_east & near_north, near_east & near_south]
    first_edge = np.select(corners, [from_west, from_west, from_east, from_east], default=0.0)
    second_edge = np.select(corners, [from_north, from_south, from_north, from_south], default=0.0)
    corner_boost = np.where(
        np.logical_or.reduce(corners),
        (1.0 - first_edge / band_width) * (1.0 - second_edge / band_width) * DEFAULTS.MOUNTAIN_CORNER_BOOST,
        0.0,
    )
    base = np.floor(base_height * (height_factor + corner_boost))

    # Columns on the west or east flank vary along z, the rest along x.
    along_z = ((near_west & (from_west <= from_north) & (from_west <= from_south))
               | (near_east & (from_east <= from_north) & (from_east <= from_south)))
    variation = np.where(along_z, np.broadcast_to(z / length, shape), np.broadcast_to(x / width, shape))

    ridge = np.cos(x * 0.2) * np.sin(z * 0.15) * 6
    edge_variation = np.sin(variation * np.pi * 4) * 5
    local = np.floor(base + ridge + edge_variation)

    jitter = np.sin(x * 0.8) * np.cos(z * 0.8) * 2 + np.cos(x * 0.3 + z * 0.2) * 2
    final = np.maximum(1, np.floor(local + jitter))
    return np.where(from_edge <= band_width, final, 0).astype(np.int64)


def _snow_or_stone(y: int, peak: int, snow_height: float, rng: np.random.Generator) -> int:
    if y == peak and y >= snow_height - DEFAULTS.SNOW_CAP_MARGIN:
        return blocks.SNOW
    if (y >= snow_height - DEFAULTS.SNOW_NEAR_CAP_MARGIN and y >= peak - DEFAULTS.SNOW_NEAR_CAP_DEPTH
            and rng.random() < DEFAULTS.SNOW_NEAR_CAP_PROBABILITY):
        return blocks.SNOW
    if y >= snow_height - DEFAULTS.SNOW_SPARSE_MARGIN and rng.random() < DEFAULTS.SNOW_SPARSE_PROBABILITY:
        return blocks.SNOW
    return blocks.STONE


def raise_mountain_ranges(codes: np.ndarray, settings, seed: int) -> int:
    """Fills every border column from its current surface up to its mountain height."""
    mountain_range = settings.mountain_range
    if not mountain_range.enabled:
        return 0

    base_height, snow_height, band_width = mountain_dimensions(settings)
    peaks = np.minimum(mountain_heights(settings.width, settings.length, base_height, band_width),
                       settings.max_height - 1)
    current = top_solid_heights(codes)
    rng = stage_rng(seed, DEFAULTS.MOUNTAIN_RNG_SEED_OFFSET)

    placed = 0
    for z, x in np.argwhere(peaks > current):
        peak = int(peaks[z, x])
        for y in range(int(current[z, x]) + 1, peak + 1):
            if mountain_range.snow_cap:
                codes[z, y, x] = _snow_or_stone(y, peak, snow_height, rng)
            else:
                codes[z, y, x] = blocks.STONE
            placed += 1
    return placed
