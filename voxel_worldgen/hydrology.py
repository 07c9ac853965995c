# voxel_worldgen/hydrology.py

"""
================================================================================
HYDROLOGY SYSTEM
================================================================================
Places oceans, lakes and rivers into the voxel code array and decorates the
shores around them.

The water-body pass runs in six steps:
    1. Measure column surfaces and seed the water map with ocean columns.
    2. Mark lakes, strict local depressions and enclosed basins.
    3. Grow the water map into adjacent low columns.
    4. Fill water columns from a smoothed bed up to sea level.
    5. Turn shore columns into beaches.
    6. Cut river channels along a band of river noise.
A separate underwater smoothing pass (smooth_underwater) removes jagged
outcrops below water beds once caves have been carved.

Data Contract:
---------------
- Inputs:
    - codes (np.ndarray): uint8 block codes (length, max_height, width),
      modified in place.
    - settings (GenerationSettings), seed (int), biomes (np.ndarray).
- Outputs:
    - WaterBodies: the water map, bed heights, pre-hydrology surface heights
      and the river columns. Used by later stages only.
- Side Effects: Mutates 'codes'.
- Invariants: Neither lakes, oceans nor rivers place water above seaLevel.
================================================================================
"""

import math
from dataclasses import dataclass

import numpy as np
from numba import njit
from scipy.ndimage import binary_dilation, convolve

from . import blocks
from . import climate
from . import config as DEFAULTS
from .heightmap import radial_blur
from .noise import noise_layer_2d, generate_perlin_noise, stage_rng

_EIGHT_NEIGHBORS = np.ones((3, 3), dtype=bool)
_NEIGHBOR_OFFSETS = [(dz, dx) for dz in (-1, 0, 1) for dx in (-1, 0, 1) if (dz, dx) != (0, 0)]


@dataclass
class WaterBodies:
    water: np.ndarray        # bool (length, width): columns belonging to a body of water
    bed: np.ndarray          # int64 (length, width): bed height, -1 where nothing was filled
    surface: np.ndarray      # int64 (length, width): surface heights before hydrology
    river: np.ndarray        # bool (length, width): columns that received river water
    beach_columns: int = 0
    river_channels: int = 0


def top_solid_heights(codes: np.ndarray) -> np.ndarray:
    """Highest y >= 1 holding a non-water block, per column; 0 if none."""
    solid = (codes != blocks.AIR) & (codes != blocks.WATER)
    solid[:, 0, :] = False
    max_height = codes.shape[1]
    flipped = solid[:, ::-1, :]
    top = max_height - 1 - np.argmax(flipped, axis=1)
    return np.where(flipped.any(axis=1), top, 0).astype(np.int64)


def _interior_neighbors(values: np.ndarray) -> np.ndarray:
    """Stacks the 8 neighbours of every interior cell: shape (8, L - 2, W - 2)."""
    length, width = values.shape
    return np.stack([values[1 + dz:length - 1 + dz, 1 + dx:width - 1 + dx]
                     for dz, dx in _NEIGHBOR_OFFSETS])


def mark_depressions(surface: np.ndarray, lake: np.ndarray, water: np.ndarray,
                     sea_level: int) -> np.ndarray:
    """
    Step 2. An interior, non-water column at or below sea level becomes water
    when it lies under a strong lake-noise peak, is a strict local depression,
    or sits in a basin with at least 5 of 8 neighbours 2+ blocks higher.
    """
    marked = water.copy()
    length, width = surface.shape
    if length < 3 or width < 3:
        return marked

    height = surface[1:-1, 1:-1]
    neighbors = _interior_neighbors(surface)
    valid = neighbors > 0

    candidate = ~water[1:-1, 1:-1] & (height <= sea_level)
    under_lake = (lake[1:-1, 1:-1] > DEFAULTS.LAKE_NOISE_THRESHOLD) & (height < sea_level - 1)
    depression = np.all(~valid | (neighbors >= height), axis=0) & (height < sea_level)
    higher = np.count_nonzero(valid & (neighbors >= height + DEFAULTS.BASIN_NEIGHBOR_RISE), axis=0)
    basin = (height < sea_level - 2) & (higher >= DEFAULTS.BASIN_MIN_HIGHER_NEIGHBORS)

    marked[1:-1, 1:-1] |= candidate & (under_lake | depression | basin)
    return marked


def grow_water(water: np.ndarray, surface: np.ndarray, sea_level: int,
               iterations: int = DEFAULTS.FLOOD_GROWTH_ITERATIONS) -> np.ndarray:
    """Step 3. Each iteration floods interior columns next to water that are at or below sea level."""
    interior = np.zeros_like(water)
    interior[1:-1, 1:-1] = True
    low = surface <= sea_level
    for _ in range(iterations):
        near_water = binary_dilation(water, structure=_EIGHT_NEIGHBORS)
        water = water | (interior & low & near_water)
    return water


def water_bed_heights(surface: np.ndarray) -> np.ndarray:
    """
    max(h - 2, floor(mean of the in-bounds 3x3 window)), never raised above
    the column's own surface and never below y = 1.
    """
    window = np.ones((3, 3))
    total = convolve(surface.astype(np.float64), window, mode='constant', cval=0.0)
    count = convolve(np.ones(surface.shape), window, mode='constant', cval=0.0)
    smoothed = np.floor(total / count).astype(np.int64)
    bed = np.maximum(surface - 2, smoothed)
    return np.minimum(np.maximum(bed, 1), np.maximum(surface, 1))


def fill_water(codes: np.ndarray, water: np.ndarray, surface: np.ndarray, sea_level: int,
               rng: np.random.Generator) -> np.ndarray:
    """
    Step 4. Water columns below sea level get a bed block and water over
    (bed, sea_level]. Deep water (> 3 blocks) rests on gravel or clay,
    shallow water on sand. Returns the bed-height map.
    """
    bed_map = np.full(surface.shape, -1, dtype=np.int64)
    beds = water_bed_heights(surface)
    zs, xs = np.nonzero(water & (surface < sea_level))
    draws = rng.random(zs.size)

    for z, x, draw in zip(zs, xs, draws):
        bed = beds[z, x]
        codes[z, bed + 1:sea_level + 1, x] = blocks.WATER
        if sea_level - bed > DEFAULTS.DEEP_WATER_DEPTH:
            codes[z, bed, x] = blocks.GRAVEL if draw < DEFAULTS.GRAVEL_BED_PROBABILITY else blocks.CLAY
        else:
            codes[z, bed, x] = blocks.SAND
        bed_map[z, x] = bed
    return bed_map


def decorate_beaches(codes: np.ndarray, water: np.ndarray, surface: np.ndarray, sea_level: int,
                     rng: np.random.Generator) -> int:
    """
    Step 5. Dry columns touching water with a surface in
    [sea_level - 2, sea_level + 1] become sand (70%) or light sand, and half
    of them get sand one block down as well.
    """
    shore = binary_dilation(water, structure=_EIGHT_NEIGHBORS) & ~water
    beach = shore & (surface >= sea_level - 2) & (surface <= sea_level + 1)
    zs, xs = np.nonzero(beach)
    draws = rng.random((zs.size, 2))

    for z, x, (top_draw, under_draw) in zip(zs, xs, draws):
        height = surface[z, x]
        codes[z, height, x] = blocks.SAND if top_draw < DEFAULTS.BEACH_SAND_PROBABILITY else blocks.SAND_LIGHT
        if under_draw < DEFAULTS.BEACH_UNDERLAYER_PROBABILITY and height > 1:
            codes[z, height - 1, x] = blocks.SAND
    return int(zs.size)


def river_channel(height: int, sea_level: int):
    """(depth, water_height) of a river channel cut into a column of the given height."""
    depth = min(DEFAULTS.RIVER_MAX_DEPTH,
                max(1, math.floor((height - sea_level) * DEFAULTS.RIVER_DEPTH_FACTOR) + 1))
    water_height = max(height - depth, min(sea_level, height - 1))
    return depth, water_height


def carve_rivers(codes: np.ndarray, water: np.ndarray, bed: np.ndarray, surface: np.ndarray,
                 river_noise: np.ndarray, sea_level: int, rng: np.random.Generator):
    """
    Step 6. Cuts channels where the river noise falls strictly inside the
    river band. Channels are processed in row order, so a river column that
    became water shields its neighbours from later bank decoration.
    Returns (river mask, channels cut).
    """
    length, width = surface.shape
    low, high = DEFAULTS.RIVER_BAND
    river = np.zeros_like(water)
    in_band = (river_noise > low) & (river_noise < high) & (surface <= sea_level + DEFAULTS.RIVER_MAX_RISE)
    channels = 0

    for z, x in np.argwhere(in_band):
        if water[z, x]:
            continue
        height = int(surface[z, x])
        _, water_height = river_channel(height, sea_level)
        if not 0 < water_height < height:
            continue

        codes[z, max(water_height, height - DEFAULTS.RIVER_CLEARANCE):height + 1, x] = blocks.AIR
        channels += 1
        if water_height <= sea_level:
            codes[z, water_height, x] = blocks.WATER
            water[z, x] = True
            river[z, x] = True
            bed[z, x] = water_height

        for dx in (-1, 0, 1):
            for dz in (-1, 0, 1):
                if dx == 0 and dz == 0:
                    continue
                nz, nx = z + dz, x + dx
                if not (0 <= nz < length and 0 <= nx < width) or water[nz, nx]:
                    continue
                bank_height = surface[nz, nx]
                if 0 < bank_height <= water_height + DEFAULTS.RIVER_BANK_RISE:
                    codes[nz, bank_height, nx] = (blocks.SAND if rng.random() < DEFAULTS.RIVER_BANK_SAND_PROBABILITY
                                                  else blocks.DIRT)
    return river, channels


def carve_water_bodies(codes: np.ndarray, settings, seed: int, biomes: np.ndarray) -> WaterBodies:
    """Runs hydrology steps 1 to 6 on the code array."""
    width, length, sea_level = settings.width, settings.length, settings.sea_level

    surface = top_solid_heights(codes)
    water = biomes == climate.OCEAN

    lake_noise = noise_layer_2d(width, length, DEFAULTS.LAKE_NOISE, seed + DEFAULTS.LAKE_SEED_OFFSET)
    lake = radial_blur(lake_noise, DEFAULTS.LAKE_NOISE_SMOOTHING_RADIUS)

    water = mark_depressions(surface, lake, water, sea_level)
    water = grow_water(water, surface, sea_level)

    water_rng = stage_rng(seed, DEFAULTS.WATER_RNG_SEED_OFFSET)
    bed = fill_water(codes, water, surface, sea_level, water_rng)
    beach_columns = decorate_beaches(codes, water, surface, sea_level, water_rng)

    river_noise = generate_perlin_noise(
        width, length,
        scale=DEFAULTS.RIVER_NOISE_BASE_SCALE + settings.river_freq,
        seed=seed + DEFAULTS.RIVER_SEED_OFFSET,
        **DEFAULTS.RIVER_NOISE,
    )
    river, channels = carve_rivers(codes, water, bed, surface, river_noise, sea_level,
                                   stage_rng(seed, DEFAULTS.RIVER_RNG_SEED_OFFSET))

    return WaterBodies(water=water, bed=bed, surface=surface, river=river,
                       beach_columns=beach_columns, river_channels=channels)


@njit
def _smooth_underwater(codes, water, bed, threshold_base, threshold_range, min_adjacent_water):
    length, max_height, width = codes.shape
    removed = 0
    for z in range(length):
        for x in range(width):
            bed_height = bed[z, x]
            if not water[z, x] or bed_height <= 0:
                continue
            for y in range(bed_height - 1, 0, -1):
                if codes[z, y, x] == 0:
                    continue
                adjacent_blocks = 0
                adjacent_water = 0
                for dz in range(-1, 2):
                    for dx in range(-1, 2):
                        if dz == 0 and dx == 0:
                            continue
                        nz = z + dz
                        nx = x + dx
                        if 0 <= nz < length and 0 <= nx < width:
                            if codes[nz, y, nx] != 0:
                                adjacent_blocks += 1
                            if water[nz, nx]:
                                adjacent_water += 1
                height_factor = (y - 1) / bed_height
                threshold = int(threshold_base + threshold_range * height_factor)
                if adjacent_blocks <= threshold and adjacent_water >= min_adjacent_water:
                    codes[z, y, x] = 0
                    removed += 1
    return removed


def smooth_underwater(codes: np.ndarray, bodies: WaterBodies) -> int:
    """
    Step 7. Beneath every water bed, removes voxels with few solid neighbours
    while at least 4 neighbouring columns are water. The neighbour threshold
    rises from 2 near the floor to 5 just under the bed. Returns the number
    of voxels removed.
    """
    return int(_smooth_underwater(codes, bodies.water, bodies.bed,
                                  DEFAULTS.UNDERWATER_THRESHOLD_BASE,
                                  DEFAULTS.UNDERWATER_THRESHOLD_RANGE,
                                  DEFAULTS.UNDERWATER_MIN_ADJACENT_WATER))
