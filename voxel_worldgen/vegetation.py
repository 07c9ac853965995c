# voxel_worldgen/vegetation.py

"""
================================================================================
VEGETATION PLACER
================================================================================
Places cacti, trees and desert sand dunes on top of the finished terrain.

Candidate columns for cacti and trees lie on a jittered grid: one random
offset per generation selects which cells of a fixed-spacing grid are tried.

Data Contract:
---------------
- Inputs:
    - codes (np.ndarray): uint8 block codes, modified in place.
    - biomes (np.ndarray): uint8 biome map (length, width).
    - temperature (np.ndarray): Biased temperature map (length, width).
    - rng (np.random.Generator): The vegetation stage's generator.
- Outputs:
    - The number of blocks placed by each function.
- Side Effects: Mutates 'codes'.
- Invariants: Nothing is ever placed over an existing block or outside the
  world box.
================================================================================
"""

from dataclasses import dataclass

import numpy as np

from . import blocks
from . import climate
from . import config as DEFAULTS

TREE_PROBABILITY = {
    climate.FOREST: 0.3,
    climate.TAIGA: 0.3,
    climate.PLAINS: 0.15,
    climate.SAVANNA: 0.15,
    climate.SNOWY_FOREST: 0.25,
    climate.SNOWY_TAIGA: 0.25,
}
DEFAULT_TREE_PROBABILITY = 0.1

# Inclusive (min, max) trunk heights.
TREE_HEIGHT_RANGE = {
    climate.SAVANNA: (5, 6),
    climate.SNOWY_PLAINS: (3, 4),
    climate.SNOWY_FOREST: (3, 4),
    climate.SNOWY_TAIGA: (3, 4),
}
DEFAULT_TREE_HEIGHT_RANGE = (4, 5)

CANOPY_RADIUS = {climate.SAVANNA: 3}
DEFAULT_CANOPY_RADIUS = 2


@dataclass
class GridOffsets:
    tree_x: int
    tree_z: int
    cactus_x: int
    cactus_z: int

    @classmethod
    def draw(cls, rng: np.random.Generator) -> "GridOffsets":
        tree_x, tree_z = rng.integers(0, DEFAULTS.TREE_GRID_SPACING, size=2)
        cactus_x, cactus_z = rng.integers(0, DEFAULTS.CACTUS_GRID_SPACING, size=2)
        return cls(int(tree_x), int(tree_z), int(cactus_x), int(cactus_z))


def surface_at(codes: np.ndarray, z: int, x: int) -> int:
    """Highest y holding a non-water block in the column; 0 if there is none."""
    column = codes[z, :, x]
    solid = np.nonzero((column != blocks.AIR) & (column != blocks.WATER))[0]
    return int(solid[-1]) if solid.size else 0


def _is_free(codes: np.ndarray, z: int, y: int, x: int) -> bool:
    length, max_height, width = codes.shape
    return 0 <= z < length and 0 <= y < max_height and 0 <= x < width and codes[z, y, x] == blocks.AIR


def _place(codes: np.ndarray, z: int, y: int, x: int, code: int) -> bool:
    if not _is_free(codes, z, y, x):
        return False
    codes[z, y, x] = code
    return True


def _column_is_clear(codes: np.ndarray, z: int, x: int, start: int, stop: int) -> bool:
    return all(_is_free(codes, z, y, x) for y in range(start, stop + 1))


def cactus_probability(temperature: float) -> float:
    for floor, probability in DEFAULTS.CACTUS_PROBABILITY_BANDS:
        if temperature > floor:
            return probability
    return DEFAULTS.CACTUS_BASE_PROBABILITY


def place_cacti(codes: np.ndarray, biomes: np.ndarray, temperature: np.ndarray,
                rng: np.random.Generator, offsets: GridOffsets) -> int:
    """3-4 block cacti on sandy desert grid cells, likelier where it is hotter."""
    length, _, width = codes.shape
    spacing = DEFAULTS.CACTUS_GRID_SPACING
    placed = 0

    for z in range(length):
        if (z + offsets.cactus_z) % spacing != 0:
            continue
        for x in range(width):
            if (x + offsets.cactus_x) % spacing != 0 or biomes[z, x] != climate.DESERT:
                continue
            surface = surface_at(codes, z, x)
            if surface <= 0 or codes[z, surface, x] not in blocks.SAND_CODES:
                continue
            if rng.random() >= cactus_probability(temperature[z, x]):
                continue

            height = int(rng.integers(3, 5))
            if _column_is_clear(codes, z, x, surface + 1, surface + height):
                codes[z, surface + 1:surface + height + 1, x] = blocks.CACTUS
                placed += height
    return placed


def _place_canopy(codes: np.ndarray, z: int, x: int, surface: int, tree_height: int,
                  radius: int, leaf: int, rng: np.random.Generator) -> int:
    placed = 0
    for ly in range(tree_height - 1, tree_height + 2):
        layer_radius = radius if ly == tree_height else radius - 1
        for lx in range(-layer_radius, layer_radius + 1):
            for lz in range(-layer_radius, layer_radius + 1):
                if lx == 0 and lz == 0 and ly < tree_height:
                    continue
                distance = np.sqrt(lx * lx + lz * lz + (ly - tree_height) ** 2 * 0.5)
                if distance <= layer_radius or (distance <= layer_radius + 0.5 and rng.random() < 0.5):
                    placed += _place(codes, z + lz, surface + ly, x + lx, leaf)

    for _ in range(DEFAULTS.TREE_STRAGGLER_LEAVES):
        lx = int(rng.integers(-2, 3))
        ly = tree_height + int(rng.integers(-1, 2))
        lz = int(rng.integers(-2, 3))
        if abs(lx) <= radius and abs(lz) <= radius:
            placed += _place(codes, z + lz, surface + ly, x + lx, leaf)
    return placed


def place_trees(codes: np.ndarray, biomes: np.ndarray, rng: np.random.Generator,
                offsets: GridOffsets) -> int:
    """
    Trees on every non-desert grid cell whose surface is not sand. Snowy
    biomes grow short poplars with cold leaves, savannas tall trees with wide
    canopies.
    """
    length, _, width = codes.shape
    spacing = DEFAULTS.TREE_GRID_SPACING
    placed = 0

    for z in range(length):
        if (z + offsets.tree_z) % spacing != 0:
            continue
        for x in range(width):
            biome = int(biomes[z, x])
            if (x + offsets.tree_x) % spacing != 0 or biome == climate.DESERT:
                continue
            surface = surface_at(codes, z, x)
            if codes[z, surface, x] in blocks.SAND_CODES:
                continue
            if rng.random() >= TREE_PROBABILITY.get(biome, DEFAULT_TREE_PROBABILITY):
                continue

            low, high = TREE_HEIGHT_RANGE.get(biome, DEFAULT_TREE_HEIGHT_RANGE)
            tree_height = int(rng.integers(low, high + 1))
            if not _column_is_clear(codes, z, x, surface + 1, surface + tree_height + 2):
                continue

            snowy = biome in climate.SNOWY_BIOMES
            log = blocks.POPLAR_LOG if snowy else blocks.LOG
            leaf = blocks.COLD_LEAVES if snowy else blocks.OAK_LEAVES
            codes[z, surface + 1:surface + tree_height + 1, x] = log
            placed += tree_height
            placed += _place_canopy(codes, z, x, surface, tree_height,
                                    CANOPY_RADIUS.get(biome, DEFAULT_CANOPY_RADIUS), leaf, rng)
    return placed


def place_dunes(codes: np.ndarray, biomes: np.ndarray, rng: np.random.Generator) -> int:
    """
    Scatters sandstone on desert surfaces. A dune block sometimes spreads to
    its four orthogonal neighbours at the same height.
    """
    length, _, width = codes.shape
    placed = 0

    for z, x in np.argwhere(biomes == climate.DESERT):
        if rng.random() >= DEFAULTS.DUNE_PROBABILITY:
            continue
        surface = surface_at(codes, z, x)
        if surface <= 0 or codes[z, surface, x] not in blocks.SAND_CODES:
            continue
        y = surface + 1
        placed += _place(codes, z, y, x, blocks.SANDSTONE)
        if rng.random() < DEFAULTS.DUNE_SPREAD_PROBABILITY:
            for dz, dx in ((-1, 0), (1, 0), (0, -1), (0, 1)):
                placed += _place(codes, z + dz, y, x + dx, blocks.SANDSTONE)
    return placed
