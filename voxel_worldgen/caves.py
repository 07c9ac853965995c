# voxel_worldgen/caves.py

"""
================================================================================
CAVE & ORE CARVER
================================================================================
Carves caves out of stone using two 3D noise fields and replaces part of the
remaining stone with ores by depth band.

Data Contract:
---------------
- Inputs:
    - codes (np.ndarray): uint8 block codes, modified in place.
    - settings (GenerationSettings), seed (int)
    - surface (np.ndarray): Column surface heights (length, width).
- Outputs:
    - CaveReport with the number of carved voxels and ores placed per type.
- Side Effects: Mutates 'codes'.
- Invariants: Only voxels that are stone when the pass starts are touched,
  and each one is either carved, turned into a single ore, or left alone.
  Voxels within 2 blocks of the surface and at y < 2 are never touched.
================================================================================
"""

from dataclasses import dataclass, field

import numpy as np

from . import blocks
from . import config as DEFAULTS
from .noise import noise_layer_3d, stage_rng


@dataclass
class CaveReport:
    carved: int = 0
    ores: dict = field(default_factory=dict)


def cave_mask(small: np.ndarray, large: np.ndarray) -> np.ndarray:
    """(small > 0.6 and large > 0.5) or small > 0.7 or large > 0.65"""
    return (((small > DEFAULTS.SMALL_CAVE_PAIRED_THRESHOLD) & (large > DEFAULTS.LARGE_CAVE_PAIRED_THRESHOLD))
            | (small > DEFAULTS.SMALL_CAVE_THRESHOLD)
            | (large > DEFAULTS.LARGE_CAVE_THRESHOLD))


def ore_codes(ore: np.ndarray, y: np.ndarray, ore_rarity: float, emerald_gate: np.ndarray) -> np.ndarray:
    """
    Ore code per voxel, or blocks.STONE where no band matches. Bands are
    tested in ORE_BANDS order and the first match wins. The emerald band
    additionally needs its random gate to be open.
    """
    conditions = []
    choices = []
    for name, max_y, margin in DEFAULTS.ORE_BANDS:
        condition = (ore > ore_rarity + margin) & (y <= max_y)
        if name == "emerald":
            condition = condition & emerald_gate
        conditions.append(condition)
        choices.append(blocks.BLOCK_CODES[name])
    return np.select(conditions, choices, default=blocks.STONE).astype(np.uint8)


def carve_caves_and_ores(codes: np.ndarray, settings, seed: int, surface: np.ndarray,
                         progress=None) -> CaveReport:
    width, length, max_height = settings.width, settings.length, settings.max_height

    small = noise_layer_3d(width, max_height, length, DEFAULTS.SMALL_CAVE_NOISE,
                           seed + DEFAULTS.SMALL_CAVE_SEED_OFFSET)
    large = noise_layer_3d(width, max_height, length, DEFAULTS.LARGE_CAVE_NOISE,
                           seed + DEFAULTS.LARGE_CAVE_SEED_OFFSET)
    ore = noise_layer_3d(width, max_height, length, DEFAULTS.ORE_NOISE,
                         seed + DEFAULTS.ORE_SEED_OFFSET)
    if progress is not None:
        progress.report("Carving cave systems...", DEFAULTS.PROGRESS["carving"])

    rng = stage_rng(seed, DEFAULTS.ORE_RNG_SEED_OFFSET)
    y = np.arange(max_height)[:, np.newaxis]
    top = np.minimum(surface - DEFAULTS.CAVE_SURFACE_CLEARANCE, max_height - 3)
    report = CaveReport()
    ore_counts = np.zeros(len(blocks.BLOCK_NAMES), dtype=np.int64)

    for z in range(length):
        row = codes[z]
        eligible = (row == blocks.STONE) & (y >= 2) & (y <= top[z][np.newaxis, :])

        carve = eligible & cave_mask(small[z], large[z])
        row[carve] = blocks.AIR
        report.carved += int(np.count_nonzero(carve))

        if settings.generate_ores:
            remaining = eligible & ~carve
            emerald_gate = np.zeros(row.shape, dtype=bool)
            emerald_gate[remaining] = rng.random(np.count_nonzero(remaining)) < DEFAULTS.EMERALD_GATE_PROBABILITY
            replaced = ore_codes(ore[z], y, settings.ore_rarity, emerald_gate)
            row[remaining] = replaced[remaining]
            ore_counts += np.bincount(replaced[remaining], minlength=len(blocks.BLOCK_NAMES))

        if progress is not None:
            progress.report_rows("Generating caves and ores", z, length,
                                 DEFAULTS.PROGRESS["carving"], DEFAULTS.PROGRESS["carving_end"])

    report.ores = {blocks.BLOCK_NAMES[code]: int(ore_counts[code]) for code in blocks.ORE_CODES}
    return report
