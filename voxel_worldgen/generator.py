# voxel_worldgen/generator.py

"""
================================================================================
CORE TERRAIN GENERATOR
================================================================================
This module contains the TerrainGenerator class, which runs the generation
stages in order and resolves the result into a VoxelMap.

Stage order:
    heightmap -> climate -> density -> columns -> water bodies -> caves & ores
    -> underwater smoothing -> mountain ranges -> vegetation

Data Contract:
---------------
- Inputs (on initialization):
    - settings (GenerationSettings | dict): Generation parameters. A dict is
      consolidated over the internal defaults.
    - logger: A configured Python logging object for runtime messages.
- Inputs (per call):
    - seed (int): A signed 32-bit integer.
    - block_types (Mapping[str, int]): Semantic block name -> external ID.
    - on_progress: Optional callable(message, percent).
- Outputs:
    - A VoxelMap (generate) or a GeneratedWorld with the intermediate maps
      (generate_world).
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same settings, seed and block types, the output is
  identical across calls. Settings are validated before any work begins.
================================================================================
"""

import logging
import time
from dataclasses import dataclass, field

import numpy as np

from . import config as DEFAULTS
from .blocks import VoxelMap
from .caves import CaveReport, carve_caves_and_ores
from .climate import ClimateMaps, build_climate
from .columns import build_columns
from .density import build_density_field
from .heightmap import HeightLayers, build_heightmap
from .hydrology import WaterBodies, carve_water_bodies, smooth_underwater
from .mountains import raise_mountain_ranges
from .noise import stage_rng
from .progress import ProgressReporter
from .settings import GenerationSettings, validate_seed
from .vegetation import GridOffsets, place_cacti, place_dunes, place_trees


@dataclass
class GeneratedWorld:
    """A VoxelMap plus the intermediate maps it was built from."""
    seed: int
    settings: GenerationSettings
    voxels: VoxelMap
    heightmap: HeightLayers
    climate: ClimateMaps
    water: WaterBodies = None
    caves: CaveReport = None
    stats: dict = field(default_factory=dict)


class TerrainGenerator:
    """
    Generates voxel worlds for one set of generation settings. The instance
    holds no per-world state, so it can generate any number of seeds.
    """
    def __init__(self, settings, logger: logging.Logger):
        """
        Initializes the terrain generator.

        Args:
            settings (GenerationSettings | dict): Generation parameters.
            logger (logging.Logger): The logger instance for all output.

        Raises:
            InvalidSettingsError: If any setting violates a precondition.
        """
        self.logger = logger
        if not isinstance(settings, GenerationSettings):
            settings = GenerationSettings.from_config(settings)
        self.settings = settings.validate()

        s = self.settings
        self.logger.info(
            f"TerrainGenerator initialized: {s.width}x{s.length} columns, "
            f"max height {s.max_height}, sea level {s.sea_level}"
            f"{', completely flat' if s.is_completely_flat else ''}."
        )

    def generate(self, seed: int, block_types, on_progress=None) -> VoxelMap:
        """Generates one world and returns its VoxelMap."""
        return self.generate_world(seed, block_types, on_progress).voxels

    def generate_world(self, seed: int, block_types, on_progress=None) -> GeneratedWorld:
        seed = validate_seed(seed)
        settings = self.settings
        progress = ProgressReporter(on_progress, self.logger)
        stats = {}
        start_time = time.perf_counter()
        self.logger.info(f"Generating world for seed {seed}...")

        # --- 1. Heightmap ---
        progress.report("Generating heightmap...", DEFAULTS.PROGRESS["heightmap"])
        heightmap = build_heightmap(settings, seed, progress)

        # --- 2. Climate & Biomes ---
        progress.report("Generating climate maps and biomes...", DEFAULTS.PROGRESS["climate"])
        climate = build_climate(settings, seed)
        self.logger.debug(f"Biome histogram: {np.bincount(climate.biomes.ravel()).tolist()}")

        # --- 3. Density Field & Columns ---
        progress.report("Building terrain layers...", DEFAULTS.PROGRESS["density"])
        density = build_density_field(settings, seed, climate.biomes, heightmap.height)

        progress.report("Building world from density field...", DEFAULTS.PROGRESS["columns"])
        codes = build_columns(settings, density, climate.biomes, heightmap.rock, progress)
        del density
        stats["terrain_blocks"] = int(np.count_nonzero(codes))
        self.logger.info(f"Column builder placed {stats['terrain_blocks']} blocks.")

        world = GeneratedWorld(seed=seed, settings=settings, voxels=None,
                               heightmap=heightmap, climate=climate, stats=stats)

        if settings.is_completely_flat:
            self.logger.info("Completely flat world: skipping water, caves, mountains and vegetation.")
        else:
            self._shape_terrain(codes, seed, world, progress)

        # --- Resolve to external block IDs ---
        voxels = VoxelMap(codes, block_types)
        for name in voxels.missing_block_types:
            self.logger.warning(f"Block type '{name}' is missing from the block type table; "
                                f"its voxels are left out of the map.")
        world.voxels = voxels

        elapsed = time.perf_counter() - start_time
        stats["voxels"] = len(voxels)
        stats["elapsed_seconds"] = round(elapsed, 3)
        self.logger.info(f"World generation for seed {seed} complete: {stats['voxels']} voxels in {elapsed:.2f}s.")
        progress.finish(f"World generation complete. Created {stats['voxels']} blocks.")
        return world

    def _shape_terrain(self, codes: np.ndarray, seed: int, world: GeneratedWorld,
                       progress: ProgressReporter):
        """Stages 4-8, run on every world that is not completely flat."""
        settings = self.settings
        stats = world.stats

        # --- 4. Hydrology ---
        progress.report("Creating natural water bodies...", DEFAULTS.PROGRESS["water"])
        water = carve_water_bodies(codes, settings, seed, world.climate.biomes)
        world.water = water
        stats["water_columns"] = int(np.count_nonzero(water.bed >= 0))
        stats["river_channels"] = water.river_channels
        self.logger.info(
            f"Hydrology: {stats['water_columns']} water columns, "
            f"{water.beach_columns} beach columns, {water.river_channels} river channels."
        )

        # --- 5. Caves & Ores ---
        progress.report("Preparing cave systems...", DEFAULTS.PROGRESS["caves"])
        caves = carve_caves_and_ores(codes, settings, seed, water.surface, progress)
        world.caves = caves
        stats["carved_voxels"] = caves.carved
        stats["ores"] = caves.ores
        self.logger.info(f"Caves: {caves.carved} voxels carved, {sum(caves.ores.values())} ores placed.")
        self.logger.debug(f"Ore counts: {caves.ores}")

        # --- 6. Underwater Smoothing ---
        progress.report("Smoothing underwater terrain...", DEFAULTS.PROGRESS["underwater"])
        stats["underwater_removed"] = smooth_underwater(codes, water)
        self.logger.debug(f"Underwater smoothing removed {stats['underwater_removed']} voxels.")

        # --- 7. Mountain Ranges ---
        progress.report("Adding biome-specific features...", DEFAULTS.PROGRESS["features"])
        if settings.mountain_range.enabled:
            progress.report("Creating snow-capped mountain ranges along world borders...",
                            DEFAULTS.PROGRESS["mountains"])
            stats["mountain_blocks"] = raise_mountain_ranges(codes, settings, seed)
            self.logger.info(f"Mountain ranges placed {stats['mountain_blocks']} blocks.")

        # --- 8. Vegetation ---
        progress.report("Adding trees and vegetation...", DEFAULTS.PROGRESS["vegetation"])
        rng = stage_rng(seed, DEFAULTS.VEGETATION_RNG_SEED_OFFSET)
        offsets = GridOffsets.draw(rng)
        stats["cactus_blocks"] = place_cacti(codes, world.climate.biomes, world.climate.temperature, rng, offsets)
        stats["tree_blocks"] = place_trees(codes, world.climate.biomes, rng, offsets)
        stats["dune_blocks"] = place_dunes(codes, world.climate.biomes, rng)
        self.logger.info(
            f"Vegetation: {stats['tree_blocks']} tree blocks, {stats['cactus_blocks']} cactus blocks, "
            f"{stats['dune_blocks']} dune blocks."
        )


def generate(settings, seed: int, block_types, on_progress=None, logger: logging.Logger = None) -> VoxelMap:
    """
    Entry point: generates one world. Equivalent to
    TerrainGenerator(settings, logger).generate(seed, block_types, on_progress).
    """
    if logger is None:
        logger = logging.getLogger(__name__)
    return TerrainGenerator(settings, logger).generate(seed, block_types, on_progress)
