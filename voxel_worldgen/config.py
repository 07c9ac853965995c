# voxel_worldgen/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the voxel
terrain engine. These values are used if they are not explicitly provided by
the user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC WORLD.
Instead, pass a configuration dictionary to GenerationSettings.from_config().
================================================================================
"""

# --- World Defaults ---
DEFAULT_SEED = 1337
DEFAULT_WIDTH = 64
DEFAULT_LENGTH = 64
DEFAULT_MAX_HEIGHT = 64
DEFAULT_SCALE = 0.05
DEFAULT_ROUGHNESS = 1.0
DEFAULT_FLATNESS_FACTOR = 0.15
DEFAULT_SMOOTHING = 0.7
DEFAULT_TERRAIN_BLEND = 0.5
DEFAULT_SEA_LEVEL = 32
DEFAULT_TEMPERATURE = 0.5
DEFAULT_RIVER_FREQ = 0.05
DEFAULT_ORE_RARITY = 0.78
DEFAULT_GENERATE_ORES = True
DEFAULT_IS_COMPLETELY_FLAT = False

DEFAULT_MOUNTAIN_RANGE = {
    "enabled": False,
    "height": 20,
    "size": 0.0,
    "snow_height": 40,
    "snow_cap": True,
}

# The smallest world height that leaves room for the lava floor, the cave band
# and a surface.
MIN_MAX_HEIGHT = 4

# --- Seed Offsets ---
# Each noise layer derives its own permutation table from seed + offset. These
# small fixed offsets keep layers correlated-but-distinct per seed and must not
# change, or worlds stop matching their seeds.
CONTINENTAL_SEED_OFFSET = 0
HILL_SEED_OFFSET = 1
DETAIL_SEED_OFFSET = 2
SMALL_CAVE_SEED_OFFSET = 2
LARGE_CAVE_SEED_OFFSET = 3
ORE_SEED_OFFSET = 4
RIVER_SEED_OFFSET = 5
DEPTH_SEED_OFFSET = 6
TEMPERATURE_SEED_OFFSET = 7
HUMIDITY_SEED_OFFSET = 8
LAKE_SEED_OFFSET = 9
ROCK_SEED_OFFSET = 10

# Offsets for the numpy random generators driving the stochastic stages.
# Kept well clear of the noise offsets above.
WATER_RNG_SEED_OFFSET = 1001
RIVER_RNG_SEED_OFFSET = 1002
ORE_RNG_SEED_OFFSET = 1003
MOUNTAIN_RNG_SEED_OFFSET = 1004
VEGETATION_RNG_SEED_OFFSET = 1005

# --- Noise Layer Definitions ---
# 'scale_factor' multiplies settings.scale; 'scale' is absolute.
CONTINENTAL_NOISE = {"octave_count": 1, "scale_factor": 0.5, "persistence": 0.5, "amplitude": 1.0}
HILL_NOISE = {"octave_count": 3, "scale_factor": 2.0, "persistence": 0.5, "amplitude": 0.5}
DETAIL_NOISE = {"octave_count": 5, "scale_factor": 4.0, "persistence": 0.5, "amplitude": 0.2}
ROCK_NOISE = {"octave_count": 4, "scale_factor": 3.0, "persistence": 0.6, "amplitude": 0.4}
DEPTH_NOISE = {"octave_count": 2, "scale": 0.02, "persistence": 0.5, "amplitude": 1.0}

CLIMATE_NOISE = {"octave_count": 1, "scale": 0.005, "persistence": 0.5, "amplitude": 1.0}
LAKE_NOISE = {"octave_count": 1, "scale": 0.02, "persistence": 0.5, "amplitude": 1.0}
RIVER_NOISE = {"octave_count": 1, "persistence": 0.5, "amplitude": 1.0}
RIVER_NOISE_BASE_SCALE = 0.01  # The river layer's scale is this plus riverFreq.

CONTINENTALNESS_NOISE_3D = {"octave_count": 2, "scale_factor": 0.5, "persistence": 0.7, "amplitude": 1.0}
SMALL_CAVE_NOISE = {"octave_count": 2, "scale": 0.03, "persistence": 0.5, "amplitude": 1.0}
LARGE_CAVE_NOISE = {"octave_count": 2, "scale": 0.06, "persistence": 0.5, "amplitude": 1.0}
ORE_NOISE = {"octave_count": 1, "scale": 0.04, "persistence": 0.5, "amplitude": 1.0}

# --- Heightmap ---
FLAT_HEIGHT = 0.25            # Constant normalized height in completely flat mode.
FLAT_BLEND_TARGET = 0.5       # The value flatnessFactor blends toward.
HILL_DETAIL_WEIGHT = 0.5
DEPTH_MODULATION = 0.3
EROSION_BASE_BLOCKS = 36
EROSION_RANGE_BLOCKS = 28

# --- Climate & Biomes (Normalized 0.0 to 1.0) ---
TEMPERATURE_BANDS = (0.2, 0.4, 0.6, 0.8)
HUMIDITY_BANDS = (0.3, 0.6)

# --- Density Field ---
REFERENCE_HEIGHT = 32
FLOOR_DENSITY = 10.0
FLAT_SURFACE_BASE = 16
FLAT_SURFACE_RANGE = 32
DESERT_DENSITY_FACTOR = 0.95
FOREST_DENSITY_FACTOR = 1.05

# --- Column Builder ---
SUBSURFACE_DEPTH = 3
ROCK_OUTCROP_THRESHOLD = 0.8

# --- Hydrology ---
LAKE_NOISE_SMOOTHING_RADIUS = 2
LAKE_NOISE_THRESHOLD = 0.7
BASIN_MIN_HIGHER_NEIGHBORS = 5
BASIN_NEIGHBOR_RISE = 2
FLOOD_GROWTH_ITERATIONS = 3
DEEP_WATER_DEPTH = 3
GRAVEL_BED_PROBABILITY = 0.6
BEACH_SAND_PROBABILITY = 0.7
BEACH_UNDERLAYER_PROBABILITY = 0.5
RIVER_BAND = (0.47, 0.53)
RIVER_MAX_RISE = 4            # Rivers only cut columns up to seaLevel + 4.
RIVER_DEPTH_FACTOR = 0.3
RIVER_MAX_DEPTH = 2
RIVER_CLEARANCE = 2
RIVER_BANK_RISE = 2
RIVER_BANK_SAND_PROBABILITY = 0.6
UNDERWATER_MIN_ADJACENT_WATER = 4
UNDERWATER_THRESHOLD_BASE = 2
UNDERWATER_THRESHOLD_RANGE = 3

# --- Caves & Ores ---
CAVE_SURFACE_CLEARANCE = 2
SMALL_CAVE_PAIRED_THRESHOLD = 0.6
LARGE_CAVE_PAIRED_THRESHOLD = 0.5
SMALL_CAVE_THRESHOLD = 0.7
LARGE_CAVE_THRESHOLD = 0.65
EMERALD_GATE_PROBABILITY = 0.3
# Ordered ore bands: (block name, max y, threshold above oreRarity).
# The first matching band wins.
ORE_BANDS = (
    ("coal", 40, 0.12),
    ("iron", 35, 0.07),
    ("gold", 20, 0.04),
    ("emerald", 30, 0.02),
    ("diamond", 15, 0.0),
)

# --- Mountain Range ---
MOUNTAIN_MIN_WIDTH = 5
MOUNTAIN_WIDTH_FRACTION = 0.25
MOUNTAIN_MIN_SIZE_ADJUSTMENT = 0.05
MOUNTAIN_CORNER_BOOST = 0.4
SNOW_HEIGHT_MULTIPLIER = 1.5
# Layered snow cap. Margins are measured down from the snow line.
SNOW_CAP_MARGIN = 5
SNOW_NEAR_CAP_MARGIN = 3
SNOW_NEAR_CAP_DEPTH = 2
SNOW_NEAR_CAP_PROBABILITY = 0.7
SNOW_SPARSE_MARGIN = 8
SNOW_SPARSE_PROBABILITY = 0.3

# --- Vegetation ---
TREE_GRID_SPACING = 5
CACTUS_GRID_SPACING = 7
TREE_STRAGGLER_LEAVES = 5
DUNE_PROBABILITY = 0.05
DUNE_SPREAD_PROBABILITY = 0.3
# (temperature floor, probability) checked hottest first; base otherwise.
CACTUS_PROBABILITY_BANDS = ((0.8, 0.35), (0.7, 0.3), (0.6, 0.25))
CACTUS_BASE_PROBABILITY = 0.2

# --- Progress Milestones (percent) ---
PROGRESS = {
    "start": 0,
    "heightmap": 5,
    "smoothing": 10,
    "erosion": 15,
    "climate": 20,
    "density": 25,
    "columns": 45,
    "columns_end": 60,
    "water": 65,
    "caves": 75,
    "carving": 80,
    "carving_end": 85,
    "underwater": 88,
    "features": 90,
    "mountains": 92,
    "vegetation": 95,
    "complete": 100,
}
