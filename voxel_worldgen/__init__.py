# voxel_worldgen/__init__.py

# This file makes the 'voxel_worldgen' directory a Python package.
# It also defines the public API of the package.

from .blocks import VoxelMap, block_types_from_registry
from .generator import GeneratedWorld, TerrainGenerator, generate
from .progress import ProgressReporter
from .settings import (
    GenerationSettings,
    InvalidSeedError,
    InvalidSettingsError,
    MountainRangeSettings,
    seed_from_text,
    settings_from_options,
)

__all__ = [
    "GenerationSettings",
    "MountainRangeSettings",
    "InvalidSettingsError",
    "InvalidSeedError",
    "settings_from_options",
    "seed_from_text",
    "TerrainGenerator",
    "GeneratedWorld",
    "generate",
    "ProgressReporter",
    "VoxelMap",
    "block_types_from_registry",
]
