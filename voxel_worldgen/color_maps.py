# voxel_worldgen/color_maps.py

"""
================================================================================
SHARED COLOR MAPPING UTILITIES
================================================================================
This module contains the color constants and functions for converting
generated worlds (block codes, biome maps, surface heights) into RGB preview
images.

It is designed to be a pure, stateless utility. All arrays it returns are
image-ordered: shape (length, width, 3), one row per z.
================================================================================
"""
import numpy as np

from . import blocks
from . import climate

# --- Default Color Mappings ---
COLOR_MAP_BLOCKS = {
    "air": (0, 0, 0),
    "stone": (125, 125, 125),
    "dirt": (134, 96, 67),
    "grass": (95, 159, 53),
    "sand": (219, 207, 163),
    "sand-light": (238, 230, 200),
    "snow": (249, 254, 254),
    "gravel": (136, 126, 126),
    "clay": (160, 166, 179),
    "cactus": (85, 127, 43),
    "sandstone": (216, 203, 155),
    "lava": (207, 92, 15),
    "water-still": (26, 102, 255),
    "coal": (46, 46, 46),
    "iron": (216, 175, 147),
    "gold": (252, 238, 75),
    "emerald": (23, 221, 98),
    "diamond": (93, 236, 245),
    "log": (102, 81, 51),
    "poplar log": (200, 196, 182),
    "oak-leaves": (60, 120, 30),
    "cold-leaves": (70, 110, 90),
    "cobblestone": (110, 110, 110),
}

COLOR_MAP_BIOMES = {
    "snowy_plains": (240, 240, 250),
    "snowy_forest": (200, 215, 225),
    "snowy_taiga": (150, 175, 185),
    "plains": (141, 179, 96),
    "forest": (34, 139, 34),
    "taiga": (11, 102, 89),
    "swamp": (47, 79, 47),
    "savanna": (189, 178, 95),
    "jungle": (0, 100, 0),
    "desert": (240, 230, 140),
    "ocean": (20, 40, 120),
}

# Surface shading spans this brightness range from y = 0 to the world top.
MIN_SHADE = 0.55


# --- Color Lookup Table (LUT) Generation ---
def create_block_color_lut() -> np.ndarray:
    """Creates a LUT where the index is the block code and the value is the RGB color."""
    return np.array([COLOR_MAP_BLOCKS[name] for name in blocks.BLOCK_NAMES], dtype=np.uint8)


def create_biome_color_lut() -> np.ndarray:
    """Creates a LUT where the index is the Biome ID and the value is the RGB color."""
    return np.array([COLOR_MAP_BIOMES[name] for name in climate.BIOME_NAMES], dtype=np.uint8)


# --- Color Array Generation Functions ---
def top_block_heights(codes: np.ndarray) -> np.ndarray:
    """Highest non-air y per column of a (length, max_height, width) code array; -1 if empty."""
    filled = codes != blocks.AIR
    max_height = codes.shape[1]
    flipped = filled[:, ::-1, :]
    top = max_height - 1 - np.argmax(flipped, axis=1)
    return np.where(flipped.any(axis=1), top, -1)


def get_surface_color_array(codes: np.ndarray, block_lut: np.ndarray = None) -> np.ndarray:
    """
    Renders the topmost block of every column, darkened with depth so
    relief stays readable from above.
    """
    if block_lut is None:
        block_lut = create_block_color_lut()
    heights = top_block_heights(codes)
    z_index, x_index = np.indices(heights.shape)
    top_codes = codes[z_index, np.maximum(heights, 0), x_index]
    top_codes = np.where(heights >= 0, top_codes, blocks.AIR)

    shade = MIN_SHADE + (1.0 - MIN_SHADE) * np.maximum(heights, 0) / max(codes.shape[1] - 1, 1)
    colors = block_lut[top_codes].astype(np.float64) * shade[..., np.newaxis]
    return np.clip(colors, 0, 255).astype(np.uint8)


def get_biome_color_array(biome_map: np.ndarray, biome_lut: np.ndarray = None) -> np.ndarray:
    """
    Converts an integer biome map into an RGB color array using a
    pre-computed lookup table. This is a very fast operation.
    """
    if biome_lut is None:
        biome_lut = create_biome_color_lut()
    return biome_lut[biome_map]


def get_height_color_array(heights: np.ndarray, max_height: int) -> np.ndarray:
    """Converts per-column block heights into a grayscale RGB color array."""
    normalized = np.clip(heights / max(max_height - 1, 1), 0.0, 1.0)
    gray_values = (normalized * 255).astype(np.uint8)
    return np.stack([gray_values] * 3, axis=-1)
