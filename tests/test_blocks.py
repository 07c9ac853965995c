import os
import sys

import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from voxel_worldgen import blocks
from voxel_worldgen.blocks import VoxelMap


REGISTRY = [
    {"id": 1, "name": "Cobblestone"},
    {"id": 2, "name": "Stone"},
    {"id": 3, "name": "Water"},
    {"id": 4, "name": "coal-ore"},
    {"id": 5, "name": "white-wool"},
    {"id": 6, "name": "Dirt"},
    {"id": 7, "name": "Oak-Leaves"},
]


def test_registry_prefers_exact_names_over_substrings():
    table = blocks.block_types_from_registry(REGISTRY)
    assert table["stone"] == 2
    assert table["cobblestone"] == 1


def test_registry_aliases():
    table = blocks.block_types_from_registry(REGISTRY)
    assert table["water-still"] == 3
    assert table["coal"] == 4
    assert table["snow"] == 5
    assert table["oak-leaves"] == 7


def test_registry_leaves_unknown_names_out():
    table = blocks.block_types_from_registry(REGISTRY)
    assert "grass" not in table
    assert "diamond" not in table
    missing = blocks.missing_block_names(table)
    assert "grass" in missing
    assert "stone" not in missing


def test_block_names_line_up_with_codes():
    assert blocks.BLOCK_NAMES[blocks.WATER] == "water-still"
    assert blocks.BLOCK_NAMES[blocks.COBBLESTONE] == "cobblestone"
    assert blocks.BLOCK_CODES["poplar log"] == blocks.POPLAR_LOG
    assert "air" not in blocks.SEMANTIC_BLOCK_NAMES


def make_voxel_map():
    codes = np.zeros((2, 3, 4), dtype=np.uint8)
    codes[0, 0, 0] = blocks.STONE
    codes[1, 1, 3] = blocks.GRASS
    codes[1, 2, 3] = blocks.WATER
    codes[0, 1, 1] = blocks.LAVA
    block_types = {"stone": 10, "water-still": 11, "grass": 12}
    return VoxelMap(codes, block_types)


def test_voxel_map_is_centred():
    voxels = make_voxel_map()
    assert voxels.origin_x == -2
    assert voxels.origin_z == -1
    assert voxels.bounds == ((-2, 1), (0, 2), (-1, 0))


def test_voxel_map_lookups():
    voxels = make_voxel_map()
    assert voxels[(-2, 0, -1)] == 10
    assert voxels[(1, 1, 0)] == 12
    assert voxels[(1, 2, 0)] == 11
    for key in ((0, 0, 0), (-1, 1, -1), (5, 0, 0), (0, -1, 0), "nonsense"):
        with pytest.raises(KeyError):
            voxels[key]
    assert (-2, 0, -1) in voxels
    assert (-1, 1, -1) not in voxels
    assert voxels.get((0, 0, 0)) is None


def test_voxel_map_omits_unmapped_types():
    voxels = make_voxel_map()
    assert len(voxels) == 3
    assert voxels.missing_block_types == ["lava"]
    assert set(voxels) == {(-2, 0, -1), (1, 1, 0), (1, 2, 0)}
    assert voxels.to_dict() == {"-2,0,-1": 10, "1,1,0": 12, "1,2,0": 11}


def test_voxel_map_queries():
    voxels = make_voxel_map()
    assert voxels.block_name_at(-1, 1, -1) == "lava"
    assert voxels.block_name_at(0, 0, 0) is None
    assert voxels.block_name_at(9, 9, 9) is None
    assert voxels.surface_height(1, 0) == 1
    assert voxels.surface_height(0, 0) is None
    assert voxels.surface_height(40, 0) is None
    assert voxels.block_counts() == {"stone": 1, "grass": 1, "water-still": 1, "lava": 1}


def test_voxel_map_rejects_flat_arrays():
    with pytest.raises(ValueError):
        VoxelMap(np.zeros((4, 4), dtype=np.uint8), {})
