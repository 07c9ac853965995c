import json
import os
import sys

import numpy as np

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import bake_world
from voxel_worldgen import blocks, climate, color_maps


def write_config(tmp_path, config):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    return str(path)


def test_bake_writes_world_files(tmp_path):
    config_path = write_config(tmp_path, {
        "world_generation_parameters": {"width": 12, "length": 10, "maxHeight": 48, "seaLevel": 24},
        "seed": "ignored when seeds are given",
    })
    output = tmp_path / "out"
    exit_code = bake_world.main(["--config", config_path, "--seeds", "3", "--workers", "1",
                                 "--output", str(output)])
    assert exit_code == 0

    world_dir = output / "seed_3"
    for name in ("voxels.npy", "palette.json", "surface.png", "biomes.png", "height.png",
                 "generation_config.json", "manifest.json"):
        assert (world_dir / name).exists()

    codes = np.load(world_dir / "voxels.npy")
    assert codes.shape == (10, 48, 12)

    manifest = json.loads((world_dir / "manifest.json").read_text())
    assert manifest["seed"] == 3
    assert manifest["dimensions"] == {"width": 12, "length": 10, "max_height": 48}
    assert manifest["voxel_count"] == int(np.count_nonzero(codes))
    assert manifest["missing_block_types"] == []

    generation_config = json.loads((world_dir / "generation_config.json").read_text())
    assert generation_config["sea_level"] == 24


def test_text_seeds_are_hashed():
    assert bake_world.resolve_seeds({"seed": "ab"}, None) == [97 * 31 + 98]
    assert bake_world.resolve_seeds({"seed": 9}, None) == [9]
    assert bake_world.resolve_seeds({"seed": 9}, [1, 2]) == [1, 2]


def test_block_types_from_config():
    assert bake_world.resolve_block_types({"block_types": {"stone": "4"}}) == {"stone": 4}
    registry = {"block_registry": [{"id": 8, "name": "Stone"}]}
    assert bake_world.resolve_block_types(registry) == {"stone": 8}
    defaults = bake_world.resolve_block_types({})
    assert defaults["stone"] == blocks.STONE
    assert "air" not in defaults


def test_bad_config_returns_error_code(tmp_path):
    assert bake_world.bake_world(str(tmp_path / "missing.json")) == 1
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    assert bake_world.bake_world(str(broken)) == 1
    invalid = write_config(tmp_path, {"world_generation_parameters": {"width": 0}})
    assert bake_world.bake_world(invalid, output_dir=str(tmp_path / "out")) == 1


def test_color_arrays_are_image_ordered():
    codes = np.zeros((3, 8, 5), dtype=np.uint8)
    codes[:, 0, :] = blocks.LAVA
    codes[:, 1:4, :] = blocks.STONE
    codes[0, 4, 0] = blocks.GRASS

    surface = color_maps.get_surface_color_array(codes)
    assert surface.shape == (3, 5, 3) and surface.dtype == np.uint8
    assert surface[0, 0, 1] > surface[0, 0, 0]  # grass is green

    heights = color_maps.top_block_heights(codes)
    assert heights[0, 0] == 4 and heights[1, 1] == 3
    gray = color_maps.get_height_color_array(heights, 8)
    assert gray.shape == (3, 5, 3)
    assert gray[0, 0, 0] > gray[1, 1, 0]

    biomes = np.full((3, 5), climate.DESERT, dtype=np.uint8)
    assert color_maps.get_biome_color_array(biomes).shape == (3, 5, 3)
    assert len(color_maps.create_block_color_lut()) == len(blocks.BLOCK_NAMES)
