# bake_world.py

"""
================================================================================
OFFLINE WORLD BAKER SCRIPT
================================================================================
This script is a command-line tool for generating voxel worlds offline and
dumping them to disk for inspection: the raw block-code array, its palette,
top-down preview images and a manifest of block counts and timings.

Usage:
    python bake_world.py --config path/to/your/config.json [--seeds 1 2 3]
                         [--workers N] [--output DIR]

Config file layout:
    {
      "world_generation_parameters": { "width": 64, "seaLevel": 32, ... },
      "seed": 42,                       # or a text seed, e.g. "hello world"
      "block_types": { "stone": 1, ... } # or "block_registry": [{"id", "name"}]
    }
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time
import multiprocessing
import numpy as np
from PIL import Image
from tqdm import tqdm

from voxel_worldgen import blocks
from voxel_worldgen import color_maps
from voxel_worldgen import config as DEFAULTS
from voxel_worldgen.generator import TerrainGenerator
from voxel_worldgen.settings import GenerationSettings, InvalidSettingsError, seed_from_text


def default_block_types() -> dict:
    """A block table that maps every semantic name to its internal code."""
    return {name: code for code, name in enumerate(blocks.BLOCK_NAMES) if code != blocks.AIR}


def resolve_block_types(config: dict) -> dict:
    if "block_types" in config:
        return {name: int(block_id) for name, block_id in config["block_types"].items()}
    if "block_registry" in config:
        return blocks.block_types_from_registry(config["block_registry"])
    return default_block_types()


def resolve_seeds(config: dict, cli_seeds) -> list:
    if cli_seeds:
        return list(cli_seeds)
    seed = config.get("seed", DEFAULTS.DEFAULT_SEED)
    if isinstance(seed, str):
        seed = seed_from_text(seed)
    return [seed]


def save_image(color_array: np.ndarray, file_path: str):
    Image.fromarray(color_array, 'RGB').save(file_path, 'PNG')


def save_world(world, output_dir: str) -> str:
    """Writes one generated world to <output_dir>/seed_<n>/ and returns that path."""
    world_dir = os.path.join(output_dir, f"seed_{world.seed}")
    os.makedirs(world_dir, exist_ok=True)
    voxels = world.voxels

    np.save(os.path.join(world_dir, "voxels.npy"), voxels.codes)

    palette = {
        str(code): {"name": name, "id": voxels.block_types.get(name)}
        for code, name in enumerate(blocks.BLOCK_NAMES) if code != blocks.AIR
    }
    with open(os.path.join(world_dir, "palette.json"), 'w') as f:
        json.dump(palette, f, indent=2)

    save_image(color_maps.get_surface_color_array(voxels.codes), os.path.join(world_dir, "surface.png"))
    save_image(color_maps.get_biome_color_array(world.climate.biomes), os.path.join(world_dir, "biomes.png"))
    heights = color_maps.top_block_heights(voxels.codes)
    save_image(color_maps.get_height_color_array(heights, voxels.max_height), os.path.join(world_dir, "height.png"))

    generation_config = {"seed": world.seed, **world.settings.to_dict()}
    with open(os.path.join(world_dir, "generation_config.json"), 'w') as f:
        json.dump(generation_config, f, indent=2)

    manifest = {
        "seed": world.seed,
        "dimensions": {"width": voxels.width, "length": voxels.length, "max_height": voxels.max_height},
        "bounds": voxels.bounds,
        "voxel_count": len(voxels),
        "block_counts": voxels.block_counts(),
        "missing_block_types": voxels.missing_block_types,
        "stats": world.stats,
    }
    with open(os.path.join(world_dir, "manifest.json"), 'w') as f:
        json.dump(manifest, f, indent=2)
    return world_dir


def bake_seed(job) -> dict:
    """
    Generates and saves a single seed. Runs inside a worker process, so
    failures are logged and reported rather than raised.
    """
    settings_config, block_types, seed, output_dir = job
    logger = logging.getLogger(f"Worker-{os.getpid()}")
    try:
        generator = TerrainGenerator(settings_config, logger)
        world = generator.generate_world(seed, block_types)
        world_dir = save_world(world, output_dir)
        return {"seed": seed, "ok": True, "path": world_dir, "voxels": len(world.voxels)}
    except Exception as e:
        # Use exc_info=True to log the full traceback from the worker process
        logger.critical(f"WORKER: Generating seed {seed} failed: {e}", exc_info=True)
        return {"seed": seed, "ok": False, "error": str(e)}


# --- Main Baking Function ---
def bake_world(config_path: str, seeds=None, workers: int = None, output_dir: str = "baked_worlds") -> int:
    """
    Loads a configuration, generates every requested seed and saves each
    world to the output directory. Returns a process exit code.
    """
    logger = logging.getLogger("Baker")

    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Failed to load or parse config file: {e}")
        return 1

    world_params = config.get('world_generation_parameters', {})
    try:
        GenerationSettings.from_config(world_params).validate()
    except InvalidSettingsError as e:
        logger.critical(str(e))
        return 1

    block_types = resolve_block_types(config)
    missing = blocks.missing_block_names(block_types)
    if missing:
        logger.warning(f"Block type table is missing: {', '.join(missing)}")

    seed_list = resolve_seeds(config, seeds)
    jobs = [(world_params, block_types, seed, output_dir) for seed in seed_list]
    num_workers = workers or max(1, multiprocessing.cpu_count() - 1)
    num_workers = min(num_workers, len(jobs))

    logger.info(f"Baking {len(jobs)} world(s) into '{output_dir}' using {num_workers} worker process(es)...")
    start_time = time.perf_counter()

    if num_workers > 1:
        with multiprocessing.Pool(processes=num_workers) as pool:
            results = list(tqdm(pool.imap_unordered(bake_seed, jobs), total=len(jobs), desc="Baking Worlds"))
    else:
        results = [bake_seed(job) for job in tqdm(jobs, desc="Baking Worlds")]

    end_time = time.perf_counter()
    failed = [result for result in results if not result["ok"]]
    for result in sorted(results, key=lambda r: r["seed"]):
        if result["ok"]:
            logger.info(f"  - seed {result['seed']}: {result['voxels']} voxels -> {result['path']}")
        else:
            logger.error(f"  - seed {result['seed']}: FAILED ({result['error']})")
    logger.info(f"Baking complete! Total time: {end_time - start_time:.2f} seconds.")
    return 1 if failed else 0


# --- Command-Line Interface ---
def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Offline baker for the voxel terrain generator.")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to the JSON configuration file for the world(s) to be baked."
    )
    parser.add_argument(
        "--seeds",
        type=int,
        nargs="+",
        help="Seeds to generate. Overrides the seed in the config file."
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of worker processes (default: CPU count - 1)."
    )
    parser.add_argument(
        "--output",
        type=str,
        default="baked_worlds",
        help="Directory that receives one seed_<n> folder per world."
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    return bake_world(args.config, seeds=args.seeds, workers=args.workers, output_dir=args.output)


if __name__ == "__main__":
    sys.exit(main())
