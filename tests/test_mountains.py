import os
import sys

import numpy as np

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from voxel_worldgen import blocks, mountains
from voxel_worldgen.settings import GenerationSettings, MountainRangeSettings


def mountain_settings(width=40, length=40, max_height=64, **range_options):
    options = {"enabled": True, "height": 20, "size": 0.0, "snow_height": 40, "snow_cap": True}
    options.update(range_options)
    return GenerationSettings(width=width, length=length, max_height=max_height,
                              mountain_range=MountainRangeSettings(**options))


def low_world(settings, top=10):
    codes = np.zeros((settings.length, settings.max_height, settings.width), dtype=np.uint8)
    codes[:, 0, :] = blocks.LAVA
    codes[:, 1:top + 1, :] = blocks.STONE
    return codes


def test_mountain_dimensions():
    base_height, snow_height, band_width = mountains.mountain_dimensions(mountain_settings(width=100))
    assert base_height == 60
    assert snow_height == 60
    assert band_width == 25


def test_narrow_worlds_keep_minimum_band():
    _, _, band_width = mountains.mountain_dimensions(mountain_settings(width=12, size=0.3))
    assert band_width == 5


def test_heights_vanish_away_from_borders():
    heights = mountains.mountain_heights(60, 60, 40.0, 5)
    assert heights.shape == (60, 60)
    assert np.all(heights[6:54, 6:54] == 0)
    assert np.all(heights[0, :] >= 1)
    assert np.all(heights[:, 59] >= 1)


def test_disabled_range_places_nothing():
    settings = GenerationSettings(width=20, length=20)
    codes = low_world(settings)
    before = codes.copy()
    assert mountains.raise_mountain_ranges(codes, settings, 1) == 0
    assert np.array_equal(codes, before)


def test_ranges_raise_borders_up_to_the_ceiling():
    settings = mountain_settings()
    codes = low_world(settings)
    before = codes.copy()
    placed = mountains.raise_mountain_ranges(codes, settings, 3)

    assert placed == int(np.count_nonzero(codes != before))
    assert placed > 0
    assert np.all(codes[:, :11, :] == before[:, :11, :])
    assert np.all(codes[20, :, 20] == before[20, :, 20])
    assert codes[0, 63, 0] == blocks.SNOW
    assert np.isin(codes[codes != before], (blocks.STONE, blocks.SNOW)).all()


def test_snow_cap_can_be_disabled():
    settings = mountain_settings(snow_cap=False)
    codes = low_world(settings)
    mountains.raise_mountain_ranges(codes, settings, 3)
    assert not (codes == blocks.SNOW).any()
    assert codes[0, 63, 0] == blocks.STONE
