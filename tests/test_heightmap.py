import os
import sys

import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from voxel_worldgen import heightmap
from voxel_worldgen.settings import GenerationSettings


def test_radial_kernel():
    kernel = heightmap.radial_kernel(2)
    assert kernel.shape == (5, 5)
    assert kernel[2, 2] == 1.0
    assert kernel[2, 3] == pytest.approx(0.5)
    assert kernel[0, 0] == pytest.approx(1.0 / (1.0 + np.sqrt(8.0)))


def test_radial_blur_keeps_constant_maps():
    values = np.full((7, 9), 0.4, dtype=np.float32)
    assert np.allclose(heightmap.radial_blur(values, 3), 0.4)


def test_composite_height_is_normalized():
    ones = np.ones((3, 3), dtype=np.float32)
    zeros = np.zeros((3, 3), dtype=np.float32)
    assert np.allclose(heightmap.composite_height(ones, ones, ones, ones, 0.0), 1.0)
    assert np.allclose(heightmap.composite_height(zeros, zeros, zeros, zeros, 0.0), 0.0)
    assert np.allclose(heightmap.composite_height(ones, zeros, ones, zeros, 1.0), 0.5)


def test_smoothing_zero_is_identity():
    rng = np.random.default_rng(0)
    height = rng.random((8, 8)).astype(np.float32)
    assert np.allclose(heightmap.smooth_height(height, 0.5, 0.0), height)


def test_erosion_steps_down_isolated_peak():
    smoothed = np.zeros((5, 5), dtype=np.float32)
    smoothed[2, 2] = 1.0
    eroded = heightmap.erode_height(smoothed, 1.0)
    assert eroded[2, 2] == pytest.approx(20 / 28)
    eroded[2, 2] = 0.0
    assert np.all(eroded == 0.0)


def test_flat_worlds_have_constant_height():
    settings = GenerationSettings(width=12, length=8, is_completely_flat=True)
    layers = heightmap.build_heightmap(settings, seed=3)
    assert layers.height.shape == (8, 12)
    assert np.all(layers.height == 0.25)
    assert layers.rock.shape == (8, 12)


def test_heightmap_is_deterministic_and_bounded():
    settings = GenerationSettings(width=16, length=20, scale=0.08)
    a = heightmap.build_heightmap(settings, seed=11)
    b = heightmap.build_heightmap(settings, seed=11)
    c = heightmap.build_heightmap(settings, seed=12)
    assert a.height.shape == (20, 16)
    assert np.array_equal(a.height, b.height)
    assert not np.array_equal(a.height, c.height)
    assert a.height.min() >= 0.0 and a.height.max() <= 1.0
    assert a.rock.min() >= 0.0 and a.rock.max() <= 1.0
