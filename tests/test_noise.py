import os
import sys

import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from voxel_worldgen import noise


def test_seeded_random_follows_lcg():
    random = noise.seeded_random(0)
    state = 0
    for _ in range(5):
        state = (state * 1664525 + 1013904223) % 2 ** 32
        assert random() == state / 2 ** 32


def test_seeded_random_negative_seed_wraps():
    a = noise.seeded_random(-1)
    b = noise.seeded_random(2 ** 32 - 1)
    assert [a() for _ in range(4)] == [b() for _ in range(4)]


def test_permutation_table_is_duplicated_permutation():
    perm = noise.permutation_table(1337)
    assert perm.shape == (512,)
    assert sorted(perm[:256].tolist()) == list(range(256))
    assert np.array_equal(perm[:256], perm[256:])
    assert not np.array_equal(perm, noise.permutation_table(1338))


def test_fade_and_lerp():
    assert noise.fade(0.0) == 0.0
    assert noise.fade(1.0) == 1.0
    assert noise.fade(0.5) == pytest.approx(0.5)
    assert noise.lerp(2.0, 4.0, 0.25) == pytest.approx(2.5)


def test_gradient_bit_selection():
    assert noise.grad_2d(0, 1.0, 2.0) == 3.0
    assert noise.grad_2d(1, 1.0, 2.0) == 1.0
    assert noise.grad_2d(4, 1.0, 2.0) == 3.0
    assert noise.grad_2d(7, 1.0, 2.0) == -3.0
    assert noise.grad_2d(8, 1.0, 2.0) == 3.0  # only the low three bits count

    assert noise.grad_3d(0, 1.0, 2.0, 3.0) == 3.0
    assert noise.grad_3d(12, 1.0, 2.0, 3.0) == 3.0
    assert noise.grad_3d(13, 1.0, 2.0, 3.0) == 1.0  # u is y, negated; v is z
    assert noise.grad_3d(15, 1.0, 2.0, 3.0) == -5.0


def test_perlin_is_zero_on_lattice_points():
    perm = noise.permutation_table(7)
    assert noise.perlin_2d(3.0, 5.0, perm) == 0.0
    assert noise.perlin_3d(1.0, 2.0, 3.0, perm) == 0.0


def test_noise_field_shape_and_bounds():
    for octave_count in (1, 2, 5, 8):
        for seed in (0, 42, -7, 2 ** 31 - 1):
            field = noise.generate_perlin_noise(23, 17, octave_count=octave_count, scale=0.13,
                                                persistence=0.6, amplitude=0.4, seed=seed)
            assert field.shape == (17, 23)
            assert field.dtype == np.float32
            assert field.min() >= 0.0
            assert field.max() <= 1.0


def test_noise_field_is_deterministic_per_seed():
    a = noise.generate_perlin_noise(16, 16, octave_count=3, scale=0.1, seed=5)
    b = noise.generate_perlin_noise(16, 16, octave_count=3, scale=0.1, seed=5)
    c = noise.generate_perlin_noise(16, 16, octave_count=3, scale=0.1, seed=6)
    assert np.array_equal(a, b)
    assert not np.array_equal(a, c)


def test_noise_3d_shape_and_bounds():
    field = noise.generate_perlin_noise_3d(6, 9, 4, octave_count=2, scale=0.2, seed=3)
    assert field.shape == (4, 9, 6)
    assert field.min() >= 0.0
    assert field.max() <= 1.0


def test_noise_rejects_empty_fields():
    with pytest.raises(ValueError):
        noise.generate_perlin_noise(0, 4)
    with pytest.raises(ValueError):
        noise.generate_perlin_noise_3d(4, 4, 4, octave_count=0)


def test_noise_layer_uses_relative_scale():
    layer = {"octave_count": 2, "scale_factor": 2.0, "persistence": 0.5, "amplitude": 1.0}
    relative = noise.noise_layer_2d(12, 8, layer, seed=9, base_scale=0.05)
    direct = noise.generate_perlin_noise(12, 8, octave_count=2, scale=0.1, seed=9)
    assert np.array_equal(relative, direct)


def test_stage_rng_accepts_negative_seeds():
    a = noise.stage_rng(-5, 1001).random(3)
    b = noise.stage_rng(-5, 1001).random(3)
    assert np.array_equal(a, b)
