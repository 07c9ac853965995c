# voxel_worldgen/noise.py

"""
================================================================================
SEEDED NOISE GENERATION UTILITIES
================================================================================
This module provides seeded 2D and 3D Perlin noise with octave summation. It is
designed to be a pure, stateless utility.

Data Contract:
---------------
- Inputs:
    - seed: An integer. Every layer derives its own permutation table from it.
    - width, height[, depth]: Field dimensions in cells.
    - octave_count, scale, persistence, amplitude: Standard noise parameters.
- Outputs:
    - A float32 NumPy array of normalized noise values in [0, 1].
      2D fields have shape (height, width); 3D fields (depth, height, width).
- Side Effects: None.
- Invariants: For a given seed and parameter set the output is bit-identical
  across calls. The permutation table is produced by a fixed linear
  congruential generator so worlds stay reproducible from their seed.
================================================================================
"""

import numpy as np
from numba import njit

# --- Linear Congruential Generator Constants ---
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 4294967296  # 2^32


def seeded_random(seed: int):
    """
    Returns a function producing deterministic pseudo-random floats in [0, 1).

    state = (state * 1664525 + 1013904223) mod 2^32, returned as state / 2^32.
    Negative seeds are first reduced modulo 2^32.
    """
    state = int(seed) % LCG_MODULUS

    def random() -> float:
        nonlocal state
        state = (state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return state / LCG_MODULUS

    return random


def stage_rng(seed: int, offset: int) -> np.random.Generator:
    """The numpy generator for one stochastic stage, seeded from seed + offset."""
    return np.random.default_rng((int(seed) + offset) % LCG_MODULUS)


def permutation_table(seed: int) -> np.ndarray:
    """
    Builds the 512-entry permutation table for a seed: a Fisher-Yates shuffle
    of 0..255 driven by seeded_random(), duplicated so lookups never wrap.
    """
    random = seeded_random(seed)
    p = list(range(256))
    for i in range(255, 0, -1):
        j = int(random() * (i + 1))
        p[i], p[j] = p[j], p[i]

    p = np.array(p, dtype=np.int32)
    return p[np.arange(512) & 255]


@njit
def fade(t):
    "6t^5 - 15t^4 + 10t^3"
    return t * t * t * (t * (t * 6 - 15) + 10)

@njit
def lerp(a, b, t):
    "Linear interpolation."
    return a + t * (b - a)

@njit
def grad_2d(hash_value, x, y):
    """Dot product with one of 8 gradient directions chosen by hash & 7."""
    h = hash_value & 7
    if h < 4:
        u = x
        v = y
    else:
        u = y
        v = x
    return (u if (h & 1) == 0 else -u) + (v if (h & 2) == 0 else -v)

@njit
def grad_3d(hash_value, x, y, z):
    """Dot product with one of 16 gradient directions chosen by hash & 15."""
    h = hash_value & 15
    u = x if h < 8 else y
    if h < 4:
        v = y
    elif h == 12 or h == 14:
        v = x
    else:
        v = z
    return (u if (h & 1) == 0 else -u) + (v if (h & 2) == 0 else -v)

@njit
def perlin_2d(x, y, perm):
    """Single octave of 2D Perlin noise in [-1, 1]."""
    fx = np.floor(x)
    fy = np.floor(y)
    xi = int(fx) & 255
    yi = int(fy) & 255

    x -= fx
    y -= fy

    u = fade(x)
    v = fade(y)

    a = perm[xi] + yi
    b = perm[xi + 1] + yi
    aa = perm[a]
    ba = perm[b]
    ab = perm[a + 1]
    bb = perm[b + 1]

    g1 = grad_2d(perm[aa], x, y)
    g2 = grad_2d(perm[ba], x - 1, y)
    g3 = grad_2d(perm[ab], x, y - 1)
    g4 = grad_2d(perm[bb], x - 1, y - 1)

    return lerp(lerp(g1, g2, u), lerp(g3, g4, u), v)

@njit
def perlin_3d(x, y, z, perm):
    """Single octave of 3D Perlin noise in [-1, 1]."""
    fx = np.floor(x)
    fy = np.floor(y)
    fz = np.floor(z)
    xi = int(fx) & 255
    yi = int(fy) & 255
    zi = int(fz) & 255

    x -= fx
    y -= fy
    z -= fz

    u = fade(x)
    v = fade(y)
    w = fade(z)

    a = perm[xi] + yi
    b = perm[xi + 1] + yi
    aa = perm[a] + zi
    ab = perm[a + 1] + zi
    ba = perm[b] + zi
    bb = perm[b + 1] + zi

    g1 = grad_3d(perm[aa], x, y, z)
    g2 = grad_3d(perm[ba], x - 1, y, z)
    g3 = grad_3d(perm[ab], x, y - 1, z)
    g4 = grad_3d(perm[bb], x - 1, y - 1, z)
    g5 = grad_3d(perm[aa + 1], x, y, z - 1)
    g6 = grad_3d(perm[ba + 1], x - 1, y, z - 1)
    g7 = grad_3d(perm[ab + 1], x, y - 1, z - 1)
    g8 = grad_3d(perm[bb + 1], x - 1, y - 1, z - 1)

    lerp5 = lerp(lerp(g1, g2, u), lerp(g3, g4, u), v)
    lerp6 = lerp(lerp(g5, g6, u), lerp(g7, g8, u), v)
    return lerp(lerp5, lerp6, w)

@njit
def _octave_noise_2d(width, height, scale, octave_count, persistence, amplitude, perm):
    # Octaves accumulate in float32.
    noise = np.zeros((height, width), dtype=np.float32)
    total_amplitude = 0.0

    for octave in range(octave_count):
        frequency = 2.0 ** octave
        current_amplitude = persistence ** octave * amplitude
        total_amplitude += current_amplitude

        for y in range(height):
            for x in range(width):
                nx = x * scale * frequency
                ny = y * scale * frequency
                noise[y, x] += perlin_2d(nx, ny, perm) * current_amplitude

    for y in range(height):
        for x in range(width):
            value = (noise[y, x] / total_amplitude + 1) * 0.5
            noise[y, x] = min(max(value, 0.0), 1.0)
    return noise

@njit
def _octave_noise_3d(width, height, depth, scale, octave_count, persistence, amplitude, perm):
    noise = np.zeros((depth, height, width), dtype=np.float32)
    total_amplitude = 0.0

    for octave in range(octave_count):
        frequency = 2.0 ** octave
        current_amplitude = persistence ** octave * amplitude
        total_amplitude += current_amplitude

        for z in range(depth):
            for y in range(height):
                for x in range(width):
                    nx = x * scale * frequency
                    ny = y * scale * frequency
                    nz = z * scale * frequency
                    noise[z, y, x] += perlin_3d(nx, ny, nz, perm) * current_amplitude

    for z in range(depth):
        for y in range(height):
            for x in range(width):
                value = (noise[z, y, x] / total_amplitude + 1) * 0.5
                noise[z, y, x] = min(max(value, 0.0), 1.0)
    return noise


def _check_noise_parameters(dimensions, octave_count, amplitude):
    if any(d < 1 for d in dimensions):
        raise ValueError(f"Noise field dimensions must be >= 1, got {dimensions}")
    if octave_count < 1:
        raise ValueError(f"octave_count must be >= 1, got {octave_count}")
    if amplitude <= 0:
        raise ValueError(f"amplitude must be positive, got {amplitude}")


def generate_perlin_noise(width: int, height: int, octave_count: int = 1, scale: float = 0.01,
                          persistence: float = 0.5, amplitude: float = 1.0, seed: int = 0) -> np.ndarray:
    """
    Generates a 2D multi-octave noise field normalized to [0, 1].

    Octave k samples at frequency 2^k with amplitude persistence^k * amplitude.
    Normalization is global: the summed field is divided by the total
    amplitude of all octaves, not by its per-cell min/max.
    """
    _check_noise_parameters((width, height), octave_count, amplitude)
    perm = permutation_table(seed)
    return _octave_noise_2d(int(width), int(height), float(scale), int(octave_count),
                            float(persistence), float(amplitude), perm)


def generate_perlin_noise_3d(width: int, height: int, depth: int, octave_count: int = 1,
                             scale: float = 0.01, persistence: float = 0.5,
                             amplitude: float = 1.0, seed: int = 0) -> np.ndarray:
    """3D analogue of generate_perlin_noise. Returns shape (depth, height, width)."""
    _check_noise_parameters((width, height, depth), octave_count, amplitude)
    perm = permutation_table(seed)
    return _octave_noise_3d(int(width), int(height), int(depth), float(scale), int(octave_count),
                            float(persistence), float(amplitude), perm)


def noise_layer_2d(width: int, length: int, layer: dict, seed: int, base_scale: float = None) -> np.ndarray:
    """
    Generates a 2D layer from a config.py layer definition. Layers carrying a
    'scale_factor' are relative to base_scale (settings.scale).
    """
    scale = layer["scale_factor"] * base_scale if "scale_factor" in layer else layer["scale"]
    return generate_perlin_noise(
        width, length,
        octave_count=layer["octave_count"],
        scale=scale,
        persistence=layer["persistence"],
        amplitude=layer["amplitude"],
        seed=seed,
    )


def noise_layer_3d(width: int, max_height: int, length: int, layer: dict, seed: int,
                   base_scale: float = None) -> np.ndarray:
    """3D counterpart of noise_layer_2d. Returns shape (length, max_height, width)."""
    scale = layer["scale_factor"] * base_scale if "scale_factor" in layer else layer["scale"]
    return generate_perlin_noise_3d(
        width, max_height, length,
        octave_count=layer["octave_count"],
        scale=scale,
        persistence=layer["persistence"],
        amplitude=layer["amplitude"],
        seed=seed,
    )
