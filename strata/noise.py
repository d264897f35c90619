"""Seeded 2D gradient noise with multi-octave fractal summation.

The kernel is classic gradient noise: each integer lattice corner gets one of
four diagonal gradients chosen through a fixed permutation table, and the four
corner contributions are blended with a quintic fade curve. The fade has zero
first and second derivatives at the lattice boundaries, so the field is smooth
across cells.

All sampling functions accept Python floats or numpy arrays of coordinates.
Scalars in give a float out; arrays in give an array of the same shape, which
is how layers sample a whole grid in one call.
"""

from __future__ import annotations

from typing import TypeAlias

import numpy as np

from strata import config
from strata.settings import InvalidConfigError, TerrainSettings
from strata.types import RandomSeed
from strata.util import rng
from strata.util.coordinates import Vec2

Coordinate: TypeAlias = float | np.ndarray

# Ken Perlin's reference permutation of 0..255.
_PERMUTATION = np.array(
    [
        151, 160, 137, 91, 90, 15, 131, 13, 201, 95, 96, 53, 194, 233, 7, 225,
        140, 36, 103, 30, 69, 142, 8, 99, 37, 240, 21, 10, 23, 190, 6, 148,
        247, 120, 234, 75, 0, 26, 197, 62, 94, 252, 219, 203, 117, 35, 11, 32,
        57, 177, 33, 88, 237, 149, 56, 87, 174, 20, 125, 136, 171, 168, 68, 175,
        74, 165, 71, 134, 139, 48, 27, 166, 77, 146, 158, 231, 83, 111, 229, 122,
        60, 211, 133, 230, 220, 105, 92, 41, 55, 46, 245, 40, 244, 102, 143, 54,
        65, 25, 63, 161, 1, 216, 80, 73, 209, 76, 132, 187, 208, 89, 18, 169,
        200, 196, 135, 130, 116, 188, 159, 86, 164, 100, 109, 198, 173, 186, 3, 64,
        52, 217, 226, 250, 124, 123, 5, 202, 38, 147, 118, 126, 255, 82, 85, 212,
        207, 206, 59, 227, 47, 16, 58, 17, 182, 189, 28, 42, 223, 183, 170, 213,
        119, 248, 152, 2, 44, 154, 163, 70, 221, 153, 101, 155, 167, 43, 172, 9,
        129, 22, 39, 253, 19, 98, 108, 110, 79, 113, 224, 232, 178, 185, 112, 104,
        218, 246, 97, 228, 251, 34, 242, 193, 238, 210, 144, 12, 191, 179, 162, 241,
        81, 51, 145, 235, 249, 14, 239, 107, 49, 192, 214, 31, 181, 199, 106, 157,
        184, 84, 204, 176, 115, 121, 50, 45, 127, 4, 150, 254, 138, 236, 205, 93,
        222, 114, 67, 29, 24, 72, 243, 141, 128, 195, 78, 66, 215, 61, 156, 180,
    ],
    dtype=np.int64,
)  # fmt: skip

# Mirrored so that perm[perm[x] + y + 1] never needs a wraparound.
_PERM = np.concatenate((_PERMUTATION, _PERMUTATION))
_PERM.setflags(write=False)


def _fade(t: np.ndarray) -> np.ndarray:
    return t * t * t * (t * (t * 6 - 15) + 10)


def _lerp(a: np.ndarray, b: np.ndarray, t: np.ndarray) -> np.ndarray:
    return a + t * (b - a)


def _grad(hash_value: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Dot product of (x, y) with the diagonal gradient picked by the hash."""
    u = np.where(hash_value & 1, -x, x)
    v = np.where(hash_value & 2, -y, y)
    return u + v


def _to_output(value: np.ndarray) -> Coordinate:
    if value.ndim == 0:
        return float(value)
    return value


class NoiseField:
    """Deterministic coherent-noise generator.

    Sampling is a pure function of (position, seed, settings); the field holds
    no other state after construction and can be shared by every layer of a
    terrain.

    Attributes:
        seed: Numeric seed added to every sample coordinate.
    """

    def __init__(self, seed: RandomSeed = config.DEFAULT_SEED) -> None:
        self.seed: int = rng.noise_seed(seed)

    def __repr__(self) -> str:
        return f"NoiseField(seed={self.seed})"

    def sample_2d(self, x: Coordinate, y: Coordinate) -> Coordinate:
        """Sample base noise at (x, y).

        Returns:
            Noise in [-1, 1]; a float for scalar input, an array for array input.
        """
        xs = np.asarray(x, dtype=np.float64)
        ys = np.asarray(y, dtype=np.float64)

        x_floor = np.floor(xs)
        y_floor = np.floor(ys)
        xf = xs - x_floor
        yf = ys - y_floor
        xi = x_floor.astype(np.int64) & 255
        yi = y_floor.astype(np.int64) & 255

        aa = _PERM[_PERM[xi] + yi]
        ab = _PERM[_PERM[xi] + yi + 1]
        ba = _PERM[_PERM[xi + 1] + yi]
        bb = _PERM[_PERM[xi + 1] + yi + 1]

        u = _fade(xf)
        v = _fade(yf)
        bottom = _lerp(_grad(aa, xf, yf), _grad(ba, xf - 1, yf), u)
        top = _lerp(_grad(ab, xf, yf - 1), _grad(bb, xf - 1, yf - 1), u)

        return _to_output(np.clip(_lerp(bottom, top, v), -1.0, 1.0))

    def octave_sample(
        self,
        x: Coordinate,
        y: Coordinate,
        octave_count: int,
        blend_factor: float,
    ) -> Coordinate:
        """Sum ``octave_count`` octaves of noise, normalized by total weight.

        Octave ``i`` samples at frequency ``2 ** i`` with weight
        ``blend_factor ** i``. The result is a weighted average of values in
        [-1, 1] and is not re-clamped.

        Raises:
            InvalidConfigError: If octave_count is less than 1.
        """
        if octave_count < 1:
            raise InvalidConfigError(f"octave_count must be >= 1, got {octave_count}")

        total: Coordinate = 0.0
        total_weight = 0.0
        for octave in range(octave_count):
            frequency = 2.0**octave
            weight = blend_factor**octave
            total = total + self.sample_2d(x * frequency, y * frequency) * weight
            total_weight += weight
        return total / total_weight

    def _sample_coordinates(
        self, x: Coordinate, y: Coordinate, settings: TerrainSettings
    ) -> tuple[Coordinate, Coordinate]:
        """Apply ``(position + offset) * scale + seed`` per axis."""
        settings.validate()
        offset = settings.offset
        sx = (x + offset.x) * settings.scale + self.seed
        sy = (y + offset.y) * settings.scale + self.seed
        return sx, sy

    def get_normalized_octave(
        self, position: Vec2 | tuple[float, float], settings: TerrainSettings
    ) -> float:
        """Fractal noise at ``position`` remapped from [-1, 1] to [0, 1].

        Raises:
            InvalidConfigError: If the settings fail validation.
        """
        pos = Vec2.of(position)
        sx, sy = self._sample_coordinates(pos.x, pos.y, settings)
        value = self.octave_sample(
            sx, sy, settings.octave_count, settings.octave_blend
        )
        return float(np.clip((value + 1.0) / 2.0, 0.0, 1.0))

    def get_normalized_value(
        self, position: Vec2 | tuple[float, float], settings: TerrainSettings
    ) -> float:
        """Single-octave noise at ``position``, in the raw [-1, 1] range.

        Unlike get_normalized_octave() this is not remapped to [0, 1].
        """
        pos = Vec2.of(position)
        sx, sy = self._sample_coordinates(pos.x, pos.y, settings)
        return float(self.sample_2d(sx, sy))

    def normalized_octave_grid(
        self, xs: np.ndarray, ys: np.ndarray, settings: TerrainSettings
    ) -> np.ndarray:
        """Vectorized get_normalized_octave() over arrays of positions.

        ``xs`` and ``ys`` must broadcast together. Element-wise results equal
        calling get_normalized_octave() on each position.
        """
        sx, sy = self._sample_coordinates(
            np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64), settings
        )
        value = self.octave_sample(
            sx, sy, settings.octave_count, settings.octave_blend
        )
        return np.clip((np.asarray(value) + 1.0) / 2.0, 0.0, 1.0)
