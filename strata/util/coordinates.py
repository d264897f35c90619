"""World-space vectors and conversions between world positions and grid cells."""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass

from strata.types import CellIndex, CellKey

# Positions that land within this distance of a cell boundary are snapped onto
# it before flooring, so float drift from offset arithmetic cannot move a
# position into the neighbouring cell.
CELL_SNAP_EPSILON = 1e-9


@dataclass(frozen=True, slots=True)
class Vec2:
    """Immutable pair of world coordinates or per-axis scale factors."""

    x: float
    y: float

    @classmethod
    def of(cls, value: Vec2 | tuple[float, float] | float) -> Vec2:
        """Coerce a Vec2, an (x, y) tuple or a scalar (both axes) to a Vec2."""
        if isinstance(value, Vec2):
            return value
        if isinstance(value, int | float):
            return cls(float(value), float(value))
        x, y = value
        return cls(float(x), float(y))

    def __add__(self, other: Vec2 | tuple[float, float]) -> Vec2:
        other = Vec2.of(other)
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2 | tuple[float, float]) -> Vec2:
        other = Vec2.of(other)
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, other: Vec2 | float) -> Vec2:
        """Scalar multiply, or componentwise multiply by another Vec2."""
        if isinstance(other, Vec2):
            return Vec2(self.x * other.x, self.y * other.y)
        return Vec2(self.x * other, self.y * other)

    __rmul__ = __mul__

    def __truediv__(self, other: Vec2 | float) -> Vec2:
        if isinstance(other, Vec2):
            return Vec2(self.x / other.x, self.y / other.y)
        return Vec2(self.x / other, self.y / other)

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def __repr__(self) -> str:
        return f"Vec2({self.x}, {self.y})"


ZERO = Vec2(0.0, 0.0)


# =============================================================================
# GRID HELPERS
# =============================================================================


def snap_floor(value: float) -> CellIndex:
    """Floor ``value``, treating values within epsilon of an integer as that integer."""
    nearest = round(value)
    if abs(value - nearest) < CELL_SNAP_EPSILON:
        return int(nearest)
    return math.floor(value)


def cell_key(
    position: Vec2 | tuple[float, float],
    cell_scale: Vec2 | tuple[float, float],
    origin: Vec2 | tuple[float, float] = ZERO,
) -> CellKey:
    """Return the integer grid indices of the cell containing ``position``.

    Args:
        position: World-space position.
        cell_scale: Cell size in world units. Both axes must be positive.
        origin: World-space position of cell (0, 0)'s lower corner.
    """
    local = (Vec2.of(position) - Vec2.of(origin)) / Vec2.of(cell_scale)
    return (snap_floor(local.x), snap_floor(local.y))


def grid_cell_count(extent: float, step: float) -> int:
    """Number of grid steps starting at 0 that stay strictly below ``extent``."""
    if extent <= 0:
        return 0
    ratio = extent / step
    nearest = round(ratio)
    if abs(ratio - nearest) < CELL_SNAP_EPSILON:
        return int(nearest)
    return math.ceil(ratio)

