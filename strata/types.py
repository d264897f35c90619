from __future__ import annotations

from typing import Final, Literal, TypeAlias

# =============================================================================
# SPATIAL TYPES
# =============================================================================

# Integer grid indices of a layer cell. Placement maps are keyed by these,
# never by raw float positions.
CellIndex: TypeAlias = int
CellKey: TypeAlias = tuple[CellIndex, CellIndex]  # Example: (3, 7) = column 3, row 7

# World-space coordinates are floats. Anything that accepts a position also
# accepts a plain (x, y) tuple and coerces it through Vec2.of().
WorldCoord: TypeAlias = float
WorldPos: TypeAlias = tuple[WorldCoord, WorldCoord]  # Example: (12.5, 3.0)

# Zoom steps are signed unit steps: +1 zooms in, -1 zooms out.
ZoomDirection: TypeAlias = Literal[-1, 1]

# =============================================================================
# TILE TYPES
# =============================================================================

# Sub-region of a texture sheet: (x, y, width, height) in sheet pixels.
AtlasSelector: TypeAlias = tuple[int, int, int, int]

# Inclusive min/max range, e.g. a tile's normalized height range.
FloatRange: TypeAlias = tuple[float, float]

# Marker returned for "no tile in this cell" by cross-layer queries.
NO_TILE: Final = None

# =============================================================================
# GENERATION TYPES
# =============================================================================

# Seed for deterministic generation.
# Can be an int for numeric seeds or a descriptive string like "archipelago".
RandomSeed: TypeAlias = int | str | None
