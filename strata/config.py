"""
Configuration constants.

Centralizes the default values used when terrains, layers and settings are
built without explicit parameters. Organized by functional area.
"""

from typing import Literal

from strata.types import RandomSeed

# =============================================================================
# GENERAL
# =============================================================================

DEFAULT_SEED: RandomSeed = 0

# Level applied by the developer scripts. The library itself never installs
# logging handlers.
LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# =============================================================================
# NOISE SAMPLING
# =============================================================================

# Multiplier applied to (position + offset) before sampling. Smaller values
# stretch features over more cells.
DEFAULT_SCALE = 0.1

# Number of fractal octaves summed per sample.
DEFAULT_OCTAVE_COUNT = 4

# Weight falloff per octave (octave i is weighted blend ** i).
DEFAULT_OCTAVE_BLEND = 0.5

# =============================================================================
# LAYERS
# =============================================================================

# Step size of a layer grid in world units.
DEFAULT_CELL_SCALE = (1.0, 1.0)

# =============================================================================
# ZOOM
# =============================================================================

# Scale factor applied per zoom step.
DEFAULT_ZOOM_FACTOR = 2.0

# =============================================================================
# PRESET TERRAINS
# =============================================================================

# Vegetation is sampled with its own settings so forests do not simply mirror
# the ground heights.
ISLANDS_VEGETATION_SCALE = 0.35
ISLANDS_VEGETATION_OCTAVES = 2
ISLANDS_VEGETATION_BLEND = 0.6
