"""Per-layer noise sampling parameters.

A TerrainSettings instance is plain mutable state. Pan and zoom operations
mutate it in place, and every layer holding the same instance sees the change
immediately. Layers that should move independently need their own instance
(see ``TerrainSettings.copy``); layers that must zoom in lockstep can share
one. Nothing is synchronized.

Settings are never validated on construction or assignment. Validation runs
when the settings are used for sampling, so callers may freely build and edit
them beforehand.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from strata import config
from strata.util.coordinates import Vec2


class InvalidConfigError(ValueError):
    """Raised when generation parameters cannot produce a valid sample.

    Covers a zero sampling scale, fewer than one octave, a non-positive
    octave blend, a non-positive cell scale and a non-positive zoom factor.
    """


@dataclass
class TerrainSettings:
    """Sampling parameters for one layer (or a group of layers sharing them).

    Attributes:
        offset: World-space translation added to positions before scaling.
            Zoom recomputes this from scratch.
        scale: Multiplier applied to offset positions. Must not be zero.
        octave_count: Number of fractal octaves. Must be at least 1.
        octave_blend: Weight falloff per octave, normally in (0, 1).
    """

    offset: Vec2 = field(default_factory=lambda: Vec2(0.0, 0.0))
    scale: float = config.DEFAULT_SCALE
    octave_count: int = config.DEFAULT_OCTAVE_COUNT
    octave_blend: float = config.DEFAULT_OCTAVE_BLEND

    def __post_init__(self) -> None:
        self.offset = Vec2.of(self.offset)

    def validate(self) -> None:
        """Check the sampling invariants.

        Raises:
            InvalidConfigError: If scale is zero, octave_count is below 1, or
                octave_blend is not positive.
        """
        if self.scale == 0:
            raise InvalidConfigError(
                "TerrainSettings.scale must be non-zero; every position would "
                "collapse onto the seed"
            )
        if self.octave_count < 1:
            raise InvalidConfigError(
                f"TerrainSettings.octave_count must be >= 1, got {self.octave_count}"
            )
        if self.octave_blend <= 0:
            raise InvalidConfigError(
                f"TerrainSettings.octave_blend must be > 0, got {self.octave_blend}"
            )

    # -------------------------------------------------------------------------
    # Mutation operators used by pan and zoom
    # -------------------------------------------------------------------------

    def scale_by(self, factor: float) -> None:
        """Multiply the sampling scale by ``factor`` in place."""
        self.scale *= factor

    def set_offset(self, offset: Vec2 | tuple[float, float]) -> None:
        """Replace the sampling offset."""
        self.offset = Vec2.of(offset)

    def copy(self) -> TerrainSettings:
        """Return an independent copy, for layers that must not share state."""
        return replace(self)
