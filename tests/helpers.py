from __future__ import annotations

from strata.layer import Layer
from strata.settings import TerrainSettings
from strata.tiles import TileSpec


def make_full_cover_layer(
    name: str,
    world_size: tuple[float, float] = (4, 4),
    **kwargs,
) -> Layer:
    """A layer whose single tile covers every height, so every cell is filled."""
    kwargs.setdefault("settings", TerrainSettings())
    return Layer([TileSpec(name, f"{name}.png", (0.0, 1.0))], world_size, **kwargs)
