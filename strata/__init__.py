"""Layered procedural tile terrain from gradient noise.

This package provides:
- NoiseField: Seeded 2D gradient noise with fractal octave summation
- TerrainSettings: Per-layer sampling parameters mutated by pan and zoom
- TileSpec / TileCatalog: Named tiles selected by normalized height
- Layer: A generated grid of placed tiles, filtered by placement predicates
- Terrain: An ordered stack of layers with cross-layer queries and edits

Example usage:
    from strata import Layer, NoiseField, Terrain, TileSpec

    tiles = [
        TileSpec("Water", "ground.png", (0.0, 0.4)),
        TileSpec("Sand", "ground.png", (0.4, 0.6)),
        TileSpec("Grass", "ground.png", (0.6, 1.0)),
    ]
    noise = NoiseField(seed=1234)
    terrain = Terrain([Layer(tiles, world_size=(64, 64))])
    terrain.set_position((0, 0), noise)
    terrain.get_tile_names_at_location((10.5, 3.5))
"""

from .factory import create_island_terrain, create_terrain
from .layer import Layer, PlacedTile
from .noise import NoiseField
from .predicates import (
    AllOf,
    AnyOf,
    FunctionPredicate,
    LayerEmpty,
    LayerHasTile,
    NoiseAbove,
    NoiseBelow,
    Not,
    PlacementPredicate,
    create_predicate,
    register_predicate,
)
from .render import HeadlessRenderer, Sprite, TextureLoader, TileRenderer
from .settings import InvalidConfigError, TerrainSettings
from .terrain import Terrain
from .tiles import TileCatalog, TileSpec, select_by_height
from .types import NO_TILE
from .util.coordinates import Vec2

__all__ = [
    "NO_TILE",
    "AllOf",
    "AnyOf",
    "FunctionPredicate",
    "HeadlessRenderer",
    "InvalidConfigError",
    "Layer",
    "LayerEmpty",
    "LayerHasTile",
    "NoiseAbove",
    "NoiseBelow",
    "NoiseField",
    "Not",
    "PlacedTile",
    "PlacementPredicate",
    "Sprite",
    "Terrain",
    "TerrainSettings",
    "TextureLoader",
    "TileCatalog",
    "TileRenderer",
    "TileSpec",
    "Vec2",
    "create_island_terrain",
    "create_predicate",
    "create_terrain",
    "register_predicate",
    "select_by_height",
]
