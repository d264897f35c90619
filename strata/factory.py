"""Factory functions for creating pre-configured terrains.

These functions provide convenient ways to create common layer stacks
without assembling tiles, settings and predicates by hand.

Currently implemented:
- "islands": Water/sand/grass/rock ground with vegetation growing on grass
"""

from __future__ import annotations

from strata import config
from strata.layer import Layer
from strata.noise import NoiseField
from strata.predicates import LayerHasTile
from strata.render import TileRenderer
from strata.settings import TerrainSettings
from strata.terrain import Terrain
from strata.tiles import TileCatalog, TileSpec
from strata.types import RandomSeed
from strata.util import rng
from strata.util.coordinates import Vec2

# Tiles are laid out on a single 16x16 pixel sheet per layer.
_TILE_PX = 16


def default_ground_catalog() -> TileCatalog:
    """Ground tiles ordered from deep water to mountain rock."""
    return TileCatalog(
        [
            TileSpec("Water", "ground.png", (0.0, 0.4), (0, 0, _TILE_PX, _TILE_PX)),
            TileSpec("Sand", "ground.png", (0.4, 0.5), (16, 0, _TILE_PX, _TILE_PX)),
            TileSpec("Grass", "ground.png", (0.5, 0.75), (32, 0, _TILE_PX, _TILE_PX)),
            TileSpec("Rock", "ground.png", (0.75, 1.0), (48, 0, _TILE_PX, _TILE_PX)),
            # Not generated by noise; available for manual edits.
            TileSpec("Ice", "ground.png", (0.0, 0.0), (64, 0, _TILE_PX, _TILE_PX)),
        ]
    )


def default_vegetation_catalog() -> TileCatalog:
    """Vegetation tiles. Heights below the bush range leave the cell bare."""
    return TileCatalog(
        [
            TileSpec("Bush", "plants.png", (0.45, 0.55), (0, 0, _TILE_PX, _TILE_PX)),
            TileSpec("Tree", "plants.png", (0.55, 1.0), (16, 0, _TILE_PX, _TILE_PX)),
        ]
    )


def create_terrain(
    name: str,
    world_size: Vec2 | tuple[float, float],
    *,
    cell_scale: Vec2 | tuple[float, float] = config.DEFAULT_CELL_SCALE,
    seed: RandomSeed = config.DEFAULT_SEED,
    renderer: TileRenderer | None = None,
) -> tuple[Terrain, NoiseField]:
    """Create a pre-configured terrain and its noise field by name.

    Available terrains:
    - "islands": Ground layer plus a vegetation layer restricted to grass

    Args:
        name: Name of the terrain configuration to use.
        world_size: Extent of every layer in world units.
        cell_scale: Cell size shared by every layer.
        seed: Seed for the noise field and derived per-layer offsets.
        renderer: Renderable producer for all layers. Defaults to a
            HeadlessRenderer per layer.

    Returns:
        The (ungenerated) terrain and the noise field to generate it with.

    Raises:
        ValueError: If the terrain name is not recognized.
    """
    if name == "islands":
        return create_island_terrain(
            world_size, cell_scale=cell_scale, seed=seed, renderer=renderer
        )
    raise ValueError(f"Unknown terrain name: {name!r}")


def create_island_terrain(
    world_size: Vec2 | tuple[float, float],
    *,
    cell_scale: Vec2 | tuple[float, float] = config.DEFAULT_CELL_SCALE,
    seed: RandomSeed = config.DEFAULT_SEED,
    renderer: TileRenderer | None = None,
) -> tuple[Terrain, NoiseField]:
    """Create an island terrain.

    The terrain generates:
    1. Ground from fractal noise (Water, Sand, Grass, Rock)
    2. Vegetation from its own, finer noise settings, only on Grass

    Returns:
        The (ungenerated) terrain and its noise field.
    """
    noise = NoiseField(seed)
    ground_tiles = default_ground_catalog()
    vegetation_tiles = default_vegetation_catalog()

    # Vegetation samples a region of the field far from the ground's, so its
    # pattern is not a rescaled copy of the coastline.
    vegetation_shift = rng.derive_seed(seed, "layer.vegetation")
    vegetation_settings = TerrainSettings(
        offset=Vec2(vegetation_shift, vegetation_shift),
        scale=config.ISLANDS_VEGETATION_SCALE,
        octave_count=config.ISLANDS_VEGETATION_OCTAVES,
        octave_blend=config.ISLANDS_VEGETATION_BLEND,
    )

    layers = [
        # 1. Ground, driven by the default settings
        Layer(
            ground_tiles.as_sequence(),
            world_size,
            cell_scale,
            settings=TerrainSettings(),
            renderer=renderer,
            name="ground",
        ),
        # 2. Vegetation grows only on grass of the ground layer
        Layer(
            vegetation_tiles.as_sequence(),
            world_size,
            cell_scale,
            settings=vegetation_settings,
            predicates=[LayerHasTile(0, {"Grass"})],
            renderer=renderer,
            name="vegetation",
        ),
    ]

    catalog = TileCatalog([*ground_tiles, *vegetation_tiles])
    return Terrain(layers, catalog=catalog), noise
