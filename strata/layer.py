"""A single generated grid of placed tiles.

A Layer covers a rectangular world-space region with an axis-aligned grid of
cells. Each generation pass samples the noise field once per cell, maps the
height onto the layer's tiles, and records the result in a sparse placement
map keyed by integer cell indices.

The placement map is rebuilt from scratch on every pass. Manual edits made
through set_tile() last only until the next generate() call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from strata import config
from strata.predicates import PlacementPredicate, PredicateFunction, as_predicate
from strata.render import HeadlessRenderer, RenderableHandle, TileRenderer
from strata.settings import InvalidConfigError, TerrainSettings
from strata.tiles import TileSpec, select_by_height
from strata.types import CellKey, WorldPos
from strata.util.coordinates import ZERO, Vec2, cell_key, grid_cell_count
from strata.util.performance import measure

if TYPE_CHECKING:
    from strata.noise import NoiseField

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacedTile:
    """One occupied cell of a layer.

    Attributes:
        tile_name: Name of the tile in this cell.
        renderable: Handle produced by the layer's renderer, or None for a
            manual entry whose tile spec is unknown.
    """

    tile_name: str
    renderable: RenderableHandle = None


class Layer:
    """A noise-driven grid of tiles with its own settings, rules and pan offset.

    Attributes:
        tiles: Candidate tiles in priority order.
        world_size: Extent of the grid in world units, before the offset.
        cell_scale: Cell size in world units. Both axes must be positive.
        settings: Noise sampling parameters. May be shared with other layers.
        predicates: Placement rules, evaluated in order for every cell.
        renderer: Producer of renderable handles for placed tiles.
        name: Optional label used in logs.
        offset: World-space pan offset applied to the whole grid.
        other_layers: The owning terrain's layer stack, handed to predicates.
            Never mutated through this reference.
        placed: Sparse map from cell key to the tile occupying that cell.
    """

    def __init__(
        self,
        tiles: Iterable[TileSpec],
        world_size: Vec2 | tuple[float, float],
        cell_scale: Vec2 | tuple[float, float] = config.DEFAULT_CELL_SCALE,
        *,
        settings: TerrainSettings | None = None,
        predicates: Iterable[PlacementPredicate | PredicateFunction] = (),
        renderer: TileRenderer | None = None,
        name: str | None = None,
    ) -> None:
        self.tiles: tuple[TileSpec, ...] = tuple(tiles)
        self.world_size = Vec2.of(world_size)
        self.cell_scale = Vec2.of(cell_scale)
        self.settings = settings if settings is not None else TerrainSettings()
        self.predicates: list[PlacementPredicate] = [
            as_predicate(rule) for rule in predicates
        ]
        self.renderer: TileRenderer = (
            renderer if renderer is not None else HeadlessRenderer()
        )
        self.name = name

        self.offset: Vec2 = ZERO
        self.other_layers: Sequence[Layer] = ()
        self.placed: dict[CellKey, PlacedTile] = {}

    def __repr__(self) -> str:
        return (
            f"Layer(name={self.name!r}, world_size={self.world_size}, "
            f"cell_scale={self.cell_scale}, placed={len(self.placed)})"
        )

    @property
    def label(self) -> str:
        return self.name or f"<layer {id(self):#x}>"

    # -------------------------------------------------------------------------
    # Grid geometry
    # -------------------------------------------------------------------------

    def _has_valid_cell_scale(self) -> bool:
        return self.cell_scale.x > 0 and self.cell_scale.y > 0

    def _validate_cell_scale(self) -> None:
        if not self._has_valid_cell_scale():
            raise InvalidConfigError(
                f"Layer {self.label} cell_scale must be positive on both axes, "
                f"got {self.cell_scale}"
            )

    @property
    def grid_shape(self) -> tuple[int, int]:
        """Number of (columns, rows) covered by the grid."""
        self._validate_cell_scale()
        return (
            grid_cell_count(self.world_size.x, self.cell_scale.x),
            grid_cell_count(self.world_size.y, self.cell_scale.y),
        )

    def cell_key(self, position: Vec2 | WorldPos) -> CellKey:
        """Integer indices of the cell containing a world-space position.

        Keys are relative to the panned grid: cell (0, 0) starts at
        ``offset``.
        """
        self._validate_cell_scale()
        return cell_key(position, self.cell_scale, self.offset)

    def cell_center(self, key: CellKey) -> Vec2:
        """World-space center of the cell with the given key."""
        column, row = key
        corner = Vec2(column * self.cell_scale.x, row * self.cell_scale.y)
        return corner + self.offset + self.cell_scale / 2

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def height_map(self, noise: NoiseField) -> np.ndarray:
        """Normalized heights for every cell, shape (columns, rows).

        Cell (i, j) is sampled at its lower corner plus the pan offset, the
        same position generate() uses.

        Raises:
            InvalidConfigError: If the cell scale or settings are invalid.
        """
        columns, rows = self.grid_shape
        xs = np.arange(columns) * self.cell_scale.x + self.offset.x
        ys = np.arange(rows) * self.cell_scale.y + self.offset.y
        grid_x, grid_y = np.meshgrid(xs, ys, indexing="ij")
        return noise.normalized_octave_grid(grid_x, grid_y, self.settings)

    def _allows(self, noise: NoiseField, position: Vec2) -> bool:
        return all(
            predicate.evaluate(self.other_layers, noise, position)
            for predicate in self.predicates
        )

    def _produce(self, tile: TileSpec, center: Vec2) -> RenderableHandle:
        return self.renderer.produce_renderable(
            tile.texture_ref, tile.atlas_selector, center, self.cell_scale
        )

    @measure("layer.generate")
    def generate(self, noise: NoiseField) -> None:
        """Rebuild the placement map from the noise field.

        For every cell, the predicates run first; a cell any predicate rejects
        stays empty. Otherwise the cell's height picks a tile by range, and a
        renderable is produced at the cell center. Previous placements,
        including manual edits, are discarded.

        Running this twice with unchanged inputs produces an identical map.

        Raises:
            InvalidConfigError: If the cell scale or settings are invalid.
        """
        heights = self.height_map(noise)
        self.placed.clear()

        columns, rows = heights.shape
        half_cell = self.cell_scale / 2
        rejected = 0
        unmatched = 0

        for column in range(columns):
            for row in range(rows):
                local = Vec2(column * self.cell_scale.x, row * self.cell_scale.y)
                center = local + self.offset + half_cell

                if not self._allows(noise, center):
                    rejected += 1
                    continue

                tile = select_by_height(float(heights[column, row]), self.tiles)
                if tile is None:
                    unmatched += 1
                    continue

                self.placed[self.cell_key(center)] = PlacedTile(
                    tile.name, self._produce(tile, center)
                )

        logger.debug(
            f"Layer {self.label}: placed {len(self.placed)} of {columns * rows} "
            f"cells ({rejected} rejected by predicates, {unmatched} unmatched)"
        )

    # -------------------------------------------------------------------------
    # Queries and manual edits
    # -------------------------------------------------------------------------

    def tile_at(self, position: Vec2 | WorldPos) -> PlacedTile | None:
        """The placed tile in the cell containing ``position``, if any.

        A layer whose cell scale is invalid has never generated, so it holds
        nothing; the lookup returns None instead of raising.
        """
        if not self._has_valid_cell_scale():
            return None
        return self.placed.get(self.cell_key(position))

    def tile_name_at(self, position: Vec2 | WorldPos) -> str | None:
        """Name of the tile in the cell containing ``position``, or None."""
        placed = self.tile_at(position)
        return placed.tile_name if placed is not None else None

    def find_tile(self, name: str) -> TileSpec | None:
        """This layer's tile spec named ``name``, or None."""
        return next((tile for tile in self.tiles if tile.name == name), None)

    def set_tile(
        self, position: Vec2 | WorldPos, tile: TileSpec | str
    ) -> PlacedTile:
        """Overwrite the cell containing ``position``, bypassing noise and rules.

        Args:
            position: Any world-space position inside the target cell.
            tile: A tile spec, or a bare name. A name that is not one of this
                layer's tiles produces an entry without a renderable.

        Returns:
            The entry now stored in the cell.
        """
        key = self.cell_key(position)
        if isinstance(tile, str):
            spec = self.find_tile(tile)
            name = tile
        else:
            spec = tile
            name = tile.name

        renderable = (
            self._produce(spec, self.cell_center(key)) if spec is not None else None
        )
        entry = PlacedTile(name, renderable)
        self.placed[key] = entry
        return entry

    def remove_tile(self, position: Vec2 | WorldPos) -> PlacedTile | None:
        """Remove and return the entry in the cell containing ``position``."""
        if not self._has_valid_cell_scale():
            return None
        return self.placed.pop(self.cell_key(position), None)

    def clear(self) -> None:
        """Drop every placement."""
        self.placed.clear()

    def __len__(self) -> int:
        return len(self.placed)

    def __iter__(self) -> Iterator[tuple[CellKey, PlacedTile]]:
        return iter(self.placed.items())
