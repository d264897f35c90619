"""An ordered stack of layers sharing pan and zoom transforms.

Stack order is both draw order and the iteration order of cross-layer queries.
It is also the generation order, so a layer whose predicates read another
layer must sit above it in the stack.

Lifecycle: a Terrain starts without layers, gets layers via set_layers() (or
the constructor), and is generated by the first set_position() or
regenerate_layers() call. Queries made before generation see empty layers and
return empty results rather than failing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from strata.layer import Layer
from strata.render import TileRenderer, draw_terrain
from strata.settings import InvalidConfigError, TerrainSettings
from strata.tiles import TileCatalog
from strata.types import NO_TILE, WorldPos, ZoomDirection
from strata.util.coordinates import ZERO, Vec2
from strata.util.performance import measure, measure_block

if TYPE_CHECKING:
    from strata.noise import NoiseField

logger = logging.getLogger(__name__)


class Terrain:
    """A stack of layers with unified queries, edits and transforms.

    Attributes:
        layers: The layer stack, bottom first.
        zoom_level: Net number of zoom-in steps taken (zoom-outs subtract).
        catalog: Optional catalog used to resolve manual tile edits naming
            tiles a layer does not itself generate.
    """

    def __init__(
        self,
        layers: Iterable[Layer] | None = None,
        *,
        catalog: TileCatalog | None = None,
    ) -> None:
        self.layers: tuple[Layer, ...] = ()
        self.zoom_level: int = 0
        self.catalog = catalog
        self._generated = False
        if layers is not None:
            self.set_layers(layers)

    def __repr__(self) -> str:
        return f"Terrain(layers={len(self.layers)}, zoom_level={self.zoom_level})"

    @property
    def is_generated(self) -> bool:
        """True once the current layers have been generated at least once."""
        return self._generated

    def set_layers(self, layers: Iterable[Layer]) -> None:
        """Replace the layer stack and wire each layer's view of its siblings."""
        self.layers = tuple(layers)
        for layer in self.layers:
            layer.other_layers = self.layers
        self._generated = False

    def layer(self, index: int) -> Layer:
        """Return the layer at ``index``.

        Raises:
            IndexError: If the index is outside the stack. Negative indices
                are rejected rather than counted from the top.
        """
        if not 0 <= index < len(self.layers):
            raise IndexError(
                f"Layer index {index} out of range for {len(self.layers)} layers"
            )
        return self.layers[index]

    # -------------------------------------------------------------------------
    # Generation and transforms
    # -------------------------------------------------------------------------

    @measure("terrain.regenerate")
    def regenerate_layers(self, noise: NoiseField) -> None:
        """Regenerate every layer in stack order with its current state."""
        for layer in self.layers:
            layer.generate(noise)
        self._generated = True
        logger.info(
            f"Regenerated {len(self.layers)} layers "
            f"({sum(len(layer) for layer in self.layers)} tiles)"
        )

    def set_position(self, position: Vec2 | WorldPos, noise: NoiseField) -> None:
        """Pan every layer to ``position`` and regenerate them.

        Existing tiles are not shifted; each layer is rebuilt at the new
        offset, which also discards manual edits.
        """
        position = Vec2.of(position)
        with measure_block("terrain.set_position"):
            for layer in self.layers:
                layer.offset = position
            self.regenerate_layers(noise)

    def zoom(
        self,
        center: Vec2 | WorldPos,
        factor: float,
        direction: ZoomDirection,
    ) -> None:
        """Zoom all layers around ``center`` by one step.

        Each distinct settings instance has its scale multiplied once by
        ``1 / factor`` when zooming in or by ``factor`` when zooming out, so
        layers sharing settings are not scaled twice. Every settings offset is
        then recomputed from scratch as ``center * factor ** zoom_level -
        center``, replacing whatever offset the settings held before.

        Zooming also discards any pan set through set_position(): every layer
        offset returns to the origin, so the zoomed view is anchored on
        ``center`` alone. Pan again after zooming to move the view.

        Layers are not regenerated; call regenerate_layers() afterwards. Until
        then the old placements remain, keyed against the previous pan.
        Queries made in between resolve against the new grid, and can miss
        tiles because of that.

        Args:
            center: World-space point to zoom around.
            factor: Scale change per step. Must be positive.
            direction: +1 to zoom in, -1 to zoom out.

        Raises:
            ValueError: If direction is not +1 or -1.
            InvalidConfigError: If factor is not positive.
        """
        if direction not in (1, -1):
            raise ValueError(f"Zoom direction must be +1 or -1, got {direction}")
        if factor <= 0:
            raise InvalidConfigError(f"Zoom factor must be positive, got {factor}")

        center = Vec2.of(center)
        self.zoom_level += direction
        zoom_value = 1.0 / factor if direction > 0 else factor
        offset = center * factor**self.zoom_level - center

        for settings in self._distinct_settings():
            settings.scale_by(zoom_value)
            settings.set_offset(offset)
        for layer in self.layers:
            layer.offset = ZERO

        logger.info(
            f"Zoomed {'in' if direction > 0 else 'out'} around {center} "
            f"to level {self.zoom_level}"
        )

    def _distinct_settings(self) -> list[TerrainSettings]:
        seen: dict[int, TerrainSettings] = {}
        for layer in self.layers:
            seen.setdefault(id(layer.settings), layer.settings)
        return list(seen.values())

    # -------------------------------------------------------------------------
    # Cross-layer queries and edits
    # -------------------------------------------------------------------------

    def get_tile_names_at_location(self, position: Vec2 | WorldPos) -> list[str | None]:
        """Tile name per layer at ``position``, in stack order.

        The result always has one entry per layer; layers without a tile in
        that cell contribute NO_TILE.
        """
        names: list[str | None] = []
        for layer in self.layers:
            name = layer.tile_name_at(position)
            names.append(name if name is not None else NO_TILE)
        return names

    def set_tile_at_location(
        self,
        position: Vec2 | WorldPos,
        tile_name: str,
        layer_index: int,
    ) -> None:
        """Overwrite one layer's cell with ``tile_name``.

        The entry bypasses noise and predicates and survives until the
        layer's next generation pass. The tile spec is looked up in the
        layer's own tiles first, then in the terrain catalog.

        Raises:
            IndexError: If layer_index is out of range.
        """
        layer = self.layer(layer_index)
        spec = layer.find_tile(tile_name)
        if spec is None and self.catalog is not None:
            spec = self.catalog.get(tile_name)

        if spec is None:
            logger.warning(
                f"No tile spec named '{tile_name}' for layer {layer_index}; "
                "placing it without a renderable"
            )
            layer.set_tile(position, tile_name)
        else:
            layer.set_tile(position, spec)

    def delete_tile_at_location(
        self, position: Vec2 | WorldPos, name: str
    ) -> list[int]:
        """Remove ``name`` from every layer holding it at ``position``.

        Layers with a different tile (or none) in that cell are untouched.

        Returns:
            Indices of the layers that were modified, possibly empty.
        """
        removed: list[int] = []
        for index, layer in enumerate(self.layers):
            if layer.tile_name_at(position) == name:
                layer.remove_tile(position)
                removed.append(index)
        return removed

    def draw(self, renderer: TileRenderer, camera: Any = None) -> int:
        """Draw every layer through ``renderer``. Returns the draw count."""
        return draw_terrain(self, renderer, camera)
