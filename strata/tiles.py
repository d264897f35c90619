"""
Tile definitions and height-based tile selection.

This module defines:
- `TileSpec`: An immutable named tile. It owns a normalized height range and
  the parameters a renderer needs to produce a drawable for it (an opaque
  texture reference and an atlas sub-region).
- `TileCatalog`: An ordered, name-unique collection of tile specs. Catalog
  order is significant: it is the tie-break when height ranges overlap.
- `select_by_height()`: The first-match range lookup layers use to turn a
  sampled height into a tile.

Height ranges are inclusive on both ends. Ranges in one catalog may overlap
and need not cover [0, 1]; a height outside every range selects nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from strata.types import AtlasSelector, FloatRange

if TYPE_CHECKING:
    from strata.render import TextureLoader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileSpec:
    """A named terrain tile tied to a height range and a texture region.

    Attributes:
        name: Unique name within a catalog (e.g., "Water").
        texture_ref: Opaque handle understood by the host renderer.
        height_range: Inclusive (lo, hi) with 0 <= lo <= hi <= 1.
        atlas_selector: (x, y, width, height) region of the texture sheet.
    """

    name: str
    texture_ref: Hashable = None
    height_range: FloatRange = (0.0, 1.0)
    atlas_selector: AtlasSelector = (0, 0, 0, 0)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("TileSpec name must be a non-empty string")

        lo, hi = self.height_range
        if not 0.0 <= lo <= hi <= 1.0:
            raise ValueError(
                f"Tile '{self.name}' height range {self.height_range} must satisfy "
                "0 <= lo <= hi <= 1"
            )
        # Normalize to a float tuple so equal specs compare and hash equal
        object.__setattr__(self, "height_range", (float(lo), float(hi)))

        selector = tuple(self.atlas_selector)
        if len(selector) != 4 or not all(isinstance(v, int) for v in selector):
            raise ValueError(
                f"Tile '{self.name}' atlas selector must be 4 integers, "
                f"got {self.atlas_selector!r}"
            )
        object.__setattr__(self, "atlas_selector", selector)

    def contains(self, height: float) -> bool:
        """Return True if ``height`` lies within this tile's inclusive range."""
        lo, hi = self.height_range
        return lo <= height <= hi

    def load(self, loader: TextureLoader) -> None:
        """Ask the host to load this tile's texture."""
        loader.load_texture(self.texture_ref)

    def unload(self, loader: TextureLoader) -> None:
        """Ask the host to release this tile's texture."""
        loader.unload_texture(self.texture_ref)


def select_by_height(height: float, tiles: Iterable[TileSpec]) -> TileSpec | None:
    """Return the first tile whose height range contains ``height``.

    Args:
        height: Normalized height, normally in [0, 1].
        tiles: Candidate tiles in priority order.

    Returns:
        The matching TileSpec, or None when no range contains the height.
        None means "no tile in this cell" and is not an error.
    """
    for tile in tiles:
        if tile.contains(height):
            return tile
    return None


class TileCatalog:
    """An ordered collection of uniquely named tile specs.

    Catalogs are shared, read-mostly resources: the same catalog (or the same
    TileSpec objects) may back any number of layers and terrains.
    """

    def __init__(self, tiles: Iterable[TileSpec] = ()) -> None:
        self._tiles: dict[str, TileSpec] = {}
        for tile in tiles:
            self.add(tile)

    def add(self, tile: TileSpec) -> TileSpec:
        """Append a tile to the catalog.

        Raises:
            ValueError: If a tile with the same name is already registered.
        """
        if tile.name in self._tiles:
            raise ValueError(f"Tile name '{tile.name}' is already registered")
        self._tiles[tile.name] = tile
        return tile

    def get(self, name: str) -> TileSpec | None:
        """Return the tile named ``name``, or None if absent."""
        return self._tiles.get(name)

    def __getitem__(self, name: str) -> TileSpec:
        return self._tiles[name]

    def __contains__(self, name: object) -> bool:
        return name in self._tiles

    def __iter__(self) -> Iterator[TileSpec]:
        return iter(self._tiles.values())

    def __len__(self) -> int:
        return len(self._tiles)

    def __repr__(self) -> str:
        return f"TileCatalog({list(self._tiles)})"

    def names(self) -> list[str]:
        """Tile names in catalog order."""
        return list(self._tiles)

    def as_sequence(self) -> Sequence[TileSpec]:
        """Tiles in catalog order, for handing to a Layer."""
        return tuple(self._tiles.values())

    def select_by_height(self, height: float) -> TileSpec | None:
        """First tile in catalog order whose range contains ``height``."""
        return select_by_height(height, self._tiles.values())

    def load(self, loader: TextureLoader) -> None:
        """Load every tile's texture through ``loader``."""
        for tile in self._tiles.values():
            tile.load(loader)
        logger.debug(f"Loaded textures for {len(self._tiles)} tiles")

    def unload(self, loader: TextureLoader) -> None:
        """Unload every tile's texture through ``loader``."""
        for tile in self._tiles.values():
            tile.unload(loader)
        logger.debug(f"Unloaded textures for {len(self._tiles)} tiles")
