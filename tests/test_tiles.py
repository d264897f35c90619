"""Tests for tile specs, catalogs and height-based selection."""

from __future__ import annotations

import dataclasses

import pytest

from strata.render import HeadlessRenderer
from strata.tiles import TileCatalog, TileSpec, select_by_height


class TestSelectByHeight:
    """Range lookup is inclusive on both ends and first-match-wins."""

    def test_shared_boundary_resolves_to_first_tile(
        self, shore_tiles: list[TileSpec]
    ) -> None:
        """0.4 is in both Water and Sand; catalog order picks Water."""
        tile = select_by_height(0.4, shore_tiles)
        assert tile is not None
        assert tile.name == "Water"

    def test_upper_shared_boundary(self, shore_tiles: list[TileSpec]) -> None:
        tile = select_by_height(0.6, shore_tiles)
        assert tile is not None
        assert tile.name == "Sand"

    @pytest.mark.parametrize(
        ("height", "expected"),
        [
            (0.0, "Water"),
            (0.2, "Water"),
            (0.41, "Sand"),
            (0.59, "Sand"),
            (0.61, "Grass"),
            (1.0, "Grass"),
        ],
    )
    def test_interior_heights(
        self, shore_tiles: list[TileSpec], height: float, expected: str
    ) -> None:
        tile = select_by_height(height, shore_tiles)
        assert tile is not None
        assert tile.name == expected

    def test_no_match_returns_none(self) -> None:
        tiles = [TileSpec("Peak", "peak.png", (0.8, 1.0))]
        assert select_by_height(0.5, tiles) is None
        assert select_by_height(-0.1, tiles) is None

    def test_empty_tiles_return_none(self) -> None:
        assert select_by_height(0.5, []) is None

    def test_overlapping_ranges_prefer_catalog_order(self) -> None:
        wide = TileSpec("Wide", "w.png", (0.0, 1.0))
        narrow = TileSpec("Narrow", "n.png", (0.4, 0.6))
        assert select_by_height(0.5, [narrow, wide]).name == "Narrow"
        assert select_by_height(0.5, [wide, narrow]).name == "Wide"


class TestTileSpec:
    """Validation and immutability of tile specs."""

    @pytest.mark.parametrize(
        "height_range", [(0.5, 0.4), (-0.1, 0.5), (0.2, 1.1), (1.2, 1.3)]
    )
    def test_invalid_height_range_rejected(
        self, height_range: tuple[float, float]
    ) -> None:
        with pytest.raises(ValueError, match="height range"):
            TileSpec("Bad", "bad.png", height_range)

    def test_degenerate_range_allowed(self) -> None:
        tile = TileSpec("Exact", "e.png", (0.5, 0.5))
        assert tile.contains(0.5)
        assert not tile.contains(0.5001)

    @pytest.mark.parametrize(
        "selector", [(0, 0, 16), (0, 0, 16, 16, 1), (0.0, 0, 1, 1)]
    )
    def test_invalid_atlas_selector_rejected(self, selector: tuple) -> None:
        with pytest.raises(ValueError, match="atlas selector"):
            TileSpec("Bad", "bad.png", (0.0, 1.0), selector)

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            TileSpec("", "x.png")

    def test_is_immutable(self) -> None:
        tile = TileSpec("Water", "water.png", (0.0, 0.4))
        with pytest.raises(dataclasses.FrozenInstanceError):
            tile.name = "Ice"  # type: ignore[misc]

    def test_equal_specs_hash_equal(self) -> None:
        selector = [0, 0, 16, 16]
        a = TileSpec("Water", "water.png", (0, 0.4), selector)  # type: ignore[arg-type]
        b = TileSpec("Water", "water.png", (0.0, 0.4), (0, 0, 16, 16))
        assert a == b
        assert hash(a) == hash(b)

    def test_load_and_unload_forward_texture_ref(self) -> None:
        loader = HeadlessRenderer()
        tile = TileSpec("Water", "water.png")

        tile.load(loader)
        assert loader.loaded_textures == {"water.png"}

        tile.unload(loader)
        assert loader.loaded_textures == set()


class TestTileCatalog:
    """Ordered, name-unique tile collections."""

    def test_preserves_order(self, shore_tiles: list[TileSpec]) -> None:
        catalog = TileCatalog(shore_tiles)
        assert catalog.names() == ["Water", "Sand", "Grass"]
        assert list(catalog) == shore_tiles
        assert catalog.as_sequence() == tuple(shore_tiles)
        assert len(catalog) == 3

    def test_duplicate_name_rejected(self, shore_tiles: list[TileSpec]) -> None:
        catalog = TileCatalog(shore_tiles)
        with pytest.raises(ValueError, match="already registered"):
            catalog.add(TileSpec("Water", "other.png"))

    def test_lookup_by_name(self, shore_tiles: list[TileSpec]) -> None:
        catalog = TileCatalog(shore_tiles)
        assert catalog.get("Sand") is shore_tiles[1]
        assert catalog["Grass"] is shore_tiles[2]
        assert "Water" in catalog
        assert catalog.get("Lava") is None
        assert "Lava" not in catalog
        with pytest.raises(KeyError):
            catalog["Lava"]

    def test_select_by_height_uses_catalog_order(
        self, shore_tiles: list[TileSpec]
    ) -> None:
        catalog = TileCatalog(shore_tiles)
        assert catalog.select_by_height(0.4).name == "Water"
        assert catalog.select_by_height(0.7).name == "Grass"

    def test_load_and_unload_all_textures(self, shore_tiles: list[TileSpec]) -> None:
        loader = HeadlessRenderer()
        catalog = TileCatalog(shore_tiles)

        catalog.load(loader)
        assert loader.loaded_textures == {"water.png", "sand.png", "grass.png"}

        catalog.unload(loader)
        assert loader.loaded_textures == set()

    def test_shared_specs_across_catalogs(self, shore_tiles: list[TileSpec]) -> None:
        first = TileCatalog(shore_tiles)
        second = TileCatalog(shore_tiles[:1])
        assert first["Water"] is second["Water"]
