"""Tests for the layer stack: queries, edits, pan and zoom."""

from __future__ import annotations

import logging

import pytest

from strata.layer import Layer
from strata.noise import NoiseField
from strata.predicates import LayerEmpty
from strata.render import HeadlessRenderer, Sprite
from strata.settings import InvalidConfigError, TerrainSettings
from strata.terrain import Terrain
from strata.tiles import TileCatalog, TileSpec
from strata.types import NO_TILE
from strata.util.coordinates import Vec2
from strata.util.performance import enable_performance_tracking, perf_tracker
from tests.helpers import make_full_cover_layer


def two_layer_terrain() -> Terrain:
    return Terrain([make_full_cover_layer("Ground"), make_full_cover_layer("Moss")])


class TestLayerStack:
    """Tests for stack wiring and index handling."""

    def test_layers_see_the_whole_stack(self) -> None:
        terrain = two_layer_terrain()
        for layer in terrain.layers:
            assert layer.other_layers is terrain.layers

    def test_set_layers_replaces_stack_and_resets_generation(
        self, noise: NoiseField
    ) -> None:
        terrain = two_layer_terrain()
        terrain.regenerate_layers(noise)
        assert terrain.is_generated

        replacement = make_full_cover_layer("Snow")
        terrain.set_layers([replacement])

        assert terrain.layers == (replacement,)
        assert replacement.other_layers == (replacement,)
        assert not terrain.is_generated

    @pytest.mark.parametrize("index", [2, 5, -1])
    def test_bad_layer_index_raises(self, index: int) -> None:
        terrain = two_layer_terrain()
        with pytest.raises(IndexError):
            terrain.layer(index)
        with pytest.raises(IndexError):
            terrain.set_tile_at_location((0, 0), "Ground", index)

    def test_empty_terrain_is_usable(self, noise: NoiseField) -> None:
        terrain = Terrain()
        terrain.set_position((3, 3), noise)
        assert terrain.get_tile_names_at_location((3, 3)) == []
        assert terrain.delete_tile_at_location((3, 3), "Ground") == []
        assert terrain.draw(HeadlessRenderer()) == 0


class TestQueries:
    """Tests for cross-layer lookups."""

    def test_queries_before_generation_return_no_tiles(self) -> None:
        terrain = two_layer_terrain()
        assert not terrain.is_generated
        assert terrain.get_tile_names_at_location((1.5, 1.5)) == [NO_TILE, NO_TILE]

    def test_queries_before_generation_tolerate_invalid_cell_scale(
        self, noise: NoiseField
    ) -> None:
        broken = make_full_cover_layer("Ground", cell_scale=(-1, 1))
        terrain = Terrain([broken, make_full_cover_layer("Moss")])

        assert terrain.get_tile_names_at_location((0.5, 0.5)) == [None, None]
        assert terrain.delete_tile_at_location((0.5, 0.5), "Ground") == []
        with pytest.raises(InvalidConfigError, match="cell_scale"):
            terrain.regenerate_layers(noise)

    def test_names_are_reported_in_stack_order(self, noise: NoiseField) -> None:
        terrain = two_layer_terrain()
        terrain.regenerate_layers(noise)
        assert terrain.get_tile_names_at_location((1.5, 2.5)) == ["Ground", "Moss"]

    def test_positions_outside_the_grid_have_no_tiles(self, noise: NoiseField) -> None:
        terrain = two_layer_terrain()
        terrain.regenerate_layers(noise)
        assert terrain.get_tile_names_at_location((-0.5, 1.0)) == [None, None]
        assert terrain.get_tile_names_at_location((4.0, 1.0)) == [None, None]

    def test_layer_empty_partitions_cells(
        self, noise: NoiseField, shore_tiles: list[TileSpec]
    ) -> None:
        """A layer gated on an empty lower layer fills exactly its gaps."""
        settings = TerrainSettings(scale=0.3)
        land = Layer(shore_tiles[1:], (10, 10), settings=settings, name="land")
        sea = make_full_cover_layer(
            "Sea", world_size=(10, 10), predicates=[LayerEmpty(0)]
        )
        terrain = Terrain([land, sea])

        terrain.regenerate_layers(noise)

        assert len(land) + len(sea) == 100
        assert not set(land.placed) & set(sea.placed)
        for x in range(10):
            names = terrain.get_tile_names_at_location((x + 0.5, 4.5))
            assert names.count(None) == 1


class TestEdits:
    """Tests for manual tile placement and deletion."""

    def test_set_tile_uses_layer_tiles_before_catalog(self, noise: NoiseField) -> None:
        catalog = TileCatalog([TileSpec("Ground", "catalog.png")])
        terrain = Terrain([make_full_cover_layer("Ground")], catalog=catalog)
        terrain.regenerate_layers(noise)

        terrain.set_tile_at_location((2.5, 2.5), "Ground", 0)

        placed = terrain.layer(0).tile_at((2.5, 2.5))
        assert placed.renderable.texture_ref == "Ground.png"

    def test_set_tile_from_another_layer_without_catalog(
        self, noise: NoiseField
    ) -> None:
        """Only the target layer's own tiles and the catalog are consulted."""
        terrain = two_layer_terrain()
        terrain.regenerate_layers(noise)

        terrain.set_tile_at_location((2.5, 2.5), "Ground", 1)

        placed = terrain.layer(1).tile_at((2.5, 2.5))
        assert placed.tile_name == "Ground"
        assert placed.renderable is None

    def test_set_tile_falls_back_to_catalog(self, noise: NoiseField) -> None:
        ice = TileSpec("Ice", "ice.png", (0.0, 0.0), (64, 0, 16, 16))
        terrain = Terrain([make_full_cover_layer("Ground")], catalog=TileCatalog([ice]))
        terrain.regenerate_layers(noise)

        terrain.set_tile_at_location((1.2, 3.7), "Ice", 0)

        assert terrain.get_tile_names_at_location((1.5, 3.5)) == ["Ice"]
        placed = terrain.layer(0).tile_at((1.5, 3.5))
        assert placed.renderable == Sprite(
            "ice.png", (64, 0, 16, 16), Vec2(1.5, 3.5), Vec2(1.0, 1.0)
        )

    def test_unknown_tile_is_placed_without_renderable(
        self, noise: NoiseField, caplog: pytest.LogCaptureFixture
    ) -> None:
        terrain = two_layer_terrain()
        terrain.regenerate_layers(noise)

        with caplog.at_level(logging.WARNING, logger="strata.terrain"):
            terrain.set_tile_at_location((0.5, 0.5), "Lava", 0)

        assert "Lava" in caplog.text
        assert terrain.get_tile_names_at_location((0.5, 0.5)) == ["Lava", "Moss"]
        assert terrain.layer(0).tile_at((0.5, 0.5)).renderable is None

    def test_manual_edit_lasts_until_next_generation(self, noise: NoiseField) -> None:
        terrain = two_layer_terrain()
        terrain.set_position((0, 0), noise)
        terrain.set_tile_at_location((0.5, 0.5), "Moss", 0)
        assert terrain.get_tile_names_at_location((0.5, 0.5)) == ["Moss", "Moss"]

        terrain.set_position((0, 0), noise)

        assert terrain.get_tile_names_at_location((0.5, 0.5)) == ["Ground", "Moss"]

    def test_delete_only_touches_layers_holding_the_name(
        self, noise: NoiseField
    ) -> None:
        terrain = two_layer_terrain()
        terrain.regenerate_layers(noise)

        assert terrain.delete_tile_at_location((2.5, 0.5), "Moss") == [1]
        assert terrain.get_tile_names_at_location((2.5, 0.5)) == ["Ground", None]

    def test_delete_from_every_matching_layer(self, noise: NoiseField) -> None:
        terrain = Terrain(
            [make_full_cover_layer("Ground"), make_full_cover_layer("Ground")]
        )
        terrain.regenerate_layers(noise)

        assert terrain.delete_tile_at_location((0.5, 0.5), "Ground") == [0, 1]
        assert terrain.get_tile_names_at_location((0.5, 0.5)) == [None, None]
        assert len(terrain.layer(0)) == 15

    def test_delete_with_no_match_changes_nothing(self, noise: NoiseField) -> None:
        terrain = two_layer_terrain()
        terrain.regenerate_layers(noise)
        assert terrain.delete_tile_at_location((0.5, 0.5), "Lava") == []
        assert sum(len(layer) for layer in terrain.layers) == 32


class TestPan:
    """Tests for set_position()."""

    def test_set_position_offsets_and_regenerates(self, noise: NoiseField) -> None:
        terrain = two_layer_terrain()

        terrain.set_position((10.0, -4.0), noise)

        assert terrain.is_generated
        for layer in terrain.layers:
            assert layer.offset == Vec2(10.0, -4.0)
        assert terrain.get_tile_names_at_location((10.5, -3.5)) == ["Ground", "Moss"]
        assert terrain.get_tile_names_at_location((0.5, 0.5)) == [None, None]

    def test_renderables_sit_at_panned_cell_centers(self, noise: NoiseField) -> None:
        terrain = Terrain([make_full_cover_layer("Ground", world_size=(1, 1))])
        terrain.set_position((5.0, 5.0), noise)
        placed = terrain.layer(0).tile_at((5.5, 5.5))
        assert placed.renderable.position == Vec2(5.5, 5.5)

    def test_pan_does_not_touch_settings(self, noise: NoiseField) -> None:
        terrain = two_layer_terrain()
        terrain.set_position((7.0, 7.0), noise)
        for layer in terrain.layers:
            assert layer.settings.offset == Vec2(0.0, 0.0)

    def test_pan_is_measured_when_tracking(self, noise: NoiseField) -> None:
        enable_performance_tracking()
        terrain = two_layer_terrain()
        terrain.set_position((1, 1), noise)

        assert perf_tracker.get_stats("terrain.set_position").call_count == 1
        assert perf_tracker.get_stats("terrain.regenerate").call_count == 1
        assert perf_tracker.get_stats("layer.generate").call_count == 2


class TestZoom:
    """Tests for zoom()."""

    def test_zoom_in_halves_scale_and_recenters(self) -> None:
        terrain = two_layer_terrain()

        terrain.zoom((10.0, 10.0), 2.0, 1)

        assert terrain.zoom_level == 1
        for layer in terrain.layers:
            assert layer.settings.scale == pytest.approx(0.05)
            assert layer.settings.offset == Vec2(10.0, 10.0)

    def test_zoom_out_restores_original_transform(self) -> None:
        terrain = two_layer_terrain()

        terrain.zoom((10.0, 10.0), 2.0, 1)
        terrain.zoom((10.0, 10.0), 2.0, -1)

        assert terrain.zoom_level == 0
        for layer in terrain.layers:
            assert layer.settings.scale == pytest.approx(0.1)
            assert layer.settings.offset == Vec2(0.0, 0.0)

    def test_repeated_zoom_compounds(self) -> None:
        terrain = two_layer_terrain()

        terrain.zoom((3.0, 1.0), 2.0, 1)
        terrain.zoom((3.0, 1.0), 2.0, 1)

        settings = terrain.layer(0).settings
        assert terrain.zoom_level == 2
        assert settings.scale == pytest.approx(0.025)
        assert settings.offset == Vec2(9.0, 3.0)

    def test_zoom_out_below_start(self) -> None:
        terrain = two_layer_terrain()
        terrain.zoom((4.0, 8.0), 2.0, -1)

        settings = terrain.layer(0).settings
        assert terrain.zoom_level == -1
        assert settings.scale == pytest.approx(0.2)
        assert settings.offset == Vec2(-2.0, -4.0)

    def test_shared_settings_are_scaled_once(self) -> None:
        shared = TerrainSettings(scale=0.4)
        terrain = Terrain(
            [
                make_full_cover_layer("Ground", settings=shared),
                make_full_cover_layer("Moss", settings=shared),
                make_full_cover_layer("Snow", settings=TerrainSettings(scale=0.4)),
            ]
        )

        terrain.zoom((0.0, 0.0), 2.0, 1)

        assert shared.scale == pytest.approx(0.2)
        assert terrain.layer(2).settings.scale == pytest.approx(0.2)

    def test_zoom_replaces_existing_settings_offset(self) -> None:
        settings = TerrainSettings(offset=(500.0, 500.0))
        terrain = Terrain([make_full_cover_layer("Ground", settings=settings)])

        terrain.zoom((2.0, 2.0), 2.0, 1)

        assert settings.offset == Vec2(2.0, 2.0)

    def test_zoom_discards_prior_pan(self, noise: NoiseField) -> None:
        """After pan then zoom, the sampled window matches a zoom without pan."""
        panned = Terrain([make_full_cover_layer("Ground", world_size=(6, 6))])
        fresh = Terrain([make_full_cover_layer("Ground", world_size=(6, 6))])
        panned.set_position((50.0, 50.0), noise)

        panned.zoom((0.0, 0.0), 2.0, 1)
        fresh.zoom((0.0, 0.0), 2.0, 1)

        assert panned.layer(0).offset == Vec2(0.0, 0.0)
        assert (
            panned.layer(0).height_map(noise) == fresh.layer(0).height_map(noise)
        ).all()

        panned.regenerate_layers(noise)
        assert panned.get_tile_names_at_location((0.5, 0.5)) == ["Ground"]
        assert panned.get_tile_names_at_location((50.5, 50.5)) == [None]

    def test_zoom_does_not_regenerate(self, noise: NoiseField) -> None:
        terrain = two_layer_terrain()
        terrain.regenerate_layers(noise)
        before = dict(terrain.layer(0).placed)

        terrain.zoom((1.0, 1.0), 2.0, 1)

        assert terrain.layer(0).placed == before

    def test_zoom_changes_heights_after_regeneration(self, noise: NoiseField) -> None:
        layer = make_full_cover_layer("Ground", world_size=(8, 8))
        terrain = Terrain([layer])
        before = layer.height_map(noise)

        terrain.zoom((4.0, 4.0), 2.0, 1)

        assert not (layer.height_map(noise) == before).all()

    @pytest.mark.parametrize("direction", [0, 2, -2])
    def test_invalid_direction_rejected(self, direction: int) -> None:
        terrain = two_layer_terrain()
        with pytest.raises(ValueError, match="direction"):
            terrain.zoom((0.0, 0.0), 2.0, direction)
        assert terrain.zoom_level == 0

    @pytest.mark.parametrize("factor", [0.0, -2.0])
    def test_non_positive_factor_rejected(self, factor: float) -> None:
        terrain = two_layer_terrain()
        with pytest.raises(InvalidConfigError, match="factor"):
            terrain.zoom((0.0, 0.0), factor, 1)
        assert terrain.zoom_level == 0
        assert terrain.layer(0).settings.scale == pytest.approx(0.1)


class TestDraw:
    """Tests for forwarding placed renderables to the host renderer."""

    def test_draws_every_placed_tile_in_stack_order(self, noise: NoiseField) -> None:
        terrain = two_layer_terrain()
        terrain.regenerate_layers(noise)
        renderer = HeadlessRenderer()

        assert terrain.draw(renderer, camera="main") == 32
        textures = [sprite.texture_ref for sprite in renderer.drawn]
        assert textures == ["Ground.png"] * 16 + ["Moss.png"] * 16

    def test_entries_without_renderable_are_skipped(self, noise: NoiseField) -> None:
        terrain = two_layer_terrain()
        terrain.regenerate_layers(noise)
        terrain.set_tile_at_location((0.5, 0.5), "Lava", 0)

        assert terrain.draw(HeadlessRenderer()) == 31
