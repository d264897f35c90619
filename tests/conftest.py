from __future__ import annotations

from collections.abc import Iterator

import pytest

from strata.noise import NoiseField
from strata.tiles import TileSpec
from strata.util.performance import perf_tracker


@pytest.fixture(autouse=True)
def reset_performance_tracker() -> Iterator[None]:
    """Start and finish every test with tracking off and no collected stats."""
    perf_tracker.disable()
    perf_tracker.reset()
    yield
    perf_tracker.disable()
    perf_tracker.reset()


@pytest.fixture
def noise() -> NoiseField:
    return NoiseField(seed=0)


@pytest.fixture
def shore_tiles() -> list[TileSpec]:
    """Three tiles covering [0, 1] with shared boundaries at 0.4 and 0.6."""
    return [
        TileSpec("Water", "water.png", (0.0, 0.4), (0, 0, 16, 16)),
        TileSpec("Sand", "sand.png", (0.4, 0.6), (16, 0, 16, 16)),
        TileSpec("Grass", "grass.png", (0.6, 1.0), (32, 0, 16, 16)),
    ]

