"""Interfaces to the host rendering system.

The generation core never draws anything itself. It needs three things from
the host, described here as protocols:

- a way to turn a tile (texture + atlas region) at a position into an opaque
  renderable handle (`TileRenderer.produce_renderable`),
- a way to draw such a handle (`TileRenderer.draw_renderable`),
- texture load/unload hooks used by tile specs (`TextureLoader`).

`HeadlessRenderer` implements all of them without a display. It is the
default renderer for layers, and is what tests and scripts use.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias, runtime_checkable

from strata.types import AtlasSelector
from strata.util.coordinates import Vec2

if TYPE_CHECKING:
    from strata.layer import Layer
    from strata.terrain import Terrain

logger = logging.getLogger(__name__)

# Handles are opaque to the core; only identity/equality matters.
RenderableHandle: TypeAlias = Any


@runtime_checkable
class TileRenderer(Protocol):
    """Protocol for the host object that produces and draws tile renderables."""

    def produce_renderable(
        self,
        texture_ref: Hashable,
        atlas_selector: AtlasSelector,
        position: Vec2,
        size: Vec2,
    ) -> RenderableHandle: ...

    def draw_renderable(self, handle: RenderableHandle, camera: Any = None) -> None: ...


@runtime_checkable
class TextureLoader(Protocol):
    """Protocol for the host's texture lifecycle hooks."""

    def load_texture(self, texture_ref: Hashable) -> None: ...

    def unload_texture(self, texture_ref: Hashable) -> None: ...


@dataclass(frozen=True)
class Sprite:
    """Renderable handle produced by HeadlessRenderer.

    Attributes:
        texture_ref: Texture the sprite samples from.
        atlas_selector: Region of the texture sheet.
        position: World-space center of the sprite.
        size: World-space width and height.
    """

    texture_ref: Hashable
    atlas_selector: AtlasSelector
    position: Vec2
    size: Vec2


@dataclass
class HeadlessRenderer:
    """Display-free renderer that records what it is asked to do.

    Attributes:
        drawn: Handles passed to draw_renderable(), in call order.
        loaded_textures: Texture refs currently loaded.
    """

    drawn: list[RenderableHandle] = field(default_factory=list)
    loaded_textures: set[Hashable] = field(default_factory=set)

    def produce_renderable(
        self,
        texture_ref: Hashable,
        atlas_selector: AtlasSelector,
        position: Vec2,
        size: Vec2,
    ) -> Sprite:
        return Sprite(texture_ref, atlas_selector, position, size)

    def draw_renderable(self, handle: RenderableHandle, camera: Any = None) -> None:
        self.drawn.append(handle)

    def load_texture(self, texture_ref: Hashable) -> None:
        self.loaded_textures.add(texture_ref)

    def unload_texture(self, texture_ref: Hashable) -> None:
        self.loaded_textures.discard(texture_ref)

    def clear(self) -> None:
        """Forget recorded draw calls."""
        self.drawn.clear()


def draw_layer(
    layer: Layer | None, renderer: TileRenderer, camera: Any = None
) -> int:
    """Forward every placed renderable of ``layer`` to the renderer.

    Entries without a renderable (manual edits naming an unknown tile) are
    skipped, as is a missing layer.

    Returns:
        Number of renderables drawn.
    """
    if layer is None:
        return 0

    drawn = 0
    for _key, placed in layer:
        if placed.renderable is None:
            continue
        renderer.draw_renderable(placed.renderable, camera)
        drawn += 1
    return drawn


def draw_terrain(terrain: Terrain, renderer: TileRenderer, camera: Any = None) -> int:
    """Draw every layer of ``terrain`` in stack order.

    Returns:
        Total number of renderables drawn.
    """
    total = sum(draw_layer(layer, renderer, camera) for layer in terrain.layers)
    logger.debug(f"Drew {total} tiles across {len(terrain.layers)} layers")
    return total
