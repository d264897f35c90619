"""Placement predicates for layer generation.

A predicate decides whether a layer may place a tile in a cell. Layers
evaluate their predicates in order before selecting a tile, and the first
predicate that returns False leaves the cell empty.

Predicates must be pure: they may read the other layers of the terrain and the
noise field, but must not mutate anything. Every predicate receives:

- ``layers``: the terrain's layer stack (read-only),
- ``noise``: the shared NoiseField,
- ``position``: the world-space center of the candidate cell.

Built-in predicates can be combined with ``&``, ``|`` and ``~``, and are
registered by name so layer setups can refer to them symbolically:

    rule = LayerHasTile(0, {"Grass"}) & ~LayerHasTile(1, {"Tree"})
    rule = create_predicate("layer_empty", layer_index=0)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, TypeAlias, TypeVar

from strata.util.coordinates import Vec2

if TYPE_CHECKING:
    from strata.layer import Layer
    from strata.noise import NoiseField
    from strata.settings import TerrainSettings

PredicateFunction: TypeAlias = "Callable[[Sequence[Layer], NoiseField, Vec2], bool]"


class PlacementPredicate(ABC):
    """Abstract base class for placement rules."""

    @abstractmethod
    def evaluate(
        self, layers: Sequence[Layer], noise: NoiseField, position: Vec2
    ) -> bool:
        """Return True if a tile may be placed at ``position``.

        Args:
            layers: The terrain's layers, in stack order. Read-only.
            noise: The noise field shared by the terrain.
            position: World-space center of the candidate cell.
        """
        raise NotImplementedError

    def __call__(
        self, layers: Sequence[Layer], noise: NoiseField, position: Vec2
    ) -> bool:
        return self.evaluate(layers, noise, position)

    def __and__(self, other: PlacementPredicate) -> AllOf:
        return AllOf(self, other)

    def __or__(self, other: PlacementPredicate) -> AnyOf:
        return AnyOf(self, other)

    def __invert__(self) -> Not:
        return Not(self)


# =============================================================================
# Registry
# =============================================================================

_predicate_registry: dict[str, type[PlacementPredicate]] = {}


P = TypeVar("P", bound=type[PlacementPredicate])


def register_predicate(name: str) -> Callable[[P], P]:
    """Class decorator registering a predicate type under ``name``.

    Raises:
        ValueError: If the name is already registered.
    """

    def decorator(cls: P) -> P:
        if name in _predicate_registry:
            raise ValueError(f"Predicate name '{name}' is already registered")
        _predicate_registry[name] = cls
        return cls

    return decorator


def create_predicate(name: str, **kwargs) -> PlacementPredicate:
    """Construct a registered predicate by name.

    Raises:
        ValueError: If the name is not registered.
    """
    try:
        predicate_type = _predicate_registry[name]
    except KeyError:
        raise ValueError(f"Unknown predicate name: {name!r}") from None
    return predicate_type(**kwargs)


def registered_predicates() -> list[str]:
    """Names of all registered predicate types, sorted."""
    return sorted(_predicate_registry)


# =============================================================================
# Built-in predicates
# =============================================================================


@register_predicate("function")
class FunctionPredicate(PlacementPredicate):
    """Adapts a plain ``(layers, noise, position) -> bool`` callable."""

    def __init__(self, func: PredicateFunction, name: str | None = None) -> None:
        self.func = func
        self.name = name or getattr(func, "__name__", "function")

    def evaluate(
        self, layers: Sequence[Layer], noise: NoiseField, position: Vec2
    ) -> bool:
        return bool(self.func(layers, noise, position))

    def __repr__(self) -> str:
        return f"FunctionPredicate({self.name})"


def _layer_at(layers: Sequence[Layer], index: int) -> Layer:
    if not 0 <= index < len(layers):
        raise IndexError(
            f"Predicate refers to layer {index}, but only {len(layers)} exist"
        )
    return layers[index]


@register_predicate("layer_empty")
class LayerEmpty(PlacementPredicate):
    """Allows placement only where another layer has no tile."""

    def __init__(self, layer_index: int) -> None:
        self.layer_index = layer_index

    def evaluate(
        self, layers: Sequence[Layer], noise: NoiseField, position: Vec2
    ) -> bool:
        return _layer_at(layers, self.layer_index).tile_name_at(position) is None

    def __repr__(self) -> str:
        return f"LayerEmpty({self.layer_index})"


@register_predicate("layer_has_tile")
class LayerHasTile(PlacementPredicate):
    """Allows placement only on top of specific tiles of another layer."""

    def __init__(self, layer_index: int, names: Iterable[str]) -> None:
        self.layer_index = layer_index
        self.names = frozenset([names] if isinstance(names, str) else names)

    def evaluate(
        self, layers: Sequence[Layer], noise: NoiseField, position: Vec2
    ) -> bool:
        name = _layer_at(layers, self.layer_index).tile_name_at(position)
        return name in self.names

    def __repr__(self) -> str:
        return f"LayerHasTile({self.layer_index}, {sorted(self.names)})"


@register_predicate("noise_above")
class NoiseAbove(PlacementPredicate):
    """Allows placement where single-octave noise exceeds a threshold.

    The comparison uses the raw [-1, 1] value, so a threshold of 0 passes
    roughly half of all cells.
    """

    def __init__(self, settings: TerrainSettings, threshold: float) -> None:
        self.settings = settings
        self.threshold = threshold

    def evaluate(
        self, layers: Sequence[Layer], noise: NoiseField, position: Vec2
    ) -> bool:
        return noise.get_normalized_value(position, self.settings) > self.threshold


@register_predicate("noise_below")
class NoiseBelow(PlacementPredicate):
    """Allows placement where single-octave noise is under a threshold."""

    def __init__(self, settings: TerrainSettings, threshold: float) -> None:
        self.settings = settings
        self.threshold = threshold

    def evaluate(
        self, layers: Sequence[Layer], noise: NoiseField, position: Vec2
    ) -> bool:
        return noise.get_normalized_value(position, self.settings) < self.threshold


# =============================================================================
# Composites
# =============================================================================


class _Composite(PlacementPredicate):
    """Base for predicates combining an ordered group of children.

    Children may be passed positionally, or as ``predicates=`` so that
    create_predicate() can build a composite by name. Both forms combine,
    positional children first.
    """

    def __init__(
        self,
        *children: PlacementPredicate | PredicateFunction,
        predicates: Iterable[PlacementPredicate | PredicateFunction] = (),
    ) -> None:
        self.predicates: tuple[PlacementPredicate, ...] = tuple(
            as_predicate(rule) for rule in (*children, *predicates)
        )


@register_predicate("all_of")
class AllOf(_Composite):
    """True when every child predicate is true. Short-circuits in order."""

    def evaluate(
        self, layers: Sequence[Layer], noise: NoiseField, position: Vec2
    ) -> bool:
        return all(p.evaluate(layers, noise, position) for p in self.predicates)


@register_predicate("any_of")
class AnyOf(_Composite):
    """True when at least one child predicate is true."""

    def evaluate(
        self, layers: Sequence[Layer], noise: NoiseField, position: Vec2
    ) -> bool:
        return any(p.evaluate(layers, noise, position) for p in self.predicates)


@register_predicate("not")
class Not(PlacementPredicate):
    """Negates a predicate."""

    def __init__(self, predicate: PlacementPredicate) -> None:
        self.predicate = predicate

    def evaluate(
        self, layers: Sequence[Layer], noise: NoiseField, position: Vec2
    ) -> bool:
        return not self.predicate.evaluate(layers, noise, position)


def as_predicate(rule: PlacementPredicate | PredicateFunction) -> PlacementPredicate:
    """Wrap a bare callable in a FunctionPredicate; pass predicates through."""
    if isinstance(rule, PlacementPredicate):
        return rule
    return FunctionPredicate(rule)
