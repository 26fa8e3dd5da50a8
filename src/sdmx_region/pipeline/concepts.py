"""User-facing selection concepts and the combination registry bridging them to columns."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from sdmx_region.catalogue.dimensions import DimensionInfo
from sdmx_region.pipeline.combinations import CombinationSet

LOGGER = logging.getLogger(__name__)

ChangeListener = Callable[[], None]


class VariableConcept:
    """One selectable dimension value."""

    def __init__(
        self,
        name: str,
        *,
        value_index: int,
        value_id: str,
        parent: DisplayVariablesConcept | None = None,
        active: bool = True,
    ) -> None:
        self.name = name
        self.value_index = value_index
        self.value_id = value_id
        self.parent = parent
        self._is_active = bool(active)

    @property
    def is_active(self) -> bool:
        return self._is_active

    @is_active.setter
    def is_active(self, value: bool) -> None:
        value = bool(value)
        if value == self._is_active:
            return
        self._is_active = value
        if self.parent is not None:
            self.parent.notify_changed()

    def toggle_active(self) -> None:
        self.is_active = not self._is_active

    def __repr__(self) -> str:
        marker = "x" if self._is_active else " "
        return f"VariableConcept([{marker}] {self.name!r})"


class DisplayVariablesConcept:
    """Parent concept for one non-trivial dimension; its items toggle independently."""

    def __init__(
        self,
        name: str,
        *,
        dimension_index: int,
        dimension_id: str,
    ) -> None:
        self.name = name
        self.dimension_index = dimension_index
        self.dimension_id = dimension_id
        self.items: list[VariableConcept] = []
        self._listeners: list[ChangeListener] = []

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def notify_changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    def active_indices(self) -> list[int]:
        return [index for index, item in enumerate(self.items) if item.is_active]

    def active_items(self) -> list[VariableConcept]:
        return [item for item in self.items if item.is_active]

    def item_by_id(self, value_id: str) -> VariableConcept | None:
        for item in self.items:
            if item.value_id == value_id:
                return item
        return None

    def __repr__(self) -> str:
        return f"DisplayVariablesConcept({self.name!r}, items={len(self.items)})"


class ConceptTree:
    """Holds the current concepts and fans out one change signal to subscribers.

    Subscriptions survive ``replace`` so a controller subscribes exactly once.
    """

    def __init__(self) -> None:
        self._concepts: tuple[DisplayVariablesConcept, ...] = ()
        self._subscribers: list[ChangeListener] = []

    @property
    def concepts(self) -> tuple[DisplayVariablesConcept, ...]:
        return self._concepts

    def subscribe(self, listener: ChangeListener) -> None:
        self._subscribers.append(listener)

    def replace(self, concepts: Sequence[DisplayVariablesConcept]) -> None:
        self._concepts = tuple(concepts)
        for concept in self._concepts:
            concept.add_listener(self._make_relay(concept))

    def _make_relay(self, concept: DisplayVariablesConcept) -> ChangeListener:
        def relay() -> None:
            # Concepts from a previous build may still hold references to the tree.
            if concept not in self._concepts:
                return
            self._emit()

        return relay

    def _emit(self) -> None:
        for listener in list(self._subscribers):
            listener()

    def active_items(self) -> list[list[VariableConcept]]:
        return [concept.active_items() for concept in self._concepts]

    def active_indices(self) -> list[list[int]]:
        return [concept.active_indices() for concept in self._concepts]

    def concept_by_dimension_id(self, dimension_id: str) -> DisplayVariablesConcept | None:
        for concept in self._concepts:
            if concept.dimension_id == dimension_id:
                return concept
        return None


def build_concept_bridge(
    info: DimensionInfo,
    combinations: CombinationSet,
) -> tuple[tuple[tuple[int, ...], ...], tuple[DisplayVariablesConcept, ...]]:
    """Return the combination registry and one concept per non-trivial dimension.

    Registry entries drop the single-valued slots, e.g. with dimension lengths
    ``[1, 1, 3, 2]`` the combination ``(0, 0, 2, 1)`` is registered as ``(2, 1)``.
    ``info`` must already have its special dimensions narrowed.
    """
    non_trivial = [
        index for index in range(info.dimension_count) if not info.is_trivial(index)
    ]
    registry = tuple(
        tuple(combination[index] for index in non_trivial) for combination in combinations.values
    )

    concepts: list[DisplayVariablesConcept] = []
    for index in non_trivial:
        concept = DisplayVariablesConcept(
            info.dimension_names[index],
            dimension_index=index,
            dimension_id=info.dimension_ids[index],
        )
        concept.items = [
            VariableConcept(
                value_name,
                value_index=value_index,
                value_id=info.ids[index][value_index],
                parent=concept,
                active=True,
            )
            for value_index, value_name in enumerate(info.names[index])
        ]
        concepts.append(concept)
    LOGGER.debug(
        "Bridged %d combinations onto %d concepts", len(registry), len(concepts)
    )
    return registry, tuple(concepts)
