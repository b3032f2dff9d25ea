"""EntityStore -- ground-truth mapping from container id to entity."""

from __future__ import annotations

import copy
import itertools
from collections.abc import Iterator

from .entity import ContainerEntity, Position, WorldSnapshot


class EntityStore:
    """Holds every container entity keyed by its sequential id.

    Ids start at 1 and are never reused.  There is no removal operation;
    the store grows for the lifetime of the engine that owns it.
    """

    def __init__(self) -> None:
        self._entities: dict[int, ContainerEntity] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def spawn(self, position: Position, target_temp: float) -> int:
        """Create a container at *position* already holding *target_temp*."""
        entity_id = next(self._ids)
        self._entities[entity_id] = ContainerEntity(
            id=entity_id,
            position=position,
            current_temp=target_temp,
            target_temp=target_temp,
            quality=100.0,
        )
        return entity_id

    def get(self, entity_id: int) -> ContainerEntity | None:
        """Return a detached copy of one entity, or None if unknown."""
        entity = self._entities.get(entity_id)
        if entity is None:
            return None
        return copy.copy(entity)

    def entities(self) -> Iterator[ContainerEntity]:
        """Iterate the live entities in id order.  For the update systems only."""
        for entity_id in sorted(self._entities):
            yield self._entities[entity_id]

    def snapshot(self, sim_time: float) -> WorldSnapshot:
        """Copy all entities (ordered by id) together with *sim_time*."""
        return WorldSnapshot.capture(self.entities(), sim_time)
