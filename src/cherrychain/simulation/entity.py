"""Container domain types -- positions, reefer containers, world snapshots.

Entities are plain mutable dataclasses owned by the EntityStore.  Only the
three update systems (movement, thermal, decay) write to them, and only
while the engine is ticking.  Everything handed to observers is a copy
wrapped in a frozen WorldSnapshot.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Position:
    """Geographic position in degrees (lat in [-90, 90], lon in [-180, 180])."""

    lat: float
    lon: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lon": self.lon}


@dataclass
class ContainerEntity:
    """One refrigerated cargo container in transit."""

    id: int
    position: Position
    current_temp: float  # Celsius
    target_temp: float   # reefer setpoint, fixed at spawn
    quality: float = 100.0  # percent, never increases

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "position": self.position.to_dict(),
            "current_temp": self.current_temp,
            "target_temp": self.target_temp,
            "quality": self.quality,
        }


@dataclass(frozen=True)
class WorldSnapshot:
    """Point-in-time copy of every container plus the simulation clock."""

    entities: tuple[ContainerEntity, ...]
    sim_time: float

    @classmethod
    def capture(cls, entities, sim_time: float) -> WorldSnapshot:
        # Position is frozen, so a shallow copy fully detaches each entity.
        return cls(
            entities=tuple(copy.copy(e) for e in entities),
            sim_time=sim_time,
        )

    def __len__(self) -> int:
        return len(self.entities)

    def get(self, entity_id: int) -> ContainerEntity | None:
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "containers": [e.to_dict() for e in self.entities],
            "sim_time": self.sim_time,
        }
