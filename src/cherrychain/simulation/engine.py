"""SimulationEngine -- one discrete time step over every reefer container.

Each ``tick(dt)``:

  1. clamps dt (non-positive or non-finite -> MIN_DELTA_TIME)
  2. advances the simulation clock
  3. computes trip progress once
  4. runs, per container, in this fixed order:
       Movement  -- position from progress
       Thermal   -- ambient depends on the freshly moved latitude
       Decay     -- uses the temperature updated in step Thermal

The ordering is part of the numeric contract; reordering the systems
changes results.

The engine is synchronous and not thread-safe.  Concurrent access goes
through an EngineHandle (see world.py), which serializes callers with a
lock held only for the duration of a single tick or snapshot.
"""

from __future__ import annotations

import math

from loguru import logger

from .decay import DecaySystem
from .entity import Position, WorldSnapshot
from .movement import DEFAULT_ROUTE, MovementSystem, Route
from .store import EntityStore
from .thermal import ThermalSystem

# Smallest step the engine will take, simulated seconds
MIN_DELTA_TIME = 0.001


def clamp_delta_time(delta_time: float) -> float:
    """Coerce *delta_time* into a usable positive step."""
    if not math.isfinite(delta_time) or delta_time <= 0.0:
        return MIN_DELTA_TIME
    return delta_time


class SimulationEngine:
    """Owns the entity store and the simulation clock."""

    def __init__(self, route: Route = DEFAULT_ROUTE) -> None:
        self._store = EntityStore()
        self._sim_time = 0.0
        self._tick_count = 0
        self.movement = MovementSystem(route)
        self.thermal = ThermalSystem()
        self.decay = DecaySystem()

    @property
    def route(self) -> Route:
        return self.movement.route

    @property
    def sim_time(self) -> float:
        """Elapsed simulated seconds."""
        return self._sim_time

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def entity_count(self) -> int:
        return len(self._store)

    def spawn(self, position: Position, target_temp: float) -> int:
        """Add a container holding *target_temp* at *position*; returns its id."""
        entity_id = self._store.spawn(position, target_temp)
        logger.debug(
            f"Spawned container {entity_id} at ({position.lat:.3f}, {position.lon:.3f}) "
            f"target={target_temp:.1f}C"
        )
        return entity_id

    def tick(self, delta_time: float) -> None:
        """Advance the world by *delta_time* simulated seconds."""
        dt = clamp_delta_time(delta_time)
        if dt != delta_time:
            logger.debug(f"Invalid tick delta {delta_time!r}, clamped to {dt}")

        self._sim_time += dt
        self._tick_count += 1

        progress = self.movement.progress(self._sim_time)
        for container in self._store.entities():
            self.movement.update(container, progress)
            self.thermal.update(container, dt)
            self.decay.update(container, dt)

    def snapshot(self) -> WorldSnapshot:
        """Immutable copy of every container and the clock.  No side effects."""
        return self._store.snapshot(self._sim_time)
