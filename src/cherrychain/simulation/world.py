"""World handles -- exclusive, reference-counted access to a SimulationEngine.

Two world modes are supported and chosen explicitly at startup:

  shared    one engine for the whole process.  Every observer sees the same
            world; ticks from different observers are serialized by the
            handle's lock so the clock never double-advances inside a step.
  isolated  a fresh engine per observer.  Worlds are independent and are
            dropped when their observer disconnects.

All engine access from async code goes through EngineHandle.  The lock is
held only around the synchronous engine call, never across an await.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Callable

from loguru import logger

from .engine import SimulationEngine
from .entity import Position, WorldSnapshot


class WorldMode(str, Enum):
    SHARED = "shared"
    ISOLATED = "isolated"


class EngineHandle:
    """An engine plus the lock and observer count that guard it."""

    def __init__(self, engine: SimulationEngine) -> None:
        self.engine = engine
        self._lock = asyncio.Lock()
        self._observers = 0

    @property
    def observers(self) -> int:
        return self._observers

    async def tick(self, delta_time: float) -> None:
        async with self._lock:
            self.engine.tick(delta_time)

    async def snapshot(self) -> WorldSnapshot:
        async with self._lock:
            return self.engine.snapshot()

    async def spawn(self, position: Position, target_temp: float) -> int:
        async with self._lock:
            return self.engine.spawn(position, target_temp)

    def _retain(self) -> None:
        self._observers += 1

    def _release(self) -> int:
        self._observers = max(0, self._observers - 1)
        return self._observers


class WorldProvider:
    """Hands out engine handles according to the configured WorldMode."""

    def __init__(
        self,
        mode: WorldMode | str = WorldMode.SHARED,
        engine_factory: Callable[[], SimulationEngine] = SimulationEngine,
    ) -> None:
        self.mode = WorldMode(mode)
        self._engine_factory = engine_factory
        self._shared: EngineHandle | None = None
        self._handles: set[EngineHandle] = set()

    @property
    def shared(self) -> EngineHandle | None:
        """The process-wide world, or None in isolated mode."""
        if self.mode is not WorldMode.SHARED:
            return None
        if self._shared is None:
            self._shared = EngineHandle(self._engine_factory())
            logger.info("Shared world created")
        return self._shared

    @property
    def active_handles(self) -> int:
        """Number of worlds that currently have at least one observer."""
        return len(self._handles)

    def acquire(self) -> EngineHandle:
        """Reserve a world for one observer."""
        if self.mode is WorldMode.SHARED:
            handle = self.shared
        else:
            handle = EngineHandle(self._engine_factory())
        handle._retain()
        self._handles.add(handle)
        logger.debug(f"World acquired ({self.mode.value}, observers={handle.observers})")
        return handle

    def release(self, handle: EngineHandle) -> None:
        """Give back a handle obtained from acquire()."""
        remaining = handle._release()
        if remaining == 0:
            self._handles.discard(handle)
        logger.debug(f"World released ({self.mode.value}, observers={remaining})")
