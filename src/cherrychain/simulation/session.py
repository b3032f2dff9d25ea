"""ObserverSession -- per-observer tick/broadcast loop.

One asyncio task per connected observer multiplexes four sources of work:

  tick       PeriodicTimer at tick_rate_hz (10 Hz).  Advances the engine by
             a fixed tick_delta under the handle's lock.
  broadcast  PeriodicTimer at broadcast_rate_hz (1 Hz).  Snapshots the
             engine and enqueues it for delivery.
  inbound    The next already-parsed command from the transport.
  outbound   Delivery of the next queued message to the transport.

The loop waits on whichever finishes first (asyncio.wait FIRST_COMPLETED),
handles it, and re-arms only that source.  Tick and broadcast cadences are
therefore independent, and a slow send never stalls simulation.

Termination:
  - transport closed (receive() returns None or raises)  -> SessionEnd.CLOSED
  - a send raises                                        -> SessionEnd.SEND_FAILED
  - the bounded outbox is full                           -> SessionEnd.BACKPRESSURE
On exit every outstanding task is cancelled and awaited.

SetPaused is recorded on the session but does not stop ticking.  Whether a
pause should freeze ticks, broadcasts, or both is undecided; ``paused`` is
exposed so it can be wired later.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Union

from loguru import logger

from .entity import WorldSnapshot
from .world import EngineHandle


# ---------------------------------------------------------------------------
# Commands and outbound messages
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RequestSnapshot:
    """Observer asks for the current world state right now."""


@dataclass(frozen=True)
class SetPaused:
    """Observer asks to pause or resume the simulation."""

    paused: bool


ObserverCommand = Union[RequestSnapshot, SetPaused]


@dataclass(frozen=True)
class QualityAlert:
    """A container's quality crossed the session's alert threshold."""

    entity_id: int
    quality: float
    threshold: float

    @property
    def message(self) -> str:
        return (
            f"Container {self.entity_id} quality {self.quality:.2f}% "
            f"below {self.threshold:.1f}%"
        )


OutboundMessage = Union[WorldSnapshot, QualityAlert]


class ObserverTransport(Protocol):
    """Duplex channel to one observer, supplied by the connection layer."""

    async def receive(self) -> ObserverCommand | None:
        """Next command, or None once the observer has gone away."""
        ...

    async def send(self, message: OutboundMessage) -> None:
        """Deliver one message.  Raises if the channel is broken."""
        ...


class SessionEnd(str, Enum):
    CLOSED = "closed"
    SEND_FAILED = "send_failed"
    BACKPRESSURE = "backpressure"


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

class PeriodicTimer:
    """Fixed-rate schedule on the running event loop's clock.

    The first wait() completes one period after the first call.  When the
    caller falls more than a period behind, the schedule restarts from now
    rather than firing a burst of catch-up ticks.
    """

    def __init__(self, period: float) -> None:
        if period <= 0.0:
            raise ValueError(f"period must be positive, got {period}")
        self.period = period
        self._deadline: float | None = None

    async def wait(self) -> None:
        loop = asyncio.get_running_loop()
        if self._deadline is None:
            self._deadline = loop.time() + self.period
        delay = self._deadline - loop.time()
        if delay > 0:
            await asyncio.sleep(delay)
        now = loop.time()
        if now - self._deadline > self.period:
            self._deadline = now + self.period
        else:
            self._deadline += self.period


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

# Same-iteration completions are handled in this order so a broadcast
# always reflects a tick that finished alongside it.
_PRIORITY = {"tick": 0, "broadcast": 1, "inbound": 2, "outbound": 3}


class ObserverSession:
    """Drives one engine handle and streams its state to one observer."""

    def __init__(
        self,
        handle: EngineHandle,
        transport: ObserverTransport,
        *,
        tick_rate_hz: float = 10.0,
        broadcast_rate_hz: float = 1.0,
        tick_delta: float = 0.1,
        outbox_size: int = 100,
        quality_alert_threshold: float | None = None,
    ) -> None:
        if tick_rate_hz <= 0.0 or broadcast_rate_hz <= 0.0:
            raise ValueError(
                f"rates must be positive, got tick={tick_rate_hz} broadcast={broadcast_rate_hz}"
            )
        # maxsize=0 would make the queue unbounded
        if outbox_size < 1:
            raise ValueError(f"outbox_size must be at least 1, got {outbox_size}")
        self._handle = handle
        self._transport = transport
        self._tick_timer = PeriodicTimer(1.0 / tick_rate_hz)
        self._broadcast_timer = PeriodicTimer(1.0 / broadcast_rate_hz)
        self._tick_delta = tick_delta
        self._outbox: asyncio.Queue[OutboundMessage] = asyncio.Queue(maxsize=outbox_size)
        self._alert_threshold = quality_alert_threshold
        self._alerted: set[int] = set()
        self._paused = False
        self.ticks = 0
        self.broadcasts = 0

    @property
    def paused(self) -> bool:
        """Last pause state requested by the observer (not yet enforced)."""
        return self._paused

    async def run(self) -> SessionEnd:
        """Run until the observer disconnects or delivery fails."""
        if not self._enqueue(await self._handle.snapshot()):
            return SessionEnd.BACKPRESSURE

        sources = {
            "tick": self._tick_timer.wait,
            "broadcast": self._broadcast_timer.wait,
            "inbound": self._transport.receive,
            "outbound": self._deliver_next,
        }
        pending: dict[asyncio.Task, str] = {
            asyncio.create_task(start(), name=f"session-{name}"): name
            for name, start in sources.items()
        }
        try:
            while True:
                done, _ = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in sorted(done, key=lambda t: _PRIORITY[pending[t]]):
                    name = pending.pop(task)
                    end = await self._on_ready(name, task)
                    if end is not None:
                        logger.info(f"Observer session ended: {end.value}")
                        return end
                    pending[asyncio.create_task(sources[name](), name=f"session-{name}")] = name
        finally:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

    async def _on_ready(self, name: str, task: asyncio.Task) -> SessionEnd | None:
        if name == "tick":
            await self._handle.tick(self._tick_delta)
            self.ticks += 1
            return None

        if name == "broadcast":
            snapshot = await self._handle.snapshot()
            self.broadcasts += 1
            if not self._enqueue(snapshot):
                return SessionEnd.BACKPRESSURE
            for alert in self._new_alerts(snapshot):
                if not self._enqueue(alert):
                    return SessionEnd.BACKPRESSURE
            return None

        if name == "inbound":
            exc = task.exception()
            if exc is not None:
                logger.debug(f"Observer receive failed: {exc!r}")
                return SessionEnd.CLOSED
            command = task.result()
            if command is None:
                return SessionEnd.CLOSED
            return await self._on_command(command)

        # outbound
        exc = task.exception()
        if exc is not None:
            logger.warning(f"Failed to deliver to observer: {exc!r}")
            return SessionEnd.SEND_FAILED
        return None

    async def _on_command(self, command: ObserverCommand) -> SessionEnd | None:
        if isinstance(command, RequestSnapshot):
            logger.debug("Observer requested state")
            if not self._enqueue(await self._handle.snapshot()):
                return SessionEnd.BACKPRESSURE
        elif isinstance(command, SetPaused):
            logger.info(f"Pause state: {command.paused}")
            self._paused = command.paused
        else:
            logger.warning(f"Ignoring unknown observer command: {command!r}")
        return None

    async def _deliver_next(self) -> None:
        message = await self._outbox.get()
        await self._transport.send(message)

    def _enqueue(self, message: OutboundMessage) -> bool:
        try:
            self._outbox.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning("Observer outbox full, dropping connection")
            return False
        return True

    def _new_alerts(self, snapshot: WorldSnapshot) -> list[QualityAlert]:
        if self._alert_threshold is None:
            return []
        alerts = []
        for entity in snapshot.entities:
            if entity.quality < self._alert_threshold and entity.id not in self._alerted:
                self._alerted.add(entity.id)
                alerts.append(QualityAlert(entity.id, entity.quality, self._alert_threshold))
        return alerts
