"""Simulation subsystem -- reefer container world, update systems, observer loop."""
from .decay import DecaySystem, acceleration_factor, rate_constant
from .engine import MIN_DELTA_TIME, SimulationEngine
from .entity import ContainerEntity, Position, WorldSnapshot
from .movement import (
    DEFAULT_ROUTE,
    JOURNEY_DURATION,
    MovementSystem,
    Route,
    interpolate_great_circle,
    journey_progress,
)
from .session import (
    ObserverSession,
    ObserverTransport,
    PeriodicTimer,
    QualityAlert,
    RequestSnapshot,
    SessionEnd,
    SetPaused,
)
from .store import EntityStore
from .thermal import ThermalSystem, ambient_temperature
from .world import EngineHandle, WorldMode, WorldProvider

__all__ = [
    "ContainerEntity",
    "DEFAULT_ROUTE",
    "DecaySystem",
    "EngineHandle",
    "EntityStore",
    "JOURNEY_DURATION",
    "MIN_DELTA_TIME",
    "MovementSystem",
    "ObserverSession",
    "ObserverTransport",
    "PeriodicTimer",
    "Position",
    "QualityAlert",
    "RequestSnapshot",
    "Route",
    "SessionEnd",
    "SetPaused",
    "SimulationEngine",
    "ThermalSystem",
    "WorldMode",
    "WorldProvider",
    "WorldSnapshot",
    "acceleration_factor",
    "ambient_temperature",
    "interpolate_great_circle",
    "journey_progress",
    "rate_constant",
]
