"""World API: shared world state, container spawning and route info."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from loguru import logger
from pydantic import BaseModel, Field

from cherrychain.simulation import EngineHandle, Position
from cherrychain_server.messages import WorldStateModel

router = APIRouter(prefix="/api/world", tags=["world"])


class SpawnContainer(BaseModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)
    target_temp: float = 0.0  # Celsius


def _get_world(request: Request) -> EngineHandle:
    """Retrieve the shared world handle from app state.

    Isolated mode has no process-wide world, so REST callers get a 503.
    """
    worlds = getattr(request.app.state, "worlds", None)
    if worlds is None:
        raise HTTPException(503, "Simulation world not available")
    handle = worlds.shared
    if handle is None:
        raise HTTPException(503, f"No shared world in {worlds.mode.value} mode")
    return handle


@router.get("/state", response_model=WorldStateModel)
async def get_world_state(request: Request):
    """Current snapshot of the shared world."""
    handle = _get_world(request)
    return WorldStateModel.from_snapshot(await handle.snapshot())


@router.post("/containers")
async def spawn_container(body: SpawnContainer, request: Request):
    """Spawn a container into the shared world."""
    handle = _get_world(request)
    entity_id = await handle.spawn(Position(lat=body.lat, lon=body.lon), body.target_temp)
    logger.info(f"Container {entity_id} spawned via API at ({body.lat}, {body.lon})")
    return {"id": entity_id, "status": "spawned"}


@router.get("/route")
async def get_route(request: Request):
    """Route every container follows, with its great-circle length."""
    route = getattr(request.app.state, "route", None)
    if route is None:
        raise HTTPException(503, "Route not configured")
    return route.to_dict()
