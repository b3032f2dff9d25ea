"""CherryChain API Server.

FastAPI application streaming reefer container simulation state over
WebSocket.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from loguru import logger

from cherrychain import __version__
from cherrychain.simulation import Position, Route, SimulationEngine, WorldProvider
from cherrychain_server.config import settings
from cherrychain_server.routers import world_router, ws_router


# ---------------------------------------------------------------------------
# World construction
# ---------------------------------------------------------------------------

def _build_route() -> Route:
    """Route from settings (defaults: Chile -> China over 30 days)."""
    return Route(
        start=Position(lat=settings.route_start_lat, lon=settings.route_start_lon),
        end=Position(lat=settings.route_end_lat, lon=settings.route_end_lon),
        duration=settings.journey_days * 24.0 * 3600.0,
    )


def _create_world_provider(route: Route) -> WorldProvider:
    """Build the WorldProvider; every new world gets the seed container."""

    def engine_factory() -> SimulationEngine:
        engine = SimulationEngine(route)
        if settings.seed_container:
            engine.spawn(route.start, settings.seed_target_temp)
        return engine

    return WorldProvider(settings.world_mode, engine_factory)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("=" * 60)
    logger.info(f"  {settings.app_name.upper()} v{__version__} - INITIALIZING")
    logger.info("=" * 60)

    route = _build_route()
    app.state.route = route
    app.state.worlds = _create_world_provider(route)
    logger.info(
        f"Route: ({route.start.lat}, {route.start.lon}) -> ({route.end.lat}, {route.end.lon}), "
        f"{route.distance_km:.0f} km over {settings.journey_days:g} days"
    )
    logger.info(
        f"World mode: {settings.world_mode} "
        f"(tick {settings.tick_rate_hz:g} Hz x {settings.tick_delta:g}s, "
        f"broadcast {settings.broadcast_rate_hz:g} Hz)"
    )

    logger.info(f"Starting CherryChain API server on {settings.host}:{settings.port}")
    yield
    logger.info("CherryChain shutting down...")


# Create FastAPI app
app = FastAPI(
    title="CherryChain",
    description="Reefer container transit simulation",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(ws_router)
app.include_router(world_router)


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "CherryChain API Server"


@app.get("/health")
async def health():
    """Health check endpoint."""
    worlds = getattr(app.state, "worlds", None)
    return {
        "status": "operational",
        "version": __version__,
        "world_mode": settings.world_mode,
        "active_worlds": worlds.active_handles if worlds is not None else 0,
    }
