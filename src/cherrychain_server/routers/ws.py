"""WebSocket endpoint streaming simulation state to observers."""

from __future__ import annotations

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger
from pydantic import ValidationError

from cherrychain.simulation import ObserverSession, SessionEnd, WorldProvider
from cherrychain.simulation.session import ObserverCommand, OutboundMessage
from cherrychain_server.config import settings
from cherrychain_server.messages import encode_server_message, parse_client_message

router = APIRouter(tags=["websocket"])


class WebSocketTransport:
    """Adapts a FastAPI WebSocket to the simulation's ObserverTransport."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket

    async def receive(self) -> ObserverCommand | None:
        """Next valid command; malformed or binary messages are logged and skipped."""
        while True:
            try:
                message = await self.websocket.receive()
            except WebSocketDisconnect:
                return None
            if message["type"] == "websocket.disconnect":
                return None
            text = message.get("text")
            if text is None:
                logger.warning("Ignoring non-text WebSocket frame")
                continue
            try:
                return parse_client_message(text)
            except ValidationError as e:
                logger.error(f"Failed to parse client message: {e}")

    async def send(self, message: OutboundMessage) -> None:
        await self.websocket.send_text(encode_server_message(message))


def _session_for(handle, websocket: WebSocket) -> ObserverSession:
    threshold = settings.quality_alert_threshold
    return ObserverSession(
        handle,
        WebSocketTransport(websocket),
        tick_rate_hz=settings.tick_rate_hz,
        broadcast_rate_hz=settings.broadcast_rate_hz,
        tick_delta=settings.tick_delta,
        outbox_size=settings.outbox_size,
        quality_alert_threshold=threshold if threshold > 0 else None,
    )


@router.websocket("/ws")
async def websocket_world(websocket: WebSocket):
    """Stream world snapshots at the broadcast rate while ticking the engine."""
    worlds: WorldProvider | None = getattr(websocket.app.state, "worlds", None)
    if worlds is None:
        logger.warning("WebSocket rejected: simulation world not available")
        await websocket.close(code=1013)
        return

    await websocket.accept()
    logger.info("New WebSocket connection established")

    handle = worlds.acquire()
    try:
        end = await _session_for(handle, websocket).run()
    finally:
        worlds.release(handle)

    if end is not SessionEnd.CLOSED:
        try:
            await websocket.close(code=1011)
        except Exception as e:
            logger.debug(f"WebSocket already closed: {e}")
    logger.info(f"WebSocket connection closed ({end.value})")
