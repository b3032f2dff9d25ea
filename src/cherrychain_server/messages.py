"""WebSocket message envelopes.

Server -> client messages are tagged by ``type``:

    {"type": "FullState", "state": {"containers": [...], "sim_time": 12.3}}
    {"type": "DeltaUpdate", "changes": [...]}
    {"type": "Alert", "message": "..."}

Client -> server:

    {"type": "RequestState"}
    {"type": "SetPaused", "paused": true}

Parsing turns client envelopes into the simulation's ObserverCommand
objects; malformed input never reaches the core.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from cherrychain.simulation import (
    ContainerEntity,
    QualityAlert,
    RequestSnapshot,
    SetPaused,
    WorldSnapshot,
)
from cherrychain.simulation.session import ObserverCommand, OutboundMessage


# ---------------------------------------------------------------------------
# State models
# ---------------------------------------------------------------------------

class PositionModel(BaseModel):
    lat: float
    lon: float


class ContainerModel(BaseModel):
    id: int
    position: PositionModel
    current_temp: float
    target_temp: float
    quality: float

    @classmethod
    def from_entity(cls, entity: ContainerEntity) -> ContainerModel:
        return cls.model_validate(entity.to_dict())


class WorldStateModel(BaseModel):
    containers: list[ContainerModel]
    sim_time: float

    @classmethod
    def from_snapshot(cls, snapshot: WorldSnapshot) -> WorldStateModel:
        return cls(
            containers=[ContainerModel.from_entity(e) for e in snapshot.entities],
            sim_time=snapshot.sim_time,
        )


# ---------------------------------------------------------------------------
# Server -> client
# ---------------------------------------------------------------------------

class FullState(BaseModel):
    type: Literal["FullState"] = "FullState"
    state: WorldStateModel


class DeltaUpdate(BaseModel):
    """Changed containers only.  Understood by clients; not emitted yet."""
    type: Literal["DeltaUpdate"] = "DeltaUpdate"
    changes: list[ContainerModel]


class Alert(BaseModel):
    type: Literal["Alert"] = "Alert"
    message: str


ServerMessage = Annotated[Union[FullState, DeltaUpdate, Alert], Field(discriminator="type")]


def encode_server_message(message: OutboundMessage) -> str:
    """Serialize a snapshot or alert from the simulation into JSON text."""
    if isinstance(message, WorldSnapshot):
        envelope: BaseModel = FullState(state=WorldStateModel.from_snapshot(message))
    elif isinstance(message, QualityAlert):
        envelope = Alert(message=message.message)
    else:
        raise TypeError(f"Cannot encode {type(message).__name__}")
    return envelope.model_dump_json()


# ---------------------------------------------------------------------------
# Client -> server
# ---------------------------------------------------------------------------

class RequestState(BaseModel):
    type: Literal["RequestState"]


class SetPausedMessage(BaseModel):
    type: Literal["SetPaused"]
    paused: bool


ClientMessage = Annotated[Union[RequestState, SetPausedMessage], Field(discriminator="type")]

_client_adapter: TypeAdapter = TypeAdapter(ClientMessage)


def parse_client_message(text: str) -> ObserverCommand:
    """Parse one client envelope.

    Raises:
        pydantic.ValidationError: on invalid JSON, unknown ``type``, or
            missing fields.
    """
    message = _client_adapter.validate_json(text)
    if isinstance(message, SetPausedMessage):
        return SetPaused(paused=message.paused)
    return RequestSnapshot()
