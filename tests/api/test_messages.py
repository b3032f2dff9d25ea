"""Unit tests for WebSocket message envelopes."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from cherrychain.simulation import QualityAlert, RequestSnapshot, SetPaused, SimulationEngine
from cherrychain.simulation.movement import CHILE
from cherrychain_server.messages import (
    DeltaUpdate,
    ContainerModel,
    WorldStateModel,
    encode_server_message,
    parse_client_message,
)

pytestmark = pytest.mark.unit


def _snapshot():
    engine = SimulationEngine()
    engine.spawn(CHILE, 0.0)
    engine.tick(10.0)
    return engine.snapshot()


class TestEncode:
    def test_full_state_envelope(self):
        snap = _snapshot()
        data = json.loads(encode_server_message(snap))
        assert data["type"] == "FullState"
        assert data["state"]["sim_time"] == pytest.approx(10.0)
        container = data["state"]["containers"][0]
        assert set(container) == {"id", "position", "current_temp", "target_temp", "quality"}
        assert set(container["position"]) == {"lat", "lon"}

    def test_alert_envelope(self):
        alert = QualityAlert(entity_id=4, quality=89.5, threshold=90.0)
        data = json.loads(encode_server_message(alert))
        assert data == {"type": "Alert", "message": alert.message}

    def test_unknown_message_rejected(self):
        with pytest.raises(TypeError):
            encode_server_message({"type": "FullState"})

    def test_world_state_matches_snapshot_dict(self):
        snap = _snapshot()
        assert WorldStateModel.from_snapshot(snap).model_dump() == snap.to_dict()

    def test_delta_update_shape(self):
        entity = _snapshot().entities[0]
        delta = DeltaUpdate(changes=[ContainerModel.from_entity(entity)])
        data = json.loads(delta.model_dump_json())
        assert data["type"] == "DeltaUpdate"
        assert data["changes"][0]["id"] == 1


class TestParse:
    def test_request_state(self):
        assert parse_client_message('{"type": "RequestState"}') == RequestSnapshot()

    @pytest.mark.parametrize("paused", [True, False])
    def test_set_paused(self, paused):
        text = json.dumps({"type": "SetPaused", "paused": paused})
        assert parse_client_message(text) == SetPaused(paused=paused)

    @pytest.mark.parametrize("text", [
        "not json",
        '{"type": "Teleport"}',
        '{"type": "SetPaused"}',
        '{"paused": true}',
        "[]",
    ])
    def test_malformed_rejected(self, text):
        with pytest.raises(ValidationError):
            parse_client_message(text)
