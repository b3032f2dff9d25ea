"""Tests for the CherryChain FastAPI application: lifespan, root, health and wiring."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from cherrychain.simulation import WorldMode, WorldProvider
from cherrychain_server import main
from cherrychain_server.config import Settings, settings

pytestmark = pytest.mark.unit


class TestSettings:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.world_mode == "shared"
        assert s.tick_rate_hz == 10.0
        assert s.broadcast_rate_hz == 1.0
        assert s.tick_delta == 0.1
        assert s.outbox_size == 100
        assert s.journey_days == 30.0

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("WORLD_MODE", "isolated")
        monkeypatch.setenv("TICK_RATE_HZ", "20")
        s = Settings(_env_file=None)
        assert s.world_mode == "isolated"
        assert s.tick_rate_hz == 20.0

    @pytest.mark.parametrize("name,value", [
        ("TICK_RATE_HZ", "0"),
        ("BROADCAST_RATE_HZ", "-1"),
        ("TICK_DELTA", "0"),
        ("OUTBOX_SIZE", "0"),
    ])
    def test_non_positive_cadence_rejected(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_invalid_world_mode(self, monkeypatch):
        monkeypatch.setenv("WORLD_MODE", "multiverse")
        with pytest.raises(ValueError):
            Settings(_env_file=None)


class TestWorldConstruction:
    def test_route_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "route_end_lat", 0.0)
        monkeypatch.setattr(settings, "route_end_lon", 0.0)
        monkeypatch.setattr(settings, "journey_days", 1.0)
        route = main._build_route()
        assert route.end.lat == 0.0
        assert route.duration == 86400.0

    def test_seeded_world(self):
        worlds = main._create_world_provider(main._build_route())
        snap = worlds.shared.engine.snapshot()
        assert len(snap.entities) == 1
        assert snap.entities[0].position.lat == settings.route_start_lat
        assert snap.entities[0].target_temp == settings.seed_target_temp

    def test_seed_disabled(self, monkeypatch):
        monkeypatch.setattr(settings, "seed_container", False)
        worlds = main._create_world_provider(main._build_route())
        assert worlds.shared.engine.entity_count == 0

    def test_isolated_mode(self, monkeypatch):
        monkeypatch.setattr(settings, "world_mode", "isolated")
        worlds = main._create_world_provider(main._build_route())
        assert worlds.mode is WorldMode.ISOLATED
        assert worlds.acquire().engine.entity_count == 1


class TestApp:
    def test_root_banner(self):
        with TestClient(main.app) as client:
            resp = client.get("/")
        assert resp.status_code == 200
        assert resp.text == "CherryChain API Server"

    def test_health(self):
        with TestClient(main.app) as client:
            data = client.get("/health").json()
        assert data["status"] == "operational"
        assert data["world_mode"] == settings.world_mode
        assert data["active_worlds"] == 0

    def test_lifespan_wires_world(self):
        with TestClient(main.app) as client:
            assert isinstance(main.app.state.worlds, WorldProvider)
            data = client.get("/api/world/state").json()
        assert len(data["containers"]) == 1

    def test_websocket_full_state(self):
        with TestClient(main.app) as client:
            with client.websocket_connect("/ws") as ws:
                data = ws.receive_json()
        assert data["type"] == "FullState"
        assert data["state"]["containers"][0]["id"] == 1

    def test_cors_headers(self):
        with TestClient(main.app) as client:
            resp = client.get("/health", headers={"Origin": "http://localhost:5173"})
        assert "access-control-allow-origin" in resp.headers
