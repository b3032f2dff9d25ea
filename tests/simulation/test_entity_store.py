"""Unit tests for EntityStore and the container domain types."""

from __future__ import annotations

import pytest

from cherrychain.simulation.entity import ContainerEntity, Position, WorldSnapshot
from cherrychain.simulation.store import EntityStore

pytestmark = pytest.mark.unit

CHILE = Position(lat=-33.0, lon=-71.0)


class TestSpawn:
    def test_first_id_is_one(self):
        store = EntityStore()
        assert store.spawn(CHILE, 0.0) == 1

    def test_ids_sequential_and_distinct(self):
        store = EntityStore()
        ids = [store.spawn(CHILE, 0.0) for _ in range(10)]
        assert ids == list(range(1, 11))
        assert len(store) == 10

    def test_new_container_holds_target_temp(self):
        store = EntityStore()
        entity_id = store.spawn(CHILE, 2.5)
        entity = store.get(entity_id)
        assert entity.current_temp == 2.5
        assert entity.target_temp == 2.5
        assert entity.quality == 100.0
        assert entity.position == CHILE

    def test_contains(self):
        store = EntityStore()
        entity_id = store.spawn(CHILE, 0.0)
        assert entity_id in store
        assert 99 not in store

    def test_get_unknown_returns_none(self):
        assert EntityStore().get(1) is None

    def test_get_returns_copy(self):
        store = EntityStore()
        entity_id = store.spawn(CHILE, 0.0)
        copy = store.get(entity_id)
        copy.quality = 1.0
        assert store.get(entity_id).quality == 100.0


class TestSnapshot:
    def test_empty_store(self):
        snap = EntityStore().snapshot(0.0)
        assert len(snap) == 0
        assert snap.sim_time == 0.0

    def test_ordered_by_id(self):
        store = EntityStore()
        for _ in range(5):
            store.spawn(CHILE, 0.0)
        snap = store.snapshot(1.0)
        assert [e.id for e in snap.entities] == [1, 2, 3, 4, 5]

    def test_same_state_same_order(self):
        store = EntityStore()
        for temp in (4.0, 1.0, 3.0):
            store.spawn(CHILE, temp)
        assert store.snapshot(0.0) == store.snapshot(0.0)

    def test_snapshot_detached_from_store(self):
        store = EntityStore()
        store.spawn(CHILE, 0.0)
        snap = store.snapshot(0.0)
        for entity in store.entities():
            entity.quality = 50.0
        assert snap.entities[0].quality == 100.0

    def test_snapshot_is_frozen(self):
        snap = EntityStore().snapshot(0.0)
        with pytest.raises(AttributeError):
            snap.sim_time = 5.0


class TestSerialization:
    def test_entity_to_dict(self):
        entity = ContainerEntity(id=3, position=CHILE, current_temp=1.5, target_temp=0.0, quality=99.0)
        assert entity.to_dict() == {
            "id": 3,
            "position": {"lat": -33.0, "lon": -71.0},
            "current_temp": 1.5,
            "target_temp": 0.0,
            "quality": 99.0,
        }

    def test_snapshot_to_dict(self):
        store = EntityStore()
        store.spawn(CHILE, 0.0)
        data = store.snapshot(12.5).to_dict()
        assert data["sim_time"] == 12.5
        assert len(data["containers"]) == 1
        assert data["containers"][0]["id"] == 1

    def test_snapshot_get(self):
        store = EntityStore()
        store.spawn(CHILE, 0.0)
        store.spawn(CHILE, 4.0)
        snap = store.snapshot(0.0)
        assert snap.get(2).target_temp == 4.0
        assert snap.get(7) is None

    def test_capture_copies(self):
        entity = ContainerEntity(id=1, position=CHILE, current_temp=0.0, target_temp=0.0)
        snap = WorldSnapshot.capture([entity], 0.0)
        entity.quality = 10.0
        assert snap.entities[0].quality == 100.0
