"""SaveService 통합 테스트 (인메모리 SQLite + DiscoveryEngine)"""

import random

import pytest

from src.core.engine import DiscoveryEngine
from src.core.event_bus import EventBus
from src.db.models import SaveSlotModel
from src.services.save_service import SaveService


@pytest.fixture()
def service(db_session, engine) -> SaveService:
    return SaveService(db_session, engine)


def _scan(engine: DiscoveryEngine, uid: str, times: int = 1) -> None:
    for _ in range(times):
        engine.record_scan(uid)


class TestSave:
    def test_save_creates_slot(self, service, engine, db_session):
        _scan(engine, "rock_01", 2)
        row = service.save("slot1")

        assert row.slot_id == "slot1"
        assert row.total_scans == 2
        assert row.current_biome == "starter"
        assert row.format_version == 1

        stored = db_session.get(SaveSlotModel, "slot1")
        assert stored.document["ledger"]["records"]["rock_01"]["times_scanned"] == 2

    def test_save_overwrites_existing_slot(self, service, engine, db_session):
        service.save("slot1")
        _scan(engine, "moss_01", 3)
        service.save("slot1")

        assert db_session.query(SaveSlotModel).count() == 1
        stored = db_session.get(SaveSlotModel, "slot1")
        assert stored.total_scans == 3
        assert stored.document["ledger"]["total_scans"] == 3

    def test_list_slots(self, service):
        service.save("a")
        service.save("b")
        assert {row.slot_id for row in service.list_slots()} == {"a", "b"}

    def test_delete(self, service):
        service.save("a")
        assert service.delete("a") is True
        assert service.delete("a") is False
        assert service.list_slots() == []


class TestLoad:
    def test_load_restores_engine(self, service, engine, db_session, catalog, gates):
        _scan(engine, "rock_01", 3)
        engine.loot.restore_pity(0.2)
        service.save("slot1")

        other = DiscoveryEngine(catalog, gates, event_bus=EventBus(), rng=random.Random(0))
        assert SaveService(db_session, other).load("slot1") is True
        assert other.ledger.get_record("rock_01").tier == 3
        assert other.ledger.get_total_scans() == 3
        assert other.loot.pity == pytest.approx(0.2)

    def test_load_missing_slot(self, service, engine):
        _scan(engine, "rock_01")
        assert service.load("nope") is False
        assert engine.ledger.get_total_scans() == 1

    def test_load_corrupt_document_uses_defaults(self, service, engine, db_session):
        db_session.add(SaveSlotModel(slot_id="bad", document={"ledger": [1, 2]}))
        db_session.commit()
        _scan(engine, "rock_01")

        assert service.load("bad") is True
        assert engine.ledger.get_total_scans() == 0
        assert engine.progression.active_biome == "starter"
