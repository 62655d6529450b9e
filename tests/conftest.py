"""Shared test fixtures."""

import random
import threading

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.api.exploration import router as exploration_router
from src.api.health import router as health_router
from src.core.catalog import ItemCatalog, ItemDefinition, Rarity
from src.core.engine import DiscoveryEngine
from src.core.event_bus import EventBus, GameEvent
from src.core.loot import LootConfig
from src.core.progression import GateRegistry, ProgressionGate
from src.core.scan import ScanConfig
from src.db.database import get_db
from src.db.models import Base
from src.services.save_service import SaveService


class FakeClock:
    """수동으로 진행하는 시계 (타임스탬프 검증용)"""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class EventRecorder:
    """EventBus의 지정 이벤트를 모두 기록"""

    def __init__(self, bus: EventBus, *event_types: str) -> None:
        self.events: list[GameEvent] = []
        for event_type in event_types:
            bus.subscribe(event_type, self.events.append)

    def of(self, event_type: str) -> list[GameEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def types(self) -> list[str]:
        return [e.event_type for e in self.events]


def _item(
    uid: str,
    rarity: Rarity,
    biomes: tuple[str, ...] = ("starter",),
    scan_time: float = 1.0,
) -> ItemDefinition:
    return ItemDefinition(
        uid=uid,
        display_name=uid.replace("_", " ").title(),
        rarity=rarity,
        scan_time=scan_time,
        biome_affinity=frozenset(biomes),
    )


TEST_ITEMS = [
    _item("rock_01", Rarity.COMMON, ("starter", "crystal_caves")),
    _item("moss_01", Rarity.COMMON),
    _item("fern_02", Rarity.UNCOMMON, scan_time=2.0),
    _item("totem_01", Rarity.RARE, scan_time=4.0),
    _item("monolith_01", Rarity.LEGENDARY, scan_time=8.0),
    _item("quartz_01", Rarity.COMMON, ("crystal_caves",)),
    _item("geode_01", Rarity.RARE, ("crystal_caves",)),
]

TEST_GATES = [
    ProgressionGate(
        biome="starter",
        total_scans_required=10,
        unique_items_required=3,
        tier3_required=1,
        unlocks_biome="crystal_caves",
    ),
    ProgressionGate(
        biome="crystal_caves",
        total_scans_required=5,
        unique_items_required=2,
        tier3_required=0,
        unlocks_biome=None,
    ),
]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def catalog() -> ItemCatalog:
    """starter / crystal_caves 두 바이옴짜리 테스트 카탈로그"""
    return ItemCatalog(TEST_ITEMS)


@pytest.fixture()
def gates() -> GateRegistry:
    return GateRegistry(TEST_GATES)


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def record(bus):
    """record(*event_types) → EventRecorder"""

    def _record(*event_types: str) -> EventRecorder:
        return EventRecorder(bus, *event_types)

    return _record


@pytest.fixture()
def engine(catalog, gates, bus, clock) -> DiscoveryEngine:
    """고정 예산 + 시드 RNG + 가짜 시계 엔진"""
    return DiscoveryEngine(
        catalog=catalog,
        gates=gates,
        starting_biome="starter",
        scan_config=ScanConfig(grace_period=2.0, decay_rate=0.25),
        loot_config=LootConfig(fixed_budget=10),
        event_bus=bus,
        rng=random.Random(1234),
        clock=clock,
    )


@pytest.fixture()
def db_engine():
    """Create an in-memory SQLite engine with tables."""
    eng = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    return eng


@pytest.fixture()
def db_session(db_engine) -> Session:
    """Raw database session for direct DB assertions."""
    session_factory = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(engine, db_engine, db_session) -> TestClient:
    """FastAPI TestClient wired to the test engine and an in-memory SQLite database."""
    session_factory = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)

    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app = FastAPI()
    app.include_router(health_router)
    app.include_router(exploration_router)
    app.dependency_overrides[get_db] = _override_get_db
    app.state.engine = engine
    app.state.engine_lock = threading.Lock()
    app.state.save_service = SaveService(db_session, engine)
    return TestClient(app)
