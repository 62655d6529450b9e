"""Exploration API endpoints.

대상 탐지/입력/프레임 드라이버 역할을 원격으로 대신하는 라우터.

코어는 단일 스레드 전제이므로 엔진에 닿는 모든 요청은
app.state.engine_lock으로 직렬화한다 (sync 엔드포인트는 스레드풀에서 실행됨).
"""

import threading
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    ActiveBiomeRequest,
    BiomeProgressResponse,
    DiscoveryInfo,
    ErrorResponse,
    LootItemInfo,
    LootResponse,
    SaveSlotInfo,
    ScanActionResponse,
    ScanSessionInfo,
    StatsResponse,
    TargetAcquiredRequest,
    TargetLostRequest,
    TickRequest,
)
from src.core.discovery.tiers import scans_to_next_tier
from src.core.engine import DiscoveryEngine
from src.core.event_bus import GameEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger
from src.services.save_service import SaveService

logger = get_logger(__name__)

router = APIRouter(prefix="/exploration", tags=["exploration"])

# 응답에 포함할 이벤트 유형
_REPORTED_EVENTS = (
    EventTypes.TARGET_ACQUIRED,
    EventTypes.TARGET_LOST,
    EventTypes.SCAN_STARTED,
    EventTypes.SCAN_COMPLETED,
    EventTypes.SCAN_INTERRUPTED,
    EventTypes.GRACE_STARTED,
    EventTypes.GRACE_EXPIRED,
    EventTypes.ITEM_DISCOVERED,
    EventTypes.TIER_ADVANCED,
    EventTypes.BIOME_UNLOCKED,
)


def get_engine(request: Request) -> DiscoveryEngine:
    """DiscoveryEngine 인스턴스 반환 (의존성 주입)"""
    engine: DiscoveryEngine = request.app.state.engine
    return engine


def get_engine_lock(request: Request) -> threading.Lock:
    """엔진 직렬화 락 반환 (의존성 주입)"""
    lock: threading.Lock = request.app.state.engine_lock
    return lock


def get_save_service(request: Request) -> SaveService:
    """SaveService 인스턴스 반환 (의존성 주입)"""
    service: SaveService = request.app.state.save_service
    return service


@contextmanager
def _collect_events(engine: DiscoveryEngine) -> Iterator[list[dict[str, Any]]]:
    """요청 처리 중 발행된 이벤트 수집. 엔진 락을 잡은 상태에서만 사용."""
    collected: list[dict[str, Any]] = []

    def _collector(event: GameEvent) -> None:
        collected.append({"type": event.event_type, **event.data})

    for event_type in _REPORTED_EVENTS:
        engine.event_bus.subscribe(event_type, _collector)
    try:
        yield collected
    finally:
        for event_type in _REPORTED_EVENTS:
            engine.event_bus.unsubscribe(event_type, _collector)


def _session_info(engine: DiscoveryEngine) -> ScanSessionInfo:
    return ScanSessionInfo(**engine.scanner.session.to_dict())


# === 스캔 ===


@router.post("/target/acquired", response_model=ScanActionResponse)
def target_acquired(
    request: TargetAcquiredRequest,
    engine: DiscoveryEngine = Depends(get_engine),
    lock: threading.Lock = Depends(get_engine_lock),
) -> ScanActionResponse:
    """대상 획득 보고"""
    with lock, _collect_events(engine) as events:
        engine.report_target_acquired(request.uid, request.scan_time)
        return ScanActionResponse(
            success=engine.scanner.target_uid == request.uid,
            session=_session_info(engine),
            events=events,
        )


@router.post("/target/lost", response_model=ScanActionResponse)
def target_lost(
    request: TargetLostRequest,
    engine: DiscoveryEngine = Depends(get_engine),
    lock: threading.Lock = Depends(get_engine_lock),
) -> ScanActionResponse:
    """대상 상실 보고"""
    with lock, _collect_events(engine) as events:
        engine.report_target_lost(request.uid)
        return ScanActionResponse(
            success=True, session=_session_info(engine), events=events
        )


@router.post("/scan/start", response_model=ScanActionResponse)
def scan_start(
    engine: DiscoveryEngine = Depends(get_engine),
    lock: threading.Lock = Depends(get_engine_lock),
) -> ScanActionResponse:
    """플레이어 스캔 시작 입력"""
    with lock, _collect_events(engine) as events:
        started = engine.request_scan_start()
        return ScanActionResponse(
            success=started, session=_session_info(engine), events=events
        )


@router.post("/tick", response_model=ScanActionResponse)
def tick(
    request: TickRequest,
    engine: DiscoveryEngine = Depends(get_engine),
    lock: threading.Lock = Depends(get_engine_lock),
) -> ScanActionResponse:
    """프레임 진행 (steps회 반복)"""
    with lock, _collect_events(engine) as events:
        for _ in range(request.steps):
            engine.tick(request.delta)
        return ScanActionResponse(
            success=True, session=_session_info(engine), events=events
        )


@router.get("/scan", response_model=ScanSessionInfo)
def get_scan(
    engine: DiscoveryEngine = Depends(get_engine),
    lock: threading.Lock = Depends(get_engine_lock),
) -> ScanSessionInfo:
    """현재 스캔 세션 조회"""
    with lock:
        return _session_info(engine)


# === 발견 기록 ===


def _discovery_info(engine: DiscoveryEngine, uid: str) -> DiscoveryInfo | None:
    record = engine.ledger.get_record(uid)
    definition = engine.catalog.get(uid)
    if record is None or definition is None:
        return None
    return DiscoveryInfo(
        uid=uid,
        display_name=definition.display_name,
        rarity=definition.rarity.value,
        times_scanned=record.times_scanned,
        tier=record.tier,
        scans_to_next_tier=scans_to_next_tier(record.times_scanned, definition.rarity),
        first_scan_timestamp=record.first_scan_timestamp,
        last_scan_timestamp=record.last_scan_timestamp,
    )


def _stats(engine: DiscoveryEngine) -> StatsResponse:
    stats = engine.ledger.get_stats().to_dict()
    return StatsResponse(
        **stats,
        pity=engine.loot.pity,
        current_biome=engine.progression.active_biome,
        unlocked_biomes=engine.progression.unlocked_biomes,
    )


@router.get("/discoveries", response_model=list[DiscoveryInfo])
def list_discoveries(
    engine: DiscoveryEngine = Depends(get_engine),
    lock: threading.Lock = Depends(get_engine_lock),
) -> list[DiscoveryInfo]:
    """발견한 아이템 목록"""
    with lock:
        infos = [_discovery_info(engine, r.item_uid) for r in engine.ledger.records()]
    return sorted((i for i in infos if i is not None), key=lambda i: i.uid)


@router.get(
    "/discoveries/{uid}",
    response_model=DiscoveryInfo,
    responses={404: {"model": ErrorResponse}},
)
def get_discovery(
    uid: str,
    engine: DiscoveryEngine = Depends(get_engine),
    lock: threading.Lock = Depends(get_engine_lock),
) -> DiscoveryInfo:
    """아이템별 발견 기록"""
    with lock:
        info = _discovery_info(engine, uid)
    if info is None:
        raise HTTPException(status_code=404, detail=f"Not discovered: {uid}")
    return info


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    engine: DiscoveryEngine = Depends(get_engine),
    lock: threading.Lock = Depends(get_engine_lock),
) -> StatsResponse:
    """Ledger 통계 + 진행 상태"""
    with lock:
        return _stats(engine)


# === 진행 ===


@router.get("/progression/{biome}", response_model=BiomeProgressResponse)
def get_progression(
    biome: str,
    engine: DiscoveryEngine = Depends(get_engine),
    lock: threading.Lock = Depends(get_engine_lock),
) -> BiomeProgressResponse:
    """바이옴 진행 판정. 게이트 없는 바이옴은 known=false."""
    with lock:
        progress = engine.check_biome_progression(biome)
    return BiomeProgressResponse(**progress.to_dict())


@router.post(
    "/biome/active",
    response_model=StatsResponse,
    responses={400: {"model": ErrorResponse}},
)
def set_active_biome(
    request: ActiveBiomeRequest,
    engine: DiscoveryEngine = Depends(get_engine),
    lock: threading.Lock = Depends(get_engine_lock),
) -> StatsResponse:
    """활성 바이옴 변경 (해금된 바이옴만)"""
    with lock:
        if not engine.set_active_biome(request.biome):
            raise HTTPException(
                status_code=400, detail=f"Biome locked: {request.biome}"
            )
        return _stats(engine)


# === 루트 ===


@router.post("/loot/{biome}", response_model=LootResponse)
def generate_loot(
    biome: str,
    engine: DiscoveryEngine = Depends(get_engine),
    lock: threading.Lock = Depends(get_engine_lock),
) -> LootResponse:
    """청크 하나의 스폰 목록 생성. 빈 목록 = 스폰 없음."""
    with lock:
        roll = engine.roll_chunk(biome)
        pity = engine.loot.pity
    return LootResponse(
        biome=biome,
        budget=roll.budget,
        spent=roll.spent,
        items=[
            LootItemInfo(
                uid=item.uid,
                display_name=item.display_name,
                rarity=item.rarity.value,
            )
            for item in roll.items
        ],
        legendary_rolled=roll.legendary_rolled,
        legendary_hit=roll.legendary_hit,
        pity=pity,
    )


# === 세이브 ===


def _slot_info(row) -> SaveSlotInfo:
    return SaveSlotInfo(
        slot_id=row.slot_id,
        total_scans=row.total_scans,
        current_biome=row.current_biome,
        updated_at=row.updated_at.isoformat(),
    )


@router.get("/saves", response_model=list[SaveSlotInfo])
def list_saves(
    service: SaveService = Depends(get_save_service),
    lock: threading.Lock = Depends(get_engine_lock),
) -> list[SaveSlotInfo]:
    with lock:
        return [_slot_info(row) for row in service.list_slots()]


@router.post("/saves/{slot_id}", response_model=SaveSlotInfo)
def save_game(
    slot_id: str,
    service: SaveService = Depends(get_save_service),
    lock: threading.Lock = Depends(get_engine_lock),
) -> SaveSlotInfo:
    """현재 상태 저장"""
    with lock:
        return _slot_info(service.save(slot_id))


@router.post(
    "/saves/{slot_id}/load",
    response_model=StatsResponse,
    responses={404: {"model": ErrorResponse}},
)
def load_game(
    slot_id: str,
    service: SaveService = Depends(get_save_service),
    engine: DiscoveryEngine = Depends(get_engine),
    lock: threading.Lock = Depends(get_engine_lock),
) -> StatsResponse:
    """슬롯 복원"""
    with lock:
        if not service.load(slot_id):
            raise HTTPException(
                status_code=404, detail=f"Save slot not found: {slot_id}"
            )
        return _stats(engine)
