"""
Discovery Core Engine - Composition Root
========================================
탐사 진행 코어 통합 모듈

프로세스 시작 시 한 번 생성되어 모든 협력자에게 참조로 전달된다.
스캔 상태 머신 → Discovery Ledger → 진행 게이트 → 루트 스폰
흐름을 EventBus 구독으로 연결한다.
"""

import math
import random
import time
from typing import Any, Callable, Optional

from src.core.catalog.models import ItemDefinition
from src.core.catalog.registry import ItemCatalog
from src.core.discovery.ledger import DiscoveryLedger
from src.core.discovery.models import RecordOutcome
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger
from src.core.loot.spawner import LootRoll, LootSpawnEngine
from src.core.loot.tables import LootConfig
from src.core.progression.evaluator import ProgressionGateEvaluator
from src.core.progression.gates import GateRegistry
from src.core.progression.models import BiomeProgress
from src.core.scan.machine import ScanStateMachine
from src.core.scan.models import ScanConfig

logger = get_logger(__name__)

LEDGER_SOURCE = "discovery_ledger"

SAVE_FORMAT_VERSION = 1


class DiscoveryEngine:
    """
    탐사 진행 코어 메인 엔진

    스캔/발견/스폰/진행 서비스 객체를 소유하고 연결한다.
    """

    VERSION = "0.1.0"

    def __init__(
        self,
        catalog: ItemCatalog,
        gates: GateRegistry,
        starting_biome: str = "starter",
        scan_config: Optional[ScanConfig] = None,
        loot_config: Optional[LootConfig] = None,
        event_bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        엔진 초기화

        Args:
            catalog: 로드 완료된 아이템 카탈로그
            gates: 바이옴 진행 게이트
            starting_biome: 새 게임 시작 바이옴 (항상 해금)
            rng: 루트 스폰 RNG (재현성)
            clock: 스캔 기록 타임스탬프 공급자
        """
        logger.info("Initializing discovery core v%s...", self.VERSION)

        self.event_bus = event_bus or EventBus()
        self.catalog = catalog
        self.gates = gates

        self.scanner = ScanStateMachine(self.event_bus, scan_config)
        self.ledger = DiscoveryLedger(clock=clock)
        self.loot = LootSpawnEngine(catalog, loot_config, self.event_bus, rng)
        self.progression = ProgressionGateEvaluator(
            catalog, self.ledger, gates, starting_biome, self.event_bus
        )

        # 해금 직후 재시드된 바이옴별 스폰 목록 (월드 생성 협력자가 가져간다)
        self._reseeded: dict[str, list[ItemDefinition]] = {}

        if not self.loot.has_pool(starting_biome):
            logger.warning("Starting biome %s has no registered items", starting_biome)

        self._register_event_handlers()
        logger.info(
            "Ready. %d items, %d gates, starting biome %s.",
            catalog.count(),
            gates.count(),
            starting_biome,
        )

    @classmethod
    def from_settings(
        cls, settings: Any, event_bus: Optional[EventBus] = None
    ) -> "DiscoveryEngine":
        """Settings 값으로 카탈로그/게이트를 로드해 엔진 생성"""
        catalog = ItemCatalog(min_scan_time=settings.MIN_SCAN_TIME)
        catalog.load_from_json(settings.CATALOG_PATH)

        gates = GateRegistry()
        gates.load_from_json(settings.GATES_PATH)

        scan_config = ScanConfig(
            grace_period=settings.SCAN_GRACE_PERIOD,
            decay_rate=settings.SCAN_DECAY_RATE,
            min_scan_time=settings.MIN_SCAN_TIME,
        )
        loot_config = LootConfig(
            legendary_base_chance=settings.LEGENDARY_BASE_CHANCE,
            pity_increment=settings.PITY_INCREMENT,
            pity_cap=settings.PITY_CAP,
            rare_fill_chance=settings.RARE_FILL_CHANCE,
            uncommon_fill_chance=settings.UNCOMMON_FILL_CHANCE,
            budget_min=settings.LOOT_BUDGET_MIN,
            budget_max=settings.LOOT_BUDGET_MAX,
            fixed_budget=settings.LOOT_FIXED_BUDGET,
        )
        return cls(
            catalog=catalog,
            gates=gates,
            starting_biome=settings.STARTING_BIOME,
            scan_config=scan_config,
            loot_config=loot_config,
            event_bus=event_bus,
            rng=random.Random(settings.RNG_SEED),
        )

    def _register_event_handlers(self) -> None:
        """EventBus 구독"""
        self.event_bus.subscribe(EventTypes.SCAN_COMPLETED, self._on_scan_completed)
        self.event_bus.subscribe(EventTypes.BIOME_UNLOCKED, self._on_biome_unlocked)

    # === 대상 탐지 / 입력 협력자 ===

    def report_target_acquired(self, uid: str, scan_time: Optional[float] = None) -> None:
        """scan_time 생략 시 카탈로그 정의값 사용"""
        if scan_time is None:
            definition = self.catalog.get(uid)
            if definition is None:
                logger.warning("Target %s not in catalog and no scan_time given", uid)
                scan_time = self.scanner.config.min_scan_time
            else:
                scan_time = definition.scan_time
        self.scanner.report_target_acquired(uid, scan_time)

    def report_target_lost(self, uid: str) -> None:
        self.scanner.report_target_lost(uid)

    def request_scan_start(self) -> bool:
        return self.scanner.request_scan_start()

    def tick(self, delta: float) -> None:
        """프레임 1회 진행. 외부 드라이버가 매 프레임 호출."""
        try:
            self.scanner.update(delta)
        finally:
            self.event_bus.reset_chain()

    # === 발견 기록 ===

    def record_scan(self, uid: str) -> bool:
        """스캔 완료 처리. 반환: 신규 발견 여부.

        카탈로그에 없는 uid는 무결성 오류로 기록하지 않는다.
        """
        definition = self.catalog.get(uid)
        if definition is None:
            logger.error("Completed scan references unknown item uid %s", uid)
            return False

        outcome = self.ledger.record(uid, definition)
        if outcome is None:
            return False

        self._emit_record_events(outcome)
        self.progression.check_active_biome()
        return outcome.is_new

    def _emit_record_events(self, outcome: RecordOutcome) -> None:
        if outcome.is_new:
            self._emit(EventTypes.ITEM_DISCOVERED, {"uid": outcome.item_uid})
        self._emit(
            EventTypes.SCAN_RECORDED,
            {
                "uid": outcome.item_uid,
                "times_scanned": outcome.times_scanned,
                "tier": outcome.tier,
                "total_scans": self.ledger.get_total_scans(),
            },
        )
        if outcome.tier_advanced and not outcome.is_new:
            self._emit(
                EventTypes.TIER_ADVANCED,
                {
                    "uid": outcome.item_uid,
                    "previous_tier": outcome.previous_tier,
                    "tier": outcome.tier,
                },
            )

    # === 월드 생성 협력자 ===

    def generate_chunk_loot(self, biome: str) -> list[ItemDefinition]:
        return self.loot.generate_chunk_loot(biome)

    def roll_chunk(self, biome: str) -> LootRoll:
        return self.loot.roll_chunk(biome)

    def take_reseeded_loot(self, biome: str) -> list[ItemDefinition]:
        """해금 시 재시드된 스폰 목록을 꺼낸다 (1회성)."""
        return self._reseeded.pop(biome, [])

    # === 진행 ===

    def check_biome_progression(self, biome: str) -> BiomeProgress:
        return self.progression.check_biome_progression(biome)

    def set_active_biome(self, biome: str) -> bool:
        return self.progression.set_active_biome(biome)

    # === EventBus 핸들러 ===

    def _on_scan_completed(self, event: GameEvent) -> None:
        uid = event.data.get("uid")
        if not isinstance(uid, str):
            logger.error("scan_completed without uid: %r", event.data)
            return
        self.record_scan(uid)

    def _on_biome_unlocked(self, event: GameEvent) -> None:
        """새로 해금된 바이옴의 스폰 테이블 재시드"""
        biome = event.data.get("biome")
        if not isinstance(biome, str):
            return
        self._reseeded[biome] = self.loot.generate_chunk_loot(biome)

    # === 영속화 ===

    def snapshot(self) -> dict[str, Any]:
        """영속화 협력자에게 넘길 평면 문서"""
        document: dict[str, Any] = {
            "version": SAVE_FORMAT_VERSION,
            "ledger": self.ledger.serialize(),
            "pity": self.loot.pity,
        }
        document.update(self.progression.snapshot())
        return document

    def restore(self, document: Any) -> None:
        """snapshot() 문서 복원. 누락/손상 키는 기본값, 예외 없음."""
        if not isinstance(document, dict):
            logger.warning("Save document is not a mapping, starting new game")
            self.new_game()
            return

        self.scanner.reset()
        self._reseeded.clear()
        self.ledger.deserialize(document.get("ledger", {}), catalog=self.catalog)
        self.progression.restore(
            document.get("current_biome"), document.get("unlocked_biomes")
        )

        pity = document.get("pity", 0.0)
        if (
            isinstance(pity, (int, float))
            and not isinstance(pity, bool)
            and math.isfinite(pity)
        ):
            self.loot.restore_pity(pity)
        else:
            logger.warning("Malformed pity %r, resetting to 0", pity)
            self.loot.reset_pity()

    def new_game(self) -> None:
        """모든 프로세스 전역 상태 초기화"""
        self.scanner.reset()
        self.ledger.reset()
        self.loot.reset_pity()
        self.progression.reset()
        self._reseeded.clear()
        self.event_bus.reset_chain()
        logger.info("New game initialized")

    def get_status(self) -> dict[str, Any]:
        stats = self.ledger.get_stats()
        return {
            "scan": self.scanner.session.to_dict(),
            "ledger": stats.to_dict(),
            "pity": self.loot.pity,
            "current_biome": self.progression.active_biome,
            "unlocked_biomes": self.progression.unlocked_biomes,
        }

    def _emit(self, event_type: str, data: dict) -> None:
        self.event_bus.emit(
            GameEvent(event_type=event_type, data=data, source=LEDGER_SOURCE)
        )
