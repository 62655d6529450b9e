"""Progression Gate Evaluator - Ledger 상태로 바이옴 해금 판정"""

from __future__ import annotations

import logging
from typing import Any, Optional

from src.core.catalog.registry import ItemCatalog
from src.core.discovery.ledger import DiscoveryLedger
from src.core.discovery.tiers import MAX_TIER
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.progression.gates import GateRegistry
from src.core.progression.models import BiomeProgress

logger = logging.getLogger(__name__)

SOURCE = "progression_gate_evaluator"


class ProgressionGateEvaluator:
    """해금된 바이옴 집합과 현재 활성 바이옴을 소유한다."""

    def __init__(
        self,
        catalog: ItemCatalog,
        ledger: DiscoveryLedger,
        gates: GateRegistry,
        starting_biome: str,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self._catalog = catalog
        self._ledger = ledger
        self._gates = gates
        self._bus = event_bus
        self._starting_biome = starting_biome
        self._unlocked: set[str] = {starting_biome}
        self._active_biome = starting_biome

    # === 판정 ===

    def check_biome_progression(self, biome: str) -> BiomeProgress:
        """biome_affinity에 biome이 포함된 아이템들로 집계.

        완료 시 다음 바이옴을 해금한다 (이미 해금됐으면 무시).
        게이트 없는 바이옴은 sentinel 반환, 예외 없음.
        """
        gate = self._gates.get(biome)
        if gate is None:
            logger.debug("No progression gate for biome %s", biome)
            return BiomeProgress.unknown(biome)

        total_scans = 0
        unique_items = 0
        tier3_count = 0
        for definition in self._catalog.get_by_biome(biome):
            record = self._ledger.get_record(definition.uid)
            if record is None:
                continue
            total_scans += record.times_scanned
            unique_items += 1
            if record.tier >= MAX_TIER:
                tier3_count += 1

        is_complete = (
            total_scans >= gate.total_scans_required
            and unique_items >= gate.unique_items_required
            and tier3_count >= gate.tier3_required
        )

        if is_complete and gate.unlocks_biome is not None:
            self.unlock_biome(gate.unlocks_biome, unlocked_by=biome)

        return BiomeProgress(
            biome=biome,
            total_scans=total_scans,
            unique_items=unique_items,
            tier3_count=tier3_count,
            is_complete=is_complete,
            next_biome=gate.unlocks_biome,
        )

    def check_active_biome(self) -> BiomeProgress:
        return self.check_biome_progression(self._active_biome)

    # === 해금 / 활성 바이옴 ===

    def unlock_biome(self, biome: str, unlocked_by: Optional[str] = None) -> bool:
        """바이옴 해금. 반환: 새로 해금됐는지 여부 (멱등)."""
        if biome in self._unlocked:
            return False
        self._unlocked.add(biome)
        logger.info("Biome unlocked: %s (by %s)", biome, unlocked_by)
        self._emit(
            EventTypes.BIOME_UNLOCKED, {"biome": biome, "unlocked_by": unlocked_by}
        )
        return True

    def is_unlocked(self, biome: str) -> bool:
        return biome in self._unlocked

    @property
    def unlocked_biomes(self) -> list[str]:
        return sorted(self._unlocked)

    @property
    def active_biome(self) -> str:
        return self._active_biome

    def set_active_biome(self, biome: str) -> bool:
        """활성 바이옴 변경. 해금되지 않은 바이옴이면 False."""
        if biome not in self._unlocked:
            logger.warning("Cannot activate locked biome %s", biome)
            return False
        if biome != self._active_biome:
            self._active_biome = biome
            self._emit(EventTypes.BIOME_ACTIVATED, {"biome": biome})
        return True

    # === 영속화 ===

    def snapshot(self) -> dict[str, Any]:
        return {
            "current_biome": self._active_biome,
            "unlocked_biomes": self.unlocked_biomes,
        }

    def restore(self, current_biome: Any, unlocked_biomes: Any) -> None:
        """저장값 복원. 손상된 값은 시작 바이옴 기준으로 대체한다. 이벤트 없음."""
        unlocked = {self._starting_biome}
        if isinstance(unlocked_biomes, (list, tuple, set)):
            unlocked |= {b for b in unlocked_biomes if isinstance(b, str) and b}
        elif unlocked_biomes is not None:
            logger.warning("Malformed unlocked_biomes %r ignored", unlocked_biomes)

        if isinstance(current_biome, str) and current_biome:
            # 저장된 현재 바이옴은 해금된 것으로 간주
            unlocked.add(current_biome)
            active = current_biome
        else:
            active = self._starting_biome

        self._unlocked = unlocked
        self._active_biome = active

    def reset(self) -> None:
        self._unlocked = {self._starting_biome}
        self._active_biome = self._starting_biome

    def _emit(self, event_type: str, data: dict) -> None:
        if self._bus is None:
            return
        self._bus.emit(GameEvent(event_type=event_type, data=data, source=SOURCE))
