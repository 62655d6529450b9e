"""Loot Spawn Engine - 포인트 예산 루트 테이블 + 전설 천장

청크(공간 영역) 하나당 generate_chunk_loot()를 한 번 호출한다.

절차:
1. 포인트 예산 결정 (고정값 또는 범위 내 랜덤)
2. 전설 슬롯: min(기본 확률 + pity, 1.0)로 1회 판정
3. 레어 채우기: 판정 실패 시 즉시 중단
4. 언커먼 채우기: 레어와 동일 패턴
5. 커먼 채우기: 확률 없이 예산 소진까지 반복
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from src.core.catalog.models import RARITY_ORDER, ItemDefinition, Rarity
from src.core.catalog.registry import ItemCatalog
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.loot.pity import PityCounter
from src.core.loot.tables import LootConfig, point_cost

logger = logging.getLogger(__name__)

SOURCE = "loot_spawn_engine"


@dataclass
class LootRoll:
    """generate 1회 결과 상세"""

    biome: str
    budget: int = 0
    spent: int = 0
    items: list[ItemDefinition] = field(default_factory=list)
    legendary_rolled: bool = False
    legendary_hit: bool = False

    @property
    def remaining(self) -> int:
        return self.budget - self.spent

    def add(self, item: ItemDefinition) -> None:
        self.items.append(item)
        self.spent += point_cost(item.rarity)


class LootSpawnEngine:
    """바이옴별 희귀도 인덱스와 pity 카운터를 소유하는 스폰 엔진"""

    def __init__(
        self,
        catalog: ItemCatalog,
        config: Optional[LootConfig] = None,
        event_bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._config = config or LootConfig()
        self._bus = event_bus
        self._rng = rng or random.Random()
        self._pity = PityCounter(
            increment=self._config.pity_increment, cap=self._config.pity_cap
        )
        self._index: dict[str, dict[Rarity, list[ItemDefinition]]] = {}
        self.rebuild_index(catalog)

    # === 인덱스 ===

    def rebuild_index(self, catalog: ItemCatalog) -> None:
        """카탈로그 → {biome: {rarity: [정의...]}}. uid 순으로 정렬."""
        index: dict[str, dict[Rarity, list[ItemDefinition]]] = {}
        for definition in sorted(catalog.get_all(), key=lambda d: d.uid):
            for biome in definition.biome_affinity:
                pools = index.setdefault(biome, {r: [] for r in RARITY_ORDER})
                pools[definition.rarity].append(definition)
        self._index = index
        logger.debug("Loot index rebuilt for %d biomes", len(index))

    def biome_pool(self, biome: str) -> dict[str, int]:
        """바이옴의 희귀도별 등록 아이템 수."""
        pools = self._index.get(biome, {})
        return {r.value: len(pools.get(r, [])) for r in RARITY_ORDER}

    def has_pool(self, biome: str) -> bool:
        pools = self._index.get(biome)
        return bool(pools) and any(pools.values())

    # === pity ===

    @property
    def pity(self) -> float:
        return self._pity.value

    @property
    def pity_cap(self) -> float:
        return self._pity.cap

    def reset_pity(self) -> None:
        """테스트/디버그 또는 새 게임 초기화 전용."""
        self._pity.reset()

    def restore_pity(self, value: float) -> None:
        self._pity.restore(value)

    # === 생성 ===

    def generate_chunk_loot(self, biome: str) -> list[ItemDefinition]:
        """청크 하나의 스폰 목록. 빈 목록 = 이 영역은 스폰 없음."""
        return self.roll_chunk(biome).items

    def roll_chunk(self, biome: str) -> LootRoll:
        if not self.has_pool(biome):
            logger.warning("No items registered for biome %s, spawning nothing", biome)
            self._emit(EventTypes.LOOT_POOL_EMPTY, {"biome": biome})
            return LootRoll(biome=biome)

        pools = self._index[biome]
        result = LootRoll(biome=biome, budget=self._determine_budget())

        self._roll_legendary(result, pools[Rarity.LEGENDARY])
        self._fill(result, pools[Rarity.RARE], self._config.rare_fill_chance)
        self._fill(result, pools[Rarity.UNCOMMON], self._config.uncommon_fill_chance)
        self._fill_commons(result, pools[Rarity.COMMON])

        if result.remaining > 0:
            logger.debug(
                "Chunk loot for %s left %d of %d points unspent",
                biome,
                result.remaining,
                result.budget,
            )

        self._emit(
            EventTypes.LOOT_GENERATED,
            {
                "biome": biome,
                "item_uids": [item.uid for item in result.items],
                "budget": result.budget,
                "spent": result.spent,
            },
        )
        return result

    def _determine_budget(self) -> int:
        if self._config.fixed_budget is not None:
            return max(0, self._config.fixed_budget)
        low = max(0, self._config.budget_min)
        high = max(low, self._config.budget_max)
        return self._rng.randint(low, high)

    def _roll_legendary(self, result: LootRoll, legendaries: list[ItemDefinition]) -> None:
        """전설 1회 판정. pity는 이 판정에서만 변한다."""
        if not legendaries:
            return
        if result.remaining < point_cost(Rarity.LEGENDARY):
            logger.debug("Budget %d too small for legendary roll", result.remaining)
            return

        chance = min(round(self._config.legendary_base_chance + self._pity.value, 6), 1.0)
        result.legendary_rolled = True

        if self._rng.random() < chance:
            item = self._rng.choice(legendaries)
            result.add(item)
            result.legendary_hit = True
            previous = self._pity.value
            self._pity.register_success()
            logger.info(
                "Legendary spawned in %s: %s (chance=%.2f, pity was %.2f)",
                result.biome,
                item.uid,
                chance,
                previous,
            )
            self._emit(
                EventTypes.LEGENDARY_SPAWNED,
                {"biome": result.biome, "uid": item.uid, "chance": chance},
            )
            return

        pity = self._pity.register_failure()
        self._emit(
            EventTypes.PITY_UPDATED,
            {"biome": result.biome, "pity": pity, "cap": self._pity.cap},
        )

    def _fill(
        self, result: LootRoll, pool: list[ItemDefinition], chance: float
    ) -> None:
        """확률 게이트 채우기. 판정 실패 시 재시도 없이 종료."""
        if not pool:
            return
        cost = point_cost(pool[0].rarity)
        while result.remaining >= cost:
            if self._rng.random() >= chance:
                break
            result.add(self._rng.choice(pool))

    def _fill_commons(self, result: LootRoll, commons: list[ItemDefinition]) -> None:
        """확률 없이 예산이 바닥날 때까지 커먼 추가 (중복 허용)."""
        if not commons:
            return
        cost = point_cost(Rarity.COMMON)
        while result.remaining >= cost:
            result.add(self._rng.choice(commons))

    def _emit(self, event_type: str, data: dict) -> None:
        if self._bus is None:
            return
        self._bus.emit(GameEvent(event_type=event_type, data=data, source=SOURCE))
