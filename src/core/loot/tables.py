"""루트 테이블 상수 - 순수 Python, 외부 의존 없음"""

from dataclasses import dataclass
from typing import Optional

from src.core.catalog.models import Rarity

# === 희귀도별 포인트 비용 (오름차순) ===
RARITY_POINT_COSTS: dict[Rarity, int] = {
    Rarity.COMMON: 1,
    Rarity.UNCOMMON: 2,
    Rarity.RARE: 3,
    Rarity.LEGENDARY: 5,
}

# === 기본 확률 ===
LEGENDARY_BASE_CHANCE = 0.05
PITY_INCREMENT = 0.05
PITY_CAP = 1.0
RARE_FILL_CHANCE = 0.30
UNCOMMON_FILL_CHANCE = 0.50

# === 청크당 포인트 예산 범위 ===
BUDGET_MIN = 8
BUDGET_MAX = 16


@dataclass(frozen=True)
class LootConfig:
    """루트 스폰 파라미터. fixed_budget이 있으면 예산 랜덤화를 끈다 (테스트용)."""

    legendary_base_chance: float = LEGENDARY_BASE_CHANCE
    pity_increment: float = PITY_INCREMENT
    pity_cap: float = PITY_CAP
    rare_fill_chance: float = RARE_FILL_CHANCE
    uncommon_fill_chance: float = UNCOMMON_FILL_CHANCE
    budget_min: int = BUDGET_MIN
    budget_max: int = BUDGET_MAX
    fixed_budget: Optional[int] = None


def point_cost(rarity: Rarity) -> int:
    return RARITY_POINT_COSTS[rarity]
