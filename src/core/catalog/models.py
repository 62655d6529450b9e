"""스캔 대상 아이템 도메인 모델 (DB 무관)"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"

    @property
    def ordinal(self) -> int:
        """0부터 시작하는 희귀도 순번 (common=0 … legendary=3)"""
        return RARITY_ORDER.index(self)


RARITY_ORDER: tuple[Rarity, ...] = (
    Rarity.COMMON,
    Rarity.UNCOMMON,
    Rarity.RARE,
    Rarity.LEGENDARY,
)


@dataclass(frozen=True)
class ItemDefinition:
    """스캔 가능한 아이템 정의 - 불변. seed_scannables.json에서 로드."""

    uid: str  # "rock_01"
    display_name: str
    rarity: Rarity
    scan_time: float  # 초, > 0
    biome_affinity: frozenset[str]  # 등장 바이옴 이름
    unlock_threshold: int = 0

    # 서술 & 검색
    description: str = ""
    tags: tuple[str, ...] = ()  # frozen이므로 tuple 사용

    def belongs_to(self, biome: str) -> bool:
        return biome in self.biome_affinity
