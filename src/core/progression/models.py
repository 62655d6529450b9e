"""바이옴 진행 게이트 모델"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class ProgressionGate:
    """바이옴별 해금 조건 - 불변 설정. unlocks_biome None = 마지막 바이옴."""

    biome: str
    total_scans_required: int
    unique_items_required: int
    tier3_required: int
    unlocks_biome: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.unlocks_biome is None


@dataclass(frozen=True)
class BiomeProgress:
    """check_biome_progression 결과"""

    biome: str
    total_scans: int = 0
    unique_items: int = 0
    tier3_count: int = 0
    is_complete: bool = False
    next_biome: Optional[str] = None
    known: bool = True

    @classmethod
    def unknown(cls, biome: str) -> "BiomeProgress":
        """게이트가 없는 바이옴용 sentinel"""
        return cls(biome=biome, known=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "biome": self.biome,
            "total_scans": self.total_scans,
            "unique_items": self.unique_items,
            "tier3_count": self.tier3_count,
            "is_complete": self.is_complete,
            "next_biome": self.next_biome,
            "known": self.known,
        }
