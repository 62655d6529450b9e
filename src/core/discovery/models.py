"""발견 기록 도메인 모델 (DB 무관)"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ScanRecord:
    """아이템별 스캔 기록. 첫 스캔 성공 시 생성, Ledger만 수정한다."""

    item_uid: str
    times_scanned: int = 1  # ≥ 1
    tier: int = 1  # 1 ~ 3, 단조 비감소
    first_scan_timestamp: float = 0.0
    last_scan_timestamp: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tier": self.tier,
            "times_scanned": self.times_scanned,
            "first_scan_timestamp": self.first_scan_timestamp,
            "last_scan_timestamp": self.last_scan_timestamp,
        }


@dataclass
class LedgerStats:
    """Ledger 요약 통계"""

    unique_items: int = 0
    total_scans: int = 0
    tier_counts: dict[int, int] = field(default_factory=lambda: {1: 0, 2: 0, 3: 0})

    def to_dict(self) -> dict[str, Any]:
        return {
            "unique_items": self.unique_items,
            "total_scans": self.total_scans,
            "tier_counts": {str(k): v for k, v in self.tier_counts.items()},
        }


@dataclass(frozen=True)
class RecordOutcome:
    """record_scan 결과 상세 (이벤트 발행용)"""

    item_uid: str
    is_new: bool
    times_scanned: int
    previous_tier: int
    tier: int

    @property
    def tier_advanced(self) -> bool:
        return self.tier > self.previous_tier
