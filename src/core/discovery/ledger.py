"""Discovery Ledger - 스캔 기록의 단일 소유자

- ScanRecord 컬렉션(item_uid 키)을 독점 소유한다
- 전역 스캔 카운터(total_scans)와 아이템별 카운터는 서로 독립이다
- 영속화는 serialize()/deserialize()의 평면 dict만 외부로 넘긴다
"""

from __future__ import annotations

import dataclasses
import logging
import math
import time
from typing import Any, Callable, Iterator, Optional

from src.core.catalog.models import ItemDefinition
from src.core.catalog.registry import ItemCatalog
from src.core.discovery.models import LedgerStats, RecordOutcome, ScanRecord
from src.core.discovery.tiers import MAX_TIER, compute_tier

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class DiscoveryLedger:
    """발견 기록 장부"""

    def __init__(self, clock: Clock = time.time) -> None:
        self._records: dict[str, ScanRecord] = {}
        self._total_scans: int = 0
        self._clock = clock

    # === 기록 ===

    def record(
        self, item_uid: str, item_definition: Optional[ItemDefinition]
    ) -> Optional[RecordOutcome]:
        """스캔 1회 기록. 무결성 오류면 None (Ledger 미변경)."""
        if item_definition is None or item_definition.uid != item_uid:
            logger.error(
                "Refusing to record scan for %s: no matching item definition",
                item_uid,
            )
            return None

        now = self._clock()
        self._total_scans += 1

        record = self._records.get(item_uid)
        if record is None:
            self._records[item_uid] = ScanRecord(
                item_uid=item_uid,
                times_scanned=1,
                tier=1,
                first_scan_timestamp=now,
                last_scan_timestamp=now,
            )
            logger.info("New discovery: %s", item_uid)
            return RecordOutcome(
                item_uid=item_uid,
                is_new=True,
                times_scanned=1,
                previous_tier=0,
                tier=1,
            )

        previous_tier = record.tier
        record.times_scanned += 1
        record.tier = max(
            previous_tier, compute_tier(record.times_scanned, item_definition.rarity)
        )
        record.last_scan_timestamp = now
        logger.debug(
            "Rescanned %s: times=%d tier=%d", item_uid, record.times_scanned, record.tier
        )
        return RecordOutcome(
            item_uid=item_uid,
            is_new=False,
            times_scanned=record.times_scanned,
            previous_tier=previous_tier,
            tier=record.tier,
        )

    def record_scan(
        self, item_uid: str, item_definition: Optional[ItemDefinition]
    ) -> bool:
        """스캔 기록. 반환: 신규 발견 여부."""
        outcome = self.record(item_uid, item_definition)
        return outcome is not None and outcome.is_new

    def reset(self) -> None:
        """모든 기록 삭제 (새 게임)."""
        self._records.clear()
        self._total_scans = 0

    # === 조회 ===

    def has_scanned(self, uid: str) -> bool:
        return uid in self._records

    def get_record(self, uid: str) -> Optional[ScanRecord]:
        """기록 사본 (외부 수정 방지). 없으면 None."""
        record = self._records.get(uid)
        return dataclasses.replace(record) if record is not None else None

    def get_total_scans(self) -> int:
        """record 호출 누적 횟수 (재스캔 포함)."""
        return self._total_scans

    def records(self) -> Iterator[ScanRecord]:
        return iter([dataclasses.replace(r) for r in self._records.values()])

    def get_stats(self) -> LedgerStats:
        stats = LedgerStats(
            unique_items=len(self._records), total_scans=self._total_scans
        )
        for record in self._records.values():
            stats.tier_counts[record.tier] = stats.tier_counts.get(record.tier, 0) + 1
        return stats

    # === 영속화 계약 ===

    def serialize(self) -> dict[str, Any]:
        """{"records": {uid: {...}}, "total_scans": int}"""
        return {
            "records": {uid: r.to_dict() for uid, r in self._records.items()},
            "total_scans": self._total_scans,
        }

    def deserialize(
        self, data: Any, catalog: Optional[ItemCatalog] = None
    ) -> int:
        """serialize() 결과 복원. 기존 기록은 대체된다.

        누락/손상 키는 기본값으로 대체하고 예외를 올리지 않는다.
        catalog가 있으면 티어를 현재 규칙으로 재계산한다.
        반환: 복원된 기록 수.
        """
        self.reset()
        if not isinstance(data, dict):
            logger.warning("Ledger data is not a mapping, starting empty")
            return 0

        raw_records = data.get("records", {})
        if not isinstance(raw_records, dict):
            logger.warning("Ledger records malformed, starting empty")
            raw_records = {}

        for uid, raw in raw_records.items():
            record = self._restore_record(uid, raw, catalog)
            if record is not None:
                self._records[record.item_uid] = record

        per_item_sum = sum(r.times_scanned for r in self._records.values())
        total = _as_int(data.get("total_scans"), per_item_sum)
        if total < per_item_sum:
            logger.warning(
                "Stored total_scans %d below per-item sum %d, using sum",
                total,
                per_item_sum,
            )
            total = per_item_sum
        self._total_scans = total

        logger.info(
            "Ledger restored: %d records, %d total scans",
            len(self._records),
            self._total_scans,
        )
        return len(self._records)

    def _restore_record(
        self, uid: Any, raw: Any, catalog: Optional[ItemCatalog]
    ) -> Optional[ScanRecord]:
        if not isinstance(uid, str) or not uid or not isinstance(raw, dict):
            logger.warning("Skipping malformed ledger entry: %r", uid)
            return None

        times = _as_int(raw.get("times_scanned"), 1)
        if times < 1:
            times = 1

        tier = _as_int(raw.get("tier"), 1)
        definition = catalog.get(uid) if catalog is not None else None
        if definition is not None:
            tier = compute_tier(times, definition.rarity)
        tier = max(1, min(MAX_TIER, tier))

        first = _as_float(raw.get("first_scan_timestamp"), 0.0)
        last = _as_float(raw.get("last_scan_timestamp"), first)
        return ScanRecord(
            item_uid=uid,
            times_scanned=times,
            tier=tier,
            first_scan_timestamp=first,
            last_scan_timestamp=max(first, last),
        )


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        # inf → OverflowError, nan → ValueError
        return default


def _as_float(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return result if math.isfinite(result) else default
