"""발견 기록 Core - 순수 Python, DB 무관"""

from .ledger import DiscoveryLedger
from .models import LedgerStats, RecordOutcome, ScanRecord
from .tiers import MAX_TIER, compute_tier, scans_to_next_tier, tier_thresholds

__all__ = [
    "DiscoveryLedger",
    "LedgerStats",
    "RecordOutcome",
    "ScanRecord",
    "MAX_TIER",
    "compute_tier",
    "scans_to_next_tier",
    "tier_thresholds",
]
