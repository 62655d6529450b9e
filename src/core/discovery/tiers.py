"""발견 티어 계산 - 순수 Python, 외부 의존 없음

티어 임계값은 희귀도 순번(common=0)에 비례한다.
    tier 2: 1 + (ordinal + 1) 회
    tier 3: 1 + (ordinal + 1) * 2 회

    common    → 2, 3
    uncommon  → 3, 5
    rare      → 4, 7
    legendary → 5, 9
"""

from src.core.catalog.models import Rarity

MAX_TIER = 3


def tier_thresholds(rarity: Rarity) -> dict[int, int]:
    """티어별 필요 스캔 횟수. 반환: {1: 1, 2: n, 3: m}"""
    step = rarity.ordinal + 1
    return {1: 1, 2: 1 + step, 3: 1 + step * 2}


def compute_tier(times_scanned: int, rarity: Rarity) -> int:
    """스캔 횟수 → 티어 (0~3). 0회는 0."""
    if times_scanned < 1:
        return 0
    thresholds = tier_thresholds(rarity)
    tier = 1
    for level in (2, 3):
        if times_scanned >= thresholds[level]:
            tier = level
    return tier


def scans_to_next_tier(times_scanned: int, rarity: Rarity) -> int | None:
    """다음 티어까지 남은 스캔 수. 최고 티어면 None."""
    current = compute_tier(times_scanned, rarity)
    if current >= MAX_TIER:
        return None
    return tier_thresholds(rarity)[current + 1] - times_scanned
