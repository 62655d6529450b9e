"""API request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field


# === Request Schemas ===


class TargetAcquiredRequest(BaseModel):
    """대상 획득 보고"""

    uid: str = Field(..., min_length=1, description="스캔 대상 아이템 uid")
    scan_time: Optional[float] = Field(
        None, description="필요 스캔 시간(초). 생략 시 카탈로그 값"
    )


class TargetLostRequest(BaseModel):
    """대상 상실 보고"""

    uid: str = Field(..., min_length=1, description="스캔 대상 아이템 uid")


class TickRequest(BaseModel):
    """프레임 진행"""

    delta: float = Field(..., ge=0, description="경과 시간(초)")
    steps: int = Field(1, ge=1, le=1000, description="같은 delta로 반복할 횟수")


class ActiveBiomeRequest(BaseModel):
    """활성 바이옴 변경"""

    biome: str = Field(..., min_length=1)


# === Response Schemas ===


class ScanSessionInfo(BaseModel):
    """현재 스캔 세션"""

    target_uid: Optional[str] = None
    progress: float = 0.0
    required_time: float = 0.0
    state: str
    grace_elapsed: float = 0.0
    resumable: bool = False


class ScanActionResponse(BaseModel):
    """스캔 입력 처리 응답"""

    success: bool
    session: ScanSessionInfo
    events: list[dict[str, Any]] = []


class DiscoveryInfo(BaseModel):
    """아이템별 발견 기록"""

    uid: str
    display_name: str
    rarity: str
    times_scanned: int
    tier: int
    scans_to_next_tier: Optional[int] = None
    first_scan_timestamp: float
    last_scan_timestamp: float


class StatsResponse(BaseModel):
    """Ledger 통계 + 진행 상태"""

    unique_items: int
    total_scans: int
    tier_counts: dict[str, int]
    pity: float
    current_biome: str
    unlocked_biomes: list[str]


class BiomeProgressResponse(BaseModel):
    """바이옴 진행 판정 결과"""

    biome: str
    total_scans: int
    unique_items: int
    tier3_count: int
    is_complete: bool
    next_biome: Optional[str] = None
    known: bool = True


class LootItemInfo(BaseModel):
    uid: str
    display_name: str
    rarity: str


class LootResponse(BaseModel):
    """청크 스폰 결과"""

    biome: str
    budget: int
    spent: int
    items: list[LootItemInfo] = []
    legendary_rolled: bool = False
    legendary_hit: bool = False
    pity: float


class SaveSlotInfo(BaseModel):
    slot_id: str
    total_scans: int
    current_biome: Optional[str] = None
    updated_at: str


class ErrorResponse(BaseModel):
    """에러 응답"""

    success: bool = False
    error: str
    detail: Optional[str] = None
