"""스캔 상태 머신 모델"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ScanState(str, Enum):
    IDLE = "idle"
    TARGETING = "targeting"
    SCANNING = "scanning"
    GRACE_PERIOD = "grace_period"


@dataclass(frozen=True)
class ScanConfig:
    """스캔 타이머 파라미터"""

    grace_period: float = 2.0  # 대상 상실 후 재획득 허용 시간 (초)
    decay_rate: float = 0.25  # 유예 중 초당 진행도 감소량
    min_scan_time: float = 0.1  # 0 나누기 방지용 하한


@dataclass
class ScanSession:
    """현재 스캔 세션. 상태 머신당 최대 1개."""

    target_uid: Optional[str] = None
    progress: float = 0.0  # 0.0 ~ 1.0
    required_time: float = 0.0
    state: ScanState = ScanState.IDLE
    grace_elapsed: float = 0.0
    resumable: bool = False  # 유예 복구 후 진행도 유지 여부

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_uid": self.target_uid,
            "progress": self.progress,
            "required_time": self.required_time,
            "state": self.state.value,
            "grace_elapsed": self.grace_elapsed,
            "resumable": self.resumable,
        }
