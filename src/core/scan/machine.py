"""스캔 상태 머신 - 타이머/FSM, 공간 표현과 무관

상태 전이:
    idle → targeting → scanning → (완료) → idle
                                 → grace_period → targeting (동일 대상 재획득)
                                                → idle (유예 만료, 중단)

대상은 불투명한 uid 문자열로만 식별한다. 외부 스케줄러가 매 프레임
update(delta)를 호출하고, 모든 부수 효과는 EventBus 이벤트로만 관찰된다.
"""

import dataclasses
import logging
import math
from typing import Any, Optional

from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes, InterruptReasons
from src.core.scan.models import ScanConfig, ScanSession, ScanState

logger = logging.getLogger(__name__)

SOURCE = "scan_state_machine"

# 부동소수 누적 오차 허용치
_COMPLETE_EPSILON = 1e-9


class ScanStateMachine:
    """단일 ScanSession을 소유하는 스캔 상태 머신"""

    def __init__(self, event_bus: EventBus, config: Optional[ScanConfig] = None):
        self._bus = event_bus
        self._config = config or ScanConfig()
        self._session = ScanSession()
        self._updating = False

    # === 조회 ===

    @property
    def state(self) -> ScanState:
        return self._session.state

    @property
    def target_uid(self) -> Optional[str]:
        return self._session.target_uid

    @property
    def progress(self) -> float:
        return self._session.progress

    @property
    def config(self) -> ScanConfig:
        return self._config

    @property
    def session(self) -> ScanSession:
        """현재 세션 사본 (외부 수정 방지)"""
        return dataclasses.replace(self._session)

    # === 대상 탐지 협력자 입력 ===

    def report_target_acquired(self, uid: str, scan_time: float) -> None:
        """대상 획득 보고.

        - scanning 중에는 무시 (다른 대상이 진행 중 스캔을 빼앗지 않는다)
        - 같은 uid의 유예 중이면 targeting으로 복귀, 진행도 유지
        - 그 외에는 새 대상으로 교체, 진행도 0
        """
        session = self._session

        if session.state is ScanState.SCANNING:
            if uid != session.target_uid:
                logger.debug(
                    "Ignoring target %s while scanning %s", uid, session.target_uid
                )
            return

        if session.state is ScanState.GRACE_PERIOD:
            if uid == session.target_uid:
                session.state = ScanState.TARGETING
                session.grace_elapsed = 0.0
                session.resumable = True
                logger.debug(
                    "Target %s reacquired in grace period (progress=%.3f)",
                    uid,
                    session.progress,
                )
                self._emit(
                    EventTypes.TARGET_ACQUIRED,
                    {"uid": uid, "resumed": True, "progress": session.progress},
                )
                return
            # 다른 대상으로 전환 → 유예 중이던 스캔은 중단
            self._emit(
                EventTypes.SCAN_INTERRUPTED,
                {
                    "uid": session.target_uid,
                    "reason": InterruptReasons.TARGET_SWITCHED,
                },
            )

        required_time = self._sanitize_scan_time(uid, scan_time)
        self._session = ScanSession(
            target_uid=uid,
            progress=0.0,
            required_time=required_time,
            state=ScanState.TARGETING,
        )
        self._emit(
            EventTypes.TARGET_ACQUIRED,
            {"uid": uid, "resumed": False, "progress": 0.0},
        )

    def report_target_lost(self, uid: str) -> None:
        """대상 상실 보고. 현재 대상이 아니면 무시."""
        session = self._session
        if session.target_uid is None or uid != session.target_uid:
            logger.debug("Ignoring target_lost for inactive uid %s", uid)
            return

        if session.state is ScanState.SCANNING:
            session.state = ScanState.GRACE_PERIOD
            session.grace_elapsed = 0.0
            self._emit(EventTypes.TARGET_LOST, {"uid": uid})
            self._emit(
                EventTypes.GRACE_STARTED,
                {
                    "uid": uid,
                    "progress": session.progress,
                    "grace_period": self._config.grace_period,
                },
            )
            return

        if session.state is ScanState.GRACE_PERIOD:
            return

        self._session = ScanSession()
        self._emit(EventTypes.TARGET_LOST, {"uid": uid})

    # === 입력 트리거 ===

    def request_scan_start(self) -> bool:
        """플레이어 스캔 시작. targeting 상태에서만 유효.

        유예 복구된 세션은 유지된 진행도에서 이어서 스캔한다.
        반환: 스캔 시작 여부.
        """
        session = self._session
        if session.state is not ScanState.TARGETING:
            logger.debug("request_scan_start ignored in state %s", session.state.value)
            return False

        if not session.resumable:
            session.progress = 0.0
        session.resumable = False
        session.state = ScanState.SCANNING
        self._emit(
            EventTypes.SCAN_STARTED,
            {
                "uid": session.target_uid,
                "required_time": session.required_time,
                "progress": session.progress,
            },
        )
        return True

    # === 프레임 업데이트 ===

    def update(self, delta: float) -> None:
        """매 프레임 호출. delta: 경과 초."""
        if self._updating:
            logger.warning("Re-entrant scan update ignored")
            return

        if not isinstance(delta, (int, float)) or not math.isfinite(delta) or delta < 0:
            logger.warning("Invalid tick delta %r treated as 0", delta)
            delta = 0.0

        self._updating = True
        try:
            if self._session.state is ScanState.SCANNING:
                self._advance_scan(delta)
            elif self._session.state is ScanState.GRACE_PERIOD:
                self._advance_grace(delta)
        finally:
            self._updating = False

    def reset(self) -> None:
        """세션 폐기 (새 게임). 이벤트 없음."""
        self._session = ScanSession()

    # === 내부 ===

    def _advance_scan(self, delta: float) -> None:
        session = self._session
        progress = session.progress + delta / session.required_time
        if progress >= 1.0 - _COMPLETE_EPSILON:
            progress = 1.0
        session.progress = progress
        self._emit(
            EventTypes.SCAN_PROGRESSED,
            {"uid": session.target_uid, "progress": session.progress},
        )

        if session.progress >= 1.0:
            uid = session.target_uid
            self._session = ScanSession()
            logger.info("Scan completed: %s", uid)
            self._emit(EventTypes.SCAN_COMPLETED, {"uid": uid})

    def _advance_grace(self, delta: float) -> None:
        session = self._session
        session.progress = max(0.0, session.progress - self._config.decay_rate * delta)
        session.grace_elapsed += delta

        if session.grace_elapsed >= self._config.grace_period:
            uid = session.target_uid
            progress = session.progress
            self._session = ScanSession()
            logger.info("Scan interrupted: %s (grace period expired)", uid)
            self._emit(EventTypes.GRACE_EXPIRED, {"uid": uid, "progress": progress})
            self._emit(
                EventTypes.SCAN_INTERRUPTED,
                {"uid": uid, "reason": InterruptReasons.GRACE_PERIOD_EXPIRED},
            )

    def _sanitize_scan_time(self, uid: str, scan_time: Any) -> float:
        """scan_time 검증. 0 이하/비정상 값은 min_scan_time으로 보정."""
        minimum = self._config.min_scan_time
        try:
            value = float(scan_time)
        except (TypeError, ValueError):
            logger.warning("Invalid scan_time %r for %s, using %.2fs", scan_time, uid, minimum)
            return minimum
        if not math.isfinite(value) or value < minimum:
            logger.warning(
                "scan_time %.3f for %s below minimum, clamped to %.2fs",
                value,
                uid,
                minimum,
            )
            return minimum
        return value

    def _emit(self, event_type: str, data: dict) -> None:
        self._bus.emit(GameEvent(event_type=event_type, data=data, source=SOURCE))
