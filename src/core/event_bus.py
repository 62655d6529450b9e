"""EventBus - 코어 컴포넌트와 표현 계층 간 이벤트 통신 인프라

규칙:
- 코어 컴포넌트는 구독자 존재 여부에 의존하지 않는다
- 이벤트는 식별자(uid, biome 이름)와 원시 값만 전달한다
- 전파 깊이 최대 MAX_DEPTH 단계 (핸들러 안에서의 재발행 포함)
- 프레임(tick) 종료 시 reset_chain()으로 추적 초기화
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Any
from collections import defaultdict

from src.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # 한 프레임 내 이벤트 전파 최대 깊이


@dataclass
class GameEvent:
    """이벤트 데이터 컨테이너

    Args:
        event_type: 이벤트 유형 (예: "scan_completed", "biome_unlocked")
        data: 이벤트 데이터 (ID 위주, 무거운 객체 금지)
        source: 발행한 컴포넌트 이름
    """

    event_type: str
    data: Dict[str, Any]
    source: str

    # 내부 추적용 (외부에서 설정하지 않음)
    _depth: int = field(default=0, repr=False)


# 핸들러 타입: GameEvent를 받는 callable
EventHandler = Callable[[GameEvent], None]


class EventBus:
    """동기식 이벤트 버스

    사용 패턴:
        bus = EventBus()
        bus.subscribe("scan_completed", ledger_handler)
        bus.emit(GameEvent(event_type="scan_completed", data={"uid": "rock_01"}, source="scan"))
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._current_depth: int = 0
        self._emitted_count: int = 0  # 현재 체인에서 발행된 이벤트 수

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """이벤트 구독 등록"""
        self._handlers[event_type].append(handler)
        logger.debug(f"EventBus 구독: {event_type} → {handler.__qualname__}")

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        """이벤트 구독 해제"""
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(
                    f"EventBus 구독 해제: {event_type} → {handler.__qualname__}"
                )
            except ValueError:
                logger.warning(f"핸들러 미등록: {event_type} → {handler.__qualname__}")

    def emit(self, event: GameEvent) -> None:
        """이벤트 발행. 등록된 핸들러를 동기 호출.

        전파 깊이가 MAX_DEPTH 이상이면 발행을 무시한다.
        scan_progressed처럼 매 프레임 반복되는 이벤트가 있으므로
        같은 source의 같은 event_type 재발행은 허용한다.
        """
        if self._current_depth >= MAX_DEPTH:
            logger.warning(
                f"EventBus 전파 깊이 초과 ({MAX_DEPTH}): "
                f"{event.source}:{event.event_type} 무시됨"
            )
            return

        event._depth = self._current_depth
        self._emitted_count += 1

        handlers = list(self._handlers.get(event.event_type, []))
        if not handlers:
            return

        logger.debug(
            f"EventBus 전파: {event.event_type} (source={event.source}, "
            f"depth={self._current_depth}, handlers={len(handlers)})"
        )

        self._current_depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        f"EventBus 핸들러 에러: {handler.__qualname__} "
                        f"(event={event.event_type})"
                    )
        finally:
            self._current_depth -= 1

    def reset_chain(self) -> None:
        """프레임 종료 시 호출. 체인 추적 초기화."""
        self._emitted_count = 0
        self._current_depth = 0

    def clear(self) -> None:
        """모든 구독 해제 (테스트용)"""
        self._handlers.clear()
        self.reset_chain()

    @property
    def handler_count(self) -> int:
        """등록된 총 핸들러 수"""
        return sum(len(h) for h in self._handlers.values())

    @property
    def emitted_in_chain(self) -> int:
        """마지막 reset_chain() 이후 발행된 이벤트 수"""
        return self._emitted_count
