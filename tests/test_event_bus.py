"""EventBus 테스트"""

from src.core.event_bus import EventBus, GameEvent, MAX_DEPTH


class TestSubscribeEmit:
    def test_basic_emit(self):
        bus = EventBus()
        received = []
        bus.subscribe("scan_completed", lambda e: received.append(e))
        bus.emit(
            GameEvent(event_type="scan_completed", data={"uid": "rock_01"}, source="test")
        )
        assert len(received) == 1
        assert received[0].data["uid"] == "rock_01"

    def test_multiple_handlers_in_order(self):
        bus = EventBus()
        results = []
        bus.subscribe("evt", lambda e: results.append("a"))
        bus.subscribe("evt", lambda e: results.append("b"))
        bus.emit(GameEvent(event_type="evt", data={}, source="test"))
        assert results == ["a", "b"]

    def test_no_handlers(self):
        """구독자 없는 이벤트 발행: 에러 없이 무시"""
        bus = EventBus()
        bus.emit(GameEvent(event_type="no_one_listens", data={}, source="test"))
        assert bus.emitted_in_chain == 1

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        handler = lambda e: received.append(e)  # noqa: E731
        bus.subscribe("evt", handler)
        bus.unsubscribe("evt", handler)
        bus.emit(GameEvent(event_type="evt", data={}, source="test"))
        assert len(received) == 0

    def test_unsubscribe_nonexistent(self):
        """미등록 핸들러 해제: 경고만, 에러 없음"""
        bus = EventBus()
        bus.subscribe("evt", lambda e: None)
        bus.unsubscribe("evt", lambda e: None)
        assert bus.handler_count == 1

    def test_unsubscribe_during_emit(self):
        """핸들러가 발행 도중 자기 자신을 해제해도 나머지 핸들러는 호출된다"""
        bus = EventBus()
        results = []

        def once(e):
            results.append("once")
            bus.unsubscribe("evt", once)

        bus.subscribe("evt", once)
        bus.subscribe("evt", lambda e: results.append("always"))
        bus.emit(GameEvent(event_type="evt", data={}, source="test"))
        bus.emit(GameEvent(event_type="evt", data={}, source="test"))
        assert results == ["once", "always", "always"]


class TestDepthLimit:
    def test_max_depth_prevents_infinite_loop(self):
        bus = EventBus()
        call_count = 0

        def recursive_handler(event: GameEvent):
            nonlocal call_count
            call_count += 1
            bus.emit(GameEvent(event_type="chain", data={}, source="handler"))

        bus.subscribe("chain", recursive_handler)
        bus.emit(GameEvent(event_type="chain", data={}, source="origin"))

        # MAX_DEPTH(5)까지만 전파
        assert call_count == MAX_DEPTH


class TestRepeatedEvents:
    def test_same_source_same_event_allowed(self):
        """매 프레임 scan_progressed처럼 같은 이벤트 반복 발행 허용"""
        bus = EventBus()
        received = []
        bus.subscribe("scan_progressed", lambda e: received.append(e.data["progress"]))
        for progress in (0.25, 0.5, 0.75):
            bus.emit(
                GameEvent(
                    event_type="scan_progressed",
                    data={"progress": progress},
                    source="scan_state_machine",
                )
            )
        assert received == [0.25, 0.5, 0.75]


class TestResetChain:
    def test_reset_clears_counter(self):
        bus = EventBus()
        bus.emit(GameEvent(event_type="re", data={}, source="s"))
        bus.emit(GameEvent(event_type="re", data={}, source="s"))
        assert bus.emitted_in_chain == 2
        bus.reset_chain()
        assert bus.emitted_in_chain == 0


class TestHandlerError:
    def test_handler_exception_doesnt_stop_others(self):
        bus = EventBus()
        results = []

        def bad_handler(e):
            raise ValueError("boom")

        def good_handler(e):
            results.append("ok")

        bus.subscribe("evt", bad_handler)
        bus.subscribe("evt", good_handler)
        bus.emit(GameEvent(event_type="evt", data={}, source="test"))
        assert results == ["ok"]


class TestClear:
    def test_clear_removes_all(self):
        bus = EventBus()
        bus.subscribe("a", lambda e: None)
        bus.subscribe("b", lambda e: None)
        assert bus.handler_count == 2
        bus.clear()
        assert bus.handler_count == 0
