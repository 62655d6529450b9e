"""이벤트 유형 상수

표현 계층(UI, 대화, 사운드)은 이 문자열로 EventBus를 구독한다.
"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # scan state machine
    TARGET_ACQUIRED = "target_acquired"
    TARGET_LOST = "target_lost"
    SCAN_STARTED = "scan_started"
    SCAN_PROGRESSED = "scan_progressed"
    SCAN_COMPLETED = "scan_completed"
    SCAN_INTERRUPTED = "scan_interrupted"
    GRACE_STARTED = "grace_started"
    GRACE_EXPIRED = "grace_expired"

    # discovery ledger
    ITEM_DISCOVERED = "item_discovered"
    SCAN_RECORDED = "scan_recorded"
    TIER_ADVANCED = "tier_advanced"

    # loot spawn
    LEGENDARY_SPAWNED = "legendary_spawned"
    PITY_UPDATED = "pity_updated"
    LOOT_GENERATED = "loot_generated"
    LOOT_POOL_EMPTY = "loot_pool_empty"

    # progression
    BIOME_UNLOCKED = "biome_unlocked"
    BIOME_ACTIVATED = "biome_activated"


class InterruptReasons:
    """scan_interrupted 이벤트의 reason 값"""

    GRACE_PERIOD_EXPIRED = "grace_period_expired"
    TARGET_SWITCHED = "target_switched"
