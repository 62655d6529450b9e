"""Discovery Core"""
__version__ = "0.1.0"

from src.core.catalog import ItemCatalog, ItemDefinition, Rarity
from src.core.discovery import DiscoveryLedger, ScanRecord, compute_tier
from src.core.engine import DiscoveryEngine
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.loot import LootConfig, LootSpawnEngine
from src.core.progression import GateRegistry, ProgressionGate, ProgressionGateEvaluator
from src.core.scan import ScanConfig, ScanState, ScanStateMachine

__all__ = [
    "ItemCatalog",
    "ItemDefinition",
    "Rarity",
    "DiscoveryLedger",
    "ScanRecord",
    "compute_tier",
    "DiscoveryEngine",
    "EventBus",
    "GameEvent",
    "EventTypes",
    "LootConfig",
    "LootSpawnEngine",
    "GateRegistry",
    "ProgressionGate",
    "ProgressionGateEvaluator",
    "ScanConfig",
    "ScanState",
    "ScanStateMachine",
]
