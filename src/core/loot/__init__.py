"""루트 스폰 Core - 순수 Python, DB 무관"""

from .pity import PityCounter
from .spawner import LootRoll, LootSpawnEngine
from .tables import RARITY_POINT_COSTS, LootConfig, point_cost

__all__ = [
    "PityCounter",
    "LootRoll",
    "LootSpawnEngine",
    "RARITY_POINT_COSTS",
    "LootConfig",
    "point_cost",
]
