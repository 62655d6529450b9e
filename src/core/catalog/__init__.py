"""아이템 카탈로그 Core - 순수 Python, DB 무관"""

from .models import RARITY_ORDER, ItemDefinition, Rarity
from .registry import CatalogError, ItemCatalog, build_definition

__all__ = [
    "RARITY_ORDER",
    "ItemDefinition",
    "Rarity",
    "CatalogError",
    "ItemCatalog",
    "build_definition",
]
