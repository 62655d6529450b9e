"""아이템 카탈로그 - 시작 시 JSON 로드, 이후 불변 조회 테이블"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Iterable, Optional

from .models import ItemDefinition, Rarity

logger = logging.getLogger(__name__)

DEFAULT_MIN_SCAN_TIME = 0.1


class CatalogError(ValueError):
    """카탈로그 불변식 위반 (예: uid 중복). 초기화를 중단시킨다."""


def build_definition(
    raw: dict[str, Any], min_scan_time: float = DEFAULT_MIN_SCAN_TIME
) -> ItemDefinition:
    """raw dict → ItemDefinition.

    scan_time이 0 이하이거나 유한하지 않으면 경고 후 min_scan_time으로 보정한다.
    biome_affinity 문자열 하나는 단일 바이옴 목록으로 감싼다.
    필수 키 누락/잘못된 rarity는 KeyError/ValueError로 올린다.
    """
    uid = str(raw["uid"]).strip()
    if not uid:
        raise ValueError("empty uid")

    scan_time = float(raw["scan_time"])
    if not (math.isfinite(scan_time) and scan_time > 0):
        logger.warning(
            "Item %s has invalid scan_time %s, clamped to %.2fs",
            uid,
            scan_time,
            min_scan_time,
        )
        scan_time = min_scan_time

    unlock_threshold = int(raw.get("unlock_threshold", 0))
    if unlock_threshold < 0:
        logger.warning("Item %s has negative unlock_threshold, using 0", uid)
        unlock_threshold = 0

    biome_affinity = raw.get("biome_affinity", [])
    if isinstance(biome_affinity, str):
        # 단일 바이옴 문자열을 글자 단위로 쪼개지 않도록 감싼다
        logger.warning("Item %s has string biome_affinity, wrapping as list", uid)
        biome_affinity = [biome_affinity]
    if not all(isinstance(b, str) and b for b in biome_affinity):
        raise ValueError(f"invalid biome_affinity {biome_affinity!r}")

    return ItemDefinition(
        uid=uid,
        display_name=raw.get("display_name", uid),
        rarity=Rarity(raw["rarity"]),
        scan_time=scan_time,
        biome_affinity=frozenset(biome_affinity),
        unlock_threshold=unlock_threshold,
        description=raw.get("description", ""),
        tags=tuple(raw.get("tags", [])),
    )


class ItemCatalog:
    """
    스캔 대상 아이템 정의 저장소.
    초기화 시 한 번 로드하고, 이후에는 uid 기반 조회만 한다.
    """

    def __init__(
        self,
        definitions: Iterable[ItemDefinition] = (),
        min_scan_time: float = DEFAULT_MIN_SCAN_TIME,
    ) -> None:
        self._items: dict[str, ItemDefinition] = {}
        self._min_scan_time = min_scan_time
        for definition in definitions:
            self.register(definition)

    def load_from_json(self, path: str | Path) -> int:
        """seed_scannables.json 로드. 반환: 로드된 수량.

        잘못된 항목은 경고 로그 후 건너뛴다.
        uid 중복은 CatalogError로 초기화를 중단한다.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list = json.load(f)

        if not isinstance(raw_list, list):
            logger.error("Item catalog %s is not a JSON array, nothing loaded", path)
            return 0

        count = 0
        for raw in raw_list:
            if not isinstance(raw, dict):
                logger.warning("Skipping non-object item definition: %r", raw)
                continue
            try:
                definition = build_definition(raw, self._min_scan_time)
            except (KeyError, ValueError, TypeError, OverflowError) as e:
                logger.warning(
                    "Failed to load item definition: %s: %s", raw.get("uid", "?"), e
                )
                continue
            self.register(definition)
            count += 1

        logger.info("Loaded %d item definitions from %s", count, path)
        return count

    def register(self, definition: ItemDefinition) -> None:
        """정의 등록. 이미 존재하는 uid면 CatalogError."""
        if definition.uid in self._items:
            raise CatalogError(f"Duplicate item uid in catalog: {definition.uid}")
        self._items[definition.uid] = definition

    def get(self, uid: str) -> Optional[ItemDefinition]:
        """O(1) 조회. 없으면 None."""
        return self._items.get(uid)

    def __contains__(self, uid: object) -> bool:
        return uid in self._items

    def get_all(self) -> list[ItemDefinition]:
        return list(self._items.values())

    def get_by_biome(self, biome: str) -> list[ItemDefinition]:
        """biome_affinity에 biome이 포함된 정의 반환."""
        return [d for d in self._items.values() if d.belongs_to(biome)]

    def get_by_rarity(self, rarity: Rarity) -> list[ItemDefinition]:
        return [d for d in self._items.values() if d.rarity is rarity]

    def biomes(self) -> set[str]:
        """카탈로그에 등장하는 모든 바이옴 이름."""
        names: set[str] = set()
        for d in self._items.values():
            names |= d.biome_affinity
        return names

    def count(self) -> int:
        return len(self._items)
