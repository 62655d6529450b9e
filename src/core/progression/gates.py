"""진행 게이트 저장소 - JSON 로드"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from .models import ProgressionGate

logger = logging.getLogger(__name__)


class GateRegistry:
    """바이옴 이름 → ProgressionGate"""

    def __init__(self, gates: Iterable[ProgressionGate] = ()) -> None:
        self._gates: dict[str, ProgressionGate] = {}
        for gate in gates:
            self.register(gate)

    def load_from_json(self, path: str | Path) -> int:
        """biome_gates.json 로드. 반환: 로드된 수량.

        음수 요구치나 누락 키가 있는 항목은 경고 후 건너뛴다.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list = json.load(f)

        if not isinstance(raw_list, list):
            logger.error("Progression gates %s is not a JSON array, nothing loaded", path)
            return 0

        count = 0
        for raw in raw_list:
            if not isinstance(raw, dict):
                logger.warning("Skipping non-object progression gate: %r", raw)
                continue
            try:
                gate = ProgressionGate(
                    biome=str(raw["biome"]),
                    total_scans_required=int(raw["total_scans_required"]),
                    unique_items_required=int(raw["unique_items_required"]),
                    tier3_required=int(raw["tier3_required"]),
                    unlocks_biome=raw.get("unlocks_biome") or None,
                )
                if min(
                    gate.total_scans_required,
                    gate.unique_items_required,
                    gate.tier3_required,
                ) < 0:
                    raise ValueError("negative requirement")
            except (KeyError, ValueError, TypeError, OverflowError) as e:
                logger.warning(
                    "Failed to load progression gate: %s: %s", raw.get("biome", "?"), e
                )
                continue
            self.register(gate)
            count += 1

        logger.info("Loaded %d progression gates from %s", count, path)
        return count

    def register(self, gate: ProgressionGate) -> None:
        if gate.biome in self._gates:
            logger.warning("Overwriting existing gate: %s", gate.biome)
        self._gates[gate.biome] = gate

    def get(self, biome: str) -> Optional[ProgressionGate]:
        return self._gates.get(biome)

    def get_all(self) -> list[ProgressionGate]:
        return list(self._gates.values())

    def count(self) -> int:
        return len(self._gates)
