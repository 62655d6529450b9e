"""세이브 Service - DiscoveryEngine 스냅샷 ↔ DB 연결

엔진은 평면 dict만 주고받는다. 이 서비스가 그 문서를
save_slots 테이블의 JSON 컬럼에 저장/복원한다.
"""

from datetime import datetime

from sqlalchemy.orm import Session

from src.core.engine import DiscoveryEngine
from src.core.logging import get_logger
from src.db.models import SaveSlotModel

logger = get_logger(__name__)


class SaveService:
    """세이브 슬롯 CRUD"""

    def __init__(self, db: Session, engine: DiscoveryEngine):
        self._db = db
        self._engine = engine

    def save(self, slot_id: str) -> SaveSlotModel:
        """현재 엔진 상태를 슬롯에 저장 (upsert)."""
        document = self._engine.snapshot()
        now = datetime.utcnow()

        row = self._db.get(SaveSlotModel, slot_id)
        if row is None:
            row = SaveSlotModel(slot_id=slot_id, document=document, created_at=now)
            self._db.add(row)
        else:
            row.document = document

        row.format_version = document.get("version", 1)
        row.total_scans = document["ledger"]["total_scans"]
        row.current_biome = document.get("current_biome")
        row.updated_at = now
        self._db.commit()

        logger.info(
            "Saved slot %s (total_scans=%d, biome=%s)",
            slot_id,
            row.total_scans,
            row.current_biome,
        )
        return row

    def load(self, slot_id: str) -> bool:
        """슬롯 복원. 슬롯이 없으면 False. 손상 문서는 기본값으로 복원."""
        row = self._db.get(SaveSlotModel, slot_id)
        if row is None:
            logger.info("Save slot %s not found", slot_id)
            return False

        self._engine.restore(row.document)
        logger.info("Loaded slot %s", slot_id)
        return True

    def list_slots(self) -> list[SaveSlotModel]:
        return (
            self._db.query(SaveSlotModel)
            .order_by(SaveSlotModel.updated_at.desc())
            .all()
        )

    def delete(self, slot_id: str) -> bool:
        deleted = (
            self._db.query(SaveSlotModel)
            .filter(SaveSlotModel.slot_id == slot_id)
            .delete()
        )
        self._db.commit()
        return deleted > 0
