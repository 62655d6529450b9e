"""SQLAlchemy declarative base for all ORM models."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all database models."""


class SaveSlotModel(Base):
    """ORM model for save slots.

    document는 DiscoveryEngine.snapshot()의 평면 dict를 그대로 저장한다.
    """

    __tablename__ = "save_slots"

    slot_id: Mapped[str] = mapped_column(String, primary_key=True)
    document: Mapped[dict] = mapped_column(JSON, nullable=False)
    format_version: Mapped[int] = mapped_column(Integer, default=1)
    total_scans: Mapped[int] = mapped_column(Integer, default=0)
    current_biome: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
