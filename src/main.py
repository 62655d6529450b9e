"""FastAPI application entrypoint."""

import threading
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.exploration import router as exploration_router
from src.api.health import router as health_router
from src.config import settings
from src.core.engine import DiscoveryEngine
from src.core.event_bus import EventBus
from src.core.logging import get_logger, setup_logging
from src.db.database import SessionLocal, init_db
from src.services.save_service import SaveService

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    # DB 테이블 생성
    logger.info("Creating database tables...")
    init_db()
    logger.info("Database tables created.")

    # 코어 엔진 초기화 (프로세스당 1회)
    logger.info("Initializing discovery core...")
    event_bus = EventBus()
    engine = DiscoveryEngine.from_settings(settings, event_bus=event_bus)
    app.state.event_bus = event_bus
    app.state.engine = engine
    app.state.engine_lock = threading.Lock()

    # SaveService 초기화
    db_session = SessionLocal()
    app.state.save_service = SaveService(db_session, engine)
    logger.info("SaveService initialized.")

    yield

    # 종료 시 정리
    logger.info("Shutting down...")
    db_session.close()
    app.state.engine = None


app = FastAPI(title="Discovery Core", lifespan=lifespan)

app.include_router(health_router)
app.include_router(exploration_router)
