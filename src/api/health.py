"""Health check endpoint."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.logging import get_logger
from src.db.database import get_db

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(request: Request, db: Session = Depends(get_db)) -> dict[str, str]:
    """Return application, database and discovery core status."""
    engine = getattr(request.app.state, "engine", None)
    core_status = "ready" if engine is not None else "uninitialized"
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected", "core": core_status}
    except SQLAlchemyError:
        logger.exception("Health check database query failed")
        return {"status": "error", "database": "disconnected", "core": core_status}
