# backend/app/api/health.py
import logging
import os
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.config import settings
from backend.app.database import get_database_stats, get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health(db: Session = Depends(get_db)):
    body = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.SERVICE_NAME,
        "site": settings.SITE_NAME,
        # presence only, never the values
        "config": {
            "database_url_set": bool(settings.DATABASE_URL or os.getenv("DATABASE_URL")),
            "cors_origins_set": bool(settings.CORS_ALLOW_ORIGINS),
            "assigned_from_distribution": settings.ASSIGNED_FROM_DISTRIBUTION,
        },
    }
    try:
        db.execute(text("SELECT 1"))
        body["database"] = {"reachable": True, "counts": get_database_stats(db)}
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Health check: database unreachable: %s", e)
        body["status"] = "degraded"
        body["database"] = {"reachable": False}
        return JSONResponse(status_code=503, content=body)
    return body
