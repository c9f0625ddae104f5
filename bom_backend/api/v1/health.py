"""
Health endpoint for the BOM dependency rules backend.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...core.db import get_db
from ...core.config import get_app_env
from ...core.errors import log_exception


router = APIRouter(prefix="/api/v1/health", tags=["health"])

_logger = logging.getLogger("health")


@router.get("")
def health(db: Session = Depends(get_db)) -> dict:
    database_ok = True
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        log_exception(_logger, "Database health check failed", exc=exc)
        database_ok = False
    return {
        "status": "ok" if database_ok else "degraded",
        "database": database_ok,
        "env": get_app_env(),
        "timestamp_utc": datetime.utcnow().isoformat() + "Z",
    }
