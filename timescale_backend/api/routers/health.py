"""
Health Check Endpoints
Endpoints for health checks and status monitoring.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any
from fastapi import APIRouter, Depends, status
from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings, APISettings
from ..dependencies import get_db
from ...db.models import Result, Value

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """
    Basic health check.

    Returns:
        Simple health status
    """
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/status", status_code=status.HTTP_200_OK)
def status_check(
    settings: APISettings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    Detailed status check.

    Checks database connectivity and reports how many files are stored.

    Returns:
        Detailed status information
    """
    status_info = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.version,
        "components": {},
    }

    try:
        db.execute(text("SELECT 1"))
        status_info["components"]["database"] = {
            "status": "healthy",
            "dialect": db.get_bind().dialect.name,
        }
        status_info["components"]["storage"] = {
            "results": db.query(func.count(Result.id)).scalar(),
            "values": db.query(func.count(Value.id)).scalar(),
        }
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        status_info["status"] = "degraded"
        status_info["components"]["database"] = {"status": "unhealthy", "error": str(e)}

    return status_info
