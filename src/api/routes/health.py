"""
Health check API route
"""

import asyncio
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends

from models.student import HealthResponse
from services.students_service import StudentsService, get_students_service
from utils.errors import StudentServiceError

router = APIRouter()
logger = logging.getLogger(__name__)

DB_PING_TIMEOUT_SECONDS = 2


@router.get("/health", response_model=HealthResponse)
async def health_check(
    students_service: StudentsService = Depends(get_students_service)
):
    """
    Liveness probe - always reports healthy

    Database connectivity is reported for monitoring only and never
    changes the status code, so an unreachable store doesn't get the
    container restarted.
    """
    try:
        reachable = await asyncio.wait_for(students_service.ping(), timeout=DB_PING_TIMEOUT_SECONDS)
        database = "connected" if reachable else "unavailable"
    except (StudentServiceError, asyncio.TimeoutError) as e:
        logger.warning(f"Health check could not reach the database: {e}")
        database = "unavailable"

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc),
        "database": database
    }
