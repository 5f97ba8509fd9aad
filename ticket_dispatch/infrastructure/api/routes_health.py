"""Health check endpoint — database connectivity and SLA scheduler state."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ticket_dispatch.infrastructure.api.dependencies import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _scheduler_state(request: Request) -> str:
    scheduler = getattr(request.app.state, "sla_scheduler", None)
    if scheduler is None:
        return "not started"
    return "running" if scheduler.running else "stopped"


@router.get("/health")
async def health_check(request: Request, session: AsyncSession = Depends(get_db_session)):
    """Report whether the database answers and the SLA scan is scheduled."""
    try:
        await session.execute(text("SELECT 1"))
        database = "connected"
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check could not reach the database: %s", e)
        database = "unreachable"

    return {
        "status": "ok" if database == "connected" else "degraded",
        "database": database,
        "sla_scheduler": _scheduler_state(request),
    }
