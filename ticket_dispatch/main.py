"""Ticket Dispatch — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ticket_dispatch.adapters.persistence.database import engine
from ticket_dispatch.config import settings
from ticket_dispatch.infrastructure import container
from ticket_dispatch.infrastructure.api.routes_health import router as health_router
from ticket_dispatch.infrastructure.api.routes_sla import router as sla_router
from ticket_dispatch.infrastructure.api.routes_tickets import router as tickets_router
from ticket_dispatch.infrastructure.scheduler import SlaScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except Exception as e:
        logger.warning("Database not available on startup: %s", e)

    scheduler = SlaScheduler(settings.sla_monitor_interval_seconds)
    if settings.sla_monitor_enabled:
        scheduler.start(container.run_scheduled_tick)
    app.state.sla_scheduler = scheduler

    yield

    scheduler.stop()
    await container.notifications.drain()
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Ticket Dispatch",
        description="Rule-based support ticket assignment and SLA escalation",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(health_router, prefix="/api")
    app.include_router(tickets_router, prefix="/api")
    app.include_router(sla_router, prefix="/api")

    return app


app = create_app()
