"""SLA endpoints — effective configuration, overrides and manual scans."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from ticket_dispatch.application.use_cases.monitor_slas import SlaMonitor
from ticket_dispatch.application.use_cases.resolve_sla import SlaConfigurationResolver
from ticket_dispatch.domain.errors import PersistenceError, ValidationError
from ticket_dispatch.infrastructure.api.dependencies import get_sla_monitor, get_sla_resolver

router = APIRouter(prefix="/sla", tags=["sla"])


@router.get("/config")
async def get_config(resolver: SlaConfigurationResolver = Depends(get_sla_resolver)):
    """Effective thresholds plus the raw administrator override."""
    config = await resolver.resolve()
    return {
        "effective": config.to_dict(),
        "overrides": await resolver.overrides(),
        "issues": config.issues,
    }


@router.put("/config")
async def update_config(
    payload: dict[str, Any],
    resolver: SlaConfigurationResolver = Depends(get_sla_resolver),
):
    """Replace the administrator override stored under ``support.sla``."""
    try:
        config = await resolver.update(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"message": e.message, **e.details})
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=e.message)
    return {"status": "ok", "effective": config.to_dict(), "issues": config.issues}


@router.post("/tick")
async def run_tick(monitor: SlaMonitor = Depends(get_sla_monitor)):
    """Run one SLA scan now instead of waiting for the scheduler."""
    report = await monitor.tick()
    return {"status": "ok" if report.ok else "degraded", **report.summary()}
