"""Ticket endpoints — immediate assignment on ticket creation/update."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ticket_dispatch.application.use_cases.assign_ticket import (
    AssignmentEngine,
    AssignmentResult,
    AssignOptions,
)
from ticket_dispatch.domain.errors import PersistenceError, ValidationError
from ticket_dispatch.domain.value_objects.enums import AuditAction
from ticket_dispatch.infrastructure.api.dependencies import get_assignment_engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tickets", tags=["tickets"])


class AssignRequest(BaseModel):
    exclude: list[int] = Field(default_factory=list)
    reason: str = AuditAction.AUTO_ASSIGNED.value
    meta: dict[str, Any] = Field(default_factory=dict)


@router.post("/{ticket_id}/assign")
async def assign_ticket(
    ticket_id: int,
    body: AssignRequest | None = None,
    engine: AssignmentEngine = Depends(get_assignment_engine),
):
    """Run the assignment rules for one ticket."""
    body = body or AssignRequest()
    try:
        options = AssignOptions.build(exclude=body.exclude, reason=body.reason, meta=body.meta)
        result = await engine.assign(ticket_id, options)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except PersistenceError:
        logger.exception("Could not assign ticket %s", ticket_id)
        raise HTTPException(status_code=503, detail="Could not assign ticket")

    return {"status": "ok", "ticket_id": ticket_id, **_result_to_dict(result)}


def _result_to_dict(r: AssignmentResult) -> dict:
    return {
        "changed": r.changed,
        "agent": r.agent,
        "reason": r.reason,
        "rule_id": r.rule_id,
        "previous_assignee": r.previous_assignee,
    }
