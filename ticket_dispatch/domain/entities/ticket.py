"""Ticket entity — a support request tracked through open/pending/closed states."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ticket_dispatch.domain.value_objects.enums import (
    MONITORED_STATUSES,
    Priority,
    TicketStatus,
)


@dataclass
class Ticket:
    id: int | None
    subject: str
    priority: Priority
    status: TicketStatus
    created_at: datetime
    category_id: int | None = None
    assigned_to: int | None = None
    updated_at: datetime | None = None
    assigned_at: datetime | None = None
    escalated_at: datetime | None = None

    def is_assigned(self) -> bool:
        return self.assigned_to is not None

    def is_monitored(self) -> bool:
        return self.status in MONITORED_STATUSES

    def escalation_baseline(self) -> datetime:
        """Repeated escalations are measured from the previous one."""
        return self.escalated_at or self.created_at

    def assignment_baseline(self) -> datetime:
        return self.assigned_at or self.created_at
