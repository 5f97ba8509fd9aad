"""Audit record — an immutable log entry for a decision taken by the engine."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AuditRecord:
    ticket_id: int
    action: str
    timestamp: datetime
    meta: dict[str, Any] = field(default_factory=dict)
