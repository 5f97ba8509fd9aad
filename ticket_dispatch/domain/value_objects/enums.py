"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TicketStatus(str, Enum):
    OPEN = "open"
    PENDING = "pending"
    RESOLVED = "resolved"
    CLOSED = "closed"


# Statuses the SLA monitor keeps an eye on
MONITORED_STATUSES: tuple[TicketStatus, ...] = (TicketStatus.OPEN, TicketStatus.PENDING)


class AuditAction(str, Enum):
    AUTO_ASSIGNED = "auto_assigned"
    SLA_ESCALATED = "sla_escalated"
    SLA_REASSIGNED = "sla_reassigned"
