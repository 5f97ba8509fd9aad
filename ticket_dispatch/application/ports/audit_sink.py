"""Port interface for the append-only audit trail."""

from abc import ABC, abstractmethod

from ticket_dispatch.domain.entities.audit_record import AuditRecord


class AuditSink(ABC):
    @abstractmethod
    async def record(self, record: AuditRecord) -> None:
        """Append *record*; audit records are never updated or deleted."""
        ...
