"""Port interface for a transactional unit of work.

One unit of work wraps one database transaction.  Ticket writes and the
audit records that describe them go through the same unit, so they are
committed or rolled back together.

Usage:
    async with uow_factory() as uow:
        ticket = await uow.tickets.get_for_update(ticket_id)
        ...
        await uow.commit()

Leaving the block without ``commit()`` (or with an exception) rolls back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from ticket_dispatch.application.ports.audit_sink import AuditSink
from ticket_dispatch.application.ports.rule_repo import RuleRepository
from ticket_dispatch.application.ports.settings_store import SettingsStore
from ticket_dispatch.application.ports.ticket_repo import TicketRepository


class UnitOfWork(ABC):
    tickets: TicketRepository
    rules: RuleRepository
    settings: SettingsStore
    audit: AuditSink

    async def __aenter__(self) -> UnitOfWork:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...


UnitOfWorkFactory = Callable[[], UnitOfWork]
