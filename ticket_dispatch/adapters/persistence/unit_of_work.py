"""SQLAlchemy unit of work — one session and one transaction per block."""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ticket_dispatch.adapters.persistence.repositories import (
    SqlAuditSink,
    SqlRuleRepository,
    SqlSettingsStore,
    SqlTicketRepository,
)
from ticket_dispatch.application.ports.unit_of_work import UnitOfWork
from ticket_dispatch.domain.errors import PersistenceError


class SqlUnitOfWork(UnitOfWork):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> SqlUnitOfWork:
        self._session = self._session_factory()
        self.tickets = SqlTicketRepository(self._session)
        self.rules = SqlRuleRepository(self._session)
        self.settings = SqlSettingsStore(self._session)
        self.audit = SqlAuditSink(self._session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await self.rollback()
        finally:
            await self._session.close()
            self._session = None

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise PersistenceError("Could not commit transaction", {"error": str(e)}) from e

    async def rollback(self) -> None:
        await self._session.rollback()


def sql_uow_factory(session_factory: async_sessionmaker[AsyncSession]):
    """Bind a session factory into a zero-argument UnitOfWork factory."""

    def factory() -> SqlUnitOfWork:
        return SqlUnitOfWork(session_factory)

    return factory
