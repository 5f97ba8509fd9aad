"""SQLAlchemy repository implementations."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ticket_dispatch.adapters.persistence.models import (
    AgentModel,
    AssignmentRuleModel,
    SystemSettingModel,
    TicketAuditModel,
    TicketModel,
)
from ticket_dispatch.application.ports.audit_sink import AuditSink
from ticket_dispatch.application.ports.rule_repo import RuleRepository
from ticket_dispatch.application.ports.settings_store import SettingsStore
from ticket_dispatch.application.ports.ticket_repo import TicketRepository
from ticket_dispatch.domain.entities.agent import Agent
from ticket_dispatch.domain.entities.assignment_rule import AssignmentRule
from ticket_dispatch.domain.entities.audit_record import AuditRecord
from ticket_dispatch.domain.entities.ticket import Ticket
from ticket_dispatch.domain.errors import PersistenceError
from ticket_dispatch.domain.value_objects.criterion import from_optional
from ticket_dispatch.domain.value_objects.enums import Priority, TicketStatus

# ─── Mappers ─────────────────────────────────────────────────────────


def _agent_to_domain(m: AgentModel) -> Agent:
    return Agent(id=m.id, name=m.name, email=m.email, active=m.active)


def _ticket_to_domain(m: TicketModel) -> Ticket:
    return Ticket(
        id=m.id,
        subject=m.subject,
        priority=Priority(m.priority),
        status=TicketStatus(m.status),
        created_at=m.created_at,
        category_id=m.category_id,
        assigned_to=m.assigned_to,
        updated_at=m.updated_at,
        assigned_at=m.assigned_at,
        escalated_at=m.escalated_at,
    )


def _rule_to_domain(m: AssignmentRuleModel, agent: AgentModel | None) -> AssignmentRule:
    return AssignmentRule(
        id=m.id,
        assigned_to=m.assigned_to,
        position=m.position,
        priority=from_optional(Priority(m.priority) if m.priority else None),
        category=from_optional(m.category_id),
        active=m.active,
        assignee=_agent_to_domain(agent) if agent is not None else None,
    )


@contextmanager
def _storage_errors(action: str, **details: Any) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not {action}", {**details, "error": str(e)}) from e


# ─── Repositories ────────────────────────────────────────────────────


class SqlTicketRepository(TicketRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_by_id(self, ticket_id: int) -> Ticket | None:
        with _storage_errors("load ticket", ticket_id=ticket_id):
            m = await self._s.get(TicketModel, ticket_id)
        return _ticket_to_domain(m) if m else None

    async def get_for_update(self, ticket_id: int) -> Ticket | None:
        with _storage_errors("lock ticket", ticket_id=ticket_id):
            result = await self._s.execute(
                select(TicketModel)
                .where(TicketModel.id == ticket_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            m = result.scalar_one_or_none()
        return _ticket_to_domain(m) if m else None

    async def save(self, ticket: Ticket) -> Ticket:
        if ticket.id is None:
            return await self._insert(ticket)

        with _storage_errors("save ticket", ticket_id=ticket.id):
            result = await self._s.execute(
                update(TicketModel)
                .where(TicketModel.id == ticket.id)
                .values(
                    priority=ticket.priority.value,
                    status=ticket.status.value,
                    assigned_to=ticket.assigned_to,
                    updated_at=ticket.updated_at,
                    assigned_at=ticket.assigned_at,
                    escalated_at=ticket.escalated_at,
                )
            )
            await self._s.flush()
        if result.rowcount == 0:
            raise PersistenceError(f"Ticket {ticket.id} vanished during update", {"ticket_id": ticket.id})
        return ticket

    async def _insert(self, ticket: Ticket) -> Ticket:
        m = TicketModel(
            subject=ticket.subject,
            priority=ticket.priority.value,
            status=ticket.status.value,
            category_id=ticket.category_id,
            assigned_to=ticket.assigned_to,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            assigned_at=ticket.assigned_at,
            escalated_at=ticket.escalated_at,
        )
        with _storage_errors("create ticket"):
            self._s.add(m)
            await self._s.flush()
        ticket.id = m.id
        return ticket

    async def list_monitored_ids(
        self,
        statuses: tuple[TicketStatus, ...],
        after_id: int = 0,
        limit: int = 100,
    ) -> list[int]:
        with _storage_errors("list tickets"):
            result = await self._s.execute(
                select(TicketModel.id)
                .where(TicketModel.status.in_([s.value for s in statuses]))
                .where(TicketModel.id > after_id)
                .order_by(TicketModel.id)
                .limit(limit)
            )
            return list(result.scalars())


class SqlRuleRepository(RuleRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def list_active(self) -> list[AssignmentRule]:
        with _storage_errors("load assignment rules"):
            result = await self._s.execute(
                select(AssignmentRuleModel, AgentModel)
                .outerjoin(AgentModel, AgentModel.id == AssignmentRuleModel.assigned_to)
                .where(AssignmentRuleModel.active.is_(True))
                .order_by(AssignmentRuleModel.position, AssignmentRuleModel.id)
            )
            return [_rule_to_domain(rule, agent) for rule, agent in result.all()]


class SqlSettingsStore(SettingsStore):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get(self, key: str) -> Any | None:
        with _storage_errors("read setting", key=key):
            result = await self._s.execute(
                select(SystemSettingModel.value).where(SystemSettingModel.key == key)
            )
            return result.scalar_one_or_none()

    async def set(self, key: str, value: Any) -> None:
        with _storage_errors("write setting", key=key):
            result = await self._s.execute(
                select(SystemSettingModel).where(SystemSettingModel.key == key).with_for_update()
            )
            m = result.scalar_one_or_none()
            if m is None:
                self._s.add(SystemSettingModel(key=key, value=value))
            else:
                m.value = value
            await self._s.flush()


class SqlAuditSink(AuditSink):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def record(self, record: AuditRecord) -> None:
        with _storage_errors("write audit record", ticket_id=record.ticket_id):
            self._s.add(
                TicketAuditModel(
                    ticket_id=record.ticket_id,
                    action=record.action,
                    meta=dict(record.meta),
                    created_at=record.timestamp,
                )
            )
            await self._s.flush()
