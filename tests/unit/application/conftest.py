"""In-memory fakes for the application ports, exposed as fixtures."""

from __future__ import annotations

import asyncio
import copy
import dataclasses
from datetime import datetime, timedelta, timezone

import pytest

from ticket_dispatch.application.ports.alert_port import OperationsAlertPort
from ticket_dispatch.application.ports.audit_sink import AuditSink
from ticket_dispatch.application.ports.notifier_port import NotificationPort
from ticket_dispatch.application.ports.rule_repo import RuleRepository
from ticket_dispatch.application.ports.settings_store import SettingsStore
from ticket_dispatch.application.ports.ticket_repo import TicketRepository
from ticket_dispatch.application.ports.unit_of_work import UnitOfWork
from ticket_dispatch.domain.entities.agent import Agent
from ticket_dispatch.domain.entities.assignment_rule import AssignmentRule
from ticket_dispatch.domain.entities.audit_record import AuditRecord
from ticket_dispatch.domain.entities.ticket import Ticket
from ticket_dispatch.domain.errors import PersistenceError
from ticket_dispatch.domain.value_objects.criterion import from_optional
from ticket_dispatch.domain.value_objects.enums import Priority, TicketStatus

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)

# ─── In-memory fakes ────────────────────────────────────────────────


class InMemoryStore:
    """Committed state shared by every unit of work of one test."""

    def __init__(self):
        self.agents: dict[int, Agent] = {}
        self.tickets: dict[int, Ticket] = {}
        self.rules: list[AssignmentRule] = []
        self.settings: dict[str, object] = {}
        self.audits: list[AuditRecord] = []
        self.locks: dict[int, asyncio.Lock] = {}
        self.fail_save_for: set[int] = set()
        self.fail_audit = False
        self.fail_settings_read = False
        self.fail_listing = False
        self.commits = 0

    # Test helpers

    def add_agent(self, agent_id: int, active: bool = True) -> Agent:
        agent = Agent(id=agent_id, name=f"Agent {agent_id}", active=active)
        self.agents[agent_id] = agent
        return agent

    def add_rule(
        self,
        assigned_to: int,
        priority: Priority | None = None,
        position: int = 0,
        category_id: int | None = None,
        active: bool = True,
    ) -> AssignmentRule:
        rule = AssignmentRule(
            id=len(self.rules) + 1,
            assigned_to=assigned_to,
            position=position,
            priority=from_optional(priority),
            category=from_optional(category_id),
            active=active,
        )
        self.rules.append(rule)
        return rule

    def add_ticket(
        self,
        priority: Priority = Priority.MEDIUM,
        status: TicketStatus = TicketStatus.OPEN,
        age: timedelta = timedelta(0),
        assigned_to: int | None = None,
        assigned_ago: timedelta | None = None,
        category_id: int | None = None,
    ) -> Ticket:
        ticket_id = len(self.tickets) + 1
        ticket = Ticket(
            id=ticket_id,
            subject=f"Ticket {ticket_id}",
            priority=priority,
            status=status,
            created_at=NOW - age,
            category_id=category_id,
            assigned_to=assigned_to,
            assigned_at=NOW - assigned_ago if assigned_ago is not None else None,
        )
        self.tickets[ticket_id] = dataclasses.replace(ticket)
        return ticket

    def actions(self, ticket_id: int | None = None) -> list[str]:
        return [a.action for a in self.audits if ticket_id is None or a.ticket_id == ticket_id]


class FakeTicketRepo(TicketRepository):
    def __init__(self, uow: FakeUnitOfWork):
        self._uow = uow
        self._store = uow.store

    async def get_by_id(self, ticket_id):
        ticket = self._store.tickets.get(ticket_id)
        return dataclasses.replace(ticket) if ticket else None

    async def get_for_update(self, ticket_id):
        lock = self._store.locks.setdefault(ticket_id, asyncio.Lock())
        await lock.acquire()
        self._uow.held_locks.append(lock)
        return await self.get_by_id(ticket_id)

    async def save(self, ticket):
        # Yield so concurrent callers interleave the way they would on a real database
        await asyncio.sleep(0)
        if ticket.id in self._store.fail_save_for:
            raise PersistenceError(f"Could not save ticket {ticket.id}")
        self._uow.staged_tickets[ticket.id] = dataclasses.replace(ticket)
        return ticket

    async def list_monitored_ids(self, statuses, after_id=0, limit=100):
        if self._store.fail_listing:
            raise PersistenceError("Could not list tickets")
        ids = sorted(
            t.id for t in self._store.tickets.values()
            if t.status in statuses and t.id > after_id
        )
        return ids[:limit]


class FakeRuleRepo(RuleRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def list_active(self):
        rules = []
        for rule in sorted(self._store.rules, key=lambda r: (r.position, r.id)):
            if not rule.active:
                continue
            rules.append(dataclasses.replace(rule, assignee=self._store.agents.get(rule.assigned_to)))
        return rules


class FakeSettingsStore(SettingsStore):
    def __init__(self, uow: FakeUnitOfWork):
        self._uow = uow
        self._store = uow.store

    async def get(self, key):
        if self._store.fail_settings_read:
            raise PersistenceError("Could not read setting", {"key": key})
        return copy.deepcopy(self._store.settings.get(key))

    async def set(self, key, value):
        self._uow.staged_settings[key] = copy.deepcopy(value)


class FakeAuditSink(AuditSink):
    def __init__(self, uow: FakeUnitOfWork):
        self._uow = uow

    async def record(self, record):
        if self._uow.store.fail_audit:
            raise PersistenceError("Could not write audit record")
        self._uow.staged_audits.append(record)


class FakeUnitOfWork(UnitOfWork):
    def __init__(self, store: InMemoryStore):
        self.store = store
        self.tickets = FakeTicketRepo(self)
        self.rules = FakeRuleRepo(store)
        self.settings = FakeSettingsStore(self)
        self.audit = FakeAuditSink(self)
        self.held_locks: list[asyncio.Lock] = []
        self._reset()

    def _reset(self):
        self.staged_tickets: dict[int, Ticket] = {}
        self.staged_settings: dict[str, object] = {}
        self.staged_audits: list[AuditRecord] = []

    async def __aexit__(self, exc_type, exc, tb):
        await self.rollback()
        for lock in self.held_locks:
            lock.release()
        self.held_locks.clear()

    async def commit(self):
        self.store.tickets.update(self.staged_tickets)
        self.store.settings.update(self.staged_settings)
        self.store.audits.extend(self.staged_audits)
        self.store.commits += 1
        self._reset()

    async def rollback(self):
        self._reset()


class RecordingNotifier(NotificationPort):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.assigned: list[tuple[int, int | None, int | None, str]] = []
        self.escalated: list[tuple[int, Priority, Priority]] = []

    async def ticket_assigned(self, ticket, previous_assignee, reason):
        if self.fail:
            raise RuntimeError("notification service down")
        self.assigned.append((ticket.id, ticket.assigned_to, previous_assignee, reason))

    async def ticket_escalated(self, ticket, previous_priority):
        if self.fail:
            raise RuntimeError("notification service down")
        self.escalated.append((ticket.id, previous_priority, ticket.priority))


class RecordingAlerts(OperationsAlertPort):
    def __init__(self):
        self.reports = []

    async def report(self, report):
        self.reports.append(report)


# ─── Fixtures ────────────────────────────────────────────────────────


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store):
    return lambda: FakeUnitOfWork(store)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def alerts() -> RecordingAlerts:
    return RecordingAlerts()


@pytest.fixture
def clock():
    return lambda: NOW
