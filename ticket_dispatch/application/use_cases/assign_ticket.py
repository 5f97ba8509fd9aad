"""AssignmentEngine — rule-based ticket assignment with an audit trail."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ticket_dispatch.application.clock import Clock, utcnow
from ticket_dispatch.application.notification_dispatcher import NotificationDispatcher
from ticket_dispatch.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory
from ticket_dispatch.domain.entities.audit_record import AuditRecord
from ticket_dispatch.domain.entities.ticket import Ticket
from ticket_dispatch.domain.errors import ValidationError
from ticket_dispatch.domain.policies.rule_matching import AssignmentDecision, decide
from ticket_dispatch.domain.value_objects.enums import AuditAction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignOptions:
    exclude: frozenset[int] = frozenset()
    reason: str = AuditAction.AUTO_ASSIGNED.value
    meta: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.reason, str) or not self.reason.strip():
            raise ValidationError("Assignment reason must be a non-empty string")
        if not isinstance(self.meta, Mapping):
            raise ValidationError("Assignment meta must be a mapping")
        if any(isinstance(a, bool) or not isinstance(a, int) for a in self.exclude):
            raise ValidationError(
                "Excluded agents must be integer ids", {"exclude": sorted(map(str, self.exclude))}
            )

    @classmethod
    def build(
        cls,
        exclude: Iterable[int] = (),
        reason: str = AuditAction.AUTO_ASSIGNED.value,
        meta: Mapping[str, Any] | None = None,
    ) -> AssignOptions:
        return cls(exclude=frozenset(exclude), reason=reason, meta=dict(meta or {}))


@dataclass(frozen=True)
class AssignmentResult:
    """What ``assign`` did; ``agent`` is None when no rule matched."""

    changed: bool
    agent: int | None
    reason: str
    rule_id: int | None = None
    previous_assignee: int | None = None


class AssignmentEngine:
    """Assigns tickets to agents by evaluating the ordered rule list.

    Each call locks the ticket row, re-reads it, decides, and only writes
    when the chosen agent differs from the current one.  A concurrent
    caller that loses the lock race therefore sees the updated assignee and
    returns an unchanged result without auditing twice.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        notifications: NotificationDispatcher | None = None,
        clock: Clock = utcnow,
    ):
        self._uow_factory = uow_factory
        self._notifications = notifications or NotificationDispatcher()
        self._clock = clock

    async def assign(
        self, ticket: Ticket | int, options: AssignOptions | None = None
    ) -> AssignmentResult:
        """Assign *ticket* according to the first matching rule.

        Args:
            ticket: a persisted Ticket (updated in place on change) or its id.
            options: exclusions, audit reason and extra audit context.

        Raises:
            ValidationError: the ticket reference is invalid.
            PersistenceError: the ticket or its audit record could not be
                stored; neither is persisted.
        """
        options = options or AssignOptions()
        ticket_id = self._ticket_id(ticket)

        async with self._uow_factory() as uow:
            current = await uow.tickets.get_for_update(ticket_id)
            if current is None:
                raise ValidationError(f"Ticket {ticket_id} does not exist", {"ticket_id": ticket_id})

            result = await self.assign_locked(uow, current, options)
            if result.changed:
                await uow.commit()

        if result.changed:
            if isinstance(ticket, Ticket):
                ticket.assigned_to = current.assigned_to
                ticket.assigned_at = current.assigned_at
                ticket.updated_at = current.updated_at
            self._notifications.assigned(current, result.previous_assignee, result.reason)

        return result

    async def assign_locked(
        self, uow: UnitOfWork, ticket: Ticket, options: AssignOptions
    ) -> AssignmentResult:
        """Decide and apply within a unit of work the caller already holds.

        The caller owns the commit; used by the SLA monitor so escalation and
        reassignment of one ticket land in a single transaction.
        """
        rules = await uow.rules.list_active()
        decision = decide(ticket, rules, options.exclude)

        if not decision.matched:
            logger.info("Ticket %s: no assignment rule matched (%s)", ticket.id, options.reason)
            return AssignmentResult(
                changed=False, agent=None, reason=options.reason,
                previous_assignee=decision.previous_assignee,
            )

        if not decision.changed:
            logger.debug("Ticket %s already assigned to agent %s", ticket.id, decision.agent_id)
            return AssignmentResult(
                changed=False, agent=decision.agent_id, reason=options.reason,
                rule_id=decision.rule.id, previous_assignee=decision.previous_assignee,
            )

        await self.apply(uow, ticket, decision, options)
        logger.info(
            "Ticket %s → agent %s (rule %s, reason=%s, previous=%s)",
            ticket.id, decision.agent_id, decision.rule.id,
            options.reason, decision.previous_assignee,
        )
        return AssignmentResult(
            changed=True, agent=decision.agent_id, reason=options.reason,
            rule_id=decision.rule.id, previous_assignee=decision.previous_assignee,
        )

    async def apply(
        self,
        uow: UnitOfWork,
        ticket: Ticket,
        decision: AssignmentDecision,
        options: AssignOptions,
    ) -> None:
        """Persist the decided assignee and its audit record."""
        now = self._clock()
        ticket.assigned_to = decision.agent_id
        ticket.assigned_at = now
        ticket.updated_at = now
        await uow.tickets.save(ticket)

        meta = {
            **options.meta,
            "rule_id": decision.rule.id,
            "assigned_to": decision.agent_id,
            "previous_assignee_id": decision.previous_assignee,
        }
        await uow.audit.record(
            AuditRecord(ticket_id=ticket.id, action=options.reason, timestamp=now, meta=meta)
        )

    @staticmethod
    def _ticket_id(ticket: Ticket | int) -> int:
        if isinstance(ticket, Ticket):
            ticket_id = ticket.id
        else:
            ticket_id = ticket
        if isinstance(ticket_id, bool) or not isinstance(ticket_id, int) or ticket_id <= 0:
            raise ValidationError("Invalid ticket reference", {"ticket": repr(ticket)})
        return ticket_id
