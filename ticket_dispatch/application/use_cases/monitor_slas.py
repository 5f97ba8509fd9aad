"""SlaMonitor — periodic scan that escalates and reassigns stale tickets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from ticket_dispatch.application.clock import Clock, utcnow
from ticket_dispatch.application.notification_dispatcher import NotificationDispatcher
from ticket_dispatch.application.ports.alert_port import OperationsAlertPort
from ticket_dispatch.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory
from ticket_dispatch.application.use_cases.assign_ticket import (
    AssignmentEngine,
    AssignmentResult,
    AssignOptions,
)
from ticket_dispatch.application.use_cases.resolve_sla import SlaConfigurationResolver
from ticket_dispatch.domain.entities.audit_record import AuditRecord
from ticket_dispatch.domain.entities.sla import EscalationRule, SlaConfiguration
from ticket_dispatch.domain.entities.ticket import Ticket
from ticket_dispatch.domain.errors import PersistenceError
from ticket_dispatch.domain.policies.sla_thresholds import escalation_due, reassignment_due
from ticket_dispatch.domain.value_objects.enums import MONITORED_STATUSES, AuditAction

logger = logging.getLogger(__name__)


@dataclass
class TicketFailure:
    ticket_id: int
    error: str


@dataclass
class TickReport:
    """Summary of one scan, handed to the operations alert channel."""

    started_at: datetime
    finished_at: datetime | None = None
    scanned: int = 0
    escalated: list[int] = field(default_factory=list)
    reassigned: list[int] = field(default_factory=list)
    failures: list[TicketFailure] = field(default_factory=list)
    config_issues: list[str] = field(default_factory=list)
    # Set when listing tickets failed and the scan stopped early
    scan_error: str | None = None

    @property
    def ok(self) -> bool:
        return not self.failures and not self.config_issues and self.scan_error is None

    def summary(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "scanned": self.scanned,
            "escalated": list(self.escalated),
            "reassigned": list(self.reassigned),
            "failures": [{"ticket_id": f.ticket_id, "error": f.error} for f in self.failures],
            "config_issues": list(self.config_issues),
            "scan_error": self.scan_error,
        }


class SlaMonitor:
    """Scans open and pending tickets against the effective SLA configuration.

    Each ticket is handled in its own transaction under a row lock: the
    escalation, the reassignment and their audit records commit together or
    not at all.  A failure on one ticket is recorded in the report and the
    scan moves on; failures are pushed to operators once the scan finishes.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        resolver: SlaConfigurationResolver,
        engine: AssignmentEngine,
        notifications: NotificationDispatcher | None = None,
        alerts: OperationsAlertPort | None = None,
        clock: Clock = utcnow,
        batch_size: int = 100,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self._uow_factory = uow_factory
        self._resolver = resolver
        self._engine = engine
        self._notifications = notifications or NotificationDispatcher()
        self._alerts = alerts
        self._clock = clock
        self._batch_size = batch_size

    async def tick(self) -> TickReport:
        now = self._clock()
        report = TickReport(started_at=now)

        config = await self._resolver.resolve()
        report.config_issues.extend(config.issues)

        after_id = 0
        while True:
            try:
                async with self._uow_factory() as uow:
                    ids = await uow.tickets.list_monitored_ids(
                        MONITORED_STATUSES, after_id=after_id, limit=self._batch_size
                    )
            except PersistenceError as e:
                logger.exception("Could not list tickets after id %s, stopping scan", after_id)
                report.scan_error = e.message
                break
            if not ids:
                break

            for ticket_id in ids:
                report.scanned += 1
                try:
                    await self._process(ticket_id, config, now, report)
                except Exception as e:
                    logger.exception("SLA processing failed for ticket %s", ticket_id)
                    report.failures.append(
                        TicketFailure(ticket_id=ticket_id, error=str(e) or type(e).__name__)
                    )

            after_id = ids[-1]
            if len(ids) < self._batch_size:
                break

        report.finished_at = self._clock()
        logger.info(
            "SLA scan complete: %d scanned, %d escalated, %d reassigned, %d failed",
            report.scanned, len(report.escalated), len(report.reassigned), len(report.failures),
        )

        if not report.ok:
            await self._alert(report)
        return report

    async def _process(
        self, ticket_id: int, config: SlaConfiguration, now: datetime, report: TickReport
    ) -> None:
        async with self._uow_factory() as uow:
            ticket = await uow.tickets.get_for_update(ticket_id)
            if ticket is None or not ticket.is_monitored():
                # Closed or removed since the id batch was listed
                return

            priority_before = ticket.priority

            escalation = escalation_due(ticket, config, now)
            if escalation is not None:
                await self._escalate(uow, ticket, escalation, now)

            # The reassignment bucket is the priority the ticket entered the scan with
            reassignment: AssignmentResult | None = None
            threshold = reassignment_due(ticket, config, now, priority=priority_before)
            if threshold is not None:
                reassignment = await self._engine.assign_locked(
                    uow,
                    ticket,
                    AssignOptions.build(
                        exclude=[ticket.assigned_to],
                        reason=AuditAction.SLA_REASSIGNED.value,
                        meta={"threshold": threshold.label},
                    ),
                )

            reassigned = reassignment is not None and reassignment.changed
            if escalation is None and not reassigned:
                return
            await uow.commit()

        if escalation is not None:
            report.escalated.append(ticket_id)
            self._notifications.escalated(ticket, priority_before)
        if reassigned:
            report.reassigned.append(ticket_id)
            self._notifications.assigned(ticket, reassignment.previous_assignee, reassignment.reason)

    async def _escalate(
        self, uow: UnitOfWork, ticket: Ticket, rule: EscalationRule, now: datetime
    ) -> None:
        previous = ticket.priority
        ticket.priority = rule.to
        ticket.escalated_at = now
        ticket.updated_at = now
        await uow.tickets.save(ticket)
        await uow.audit.record(
            AuditRecord(
                ticket_id=ticket.id,
                action=AuditAction.SLA_ESCALATED.value,
                timestamp=now,
                meta={"from": previous.value, "to": rule.to.value, "threshold": rule.after.label},
            )
        )
        logger.info(
            "Ticket %s escalated %s → %s after %s", ticket.id, previous.value, rule.to.value, rule.after
        )

    async def _alert(self, report: TickReport) -> None:
        if self._alerts is None:
            logger.warning("SLA scan reported problems: %s", report.summary())
            return
        try:
            await self._alerts.report(report)
        except Exception:
            logger.exception("Failed to deliver SLA scan alert")
