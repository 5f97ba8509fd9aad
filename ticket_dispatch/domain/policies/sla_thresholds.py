"""SLA threshold checks — has a ticket waited long enough to be acted upon?"""

from __future__ import annotations

from datetime import datetime

from ticket_dispatch.domain.entities.sla import EscalationRule, SlaConfiguration
from ticket_dispatch.domain.entities.ticket import Ticket
from ticket_dispatch.domain.value_objects.duration import Duration
from ticket_dispatch.domain.value_objects.enums import Priority


def escalation_due(ticket: Ticket, config: SlaConfiguration, now: datetime) -> EscalationRule | None:
    """Return the escalation rule to apply, or None when the ticket is within SLA.

    Elapsed time runs from the last escalation (or creation), so a chain
    such as low -> medium -> high waits the full threshold at each step.
    """
    if not ticket.is_monitored():
        return None

    rule = config.escalation_for(ticket.priority)
    if rule is None or rule.to == ticket.priority:
        return None

    if now - ticket.escalation_baseline() < rule.after.delta:
        return None
    return rule


def reassignment_due(
    ticket: Ticket,
    config: SlaConfiguration,
    now: datetime,
    priority: Priority | None = None,
) -> Duration | None:
    """Return the reassignment threshold the ticket has exceeded, if any.

    *priority* selects the threshold bucket; the monitor passes the priority
    the ticket had before any escalation in the same scan.
    """
    if not ticket.is_monitored() or not ticket.is_assigned():
        return None

    threshold = config.reassign_threshold_for(priority or ticket.priority)
    if threshold is None:
        return None

    if now - ticket.assignment_baseline() < threshold.delta:
        return None
    return threshold
