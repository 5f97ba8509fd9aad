"""Rule matching policy — picks the agent a ticket should belong to.

Pure decision logic: no storage access, no side effects.  The assignment
engine feeds it the latest rules and applies whatever it decides.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ticket_dispatch.domain.entities.assignment_rule import AssignmentRule
from ticket_dispatch.domain.entities.ticket import Ticket

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentDecision:
    """Outcome of evaluating the rule list against one ticket."""

    rule: AssignmentRule | None
    previous_assignee: int | None

    @property
    def agent_id(self) -> int | None:
        return self.rule.assigned_to if self.rule else None

    @property
    def matched(self) -> bool:
        return self.rule is not None

    @property
    def changed(self) -> bool:
        return self.matched and self.agent_id != self.previous_assignee


def ordered(rules: Iterable[AssignmentRule]) -> list[AssignmentRule]:
    """Active rules by position; ``sorted`` is stable so ties keep insertion order."""
    return sorted((r for r in rules if r.active), key=lambda r: r.position)


def decide(
    ticket: Ticket,
    rules: Iterable[AssignmentRule],
    exclude: Iterable[int] = (),
) -> AssignmentDecision:
    """Return the first active, matching, non-excluded rule for *ticket*.

    1. Evaluate active rules ascending by position.
    2. A rule matches when its priority and category criteria accept the ticket.
    3. Rules targeting an excluded agent are skipped.
    4. Rules whose agent no longer exists (or is deactivated) are skipped.
    """
    excluded = set(exclude)

    for rule in ordered(rules):
        if not rule.applies_to(ticket):
            continue
        if rule.assigned_to in excluded:
            continue
        if not rule.has_available_assignee():
            logger.warning(
                "Assignment rule %s targets unavailable agent %s, skipping",
                rule.id, rule.assigned_to,
            )
            continue
        return AssignmentDecision(rule=rule, previous_assignee=ticket.assigned_to)

    return AssignmentDecision(rule=None, previous_assignee=ticket.assigned_to)
