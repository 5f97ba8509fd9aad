"""AssignmentRule entity — ordered, conditional mapping from tickets to an agent."""

from __future__ import annotations

from dataclasses import dataclass, field

from ticket_dispatch.domain.entities.agent import Agent
from ticket_dispatch.domain.entities.ticket import Ticket
from ticket_dispatch.domain.value_objects.criterion import ANY, Criterion, matches


@dataclass
class AssignmentRule:
    id: int | None
    assigned_to: int
    position: int = 0
    priority: Criterion = field(default=ANY)
    category: Criterion = field(default=ANY)
    active: bool = True
    # Resolved by the rule store; None when the agent is gone or deactivated
    assignee: Agent | None = None

    def applies_to(self, ticket: Ticket) -> bool:
        return matches(self.priority, ticket.priority) and matches(
            self.category, ticket.category_id
        )

    def has_available_assignee(self) -> bool:
        return self.assignee is not None and self.assignee.active
