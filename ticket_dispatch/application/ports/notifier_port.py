"""Port interface for stakeholder notifications (assignment / escalation)."""

from abc import ABC, abstractmethod

from ticket_dispatch.domain.entities.ticket import Ticket
from ticket_dispatch.domain.value_objects.enums import Priority


class NotificationPort(ABC):
    @abstractmethod
    async def ticket_assigned(
        self, ticket: Ticket, previous_assignee: int | None, reason: str
    ) -> None:
        ...

    @abstractmethod
    async def ticket_escalated(
        self, ticket: Ticket, previous_priority: Priority
    ) -> None:
        ...
