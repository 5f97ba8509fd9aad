"""Port interface for ticket persistence."""

from abc import ABC, abstractmethod

from ticket_dispatch.domain.entities.ticket import Ticket
from ticket_dispatch.domain.value_objects.enums import TicketStatus


class TicketRepository(ABC):
    @abstractmethod
    async def get_by_id(self, ticket_id: int) -> Ticket | None:
        ...

    @abstractmethod
    async def get_for_update(self, ticket_id: int) -> Ticket | None:
        """Load the ticket and lock its row until the transaction ends.

        Must use row-level locking (SELECT ... FOR UPDATE) so concurrent
        writers serialise on the same ticket.
        """
        ...

    @abstractmethod
    async def save(self, ticket: Ticket) -> Ticket:
        ...

    @abstractmethod
    async def list_monitored_ids(
        self,
        statuses: tuple[TicketStatus, ...],
        after_id: int = 0,
        limit: int = 100,
    ) -> list[int]:
        """Ids of tickets in *statuses* with id > *after_id*, ascending."""
        ...
