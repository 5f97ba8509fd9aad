"""Port interface for assignment rule persistence."""

from abc import ABC, abstractmethod

from ticket_dispatch.domain.entities.assignment_rule import AssignmentRule


class RuleRepository(ABC):
    @abstractmethod
    async def list_active(self) -> list[AssignmentRule]:
        """Active rules ordered by (position, id), assignees resolved.

        Never cached: rules may change between scans.
        """
        ...
