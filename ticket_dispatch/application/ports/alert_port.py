"""Port interface for the operations alerting channel."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ticket_dispatch.application.use_cases.monitor_slas import TickReport


class OperationsAlertPort(ABC):
    @abstractmethod
    async def report(self, report: TickReport) -> None:
        """Surface failures and configuration issues of a finished scan."""
        ...
