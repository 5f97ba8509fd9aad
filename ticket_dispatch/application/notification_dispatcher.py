"""Fire-and-forget delivery of stakeholder notifications.

Notifications run as background tasks after the transaction that caused
them has committed.  A failing or slow notifier never blocks or fails the
assignment/escalation that triggered it; errors are only logged.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Coroutine
from typing import Any

from ticket_dispatch.application.ports.notifier_port import NotificationPort
from ticket_dispatch.domain.entities.ticket import Ticket
from ticket_dispatch.domain.value_objects.enums import Priority

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(self, notifier: NotificationPort | None = None):
        self._notifier = notifier
        self._pending: set[asyncio.Task] = set()

    def assigned(self, ticket: Ticket, previous_assignee: int | None, reason: str) -> None:
        if self._notifier is None:
            return
        snapshot = dataclasses.replace(ticket)
        self._spawn(
            self._notifier.ticket_assigned(snapshot, previous_assignee, reason),
            f"ticket {ticket.id} {reason}",
        )

    def escalated(self, ticket: Ticket, previous_priority: Priority) -> None:
        if self._notifier is None:
            return
        snapshot = dataclasses.replace(ticket)
        self._spawn(
            self._notifier.ticket_escalated(snapshot, previous_priority),
            f"ticket {ticket.id} escalation",
        )

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for in-flight notifications (used on shutdown and in tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    def _spawn(self, coro: Coroutine[Any, Any, None], label: str) -> None:
        task = asyncio.create_task(self._guarded(coro, label))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    @staticmethod
    async def _guarded(coro: Coroutine[Any, Any, None], label: str) -> None:
        try:
            await coro
        except Exception:
            logger.exception("Notification for %s failed", label)
