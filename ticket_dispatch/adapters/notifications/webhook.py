"""Webhook adapters — stakeholder notifications and operations alerts over HTTP."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ticket_dispatch.application.ports.alert_port import OperationsAlertPort
from ticket_dispatch.application.ports.notifier_port import NotificationPort
from ticket_dispatch.application.use_cases.monitor_slas import TickReport
from ticket_dispatch.config import settings
from ticket_dispatch.domain.entities.ticket import Ticket
from ticket_dispatch.domain.value_objects.enums import Priority

logger = logging.getLogger(__name__)


class _WebhookClient:
    def __init__(
        self,
        url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url
        self._timeout = timeout if timeout is not None else settings.webhook_timeout_seconds
        self._transport = transport

    async def post(self, payload: dict[str, Any]) -> bool:
        """POST *payload* as JSON. Returns False when no URL is configured.

        Raises:
            httpx.HTTPError: on transport failures or non-2xx responses.
        """
        if not self._url:
            logger.debug("Webhook URL not configured, skipping %s", payload.get("event"))
            return False

        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            response = await client.post(self._url, json=payload)
            response.raise_for_status()
        return True


class WebhookNotifier(NotificationPort):
    """Sends assignment and escalation events to the notification service."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = _WebhookClient(
            url if url is not None else settings.notification_webhook_url, timeout, transport
        )

    async def ticket_assigned(
        self, ticket: Ticket, previous_assignee: int | None, reason: str
    ) -> None:
        await self._client.post(
            {
                "event": "ticket.assigned",
                "ticket_id": ticket.id,
                "assigned_to": ticket.assigned_to,
                "previous_assignee_id": previous_assignee,
                "reason": reason,
                "priority": ticket.priority.value,
            }
        )

    async def ticket_escalated(self, ticket: Ticket, previous_priority: Priority) -> None:
        await self._client.post(
            {
                "event": "ticket.escalated",
                "ticket_id": ticket.id,
                "assigned_to": ticket.assigned_to,
                "from": previous_priority.value,
                "to": ticket.priority.value,
            }
        )


class WebhookAlerts(OperationsAlertPort):
    """Pushes SLA scan problems to the operations alerting channel."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = _WebhookClient(
            url if url is not None else settings.ops_alert_webhook_url, timeout, transport
        )

    async def report(self, report: TickReport) -> None:
        text = (
            f"SLA scan: {len(report.failures)} ticket(s) failed, "
            f"{len(report.config_issues)} configuration issue(s)"
        )
        if report.scan_error:
            text += f"; scan stopped early: {report.scan_error}"
        sent = await self._client.post({"event": "sla.scan_problems", "text": text, **report.summary()})
        if not sent:
            logger.warning("%s: %s", text, report.summary())
