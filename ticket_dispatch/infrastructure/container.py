"""Composition root — wires SQL and webhook adapters into the use cases."""

from __future__ import annotations

import logging

from ticket_dispatch.adapters.notifications.webhook import WebhookAlerts, WebhookNotifier
from ticket_dispatch.adapters.persistence.database import async_session_factory
from ticket_dispatch.adapters.persistence.unit_of_work import sql_uow_factory
from ticket_dispatch.application.notification_dispatcher import NotificationDispatcher
from ticket_dispatch.application.use_cases.assign_ticket import AssignmentEngine
from ticket_dispatch.application.use_cases.monitor_slas import SlaMonitor, TickReport
from ticket_dispatch.application.use_cases.resolve_sla import SlaConfigurationResolver
from ticket_dispatch.config import settings

logger = logging.getLogger(__name__)

uow_factory = sql_uow_factory(async_session_factory)
notifications = NotificationDispatcher(WebhookNotifier())

assignment_engine = AssignmentEngine(uow_factory, notifications=notifications)
sla_resolver = SlaConfigurationResolver(uow_factory, defaults=settings.sla_defaults)
sla_monitor = SlaMonitor(
    uow_factory,
    resolver=sla_resolver,
    engine=assignment_engine,
    notifications=notifications,
    alerts=WebhookAlerts(),
    batch_size=settings.sla_monitor_batch_size,
)


async def run_scheduled_tick() -> TickReport | None:
    """Scheduler entry point: a crashed scan is logged, never propagated."""
    try:
        return await sla_monitor.tick()
    except Exception:
        logger.exception("SLA scan aborted")
        return None
