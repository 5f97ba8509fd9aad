"""FastAPI dependency injection — exposes the wired use cases to routers."""

from ticket_dispatch.adapters.persistence.database import get_session
from ticket_dispatch.application.use_cases.assign_ticket import AssignmentEngine
from ticket_dispatch.application.use_cases.monitor_slas import SlaMonitor
from ticket_dispatch.application.use_cases.resolve_sla import SlaConfigurationResolver
from ticket_dispatch.infrastructure import container

# Re-export session dependency
get_db_session = get_session


def get_assignment_engine() -> AssignmentEngine:
    return container.assignment_engine


def get_sla_resolver() -> SlaConfigurationResolver:
    return container.sla_resolver


def get_sla_monitor() -> SlaMonitor:
    return container.sla_monitor
