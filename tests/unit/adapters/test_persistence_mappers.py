"""Tests for ORM ↔ domain mappers (no database needed)."""

from datetime import datetime, timezone

from ticket_dispatch.adapters.persistence.models import (
    AgentModel,
    AssignmentRuleModel,
    TicketModel,
)
from ticket_dispatch.adapters.persistence.repositories import (
    _rule_to_domain,
    _ticket_to_domain,
)
from ticket_dispatch.domain.value_objects.criterion import ANY, Specific
from ticket_dispatch.domain.value_objects.enums import Priority, TicketStatus

CREATED = datetime(2026, 9, 30, 8, 0, tzinfo=timezone.utc)


def test_ticket_mapper_converts_enums():
    m = TicketModel(
        id=3, subject="Cannot log in", priority="high", status="pending",
        category_id=2, assigned_to=5, created_at=CREATED,
    )
    t = _ticket_to_domain(m)
    assert t.priority == Priority.HIGH
    assert t.status == TicketStatus.PENDING
    assert t.assigned_to == 5
    assert t.created_at == CREATED
    assert t.escalated_at is None


def test_rule_mapper_null_columns_become_wildcards():
    m = AssignmentRuleModel(id=1, assigned_to=4, position=2, active=True, priority=None, category_id=None)
    rule = _rule_to_domain(m, None)
    assert rule.priority == ANY
    assert rule.category == ANY
    assert rule.assignee is None
    assert not rule.has_available_assignee()


def test_rule_mapper_specific_criteria_and_assignee():
    m = AssignmentRuleModel(id=1, assigned_to=4, position=0, active=True, priority="low", category_id=8)
    agent = AgentModel(id=4, name="Dana", email="dana@example.test", active=True)
    rule = _rule_to_domain(m, agent)
    assert rule.priority == Specific(Priority.LOW)
    assert rule.category == Specific(8)
    assert rule.assignee.name == "Dana"
    assert rule.has_available_assignee()
