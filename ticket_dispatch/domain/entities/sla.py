"""SLA configuration — effective escalation and reassignment thresholds."""

from __future__ import annotations

from dataclasses import dataclass, field

from ticket_dispatch.domain.value_objects.duration import Duration
from ticket_dispatch.domain.value_objects.enums import Priority


@dataclass(frozen=True)
class EscalationRule:
    after: Duration
    to: Priority


@dataclass
class SlaConfiguration:
    priority_escalations: dict[Priority, EscalationRule] = field(default_factory=dict)
    reassign_after: dict[Priority, Duration] = field(default_factory=dict)
    # Problems found while resolving the configuration, for operators
    issues: list[str] = field(default_factory=list)

    def escalation_for(self, priority: Priority) -> EscalationRule | None:
        return self.priority_escalations.get(priority)

    def reassign_threshold_for(self, priority: Priority) -> Duration | None:
        return self.reassign_after.get(priority)

    def to_dict(self) -> dict:
        """Serialise back to the raw settings shape."""
        return {
            "priority_escalations": {
                p.value: {"after": rule.after.label, "to": rule.to.value}
                for p, rule in self.priority_escalations.items()
            },
            "reassign_after": {p.value: d.label for p, d in self.reassign_after.items()},
        }
