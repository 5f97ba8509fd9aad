"""Tests for SLA configuration merging and validation."""

import pytest

from ticket_dispatch.domain.errors import ConfigurationError, ValidationError
from ticket_dispatch.domain.policies.sla_configuration import (
    deep_merge,
    normalize_override,
    parse_sla,
    resolve_sla,
)
from ticket_dispatch.domain.value_objects.enums import Priority

DEFAULTS = {
    "priority_escalations": {
        "low": {"after": "72 hours", "to": "medium"},
        "medium": {"after": "48 hours", "to": "high"},
        "high": {"after": None, "to": None},
    },
    "reassign_after": {"low": "72 hours", "medium": "24 hours", "high": "4 hours"},
}


# ─── deep_merge ──────────────────────────────────────────────────────


def test_deep_merge_replaces_only_given_leaves():
    merged = deep_merge({"a": {"x": 1, "y": 2}, "b": 3}, {"a": {"y": 5}})
    assert merged == {"a": {"x": 1, "y": 5}, "b": 3}


def test_deep_merge_explicit_none_replaces_leaf():
    merged = deep_merge({"a": {"x": 1}}, {"a": None})
    assert merged == {"a": None}


def test_deep_merge_does_not_mutate_inputs():
    defaults = {"a": {"x": 1}}
    deep_merge(defaults, {"a": {"x": 2}})
    assert defaults == {"a": {"x": 1}}


# ─── parse_sla / resolve_sla ─────────────────────────────────────────


def test_parse_defaults():
    config = parse_sla(DEFAULTS)
    assert config.escalation_for(Priority.LOW).to == Priority.MEDIUM
    assert config.escalation_for(Priority.HIGH) is None
    assert config.reassign_threshold_for(Priority.HIGH).label == "4 hours"


def test_escalation_to_same_priority_is_disabled():
    config = parse_sla({"priority_escalations": {"high": {"after": "1 hour", "to": "high"}}})
    assert config.escalation_for(Priority.HIGH) is None


def test_parse_rejects_unknown_priority():
    with pytest.raises(ConfigurationError):
        parse_sla({"reassign_after": {"urgent": "1 hour"}})


def test_parse_rejects_bad_duration():
    with pytest.raises(ConfigurationError):
        parse_sla({"priority_escalations": {"low": {"after": "eventually", "to": "medium"}}})


def test_override_target_keeps_default_threshold():
    config = resolve_sla(DEFAULTS, {"priority_escalations": {"low": {"to": "high"}}})
    rule = config.escalation_for(Priority.LOW)
    assert rule.to == Priority.HIGH
    assert rule.after.label == "72 hours"
    assert config.escalation_for(Priority.MEDIUM).to == Priority.HIGH


def test_override_null_disables_threshold():
    config = resolve_sla(DEFAULTS, {"reassign_after": {"high": None}})
    assert config.reassign_threshold_for(Priority.HIGH) is None
    assert config.reassign_threshold_for(Priority.MEDIUM) is not None


def test_malformed_override_falls_back_to_defaults():
    config = resolve_sla(DEFAULTS, {"reassign_after": {"high": "whenever"}})
    assert config.reassign_threshold_for(Priority.HIGH).label == "4 hours"
    assert len(config.issues) == 1
    assert config.issues[0].startswith("Ignoring SLA override")


def test_non_mapping_override_falls_back_to_defaults():
    config = resolve_sla(DEFAULTS, ["not", "a", "mapping"])
    assert config.escalation_for(Priority.LOW).to == Priority.MEDIUM
    assert "expected a mapping" in config.issues[0]


def test_malformed_defaults_raise():
    with pytest.raises(ConfigurationError):
        resolve_sla({"reassign_after": "72 hours"})


def test_to_dict_round_trips_labels():
    raw = resolve_sla(DEFAULTS).to_dict()
    assert raw["priority_escalations"] == {
        "low": {"after": "72 hours", "to": "medium"},
        "medium": {"after": "48 hours", "to": "high"},
    }
    assert raw["reassign_after"]["medium"] == "24 hours"


# ─── normalize_override ──────────────────────────────────────────────


def test_normalize_keeps_only_given_keys():
    assert normalize_override({"priority_escalations": {"Low": {"after": " 2 days "}}}) == {
        "priority_escalations": {"low": {"after": "2 days"}}
    }


def test_normalize_preserves_explicit_nulls():
    assert normalize_override({"reassign_after": {"high": None}}) == {"reassign_after": {"high": None}}


@pytest.mark.parametrize(
    "payload",
    [
        {"escalations": {}},
        {"reassign_after": {"urgent": "1 hour"}},
        {"reassign_after": {"high": "asap"}},
        {"priority_escalations": {"low": "1 hour"}},
        {"priority_escalations": {"low": {"to": "critical"}}},
        "not-an-object",
    ],
)
def test_normalize_rejects_bad_payloads(payload):
    with pytest.raises(ValidationError):
        normalize_override(payload)


def test_out_of_range_override_falls_back_to_defaults():
    config = resolve_sla(DEFAULTS, {"reassign_after": {"low": "999999999 weeks"}})
    assert config.reassign_threshold_for(Priority.LOW).label == "72 hours"
    assert "out of range" in config.issues[0]


def test_normalize_rejects_out_of_range_duration():
    with pytest.raises(ValidationError):
        normalize_override({"reassign_after": {"low": "999999999 weeks"}})


# ─── Priority key case ───────────────────────────────────────────────


def test_mixed_case_escalation_key_overrides_default():
    config = resolve_sla(DEFAULTS, {"priority_escalations": {"LOW": {"after": "6 hours"}}})
    rule = config.escalation_for(Priority.LOW)
    assert rule.after.label == "6 hours"
    assert rule.to == Priority.MEDIUM
    assert config.issues == []


def test_mixed_case_reassign_key_overrides_default():
    config = resolve_sla(DEFAULTS, {"reassign_after": {"High": "1 hour"}})
    assert config.reassign_threshold_for(Priority.HIGH).label == "1 hour"


def test_duplicate_priority_keys_are_reported():
    config = resolve_sla(DEFAULTS, {"reassign_after": {"high": "1 hour", "HIGH": "2 hours"}})
    assert config.reassign_threshold_for(Priority.HIGH).label == "4 hours"
    assert "Duplicate priority" in config.issues[0]


def test_normalize_rejects_duplicate_priority_keys():
    with pytest.raises(ValidationError):
        normalize_override({"reassign_after": {"low": "1 hour", "Low": "2 hours"}})
