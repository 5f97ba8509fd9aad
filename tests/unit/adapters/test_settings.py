"""Tests for environment-driven settings."""

import json

from ticket_dispatch.config import DEFAULT_SLA, Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("SLA_DEFAULTS", raising=False)
    monkeypatch.delenv("SLA_MONITOR_INTERVAL_SECONDS", raising=False)
    s = Settings(_env_file=None)
    assert s.sla_defaults == DEFAULT_SLA
    assert s.sla_monitor_interval_seconds == 900
    assert s.sla_monitor_batch_size == 100


def test_sla_defaults_from_json_env(monkeypatch):
    custom = {"priority_escalations": {}, "reassign_after": {"high": "1 hour"}}
    monkeypatch.setenv("SLA_DEFAULTS", json.dumps(custom))
    monkeypatch.setenv("SLA_MONITOR_INTERVAL_SECONDS", "60")
    s = Settings(_env_file=None)
    assert s.sla_defaults == custom
    assert s.sla_monitor_interval_seconds == 60
