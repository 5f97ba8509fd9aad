"""SLA configuration policy — merge static defaults with administrator overrides."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ticket_dispatch.domain.entities.sla import EscalationRule, SlaConfiguration
from ticket_dispatch.domain.errors import ConfigurationError, ValidationError
from ticket_dispatch.domain.value_objects.duration import Duration
from ticket_dispatch.domain.value_objects.enums import Priority

logger = logging.getLogger(__name__)

SECTIONS = ("priority_escalations", "reassign_after")


def deep_merge(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively replace leaves of *defaults* with those present in *overrides*.

    Keys missing from *overrides* keep their default; nested mappings are
    merged key-by-key rather than replaced wholesale.  An explicit ``None``
    in *overrides* replaces the leaf (which disables that threshold).
    """
    merged: dict[str, Any] = dict(defaults)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _priority(key: Any, section: str) -> Priority:
    if isinstance(key, str):
        key = key.strip().lower()
    try:
        return Priority(key)
    except ValueError:
        raise ConfigurationError(
            f"Unknown priority {key!r} in {section}", {"section": section, "priority": key}
        ) from None


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"{name} must be a mapping", {"section": name})
    return section


def _canonical(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of *raw* with the priority keys of each section lower-cased.

    Raises:
        ConfigurationError: two keys of one section name the same priority.
    """
    canonical: dict[str, Any] = dict(raw)
    for name in SECTIONS:
        section = raw.get(name)
        if not isinstance(section, Mapping):
            continue
        entries: dict[Any, Any] = {}
        for key, value in section.items():
            folded = key.strip().lower() if isinstance(key, str) else key
            if folded in entries:
                raise ConfigurationError(
                    f"Duplicate priority {folded!r} in {name}", {"section": name, "priority": folded}
                )
            entries[folded] = value
        canonical[name] = entries
    return canonical


def parse_sla(raw: Mapping[str, Any]) -> SlaConfiguration:
    """Turn raw settings into an SlaConfiguration.

    Entries with a missing ``after``/``to``, a ``to`` equal to the source
    priority, or a ``None`` reassignment threshold are treated as disabled.

    Raises:
        ConfigurationError: on unknown priorities, malformed durations or
            a shape that is not a mapping of mappings.
    """
    if not isinstance(raw, Mapping):
        raise ConfigurationError("SLA configuration must be a mapping")
    raw = _canonical(raw)

    escalations: dict[Priority, EscalationRule] = {}
    for key, rule in _section(raw, "priority_escalations").items():
        priority = _priority(key, "priority_escalations")
        if rule is None:
            continue
        if not isinstance(rule, Mapping):
            raise ConfigurationError(
                f"priority_escalations.{key} must be a mapping", {"priority": key}
            )
        after, target = rule.get("after"), rule.get("to")
        if not after or not target:
            continue
        target_priority = _priority(target, f"priority_escalations.{key}.to")
        if target_priority == priority:
            continue
        escalations[priority] = EscalationRule(after=Duration.parse(after), to=target_priority)

    reassign: dict[Priority, Duration] = {}
    for key, threshold in _section(raw, "reassign_after").items():
        priority = _priority(key, "reassign_after")
        if not threshold:
            continue
        reassign[priority] = Duration.parse(threshold)

    return SlaConfiguration(priority_escalations=escalations, reassign_after=reassign)


def resolve_sla(defaults: Mapping[str, Any], overrides: Any = None) -> SlaConfiguration:
    """Effective configuration from *defaults* deep-merged with *overrides*.

    A malformed override never breaks resolution: the defaults are returned
    with the problem listed in ``issues``.  Malformed defaults are a
    deployment error and propagate as ConfigurationError.
    """
    base = parse_sla(defaults)
    if overrides is None:
        return base

    if not isinstance(overrides, Mapping):
        issue = f"Ignoring SLA override: expected a mapping, got {type(overrides).__name__}"
        logger.warning(issue)
        base.issues.append(issue)
        return base

    try:
        return parse_sla(deep_merge(_canonical(defaults), _canonical(overrides)))
    except ConfigurationError as exc:
        issue = f"Ignoring SLA override: {exc.message}"
        logger.warning(issue)
        base.issues.append(issue)
        return base


def normalize_override(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Validate an administrator payload before it is stored as an override.

    Only the keys present in *payload* are kept so that a partial update
    leaves every other threshold at its default.

    Raises:
        ValidationError: on unknown sections, priorities or malformed values.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("SLA payload must be an object")

    unknown = set(payload) - set(SECTIONS)
    if unknown:
        raise ValidationError(
            f"Unknown SLA sections: {', '.join(sorted(unknown))}", {"sections": sorted(unknown)}
        )

    normalized: dict[str, Any] = {}
    try:
        payload = _canonical(payload)
        escalations = _section(payload, "priority_escalations")
        if "priority_escalations" in payload:
            normalized["priority_escalations"] = {}
        for key, rule in escalations.items():
            priority = _priority(key, "priority_escalations")
            if rule is None:
                normalized["priority_escalations"][priority.value] = None
                continue
            if not isinstance(rule, Mapping):
                raise ConfigurationError(f"priority_escalations.{key} must be an object")
            entry: dict[str, Any] = {}
            if "after" in rule:
                after = rule["after"]
                entry["after"] = None if after is None else Duration.parse(after).label
            if "to" in rule:
                target = rule["to"]
                entry["to"] = None if target is None else _priority(target, f"priority_escalations.{key}.to").value
            normalized["priority_escalations"][priority.value] = entry

        thresholds = _section(payload, "reassign_after")
        if "reassign_after" in payload:
            normalized["reassign_after"] = {}
        for key, threshold in thresholds.items():
            priority = _priority(key, "reassign_after")
            normalized["reassign_after"][priority.value] = (
                None if threshold is None else Duration.parse(threshold).label
            )
    except ConfigurationError as exc:
        raise ValidationError(exc.message, exc.details) from exc

    return normalized
