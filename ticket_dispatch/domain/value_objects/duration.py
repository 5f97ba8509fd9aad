"""Duration — human-readable SLA thresholds such as "72 hours" or "1 hour 30 minutes"."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta

from ticket_dispatch.domain.errors import ConfigurationError

_UNIT_SECONDS: dict[str, int] = {
    "s": 1, "sec": 1, "secs": 1, "second": 1, "seconds": 1,
    "m": 60, "min": 60, "mins": 60, "minute": 60, "minutes": 60,
    "h": 3600, "hr": 3600, "hrs": 3600, "hour": 3600, "hours": 3600,
    "d": 86400, "day": 86400, "days": 86400,
    "w": 604800, "week": 604800, "weeks": 604800,
}

_SEGMENT = re.compile(r"(\d+(?:\.\d+)?)\s*([a-z]+)")


@dataclass(frozen=True)
class Duration:
    """A parsed threshold that remembers how it was written."""

    label: str
    delta: timedelta

    @classmethod
    def parse(cls, raw: str | timedelta | Duration) -> Duration:
        """Parse ``"<n> <unit>"`` segments into a Duration.

        Raises:
            ConfigurationError: if the text is empty, contains anything other
                than number/unit pairs, uses an unknown unit or is not positive.
        """
        if isinstance(raw, Duration):
            return raw
        if isinstance(raw, timedelta):
            if raw <= timedelta(0):
                raise ConfigurationError("Duration must be positive", {"value": str(raw)})
            return cls(label=str(raw), delta=raw)
        if not isinstance(raw, str):
            raise ConfigurationError("Duration must be a string", {"value": repr(raw)})

        text = raw.strip().lower()
        if not text:
            raise ConfigurationError("Duration must not be empty")

        total = 0.0
        position = 0
        for match in _SEGMENT.finditer(text):
            gap = text[position:match.start()].strip(" ,")
            if gap and gap != "and":
                raise ConfigurationError(f"Unrecognised duration: {raw!r}", {"value": raw})
            amount, unit = match.groups()
            if unit not in _UNIT_SECONDS:
                raise ConfigurationError(f"Unknown duration unit {unit!r} in {raw!r}", {"value": raw})
            total += float(amount) * _UNIT_SECONDS[unit]
            position = match.end()

        if position == 0 or text[position:].strip():
            raise ConfigurationError(f"Unrecognised duration: {raw!r}", {"value": raw})
        if total <= 0:
            raise ConfigurationError(f"Duration must be positive: {raw!r}", {"value": raw})

        try:
            delta = timedelta(seconds=total)
        except (OverflowError, ValueError):
            raise ConfigurationError(f"Duration out of range: {raw!r}", {"value": raw}) from None
        return cls(label=raw.strip(), delta=delta)

    def __str__(self) -> str:
        return self.label
