"""Rule criteria — a rule field either pins a specific value or accepts anything."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Wildcard:
    """Matches any value."""

    def __str__(self) -> str:
        return "*"


@dataclass(frozen=True)
class Specific(Generic[T]):
    """Matches exactly one value."""

    value: T

    def __str__(self) -> str:
        return str(getattr(self.value, "value", self.value))


Criterion = Specific | Wildcard

ANY = Wildcard()


def matches(criterion: Criterion, candidate: Any) -> bool:
    match criterion:
        case Wildcard():
            return True
        case Specific(value=expected):
            return expected == candidate
    raise TypeError(f"Unsupported criterion: {criterion!r}")


def from_optional(value: T | None) -> Criterion:
    """Map a nullable storage column onto a criterion (NULL = wildcard)."""
    return ANY if value is None else Specific(value)


def to_optional(criterion: Criterion) -> Any:
    match criterion:
        case Wildcard():
            return None
        case Specific(value=value):
            return value
    raise TypeError(f"Unsupported criterion: {criterion!r}")
