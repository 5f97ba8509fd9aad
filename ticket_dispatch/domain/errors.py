"""Domain errors raised by the dispatch core.

Adapters translate infrastructure failures into these types so the
application layer never has to know which storage backend is in use.
"""

from __future__ import annotations


class DispatchError(Exception):
    """Base class for all dispatch errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(DispatchError):
    """Malformed ticket, rule, option or payload; nothing was persisted."""


class PersistenceError(DispatchError):
    """The storage layer failed; the surrounding transaction was rolled back."""


class ConfigurationError(DispatchError):
    """SLA configuration data could not be interpreted."""
