"""Shared contracts (enums and value types) used across timber subsystems."""

from timber.contracts.enums import EventKind, LogLevel

__all__ = [
    "EventKind",
    "LogLevel",
]
