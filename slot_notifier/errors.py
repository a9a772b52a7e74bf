"""
Error taxonomy for the slot notifier.

Ошибки цикла (fetch/decode/time/notify) логируются и не останавливают
планировщик. ConfigError фатальна и возникает только при старте.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SlotNotifierError(Exception):
    """Base error for the package."""

    message: str = "Slot notifier error"

    def __str__(self) -> str:
        return self.message


@dataclass
class FetchError(SlotNotifierError):
    """Raised when the slot-query request fails at transport or HTTP level."""

    message: str = "Failed to get appointment slots"


@dataclass
class DecodeError(SlotNotifierError):
    """Raised when the slot-query payload is not an array of appointments."""

    message: str = "Failed to decode appointment slots"


@dataclass
class TimeParseError(SlotNotifierError):
    """Raised when an appointment start timestamp does not match the API layout."""

    message: str = "Failed to parse appointment start time"


@dataclass
class NotifyError(SlotNotifierError):
    """Raised when a notification could not be delivered."""

    message: str = "Failed to send notification"


@dataclass
class ConfigError(SlotNotifierError):
    """Raised on missing or invalid required startup options."""

    message: str = "Invalid configuration"


__all__ = [
    "SlotNotifierError",
    "FetchError",
    "DecodeError",
    "TimeParseError",
    "NotifyError",
    "ConfigError",
]
