"""
Pydantic models for the slot notifier domain.

Pydantic-модели для слотов, ограничений фильтра и состояния планировщика.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class Appointment(BaseModel):
    """Single appointment slot as returned by the slot-query API."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    location_id: int = Field(default=0, alias="locationId")
    start_timestamp: str = Field(default="", alias="startTimestamp")
    end_timestamp: str = Field(default="", alias="endTimestamp")
    active: bool = False
    duration: int = 0
    remote: bool = Field(default=False, alias="remoteInd")

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        # null в JSON даёт значение по умолчанию, как и отсутствующее поле
        if value is None and info.field_name is not None:
            return cls.model_fields[info.field_name].default
        return value


class CheckConstraints(BaseModel):
    """
    Filters applied to every cycle.

    Границы времени суток задаются в минутах от полуночи и включительны.
    """

    model_config = ConfigDict(frozen=True)

    cutoff: datetime
    earliest_minutes: Optional[int] = Field(default=None, ge=0, lt=24 * 60)
    latest_minutes: Optional[int] = Field(default=None, ge=0, lt=24 * 60)

    @property
    def time_window(self) -> tuple[Optional[int], Optional[int]]:
        """Effective (earliest, latest) bounds; an inverted window disables both."""
        earliest, latest = self.earliest_minutes, self.latest_minutes
        if earliest is not None and latest is not None and latest < earliest:
            return None, None
        return earliest, latest


class NotifierKind(str, Enum):
    push = "push"
    system = "system"

    @classmethod
    def parse(cls, value: str) -> "NotifierKind":
        value = value.strip().lower()
        # "app" — старое имя push-канала
        if value == "app":
            return cls.push
        return cls(value)


class SchedulerState(str, Enum):
    idle = "idle"
    running = "running"


class MonitorState(BaseModel):
    """State of monitoring loop, used internally."""

    state: SchedulerState = SchedulerState.idle
    last_check_at: Optional[datetime] = None
    last_error: Optional[str] = None
    checks_count: int = 0
    matches_found: int = 0
    skipped_ticks: int = 0


__all__ = [
    "Appointment",
    "CheckConstraints",
    "NotifierKind",
    "SchedulerState",
    "MonitorState",
]
