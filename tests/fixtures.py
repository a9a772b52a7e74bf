"""Helpers for building appointment payloads relative to the current day."""

import json
from datetime import datetime, timedelta
from typing import Any, Dict, List

from slot_notifier.models import CheckConstraints


def make_ts(day_offset: int, hour: int, minute: int) -> str:
    """API-formatted timestamp at (today + day_offset) HH:MM."""
    base = datetime.now() + timedelta(days=day_offset)
    return base.replace(hour=hour, minute=minute, second=0, microsecond=0).strftime("%Y-%m-%dT%H:%M")


def make_json(appointments: List[Dict[str, Any]]) -> bytes:
    return json.dumps(appointments).encode("utf-8")


def constraints_within(hours: int, earliest=None, latest=None) -> CheckConstraints:
    return CheckConstraints(
        cutoff=datetime.now() + timedelta(hours=hours),
        earliest_minutes=earliest,
        latest_minutes=latest,
    )
