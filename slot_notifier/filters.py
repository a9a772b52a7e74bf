"""
Selection policy for appointment slots.

Выбор не более одного слота за цикл: первый подходящий по порядку API.
Порядок (ближайшие сначала) гарантирует API; здесь он не перепроверяется
и список не сортируется.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from .errors import TimeParseError
from .models import Appointment, CheckConstraints

logger = logging.getLogger(__name__)


API_TIME_LAYOUT = "%Y-%m-%dT%H:%M"


def parse_start_time(timestamp: str) -> datetime:
    """Parse an API start timestamp into a naive local-clock datetime."""
    try:
        return datetime.strptime(timestamp, API_TIME_LAYOUT)
    except (TypeError, ValueError) as e:
        raise TimeParseError(f"Invalid start timestamp {timestamp!r}: {e}") from e


def minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def select_appointment(
    appointments: Iterable[Appointment],
    constraints: CheckConstraints,
) -> Optional[Appointment]:
    """
    Return the first appointment that passes every filter, or None.

    Precondition: ``appointments`` is ordered soonest-first by the upstream
    API. The first eligible record in input order wins regardless of its
    timestamp relative to later records.

    Filters, in order:
    - start time must parse with ``API_TIME_LAYOUT`` (unparsable records are skipped);
    - start time must not be after ``constraints.cutoff``;
    - minute of day must lie within the effective time window (inclusive).
    """
    earliest, latest = constraints.time_window
    if (earliest, latest) != (constraints.earliest_minutes, constraints.latest_minutes):
        logger.debug(
            "Latest time %s is before earliest time %s, time-of-day filter disabled",
            constraints.latest_minutes,
            constraints.earliest_minutes,
        )

    for index, appointment in enumerate(appointments):
        try:
            start = parse_start_time(appointment.start_timestamp)
        except TimeParseError as e:
            logger.warning(
                "Skipping appointment #%s at location %s: %s",
                index,
                appointment.location_id,
                e,
            )
            continue

        if start > constraints.cutoff:
            logger.debug(
                "Appointment #%s at %s is after cutoff %s",
                index,
                start,
                constraints.cutoff,
            )
            continue

        if earliest is not None or latest is not None:
            minutes = minute_of_day(start)
            if earliest is not None and minutes < earliest:
                logger.debug("Appointment #%s at %s is before earliest time", index, start)
                continue
            if latest is not None and minutes > latest:
                logger.debug("Appointment #%s at %s is after latest time", index, start)
                continue

        return appointment

    logger.info("No valid appointments found")
    return None


__all__ = ["API_TIME_LAYOUT", "parse_start_time", "minute_of_day", "select_appointment"]
