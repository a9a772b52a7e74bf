"""
Monitoring service for appointment slots.

Сервис мониторинга в фоне:
- один цикл проверки: запрос -> разбор -> фильтр -> уведомление
- периодический запуск с фиксированным интервалом
- циклы не перекрываются; тики, пропущенные во время долгого цикла,
  отбрасываются, а не накапливаются
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Optional

from .errors import DecodeError, FetchError, NotifyError
from .filters import select_appointment
from .models import Appointment, CheckConstraints, MonitorState, SchedulerState
from .notifiers import Notifier
from .parser import decode_appointments

logger = logging.getLogger(__name__)


FetchFunc = Callable[[], Awaitable[bytes]]
CycleFunc = Callable[[], Awaitable[Optional[Appointment]]]


async def check_appointments(
    fetch: FetchFunc,
    notifier: Notifier,
    constraints: CheckConstraints,
) -> Optional[Appointment]:
    """
    Run one check cycle and return the selected appointment, if any.

    Fetch, decode and notify failures are logged and end the cycle; they are
    never raised. The selection is returned even when delivery failed.
    """
    try:
        raw = await fetch()
    except FetchError as e:
        logger.error("%s", e)
        return None

    try:
        appointments = decode_appointments(raw)
    except DecodeError as e:
        logger.error("%s", e)
        return None

    logger.debug("Received %s appointment(s)", len(appointments))
    selected = select_appointment(appointments, constraints)
    if selected is None:
        return None

    logger.info(
        "Appointment available at location %s starting %s",
        selected.location_id,
        selected.start_timestamp,
    )
    try:
        await notifier.notify(selected)
    except NotifyError as e:
        logger.error("Failed to send notification for location %s: %s", selected.location_id, e)
    return selected


@dataclass
class MonitorService:
    """Fixed-interval scheduler running one check cycle at a time."""

    cycle: CycleFunc
    interval: float
    _state: MonitorState = field(default_factory=MonitorState)
    _task: Optional[asyncio.Task[None]] = None

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError("interval must be positive")

    @property
    def is_running(self) -> bool:
        return self._state.state is SchedulerState.running

    @property
    def state(self) -> MonitorState:
        return self._state

    def start(self) -> asyncio.Task[None]:
        """Launch the loop as a background task; a second call returns the same task."""
        if self._task and not self._task.done():
            logger.info("Monitor already running")
            return self._task
        self._task = asyncio.create_task(self._run_loop(), name="slot-monitor-loop")
        return self._task

    async def run_forever(self) -> None:
        """Start the loop and block on it; returns only if the task is cancelled."""
        task = self.start()
        try:
            await task
        except asyncio.CancelledError:
            logger.info("Monitor loop cancelled after %s check(s)", self._state.checks_count)
            raise

    async def _run_loop(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.interval

        while True:
            delay = next_tick - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)

            await self._run_cycle()

            # Следующий тик — ближайшая граница сетки в будущем; пропущенные не копятся
            next_tick += self.interval
            now = loop.time()
            if next_tick < now:
                missed = math.ceil((now - next_tick) / self.interval)
                next_tick += missed * self.interval
                self._state.skipped_ticks += missed
                logger.warning(
                    "Check #%s overran the %.1fs interval, skipped %s tick(s)",
                    self._state.checks_count,
                    self.interval,
                    missed,
                )

    async def _run_cycle(self) -> None:
        self._state.state = SchedulerState.running
        self._state.checks_count += 1
        self._state.last_check_at = datetime.now()
        logger.debug("Starting check #%s", self._state.checks_count)
        try:
            selected = await self.cycle()
            if selected is not None:
                self._state.matches_found += 1
            self._state.last_error = None
        except Exception as e:  # noqa: BLE001
            logger.exception("Unexpected error in check #%s: %s", self._state.checks_count, e)
            self._state.last_error = str(e)
        finally:
            self._state.state = SchedulerState.idle


__all__ = ["MonitorService", "check_appointments", "FetchFunc", "CycleFunc"]
