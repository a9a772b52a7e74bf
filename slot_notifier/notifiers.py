"""
Notification channels.

Два канала уведомлений, выбираемые один раз при старте:
- push: POST текста в топик ntfy
- system: локальное уведомление ОС через plyer
Ошибка доставки превращается в NotifyError; повторных попыток нет.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx
from plyer import notification

from .config import DEFAULT_NOTIFY_TITLE, DEFAULT_NTFY_SERVER, NotifierConfig
from .errors import ConfigError, NotifyError, TimeParseError
from .filters import parse_start_time
from .models import Appointment, NotifierKind

logger = logging.getLogger(__name__)


def format_message(appointment: Appointment) -> str:
    """Human-readable text for a selected appointment."""
    try:
        start = parse_start_time(appointment.start_timestamp).strftime("%Y-%m-%d %H:%M")
    except TimeParseError:
        start = appointment.start_timestamp or "unknown time"
    return (
        f"There is a global entry appointment open at location {appointment.location_id} "
        f"on {start}"
    )


class Notifier(abc.ABC):
    """Delivers a single notification about a selected appointment."""

    @abc.abstractmethod
    async def notify(self, appointment: Appointment) -> None:
        """Send the notification; raises NotifyError on failure."""


class PushNotifier(Notifier):
    """Publishes to an ntfy topic."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        topic: str,
        server: str = DEFAULT_NTFY_SERVER,
        title: str = DEFAULT_NOTIFY_TITLE,
    ) -> None:
        self._http = http
        self.topic = topic
        self.url = f"{server.rstrip('/')}/{topic}"
        self.title = title

    async def notify(self, appointment: Appointment) -> None:
        try:
            response = await self._http.post(
                self.url,
                content=format_message(appointment).encode("utf-8"),
                headers={"Content-Type": "text/plain", "Title": self.title},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotifyError(
                f"Failed to publish to ntfy topic {self.topic!r}: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise NotifyError(f"Failed to publish to ntfy topic {self.topic!r}: {e!r}") from e
        logger.info("Push notification sent to topic %s", self.topic)


class SystemNotifier(Notifier):
    """Shows a local desktop notification."""

    def __init__(
        self,
        title: str = DEFAULT_NOTIFY_TITLE,
        icon: Optional[Path] = None,
        app_name: str = "Global Entry Slot Notifier",
    ) -> None:
        self.title = title
        self.icon = icon
        self.app_name = app_name

    async def notify(self, appointment: Appointment) -> None:
        message = format_message(appointment)
        try:
            # plyer блокирующий, уводим вызов из event loop
            await asyncio.to_thread(
                notification.notify,
                title=self.title,
                message=message,
                app_name=self.app_name,
                app_icon=str(self.icon) if self.icon else "",
            )
        except Exception as e:  # noqa: BLE001
            raise NotifyError(f"Failed to show system notification: {e!r}") from e
        logger.info("System notification shown: %s", message)


def build_notifier(config: NotifierConfig, http: httpx.AsyncClient) -> Notifier:
    if config.kind is NotifierKind.push:
        if not config.topic:
            raise ConfigError("ntfy topic is required for the push notifier")
        return PushNotifier(http, config.topic, server=config.server, title=config.title)
    return SystemNotifier(title=config.title, icon=config.icon)


__all__ = [
    "Notifier",
    "PushNotifier",
    "SystemNotifier",
    "build_notifier",
    "format_message",
]
