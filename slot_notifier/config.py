"""
Config loading via Pydantic v2 and python-dotenv.

Загрузка конфигурации из .env, переменных окружения и флагов CLI.
Обязательные параметры (локация, тип уведомлений, топик для push) проверяются
строго, необязательные при ошибке игнорируются с записью в лог.
"""

from __future__ import annotations

import logging
import math
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Mapping, Optional, TypeVar

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator

from .errors import ConfigError
from .models import CheckConstraints, NotifierKind

logger = logging.getLogger(__name__)

T = TypeVar("T")


# .env ищем от текущего каталога вверх: после установки пакета рядом с кодом его нет
ENV_PATH = find_dotenv(usecwd=True)
if ENV_PATH:
    load_dotenv(ENV_PATH, override=False)


DEFAULT_SLOTS_URL = "https://ttp.cbp.dhs.gov/schedulerapi/slots"
DEFAULT_NTFY_SERVER = "https://ntfy.sh"
DEFAULT_INTERVAL_SECONDS = 60.0
DEFAULT_SLOTS_LIMIT = 10
DEFAULT_NOTIFY_TITLE = "Appointment Slot Available"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


class MonitorConfig(BaseModel):
    location_id: str = Field(min_length=1)
    interval_seconds: float = Field(default=DEFAULT_INTERVAL_SECONDS, gt=0)


class NotifierConfig(BaseModel):
    kind: NotifierKind
    topic: Optional[str] = None
    server: str = DEFAULT_NTFY_SERVER
    title: str = DEFAULT_NOTIFY_TITLE
    icon: Optional[Path] = None

    @model_validator(mode="after")
    def _topic_required_for_push(self) -> "NotifierConfig":
        if self.kind is NotifierKind.push and not self.topic:
            raise ValueError("ntfy topic is required for the push notifier")
        return self


class ApiConfig(BaseModel):
    url: str = DEFAULT_SLOTS_URL
    limit: int = Field(default=DEFAULT_SLOTS_LIMIT, ge=1)


class LoggingConfig(BaseModel):
    logs_dir: Path = Field(default_factory=lambda: Path.cwd() / "logs")
    log_level: str = Field(default="INFO")
    max_bytes: int = Field(default=5 * 1024 * 1024)  # 5 MB
    backup_count: int = Field(default=5)
    # httpx пишет каждый запрос на INFO, для опроса раз в минуту это шум
    logger_levels: dict[str, str] = Field(default_factory=lambda: {"httpx": "WARNING"})


class Settings(BaseModel):
    monitor: MonitorConfig
    notifier: NotifierConfig
    api: ApiConfig = ApiConfig()
    constraints: CheckConstraints
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# region parsing helpers
def parse_duration(text: str) -> float:
    """
    Parse a duration into seconds.

    Accepts plain seconds ("90", "1.5") or Go-style units ("90s", "5m",
    "1h30m", "250ms"). Raises ValueError on anything else.
    """
    value = text.strip().lower()
    if not value:
        raise ValueError("empty duration")
    try:
        return float(value)
    except ValueError:
        pass

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(value):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos != len(value):
        raise ValueError(f"invalid duration {text!r}")
    return total


def parse_time_of_day(text: str) -> int:
    """Parse 24-hour "HH:MM" into minutes since midnight."""
    moment = datetime.strptime(text.strip(), "%H:%M")
    return moment.hour * 60 + moment.minute


def parse_date(text: str) -> datetime:
    """Parse "YYYY-MM-DD" into local midnight of that day."""
    return datetime.strptime(text.strip(), "%Y-%m-%d")


def one_year_from(moment: datetime) -> datetime:
    """Same wall-clock time one year later; Feb 29 rolls over to Mar 1."""
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        return moment.replace(year=moment.year + 1, month=3, day=1)


def _positive_duration(text: str) -> float:
    seconds = parse_duration(text)
    if not math.isfinite(seconds) or seconds <= 0:
        raise ValueError("interval must be a positive finite duration")
    return seconds


def _positive_int(text: str) -> int:
    value = int(text.strip())
    if value < 1:
        raise ValueError("must be at least 1")
    return value


def _optional(
    env: Mapping[str, str],
    name: str,
    parse: Callable[[str], T],
    default: T,
) -> T:
    """Parse an optional value; invalid input is logged and falls back to default."""
    raw = env.get(name, "")
    if not raw or not raw.strip():
        return default
    try:
        return parse(raw)
    except ValueError as e:
        logger.warning("Ignoring invalid %s=%r (%s), using %s", name, raw, e, default)
        return default


# endregion


def _merged_env(overrides: Mapping[str, Optional[str]] | None) -> dict[str, str]:
    env = dict(os.environ)
    if overrides:
        env.update({k: v for k, v in overrides.items() if v is not None})
    return env


def load_logging_config(overrides: Mapping[str, Optional[str]] | None = None) -> LoggingConfig:
    env = _merged_env(overrides)
    values: dict[str, object] = {}
    if env.get("LOGS_DIR"):
        values["logs_dir"] = Path(env["LOGS_DIR"])
    if env.get("LOG_LEVEL"):
        values["log_level"] = env["LOG_LEVEL"]
    return LoggingConfig(**values)


def load_settings(
    overrides: Mapping[str, Optional[str]] | None = None,
    now: datetime | None = None,
) -> Settings:
    """
    Build settings from the environment with optional overrides.

    ``overrides`` uses environment variable names as keys (e.g. values coming
    from CLI flags); ``None`` values are ignored. Raises ConfigError when a
    required option is missing or invalid.
    """
    env = _merged_env(overrides)
    now = now or datetime.now()

    location_id = env.get("LOCATION_ID", "").strip()
    if not location_id:
        raise ConfigError("Location ID is required (--location or LOCATION_ID)")

    kind_raw = env.get("NOTIFIER", "").strip()
    if not kind_raw:
        raise ConfigError("Notifier type is required (--notifier or NOTIFIER)")
    try:
        kind = NotifierKind.parse(kind_raw)
    except ValueError:
        raise ConfigError(f"Unknown notifier type: {kind_raw}") from None

    topic = env.get("NTFY_TOPIC", "").strip() or None
    if kind is NotifierKind.push and not topic:
        raise ConfigError("ntfy topic is required when notifier is push (--topic or NTFY_TOPIC)")

    icon = env.get("NOTIFY_ICON", "").strip()

    try:
        return Settings(
            monitor=MonitorConfig(
                location_id=location_id,
                interval_seconds=_optional(
                    env, "CHECK_INTERVAL", _positive_duration, DEFAULT_INTERVAL_SECONDS
                ),
            ),
            notifier=NotifierConfig(
                kind=kind,
                topic=topic,
                server=env.get("NTFY_SERVER", "").strip().rstrip("/") or DEFAULT_NTFY_SERVER,
                title=env.get("NOTIFY_TITLE", "").strip() or DEFAULT_NOTIFY_TITLE,
                icon=Path(icon) if icon else None,
            ),
            api=ApiConfig(
                url=env.get("SLOTS_API_URL", "").strip() or DEFAULT_SLOTS_URL,
                limit=_optional(env, "SLOTS_LIMIT", _positive_int, DEFAULT_SLOTS_LIMIT),
            ),
            constraints=CheckConstraints(
                cutoff=_optional(env, "BEFORE_DATE", parse_date, one_year_from(now)),
                earliest_minutes=_optional(env, "EARLIEST_TIME", parse_time_of_day, None),
                latest_minutes=_optional(env, "LATEST_TIME", parse_time_of_day, None),
            ),
            logging=load_logging_config(overrides),
        )
    except ValidationError as e:
        # Пробрасываем как ConfigError, чтобы CLI вывел аккуратную ошибку
        raise ConfigError(f"Invalid configuration: {e}") from e


__all__ = [
    "Settings",
    "MonitorConfig",
    "NotifierConfig",
    "ApiConfig",
    "LoggingConfig",
    "load_settings",
    "load_logging_config",
    "parse_duration",
    "parse_time_of_day",
    "parse_date",
    "one_year_from",
    "ENV_PATH",
]
