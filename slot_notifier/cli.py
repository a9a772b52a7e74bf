"""
Command-line entrypoint.

Разбор флагов, интерактивный ввод недостающих обязательных параметров,
сборка зависимостей и запуск бесконечного мониторинга.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from functools import partial
from typing import Callable, Optional, Sequence

from .client import SlotsClient, create_http_client
from .config import Settings, load_logging_config, load_settings
from .errors import ConfigError
from .monitor import MonitorService, check_appointments
from .notifiers import build_notifier
from .utils import setup_logging

logger = logging.getLogger(__name__)


PromptFunc = Callable[[str], str]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slot-notifier",
        description="Checks for appointment slots and sends notifications",
    )
    parser.add_argument("-l", "--location", help="Specify the location ID")
    parser.add_argument(
        "-n",
        "--notifier",
        choices=["push", "app", "system"],
        help="Specify the notifier type (push or system; 'app' is an alias for push)",
    )
    parser.add_argument("-t", "--topic", help="Specify the ntfy topic (required if notifier is push)")
    parser.add_argument(
        "-i",
        "--interval",
        help="Specify the interval between checks, e.g. 60s, 5m (default 60s)",
    )
    parser.add_argument(
        "-b",
        "--before",
        help="Only notify for appointments before this date, YYYY-MM-DD (default one year from now)",
    )
    parser.add_argument("-e", "--earliest", help="Earliest acceptable appointment time, HH:MM (24-hour)")
    parser.add_argument("-L", "--latest", help="Latest acceptable appointment time, HH:MM (24-hour)")
    return parser


def _prompt(text: str) -> str:
    return input(text).strip()


def resolve_overrides(
    args: argparse.Namespace,
    interactive: bool,
    prompt: PromptFunc = _prompt,
) -> dict[str, Optional[str]]:
    """
    Map CLI flags onto config variable names, asking for missing required ones.

    Значения из окружения/.env считаются заданными, спрашиваем только то,
    чего нет нигде.
    """
    overrides: dict[str, Optional[str]] = {
        "LOCATION_ID": args.location,
        "NOTIFIER": args.notifier,
        "NTFY_TOPIC": args.topic,
        "CHECK_INTERVAL": args.interval,
        "BEFORE_DATE": args.before,
        "EARLIEST_TIME": args.earliest,
        "LATEST_TIME": args.latest,
    }
    if not interactive:
        return overrides

    def current(name: str) -> str:
        return (overrides.get(name) or os.environ.get(name) or "").strip()

    if not current("LOCATION_ID"):
        overrides["LOCATION_ID"] = prompt("Enter the location ID: ")
    if not current("NOTIFIER"):
        overrides["NOTIFIER"] = prompt("Enter the notifier type (push/system): ")
    if current("NOTIFIER").lower() in ("push", "app") and not current("NTFY_TOPIC"):
        overrides["NTFY_TOPIC"] = prompt("Enter the ntfy topic: ")
    return overrides


async def run(settings: Settings) -> None:
    """Wire collaborators together and run the monitor until the process stops."""
    async with create_http_client() as http:
        slots = SlotsClient(http, settings.api, settings.monitor.location_id)
        notifier = build_notifier(settings.notifier, http)
        monitor = MonitorService(
            cycle=partial(check_appointments, slots.fetch, notifier, settings.constraints),
            interval=settings.monitor.interval_seconds,
        )
        await monitor.run_forever()


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for running the notifier."""
    parser = build_parser()
    args = parser.parse_args(argv)
    overrides = resolve_overrides(args, interactive=sys.stdin.isatty())

    setup_logging(load_logging_config(overrides))
    try:
        settings = load_settings(overrides)
    except ConfigError as e:
        print(e, file=sys.stderr)
        parser.print_usage(sys.stderr)
        sys.exit(1)

    constraints = settings.constraints
    logger.info(
        "Checking location %s every %.0fs via %s notifier (before %s, earliest %s, latest %s)",
        settings.monitor.location_id,
        settings.monitor.interval_seconds,
        settings.notifier.kind.value,
        constraints.cutoff.strftime("%Y-%m-%d %H:%M"),
        constraints.earliest_minutes,
        constraints.latest_minutes,
    )
    if constraints.time_window == (None, None) and constraints.earliest_minutes is not None:
        logger.warning("Latest time is before earliest time, time-of-day filtering is disabled")

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Stopped by user")


__all__ = ["main", "build_parser", "resolve_overrides", "run"]
