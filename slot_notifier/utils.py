"""
Utility helpers: logging setup.

Вспомогательные функции: лог-файл с ротацией, консоль и уровни
для отдельных шумных логгеров из LoggingConfig.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from .config import LoggingConfig, load_logging_config


LOG_FILE_NAME = "slot_notifier.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def _build_handlers(logging_cfg: LoggingConfig) -> list[logging.Handler]:
    logging_cfg.logs_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            logging_cfg.logs_dir / LOG_FILE_NAME,
            maxBytes=logging_cfg.max_bytes,
            backupCount=logging_cfg.backup_count,
            encoding="utf-8",
        ),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(logging_cfg: LoggingConfig | None = None) -> None:
    """
    Configure application-wide logging: rotating file plus console.

    Per-logger levels from ``logging_cfg.logger_levels`` are applied last.
    """
    if logging_cfg is None:
        logging_cfg = load_logging_config()

    root = logging.getLogger()
    root.setLevel(logging_cfg.log_level.upper())
    root.handlers.clear()
    for handler in _build_handlers(logging_cfg):
        root.addHandler(handler)

    for name, level in logging_cfg.logger_levels.items():
        logging.getLogger(name).setLevel(level.upper())


__all__ = ["setup_logging", "LOG_FILE_NAME"]
