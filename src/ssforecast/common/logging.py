"""src/ssforecast/common/logging.py"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from ssforecast.common.config import AppConfig


def _level(name: object, default: int) -> int:
    return getattr(logging, str(name).upper(), default)


def setup_logging(cfg: AppConfig) -> None:
    """
    Console + optional rotating file logging.

    logging.engine_level sets the level of the ssforecast.engine logger on its
    own; the recursions log repairs and sentinel substitutions there at DEBUG,
    once per optimiser evaluation.
    """
    level = _level(cfg.logging.get("level", "INFO"), logging.INFO)

    handlers: list[logging.Handler] = []

    console = logging.StreamHandler()
    console.setLevel(level)
    handlers.append(console)

    log_file = cfg.logging.get("file")
    if log_file:
        lf = cfg.resolve(log_file)
        lf.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(lf, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
        file_handler.setLevel(level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=handlers,
        force=True,
    )

    logging.getLogger("ssforecast.engine").setLevel(_level(cfg.logging.get("engine_level", "WARNING"), logging.WARNING))
