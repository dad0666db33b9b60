"""Logging configuration for the CLI."""

import logging
from pathlib import Path
from typing import Optional

from city_updates.config import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(settings: Settings, level: Optional[str] = None) -> None:
    log_level = (level or settings.logging.level).upper()
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    log_path: Optional[Path] = settings.logging.file
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
