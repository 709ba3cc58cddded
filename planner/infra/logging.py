from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from planner.config import PROJECT_ROOT, Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(settings: Settings, filename: str = "planner.log") -> Path:
    log_dir = Path(settings.log_dir)
    if not log_dir.is_absolute():
        log_dir = PROJECT_ROOT / log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / filename

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    file_handler = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    console_handler = logging.StreamHandler()
    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)

    level = settings.log_level.upper()
    logging.basicConfig(level=level, handlers=[file_handler, console_handler], force=True)
    # SQL statements only at DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if level == "DEBUG" else logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return log_file
