from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PACKAGE_LOGGER = "spo_precheck"

CONSOLE_THEME = Theme(
    {
        "logging.level.debug": "dim",
        "logging.level.info": "blue",
        "logging.level.success": "green",
        "logging.level.warning": "yellow",
        "logging.level.error": "red bold",
        "logging.level.critical": "red bold reverse",
    }
)


def log_success(logger: logging.Logger, msg: str, *args) -> None:
    logger.log(SUCCESS, msg, *args)


def setup_logging(log_file: Optional[Path] = None, *, verbose: bool = False, console: Optional[Console] = None) -> logging.Logger:
    """
    Console output goes through rich with per-level colours; the optional log
    file gets plain timestamped lines and is appended to across runs.
    Calling this again replaces the handlers installed by a previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    console_handler = RichHandler(
        console=console or Console(theme=CONSOLE_THEME, stderr=True),
        show_path=False,
        omit_repeated_times=False,
        log_time_format=DATE_FORMAT,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger
