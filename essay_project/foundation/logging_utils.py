"""Logging helpers shared by the command line entry points."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
LOG_FILE_NAME = "essay_project.log"


def setup_command_logger(
    command: str,
    *,
    level: str | int = logging.INFO,
    log_dir: str | None = None,
) -> logging.Logger:
    """
    Configure the logger for one CLI command (stream, plus a file when `log_dir` is set).

    Repeated calls reconfigure the same named logger instead of stacking handlers.
    """

    logger = logging.getLogger(f"essay_project.{command}")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, LOG_FILE_NAME)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.debug("Log file: %s", log_path)

    logger.propagate = False
    return logger


def write_text(path: str, text: str) -> None:
    """Write text to a UTF-8 file, creating parent directories."""
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as file:
        file.write(text)
