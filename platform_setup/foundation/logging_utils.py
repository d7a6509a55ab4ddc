"""Logging helpers that avoid heavy dependencies."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def setup_operational_logger(
    log_dir: str | None,
    run_id: str,
    *,
    level: int = logging.INFO,
) -> tuple[logging.Logger, str | None]:
    """
    Configure a logger that writes an operational log for traceability.

    Logs go to stderr at `level` and, when `log_dir` is set, to a UTF-8 file
    `<run_id>_oplog.log` at DEBUG.
    """

    logger = logging.getLogger(f"platform_setup.{run_id}")
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    log_file: str | None = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f"{run_id}_oplog.log")
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)
    logger.propagate = False

    logger.info("Operational logging initialized for run %s", run_id)
    if log_file:
        logger.debug("Operational log file: %s", log_file)

    return logger, log_file


def close_logger(logger: logging.Logger) -> None:
    """Flush and detach every handler so log files are released."""
    for handler in list(logger.handlers):
        handler.flush()
        handler.close()
        logger.removeHandler(handler)
