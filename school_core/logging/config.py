# =============================================================================
# school_core/logging/config.py
# Logging Configuration for the School Registry
# =============================================================================
"""
Every module logs through ``get_logger(__name__)``; the Streamlit page calls
``setup_logging`` once with the level from Settings.

Sync status changes go through ``log_sync_transition`` so a log file shows
when the app went offline and when it came back.
"""

import logging
import sys
import time
from datetime import date
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_DIR = Path("logs")
PACKAGE_LOGGER = "school_core"

# HTTP stack underneath the Supabase client
NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "hpack", "supabase", "postgrest")

STATUS_ERROR = "error"


def resolve_level(level: Union[int, str]) -> int:
    """Numeric level for a number or a name such as "debug"; unknown names give INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def daily_log_path(log_dir: Path = LOG_DIR, day: Optional[date] = None) -> Path:
    return log_dir / f"school_{(day or date.today()).isoformat()}.log"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_to_file: bool = True,
    log_dir: Path = LOG_DIR,
) -> Optional[Path]:
    """
    Configure stdout logging and, optionally, one file per day.

    Args:
        level: Level number or name (Settings.log_level)
        log_to_file: Also write to ``<log_dir>/school_YYYY-MM-DD.log``
        log_dir: Directory for the daily files

    Returns:
        Path of the log file, or None when only stdout is used
    """
    handlers = [logging.StreamHandler(sys.stdout)]
    log_path = None
    if log_to_file:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = daily_log_path(log_dir)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    numeric = resolve_level(level)
    logging.basicConfig(
        level=numeric,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))

    get_logger(PACKAGE_LOGGER).info(
        f"Logging at {logging.getLevelName(numeric)}"
        + (f", file {log_path}" if log_path else "")
    )
    return log_path


def get_logger(name: str) -> logging.Logger:
    """
    Usage:
        from school_core.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


def log_sync_transition(
    logger: logging.Logger,
    previous: str,
    current: str,
    reason: Optional[str] = None,
) -> None:
    """
    Log a change of the settled sync status, given as status values
    ("synced", "error"). Going offline and coming back are INFO, anything
    else DEBUG; an unchanged status is not logged.
    """
    if previous == current:
        return
    if current == STATUS_ERROR:
        logger.info(f"Sync status {previous} -> {current}, changes kept locally: {reason or 'no detail'}")
    elif previous == STATUS_ERROR:
        logger.info(f"Sync status {previous} -> {current}, remote reachable again")
    else:
        logger.debug(f"Sync status {previous} -> {current}")


class LogContext:
    """
    Time a step and log its outcome. ``elapsed`` holds the duration in
    seconds after the block ends. Exceptions are logged and re-raised.

    Usage:
        with LogContext(logger, "Loading school data"):
            loader.load_from_remote()
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.elapsed: Optional[float] = None
        self._started = 0.0

    def __enter__(self) -> "LogContext":
        self._started = time.perf_counter()
        self.logger.log(self.level, f"{self.operation}...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.elapsed = time.perf_counter() - self._started
        if exc_type is None:
            self.logger.log(self.level, f"{self.operation} done in {self.elapsed:.2f}s")
        else:
            self.logger.error(
                f"{self.operation} failed after {self.elapsed:.2f}s: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb),
            )
        return False
