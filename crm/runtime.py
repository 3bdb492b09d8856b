"""
CRM Runtime Core
----------------
Centralized utilities for logging, timing and local-time handling.
"""

from __future__ import annotations

import concurrent.futures
import logging
import os
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional, TypeVar

from crm.config import AirtableSettings

T = TypeVar("T")

# Internal state flags
_LOGGING_CONFIGURED = False
_CORE_ENV_LOGGED = False


# ────────────────────────────────────────────────
# LOGGING CONFIG
# ────────────────────────────────────────────────
def _normalize_level(value: int | str | None) -> int:
    """Normalize string or int log level."""
    if value is None:
        env_level = os.getenv("CRM_LOG_LEVEL")
        if env_level:
            value = env_level
        else:
            return logging.INFO
    if isinstance(value, int):
        return value
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: int | str | None = None) -> None:
    """Initialize root logging configuration once."""
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return
    logging.basicConfig(
        level=_normalize_level(level),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # pyairtable goes through requests/urllib3
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    _LOGGING_CONFIGURED = True


def get_logger(name: str = "crm") -> logging.Logger:
    """Return module-specific logger."""
    if not _LOGGING_CONFIGURED:
        configure_logging()
    return logging.getLogger(name)


def log_core_env(settings: AirtableSettings) -> None:
    """Logs the Airtable connection summary once, secrets masked."""
    global _CORE_ENV_LOGGED
    if _CORE_ENV_LOGGED:
        return
    summary = settings.masked()
    get_logger("env").info(
        "Core env summary: Airtable token=%s | base=%s | tables=%s | configured=%s | in_memory=%s | strict_contact_link=%s",
        summary["token"],
        summary["base_id"],
        "/".join(summary["tables"]),
        summary["configured"],
        summary["in_memory"],
        summary["strict_contact_link"],
    )
    _CORE_ENV_LOGGED = True


# ────────────────────────────────────────────────
# TIME UTILITIES
# ────────────────────────────────────────────────
def utc_now() -> datetime:
    """Return UTC datetime (always timezone-aware)."""
    return datetime.now(timezone.utc)


def iso_now() -> str:
    """Return ISO8601 UTC timestamp (Z suffix)."""
    return utc_now().isoformat(timespec="seconds").replace("+00:00", "Z")


def local_now() -> datetime:
    """Return the current time in the host's local timezone (aware)."""
    return datetime.now().astimezone()


def start_of_local_day(now: Optional[datetime] = None) -> datetime:
    """Local midnight of the day containing ``now``."""
    # naive values are local; aware ones are converted to local first
    now = (now or local_now()).astimezone()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def parse_timestamp(raw: object) -> Optional[datetime]:
    """
    Parse an Airtable date or date-time value into an aware datetime.

    Naive values (and plain dates) are read as local time.
    """
    if not raw:
        return None
    try:
        dt = datetime.fromisoformat(str(raw).strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


# ────────────────────────────────────────────────
# PERF TIMERS
# ────────────────────────────────────────────────
class PerfTimer:
    """Context manager that logs the duration of a block."""

    def __init__(self, label: str, logger: Optional[logging.Logger] = None):
        self.label = label
        self.logger = logger or get_logger("perf")
        self.start: Optional[float] = None
        self.elapsed: Optional[float] = None

    def __enter__(self):
        self.start = time.time()
        return self

    def __exit__(self, *_):
        self.elapsed = round(time.time() - (self.start or time.time()), 3)
        self.logger.info("⏱ %s: %ss", self.label, self.elapsed)


# ────────────────────────────────────────────────
# CONCURRENT FETCH
# ────────────────────────────────────────────────
def gather(*calls: Callable[[], T]) -> List[T]:
    """
    Run independent calls on a thread pool: fire all, wait for all.

    Results keep the argument order; if any call failed, the first failure
    (in argument order) is re-raised after every call has finished.
    """
    with concurrent.futures.ThreadPoolExecutor(max_workers=max(1, len(calls))) as ex:
        futures = [ex.submit(call) for call in calls]
        concurrent.futures.wait(futures)
    return [f.result() for f in futures]
