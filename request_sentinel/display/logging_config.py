"""Logging configuration for hosts embedding Request Sentinel.

:func:`setup_logging` routes the ``request_sentinel`` loggers (and
Starlette's) to a timestamped file under ``logs/``.  Every handler it
creates carries :data:`secret_redaction_filter`, which scrubs bearer
tokens and JWT keys registered by the config loader.
"""

import logging
import logging.config
import os
import re
import sys
from datetime import datetime
from typing import Any, Dict, Optional, Set, Tuple  # noqa: UP035

from request_sentinel.constants import LOG_DIR

_REDACTED = "***REDACTED***"
_MIN_SECRET_LEN = 4

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Loggers that follow the requested level; everything else stays at WARNING
_SENTINEL_LOGGERS = ("request_sentinel", "starlette")


# ── Secret redaction ─────────────────────────────────────────────────────


class SecretRedactionFilter(logging.Filter):
    """Replaces registered secret values in log records.

    Both the message template and string arguments are scrubbed, so a
    token passed as ``logger.info("token %s", token)`` never reaches a
    handler.
    """

    def __init__(self) -> None:
        super().__init__()
        self._secrets: Set[str] = set()
        self._pattern: Optional[re.Pattern[str]] = None

    def register(self, value: str) -> None:
        if not value or len(value) < _MIN_SECRET_LEN or value in self._secrets:
            return
        self._secrets.add(value)
        # Longest first so a secret containing another is masked whole
        alternatives = sorted(self._secrets, key=len, reverse=True)
        self._pattern = re.compile("|".join(re.escape(s) for s in alternatives))

    def clear(self) -> None:
        self._secrets.clear()
        self._pattern = None

    def _scrub(self, value: Any) -> Any:
        if self._pattern is None or not isinstance(value, str):
            return value
        return self._pattern.sub(_REDACTED, value)

    def filter(self, record: logging.LogRecord) -> bool:
        if self._pattern is None:
            return True
        record.msg = self._scrub(record.msg)
        if isinstance(record.args, dict):
            record.args = {k: self._scrub(v) for k, v in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(self._scrub(a) for a in record.args)
        return True


secret_redaction_filter = SecretRedactionFilter()


def _shared_redaction_filter() -> SecretRedactionFilter:
    # dictConfig factory: every handler shares the module singleton
    return secret_redaction_filter


# ── dictConfig ───────────────────────────────────────────────────────────


def build_log_config(level: str, log_fpath: str, *, console: bool = False) -> Dict[str, Any]:
    """Return the :func:`logging.config.dictConfig` mapping for *level*."""
    handlers: Dict[str, Dict[str, Any]] = {
        "sentinel_file": {
            "class": "logging.FileHandler",
            "level": "DEBUG",
            "formatter": "sentinel",
            "filters": ["redact_secrets"],
            "filename": log_fpath,
            "encoding": "utf-8",
        },
    }
    if console:
        handlers["sentinel_console"] = {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "sentinel",
            "filters": ["redact_secrets"],
            "stream": "ext://sys.stderr",
        }
    handler_names = list(handlers)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"redact_secrets": {"()": _shared_redaction_filter}},
        "formatters": {
            "sentinel": {
                "format": "%(asctime)s - %(name)30s:%(lineno)-4d - %(levelname)-7s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "loggers": {
            name: {"handlers": handler_names, "propagate": False, "level": level}
            for name in _SENTINEL_LOGGERS
        },
        "root": {
            "handlers": handler_names,
            "level": level if level == "DEBUG" else "WARNING",
        },
    }


def setup_logging(
    log_lvl_str: str,
    *,
    log_dir: str = LOG_DIR,
    console: bool = False,
    quiet: bool = False,
) -> Tuple[str, str]:
    """Configure file logging (and optionally stderr) at *log_lvl_str*.

    Args:
        log_lvl_str: Level name, case-insensitive; unknown names fall
            back to ``INFO``.
        log_dir: Directory receiving ``sentinel_<timestamp>_<LEVEL>.log``.
        console: Also log to stderr.
        quiet: Suppress the ``print()`` notices.

    Returns:
        ``(log_file_path, level)``.
    """
    level = log_lvl_str.upper()
    if level not in _VALID_LEVELS:
        if not quiet:
            print(f"Warning: invalid log level '{log_lvl_str}'. Using 'INFO'.")
        level = "INFO"

    os.makedirs(log_dir, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_fpath = os.path.join(log_dir, f"sentinel_{stamp}_{level}.log")

    try:
        logging.config.dictConfig(build_log_config(level, log_fpath, console=console))
    except (ValueError, TypeError, AttributeError, ImportError) as exc:
        if not quiet:
            print(f"Error applying logging configuration: {exc}", file=sys.stderr)
        return log_fpath, level

    if not quiet:
        print(f"Logging initialized. File log level: {level}, log file: {log_fpath}")
    return log_fpath, level
