"""File logging for the catalog server.

Everything goes to one timestamped file under ``logs/``; the console is
left to the CLI's rich output.  Values registered with
:data:`secret_redaction_filter` (the Supabase service key) are masked in
every record before it is written.
"""

import logging
import logging.config
import os
import re
import sys
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from levante_catalog.constants import DEFAULT_LOG_LEVEL, LOG_DIR

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_MASK = "***REDACTED***"
_MIN_SECRET_LENGTH = 4

# Loggers that follow the requested level.
_CATALOG_LOGGERS = (
    "levante_catalog",
    "uvicorn",
    "uvicorn.error",
    "starlette",
)

_LOG_FORMAT = "%(asctime)s - %(name)30s:%(lineno)-4d - %(levelname)-7s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class SecretRedactionFilter(logging.Filter):
    """Masks registered secret values in the rendered log message.

    The record's message is rendered once, masked, and stored back with no
    arguments, so secrets passed either inline or as ``%s`` arguments are
    both caught.
    """

    def __init__(self) -> None:
        super().__init__()
        self._values: set = set()
        self._regex: Optional[re.Pattern] = None

    def register(self, value: Optional[str]) -> None:
        if not value or len(value) < _MIN_SECRET_LENGTH or value in self._values:
            return
        self._values.add(value)
        # Longest first so a secret containing another is masked whole.
        alternatives = sorted(self._values, key=len, reverse=True)
        self._regex = re.compile("|".join(re.escape(v) for v in alternatives))

    def redact(self, text: str) -> str:
        if self._regex is None:
            return text
        return self._regex.sub(_MASK, text)

    def filter(self, record: logging.LogRecord) -> bool:
        if self._regex is None:
            return True
        try:
            rendered = record.getMessage()
        except (TypeError, ValueError):
            rendered = str(record.msg)
        record.msg = self.redact(rendered)
        record.args = None
        return True


secret_redaction_filter = SecretRedactionFilter()


def validate_log_level(log_lvl_str: str, *, quiet: bool = False) -> str:
    """Upper-cased *log_lvl_str*, or the default level if it is unknown."""
    level = (log_lvl_str or "").upper()
    if level in VALID_LOG_LEVELS:
        return level
    if not quiet:
        print(f"Warning: invalid log level '{log_lvl_str}'. Using '{DEFAULT_LOG_LEVEL}'.")
    return DEFAULT_LOG_LEVEL


def _logger_entry(level: str) -> Dict[str, Any]:
    return {"handlers": ["catalog_file"], "propagate": False, "level": level}


def build_log_config(log_fpath: str, level: str) -> Dict[str, Any]:
    """``dictConfig`` mapping that writes to *log_fpath*.

    Catalog, uvicorn and starlette loggers use *level*.  Access logs and
    httpx request lines only show up when *level* is ``DEBUG``.
    """
    debugging = level == "DEBUG"
    loggers = {name: _logger_entry(level) for name in _CATALOG_LOGGERS}
    loggers["uvicorn.access"] = _logger_entry("INFO" if debugging else "WARNING")
    loggers["httpx"] = _logger_entry("DEBUG" if debugging else "WARNING")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"redact": {"()": lambda: secret_redaction_filter}},
        "formatters": {"catalog": {"format": _LOG_FORMAT, "datefmt": _DATE_FORMAT}},
        "handlers": {
            "catalog_file": {
                "class": "logging.FileHandler",
                "level": "DEBUG",
                "formatter": "catalog",
                "filters": ["redact"],
                "filename": log_fpath,
                "encoding": "utf-8",
            },
        },
        "loggers": loggers,
        "root": {"handlers": ["catalog_file"], "level": level if debugging else "WARNING"},
    }


def setup_logging(log_lvl_str: str, *, quiet: bool = False) -> Tuple[str, str]:
    """
    Configure file logging for this process.

    Args:
        log_lvl_str: Requested level name (any case).
        quiet: Suppress the ``print()`` status lines.

    Returns:
        ``(log_file_path, validated_level)``.
    """
    level = validate_log_level(log_lvl_str, quiet=quiet)
    os.makedirs(LOG_DIR, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_fpath = os.path.join(LOG_DIR, f"catalog_{stamp}_{level}.log")

    try:
        logging.config.dictConfig(build_log_config(log_fpath, level))
    except (ValueError, TypeError, AttributeError, ImportError) as e_log_cfg:
        if not quiet:
            print(f"Error applying logging configuration: {e_log_cfg}", file=sys.stderr)
    else:
        if not quiet:
            print(f"Logging initialized. File log level: {level}, log file: {log_fpath}")
    return log_fpath, level
