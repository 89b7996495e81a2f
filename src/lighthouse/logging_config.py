"""Process logging setup for lighthouse.

Brief:
  init_logging() configures the root logger once at startup. Library modules
  only ever call logging.getLogger(__name__); handlers, levels and formats
  are decided here.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "crit": logging.CRITICAL,
    "critical": logging.CRITICAL,
}

_TAGS = {
    logging.DEBUG: "[debug]",
    logging.INFO: "[info]",
    logging.WARNING: "[warn]",
    logging.ERROR: "[error]",
    logging.CRITICAL: "[crit]",
}


def _level_tag(levelno: int) -> str:
    return _TAGS.get(levelno, f"[lvl{levelno}]")


class SyslogFormatter(logging.Formatter):
    """Formatter for syslog output without timestamps (syslog adds its own)."""

    def format(self, record):
        record.level_tag = _level_tag(record.levelno)
        return f"lighthouse: {record.level_tag} {record.name}: {record.getMessage()}"


class BracketLevelFormatter(logging.Formatter):
    """Formatter with bracketed lowercase level tags and UTC timestamps."""

    def formatTime(self, record, datefmt=None):
        """Format the record's creation time as UTC ISO-8601 with Z suffix."""
        return datetime.fromtimestamp(record.created, timezone.utc).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        )

    def format(self, record):
        record.level_tag = _level_tag(record.levelno)
        return super().format(record)


def resolve_level(name: Optional[str]) -> int:
    """Brief: Map a level name (debug, info, warn, error, crit) to a constant.

    Outputs:
      - int: logging level; unknown names fall back to INFO.
    """

    return _LEVELS.get(str(name or "info").lower(), logging.INFO)


def init_logging(cfg: Optional[Dict[str, Any]]) -> None:
    """Brief: Configure the root logger from a small settings mapping.

    Inputs:
      - cfg: Mapping with optional keys:
        - level: debug, info, warn, error, crit (default: info)
        - stderr: log to stderr (default: True)
        - file: path of a log file to append to
        - syslog: True, or {"address": ..., "facility": ...}

    Outputs:
      - None; existing root handlers are replaced.

    Example:
      >>> init_logging({"level": "debug", "file": "./lighthouse.log"})
    """

    cfg = cfg or {}
    level = resolve_level(cfg.get("level"))
    formatter = BracketLevelFormatter(fmt="%(asctime)s %(level_tag)s %(name)s: %(message)s")

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    if cfg.get("stderr", True):
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        root.addHandler(stderr_handler)

    file_path = cfg.get("file")
    if isinstance(file_path, str) and file_path.strip():
        path = os.path.abspath(os.path.expanduser(file_path.strip()))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    syslog_cfg = cfg.get("syslog")
    if syslog_cfg:
        if isinstance(syslog_cfg, dict):
            address = syslog_cfg.get("address", "/dev/log")
            facility = getattr(
                logging.handlers.SysLogHandler,
                f"LOG_{str(syslog_cfg.get('facility', 'USER')).upper()}",
                logging.handlers.SysLogHandler.LOG_USER,
            )
        else:
            address = "/dev/log"
            facility = logging.handlers.SysLogHandler.LOG_USER
        try:
            syslog_handler = logging.handlers.SysLogHandler(
                address=address, facility=facility
            )
        except OSError as e:  # pragma: no cover - environment specific
            root.warning("Failed to configure syslog: %s", e)
        else:
            syslog_handler.setFormatter(SyslogFormatter())
            root.addHandler(syslog_handler)

    logging.captureWarnings(True)
