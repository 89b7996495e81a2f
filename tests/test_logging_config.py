"""
Brief: Tests for lighthouse.logging_config.init_logging and formatters.

Inputs:
  - None

Outputs:
  - None
"""

import logging
import logging.handlers
from pathlib import Path

import pytest

from lighthouse.logging_config import (
    BracketLevelFormatter,
    SyslogFormatter,
    init_logging,
    resolve_level,
)


@pytest.fixture
def clean_root_logger():
    """
    Brief: Remove handlers installed by init_logging once the test finishes.

    Inputs:
      - None

    Outputs:
      - None
    """
    yield
    root = logging.getLogger()
    for h in list(root.handlers):
        if type(h) in (logging.StreamHandler, logging.FileHandler) or getattr(
            h, "_lighthouse_test", False
        ):
            root.removeHandler(h)
            h.close()
    root.setLevel(logging.WARNING)


def test_init_logging_adds_stderr_handler(clean_root_logger):
    """
    Brief: init_logging configures root logger with stderr handler by default.

    Inputs:
      - cfg: minimal dict with level

    Outputs:
      - None: Asserts StreamHandler present and level applied
    """
    init_logging({"level": "debug"})
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(type(h) is logging.StreamHandler for h in root.handlers)


def test_init_logging_without_stderr(clean_root_logger):
    """
    Brief: stderr=False leaves the root logger without a stream handler.

    Inputs:
      - cfg: stderr disabled

    Outputs:
      - None: Asserts no plain StreamHandler remains
    """
    init_logging({"stderr": False, "level": "warn"})
    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert not any(type(h) is logging.StreamHandler for h in root.handlers)


def test_init_logging_file_handler_writes(tmp_path, clean_root_logger):
    """
    Brief: init_logging creates file handler and writes formatted entries.

    Inputs:
      - cfg: file path and level

    Outputs:
      - None: Asserts file created and contains message
    """
    log_path = tmp_path / "logs" / "lighthouse.log"
    init_logging({"level": "info", "file": str(log_path)})
    logging.getLogger("test").info("file message")
    for h in logging.getLogger().handlers:
        h.flush()
    content = Path(log_path).read_text()
    assert "file message" in content
    assert "[info] test: file message" in content


def test_init_logging_syslog(monkeypatch, clean_root_logger):
    """
    Brief: init_logging attaches a syslog handler when configured.

    Inputs:
      - syslog: True or dict

    Outputs:
      - None: Asserts dummy handler built with expected address/facility
    """
    created = {}

    class DummySysLogHandler(logging.Handler):
        LOG_USER = 8
        LOG_LOCAL0 = 128
        _lighthouse_test = True

        def __init__(self, address=None, facility=None):
            super().__init__()
            created["address"] = address
            created["facility"] = facility

        def emit(self, record):
            pass

    monkeypatch.setattr(logging.handlers, "SysLogHandler", DummySysLogHandler)
    init_logging({"syslog": True, "stderr": False})
    assert created["address"] == "/dev/log"
    assert created["facility"] == DummySysLogHandler.LOG_USER

    created.clear()
    init_logging({"syslog": {"address": ("localhost", 514), "facility": "local0"}, "stderr": False})
    assert created["address"] == ("localhost", 514)
    assert created["facility"] == DummySysLogHandler.LOG_LOCAL0
    assert any(
        isinstance(h.formatter, SyslogFormatter) for h in logging.getLogger().handlers
    )


def test_resolve_level():
    """
    Brief: Level names map to logging constants with INFO as the fallback.

    Inputs:
      - None

    Outputs:
      - None
    """
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("WARN") == logging.WARNING
    assert resolve_level("crit") == logging.CRITICAL
    assert resolve_level("bogus") == logging.INFO
    assert resolve_level(None) == logging.INFO


def test_formatters_produce_expected_tags():
    """
    Brief: BracketLevelFormatter and SyslogFormatter include bracketed tags.

    Inputs:
      - LogRecord instances at different levels

    Outputs:
      - None: Asserts formatted strings contain expected tags
    """
    fmt = BracketLevelFormatter(fmt="%(asctime)s %(level_tag)s %(name)s: %(message)s")
    rec = logging.LogRecord("n", logging.ERROR, __file__, 1, "m", (), None)
    out = fmt.format(rec)
    assert "[error] n: m" in out
    assert out.split(" ", 1)[0].endswith("Z")

    s = SyslogFormatter()
    rec2 = logging.LogRecord("n2", logging.WARNING, __file__, 2, "m2", (), None)
    assert s.format(rec2) == "lighthouse: [warn] n2: m2"
