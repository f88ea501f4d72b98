"""Tests for logging setup and secret redaction."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from request_sentinel.display.logging_config import (
    SecretRedactionFilter,
    build_log_config,
    secret_redaction_filter,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    for name in ("request_sentinel", "starlette", None):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        if name:
            logger.setLevel(logging.NOTSET)
            logger.propagate = True
        else:
            logger.setLevel(logging.WARNING)


def _record(msg, args=()):
    return logging.LogRecord("request_sentinel.test", logging.INFO, __file__, 1, msg, args, None)


class TestSecretRedactionFilter:
    def test_redacts_message_and_args(self) -> None:
        f = SecretRedactionFilter()
        f.register("super-secret-token")

        record = _record("Bearer super-secret-token rejected for %s", ("super-secret-token",))
        assert f.filter(record) is True
        assert "super-secret-token" not in record.getMessage()
        assert record.getMessage().count("***REDACTED***") == 2

    def test_short_values_ignored(self) -> None:
        f = SecretRedactionFilter()
        f.register("abc")
        record = _record("abc")
        f.filter(record)
        assert record.getMessage() == "abc"

    def test_longest_secret_masked_first(self) -> None:
        f = SecretRedactionFilter()
        f.register("token")
        f.register("token-extended")
        record = _record("token-extended")
        f.filter(record)
        assert record.getMessage() == "***REDACTED***"

    def test_clear(self) -> None:
        f = SecretRedactionFilter()
        f.register("secret-value")
        f.clear()
        record = _record("secret-value")
        f.filter(record)
        assert record.getMessage() == "secret-value"


class TestSetupLogging:
    def test_creates_log_file(self, tmp_path: Path) -> None:
        path, level = setup_logging("debug", log_dir=str(tmp_path), quiet=True)

        assert level == "DEBUG"
        assert os.path.dirname(path) == str(tmp_path)
        assert os.path.basename(path).startswith("sentinel_")
        assert path.endswith("_DEBUG.log")
        assert logging.getLogger("request_sentinel").level == logging.DEBUG

        logging.getLogger("request_sentinel.engine").debug("hello from the engine")
        for handler in logging.getLogger("request_sentinel").handlers:
            handler.flush()
        with open(path, encoding="utf-8") as f:
            assert "hello from the engine" in f.read()

    def test_invalid_level_falls_back(self, tmp_path: Path, capsys) -> None:
        _, level = setup_logging("chatty", log_dir=str(tmp_path))
        assert level == "INFO"
        assert "invalid log level 'chatty'" in capsys.readouterr().out

    def test_quiet(self, tmp_path: Path, capsys) -> None:
        setup_logging("warning", log_dir=str(tmp_path), quiet=True)
        assert capsys.readouterr().out == ""

    def test_handlers_share_redaction_filter(self, tmp_path: Path) -> None:
        setup_logging("info", log_dir=str(tmp_path), console=True, quiet=True)
        handlers = logging.getLogger("request_sentinel").handlers
        assert len(handlers) == 2
        assert all(secret_redaction_filter in h.filters for h in handlers)


class TestBuildLogConfig:
    def test_root_stays_at_warning(self) -> None:
        cfg = build_log_config("INFO", "x.log")
        assert cfg["root"]["level"] == "WARNING"
        assert cfg["loggers"]["request_sentinel"]["level"] == "INFO"
        assert list(cfg["handlers"]) == ["sentinel_file"]

    def test_debug_reaches_root(self) -> None:
        cfg = build_log_config("DEBUG", "x.log", console=True)
        assert cfg["root"]["level"] == "DEBUG"
        assert cfg["loggers"]["starlette"]["handlers"] == ["sentinel_file", "sentinel_console"]
