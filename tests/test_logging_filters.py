"""Tests for cache key redaction and logging configuration."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from deferkit.adapters.wakeup.manual import ManualWakeupScheduler
from deferkit.core.config import LogSettings
from deferkit.core.logging import JsonFormatter, RedactionFilter, configure_logging
from deferkit.services.load_cache import LoadCache
from deferkit.services.rate_limiter import RateLimiter
from deferkit.services.timing import Timing


def _capture(logger_name: str) -> tuple[logging.Logger, StringIO, logging.Handler]:
    logger = logging.getLogger(logger_name)
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RedactionFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return logger, stream, handler


def _events(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_cache_events_mask_cache_key():
    """Host keys (user ids, emails) never reach the log output."""

    logger, stream, handler = _capture("deferkit.services.load_cache")
    try:
        cache: LoadCache[str, str] = LoadCache(lambda key, resolve: resolve("avatar.png"))
        cache.get("user:alice@example.com", lambda _v: None)
    finally:
        logger.removeHandler(handler)

    output = stream.getvalue()
    events = _events(stream)

    assert "alice@example.com" not in output
    assert [e["message"] for e in events] == ["cache.load_started", "cache.resolved"]
    assert all(e["cache_key"] == "[REDACTED]" for e in events)
    assert events[1]["waiters"] == 1


def test_rate_limiter_events_keep_numeric_fields(timing: Timing, wakeup: ManualWakeupScheduler):
    logger, stream, handler = _capture("deferkit.services.rate_limiter")
    try:
        debounced = RateLimiter(timing, lambda *_a: None, 10)
        debounced("x")
        wakeup.advance(4)
        debounced("y")
        wakeup.advance(10)
    finally:
        logger.removeHandler(handler)

    events = {e["message"]: e for e in _events(stream)}

    assert events["rate_limiter.rearmed"]["remaining_s"] == 4
    assert events["rate_limiter.trailing_edge"]["wait_s"] == 10
    assert "[REDACTED]" not in stream.getvalue()


def test_configure_logging_installs_json_handler(capsys: pytest.CaptureFixture[str]):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(LogSettings(level="debug", format="json", output="stdout"))

        cache: LoadCache[str, int] = LoadCache(lambda key, resolve: None)
        cache.get("secret-key", lambda _v: None)

        lines = capsys.readouterr().out.strip().splitlines()
        payload = json.loads(lines[-1])
        assert payload["message"] == "cache.load_started"
        assert payload["cache_key"] == "[REDACTED]"
        assert "secret-key" not in "".join(lines)
        assert root.level == logging.DEBUG
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_configure_logging_writes_plain_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    log_file = tmp_path / "logs" / "deferkit.log"
    try:
        configure_logging(
            LogSettings(level="debug", format="plain", output="file", file_path=str(log_file))
        )

        LoadCache(lambda key, resolve: None).clear()
        for handler in root.handlers:
            handler.flush()

        assert "cache.cleared" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
