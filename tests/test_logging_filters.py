"""Tests for log redaction and call correlation."""

from __future__ import annotations

import json
import logging
from io import StringIO
from unittest.mock import AsyncMock

import pytest

from rateguard.core.config import LogSettings
from rateguard.core.logging import (
    CallIdFilter,
    JsonFormatter,
    SensitiveDataFilter,
    configure_logging,
    get_call_id,
    hash_key,
)
from rateguard.guard.in_memory import InMemoryRateGuard


def _capture(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(CallIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def _lines(stream: StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_sensitive_filter_redacts_params_and_credentials():
    logger, stream = _capture("test_redaction")

    logger.info(
        "test_event",
        extra={
            "params": {"q": "private search"},
            "api_key": "sk-secret-123",
            "headers": {"authorization": "Bearer abc", "user-agent": "pytest"},
            "key_hash": "0123456789abcdef",
        },
    )

    output = stream.getvalue()

    assert "private search" not in output
    assert "sk-secret-123" not in output
    assert "Bearer abc" not in output
    assert "[REDACTED]" in output
    assert "pytest" in output
    assert "0123456789abcdef" in output


def test_hash_key_is_stable_and_does_not_leak_key():
    url = "https://api.example.com/items?token=abc"

    assert hash_key(url) == hash_key(url)
    assert len(hash_key(url)) == 16
    assert "example" not in hash_key(url)


@pytest.mark.asyncio
async def test_handler_logs_carry_the_call_id():
    logger, stream = _capture("test_call_id")
    guard = InMemoryRateGuard(total_requests=10, timeout_minutes=0)
    seen: list[str | None] = []

    async def handler(key: str) -> None:
        seen.append(get_call_id())
        logger.info("handler_event")

    await guard.guard("http://example.com", handler)
    await guard.guard("http://example.com", handler)
    logger.info("after_guard")

    records = _lines(stream)
    assert [r["message"] for r in records] == ["handler_event", "handler_event", "after_guard"]
    assert records[0]["call_id"] == seen[0]
    assert records[1]["call_id"] == seen[1]
    assert seen[0] != seen[1]
    assert "call_id" not in records[2]
    assert get_call_id() is None


@pytest.mark.asyncio
async def test_delay_event_is_logged_without_raw_key(caplog):
    guard = InMemoryRateGuard(total_requests=1, timeout_minutes=0)
    url = "http://example.com/secret-path"

    with caplog.at_level(logging.INFO, logger="rateguard.guard.base"):
        await guard.guard(url, AsyncMock(return_value=None))

    delay_records = [r for r in caplog.records if r.getMessage() == "rate_guard.delay"]
    assert len(delay_records) == 1
    assert delay_records[0].key_hash == hash_key(url)
    assert delay_records[0].count == 1
    assert "secret-path" not in caplog.text


def test_configure_logging_writes_json_to_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    log_path = tmp_path / "logs" / "rateguard.log"

    try:
        configure_logging(
            LogSettings(level="DEBUG", format="json", output="file", file_path=str(log_path))
        )
        logging.getLogger("rateguard.test").info("file_event", extra={"token": "t-1"})
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    record = json.loads(log_path.read_text(encoding="utf-8").splitlines()[-1])
    assert record["message"] == "file_event"
    assert record["level"] == "info"
    assert record["token"] == "[REDACTED]"


def test_configure_logging_plain_stdout():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level

    try:
        configure_logging(LogSettings(level="warning", format="plain", output="stdout"))
        (handler,) = root.handlers
        assert isinstance(handler, logging.StreamHandler)
        assert not isinstance(handler.formatter, JsonFormatter)
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
