"""Tests for structlog configuration."""

import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from gardenshare.infrastructure.logging import configure_logging


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def test_json_lines_carry_context(capsys) -> None:
    configure_logging("DEBUG", log_json=True)
    structlog.contextvars.bind_contextvars(request_id="req-1")
    try:
        structlog.get_logger("gardenshare.test").info("Land reserved", garden_id="g-1", amount="2.00")
    finally:
        structlog.contextvars.unbind_contextvars("request_id")

    line = capsys.readouterr().err.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["event"] == "Land reserved"
    assert record["garden_id"] == "g-1"
    assert record["request_id"] == "req-1"
    assert record["level"] == "info"
    assert "timestamp" in record


def test_level_filters_debug(capsys) -> None:
    configure_logging("WARNING", log_json=True)

    structlog.get_logger("gardenshare.test").info("Land released")
    structlog.get_logger("gardenshare.test").warning("Ledger release underflow")

    lines = capsys.readouterr().err.strip().splitlines()
    assert [json.loads(line)["event"] for line in lines] == ["Ledger release underflow"]


def test_unknown_level_falls_back_to_info() -> None:
    configure_logging("CHATTY")
    assert logging.getLogger("gardenshare").level == logging.INFO
