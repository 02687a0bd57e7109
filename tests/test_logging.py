"""Tests for logging configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from io import StringIO

import pytest

from storeqa.observability.logging import configure_logging, get_context, log_context
from storeqa.security.sanitization import REDACTED


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    httpx_level = logging.getLogger("httpx").level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)


@pytest.mark.usefixtures("restore_root_logger")
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_plain_format(self) -> None:
        stream = StringIO()
        configure_logging(level="INFO", stream=stream)

        logging.getLogger("storeqa.test").info("Creating customer")

        line = stream.getvalue().strip()
        assert " - storeqa.test - INFO - Creating customer" in line

    def test_json_format(self) -> None:
        stream = StringIO()
        configure_logging(level=logging.DEBUG, json_format=True, include_location=True, stream=stream)

        logging.getLogger("storeqa.test").debug("Signed request")

        data = json.loads(stream.getvalue().strip())
        assert data["level"] == "debug"
        assert data["logger"] == "storeqa.test"
        assert data["message"] == "Signed request"
        assert data["location"]["function"] == "test_json_format"

    def test_level_filters(self) -> None:
        stream = StringIO()
        configure_logging(level="WARNING", stream=stream)

        logging.getLogger("storeqa.test").info("quiet")

        assert stream.getvalue() == ""

    def test_signatures_redacted(self) -> None:
        stream = StringIO()
        configure_logging(level="INFO", stream=stream)

        logging.getLogger("storeqa.test").info("GET %s", "http://h/p?oauth_signature=abc123")

        assert "abc123" not in stream.getvalue()
        assert REDACTED in stream.getvalue()

    def test_reconfigure_replaces_handler(self) -> None:
        first = configure_logging(stream=StringIO())
        second = configure_logging(stream=StringIO())

        handlers = logging.getLogger().handlers
        assert second in handlers
        assert first not in handlers

    def test_httpx_kept_at_warning(self) -> None:
        configure_logging(level="DEBUG", stream=StringIO())
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_exception_in_json(self) -> None:
        stream = StringIO()
        configure_logging(level="INFO", json_format=True, stream=stream)

        try:
            raise ValueError("bad value")
        except ValueError:
            logging.getLogger("storeqa.test").exception("failed")

        data = json.loads(stream.getvalue().strip())
        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad value"


@pytest.mark.usefixtures("restore_root_logger")
class TestLogContext:
    """Tests for log_context."""

    def test_context_nested_and_restored(self) -> None:
        assert get_context() == {}
        with log_context(scenario="Create customer"):
            with log_context(step="POST"):
                assert get_context() == {"scenario": "Create customer", "step": "POST"}
            assert get_context() == {"scenario": "Create customer"}
        assert get_context() == {}

    def test_plain_format_appends_context(self) -> None:
        stream = StringIO()
        configure_logging(level="INFO", stream=stream)

        with log_context(scenario="Homepage"):
            logging.getLogger("storeqa.test").info("Navigating")

        assert stream.getvalue().strip().endswith("Navigating [scenario=Homepage]")

    def test_json_format_includes_context(self) -> None:
        stream = StringIO()
        configure_logging(level="INFO", json_format=True, stream=stream)

        with log_context(scenario="Homepage"):
            logging.getLogger("storeqa.test").info("Navigating")

        assert json.loads(stream.getvalue().strip())["context"] == {"scenario": "Homepage"}
