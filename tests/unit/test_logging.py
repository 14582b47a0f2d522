"""Tests for logging configuration and sanitization."""

import json

import pytest
import structlog

from postal_mime.core.logging import configure_logging, sanitize_for_log


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


def test_sanitize_for_log_removes_control_chars():
    assert sanitize_for_log("hello\x00world") == "helloworld"


def test_sanitize_for_log_removes_header_injection():
    assert sanitize_for_log("Subject\r\nBcc: victim@example.com") == "SubjectBcc: victim@example.com"


def test_sanitize_for_log_removes_ansi_codes():
    assert sanitize_for_log("\x1b[31mred\x1b[0m") == "red"


def test_sanitize_for_log_truncates():
    long_text = "x" * 200
    assert len(sanitize_for_log(long_text, 50)) == 50


def test_sanitize_for_log_empty():
    assert sanitize_for_log("") == ""


def test_json_logs_written_to_stderr(capsys):
    configure_logging(json_format=True)

    structlog.get_logger("test").info("message_decoded", leaves=2)

    captured = capsys.readouterr()
    assert captured.out == ""
    entry = json.loads(captured.err.strip().splitlines()[-1])
    assert entry["event"] == "message_decoded"
    assert entry["leaves"] == 2
    assert entry["level"] == "info"
    assert "timestamp" in entry


def test_debug_filtered_unless_enabled(capsys):
    configure_logging(json_format=True, debug=False)
    structlog.get_logger("quiet").debug("multipart_split")
    assert capsys.readouterr().err == ""

    configure_logging(json_format=True, debug=True)
    structlog.get_logger("loud").debug("multipart_split")
    assert "multipart_split" in capsys.readouterr().err
