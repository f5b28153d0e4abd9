"""Unit tests for logging setup."""
import json

import structlog

from faqrag.log import configure_logging


def test_json_lines_on_stderr(capsys):
    """Test events are rendered as JSON on stderr, leaving stdout clean."""
    configure_logging("INFO")

    structlog.get_logger().info("passages_loaded", count=3)

    captured = capsys.readouterr()
    assert captured.out == ""
    line = captured.err.strip().splitlines()[-1]
    event = json.loads(line)
    assert event["event"] == "passages_loaded"
    assert event["count"] == 3
    assert event["level"] == "info"
    assert "timestamp" in event


def test_level_filters_lower_events(capsys):
    configure_logging("WARNING")

    structlog.get_logger().info("query_started")

    assert "query_started" not in capsys.readouterr().err
