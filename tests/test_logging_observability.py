import json

import structlog
from structlog.contextvars import clear_contextvars, get_contextvars

from cluster_orchestrator.utils.logging import setup_logging, wait_context


def test_structured_logs_include_correlation(capsys):
    setup_logging("INFO", "json")
    clear_contextvars()

    logger = structlog.get_logger()
    with wait_context("/web-1", "d-42"):
        logger.info("test_event", foo="bar")
    out = capsys.readouterr().out.strip().splitlines()[-1]
    data = json.loads(out)
    assert data["event"] == "test_event"
    assert data["appId"] == "/web-1"
    assert data["deploymentId"] == "d-42"
    assert data["foo"] == "bar"


def test_wait_context_is_unbound_on_exit(capsys):
    setup_logging("INFO", "json")
    clear_contextvars()

    with wait_context(deployment_id="d-42"):
        assert get_contextvars() == {"deploymentId": "d-42"}
    assert get_contextvars() == {}

    structlog.get_logger().info("after_wait")
    data = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert "deploymentId" not in data


def test_redaction(capsys):
    setup_logging("INFO", "json")
    clear_contextvars()
    logger = structlog.get_logger()
    logger.info("leak_test", password="secret", authorization="Basic abc", appId="/web-1")
    out = capsys.readouterr().out.strip().splitlines()[-1]
    data = json.loads(out)
    assert data["password"] == "[REDACTED]"
    assert data["authorization"] == "[REDACTED]"
    assert data["appId"] == "/web-1"


def test_level_filtering(capsys):
    setup_logging("WARNING", "json")
    logger = structlog.get_logger()
    logger.info("hidden")
    logger.warning("shown")
    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "shown" in out
