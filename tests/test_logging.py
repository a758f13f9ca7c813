"""Tests for the structured JSON log output."""

from __future__ import annotations

import io
import json
import logging

import pytest

from ordolix_mcp.jsonrpc import JsonRpcRequest
from ordolix_mcp.server import MCPServer
from ordolix_mcp.session import Session
from ordolix_mcp_server.logging import JsonFormatter, setup_logging

_PACKAGE_LOGGERS = ("ordolix_mcp", "ordolix_mcp_server")


@pytest.fixture()
def log_stream() -> io.StringIO:
    """Route package logs into a buffer."""
    stream = io.StringIO()
    setup_logging("DEBUG", stream=stream)
    return stream


def _entries(stream: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_formatter_includes_extras() -> None:
    """Known extra fields are copied into the JSON entry."""
    record = logging.LogRecord(
        "ordolix_mcp.server", logging.INFO, __file__, 1, "tool_call", None, None
    )
    record.tool = "get_issue"
    record.args_data = {"issueKey": "ORD-1"}

    entry = json.loads(JsonFormatter().format(record))

    assert entry["level"] == "INFO"
    assert entry["logger"] == "ordolix_mcp.server"
    assert entry["msg"] == "tool_call"
    assert entry["tool"] == "get_issue"
    assert entry["args_data"] == {"issueKey": "ORD-1"}


def test_setup_logging_does_not_stack_handlers(log_stream: io.StringIO) -> None:
    """Repeated setup replaces the JSON handler."""
    setup_logging("INFO", stream=log_stream)

    for name in _PACKAGE_LOGGERS:
        handlers = logging.getLogger(name).handlers
        assert sum(isinstance(h.formatter, JsonFormatter) for h in handlers) == 1


@pytest.mark.anyio()
async def test_dispatcher_logs_requests(
    log_stream: io.StringIO, server: MCPServer, session: Session
) -> None:
    """Handled and rejected requests both leave a log line."""
    await server.handle(session, JsonRpcRequest(id=1, method="tools/list"))
    await server.handle(session, JsonRpcRequest(id=2, method="bogus"))

    entries = _entries(log_stream)
    handled = [entry for entry in entries if entry["msg"] == "rpc_request"]
    rejected = [entry for entry in entries if entry["msg"] == "rpc_rejected"]
    assert handled[0]["method"] == "tools/list"
    assert "duration_ms" in handled[0]
    assert rejected[0]["error"] == "Method not found: bogus"
