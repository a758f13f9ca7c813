"""End-to-end coverage for the FastMCP server wrapper."""

from __future__ import annotations

import json

import pytest
from fastmcp.client import Client

from ordolix_mcp.server import MCPServer
from ordolix_mcp.session import Session
from ordolix_mcp_server.fastmcp_adapter import build_fastmcp_app
from ordolix_mcp_server.tools import ToolName


@pytest.mark.anyio()
async def test_fastmcp_server_supports_tool_discovery(
    server: MCPServer, session: Session
) -> None:
    """The FastMCP server exposes the Ordolix toolset via the official protocol."""
    app = build_fastmcp_app(server, session)

    async with Client(app) as client:
        tools = await client.list_tools()
        tool_names = {tool.name for tool in tools}

        assert tool_names == {name.value for name in ToolName}

        result = await client.call_tool("get_issue", {"issueKey": "ORD-123"})
        assert result.content[0].text.startswith("**ORD-123**: Fix login bug")

        created = await client.call_tool(
            "create_issue",
            {"projectKey": "ORD", "summary": "From FastMCP", "issueType": "Task"},
        )
        assert created.content[0].text == "Created issue ORD-125: From FastMCP"


@pytest.mark.anyio()
async def test_fastmcp_propagates_tool_errors(server: MCPServer, session: Session) -> None:
    """Tool errors surface through FastMCP client calls."""
    app = build_fastmcp_app(server, session)

    async with Client(app) as client:
        result = await client.call_tool(
            "get_issue", {"issueKey": "ORD-999"}, raise_on_error=False
        )

    assert result.is_error is True
    assert "Issue 'ORD-999' not found" in result.content[0].text


@pytest.mark.anyio()
async def test_fastmcp_reads_resources(server: MCPServer, session: Session) -> None:
    """Resource templates resolve through the dispatcher."""
    app = build_fastmcp_app(server, session)

    async with Client(app) as client:
        templates = await client.list_resource_templates()
        contents = await client.read_resource("project://ORD")

        assert {template.uriTemplate for template in templates} == {
            "board://{id}",
            "issue://{key}",
            "project://{key}",
            "sprint://{id}",
            "user://{id}",
        }
        project = json.loads(contents[0].text)
        assert project["_count"]["issues"] == 2

        with pytest.raises(Exception, match="Resource not found"):
            await client.read_resource("issue://MISSING")
