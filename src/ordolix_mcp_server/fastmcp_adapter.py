"""Adapters for exposing the Ordolix MCP server via FastMCP.

Every tool call and resource read is routed through :meth:`MCPServer.handle`,
so the FastMCP transport sees the same routing and error mapping as any other
caller. FastMCP reports both JSON-RPC errors and ``isError`` results as tool
errors.
"""

from __future__ import annotations

import itertools
from collections.abc import Awaitable, Callable
from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ResourceError, ToolError
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent

from ordolix_mcp.jsonrpc import JsonRpcRequest, JsonRpcResponse
from ordolix_mcp.server import MCPServer, Method
from ordolix_mcp.session import Session
from ordolix_mcp.tools import ToolDefinition
from ordolix_mcp_server.resources import RESOURCE_TEMPLATES, ResourceTemplate

_request_ids = itertools.count(1)


async def _dispatch(
    server: MCPServer, session: Session, method: Method, params: dict[str, Any]
) -> JsonRpcResponse:
    request = JsonRpcRequest(
        id=next(_request_ids), method=method.value, params=params
    )
    return await server.handle(session, request)


class DispatchedTool(Tool):
    """Expose a registered :class:`ToolDefinition` as a FastMCP tool."""

    def __init__(
        self, definition: ToolDefinition, server: MCPServer, session: Session
    ) -> None:
        """Create a FastMCP tool that dispatches through ``server``."""
        super().__init__(
            name=definition.name,
            description=definition.description,
            parameters=definition.input_schema(),
            tags=set(),
        )
        self._server = server
        self._session = session

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        """Dispatch a ``tools/call`` request and unwrap its result."""
        response = await _dispatch(
            self._server,
            self._session,
            Method.TOOLS_CALL,
            {"name": self.name, "arguments": arguments},
        )
        if response.error is not None:
            raise ToolError(response.error.message)
        result = response.result or {}
        texts = [block["text"] for block in result.get("content", [])]
        if result.get("isError"):
            raise ToolError("\n".join(texts))
        return ToolResult(
            content=[TextContent(type="text", text=text) for text in texts]
        )


def _resource_reader(
    server: MCPServer, session: Session, template: ResourceTemplate
) -> Callable[..., Awaitable[str]]:
    """Build a FastMCP template function named after the template parameter."""
    prefix = template.uri_template.split("{", 1)[0]

    async def read(identifier: str) -> str:
        response = await _dispatch(
            server, session, Method.RESOURCES_READ, {"uri": f"{prefix}{identifier}"}
        )
        if response.error is not None:
            raise ResourceError(response.error.message)
        return str((response.result or {})["contents"][0]["text"])

    if template.parameter == "key":

        async def read_by_key(key: str) -> str:
            return await read(key)

        return read_by_key

    async def read_by_id(id: str) -> str:  # noqa: A002 - matches the URI template
        return await read(id)

    return read_by_id


def build_fastmcp_app(server: MCPServer, session: Session) -> FastMCP:
    """Create a FastMCP application serving one session."""
    info = server.server_info
    app = FastMCP(
        name=info.name,
        instructions="Ordolix issues, projects, boards and sprints over MCP.",
    )
    for definition in server.tool_definitions():
        app.add_tool(DispatchedTool(definition, server, session))
    for template in RESOURCE_TEMPLATES:
        app.resource(
            template.uri_template,
            name=template.name,
            description=template.description,
            mime_type=template.mime_type,
        )(_resource_reader(server, session, template))
    return app
