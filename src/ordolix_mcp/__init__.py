"""ordolix_mcp package initialization."""

from ordolix_mcp.jsonrpc import JsonRpcRequest, JsonRpcResponse
from ordolix_mcp.server import MCPServer, Method, ServerInfo
from ordolix_mcp.session import Capability, Session
from ordolix_mcp.tools import (
    PermissionDeniedError,
    ToolDefinition,
    ToolParameters,
    ToolResult,
)

__all__ = [
    "Capability",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MCPServer",
    "Method",
    "PermissionDeniedError",
    "ServerInfo",
    "Session",
    "ToolDefinition",
    "ToolParameters",
    "ToolResult",
]
