"""Session-scoped JSON-RPC dispatcher for the MCP protocol.

The server owns the protocol surface only: method routing, the tool registry
and the error mapping. Domain reads and writes happen in the tool handlers and
the resource resolver it is constructed with, which keeps it free of
transport and persistence details.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Protocol

from ordolix_mcp.errors import (
    InvalidParamsError,
    MethodNotFoundError,
    ProtocolError,
    to_error_object,
)
from ordolix_mcp.jsonrpc import JsonRpcRequest, JsonRpcResponse
from ordolix_mcp.session import Session, SessionStore
from ordolix_mcp.tools import ToolDefinition

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"


class Method(str, Enum):
    """JSON-RPC methods understood by the server."""

    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    RESOURCE_TEMPLATES_LIST = "resources/templates/list"
    RESOURCES_READ = "resources/read"


@dataclass(frozen=True)
class ServerInfo:
    """Identity reported to clients on ``initialize``."""

    name: str = "ordolix-mcp"
    version: str = "1.0.0"


CAPABILITIES: dict[str, Any] = {
    "tools": {"listChanged": False},
    "resources": {"subscribe": False, "listChanged": False},
}


class ResourceReader(Protocol):
    """Resolves resource URIs for ``resources/read``."""

    def templates(self) -> list[dict[str, Any]]:
        """Return the advertised resource templates."""
        ...

    async def read(self, session: Session, uri: str) -> dict[str, Any]:
        """Return the ``resources/read`` result for ``uri``."""
        ...


_Route = Callable[[Session, JsonRpcRequest], Awaitable[dict[str, Any]]]


class MCPServer:
    """Dispatcher turning one JSON-RPC request into one JSON-RPC response."""

    def __init__(
        self,
        *,
        tools: Sequence[ToolDefinition],
        resources: ResourceReader,
        sessions: SessionStore,
        server_info: ServerInfo | None = None,
        strict_session_touch: bool = False,
    ) -> None:
        """Create a dispatcher over a fixed tool catalogue.

        Args:
            tools: Tool definitions to expose. Names must be unique.
            resources: Resolver used for resource templates and reads.
            sessions: Store whose ``touch`` is called on every request.
            server_info: Identity reported on ``initialize``.
            strict_session_touch: Fail the request with ``-32000`` when the
                session touch fails instead of logging and continuing.

        Raises:
            ValueError: If two tools share a name.

        """
        registry: dict[str, ToolDefinition] = {}
        for tool in tools:
            if tool.name in registry:
                raise ValueError(f"Tool '{tool.name}' is already registered")
            registry[tool.name] = tool
        self._tools = MappingProxyType(registry)
        self._resources = resources
        self._sessions = sessions
        self._server_info = server_info or ServerInfo()
        self._strict_session_touch = strict_session_touch
        self._routes: dict[Method, _Route] = {
            Method.INITIALIZE: self._initialize,
            Method.TOOLS_LIST: self._tools_list,
            Method.TOOLS_CALL: self._tools_call,
            Method.RESOURCE_TEMPLATES_LIST: self._resource_templates_list,
            Method.RESOURCES_READ: self._resources_read,
        }

    @property
    def server_info(self) -> ServerInfo:
        return self._server_info

    def tool_definitions(self) -> list[ToolDefinition]:
        """Return the registered tools in registration order."""
        return list(self._tools.values())

    def tool_catalog(self) -> list[dict[str, Any]]:
        """Return the ``tools/list`` entries in registration order."""
        return [tool.metadata() for tool in self._tools.values()]

    async def handle(
        self, session: Session, request: JsonRpcRequest
    ) -> JsonRpcResponse:
        """Dispatch ``request`` on behalf of ``session``.

        Never raises: every failure is returned as a JSON-RPC error response.
        """
        started = time.monotonic()
        try:
            await self._touch(session)
            route = self._route_for(request.method)
            result = await route(session, request)
        except ProtocolError as error:
            logger.info(
                "rpc_rejected",
                extra={"method": request.method, "error": error.message},
            )
            return JsonRpcResponse.failure(request.id, error.to_error_object())
        except Exception as error:
            logger.error(
                "rpc_error",
                extra={"method": request.method, "session_id": session.session_id},
                exc_info=True,
            )
            return JsonRpcResponse.failure(request.id, to_error_object(error))
        duration_ms = round((time.monotonic() - started) * 1000, 1)
        logger.info(
            "rpc_request",
            extra={"method": request.method, "duration_ms": duration_ms},
        )
        return JsonRpcResponse.success(request.id, result)

    async def _touch(self, session: Session) -> None:
        try:
            await self._sessions.touch(session.session_id)
        except Exception:
            if self._strict_session_touch:
                raise
            logger.warning(
                "session_touch_failed",
                extra={"session_id": session.session_id},
                exc_info=True,
            )

    def _route_for(self, method: str) -> _Route:
        try:
            return self._routes[Method(method)]
        except ValueError:
            raise MethodNotFoundError(method) from None

    async def _initialize(
        self, _session: Session, _request: JsonRpcRequest
    ) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": {
                "name": self._server_info.name,
                "version": self._server_info.version,
            },
            "capabilities": CAPABILITIES,
        }

    async def _tools_list(
        self, _session: Session, _request: JsonRpcRequest
    ) -> dict[str, Any]:
        return {"tools": self.tool_catalog()}

    async def _tools_call(
        self, session: Session, request: JsonRpcRequest
    ) -> dict[str, Any]:
        name = request.param("name")
        if not name:
            raise InvalidParamsError("Missing tool name")
        tool = self._tools.get(name) if isinstance(name, str) else None
        if tool is None:
            raise InvalidParamsError(f"Unknown tool: {name}")
        arguments = request.param("arguments") or {}
        logger.debug("tool_call", extra={"tool": name, "args_data": arguments})
        result = await tool.invoke(session, arguments)
        return result.to_dict()

    async def _resource_templates_list(
        self, _session: Session, _request: JsonRpcRequest
    ) -> dict[str, Any]:
        return {"resourceTemplates": self._resources.templates()}

    async def _resources_read(
        self, session: Session, request: JsonRpcRequest
    ) -> dict[str, Any]:
        uri = request.param("uri")
        if not uri:
            raise InvalidParamsError("Missing resource URI")
        return await self._resources.read(session, str(uri))
