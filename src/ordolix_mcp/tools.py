"""Tool definitions and the uniform tool result contract."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from ordolix_mcp.session import Capability, Session


class PermissionDeniedError(Exception):
    """The session lacks the capability a tool requires."""

    def __init__(self, session_id: str, capability: Capability) -> None:
        """Create the error for a missing ``capability``."""
        super().__init__(f"Permission denied: requires '{capability.value}'")
        self.session_id = session_id
        self.capability = capability


class ToolParameters(BaseModel):
    """Base parameters schema for MCP tools.

    Fields are declared in snake_case and exposed to clients in camelCase.
    """

    model_config = ConfigDict(
        extra="forbid", alias_generator=to_camel, populate_by_name=True
    )


@dataclass
class ToolResult:
    """Result of a tool invocation.

    A result with ``is_error`` set reports a domain failure of a well-formed
    call. It is still returned to the client as a successful JSON-RPC result.

    Attributes:
        texts: Text blocks returned to the client.
        is_error: Whether the tool could not complete the action.

    """

    texts: list[str] = field(default_factory=list)
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Return the MCP ``CallToolResult`` payload."""
        payload: dict[str, Any] = {
            "content": [{"type": "text", "text": text} for text in self.texts]
        }
        if self.is_error:
            payload["isError"] = True
        return payload


def text_result(text: str) -> ToolResult:
    """Create a successful single-text tool result."""
    return ToolResult(texts=[text])


def error_result(message: str) -> ToolResult:
    """Create a tool result reporting a domain failure."""
    return ToolResult(texts=[f"Error: {message}"], is_error=True)


ToolHandler = Callable[[Session, Any], Awaitable[ToolResult]]


def describe_validation_error(error: ValidationError) -> str:
    """Render a pydantic validation error as one readable line."""
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "arguments"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)


@dataclass(frozen=True)
class ToolDefinition:
    """Description of a tool that can be registered with the server.

    Attributes:
        name: Unique name of the tool.
        description: Human-readable description of the tool purpose.
        parameters_model: Pydantic model used to validate input arguments.
        handler: Coroutine receiving the session and the validated model.
        capability: Capability the calling session must hold, checked before
            the arguments are validated.

    """

    name: str
    description: str
    parameters_model: type[ToolParameters]
    handler: ToolHandler
    capability: Capability | None = None

    def input_schema(self) -> dict[str, Any]:
        """Return the JSON schema clients use to build arguments."""
        schema = self.parameters_model.model_json_schema(by_alias=True)
        schema.pop("title", None)
        return schema

    def metadata(self) -> dict[str, Any]:
        """Return the ``tools/list`` entry for the tool."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }

    async def invoke(self, session: Session, arguments: dict[str, Any]) -> ToolResult:
        """Run the tool for ``session`` with the raw ``arguments``.

        Invalid arguments are reported as an error result rather than raised,
        leaving JSON-RPC errors for protocol failures.

        Raises:
            PermissionDeniedError: If the session lacks the tool's capability.

        """
        if self.capability is not None and not session.has_permission(self.capability):
            raise PermissionDeniedError(session.session_id, self.capability)
        try:
            params = self.parameters_model.model_validate(arguments)
        except ValidationError as error:
            return error_result(
                f"Invalid arguments for tool '{self.name}': "
                f"{describe_validation_error(error)}"
            )
        return await self.handler(session, params)
