"""Protocol error types and the mapping to JSON-RPC error objects."""

from __future__ import annotations

from ordolix_mcp.jsonrpc import JsonRpcErrorObject

METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
RESOURCE_NOT_FOUND = -32002
SERVER_ERROR = -32000

GENERIC_ERROR_MESSAGE = "Internal server error"


class ProtocolError(Exception):
    """Error that maps onto a specific JSON-RPC error code."""

    code: int = SERVER_ERROR

    def __init__(self, message: str) -> None:
        """Create a protocol error with a client-facing message."""
        super().__init__(message)
        self.message = message

    def to_error_object(self) -> JsonRpcErrorObject:
        """Return the JSON-RPC error object for this error."""
        return JsonRpcErrorObject(code=self.code, message=self.message)


class MethodNotFoundError(ProtocolError):
    """The request named a method outside the supported table."""

    code = METHOD_NOT_FOUND

    def __init__(self, method: str) -> None:
        """Create the error for ``method``."""
        super().__init__(f"Method not found: {method}")
        self.method = method


class InvalidParamsError(ProtocolError):
    """A required parameter was missing or named something unknown."""

    code = INVALID_PARAMS


class ResourceNotFoundError(ProtocolError):
    """A resource URI had a known scheme but resolved to nothing."""

    code = RESOURCE_NOT_FOUND

    def __init__(self, uri: str) -> None:
        """Create the error for ``uri``."""
        super().__init__(f"Resource not found: {uri}")
        self.uri = uri


def to_error_object(error: Exception) -> JsonRpcErrorObject:
    """Map any exception onto a JSON-RPC error object.

    Protocol errors keep their own code. Every other exception becomes a
    ``-32000`` server error carrying the exception message, or a generic
    message when the exception has none.
    """
    if isinstance(error, ProtocolError):
        return error.to_error_object()
    message = str(error) or GENERIC_ERROR_MESSAGE
    return JsonRpcErrorObject(code=SERVER_ERROR, message=message)
