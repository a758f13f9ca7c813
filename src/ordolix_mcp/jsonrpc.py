"""JSON-RPC 2.0 envelope models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, model_validator

RequestId = str | int | None


class JsonRpcRequest(BaseModel):
    """A single inbound JSON-RPC 2.0 request."""

    model_config = ConfigDict(frozen=True)

    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId = None
    method: str
    params: dict[str, Any] | None = None

    def param(self, name: str) -> Any:
        """Return a parameter value, or ``None`` when absent."""
        if self.params is None:
            return None
        return self.params.get(name)


class JsonRpcErrorObject(BaseModel):
    """The ``error`` member of a failed response."""

    code: int
    message: str


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response carrying exactly one of result or error."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId = None
    result: dict[str, Any] | None = None
    error: JsonRpcErrorObject | None = None

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> JsonRpcResponse:
        if (self.result is None) == (self.error is None):
            raise ValueError("A response must carry exactly one of 'result' or 'error'")
        return self

    @classmethod
    def success(cls, request_id: RequestId, result: dict[str, Any]) -> JsonRpcResponse:
        """Build a result response."""
        return cls(id=request_id, result=result)

    @classmethod
    def failure(
        cls, request_id: RequestId, error: JsonRpcErrorObject
    ) -> JsonRpcResponse:
        """Build an error response."""
        return cls(id=request_id, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation of the response."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.model_dump()
        else:
            payload["result"] = self.result
        return payload
