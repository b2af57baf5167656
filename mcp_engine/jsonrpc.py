"""
JSON-RPC 2.0 message layer.

Parses one inbound payload into a typed message and renders replies:

    parse_message(text)                     → Request | Notification | Response | ErrorResponse
    render_response(id, result)             → text
    render_error(id, code, message, data)   → text

Faults are raised as JsonRpcFault subclasses carrying the standard code, so
the caller can render them for the offending message and carry on.
"""

from __future__ import annotations

import json
import math
from typing import Any, Optional, Union

from pydantic import BaseModel

JSONRPC_VERSION = "2.0"

# Standard error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

RequestId = Union[str, int, float, None]


# ── Faults ────────────────────────────────────────────────────────


class JsonRpcFault(Exception):
    """A protocol-level failure that maps onto a JSON-RPC error object."""

    code = INTERNAL_ERROR
    default_message = "Internal error"

    def __init__(self, message: str | None = None, data: Any = None) -> None:
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)


class ParseError(JsonRpcFault):
    code = PARSE_ERROR
    default_message = "Parse error"


class InvalidRequest(JsonRpcFault):
    code = INVALID_REQUEST
    default_message = "Invalid request"


class MethodNotFound(JsonRpcFault):
    code = METHOD_NOT_FOUND
    default_message = "Method not found"


class InvalidParams(JsonRpcFault):
    code = INVALID_PARAMS
    default_message = "Invalid params"


class InternalError(JsonRpcFault):
    code = INTERNAL_ERROR
    default_message = "Internal error"


# ── Messages ──────────────────────────────────────────────────────


class JsonRpcRequest(BaseModel):
    """A call that expects a reply. ``id`` may be an explicit null."""

    jsonrpc: str = JSONRPC_VERSION
    id: RequestId = None
    method: str
    params: Any = None


class JsonRpcNotification(BaseModel):
    """A call without an ``id``; never answered."""

    jsonrpc: str = JSONRPC_VERSION
    method: str
    params: Any = None


class JsonRpcResponse(BaseModel):
    jsonrpc: str = JSONRPC_VERSION
    id: RequestId = None
    result: Any = None


class JsonRpcErrorObject(BaseModel):
    code: int
    message: str
    data: Any = None


class JsonRpcErrorResponse(BaseModel):
    jsonrpc: str = JSONRPC_VERSION
    id: RequestId = None
    error: JsonRpcErrorObject


Message = Union[JsonRpcRequest, JsonRpcNotification, JsonRpcResponse, JsonRpcErrorResponse]


def _is_valid_id(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return value is None or isinstance(value, (str, int))


def _reject_constant(token: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {token}")


def parse_message(payload: Union[str, bytes]) -> Message:
    """Parse and classify one JSON-RPC 2.0 message.

    Raises:
        ParseError: If the payload is not JSON (or not UTF-8).
        InvalidRequest: If the JSON is not a JSON-RPC 2.0 message.
    """
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(data={"detail": str(e)}) from e

    try:
        data = json.loads(payload, parse_constant=_reject_constant)
    except (ValueError, TypeError, RecursionError) as e:
        raise ParseError(data={"detail": str(e)}) from e

    if not isinstance(data, dict):
        raise InvalidRequest("Message must be a JSON object")

    if data.get("jsonrpc") != JSONRPC_VERSION:
        raise InvalidRequest("Invalid or missing jsonrpc version")

    has_id = "id" in data
    msg_id = data.get("id")
    if not _is_valid_id(msg_id):
        raise InvalidRequest("Message id must be a string, number or null")

    method = data.get("method")
    if isinstance(method, str):
        if has_id:
            return JsonRpcRequest(id=msg_id, method=method, params=data.get("params"))
        return JsonRpcNotification(method=method, params=data.get("params"))

    if "result" in data:
        return JsonRpcResponse(id=msg_id, result=data["result"])

    if "error" in data:
        error = data["error"]
        if (
            not isinstance(error, dict)
            or isinstance(error.get("code"), bool)
            or not isinstance(error.get("code"), int)
            or not isinstance(error.get("message"), str)
        ):
            raise InvalidRequest("Malformed error object")
        return JsonRpcErrorResponse(
            id=msg_id,
            error=JsonRpcErrorObject(
                code=error["code"], message=error["message"], data=error.get("data")
            ),
        )

    raise InvalidRequest("Invalid JSON-RPC message format")


# ── Rendering ─────────────────────────────────────────────────────


def render_response(id: RequestId, result: Any) -> str:
    """Render a success reply. ``result`` and ``id`` are always present.

    Raises:
        TypeError: If *result* is not JSON-serializable.
        ValueError: If *result* contains NaN or infinity.
    """
    return json.dumps({"jsonrpc": JSONRPC_VERSION, "id": id, "result": result}, allow_nan=False)


def render_error(id: RequestId, code: int, message: str, data: Any = None) -> str:
    """Render an error reply; ``data`` is only emitted when given."""
    error: dict[str, Any] = {"code": code, "message": message or "Unknown error"}
    if data is not None:
        error["data"] = data
    return json.dumps({"jsonrpc": JSONRPC_VERSION, "id": id, "error": error}, allow_nan=False)


def render_fault(id: RequestId, fault: JsonRpcFault) -> str:
    return render_error(id, fault.code, fault.message, fault.data)


def render_request(method: str, params: Any = None, id: Optional[RequestId] = 1) -> str:
    """Render an outbound request (used by clients and tests)."""
    request: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": id, "method": method}
    if params is not None:
        request["params"] = params
    return json.dumps(request, allow_nan=False)


def render_notification(method: str, params: Any = None) -> str:
    notification: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
    if params is not None:
        notification["params"] = params
    return json.dumps(notification, allow_nan=False)
