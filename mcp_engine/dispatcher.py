"""
Dispatcher — routes JSON-RPC messages to the MCP protocol operations.

Supported methods:
    - initialize / initialized (notification) / notifications/initialized
    - ping
    - tools/list, tools/call
    - resources/list, resources/read

Protocol faults become JSON-RPC errors. Tool and resource failures are
domain data and come back as ``{"error": ...}`` inside a success result.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional, Union

import structlog

from mcp_engine import diagnostics
from mcp_engine.jsonrpc import (
    InternalError,
    InvalidParams,
    InvalidRequest,
    JsonRpcFault,
    JsonRpcNotification,
    JsonRpcRequest,
    Message,
    MethodNotFound,
    parse_message,
    render_fault,
    render_response,
)
from mcp_engine.registry import CapabilityRegistry
from mcp_engine.schema import validate_tool_arguments

logger = structlog.get_logger()

PROTOCOL_VERSION = "2025-06-18"
DEFAULT_SERVER_NAME = "Python MCP Server"
DEFAULT_SERVER_VERSION = "1.0.0"
DEFAULT_MIME_TYPE = "text/plain"

INITIALIZE = "initialize"
INITIALIZED = "initialized"
NOTIFICATIONS_INITIALIZED = "notifications/initialized"
PING = "ping"
TOOLS_LIST = "tools/list"
TOOLS_CALL = "tools/call"
RESOURCES_LIST = "resources/list"
RESOURCES_READ = "resources/read"


class Dispatcher:
    """
    Stateless MCP protocol engine over an explicitly owned registry.

    Usage::

        registry = CapabilityRegistry()
        registry.register_tool("echo", echo_handler)
        dispatcher = Dispatcher(registry)
        reply = dispatcher.handle(body)   # str, or None for notifications
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        *,
        server_name: str = DEFAULT_SERVER_NAME,
        server_version: str = DEFAULT_SERVER_VERSION,
        validate_arguments: bool = False,
        session_counter: Optional[Callable[[], int]] = None,
    ):
        self.registry = registry
        self.server_name = server_name
        self.server_version = server_version
        self.validate_arguments = validate_arguments
        self._session_counter = session_counter
        self._started = time.monotonic()
        self._methods: dict[str, Callable[[Any], Any]] = {
            INITIALIZE: self._initialize,
            INITIALIZED: self._initialized,
            NOTIFICATIONS_INITIALIZED: self._initialized,
            PING: self._ping,
            TOOLS_LIST: self._list_tools,
            TOOLS_CALL: self._call_tool,
            RESOURCES_LIST: self._list_resources,
            RESOURCES_READ: self._read_resource,
        }

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self._started

    @property
    def active_sessions(self) -> int:
        return self._session_counter() if self._session_counter else 0

    # ── Entry points ──────────────────────────────────────────────

    def handle(self, payload: Union[str, bytes]) -> Optional[str]:
        """Process one inbound payload and return the reply text, if any."""
        try:
            message = parse_message(payload)
        except JsonRpcFault as fault:
            logger.warning("Rejected JSON-RPC payload", code=fault.code, error=fault.message)
            return render_fault(None, fault)
        return self.dispatch(message)

    def dispatch(self, message: Message) -> Optional[str]:
        """Process one parsed message."""
        if not isinstance(message, (JsonRpcRequest, JsonRpcNotification)):
            logger.warning("Unexpected response message", id=message.id)
            return render_fault(message.id, InvalidRequest())

        is_notification = isinstance(message, JsonRpcNotification)
        msg_id = None if is_notification else message.id
        logger.debug("Dispatching", method=message.method, id=msg_id, notification=is_notification)

        try:
            handler = self._methods.get(message.method)
            if handler is None:
                raise MethodNotFound(data={"method": message.method})
            result = handler(message.params)
            if is_notification:
                return None
            return render_response(msg_id, result)
        except JsonRpcFault as fault:
            logger.warning(
                "JSON-RPC fault", method=message.method, code=fault.code, error=fault.message
            )
            return None if is_notification else render_fault(msg_id, fault)
        except Exception as e:
            logger.error("Unhandled error in method", method=message.method, error=str(e))
            return None if is_notification else render_fault(msg_id, InternalError())

    # ── Lifecycle ─────────────────────────────────────────────────

    def _initialize(self, params: Any) -> dict[str, Any]:
        client = params.get("clientInfo") if isinstance(params, dict) else None
        logger.info("Initialize request", client=client)
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {
                "tools": {"listChanged": False},
                "resources": {"subscribe": False, "listChanged": False},
            },
            "serverInfo": {"name": self.server_name, "version": self.server_version},
        }

    def _initialized(self, params: Any) -> None:
        logger.info("Client initialized")
        return None

    def _ping(self, params: Any) -> dict[str, str]:
        return {"status": "pong"}

    # ── Tools ─────────────────────────────────────────────────────

    def _list_tools(self, params: Any) -> dict[str, Any]:
        tools = [tool.to_listing() for tool in self.registry.tools()]
        if not tools:
            tools.append(diagnostics.system_info_tool_listing())
        return {"tools": tools}

    def _call_tool(self, params: Any) -> Any:
        if not isinstance(params, dict):
            raise InvalidParams("tools/call requires params")
        name = params.get("name")
        if not isinstance(name, str):
            raise InvalidParams("Tool name must be a string")
        arguments = params.get("arguments")
        if arguments is not None and not isinstance(arguments, dict):
            raise InvalidParams("Tool arguments must be an object")

        tool = self.registry.find_tool(name)
        if tool is None:
            if name == diagnostics.SYSTEM_INFO_TOOL:
                return diagnostics.system_info(
                    self.server_name, self.server_version, self.uptime_seconds, self.registry.stats()
                )
            logger.info("Unknown tool", tool=name)
            return {"error": "Unknown tool"}

        if self.validate_arguments:
            violation = validate_tool_arguments(arguments, tool.input_schema)
            if violation is not None:
                raise InvalidParams(violation.message, data=violation.to_dict())

        try:
            result = tool.handler(arguments, tool.user_context)
        except Exception as e:
            logger.error("Tool execution failed", tool=name, error=str(e))
            return {"error": "Tool execution failed", "detail": str(e)}

        if result is None:
            logger.warning("Tool returned no result", tool=name)
            return {"error": "Tool execution failed"}
        if isinstance(result, str):
            return {"content": [{"type": "text", "text": result}]}
        return result

    # ── Resources ─────────────────────────────────────────────────

    def _list_resources(self, params: Any) -> dict[str, Any]:
        resources = [resource.to_listing() for resource in self.registry.resources()]
        if not resources:
            resources.append(diagnostics.system_status_resource_listing())
        return {"resources": resources}

    def _read_resource(self, params: Any) -> dict[str, Any]:
        if not isinstance(params, dict):
            raise InvalidParams("resources/read requires params")
        uri = params.get("uri")
        if not isinstance(uri, str):
            raise InvalidParams("Resource URI must be a string")

        found = self.registry.find_resource_by_uri(uri)
        if found is None:
            if uri == diagnostics.SYSTEM_STATUS_URI:
                text = diagnostics.system_status(
                    self.server_name,
                    self.server_version,
                    self.uptime_seconds,
                    self.registry.stats(),
                    self.active_sessions,
                )
                return _contents(uri, diagnostics.SYSTEM_STATUS_MIME_TYPE, text)
            logger.info("Resource not found", uri=uri)
            return {"error": "Resource not found"}

        resource, template_params = found
        logger.debug("Resource matched", resource=resource.name, uri=uri, params=template_params)
        try:
            text = resource.handler(uri, resource.user_context)
        except Exception as e:
            logger.error("Resource read failed", resource=resource.name, error=str(e))
            return {"error": "Resource read failed", "detail": str(e)}

        if text is None:
            logger.warning("Resource returned no content", resource=resource.name)
            return {"error": "Resource read failed"}
        return _contents(uri, resource.mime_type or DEFAULT_MIME_TYPE, str(text))


def _contents(uri: str, mime_type: str, text: str) -> dict[str, Any]:
    return {"contents": [{"uri": uri, "mimeType": mime_type, "text": text}]}
