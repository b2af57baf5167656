"""
Capability Registry — the tools and resources one engine instance exposes.

Tools are keyed by name. Resources are keyed by name for conflict detection
but routed by URI template, in registration order (first match wins).

The registry is not thread-safe: the embedding application serializes
registration, unregistration and dispatch.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, NamedTuple, Optional

import structlog

from mcp_engine.errors import (
    CapabilityNotFoundError,
    InvalidRegistrationError,
    RegistrationConflictError,
)
from mcp_engine.uri_template import match_template, template_parameters

logger = structlog.get_logger()

# (arguments, user_context) -> JSON value, or None on failure
ToolHandler = Callable[[Any, Any], Any]
# (uri, user_context) -> text, or None on failure
ResourceHandler = Callable[[str, Any], Optional[str]]


@dataclass
class ToolRegistration:
    """A registered tool and its handler."""

    name: str
    handler: ToolHandler
    title: Optional[str] = None
    description: Optional[str] = None
    input_schema: Optional[dict[str, Any]] = None
    user_context: Any = None

    def to_listing(self) -> dict[str, Any]:
        """Entry for ``tools/list``; optional fields are omitted when unset."""
        entry: dict[str, Any] = {"name": self.name}
        if self.title is not None:
            entry["title"] = self.title
        if self.description is not None:
            entry["description"] = self.description
        if self.input_schema is not None:
            entry["inputSchema"] = copy.deepcopy(self.input_schema)
        return entry


@dataclass
class ResourceRegistration:
    """A registered resource, routed by its URI template."""

    uri_template: str
    name: str
    handler: ResourceHandler
    title: Optional[str] = None
    description: Optional[str] = None
    mime_type: Optional[str] = None
    user_context: Any = None
    parameters: list[str] = field(default_factory=list)

    def to_listing(self) -> dict[str, Any]:
        """Entry for ``resources/list``."""
        entry: dict[str, Any] = {"uri": self.uri_template, "name": self.name}
        if self.title is not None:
            entry["title"] = self.title
        if self.description is not None:
            entry["description"] = self.description
        if self.mime_type is not None:
            entry["mimeType"] = self.mime_type
        return entry


class RegistryStats(NamedTuple):
    tool_count: int
    resource_count: int


def _require_text(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidRegistrationError(f"{what} is required")
    return value


def _optional_text(value: Any, what: str) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise InvalidRegistrationError(f"{what} must be a string")
    return value


class CapabilityRegistry:
    """
    Registry for MCP tools and resources.

    Registrations own deep copies of the caller's schema; handlers and user
    contexts are kept by reference.
    """

    def __init__(self):
        self._tools: dict[str, ToolRegistration] = {}
        self._resources: dict[str, ResourceRegistration] = {}

    # ── Tools ─────────────────────────────────────────────────────

    def register_tool(
        self,
        name: str,
        handler: ToolHandler,
        *,
        title: str | None = None,
        description: str | None = None,
        input_schema: dict[str, Any] | None = None,
        user_context: Any = None,
    ) -> ToolRegistration:
        """Register a new tool.

        Raises:
            InvalidRegistrationError: If name or handler is missing, or the
                schema is not an object.
            RegistrationConflictError: If the name is already registered.
        """
        _require_text(name, "Tool name")
        if not callable(handler):
            raise InvalidRegistrationError("Tool handler is required")
        if input_schema is not None and not isinstance(input_schema, dict):
            raise InvalidRegistrationError("Tool input schema must be an object")

        if name in self._tools:
            logger.error("Tool already registered", tool=name)
            raise RegistrationConflictError("tool", name)

        tool = ToolRegistration(
            name=name,
            handler=handler,
            title=_optional_text(title, "Tool title"),
            description=_optional_text(description, "Tool description"),
            input_schema=copy.deepcopy(input_schema),
            user_context=user_context,
        )
        self._tools[name] = tool
        logger.info("Tool registered", tool=name)
        return tool

    def find_tool(self, name: str) -> Optional[ToolRegistration]:
        return self._tools.get(name)

    def unregister_tool(self, name: str) -> ToolRegistration:
        """Remove a tool immediately and return its registration."""
        tool = self._tools.pop(name, None)
        if tool is None:
            raise CapabilityNotFoundError("tool", name)
        logger.info("Tool unregistered", tool=name)
        return tool

    def tools(self) -> list[ToolRegistration]:
        return list(self._tools.values())

    # ── Resources ─────────────────────────────────────────────────

    def register_resource(
        self,
        uri_template: str,
        name: str,
        handler: ResourceHandler,
        *,
        title: str | None = None,
        description: str | None = None,
        mime_type: str | None = None,
        user_context: Any = None,
    ) -> ResourceRegistration:
        """Register a new resource under a URI template.

        Raises:
            InvalidRegistrationError: If the template, name or handler is missing.
            RegistrationConflictError: If a resource with this name exists.
        """
        _require_text(uri_template, "Resource URI template")
        _require_text(name, "Resource name")
        if not callable(handler):
            raise InvalidRegistrationError("Resource handler is required")

        if name in self._resources:
            logger.error("Resource already registered", resource=name)
            raise RegistrationConflictError("resource", name)

        resource = ResourceRegistration(
            uri_template=uri_template,
            name=name,
            handler=handler,
            title=_optional_text(title, "Resource title"),
            description=_optional_text(description, "Resource description"),
            mime_type=_optional_text(mime_type, "Resource MIME type"),
            user_context=user_context,
            parameters=template_parameters(uri_template),
        )
        self._resources[name] = resource
        logger.info(
            "Resource registered",
            resource=name,
            uri_template=uri_template,
            parameters=resource.parameters,
        )
        return resource

    def find_resource_by_uri(self, uri: str) -> Optional[tuple[ResourceRegistration, dict[str, str]]]:
        """Return the first resource whose template matches *uri*, with its parameters."""
        for resource in self._resources.values():
            params = match_template(resource.uri_template, uri)
            if params is not None:
                return resource, params
        return None

    def unregister_resource(self, name: str) -> ResourceRegistration:
        """Remove a resource immediately and return its registration."""
        resource = self._resources.pop(name, None)
        if resource is None:
            raise CapabilityNotFoundError("resource", name)
        logger.info("Resource unregistered", resource=name)
        return resource

    def resources(self) -> list[ResourceRegistration]:
        return list(self._resources.values())

    # ── Stats ─────────────────────────────────────────────────────

    def stats(self) -> RegistryStats:
        return RegistryStats(tool_count=len(self._tools), resource_count=len(self._resources))
