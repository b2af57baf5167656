"""
McpGateway — owns one engine instance and serializes access to it.

The engine is not thread-safe, so every call into it (dispatch as well as
registry mutation) goes through a single asyncio lock. Dispatch runs in the
threadpool: a blocking handler stalls the engine, not the event loop.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Union

import structlog
from fastapi.concurrency import run_in_threadpool

from mcp_engine.dispatcher import Dispatcher
from mcp_engine.registry import CapabilityRegistry
from mcp_gateway.models.stats import ServerStats
from mcp_gateway.services.config import Settings

logger = structlog.get_logger()


class SessionLimitExceeded(Exception):
    """Raised when all session slots are in use."""

    def __init__(self, max_sessions: int) -> None:
        self.max_sessions = max_sessions
        super().__init__(f"Session limit reached ({max_sessions})")


class McpGateway:
    def __init__(self, registry: CapabilityRegistry, settings: Settings):
        self.registry = registry
        self.settings = settings
        self.max_sessions = settings.max_sessions
        self._active_sessions = 0
        self._lock = asyncio.Lock()
        self.dispatcher = Dispatcher(
            registry,
            server_name=settings.server_name,
            server_version=settings.server_version,
            validate_arguments=settings.validate_arguments,
            session_counter=lambda: self._active_sessions,
        )

    @property
    def active_sessions(self) -> int:
        return self._active_sessions

    async def handle(self, payload: Union[str, bytes]) -> Optional[str]:
        """Run one payload through the engine.

        Raises:
            SessionLimitExceeded: If ``max_sessions`` requests are already in flight.
        """
        if self._active_sessions >= self.max_sessions:
            await logger.awarning("Session limit reached", max_sessions=self.max_sessions)
            raise SessionLimitExceeded(self.max_sessions)

        self._active_sessions += 1
        try:
            async with self._lock:
                return await run_in_threadpool(self.dispatcher.handle, payload)
        finally:
            self._active_sessions -= 1

    async def mutate(self, operation: Callable[[CapabilityRegistry], Any]) -> Any:
        """Apply a registry mutation under the engine lock."""
        async with self._lock:
            return operation(self.registry)

    def stats(self) -> ServerStats:
        registry_stats = self.registry.stats()
        return ServerStats(
            active_sessions=self._active_sessions,
            max_sessions=self.max_sessions,
            tool_count=registry_stats.tool_count,
            resource_count=registry_stats.resource_count,
        )
