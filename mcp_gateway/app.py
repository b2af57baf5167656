"""
Main FastAPI application — serves one MCP engine over HTTP.

Wires together:
- Capability registry (plus demo capabilities when enabled)
- Dispatcher, behind the gateway's serialization lock
- HTTP routes (JSON-RPC endpoint, health, stats)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mcp_engine.registry import CapabilityRegistry
from mcp_gateway.api.routes import router
from mcp_gateway.demo import register_demo_capabilities
from mcp_gateway.services.config import Settings, configure_logging, get_settings
from mcp_gateway.services.gateway import McpGateway

logger = structlog.get_logger()


def create_app(
    registry: Optional[CapabilityRegistry] = None, settings: Optional[Settings] = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    The embedding application registers its capabilities on *registry*
    before traffic starts; a fresh registry is created when none is given.
    """
    settings = settings or get_settings()
    registry = registry if registry is not None else CapabilityRegistry()
    if settings.demo_capabilities:
        register_demo_capabilities(registry)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        problems = settings.validate_server_settings()
        if problems:
            for problem in problems:
                await logger.aerror("Invalid configuration", problem=problem)
            raise RuntimeError("Invalid MCP server configuration: " + "; ".join(problems))

        stats = registry.stats()
        await logger.ainfo(
            "MCP server started",
            env=settings.env,
            server=settings.server_name,
            version=settings.server_version,
            tools=stats.tool_count,
            resources=stats.resource_count,
            max_sessions=settings.max_sessions,
        )

        yield

        await logger.ainfo("MCP server shut down")

    app = FastAPI(
        title=settings.server_name,
        description="Model Context Protocol server (JSON-RPC 2.0 over HTTP)",
        version=settings.server_version,
        lifespan=lifespan,
    )
    app.state.gateway = McpGateway(registry, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["Content-Type", "MCP-Protocol-Version"],
    )
    app.include_router(router)

    return app


def main() -> None:
    """Run the gateway with uvicorn using environment settings."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
