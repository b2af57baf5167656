"""Central configuration for the MCP gateway."""

from __future__ import annotations

import logging
import os
import sys
from functools import lru_cache
from typing import TextIO

import structlog
from dotenv import load_dotenv
from pydantic import BaseModel

# Load .env file before reading any env vars
load_dotenv()

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Gateway settings loaded from environment variables."""

    # Core
    env: str = os.getenv("MCP_ENV", "development")
    log_level: str = os.getenv("MCP_LOG_LEVEL", "INFO")
    host: str = os.getenv("MCP_HOST", "0.0.0.0")
    port: int = int(os.getenv("MCP_PORT", "8000"))
    max_sessions: int = int(os.getenv("MCP_MAX_SESSIONS", "10"))
    cors_origins: str = os.getenv("MCP_CORS_ORIGINS", "*")

    # Server identity (reported by initialize)
    server_name: str = os.getenv("MCP_SERVER_NAME", "Python MCP Server")
    server_version: str = os.getenv("MCP_SERVER_VERSION", "1.0.0")

    # Engine behaviour
    validate_arguments: bool = os.getenv("MCP_VALIDATE_ARGUMENTS", "false").lower() == "true"
    demo_capabilities: bool = os.getenv("MCP_DEMO_CAPABILITIES", "false").lower() == "true"

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_server_settings(self) -> list[str]:
        """Return problems that prevent the server from starting."""
        problems: list[str] = []
        if self.port <= 0:
            problems.append("MCP_PORT must be greater than 0")
        if self.max_sessions <= 0:
            problems.append("MCP_MAX_SESSIONS must be greater than 0")
        if self.log_level.upper() not in _LOG_LEVELS:
            problems.append(f"MCP_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        return problems


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure structlog level filtering and output stream.

    The stdio transport passes ``sys.stderr`` so stdout only carries JSON-RPC.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=False,
    )
