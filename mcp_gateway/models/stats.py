"""Response models for the gateway's HTTP API."""

from __future__ import annotations

from pydantic import BaseModel


class ServerStats(BaseModel):
    """Engine and transport statistics."""

    active_sessions: int = 0
    max_sessions: int = 10
    tool_count: int = 0
    resource_count: int = 0


class HealthStatus(BaseModel):
    status: str = "healthy"
    server: str
    version: str
