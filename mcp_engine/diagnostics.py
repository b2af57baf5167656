"""Built-in diagnostic tool and status resource.

These keep ``tools/list`` and ``resources/list`` non-empty on a bare server
and stay reachable by their reserved name/URI whenever no registered
capability claims them.
"""

from __future__ import annotations

import os
import platform
from typing import Any

from mcp_engine.registry import RegistryStats

SYSTEM_INFO_TOOL = "get_system_info"
SYSTEM_STATUS_URI = "system://status"
SYSTEM_STATUS_MIME_TYPE = "text/plain"


def system_info_tool_listing() -> dict[str, Any]:
    return {
        "name": SYSTEM_INFO_TOOL,
        "title": "System Information",
        "description": "Get host and server information",
        "inputSchema": {"type": "object", "properties": {}},
    }


def system_status_resource_listing() -> dict[str, Any]:
    return {
        "uri": SYSTEM_STATUS_URI,
        "name": "system_status",
        "title": "System Status",
        "description": "Current server status",
        "mimeType": SYSTEM_STATUS_MIME_TYPE,
    }


def system_info(
    server_name: str, server_version: str, uptime_seconds: float, stats: RegistryStats
) -> dict[str, Any]:
    """Result payload of the ``get_system_info`` tool."""
    text = (
        "System Information:\n"
        f"- Server: {server_name} {server_version}\n"
        f"- Python: {platform.python_version()} ({platform.python_implementation()})\n"
        f"- Platform: {platform.platform()}\n"
        f"- PID: {os.getpid()}\n"
        f"- Uptime: {int(uptime_seconds * 1000)} ms\n"
        f"- Tools: {stats.tool_count}\n"
        f"- Resources: {stats.resource_count}\n"
    )
    return {"content": [{"type": "text", "text": text}]}


def system_status(
    server_name: str,
    server_version: str,
    uptime_seconds: float,
    stats: RegistryStats,
    active_sessions: int,
) -> str:
    """Text of the ``system://status`` resource."""
    return (
        "System Status Report\n"
        "====================\n"
        f"Server: {server_name} {server_version}\n"
        f"Uptime: {int(uptime_seconds * 1000)} ms\n"
        f"Active Sessions: {active_sessions}\n"
        f"Registered Tools: {stats.tool_count}\n"
        f"Registered Resources: {stats.resource_count}\n"
        f"Python: {platform.python_version()}\n"
        f"Machine: {platform.machine() or 'unknown'}\n"
    )
