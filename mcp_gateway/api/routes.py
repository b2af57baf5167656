"""
HTTP routes for the MCP gateway.

Endpoints:
    POST    /mcp          — JSON-RPC endpoint (one message per request)
    OPTIONS /mcp          — CORS preflight
    GET     /api/health   — Health check
    GET     /api/stats    — Session and registry statistics
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response

from mcp_gateway.models.stats import HealthStatus, ServerStats
from mcp_gateway.services.gateway import McpGateway, SessionLimitExceeded

router = APIRouter()

MCP_PATH = "/mcp"

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, MCP-Protocol-Version",
}


def get_gateway(request: Request) -> McpGateway:
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise HTTPException(status_code=503, detail="MCP engine not initialized")
    return gateway


# ── JSON-RPC endpoint ─────────────────────────────────────────────


@router.post(MCP_PATH)
async def mcp_endpoint(request: Request):
    """Feed the raw body to the engine.

    Replies are returned as ``application/json``; notifications produce no
    reply and are acknowledged with 202 and an empty body.
    """
    gateway = get_gateway(request)
    body = await request.body()

    try:
        reply = await gateway.handle(body)
    except SessionLimitExceeded as e:
        raise HTTPException(status_code=503, detail=str(e))

    if reply is None:
        return Response(status_code=202)
    return Response(content=reply, media_type="application/json")


@router.options(MCP_PATH)
async def mcp_preflight(request: Request):
    allowed = get_gateway(request).settings.allowed_origins
    origin = request.headers.get("origin")
    if not allowed or "*" in allowed:
        allow_origin = "*"
    elif origin in allowed:
        allow_origin = origin
    else:
        allow_origin = allowed[0]
    headers = {"Access-Control-Allow-Origin": allow_origin}
    headers.update(PREFLIGHT_HEADERS)
    return Response(status_code=204, headers=headers)


# ── Introspection ─────────────────────────────────────────────────


@router.get("/api/health", response_model=HealthStatus)
async def health_check(request: Request):
    gateway = get_gateway(request)
    return HealthStatus(
        server=gateway.settings.server_name,
        version=gateway.settings.server_version,
    )


@router.get("/api/stats", response_model=ServerStats)
async def get_stats(request: Request):
    """Active sessions are counted by this transport, not by the engine."""
    return get_gateway(request).stats()
