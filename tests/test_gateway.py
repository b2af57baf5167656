"""Tests for McpGateway (session accounting and serialized engine access)."""

import asyncio
import json
from unittest.mock import patch

import pytest

from conftest import RecordingHandler
from mcp_engine.diagnostics import SYSTEM_STATUS_URI
from mcp_engine.jsonrpc import render_notification, render_request
from mcp_engine.registry import CapabilityRegistry
from mcp_gateway.services.config import Settings
from mcp_gateway.services.gateway import McpGateway, SessionLimitExceeded


def _gateway(registry=None, **overrides):
    fields = {"max_sessions": 2, "server_name": "Gateway", "server_version": "0.1"}
    fields.update(overrides)
    return McpGateway(registry or CapabilityRegistry(), Settings(**fields))


class TestHandle:
    def test_request_reply(self):
        gateway = _gateway()
        reply = asyncio.run(gateway.handle(render_request("ping")))
        assert json.loads(reply)["result"] == {"status": "pong"}
        assert gateway.active_sessions == 0

    def test_notification_has_no_reply(self):
        gateway = _gateway()
        assert asyncio.run(gateway.handle(render_notification("initialized"))) is None

    def test_limit_rejects_extra_sessions(self):
        gateway = _gateway(max_sessions=1)
        gateway._active_sessions = 1
        with pytest.raises(SessionLimitExceeded) as exc_info:
            asyncio.run(gateway.handle(render_request("ping")))
        assert exc_info.value.max_sessions == 1
        assert gateway.active_sessions == 1

    def test_status_resource_sees_in_flight_session(self):
        gateway = _gateway()
        body = render_request("resources/read", {"uri": SYSTEM_STATUS_URI})
        reply = json.loads(asyncio.run(gateway.handle(body)))
        assert "Active Sessions: 1" in reply["result"]["contents"][0]["text"]

    def test_slot_released_when_engine_raises(self):
        gateway = _gateway()
        with patch.object(gateway.dispatcher, "handle", side_effect=RuntimeError("engine down")):
            with pytest.raises(RuntimeError):
                asyncio.run(gateway.handle(render_request("ping")))
        assert gateway.active_sessions == 0

    def test_concurrent_requests_are_serialized(self):
        gateway = _gateway(max_sessions=5)
        order = []

        def slow(arguments, ctx):
            order.append(("start", arguments["n"]))
            order.append(("end", arguments["n"]))
            return "done"

        gateway.registry.register_tool("slow", slow)

        async def run_all():
            bodies = [
                render_request("tools/call", {"name": "slow", "arguments": {"n": n}}, id=n)
                for n in range(3)
            ]
            return await asyncio.gather(*(gateway.handle(body) for body in bodies))

        replies = asyncio.run(run_all())
        assert [json.loads(r)["id"] for r in replies] == [0, 1, 2]
        for i in range(0, len(order), 2):
            assert order[i][0] == "start"
            assert order[i + 1] == ("end", order[i][1])


class TestMutateAndStats:
    def test_mutate_registers_under_lock(self):
        gateway = _gateway()
        tool = asyncio.run(
            gateway.mutate(lambda registry: registry.register_tool("echo", RecordingHandler("x")))
        )
        assert tool.name == "echo"
        assert gateway.stats().tool_count == 1

    def test_stats(self):
        registry = CapabilityRegistry()
        registry.register_resource("r://{x}", "r", RecordingHandler())
        stats = _gateway(registry, max_sessions=7).stats()
        assert stats.max_sessions == 7
        assert stats.resource_count == 1
        assert stats.active_sessions == 0
