"""Shared test fixtures for the MCP engine test suite."""

from __future__ import annotations

import json

import pytest

from mcp_engine.dispatcher import Dispatcher
from mcp_engine.jsonrpc import render_notification, render_request
from mcp_engine.registry import CapabilityRegistry

PIN_SCHEMA = {
    "type": "object",
    "properties": {
        "pin": {"type": "integer", "minimum": 0, "maximum": 39},
        "state": {"type": "boolean"},
    },
    "required": ["pin", "state"],
}


class RecordingHandler:
    """A tool/resource handler that records calls and returns a canned value."""

    def __init__(self, result=None):
        self.result = result
        self.calls: list[tuple] = []

    def __call__(self, first, user_context):
        self.calls.append((first, user_context))
        return self.result


@pytest.fixture
def registry():
    """Return a fresh, empty CapabilityRegistry."""
    return CapabilityRegistry()


@pytest.fixture
def dispatcher(registry):
    """Return a Dispatcher bound to the registry fixture."""
    return Dispatcher(registry, server_name="Test Server", server_version="9.9.9")


@pytest.fixture
def rpc(dispatcher):
    """Send a request through the dispatcher and return the decoded reply."""

    def _rpc(method, params=None, id=1):
        reply = dispatcher.handle(render_request(method, params, id=id))
        return json.loads(reply)

    return _rpc


@pytest.fixture
def notify(dispatcher):
    """Send a notification and return the raw reply (expected to be None)."""

    def _notify(method, params=None):
        return dispatcher.handle(render_notification(method, params))

    return _notify
