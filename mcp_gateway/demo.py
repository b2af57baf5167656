"""
Demo capabilities — a small set of tools and resources for trying the server.

    echo            tool      echoes ``message`` back
    set_pin         tool      drives a simulated output pin (0..39)
    echo://{message}          resource echoing the URI's last segment
    pins://{pin}              resource reporting one simulated pin as JSON

Pins are simulated in memory; nothing here touches hardware.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import structlog

from mcp_engine.registry import CapabilityRegistry
from mcp_engine.schema import ObjectSchemaBuilder
from mcp_engine.uri_template import match_template

logger = structlog.get_logger()

PIN_COUNT = 40


class PinBank:
    """In-memory stand-in for a bank of digital output pins."""

    def __init__(self, count: int = PIN_COUNT):
        self._levels = [False] * count

    def set(self, pin: int, state: bool) -> None:
        self._levels[pin] = state

    def get(self, pin: int) -> bool:
        return self._levels[pin]

    def __len__(self) -> int:
        return len(self._levels)


# ── Tool handlers ─────────────────────────────────────────────────


def echo_tool(arguments: Any, user_context: Any) -> Optional[str]:
    message = (arguments or {}).get("message")
    if not isinstance(message, str):
        return None
    return f"Tool echo: {message}"


def set_pin_tool(arguments: Any, pins: PinBank) -> Optional[str]:
    arguments = arguments or {}
    pin = arguments.get("pin")
    state = arguments.get("state")
    if isinstance(pin, bool) or not isinstance(pin, int) or not isinstance(state, bool):
        return "Invalid arguments. Expected: pin (integer), state (boolean)"
    if not 0 <= pin < len(pins):
        return f"Invalid pin {pin}. Valid pins are 0..{len(pins) - 1}."
    pins.set(pin, state)
    logger.info("Pin set", pin=pin, state=state)
    return f"Pin {pin} set to {'HIGH' if state else 'LOW'}"


# ── Resource handlers ─────────────────────────────────────────────


def echo_resource(uri: str, user_context: Any) -> Optional[str]:
    params = match_template("echo://{message}", uri)
    if params is None:
        return None
    return f"Resource echo: {params['message']}"


def pin_resource(uri: str, pins: PinBank) -> Optional[str]:
    params = match_template("pins://{pin}", uri)
    if params is None or not params["pin"].isdigit():
        return None
    pin = int(params["pin"])
    if pin >= len(pins):
        return None
    return json.dumps({"pin": pin, "state": pins.get(pin)})


def register_demo_capabilities(registry: CapabilityRegistry, pins: PinBank | None = None) -> PinBank:
    """Register the demo tools and resources; returns the pin bank they drive."""
    if pins is None:
        pins = PinBank()

    registry.register_tool(
        "echo",
        echo_tool,
        title="Echo",
        description="Echo back the provided message",
        input_schema=ObjectSchemaBuilder()
        .add_string("message", "Message to echo back", required=True)
        .build(),
    )
    registry.register_tool(
        "set_pin",
        set_pin_tool,
        title="Set Pin",
        description="Drive a simulated output pin high or low",
        input_schema=ObjectSchemaBuilder()
        .add_integer("pin", "Pin number", minimum=0, maximum=len(pins) - 1, required=True)
        .add_boolean("state", "true for HIGH, false for LOW", required=True)
        .build(),
        user_context=pins,
    )
    registry.register_resource(
        "echo://{message}",
        "echo",
        echo_resource,
        title="Echo Resource",
        description="Echo back the message in the URI",
    )
    registry.register_resource(
        "pins://{pin}",
        "pin_state",
        pin_resource,
        title="Pin State",
        description="Current level of a simulated pin",
        mime_type="application/json",
        user_context=pins,
    )
    return pins
