"""Tests for the line-delimited stdio transport."""

import io
import json

from conftest import RecordingHandler
from mcp_engine.jsonrpc import render_notification, render_request
from mcp_gateway.stdio import send, serve


def test_serve_writes_one_line_per_reply(dispatcher):
    instream = io.StringIO(
        render_request("initialize", {}, id=1)
        + "\n\n   \n"
        + render_notification("notifications/initialized")
        + "\n"
        + render_request("ping", id=2)
        + "\n"
    )
    outstream = io.StringIO()

    processed = serve(dispatcher, instream, outstream)

    lines = outstream.getvalue().splitlines()
    assert processed == 3
    assert len(lines) == 2
    assert json.loads(lines[0])["result"]["serverInfo"]["name"] == "Test Server"
    assert json.loads(lines[1]) == {"jsonrpc": "2.0", "id": 2, "result": {"status": "pong"}}


def test_serve_continues_after_bad_line(dispatcher):
    instream = io.StringIO("not json\n" + render_request("ping", id=9) + "\n")
    outstream = io.StringIO()

    serve(dispatcher, instream, outstream)

    first, second = (json.loads(line) for line in outstream.getvalue().splitlines())
    assert first["error"]["code"] == -32700
    assert second["id"] == 9


def test_empty_input(dispatcher):
    outstream = io.StringIO()
    assert serve(dispatcher, io.StringIO(""), outstream) == 0
    assert outstream.getvalue() == ""


def test_send_appends_newline():
    outstream = io.StringIO()
    send(outstream, '{"a": 1}')
    assert outstream.getvalue() == '{"a": 1}\n'


def test_serve_continues_after_deeply_nested_line(dispatcher):
    nested = "[" * 100000 + "]" * 100000
    deep = '{"jsonrpc": "2.0", "id": 1, "method": "ping", "params": ' + nested + "}"
    instream = io.StringIO(deep + "\n" + render_request("ping", id=2) + "\n")
    outstream = io.StringIO()

    assert serve(dispatcher, instream, outstream) == 2

    first, second = (json.loads(line) for line in outstream.getvalue().splitlines())
    assert first["error"]["code"] == -32700
    assert second["result"] == {"status": "pong"}


def test_serve_continues_after_unrenderable_result(registry, dispatcher):
    registry.register_tool("odd", RecordingHandler({"values": {1, 2}}))
    instream = io.StringIO(
        render_request("tools/call", {"name": "odd"}, id=1)
        + "\n"
        + render_request("ping", id=2)
        + "\n"
    )
    outstream = io.StringIO()

    serve(dispatcher, instream, outstream)

    first, second = (json.loads(line) for line in outstream.getvalue().splitlines())
    assert first["error"]["code"] == -32603
    assert second == {"jsonrpc": "2.0", "id": 2, "result": {"status": "pong"}}
