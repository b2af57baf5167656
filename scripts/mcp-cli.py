#!/usr/bin/env python3
"""
mcp-cli — talk to an MCP gateway over HTTP.

Usage:
    mcp-cli init
    mcp-cli ping
    mcp-cli tools
    mcp-cli call echo --args '{"message": "hi"}'
    mcp-cli resources
    mcp-cli read echo://hello
    mcp-cli stats
"""

from __future__ import annotations

import argparse
import itertools
import json
import sys

import httpx

from mcp_engine.jsonrpc import render_request

API_BASE = "http://localhost:8000"

_ids = itertools.count(1)


def rpc(api: str, method: str, params: dict | None = None) -> dict:
    """Send one JSON-RPC request and return the ``result`` payload."""
    body = render_request(method, params, id=next(_ids))
    resp = httpx.post(
        f"{api}/mcp", content=body, headers={"Content-Type": "application/json"}
    )
    if resp.status_code != 200:
        print(f"\033[31m✗ HTTP {resp.status_code}: {resp.text}\033[0m")
        sys.exit(1)

    data = resp.json()
    if "error" in data:
        err = data["error"]
        print(f"\033[31m✗ Error {err.get('code')}: {err.get('message')}\033[0m")
        if err.get("data") is not None:
            print(f"  {json.dumps(err['data'])}")
        sys.exit(1)
    return data.get("result") or {}


def show_init(args):
    result = rpc(args.api, "initialize", {"clientInfo": {"name": "mcp-cli", "version": "1.0.0"}})
    info = result.get("serverInfo", {})
    print(f"\033[32m✓ Connected\033[0m  {info.get('name')} {info.get('version')}")
    print(f"  Protocol: {result.get('protocolVersion')}")
    print(f"  Capabilities: {', '.join(result.get('capabilities', {}))}")


def show_ping(args):
    result = rpc(args.api, "ping")
    print(f"\033[32m● {result.get('status', 'ok')}\033[0m")


def list_tools(args):
    tools = rpc(args.api, "tools/list").get("tools", [])
    print(f"\n{'Name':<24} {'Description'}")
    print("─" * 70)
    for tool in tools:
        print(f"{tool['name']:<24} {tool.get('description', '')[:45]}")
    print(f"\n{len(tools)} tools")


def call_tool(args):
    try:
        arguments = json.loads(args.args) if args.args else None
    except json.JSONDecodeError as e:
        print(f"\033[31m✗ --args is not valid JSON: {e}\033[0m")
        sys.exit(1)

    params = {"name": args.name}
    if arguments is not None:
        params["arguments"] = arguments
    result = rpc(args.api, "tools/call", params)

    if "error" in result:
        print(f"\033[31m✗ {result['error']}\033[0m")
        sys.exit(1)
    for item in result.get("content", []):
        if item.get("type") == "text":
            print(item.get("text", ""))
        else:
            print(json.dumps(item))


def list_resources(args):
    resources = rpc(args.api, "resources/list").get("resources", [])
    print(f"\n{'URI':<32} {'Name':<20} {'MIME type'}")
    print("─" * 70)
    for res in resources:
        print(f"{res['uri']:<32} {res['name']:<20} {res.get('mimeType', '—')}")
    print(f"\n{len(resources)} resources")


def read_resource(args):
    result = rpc(args.api, "resources/read", {"uri": args.uri})
    if "error" in result:
        print(f"\033[31m✗ {result['error']}\033[0m")
        sys.exit(1)
    for content in result.get("contents", []):
        print(f"\033[34m▶ {content['uri']} ({content.get('mimeType')})\033[0m")
        print(content.get("text", ""))


def show_stats(args):
    resp = httpx.get(f"{args.api}/api/stats")
    if resp.status_code != 200:
        print("\033[31m✗ Failed to get server stats\033[0m")
        sys.exit(1)
    stats = resp.json()
    print("\n\033[1mMCP Server\033[0m")
    print(f"  Active sessions: {stats['active_sessions']}/{stats['max_sessions']}")
    print(f"  Tools:           {stats['tool_count']}")
    print(f"  Resources:       {stats['resource_count']}")


def main():
    parser = argparse.ArgumentParser(
        prog="mcp-cli",
        description="mcp-cli — inspect and call an MCP gateway",
    )
    parser.add_argument("--api", default=API_BASE, help="Gateway base URL")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init", help="Run the initialize handshake")
    subparsers.add_parser("ping", help="Ping the server")
    subparsers.add_parser("tools", help="List tools")

    call_parser = subparsers.add_parser("call", help="Call a tool")
    call_parser.add_argument("name", help="Tool name")
    call_parser.add_argument("--args", help="Tool arguments as a JSON object")

    subparsers.add_parser("resources", help="List resources")

    read_parser = subparsers.add_parser("read", help="Read a resource")
    read_parser.add_argument("uri", help="Resource URI")

    subparsers.add_parser("stats", help="Show server stats")

    args = parser.parse_args()

    commands = {
        "init": show_init,
        "ping": show_ping,
        "tools": list_tools,
        "call": call_tool,
        "resources": list_resources,
        "read": read_resource,
        "stats": show_stats,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return
    command(args)


if __name__ == "__main__":
    main()
