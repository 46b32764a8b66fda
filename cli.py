#!/usr/bin/env python3
"""
Replit Deploy Bridge - CLI Tool

Runs bridge tools from the command line, in the same mode the server would
use (live Replit when REPLIT_API_URL is set, simulation otherwise).
"""

import argparse
import asyncio
import json
import os
import sys
from typing import Any, Dict, List

from src.core.config import get_settings
from src.core.errors import BridgeError, ValidationError
from src.replit.bridge import ToolBridge
from src.replit.catalog import OPERATIONS, OperationName, list_tools_rest
from src.replit.validation import validate


def parse_arguments(tool: str, pairs: List[str]) -> Dict[str, Any]:
    """Turn key=value pairs into tool arguments, converting fields the schema declares as numeric"""
    properties = OPERATIONS[OperationName(tool)].properties
    args: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected key=value, got '{pair}'")
        declared = properties.get(key, {}).get("type")
        if properties.get(key, {}).get("type") == "integer":
            args[key] = int(value)
        else:
            args[key] = value
    return args


def print_tools():
    for tool in list_tools_rest():
        required = tool["parameters"]["required"]
        print(f"{tool['name']}: {tool['description']}")
        for name, prop in tool["parameters"]["properties"].items():
            flag = " (required)" if name in required else ""
            default = f" [default: {prop['default']}]" if "default" in prop else ""
            print(f"   {name}: {prop['type']}{flag}{default}")
        print()


def call_tool(name: str, pairs: List[str], token: str, as_json: bool) -> int:
    bridge = ToolBridge.from_settings(get_settings())
    try:
        arguments = parse_arguments(name, pairs)
        validated = validate(name, arguments)
        result = asyncio.run(bridge.execute(name, validated, bridge.session_for(token)))
    except (ValueError, ValidationError, BridgeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if as_json:
        print(json.dumps(result.to_wire(), indent=2))
    else:
        print(result.text)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Replit Deploy Bridge CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py tools
  python cli.py call createReplitProject title="My App" language=python
  python cli.py call reviewCommits replId=repl_123 limit=3 --json
  python cli.py serve --port 3000
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('tools', help='List available tools')

    call_parser = subparsers.add_parser('call', help='Run one tool')
    call_parser.add_argument('tool', choices=[op.value for op in OPERATIONS], help='Tool name')
    call_parser.add_argument('arguments', nargs='*', help='Tool arguments as key=value')
    call_parser.add_argument('--token', default=os.getenv('REPLIT_TOKEN', ''), help='Replit access token (live mode)')
    call_parser.add_argument('--json', action='store_true', help='Print the full tool result as JSON')

    serve_parser = subparsers.add_parser('serve', help='Start the HTTP server')
    serve_parser.add_argument('--port', type=int, default=None, help='Port to listen on')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == 'tools':
        print_tools()
        return 0

    if args.command == 'call':
        return call_tool(args.tool, args.arguments, args.token, args.json)

    if args.command == 'serve':
        import uvicorn
        uvicorn.run("server:app", host="0.0.0.0", port=args.port or get_settings().port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
