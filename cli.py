#!/usr/bin/env python3
"""
Jira MCP CLI - run the MCP server, or inspect and call its tools from a shell.
"""
import argparse
import json
import sys

from dotenv import load_dotenv
from mcp.shared.exceptions import McpError

from jira_client import JiraConfig
from jira_errors import ConfigError
from logging_config import setup_logging
from mcp_server import build_dispatcher, serve
from tool_registry import ToolRegistry


def get_config_from_env() -> JiraConfig:
    """Load Jira settings from the environment, exiting on missing values."""
    try:
        return JiraConfig.from_env()
    except ConfigError as e:
        print(f"Error: {e}. Set JIRA_HOST, JIRA_EMAIL and JIRA_API_TOKEN (or use a .env file).",
              file=sys.stderr)
        sys.exit(1)


def json_object(value: str) -> dict:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON: {e}")
    if not isinstance(parsed, dict):
        raise argparse.ArgumentTypeError("arguments must be a JSON object")
    return parsed


def cmd_serve(args):
    """Run the MCP server over stdio."""
    serve(get_config_from_env())


def cmd_tools(args):
    """List registered tools."""
    for tool in ToolRegistry().list_tools():
        print(f"{tool.name}: {tool.description}")


def cmd_call(args):
    """Call a single tool and print its result."""
    dispatcher = build_dispatcher(get_config_from_env())
    try:
        result = dispatcher.dispatch(args.name, args.args)
    except McpError as e:
        print(f"Error {e.error.code}: {e.error.message}", file=sys.stderr)
        sys.exit(1)
    for content in result.content:
        print(content.text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jira-mcp", description="Jira MCP server")
    parser.add_argument("--env-file", help="Path to .env file (default: ./.env if present)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # serve
    p = subparsers.add_parser("serve", help="Run the MCP server over stdio")
    p.set_defaults(func=cmd_serve)

    # tools
    p = subparsers.add_parser("tools", help="List available tools")
    p.set_defaults(func=cmd_tools)

    # call
    p = subparsers.add_parser("call", help="Call a tool once")
    p.add_argument("name", help="Tool name (e.g., get_issue)")
    p.add_argument("-a", "--args", type=json_object, default={}, help="Tool arguments as a JSON object")
    p.set_defaults(func=cmd_call)

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.env_file:
        load_dotenv(args.env_file, override=True)
    else:
        load_dotenv()
    setup_logging("DEBUG" if args.verbose else None)

    if not args.command:
        args.func = cmd_serve

    args.func(args)


if __name__ == "__main__":
    main()
