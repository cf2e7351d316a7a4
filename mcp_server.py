#!/usr/bin/env python3
"""
Jira MCP Server - Model Context Protocol server exposing Jira tools to AI agents over stdio.

Usage:
    python mcp_server.py        (or: jira-mcp serve)
"""
import asyncio
import logging

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from jira_client import JiraClient, JiraConfig
from jira_handlers import JiraToolHandlers
from tool_dispatcher import ToolDispatcher
from tool_registry import ToolRegistry

logger = logging.getLogger("jira-mcp.server")

SERVER_NAME = "jira-mcp-server"


def build_dispatcher(config: JiraConfig) -> ToolDispatcher:
    """Wire client, handlers and registry for one process."""
    client = JiraClient(config)
    handlers = JiraToolHandlers.from_config(client, config)
    return ToolDispatcher(ToolRegistry(), handlers.as_mapping())


def create_server(dispatcher: ToolDispatcher) -> Server:
    """Create the MCP server instance bound to a dispatcher."""
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        """List available Jira tools."""
        return dispatcher.registry.list_tools()

    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        """Handle tool calls; McpError propagates so the client gets its error code."""
        result = dispatcher.dispatch(request.params.name, request.params.arguments)
        return types.ServerResult(result)

    # Registered directly rather than via @server.call_tool(), which folds every
    # exception into an isError result and drops the error code.
    server.request_handlers[types.CallToolRequest] = call_tool
    return server


async def run_stdio(server: Server) -> None:
    """Run the MCP server on stdin/stdout until the client disconnects."""
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Jira MCP server running and connected via stdio.")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def serve(config: JiraConfig) -> None:
    server = create_server(build_dispatcher(config))
    try:
        asyncio.run(run_stdio(server))
    except KeyboardInterrupt:
        logger.info("Shutting down Jira MCP server...")


if __name__ == "__main__":
    from cli import main
    main(["serve"])
