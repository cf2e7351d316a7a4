"""
Tool Dispatcher - validates a tool call, routes it to its handler and wraps the outcome
as an MCP tool result or a structured McpError.
"""
import json
import logging
from typing import Any, Callable, Mapping

from mcp.types import CallToolResult, TextContent

from jira_errors import InvalidInputError, JiraMcpError, ToolNotFoundError, to_mcp_error
from jira_resolver import Diagnostics
from tool_registry import ToolRegistry

logger = logging.getLogger("jira-mcp.dispatcher")

# A handler receives the validated arguments and the call's diagnostics collector
ToolHandler = Callable[[dict, Diagnostics], Any]


class ToolDispatcher:
    """Routes tool calls by name to handlers fixed at construction time."""

    def __init__(self, registry: ToolRegistry, handlers: Mapping[str, ToolHandler]):
        missing = [name for name in registry.names() if name not in handlers]
        unknown = [name for name in handlers if name not in registry]
        if missing or unknown:
            raise ValueError(f"Tool handlers out of sync with registry: missing={missing}, unknown={unknown}")
        self.registry = registry
        self._handlers = dict(handlers)

    def dispatch(self, name: str, arguments: dict | None) -> CallToolResult:
        """
        Run one tool call.

        Raises:
            McpError: For an unknown tool, invalid arguments, or any failure in the handler.
        """
        args = {} if arguments is None else arguments
        logger.info(f"Received call for tool: {name}")
        logger.debug(f"Arguments for {name}: {json.dumps(args, default=str)}")

        try:
            if name not in self.registry:
                raise ToolNotFoundError(f'Tool "{name}" not found.')

            validation = self.registry.validate(name, args)
            if not validation.valid:
                raise InvalidInputError(
                    f"Invalid arguments for tool {name}: {'; '.join(validation.errors)}",
                    validation.errors,
                )

            diagnostics = Diagnostics()
            result = self._handlers[name](args, diagnostics)
        except JiraMcpError as e:
            logger.error(f"Error executing tool {name}: {e}")
            raise to_mcp_error(e) from e
        except Exception as e:
            logger.exception(f"Unexpected error executing tool {name}")
            raise to_mcp_error(e) from e

        if diagnostics.warnings and isinstance(result, dict):
            result = {**result, "warnings": diagnostics.warnings}

        logger.info(f"Tool {name} executed successfully.")
        return CallToolResult(content=[TextContent(type="text", text=json.dumps(result, indent=2, default=str))])
