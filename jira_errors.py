"""
Error taxonomy for the Jira MCP server and its translation to MCP errors.
"""

from mcp.shared.exceptions import McpError
from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    ErrorData,
)


class JiraMcpError(Exception):
    """Base exception for Jira MCP errors."""

    code = INTERNAL_ERROR


class ConfigError(JiraMcpError, ValueError):
    """Raised at startup when required settings are missing or invalid."""


class ToolNotFoundError(JiraMcpError):
    """Raised when a tool name is not in the registry."""

    code = METHOD_NOT_FOUND


class InvalidInputError(JiraMcpError):
    """Raised when tool arguments are rejected before any remote call."""

    code = INVALID_PARAMS

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class ResolutionError(InvalidInputError):
    """Raised when a mandatory identifier (project, issue type) cannot be resolved."""


class NotFoundError(JiraMcpError):
    """Raised when a looked-up record does not exist."""

    code = INVALID_REQUEST


class UpstreamError(JiraMcpError):
    """Raised when the Jira API answers with a non-2xx status."""

    def __init__(self, status_code: int, message: str, error_messages: list[str] | None = None,
                 errors: dict | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error_messages = error_messages or []
        self.errors = errors or {}

    @property
    def code(self) -> int:
        if self.status_code == 400:
            return INVALID_PARAMS
        if self.status_code in (401, 403, 404):
            return INVALID_REQUEST
        return INTERNAL_ERROR

    def __str__(self) -> str:
        return f"Jira API Error ({self.status_code}): {self.message}"


def describe_error(error: Exception) -> dict:
    """Summarize an exception as JSON-safe diagnostic data."""
    details = {"type": type(error).__name__, "message": str(error)}
    if isinstance(error, UpstreamError):
        details["status"] = error.status_code
        details["errorMessages"] = error.error_messages
        details["errors"] = error.errors
    elif isinstance(error, InvalidInputError) and error.errors:
        details["errors"] = error.errors
    return details


def to_mcp_error(error: Exception) -> McpError:
    """
    Classify an exception and wrap it as the structured error the MCP host understands.

    Typed errors keep their own code and message. Anything else is an internal error
    reported with a 500 status.
    """
    if isinstance(error, McpError):
        return error
    if isinstance(error, JiraMcpError):
        code, message = error.code, str(error)
    else:
        code, message = INTERNAL_ERROR, f"Jira API Error (500): {str(error) or 'An unknown error occurred'}"
    return McpError(ErrorData(code=code, message=message, data={"originalError": describe_error(error)}))
