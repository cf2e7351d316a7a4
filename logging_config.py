"""Logging configuration for the Jira MCP server."""

import logging
import os
import sys
from typing import TextIO

LOGGER_NAME = "jira-mcp"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DEFAULT_LOG_LEVEL = "INFO"


def resolve_level(level: str | int | None = None) -> int:
    """
    Turn a level name or number into a logging level.

    Falls back to JIRA_MCP_LOG_LEVEL, then INFO. Unknown names resolve to INFO.
    """
    if level is None:
        level = os.getenv("JIRA_MCP_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: str | int | None = None, stream: TextIO | None = None) -> logging.Logger:
    """
    Configure the `jira-mcp` logger hierarchy.

    Output goes to stderr by default: stdout carries the MCP stdio transport.
    Calling this again replaces the handler instead of stacking a second one.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_level(level))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    logger.addHandler(handler)
    return logger
