"""
Tool catalog exposed to MCP clients, plus the argument validators compiled from it.
"""
import logging
from dataclasses import dataclass, field
from typing import Any

from jsonschema import Draft7Validator
from mcp.types import Tool

logger = logging.getLogger("jira-mcp.registry")


TOOLS: list[Tool] = [
    Tool(
        name="delete_issue",
        description="Delete a Jira issue or subtask",
        inputSchema={
            "type": "object",
            "properties": {
                "issueKey": {"type": "string", "description": 'Key of the issue to delete (e.g., "PROJ-123")'}
            },
            "required": ["issueKey"],
            "additionalProperties": False
        }
    ),
    Tool(
        name="get_issues",
        description="Get all issues and subtasks for a project or rapid view",
        inputSchema={
            "type": "object",
            "properties": {
                "projectKey": {"type": "string", "description": 'Project key (e.g., "PROJ")'},
                "rapidView": {
                    "oneOf": [
                        {"type": "number", "description": "Rapid view ID (e.g., 117)", "minimum": 1},
                        {"type": "string", "description": 'Rapid view ID as string (e.g., "117")', "pattern": "^\\d+$"}
                    ]
                },
                "jql": {"type": "string", "description": "Optional JQL query to filter issues"}
            },
            "additionalProperties": False
        }
    ),
    Tool(
        name="get_assigned_issues",
        description="Get issues assigned to a user, with options to filter by assignment status "
                    "(current, past, or all).",
        inputSchema={
            "type": "object",
            "properties": {
                "accountId": {
                    "type": "string",
                    "description": "The account ID of the user to find issues for. Use get_user to find this."
                },
                "status": {
                    "type": "string",
                    "description": 'Filter by assignment status: "current" (default), "past", or "all".',
                    "enum": ["current", "past", "all"]
                },
                "additionalJql": {
                    "type": "string",
                    "description": "Optional additional JQL query to combine with the assignee search "
                                   '(e.g., "project = PROJ").'
                }
            },
            "required": ["accountId"],
            "additionalProperties": False
        }
    ),
    Tool(
        name="update_issue",
        description="Update an existing Jira issue",
        inputSchema={
            "type": "object",
            "properties": {
                "issueKey": {"type": "string", "description": 'Key of the issue to update (e.g., "PROJ-123")'},
                "summary": {"type": "string", "description": "New summary/title"},
                "description": {"type": "string", "description": "New description"},
                "assignee": {
                    "type": "string",
                    "description": 'Assignee reference (account ID, or user name on Server); "null" unassigns'
                },
                "status": {"type": "string", "description": "New status name (requires transition ID internally)"},
                "priority": {"type": "string", "description": "New priority name"}
            },
            "required": ["issueKey"],
            "minProperties": 2,
            "additionalProperties": False
        }
    ),
    Tool(
        name="list_fields",
        description="List all available fields in the Jira instance",
        inputSchema={"type": "object", "properties": {}, "required": [], "additionalProperties": False}
    ),
    Tool(
        name="list_issue_types",
        description="List all available issue types",
        inputSchema={"type": "object", "properties": {}, "required": [], "additionalProperties": False}
    ),
    Tool(
        name="list_link_types",
        description="List all available issue link types",
        inputSchema={"type": "object", "properties": {}, "required": [], "additionalProperties": False}
    ),
    Tool(
        name="get_user",
        description="Get a user's account ID by email address",
        inputSchema={
            "type": "object",
            "properties": {
                "email": {"type": "string", "description": "User's email address"}
            },
            "required": ["email"],
            "additionalProperties": False
        }
    ),
    Tool(
        name="create_issue",
        description="Create a new Jira issue",
        inputSchema={
            "type": "object",
            "properties": {
                "projectKey": {"type": "string", "description": 'Project key (e.g., "PROJ")'},
                "summary": {"type": "string", "description": "Issue summary/title"},
                "issueType": {"type": "string", "description": 'Name of the issue type (e.g., "Task", "Bug")'},
                "description": {"type": "string", "description": "Detailed description"},
                "assignee": {
                    "type": "string",
                    "description": "Assignee reference (account ID, or user name on Server; use get_user to find)"
                },
                "labels": {"type": "array", "items": {"type": "string"}, "description": "Array of labels"},
                "components": {"type": "array", "items": {"type": "string"}, "description": "Array of component names"},
                "priority": {"type": "string", "description": "Issue priority name"}
            },
            "required": ["projectKey", "summary", "issueType"],
            "additionalProperties": False
        }
    ),
    Tool(
        name="create_issue_link",
        description="Create a link between two issues",
        inputSchema={
            "type": "object",
            "properties": {
                "inwardIssueKey": {"type": "string", "description": 'Key of the inward issue (e.g., "PROJ-123")'},
                "outwardIssueKey": {"type": "string", "description": 'Key of the outward issue (e.g., "PROJ-456")'},
                "linkType": {"type": "string", "description": 'Name of the link type (e.g., "Blocks")'}
            },
            "required": ["inwardIssueKey", "outwardIssueKey", "linkType"],
            "additionalProperties": False
        }
    ),
    Tool(
        name="get_issue",
        description="Get a specific Jira issue by key",
        inputSchema={
            "type": "object",
            "properties": {
                "issueKey": {"type": "string", "description": 'Key of the issue to retrieve (e.g., "PROJ-123")'}
            },
            "required": ["issueKey"],
            "additionalProperties": False
        }
    ),
]


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


class SchemaValidator:
    """Argument predicate compiled once from a tool's input schema."""

    def __init__(self, schema: dict):
        # Raises jsonschema.SchemaError for a malformed schema
        Draft7Validator.check_schema(schema)
        self._validator = Draft7Validator(schema)

    def validate(self, args: Any) -> ValidationResult:
        errors = sorted(self._validator.iter_errors(args), key=lambda e: [str(part) for part in e.absolute_path])
        messages = []
        for error in errors:
            location = "/".join(str(part) for part in error.absolute_path)
            messages.append(f"{location}: {error.message}" if location else error.message)
        return ValidationResult(valid=not messages, errors=messages)


class ToolRegistry:
    """Read-only table of tools, keyed by name, in declaration order."""

    def __init__(self, tools: list[Tool] | None = None):
        self._tools: dict[str, Tool] = {}
        self._validators: dict[str, SchemaValidator] = {}
        for tool in TOOLS if tools is None else tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool
            if tool.inputSchema:
                self._validators[tool.name] = SchemaValidator(tool.inputSchema)
        logger.debug(f"Registered {len(self._tools)} tools")

    def list_tools(self) -> list[Tool]:
        return list(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def validate(self, name: str, args: Any) -> ValidationResult:
        """Validate arguments for a tool; tools without a compiled schema accept anything."""
        validator = self._validators.get(name)
        if validator is None:
            return ValidationResult(valid=True)
        return validator.validate(args)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
