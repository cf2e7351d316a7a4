"""Shared fixtures: a mocked JiraClient with realistic lookup data."""

from unittest.mock import MagicMock

import pytest

from jira_client import JiraClient, JiraConfig
from jira_handlers import JiraToolHandlers
from tool_dispatcher import ToolDispatcher
from tool_registry import ToolRegistry

ISSUE_TYPES = [
    {"id": "10001", "name": "Task"},
    {"id": "10002", "name": "Bug"},
    {"id": "10003", "name": "Story"},
]

PRIORITIES = [
    {"id": "1", "name": "Highest"},
    {"id": "2", "name": "High"},
    {"id": "3", "name": "Medium"},
]

COMPONENTS = [
    {"id": "20001", "name": "Backend"},
    {"id": "20002", "name": "Frontend"},
]

TRANSITIONS = {
    "transitions": [
        {"id": "11", "name": "Start Progress", "to": {"name": "In Progress"}},
        {"id": "31", "name": "Resolve", "to": {"name": "Done"}},
    ]
}

EXPECTED_TOOLS = [
    "delete_issue",
    "get_issues",
    "get_assigned_issues",
    "update_issue",
    "list_fields",
    "list_issue_types",
    "list_link_types",
    "get_user",
    "create_issue",
    "create_issue_link",
    "get_issue",
]


@pytest.fixture
def expected_tools():
    """Tool names in catalog declaration order."""
    return list(EXPECTED_TOOLS)


@pytest.fixture
def jira_config():
    return JiraConfig(
        base_url="https://test.atlassian.net",
        email="test@example.com",
        api_token="test-token",
    )


@pytest.fixture
def mock_client():
    """JiraClient double answering lookups for project TEST."""
    client = MagicMock(spec=JiraClient)
    client.get_project.return_value = {"id": "10000", "key": "TEST"}
    client.get_issue_types.return_value = ISSUE_TYPES
    client.get_priorities.return_value = PRIORITIES
    client.get_project_components.return_value = COMPONENTS
    client.get_transitions.return_value = TRANSITIONS
    client.create_issue.return_value = {
        "id": "10100",
        "key": "TEST-1",
        "self": "https://test.atlassian.net/rest/api/2/issue/10100",
    }
    client.get_issue.return_value = {"id": "10100", "key": "TEST-1", "fields": {"summary": "Updated"}}
    client.search_issues.return_value = {"issues": [], "total": 0}
    client.edit_issue.return_value = {}
    client.transition_issue.return_value = {}
    client.delete_issue.return_value = {}
    client.link_issues.return_value = {}
    return client


@pytest.fixture
def handlers(mock_client):
    return JiraToolHandlers(mock_client)


@pytest.fixture
def dispatcher(handlers):
    return ToolDispatcher(ToolRegistry(), handlers.as_mapping())
