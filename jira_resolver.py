"""
Resolution of human-readable Jira identifiers (project keys, type/priority/component/status
names, emails) into the ids the REST API expects.

Project and issue type are mandatory for a mutation and fail hard. Priority, components and
status transitions are best-effort: a failed lookup is recorded in Diagnostics and the
caller carries on without the value.
"""
import logging
from typing import Iterable

import requests

from jira_client import JiraClient
from jira_errors import NotFoundError, ResolutionError, UpstreamError

logger = logging.getLogger("jira-mcp.resolver")

# Remote failures that best-effort lookups absorb
LOOKUP_ERRORS = (UpstreamError, requests.RequestException)


class Diagnostics:
    """Collects warnings about degraded resolutions during a single tool call."""

    def __init__(self):
        self.warnings: list[str] = []

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


def find_by_name(items: Iterable[dict], name: str, key: str = "name") -> dict | None:
    """Return the first record whose `key` equals `name` ignoring case, or None."""
    wanted = name.casefold()
    for item in items or []:
        value = item.get(key)
        if isinstance(value, str) and value.casefold() == wanted:
            return item
    return None


class IdentifierResolver:
    """Lookup functions that turn names into ids using a JiraClient."""

    def __init__(self, client: JiraClient):
        self.client = client

    def resolve_project(self, project_key: str) -> str:
        try:
            project = self.client.get_project(project_key)
        except UpstreamError as e:
            raise ResolutionError(f'Could not find project with key "{project_key}".') from e
        if not project.get("id"):
            raise ResolutionError(f'Could not find project with key "{project_key}".')
        return project["id"]

    def resolve_issue_type(self, issue_type: str) -> str:
        try:
            issue_types = self.client.get_issue_types()
        except UpstreamError as e:
            raise ResolutionError(f'Could not look up issue type "{issue_type}": {e}') from e
        found = find_by_name(issue_types, issue_type)
        if not found or not found.get("id"):
            raise ResolutionError(f'Issue type "{issue_type}" not found.')
        return found["id"]

    def resolve_priority(self, priority: str, diagnostics: Diagnostics) -> str | None:
        try:
            found = find_by_name(self.client.get_priorities(), priority)
        except LOOKUP_ERRORS as e:
            diagnostics.warn(f'Failed to resolve priority ID for "{priority}": {e}')
            return None
        if not found or not found.get("id"):
            diagnostics.warn(f'Priority "{priority}" not found, skipping priority.')
            return None
        return found["id"]

    def resolve_components(self, names: list[str], project_id: str,
                           diagnostics: Diagnostics) -> list[str]:
        """Resolve component names within a project; unmatched names are dropped."""
        try:
            components = self.client.get_project_components(project_id)
        except LOOKUP_ERRORS as e:
            diagnostics.warn(f"Failed to resolve component IDs for project {project_id}: {e}")
            return []

        ids = []
        for name in names:
            found = find_by_name(components, name)
            if found and found.get("id"):
                ids.append(found["id"])
            else:
                diagnostics.warn(f'Component "{name}" not found in project {project_id}, skipping.')
        return ids

    def resolve_transition(self, issue_key: str, status: str, diagnostics: Diagnostics) -> str | None:
        """Find the transition whose destination status matches `status`."""
        try:
            response = self.client.get_transitions(issue_key)
        except LOOKUP_ERRORS as e:
            diagnostics.warn(f"Failed to get transitions for issue {issue_key}, cannot change status: {e}")
            return None

        transitions = response.get("transitions") or []
        wanted = status.casefold()
        for transition in transitions:
            target = (transition.get("to") or {}).get("name")
            if isinstance(target, str) and target.casefold() == wanted and transition.get("id"):
                return transition["id"]

        available = ", ".join(str((t.get("to") or {}).get("name")) for t in transitions)
        diagnostics.warn(
            f'Transition to status "{status}" not available for issue {issue_key}. '
            f"Available transitions: {available or 'none'}"
        )
        return None

    def resolve_user_by_email(self, email: str) -> dict:
        users = self.client.find_users(email, max_results=1)
        if users:
            candidate = users[0]
            address = candidate.get("emailAddress")
            if isinstance(address, str) and address.casefold() == email.casefold():
                return candidate
        raise NotFoundError(f'User with email "{email}" not found.')
