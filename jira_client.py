"""
Jira API Client - thin wrapper over the Jira REST API v2 and Agile API used by the MCP tools.
"""
import logging
import os
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

import requests

from jira_errors import ConfigError, UpstreamError

logger = logging.getLogger("jira-mcp.client")

AUTH_TYPES = ("basic", "token")
ASSIGNEE_FIELDS = ("accountId", "name")
CLOUD_DOMAINS = (".atlassian.net", ".jira.com", ".jira-dev.com", "api.atlassian.com")


@dataclass
class JiraConfig:
    """Configuration for Jira API connection and tool behavior."""
    base_url: str
    email: str
    api_token: str
    auth_type: str = "basic"  # basic: email + API token, token: bearer personal access token
    assignee_field: str = "accountId"  # key used for the assignee reference in payloads
    parenthesize_jql: bool = False
    ssl_verify: bool = True

    @property
    def is_cloud(self) -> bool:
        """True for Atlassian Cloud hosts, False for Server/Data Center."""
        hostname = urlparse(self.base_url).hostname or ""
        return any(domain in hostname for domain in CLOUD_DOMAINS)

    @property
    def auth(self) -> tuple:
        return (self.email, self.api_token)

    @property
    def headers(self) -> dict:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json"
        }
        if self.auth_type == "token":
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    @classmethod
    def from_env(cls) -> "JiraConfig":
        """Create configuration from environment variables.

        Raises:
            ConfigError: If required variables are missing or an option has an unknown value.
        """
        host = os.getenv("JIRA_HOST") or os.getenv("JIRA_BASE_URL", "")
        email = os.getenv("JIRA_EMAIL", "")
        api_token = os.getenv("JIRA_API_TOKEN", "")

        missing = [name for name, value in (
            ("JIRA_HOST", host), ("JIRA_EMAIL", email), ("JIRA_API_TOKEN", api_token)
        ) if not value]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        auth_type = os.getenv("JIRA_AUTH_TYPE", "basic").lower()
        if auth_type not in AUTH_TYPES:
            raise ConfigError(f"JIRA_AUTH_TYPE must be one of {', '.join(AUTH_TYPES)}, got {auth_type!r}")

        assignee_field = os.getenv("JIRA_ASSIGNEE_FIELD", "accountId")
        if assignee_field not in ASSIGNEE_FIELDS:
            raise ConfigError(
                f"JIRA_ASSIGNEE_FIELD must be one of {', '.join(ASSIGNEE_FIELDS)}, got {assignee_field!r}"
            )

        return cls(
            base_url=normalize_host(host),
            email=email,
            api_token=api_token,
            auth_type=auth_type,
            assignee_field=assignee_field,
            parenthesize_jql=os.getenv("JIRA_PARENTHESIZE_JQL", "").lower() in ("true", "1", "yes"),
            ssl_verify=os.getenv("JIRA_SSL_VERIFY", "true").lower() not in ("false", "0", "no"),
        )


def normalize_host(host: str) -> str:
    """Return the host as a base URL with a scheme and no trailing slash."""
    host = host.strip().rstrip("/")
    if "://" not in host:
        host = f"https://{host}"
    return host


def _error_from_response(response: requests.Response) -> UpstreamError:
    """Build an UpstreamError from a failed Jira response body."""
    error_messages: list[str] = []
    errors: dict = {}
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error_messages = [str(m) for m in body.get("errorMessages") or []]
        errors = body.get("errors") or {}

    parts = list(error_messages)
    parts.extend(f"{field}: {text}" for field, text in errors.items())
    message = ", ".join(parts) or response.reason or "An unknown error occurred"
    return UpstreamError(response.status_code, message, error_messages, errors)


class JiraClient:
    """Client for interacting with Jira REST API."""

    def __init__(self, config: JiraConfig):
        self.config = config
        self.session = requests.Session()
        if config.auth_type == "basic":
            self.session.auth = config.auth
        self.session.headers.update(config.headers)
        self.session.verify = config.ssl_verify

    def _request(self, method: str, endpoint: str, api: str = "api/2", **kwargs) -> Any:
        """Make HTTP request to Jira API, raising UpstreamError on non-2xx status."""
        url = f"{self.config.base_url}/rest/{api}/{endpoint}"
        logger.debug(f"{method} {url}")
        response = self.session.request(method, url, **kwargs)
        if not response.ok:
            error = _error_from_response(response)
            logger.debug(f"{method} {url} failed: {error}")
            raise error
        return response.json() if response.text else {}

    # ==================== Metadata ====================

    def get_project(self, project_key: str) -> dict:
        return self._request("GET", f"project/{project_key}")

    def get_issue_types(self) -> list:
        return self._request("GET", "issuetype")

    def get_priorities(self) -> list:
        return self._request("GET", "priority")

    def get_project_components(self, project_id: str) -> list:
        return self._request("GET", f"project/{project_id}/components")

    def get_fields(self) -> list:
        return self._request("GET", "field")

    def get_issue_link_types(self) -> dict:
        return self._request("GET", "issueLinkType")

    # ==================== Board Operations ====================

    def get_board(self, board_id: int) -> dict:
        return self._request("GET", f"board/{board_id}", api="agile/1.0")

    def get_board_configuration(self, board_id: int) -> dict:
        return self._request("GET", f"board/{board_id}/configuration", api="agile/1.0")

    def get_filter(self, filter_id: int) -> dict:
        return self._request("GET", f"filter/{filter_id}")

    # ==================== Issue Operations ====================

    def get_issue(self, issue_key: str) -> dict:
        """Get a specific issue with full details."""
        return self._request("GET", f"issue/{issue_key}")

    def create_issue(self, fields: dict) -> dict:
        """Create a new issue from an already resolved field set."""
        return self._request("POST", "issue", json={"fields": fields})

    def edit_issue(self, issue_key: str, fields: dict) -> dict:
        """Update fields of an existing issue."""
        return self._request("PUT", f"issue/{issue_key}", json={"fields": fields})

    def get_transitions(self, issue_key: str) -> dict:
        return self._request("GET", f"issue/{issue_key}/transitions")

    def transition_issue(self, issue_key: str, transition_id: str) -> dict:
        payload = {"transition": {"id": transition_id}}
        return self._request("POST", f"issue/{issue_key}/transitions", json=payload)

    def delete_issue(self, issue_key: str) -> dict:
        """Delete an issue."""
        return self._request("DELETE", f"issue/{issue_key}")

    def search_issues(self, jql: str, max_results: int = 50) -> dict:
        """Search issues using JQL.

        Cloud only serves search/jql (the old search endpoint answers 410 Gone);
        Server/Data Center only has search.
        """
        params = {"jql": jql, "maxResults": max_results}
        if self.config.is_cloud:
            params["fields"] = "*navigable"
            return self._request("GET", "search/jql", params=params)
        return self._request("GET", "search", params=params)

    def link_issues(self, link_type: str, inward_key: str, outward_key: str) -> dict:
        payload = {
            "type": {"name": link_type},
            "inwardIssue": {"key": inward_key},
            "outwardIssue": {"key": outward_key},
        }
        return self._request("POST", "issueLink", json=payload)

    # ==================== User Operations ====================

    def find_users(self, query: str, max_results: int = 1) -> list:
        return self._request("GET", "user/search", params={"query": query, "maxResults": max_results})
