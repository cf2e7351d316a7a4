"""
Per-tool business logic. Each handler takes the validated argument mapping and the
call's Diagnostics and returns a JSON-serializable result.
"""
import json
import logging
from typing import Any

from jira_client import JiraClient, JiraConfig
from jira_errors import InvalidInputError
from jira_resolver import Diagnostics, IdentifierResolver
from tool_dispatcher import ToolHandler

logger = logging.getLogger("jira-mcp.handlers")


# ==================== JQL ====================

def quote_jql(value: str) -> str:
    """Render a value as a double-quoted JQL string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def project_jql(project_key: str, jql: str | None = None, parenthesize: bool = False) -> str:
    base = f"project = {quote_jql(project_key)}"
    if not jql:
        return base
    return f"{base} AND ({jql})" if parenthesize else f"{base} AND {jql}"


def board_jql(filter_jql: str, jql: str | None = None) -> str:
    return f"{filter_jql} AND ({jql})" if jql else filter_jql


def assigned_jql(account_id: str, status: str = "current", additional_jql: str | None = None) -> str:
    """Build the assignee search: current assignee, past assignee, or either."""
    account = quote_jql(account_id)
    if status == "past":
        base = f"assignee WAS {account}"
    elif status == "all":
        base = f"(assignee = {account} OR assignee WAS {account})"
    else:
        base = f"assignee = {account}"
    return f"{base} AND ({additional_jql})" if additional_jql else base


def parse_board_id(value: Any) -> int:
    """Coerce a rapidView argument (number or digit string) to a positive board id."""
    board_id = None
    if isinstance(value, str) and value.isdigit():
        board_id = int(value)
    elif isinstance(value, float) and value.is_integer():
        board_id = int(value)
    elif isinstance(value, int) and not isinstance(value, bool):
        board_id = value
    if board_id is None or board_id <= 0:
        raise InvalidInputError(f"Invalid rapidView ID: {value}. Must be a positive integer.")
    return board_id


# ==================== Handlers ====================

class JiraToolHandlers:
    """Workflow handlers for the Jira tool catalog, bound to one client."""

    def __init__(self, client: JiraClient, resolver: IdentifierResolver | None = None,
                 assignee_field: str = "accountId", parenthesize_jql: bool = False):
        self.client = client
        self.resolver = resolver or IdentifierResolver(client)
        self.assignee_field = assignee_field
        self.parenthesize_jql = parenthesize_jql

    @classmethod
    def from_config(cls, client: JiraClient, config: JiraConfig) -> "JiraToolHandlers":
        return cls(client, assignee_field=config.assignee_field, parenthesize_jql=config.parenthesize_jql)

    def as_mapping(self) -> dict[str, ToolHandler]:
        """Tool name -> handler, in catalog order."""
        return {
            "delete_issue": self.delete_issue,
            "get_issues": self.get_issues,
            "get_assigned_issues": self.get_assigned_issues,
            "update_issue": self.update_issue,
            "list_fields": self.list_fields,
            "list_issue_types": self.list_issue_types,
            "list_link_types": self.list_link_types,
            "get_user": self.get_user,
            "create_issue": self.create_issue,
            "create_issue_link": self.create_issue_link,
            "get_issue": self.get_issue,
        }

    def assignee_reference(self, assignee: str) -> dict | None:
        """Payload value for an assignee; the literal "null" unassigns."""
        if assignee == "null":
            return None
        return {self.assignee_field: assignee}

    # ---------- simple reads and writes ----------

    def delete_issue(self, args: dict, diagnostics: Diagnostics) -> dict:
        self.client.delete_issue(args["issueKey"])
        return {"success": True, "message": f"Issue {args['issueKey']} deleted successfully."}

    def get_issue(self, args: dict, diagnostics: Diagnostics) -> dict:
        return self.client.get_issue(args["issueKey"])

    def list_fields(self, args: dict, diagnostics: Diagnostics) -> list:
        return self.client.get_fields()

    def list_issue_types(self, args: dict, diagnostics: Diagnostics) -> list:
        return self.client.get_issue_types()

    def list_link_types(self, args: dict, diagnostics: Diagnostics) -> dict:
        return self.client.get_issue_link_types()

    def get_user(self, args: dict, diagnostics: Diagnostics) -> dict:
        return self.resolver.resolve_user_by_email(args["email"])

    def create_issue_link(self, args: dict, diagnostics: Diagnostics) -> dict:
        self.client.link_issues(args["linkType"], args["inwardIssueKey"], args["outwardIssueKey"])
        return {
            "success": True,
            "message": f"Link '{args['linkType']}' created between "
                       f"{args['inwardIssueKey']} and {args['outwardIssueKey']}.",
        }

    # ---------- searches ----------

    def get_issues(self, args: dict, diagnostics: Diagnostics) -> dict:
        jql = args.get("jql")
        if args.get("rapidView") is not None:
            board_id = parse_board_id(args["rapidView"])
            # Raises for an unknown board before reading its configuration
            self.client.get_board(board_id)
            config = self.client.get_board_configuration(board_id)
            filter_id = (config.get("filter") or {}).get("id")
            if not filter_id:
                raise InvalidInputError(f"Board {board_id} has no filter configured")
            board_filter = self.client.get_filter(int(filter_id))
            if not board_filter.get("jql"):
                raise InvalidInputError(f"Filter {filter_id} has no JQL configured")
            query = board_jql(board_filter["jql"], jql)
        elif args.get("projectKey"):
            query = project_jql(args["projectKey"], jql, parenthesize=self.parenthesize_jql)
        else:
            raise InvalidInputError("Either projectKey or rapidView must be provided")

        logger.debug(f"Searching issues with JQL: {query}")
        return self.client.search_issues(query)

    def get_assigned_issues(self, args: dict, diagnostics: Diagnostics) -> dict:
        query = assigned_jql(args["accountId"], args.get("status", "current"), args.get("additionalJql"))
        logger.debug(f"Searching assigned issues with JQL: {query}")
        return self.client.search_issues(query)

    # ---------- multi-step workflows ----------

    def create_issue(self, args: dict, diagnostics: Diagnostics) -> dict:
        """
        Resolve project, issue type, priority and components, then create the issue.

        Project and issue type must resolve or nothing is created. An unknown priority or
        component only drops that field.
        """
        project_key = args["projectKey"]
        project_id = self.resolver.resolve_project(project_key)
        issue_type_id = self.resolver.resolve_issue_type(args["issueType"])

        priority_id = None
        if args.get("priority"):
            priority_id = self.resolver.resolve_priority(args["priority"], diagnostics)

        component_ids = []
        if args.get("components"):
            component_ids = self.resolver.resolve_components(args["components"], project_id, diagnostics)

        fields = {
            "project": {"id": project_id},
            "summary": args["summary"],
            "issuetype": {"id": issue_type_id},
        }
        if args.get("description") is not None:
            fields["description"] = args["description"]
        if args.get("assignee"):
            fields["assignee"] = self.assignee_reference(args["assignee"])
        if args.get("labels") is not None:
            fields["labels"] = args["labels"]
        if component_ids:
            fields["components"] = [{"id": component_id} for component_id in component_ids]
        if priority_id:
            fields["priority"] = {"id": priority_id}

        logger.debug(f"Creating issue in {project_key} with fields: {json.dumps(fields)}")
        return self.client.create_issue(fields)

    def update_issue(self, args: dict, diagnostics: Diagnostics) -> dict:
        """
        Apply field changes, then move the issue to the requested status.

        Field edits run before the transition so they land on the pre-transition state.
        Returns the refreshed issue, or a no-op message when nothing could be applied.
        """
        issue_key = args["issueKey"]
        fields: dict[str, Any] = {}
        if args.get("summary"):
            fields["summary"] = args["summary"]
        if args.get("description"):
            fields["description"] = args["description"]
        if args.get("assignee") is not None:
            fields["assignee"] = self.assignee_reference(args["assignee"])

        if args.get("priority"):
            priority_id = self.resolver.resolve_priority(args["priority"], diagnostics)
            if priority_id:
                fields["priority"] = {"id": priority_id}

        transition_id = None
        if args.get("status"):
            transition_id = self.resolver.resolve_transition(issue_key, args["status"], diagnostics)

        if not fields and not transition_id:
            return {
                "success": True,
                "message": f"No valid fields or status transition provided for issue {issue_key}. "
                           "No update performed.",
            }

        if fields:
            logger.debug(f"Updating issue {issue_key} with fields: {json.dumps(fields)}")
            self.client.edit_issue(issue_key, fields)

        if transition_id:
            logger.info(f'Transitioning issue {issue_key} to status "{args["status"]}" '
                        f"(transition {transition_id})")
            self.client.transition_issue(issue_key, transition_id)

        return self.client.get_issue(issue_key)
