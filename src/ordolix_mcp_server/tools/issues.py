"""Tools for creating, reading and changing issues."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ordolix_mcp.session import Capability, Session
from ordolix_mcp.tools import (
    ToolDefinition,
    ToolParameters,
    ToolResult,
    error_result,
    text_result,
)
from ordolix_mcp_server.store import EntityStore
from ordolix_mcp_server.tools.common import name_of, split_labels

MAX_SEARCH_RESULTS = 50
REPORTER_FALLBACK = "system"


class IssueKeyParams(ToolParameters):
    """Parameters that only identify an issue."""

    issue_key: str = Field(description="Issue key (e.g., 'ORD-123')")


class CreateIssueParams(ToolParameters):
    """Parameters for create_issue."""

    project_key: str = Field(description="Project key (e.g., 'ORD')")
    summary: str = Field(min_length=1, description="Issue summary/title")
    issue_type: str = Field(
        description="Issue type name (e.g., 'Bug', 'Task', 'Story')"
    )
    description: str | None = Field(
        default=None, description="Detailed description (Markdown)"
    )
    priority: str | None = Field(
        default=None, description="Priority name (e.g., 'High', 'Medium', 'Low')"
    )
    assignee: str | None = Field(default=None, description="Assignee email address")
    labels: str | None = Field(default=None, description="Comma-separated labels")


class SearchIssuesParams(ToolParameters):
    """Parameters for search_issues."""

    query: str = Field(description="Search query (AQL or text)")
    project_key: str | None = Field(
        default=None, description="Limit search to a project"
    )
    max_results: int = Field(
        default=20, ge=1, description="Maximum results (default 20, at most 50)"
    )


class TransitionIssueParams(IssueKeyParams):
    """Parameters for transition_issue."""

    status_name: str = Field(
        description="Target status name (e.g., 'In Progress', 'Done')"
    )


class AddCommentParams(IssueKeyParams):
    """Parameters for add_comment."""

    body: str = Field(min_length=1, description="Comment body (Markdown)")
    internal: bool = Field(
        default=False, description="Whether the comment is internal (true/false)"
    )


class UpdateIssueParams(IssueKeyParams):
    """Parameters for update_issue."""

    summary: str | None = Field(default=None, min_length=1, description="New summary")
    description: str | None = Field(default=None, description="New description")
    priority: str | None = Field(default=None, description="New priority name")
    labels: str | None = Field(
        default=None, description="Comma-separated labels replacing the current ones"
    )


class AssignIssueParams(IssueKeyParams):
    """Parameters for assign_issue."""

    assignee: str | None = Field(
        default=None, description="Assignee email address; omit or empty to unassign"
    )


def format_issue(issue: dict[str, Any]) -> str:
    """Render an issue record as the Markdown block returned by get_issue."""
    project = issue.get("project") or {}
    status = issue.get("status") or {}
    assignee = issue.get("assignee")
    reporter = issue.get("reporter")
    if assignee:
        assignee_line = f"Assignee: {assignee['name']} ({assignee['email']})"
    else:
        assignee_line = "Assignee: Unassigned"
    lines = [
        f"**{issue['key']}**: {issue['summary']}",
        f"Project: {project.get('name', '-')} ({project.get('key', '-')})",
        f"Type: {name_of(issue.get('issueType'))}",
        f"Status: {name_of(status)} [{status.get('category', '-')}]",
        f"Priority: {name_of(issue.get('priority'))}",
        assignee_line,
    ]
    if reporter:
        lines.append(f"Reporter: {reporter['name']} ({reporter['email']})")
    if issue.get("description"):
        lines.append(f"\n---\n{issue['description']}")
    if issue.get("labels"):
        lines.append(f"Labels: {', '.join(issue['labels'])}")
    return "\n".join(lines)


def create_issue_tool(store: EntityStore) -> ToolDefinition:
    """Create the create_issue tool."""

    async def handler(session: Session, params: CreateIssueParams) -> ToolResult:
        tenant_id = session.tenant_id

        project = await store.get_project(tenant_id, params.project_key)
        if project is None:
            return error_result(f"Project '{params.project_key}' not found")
        issue_type = await store.find_issue_type(tenant_id, params.issue_type)
        if issue_type is None:
            return error_result(f"Issue type '{params.issue_type}' not found")
        priority = await store.find_priority(tenant_id, params.priority)
        if priority is None:
            return error_result("No priority found")
        status = await store.find_default_status(tenant_id)
        if status is None:
            return error_result("No default status found")

        assignee_id: str | None = None
        if params.assignee:
            user = await store.find_user_by_email(params.assignee)
            if user is None:
                return error_result(f"User '{params.assignee}' not found")
            assignee_id = user["id"]

        issue = await store.create_issue(
            tenant_id,
            project_id=project["id"],
            summary=params.summary,
            description=params.description,
            issue_type_id=issue_type["id"],
            status_id=status["id"],
            priority_id=priority["id"],
            assignee_id=assignee_id,
            reporter_id=assignee_id or REPORTER_FALLBACK,
            labels=split_labels(params.labels),
        )
        return text_result(f"Created issue {issue['key']}: {issue['summary']}")

    return ToolDefinition(
        name="create_issue",
        description="Create a new issue in Ordolix",
        parameters_model=CreateIssueParams,
        handler=handler,
        capability=Capability.ISSUES_WRITE,
    )


def get_issue_tool(store: EntityStore) -> ToolDefinition:
    """Create the get_issue tool."""

    async def handler(session: Session, params: IssueKeyParams) -> ToolResult:
        issue = await store.get_issue(session.tenant_id, params.issue_key)
        if issue is None:
            return error_result(f"Issue '{params.issue_key}' not found")
        return text_result(format_issue(issue))

    return ToolDefinition(
        name="get_issue",
        description="Get details of an issue by its key",
        parameters_model=IssueKeyParams,
        handler=handler,
        capability=Capability.ISSUES_READ,
    )


def search_issues_tool(store: EntityStore) -> ToolDefinition:
    """Create the search_issues tool."""

    async def handler(session: Session, params: SearchIssuesParams) -> ToolResult:
        tenant_id = session.tenant_id
        project_id: str | None = None
        if params.project_key:
            project = await store.get_project(tenant_id, params.project_key)
            if project is not None:
                project_id = project["id"]

        issues = await store.search_issues(
            tenant_id,
            params.query,
            project_id=project_id,
            limit=min(params.max_results, MAX_SEARCH_RESULTS),
        )
        if not issues:
            return text_result("No issues found matching the query.")

        lines = []
        for issue in issues:
            line = (
                f"- **{issue['key']}**: {issue['summary']} "
                f"[{name_of(issue.get('status'))}] ({name_of(issue.get('priority'))})"
            )
            if issue.get("assignee"):
                line += f" - {issue['assignee']['name']}"
            lines.append(line)
        return text_result(f"Found {len(issues)} issue(s):\n\n" + "\n".join(lines))

    return ToolDefinition(
        name="search_issues",
        description="Search for issues using AQL (Ordolix Query Language) or text",
        parameters_model=SearchIssuesParams,
        handler=handler,
        capability=Capability.ISSUES_READ,
    )


def transition_issue_tool(store: EntityStore) -> ToolDefinition:
    """Create the transition_issue tool."""

    async def handler(session: Session, params: TransitionIssueParams) -> ToolResult:
        tenant_id = session.tenant_id
        issue = await store.get_issue(tenant_id, params.issue_key)
        if issue is None:
            return error_result(f"Issue '{params.issue_key}' not found")
        status = await store.find_status(tenant_id, params.status_name)
        if status is None:
            return error_result(f"Status '{params.status_name}' not found")

        await store.update_issue(tenant_id, issue["id"], status_id=status["id"])
        return text_result(f"Transitioned {params.issue_key} to '{params.status_name}'")

    return ToolDefinition(
        name="transition_issue",
        description="Transition an issue to a new status",
        parameters_model=TransitionIssueParams,
        handler=handler,
        capability=Capability.ISSUES_TRANSITION,
    )


def add_comment_tool(store: EntityStore) -> ToolDefinition:
    """Create the add_comment tool."""

    async def handler(session: Session, params: AddCommentParams) -> ToolResult:
        tenant_id = session.tenant_id
        issue = await store.get_issue(tenant_id, params.issue_key)
        if issue is None:
            return error_result(f"Issue '{params.issue_key}' not found")

        await store.add_comment(
            tenant_id,
            issue_id=issue["id"],
            author_id=f"mcp-{session.session_id}",
            body=params.body,
            is_internal=params.internal,
        )
        return text_result(f"Added comment to {params.issue_key}")

    return ToolDefinition(
        name="add_comment",
        description="Add a comment to an issue",
        parameters_model=AddCommentParams,
        handler=handler,
        capability=Capability.COMMENTS_WRITE,
    )


def update_issue_tool(store: EntityStore) -> ToolDefinition:
    """Create the update_issue tool."""

    async def handler(session: Session, params: UpdateIssueParams) -> ToolResult:
        tenant_id = session.tenant_id
        issue = await store.get_issue(tenant_id, params.issue_key)
        if issue is None:
            return error_result(f"Issue '{params.issue_key}' not found")

        changes: dict[str, Any] = {}
        if params.summary is not None:
            changes["summary"] = params.summary
        if params.description is not None:
            changes["description"] = params.description or None
        if params.labels is not None:
            changes["labels"] = split_labels(params.labels)
        if params.priority is not None:
            priority = await store.find_priority(tenant_id, params.priority)
            if priority is None:
                return error_result(f"Priority '{params.priority}' not found")
            changes["priority_id"] = priority["id"]
        if not changes:
            return error_result("No fields to update")

        await store.update_issue(tenant_id, issue["id"], **changes)
        fields = ", ".join(sorted(key.removesuffix("_id") for key in changes))
        return text_result(f"Updated {params.issue_key}: {fields}")

    return ToolDefinition(
        name="update_issue",
        description="Update the summary, description, priority or labels of an issue",
        parameters_model=UpdateIssueParams,
        handler=handler,
        capability=Capability.ISSUES_WRITE,
    )


def assign_issue_tool(store: EntityStore) -> ToolDefinition:
    """Create the assign_issue tool."""

    async def handler(session: Session, params: AssignIssueParams) -> ToolResult:
        tenant_id = session.tenant_id
        issue = await store.get_issue(tenant_id, params.issue_key)
        if issue is None:
            return error_result(f"Issue '{params.issue_key}' not found")

        if not params.assignee:
            await store.update_issue(tenant_id, issue["id"], assignee_id=None)
            return text_result(f"Unassigned {params.issue_key}")

        user = await store.find_user_by_email(params.assignee)
        if user is None:
            return error_result(f"User '{params.assignee}' not found")
        await store.update_issue(tenant_id, issue["id"], assignee_id=user["id"])
        return text_result(f"Assigned {params.issue_key} to {user['name']}")

    return ToolDefinition(
        name="assign_issue",
        description="Assign an issue to a user by email, or unassign it",
        parameters_model=AssignIssueParams,
        handler=handler,
        capability=Capability.ISSUES_WRITE,
    )


def get_workflow_transitions_tool(store: EntityStore) -> ToolDefinition:
    """Create the get_workflow_transitions tool."""

    async def handler(session: Session, params: IssueKeyParams) -> ToolResult:
        tenant_id = session.tenant_id
        issue = await store.get_issue(tenant_id, params.issue_key)
        if issue is None:
            return error_result(f"Issue '{params.issue_key}' not found")
        current = issue.get("status")
        if not current:
            return error_result(f"Issue '{params.issue_key}' has no current status")

        transitions = await store.list_transitions(tenant_id, current["id"])
        if not transitions:
            return text_result(
                f"No transitions available from '{current['name']}' for {params.issue_key}."
            )
        lines = [
            f"- {transition['name']} -> {transition['to']['name']} "
            f"[{transition['to']['category']}]"
            for transition in transitions
        ]
        return text_result(
            f"Transitions for {params.issue_key} (currently '{current['name']}'):\n"
            + "\n".join(lines)
        )

    return ToolDefinition(
        name="get_workflow_transitions",
        description="List the statuses an issue can transition to",
        parameters_model=IssueKeyParams,
        handler=handler,
        capability=Capability.ISSUES_READ,
    )
