"""Project and sprint planning tools."""

from __future__ import annotations

from typing import Any, Literal

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

SprintState = Literal["planned", "active", "completed"]


class ListProjectsParams(ToolParameters):
    """list_projects takes no arguments."""


class GetSprintParams(ToolParameters):
    """Parameters for get_sprint."""

    sprint_id: str = Field(description="Sprint ID")


class ListSprintsParams(ToolParameters):
    """Parameters for list_sprints."""

    project_key: str = Field(description="Project key (e.g., 'ORD')")
    state: SprintState | None = Field(
        default=None, description="Only sprints in this state"
    )


def _date(value: Any) -> str:
    if value is None:
        return "-"
    if hasattr(value, "date"):
        return value.date().isoformat()
    return str(value)


def list_projects_tool(store: EntityStore) -> ToolDefinition:
    """Create the list_projects tool."""

    async def handler(session: Session, _params: ListProjectsParams) -> ToolResult:
        projects = await store.list_projects(session.tenant_id)
        if not projects:
            return text_result("No projects found.")
        lines = [
            f"- **{project['key']}**: {project['name']} "
            f"({project['_count']['issues']} issues)"
            for project in projects
        ]
        return text_result(f"Projects ({len(projects)}):\n\n" + "\n".join(lines))

    return ToolDefinition(
        name="list_projects",
        description="List the projects of the organization",
        parameters_model=ListProjectsParams,
        handler=handler,
        capability=Capability.PROJECTS_READ,
    )


def get_sprint_tool(store: EntityStore) -> ToolDefinition:
    """Create the get_sprint tool."""

    async def handler(session: Session, params: GetSprintParams) -> ToolResult:
        sprint = await store.get_sprint(session.tenant_id, params.sprint_id)
        if sprint is None:
            return error_result(f"Sprint '{params.sprint_id}' not found")
        project = sprint.get("project") or {}
        issues = sprint.get("issues", [])
        points = sum(issue["storyPoints"] or 0 for issue in issues)
        lines = [
            f"**Sprint: {sprint['name']}** [{sprint['state']}]",
            f"Project: {project.get('name', '-')} ({project.get('key', '-')})",
            f"Dates: {_date(sprint['startDate'])} to {_date(sprint['endDate'])}",
        ]
        if sprint.get("goal"):
            lines.append(f"Goal: {sprint['goal']}")
        lines.append(f"Issues ({len(issues)}, {points:g} points):")
        lines.extend(f"  - {issue['key']}: {issue['summary']}" for issue in issues)
        return text_result("\n".join(lines))

    return ToolDefinition(
        name="get_sprint",
        description="Get sprint details including its issues",
        parameters_model=GetSprintParams,
        handler=handler,
        capability=Capability.PROJECTS_READ,
    )


def list_sprints_tool(store: EntityStore) -> ToolDefinition:
    """Create the list_sprints tool."""

    async def handler(session: Session, params: ListSprintsParams) -> ToolResult:
        tenant_id = session.tenant_id
        project = await store.get_project(tenant_id, params.project_key)
        if project is None:
            return error_result(f"Project '{params.project_key}' not found")
        sprints = await store.list_sprints(tenant_id, project["id"], state=params.state)
        if not sprints:
            return text_result(f"No sprints found for {params.project_key}.")
        lines = [
            f"- {sprint['name']} ({sprint['id']}) [{sprint['state']}] "
            f"{_date(sprint['startDate'])} to {_date(sprint['endDate'])}"
            for sprint in sprints
        ]
        return text_result(
            f"Sprints for {params.project_key} ({len(sprints)}):\n\n" + "\n".join(lines)
        )

    return ToolDefinition(
        name="list_sprints",
        description="List the sprints of a project",
        parameters_model=ListSprintsParams,
        handler=handler,
        capability=Capability.PROJECTS_READ,
    )
