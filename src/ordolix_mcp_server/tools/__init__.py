"""Tool registration helpers for the Ordolix MCP server."""

from __future__ import annotations

from enum import Enum

from ordolix_mcp.tools import ToolDefinition
from ordolix_mcp_server.store import EntityStore
from ordolix_mcp_server.tools.boards import get_board_tool, get_dashboard_tool
from ordolix_mcp_server.tools.issues import (
    add_comment_tool,
    assign_issue_tool,
    create_issue_tool,
    get_issue_tool,
    get_workflow_transitions_tool,
    search_issues_tool,
    transition_issue_tool,
    update_issue_tool,
)
from ordolix_mcp_server.tools.planning import (
    get_sprint_tool,
    list_projects_tool,
    list_sprints_tool,
)


class ToolName(str, Enum):
    """Closed set of tools the server exposes."""

    CREATE_ISSUE = "create_issue"
    GET_ISSUE = "get_issue"
    SEARCH_ISSUES = "search_issues"
    TRANSITION_ISSUE = "transition_issue"
    ADD_COMMENT = "add_comment"
    GET_BOARD = "get_board"
    GET_DASHBOARD = "get_dashboard"
    UPDATE_ISSUE = "update_issue"
    ASSIGN_ISSUE = "assign_issue"
    GET_WORKFLOW_TRANSITIONS = "get_workflow_transitions"
    LIST_PROJECTS = "list_projects"
    GET_SPRINT = "get_sprint"
    LIST_SPRINTS = "list_sprints"


def build_tools(store: EntityStore) -> list[ToolDefinition]:
    """Instantiate all tool definitions against the provided store.

    Raises:
        RuntimeError: If the built tools do not match :class:`ToolName` exactly.

    """
    tools = [
        create_issue_tool(store),
        get_issue_tool(store),
        search_issues_tool(store),
        transition_issue_tool(store),
        add_comment_tool(store),
        get_board_tool(store),
        get_dashboard_tool(store),
        update_issue_tool(store),
        assign_issue_tool(store),
        get_workflow_transitions_tool(store),
        list_projects_tool(store),
        get_sprint_tool(store),
        list_sprints_tool(store),
    ]
    built = [tool.name for tool in tools]
    expected = [name.value for name in ToolName]
    if sorted(built) != sorted(expected):
        raise RuntimeError(f"Tool table mismatch: built {built}, expected {expected}")
    return tools
