"""Board and dashboard inspection tools."""

from __future__ import annotations

import json

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


class GetBoardParams(ToolParameters):
    """Parameters for get_board."""

    board_id: str = Field(description="Board ID")


class GetDashboardParams(ToolParameters):
    """Parameters for get_dashboard."""

    dashboard_id: str = Field(description="Dashboard ID")


def get_board_tool(store: EntityStore) -> ToolDefinition:
    """Create the get_board tool."""

    async def handler(session: Session, params: GetBoardParams) -> ToolResult:
        board = await store.get_board(session.tenant_id, params.board_id)
        if board is None:
            return error_result(f"Board '{params.board_id}' not found")
        project = board.get("project") or {}
        text = "\n".join(
            [
                f"**Board: {board['name']}**",
                f"Project: {project.get('name', '-')} ({project.get('key', '-')})",
                f"Type: {board['boardType']}",
                f"Columns: {json.dumps(board['columns'])}",
                f"Swimlanes: {json.dumps(board['swimlanes'])}",
            ]
        )
        return text_result(text)

    return ToolDefinition(
        name="get_board",
        description="Get board details including columns and issue counts",
        parameters_model=GetBoardParams,
        handler=handler,
        capability=Capability.BOARDS_READ,
    )


def get_dashboard_tool(store: EntityStore) -> ToolDefinition:
    """Create the get_dashboard tool."""

    async def handler(session: Session, params: GetDashboardParams) -> ToolResult:
        dashboard = await store.get_dashboard(session.tenant_id, params.dashboard_id)
        if dashboard is None:
            return error_result(f"Dashboard '{params.dashboard_id}' not found")
        widgets = dashboard["widgets"]
        widget_lines = [
            f"  - {widget['title']} ({widget['widgetType']})" for widget in widgets
        ]
        text = "\n".join(
            [
                f"**Dashboard: {dashboard['name']}**",
                f"Shared: {'Yes' if dashboard['isShared'] else 'No'}",
                f"Widgets ({len(widgets)}):",
                "\n".join(widget_lines) or "  (none)",
            ]
        )
        return text_result(text)

    return ToolDefinition(
        name="get_dashboard",
        description="Get dashboard details including widgets",
        parameters_model=GetDashboardParams,
        handler=handler,
        capability=Capability.DASHBOARDS_READ,
    )
