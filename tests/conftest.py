"""Shared test fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone

import pytest

from ordolix_mcp.server import MCPServer
from ordolix_mcp.session import Capability, Session
from ordolix_mcp_server.records import (
    Board,
    Comment,
    Dashboard,
    Issue,
    IssueType,
    Membership,
    Priority,
    Project,
    Sprint,
    Status,
    User,
    Widget,
)
from ordolix_mcp_server.resources import ResourceResolver
from ordolix_mcp_server.session_manager import SessionManager
from ordolix_mcp_server.store import InMemoryEntityStore
from ordolix_mcp_server.tools import build_tools

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)
TENANT = "org-1"
OTHER_TENANT = "org-2"


@pytest.fixture()
def anyio_backend() -> str:
    """Run anyio-marked tests on asyncio, the backend FastMCP supports."""
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_package_loggers() -> Iterator[None]:
    """Drop handlers installed by setup_logging during a test."""
    yield
    for name in ("ordolix_mcp", "ordolix_mcp_server"):
        logger = logging.getLogger(name)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True


@pytest.fixture()
def store() -> InMemoryEntityStore:
    """Provide a small two-tenant Ordolix data set."""
    store = InMemoryEntityStore()
    store.add(
        User(id="u-1", name="Frank", email="frank@test.com", created_at=BASE_TIME),
        User(id="u-2", name="Jane", email="jane@test.com", created_at=BASE_TIME),
        User(id="u-3", name="Outsider", email="outsider@test.com", created_at=BASE_TIME),
        Membership(tenant_id=TENANT, user_id="u-1", role="ADMIN"),
        Membership(tenant_id=TENANT, user_id="u-2", role="MEMBER"),
        Membership(tenant_id=OTHER_TENANT, user_id="u-3", role="ADMIN"),
        Project(
            id="p-1",
            tenant_id=TENANT,
            key="ORD",
            name="Ordolix",
            issue_counter=124,
            member_ids=["u-1", "u-2"],
        ),
        Project(id="p-2", tenant_id=OTHER_TENANT, key="OTH", name="Other", issue_counter=1),
        IssueType(id="t-bug", tenant_id=TENANT, name="Bug"),
        IssueType(id="t-task", tenant_id=TENANT, name="Task"),
        Priority(id="pr-high", tenant_id=TENANT, name="High", rank=1),
        Priority(id="pr-medium", tenant_id=TENANT, name="Medium", rank=2),
        Status(id="s-open", tenant_id=TENANT, name="Open", category="TO_DO"),
        Status(id="s-progress", tenant_id=TENANT, name="In Progress", category="IN_PROGRESS"),
        Status(id="s-done", tenant_id=TENANT, name="Done", category="DONE"),
        Issue(
            id="i-123",
            tenant_id=TENANT,
            project_id="p-1",
            key="ORD-123",
            summary="Fix login bug",
            description="Detailed description",
            issue_type_id="t-bug",
            status_id="s-open",
            priority_id="pr-high",
            assignee_id="u-1",
            reporter_id="u-2",
            labels=["bug"],
            sprint_id="sp-1",
            story_points=3,
            updated_at=BASE_TIME + timedelta(hours=2),
        ),
        Issue(
            id="i-7",
            tenant_id=TENANT,
            project_id="p-1",
            key="ORD-7",
            summary="Write onboarding docs",
            issue_type_id="t-task",
            status_id="s-progress",
            priority_id="pr-medium",
            reporter_id="u-2",
            sprint_id="sp-1",
            story_points=2,
            updated_at=BASE_TIME + timedelta(hours=1),
        ),
        Issue(
            id="i-oth",
            tenant_id=OTHER_TENANT,
            project_id="p-2",
            key="OTH-1",
            summary="Other tenant login problem",
            issue_type_id="t-bug",
            status_id="s-open",
            priority_id="pr-high",
            reporter_id="u-3",
        ),
        Board(
            id="b-1",
            tenant_id=TENANT,
            project_id="p-1",
            name="Sprint Board",
            board_type="scrum",
            columns=[{"name": "To Do"}, {"name": "In Progress"}, {"name": "Done"}],
        ),
        Board(id="b-oth", tenant_id=OTHER_TENANT, project_id="p-2", name="Hidden"),
        Sprint(
            id="sp-1",
            tenant_id=TENANT,
            project_id="p-1",
            name="Sprint 1",
            state="active",
            goal="Ship login",
            start_date=BASE_TIME,
            end_date=BASE_TIME + timedelta(days=14),
        ),
        Sprint(id="sp-2", tenant_id=TENANT, project_id="p-1", name="Sprint 2"),
        Dashboard(
            id="d-1",
            tenant_id=TENANT,
            name="Team Overview",
            is_shared=True,
            widgets=[
                Widget(id="w-1", title="Open Issues", widget_type="counter"),
                Widget(id="w-2", title="Sprint Burndown", widget_type="chart"),
            ],
        ),
    )
    store.add(
        *(
            Comment(
                id=f"c-{number}",
                tenant_id=TENANT,
                issue_id="i-123",
                author_id="u-1",
                body=f"Comment {number}",
                created_at=BASE_TIME + timedelta(minutes=number),
            )
            for number in range(12)
        )
    )
    return store


@pytest.fixture()
def sessions() -> SessionManager:
    """Provide an empty session manager."""
    return SessionManager()


@pytest.fixture()
def session(sessions: SessionManager) -> Session:
    """Provide a session holding every capability in the main tenant."""
    return sessions.create_session(TENANT, "test-client", list(Capability))


@pytest.fixture()
def server(store: InMemoryEntityStore, sessions: SessionManager) -> MCPServer:
    """Provide a dispatcher wired to the fixture store."""
    return MCPServer(
        tools=build_tools(store),
        resources=ResourceResolver(store),
        sessions=sessions,
    )
