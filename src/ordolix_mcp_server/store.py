"""Entity store interface used by tools and resources, plus an in-memory store.

Every tenant-owned lookup takes the tenant id and filters on it inside the
lookup itself. Records are returned as JSON-ready dictionaries using the
camelCase field names clients see.
"""

from __future__ import annotations

import dataclasses
import threading
import uuid
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from pydantic import TypeAdapter

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
    Transition,
    User,
    utcnow,
)

Record = dict[str, Any]


class EntityStore(Protocol):
    """Narrow read/write contract the MCP layer needs from the domain."""

    async def get_issue(
        self, tenant_id: str, key: str, *, comment_limit: int = 0
    ) -> Record | None: ...

    async def get_project(self, tenant_id: str, key: str) -> Record | None: ...

    async def get_board(self, tenant_id: str, board_id: str) -> Record | None: ...

    async def get_sprint(self, tenant_id: str, sprint_id: str) -> Record | None: ...

    async def get_dashboard(
        self, tenant_id: str, dashboard_id: str
    ) -> Record | None: ...

    async def get_user(self, user_id: str) -> Record | None: ...

    async def get_membership_role(self, tenant_id: str, user_id: str) -> str | None: ...

    async def find_user_by_email(self, email: str) -> Record | None: ...

    async def find_issue_type(self, tenant_id: str, name: str) -> Record | None: ...

    async def find_priority(
        self, tenant_id: str, name: str | None = None
    ) -> Record | None: ...

    async def find_status(self, tenant_id: str, name: str) -> Record | None: ...

    async def find_default_status(self, tenant_id: str) -> Record | None: ...

    async def search_issues(
        self,
        tenant_id: str,
        query: str,
        *,
        project_id: str | None = None,
        limit: int = 20,
    ) -> list[Record]: ...

    async def list_projects(self, tenant_id: str) -> list[Record]: ...

    async def list_sprints(
        self, tenant_id: str, project_id: str, *, state: str | None = None
    ) -> list[Record]: ...

    async def list_transitions(
        self, tenant_id: str, from_status_id: str
    ) -> list[Record]: ...

    async def create_issue(
        self,
        tenant_id: str,
        *,
        project_id: str,
        summary: str,
        issue_type_id: str,
        status_id: str,
        priority_id: str,
        reporter_id: str,
        description: str | None = None,
        assignee_id: str | None = None,
        labels: list[str] | None = None,
    ) -> Record: ...

    async def update_issue(
        self, tenant_id: str, issue_id: str, **changes: Any
    ) -> Record: ...

    async def add_comment(
        self,
        tenant_id: str,
        *,
        issue_id: str,
        author_id: str,
        body: str,
        is_internal: bool = False,
    ) -> Record: ...


_ISSUE_FIELDS = frozenset(
    {
        "summary",
        "description",
        "priority_id",
        "status_id",
        "assignee_id",
        "labels",
        "story_points",
        "sprint_id",
    }
)

_FIXTURE_TABLES: dict[str, type] = {
    "users": User,
    "memberships": Membership,
    "projects": Project,
    "issue_types": IssueType,
    "priorities": Priority,
    "statuses": Status,
    "transitions": Transition,
    "issues": Issue,
    "comments": Comment,
    "boards": Board,
    "sprints": Sprint,
    "dashboards": Dashboard,
}


def _person(user: User | None) -> Record | None:
    if user is None:
        return None
    return {"name": user.name, "email": user.email}


def _project_summary(project: Project | None) -> Record | None:
    if project is None:
        return None
    return {"name": project.name, "key": project.key}


class InMemoryEntityStore:
    """Dictionary-backed :class:`EntityStore` for tests, demos and the CLI."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._lock = threading.Lock()
        self.users: dict[str, User] = {}
        self.memberships: list[Membership] = []
        self.projects: dict[str, Project] = {}
        self.issue_types: dict[str, IssueType] = {}
        self.priorities: dict[str, Priority] = {}
        self.statuses: dict[str, Status] = {}
        self.transitions: list[Transition] = []
        self.issues: dict[str, Issue] = {}
        self.comments: list[Comment] = []
        self.boards: dict[str, Board] = {}
        self.sprints: dict[str, Sprint] = {}
        self.dashboards: dict[str, Dashboard] = {}

    @classmethod
    def from_fixture(cls, fixture: Mapping[str, Iterable[Mapping[str, Any]]]) -> InMemoryEntityStore:
        """Build a store from a mapping of table name to rows.

        Raises:
            ValueError: If the fixture names an unknown table.

        """
        store = cls()
        for table, rows in fixture.items():
            record_type = _FIXTURE_TABLES.get(table)
            if record_type is None:
                raise ValueError(f"Unknown fixture table '{table}'")
            adapter = TypeAdapter(record_type)
            for row in rows:
                store.add(adapter.validate_python(dict(row)))
        return store

    def add(self, *records: object) -> None:
        """Insert records, dispatching on their type."""
        with self._lock:
            for record in records:
                if isinstance(record, Membership):
                    self.memberships.append(record)
                elif isinstance(record, Transition):
                    self.transitions.append(record)
                elif isinstance(record, Comment):
                    self.comments.append(record)
                else:
                    self._table_for(record)[record.id] = record  # type: ignore[attr-defined]

    def _table_for(self, record: object) -> dict[str, Any]:
        tables: dict[type, dict[str, Any]] = {
            User: self.users,
            Project: self.projects,
            IssueType: self.issue_types,
            Priority: self.priorities,
            Status: self.statuses,
            Issue: self.issues,
            Board: self.boards,
            Sprint: self.sprints,
            Dashboard: self.dashboards,
        }
        try:
            return tables[type(record)]
        except KeyError:
            raise TypeError(f"Unsupported record type {type(record).__name__}") from None

    # -- shaping -----------------------------------------------------------

    def _issue_record(self, issue: Issue, *, comment_limit: int = 0) -> Record:
        issue_type = self.issue_types.get(issue.issue_type_id)
        status = self.statuses.get(issue.status_id)
        priority = self.priorities.get(issue.priority_id)
        record: Record = {
            "id": issue.id,
            "key": issue.key,
            "summary": issue.summary,
            "description": issue.description,
            "labels": list(issue.labels),
            "storyPoints": issue.story_points,
            "createdAt": issue.created_at,
            "updatedAt": issue.updated_at,
            "project": _project_summary(self.projects.get(issue.project_id)),
            "issueType": {"name": issue_type.name} if issue_type else None,
            "status": (
                {"id": status.id, "name": status.name, "category": status.category}
                if status
                else None
            ),
            "priority": {"name": priority.name} if priority else None,
            "assignee": _person(self.users.get(issue.assignee_id or "")),
            "reporter": _person(self.users.get(issue.reporter_id)),
        }
        if comment_limit > 0:
            comments = sorted(
                (
                    comment
                    for comment in self.comments
                    if comment.issue_id == issue.id
                    and comment.tenant_id == issue.tenant_id
                ),
                key=lambda comment: comment.created_at,
                reverse=True,
            )
            record["comments"] = [
                {"body": comment.body, "createdAt": comment.created_at}
                for comment in comments[:comment_limit]
            ]
        return record

    def _project_record(self, project: Project) -> Record:
        return {
            "id": project.id,
            "key": project.key,
            "name": project.name,
            "description": project.description,
            "issueCounter": project.issue_counter,
            "_count": {
                "issues": sum(
                    1
                    for issue in self.issues.values()
                    if issue.project_id == project.id
                    and issue.tenant_id == project.tenant_id
                ),
                "members": len(project.member_ids),
                "boards": sum(
                    1
                    for board in self.boards.values()
                    if board.project_id == project.id
                    and board.tenant_id == project.tenant_id
                ),
            },
        }

    def _sprint_record(self, sprint: Sprint, *, include_issues: bool) -> Record:
        record: Record = {
            "id": sprint.id,
            "name": sprint.name,
            "state": sprint.state,
            "goal": sprint.goal,
            "startDate": sprint.start_date,
            "endDate": sprint.end_date,
            "project": _project_summary(self.projects.get(sprint.project_id)),
        }
        if include_issues:
            issues = sorted(
                (
                    issue
                    for issue in self.issues.values()
                    if issue.sprint_id == sprint.id
                    and issue.tenant_id == sprint.tenant_id
                ),
                key=lambda issue: issue.key,
            )
            record["issues"] = [
                {
                    "key": issue.key,
                    "summary": issue.summary,
                    "storyPoints": issue.story_points,
                }
                for issue in issues
            ]
        return record

    def _find_issue(self, tenant_id: str, key: str) -> Issue | None:
        for issue in self.issues.values():
            if issue.tenant_id == tenant_id and issue.key == key:
                return issue
        return None

    def _find_project(self, tenant_id: str, key: str) -> Project | None:
        for project in self.projects.values():
            if project.tenant_id == tenant_id and project.key == key:
                return project
        return None

    @staticmethod
    def _owned(record: Any, tenant_id: str) -> Any:
        if record is None or record.tenant_id != tenant_id:
            return None
        return record

    # -- reads -------------------------------------------------------------

    async def get_issue(
        self, tenant_id: str, key: str, *, comment_limit: int = 0
    ) -> Record | None:
        issue = self._find_issue(tenant_id, key)
        if issue is None:
            return None
        return self._issue_record(issue, comment_limit=comment_limit)

    async def get_project(self, tenant_id: str, key: str) -> Record | None:
        project = self._find_project(tenant_id, key)
        if project is None:
            return None
        return self._project_record(project)

    async def get_board(self, tenant_id: str, board_id: str) -> Record | None:
        board = self._owned(self.boards.get(board_id), tenant_id)
        if board is None:
            return None
        return {
            "id": board.id,
            "name": board.name,
            "boardType": board.board_type,
            "columns": board.columns,
            "swimlanes": board.swimlanes,
            "project": _project_summary(self.projects.get(board.project_id)),
        }

    async def get_sprint(self, tenant_id: str, sprint_id: str) -> Record | None:
        sprint = self._owned(self.sprints.get(sprint_id), tenant_id)
        if sprint is None:
            return None
        return self._sprint_record(sprint, include_issues=True)

    async def get_dashboard(self, tenant_id: str, dashboard_id: str) -> Record | None:
        dashboard = self._owned(self.dashboards.get(dashboard_id), tenant_id)
        if dashboard is None:
            return None
        return {
            "id": dashboard.id,
            "name": dashboard.name,
            "isShared": dashboard.is_shared,
            "widgets": [
                {"id": widget.id, "title": widget.title, "widgetType": widget.widget_type}
                for widget in dashboard.widgets
            ],
        }

    async def get_user(self, user_id: str) -> Record | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        return {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "locale": user.locale,
            "timezone": user.timezone,
            "createdAt": user.created_at,
        }

    async def get_membership_role(self, tenant_id: str, user_id: str) -> str | None:
        for membership in self.memberships:
            if membership.tenant_id == tenant_id and membership.user_id == user_id:
                return membership.role
        return None

    async def find_user_by_email(self, email: str) -> Record | None:
        for user in self.users.values():
            if user.email.lower() == email.lower():
                return await self.get_user(user.id)
        return None

    async def find_issue_type(self, tenant_id: str, name: str) -> Record | None:
        for issue_type in self.issue_types.values():
            if issue_type.tenant_id == tenant_id and issue_type.name == name:
                return {"id": issue_type.id, "name": issue_type.name}
        return None

    async def find_priority(
        self, tenant_id: str, name: str | None = None
    ) -> Record | None:
        candidates = sorted(
            (
                priority
                for priority in self.priorities.values()
                if priority.tenant_id == tenant_id
                and (name is None or priority.name == name)
            ),
            key=lambda priority: priority.rank,
        )
        if not candidates:
            return None
        return {"id": candidates[0].id, "name": candidates[0].name}

    async def find_status(self, tenant_id: str, name: str) -> Record | None:
        for status in self.statuses.values():
            if status.tenant_id == tenant_id and status.name == name:
                return {"id": status.id, "name": status.name, "category": status.category}
        return None

    async def find_default_status(self, tenant_id: str) -> Record | None:
        for status in self.statuses.values():
            if status.tenant_id == tenant_id and status.category == "TO_DO":
                return {"id": status.id, "name": status.name, "category": status.category}
        return None

    async def search_issues(
        self,
        tenant_id: str,
        query: str,
        *,
        project_id: str | None = None,
        limit: int = 20,
    ) -> list[Record]:
        needle = query.lower()
        matches = sorted(
            (
                issue
                for issue in self.issues.values()
                if issue.tenant_id == tenant_id
                and (project_id is None or issue.project_id == project_id)
                and (needle in issue.key.lower() or needle in issue.summary.lower())
            ),
            key=lambda issue: issue.updated_at,
            reverse=True,
        )
        return [self._issue_record(issue) for issue in matches[:limit]]

    async def list_projects(self, tenant_id: str) -> list[Record]:
        projects = sorted(
            (
                project
                for project in self.projects.values()
                if project.tenant_id == tenant_id
            ),
            key=lambda project: project.key,
        )
        return [self._project_record(project) for project in projects]

    async def list_sprints(
        self, tenant_id: str, project_id: str, *, state: str | None = None
    ) -> list[Record]:
        sprints = [
            sprint
            for sprint in self.sprints.values()
            if sprint.tenant_id == tenant_id
            and sprint.project_id == project_id
            and (state is None or sprint.state == state)
        ]
        return [self._sprint_record(sprint, include_issues=False) for sprint in sprints]

    async def list_transitions(self, tenant_id: str, from_status_id: str) -> list[Record]:
        configured = [
            transition
            for transition in self.transitions
            if transition.tenant_id == tenant_id
            and transition.from_status_id in (None, from_status_id)
        ]
        if not configured:
            # Workflows without explicit transitions allow any status change.
            configured = [
                Transition(tenant_id=tenant_id, to_status_id=status.id, name=status.name)
                for status in self.statuses.values()
                if status.tenant_id == tenant_id and status.id != from_status_id
            ]
        records: list[Record] = []
        for transition in configured:
            target = self._owned(self.statuses.get(transition.to_status_id), tenant_id)
            if target is None:
                continue
            records.append(
                {
                    "name": transition.name,
                    "to": {"id": target.id, "name": target.name, "category": target.category},
                }
            )
        return records

    # -- writes ------------------------------------------------------------

    async def create_issue(
        self,
        tenant_id: str,
        *,
        project_id: str,
        summary: str,
        issue_type_id: str,
        status_id: str,
        priority_id: str,
        reporter_id: str,
        description: str | None = None,
        assignee_id: str | None = None,
        labels: list[str] | None = None,
    ) -> Record:
        with self._lock:
            project = self._owned(self.projects.get(project_id), tenant_id)
            if project is None:
                raise LookupError(f"Project '{project_id}' not found")
            project.issue_counter += 1
            issue = Issue(
                id=str(uuid.uuid4()),
                tenant_id=tenant_id,
                project_id=project.id,
                key=f"{project.key}-{project.issue_counter}",
                summary=summary,
                description=description,
                issue_type_id=issue_type_id,
                status_id=status_id,
                priority_id=priority_id,
                assignee_id=assignee_id,
                reporter_id=reporter_id,
                labels=list(labels or []),
            )
            self.issues[issue.id] = issue
        return self._issue_record(issue)

    async def update_issue(self, tenant_id: str, issue_id: str, **changes: Any) -> Record:
        unknown = set(changes) - _ISSUE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update issue fields: {', '.join(sorted(unknown))}")
        with self._lock:
            issue = self._owned(self.issues.get(issue_id), tenant_id)
            if issue is None:
                raise LookupError(f"Issue '{issue_id}' not found")
            updated = dataclasses.replace(issue, **changes, updated_at=utcnow())
            self.issues[issue_id] = updated
        return self._issue_record(updated)

    async def add_comment(
        self,
        tenant_id: str,
        *,
        issue_id: str,
        author_id: str,
        body: str,
        is_internal: bool = False,
    ) -> Record:
        with self._lock:
            issue = self._owned(self.issues.get(issue_id), tenant_id)
            if issue is None:
                raise LookupError(f"Issue '{issue_id}' not found")
            comment = Comment(
                id=str(uuid.uuid4()),
                tenant_id=tenant_id,
                issue_id=issue_id,
                author_id=author_id,
                body=body,
                is_internal=is_internal,
            )
            self.comments.append(comment)
        return {
            "id": comment.id,
            "body": comment.body,
            "isInternal": comment.is_internal,
            "createdAt": comment.created_at,
        }
