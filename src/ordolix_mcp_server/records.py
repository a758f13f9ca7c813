"""Record types held by the in-memory entity store.

These are lightweight stand-ins for the Ordolix relational schema, kept to
the columns the MCP tools and resources read or write.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class User:
    """Ordolix user profile. Users are global; tenancy comes from memberships."""

    id: str
    name: str
    email: str
    locale: str = "en"
    timezone: str = "UTC"
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Membership:
    """Role of a user inside an organization."""

    tenant_id: str
    user_id: str
    role: str


@dataclass
class Project:
    id: str
    tenant_id: str
    key: str
    name: str
    description: str | None = None
    issue_counter: int = 0
    member_ids: list[str] = field(default_factory=list)


@dataclass
class IssueType:
    id: str
    tenant_id: str
    name: str


@dataclass
class Priority:
    """Issue priority; a lower rank sorts first and is the default."""

    id: str
    tenant_id: str
    name: str
    rank: int = 0


@dataclass
class Status:
    """Workflow status; ``category`` is one of TO_DO, IN_PROGRESS or DONE."""

    id: str
    tenant_id: str
    name: str
    category: str = "TO_DO"


@dataclass
class Transition:
    """Allowed workflow move. A ``None`` source applies to every status."""

    tenant_id: str
    to_status_id: str
    name: str
    from_status_id: str | None = None


@dataclass
class Issue:
    id: str
    tenant_id: str
    project_id: str
    key: str
    summary: str
    issue_type_id: str
    status_id: str
    priority_id: str
    reporter_id: str
    description: str | None = None
    assignee_id: str | None = None
    labels: list[str] = field(default_factory=list)
    sprint_id: str | None = None
    story_points: float | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Comment:
    id: str
    tenant_id: str
    issue_id: str
    author_id: str
    body: str
    is_internal: bool = False
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Board:
    id: str
    tenant_id: str
    project_id: str
    name: str
    board_type: str = "kanban"
    columns: list[dict[str, Any]] = field(default_factory=list)
    swimlanes: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class Sprint:
    """Sprint; ``state`` is one of planned, active or completed."""

    id: str
    tenant_id: str
    project_id: str
    name: str
    state: str = "planned"
    goal: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


@dataclass
class Widget:
    id: str
    title: str
    widget_type: str


@dataclass
class Dashboard:
    id: str
    tenant_id: str
    name: str
    is_shared: bool = False
    widgets: list[Widget] = field(default_factory=list)
