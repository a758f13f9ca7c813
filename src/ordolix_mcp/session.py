"""Session context shared by the dispatcher and tool handlers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


class Capability(str, Enum):
    """Permissions that can be granted to an MCP session."""

    ISSUES_READ = "issues:read"
    ISSUES_WRITE = "issues:write"
    ISSUES_TRANSITION = "issues:transition"
    COMMENTS_READ = "comments:read"
    COMMENTS_WRITE = "comments:write"
    BOARDS_READ = "boards:read"
    DASHBOARDS_READ = "dashboards:read"
    PROJECTS_READ = "projects:read"


@dataclass(frozen=True)
class Session:
    """Authenticated, tenant-scoped context of one MCP client.

    Attributes:
        session_id: Identifier issued by the session store.
        tenant_id: Organization every domain lookup is filtered by.
        client_name: Name reported by the connecting client.
        permissions: Capabilities granted to the client.
        last_active_at: Last time the session handled a request.

    """

    session_id: str
    tenant_id: str
    client_name: str
    permissions: frozenset[Capability]
    last_active_at: datetime

    def has_permission(self, capability: Capability) -> bool:
        """Return whether the session was granted ``capability``."""
        return capability in self.permissions


class SessionStore(Protocol):
    """Persistence seam for session records."""

    async def touch(self, session_id: str) -> None:
        """Refresh the last-active timestamp of a session."""
        ...
