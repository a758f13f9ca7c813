"""Resource templates and URI resolution for ``resources/read``."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from ordolix_mcp.errors import InvalidParamsError, ResourceNotFoundError
from ordolix_mcp.session import Session
from ordolix_mcp_server.store import EntityStore, Record

JSON_MIME_TYPE = "application/json"
RECENT_COMMENT_LIMIT = 10


class ResourceKind(str, Enum):
    """URI schemes served by the resolver, in matching order."""

    ISSUE = "issue"
    PROJECT = "project"
    BOARD = "board"
    SPRINT = "sprint"
    USER = "user"

    @property
    def prefix(self) -> str:
        return f"{self.value}://"


@dataclass(frozen=True)
class ResourceTemplate:
    """Template advertised via ``resources/templates/list``."""

    uri_template: str
    name: str
    description: str
    mime_type: str = JSON_MIME_TYPE

    @property
    def parameter(self) -> str:
        """Name of the single placeholder in the template."""
        return self.uri_template.split("{", 1)[1].rstrip("}")

    def to_dict(self) -> dict[str, str]:
        return {
            "uriTemplate": self.uri_template,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


RESOURCE_TEMPLATES: tuple[ResourceTemplate, ...] = (
    ResourceTemplate(
        uri_template="board://{id}",
        name="Board",
        description="An Ordolix board by its ID",
    ),
    ResourceTemplate(
        uri_template="issue://{key}",
        name="Issue",
        description="An Ordolix issue by its key (e.g., issue://ORD-123)",
    ),
    ResourceTemplate(
        uri_template="project://{key}",
        name="Project",
        description="An Ordolix project by its key (e.g., project://ORD)",
    ),
    ResourceTemplate(
        uri_template="sprint://{id}",
        name="Sprint",
        description="Sprint details by ID",
    ),
    ResourceTemplate(
        uri_template="user://{id}",
        name="User",
        description="User profile by ID",
    ),
)


def _json_default(value: object) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json_text(content: Any) -> str:
    """Serialize a fetched resource as pretty-printed JSON."""
    return json.dumps(content, indent=2, default=_json_default)


def parse_uri(uri: str) -> tuple[ResourceKind, str]:
    """Split ``uri`` into its resource kind and identifier.

    Raises:
        InvalidParamsError: If no known scheme matches.

    """
    for kind in ResourceKind:
        if uri.startswith(kind.prefix):
            return kind, uri[len(kind.prefix) :]
    raise InvalidParamsError(f"Unknown resource scheme: {uri}")


class ResourceResolver:
    """Resolve typed resource URIs into tenant-scoped domain reads."""

    def __init__(self, store: EntityStore) -> None:
        """Create a resolver reading from ``store``."""
        self._store = store

    def templates(self) -> list[dict[str, str]]:
        """Return the advertised templates."""
        return [template.to_dict() for template in RESOURCE_TEMPLATES]

    async def fetch(self, session: Session, kind: ResourceKind, identifier: str) -> Record | None:
        """Fetch the aggregate behind one resource, or ``None`` if absent."""
        tenant_id = session.tenant_id
        if kind is ResourceKind.ISSUE:
            return await self._store.get_issue(
                tenant_id, identifier, comment_limit=RECENT_COMMENT_LIMIT
            )
        if kind is ResourceKind.PROJECT:
            return await self._store.get_project(tenant_id, identifier)
        if kind is ResourceKind.BOARD:
            return await self._store.get_board(tenant_id, identifier)
        if kind is ResourceKind.SPRINT:
            return await self._store.get_sprint(tenant_id, identifier)
        if kind is ResourceKind.USER:
            return await self._fetch_user(tenant_id, identifier)
        raise AssertionError(f"Unhandled resource kind {kind!r}")

    async def _fetch_user(self, tenant_id: str, user_id: str) -> Record | None:
        user = await self._store.get_user(user_id)
        if user is None:
            return None
        role = await self._store.get_membership_role(tenant_id, user_id)
        return {**user, "role": role}

    async def read(self, session: Session, uri: str) -> dict[str, Any]:
        """Return the ``resources/read`` result for ``uri``.

        Raises:
            InvalidParamsError: If the scheme is not recognized.
            ResourceNotFoundError: If the resource does not exist for the tenant.

        """
        kind, identifier = parse_uri(uri)
        content = await self.fetch(session, kind, identifier)
        if not content:
            raise ResourceNotFoundError(uri)
        return {
            "contents": [
                {"uri": uri, "mimeType": JSON_MIME_TYPE, "text": to_json_text(content)}
            ]
        }
