"""Session management for MCP clients."""

from __future__ import annotations

import dataclasses
import threading
import uuid
from collections.abc import Iterable

from ordolix_mcp.session import Capability, Session
from ordolix_mcp_server.records import utcnow


class UnknownSessionError(LookupError):
    """Raised when a session identifier is not registered."""

    def __init__(self, session_id: str) -> None:
        """Create the error for ``session_id``."""
        super().__init__(f"Unknown session_id '{session_id}'")
        self.session_id = session_id


class SessionManager:
    """In-memory session store mapping identifiers to session records."""

    def __init__(self) -> None:
        """Initialize the session manager with empty state."""
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create_session(
        self,
        tenant_id: str,
        client_name: str,
        permissions: Iterable[Capability | str],
    ) -> Session:
        """Register a new session and return it.

        Raises:
            ValueError: If a permission is not a known capability.

        """
        session = Session(
            session_id=str(uuid.uuid4()),
            tenant_id=tenant_id,
            client_name=client_name,
            permissions=frozenset(Capability(value) for value in permissions),
            last_active_at=utcnow(),
        )
        with self._lock:
            self._sessions[session.session_id] = session
        return session

    async def touch(self, session_id: str) -> None:
        """Refresh the last-active timestamp of a session."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise UnknownSessionError(session_id)
            self._sessions[session_id] = dataclasses.replace(
                session, last_active_at=utcnow()
            )

    def get(self, session_id: str) -> Session:
        """Retrieve the current record of a session."""
        with self._lock:
            if session_id not in self._sessions:
                raise UnknownSessionError(session_id)
            return self._sessions[session_id]

    def close(self, session_id: str) -> None:
        """Remove a session."""
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise UnknownSessionError(session_id)


session_manager = SessionManager()
