"""Tests for the in-memory session manager."""

from __future__ import annotations

import pytest

from ordolix_mcp.session import Capability
from ordolix_mcp_server.session_manager import SessionManager, UnknownSessionError


def test_create_session_normalizes_permissions() -> None:
    """Permission strings are parsed into capabilities."""
    manager = SessionManager()

    session = manager.create_session("org-1", "client", ["issues:read", Capability.BOARDS_READ])

    assert session.tenant_id == "org-1"
    assert session.client_name == "client"
    assert session.permissions == frozenset({Capability.ISSUES_READ, Capability.BOARDS_READ})
    assert session.has_permission(Capability.ISSUES_READ)
    assert not session.has_permission(Capability.ISSUES_WRITE)
    assert manager.get(session.session_id) == session


def test_create_session_rejects_unknown_permission() -> None:
    """Unknown capability names are refused."""
    with pytest.raises(ValueError):
        SessionManager().create_session("org-1", "client", ["issues:delete"])


def test_sessions_get_distinct_ids() -> None:
    """Each session receives its own identifier."""
    manager = SessionManager()

    first = manager.create_session("org-1", "a", [])
    second = manager.create_session("org-1", "b", [])

    assert first.session_id != second.session_id


@pytest.mark.anyio()
async def test_touch_refreshes_last_active() -> None:
    """touch stores a newer last-active timestamp and keeps the rest."""
    manager = SessionManager()
    session = manager.create_session("org-1", "client", ["issues:read"])

    await manager.touch(session.session_id)

    touched = manager.get(session.session_id)
    assert touched.last_active_at >= session.last_active_at
    assert touched.permissions == session.permissions


@pytest.mark.anyio()
async def test_touch_unknown_session() -> None:
    """Touching an unregistered session raises."""
    with pytest.raises(UnknownSessionError, match="Unknown session_id 'missing'"):
        await SessionManager().touch("missing")


def test_close_session() -> None:
    """Closed sessions can no longer be retrieved or closed again."""
    manager = SessionManager()
    session = manager.create_session("org-1", "client", [])

    manager.close(session.session_id)

    with pytest.raises(UnknownSessionError):
        manager.get(session.session_id)
    with pytest.raises(UnknownSessionError):
        manager.close(session.session_id)
