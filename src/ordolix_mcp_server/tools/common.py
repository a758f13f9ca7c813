"""Shared helpers for MCP tools."""

from __future__ import annotations

from typing import Any


def name_of(record: dict[str, Any] | None, default: str = "-") -> str:
    """Return the ``name`` of a nested summary, tolerating missing links."""
    if not record:
        return default
    return str(record.get("name") or default)


def split_labels(raw: str | None) -> list[str]:
    """Split a comma-separated label string, dropping empty entries."""
    if not raw:
        return []
    return [label.strip() for label in raw.split(",") if label.strip()]
