"""Entry point for the Ordolix MCP server."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from ordolix_mcp.server import MCPServer, ServerInfo
from ordolix_mcp.session import Capability
from ordolix_mcp_server.config import Settings
from ordolix_mcp_server.fastmcp_adapter import build_fastmcp_app
from ordolix_mcp_server.logging import setup_logging
from ordolix_mcp_server.resources import ResourceResolver
from ordolix_mcp_server.session_manager import SessionManager, session_manager
from ordolix_mcp_server.store import EntityStore, InMemoryEntityStore
from ordolix_mcp_server.tools import build_tools

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(description="Ordolix MCP server")
    parser.add_argument(
        "--catalog",
        action="store_true",
        help="Print the tool catalog and resource templates as JSON.",
    )
    parser.add_argument("--transport", choices=["stdio", "http", "sse"])
    parser.add_argument("--host")
    parser.add_argument("--port", type=int)
    parser.add_argument("--path")
    parser.add_argument("--tenant", dest="tenant_id", help="Organization to serve.")
    parser.add_argument("--client-name", dest="client_name")
    parser.add_argument(
        "--permission",
        dest="permissions",
        action="append",
        type=Capability,
        help="Capability granted to the session; repeat for several.",
    )
    parser.add_argument(
        "--seed", dest="seed_path", help="JSON fixture loaded into the store."
    )
    parser.add_argument("--log-level", dest="log_level")
    parser.add_argument(
        "--strict-session-touch",
        dest="strict_session_touch",
        action="store_const",
        const=True,
        help="Fail requests when the session touch fails.",
    )
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return ``settings`` updated with every CLI flag that was given."""
    overrides: dict[str, Any] = {
        name: value
        for name, value in vars(args).items()
        if name in Settings.model_fields and value is not None
    }
    return settings.model_copy(update=overrides)


def load_store(seed_path: str | None) -> InMemoryEntityStore:
    """Create the in-memory store, seeded from a JSON fixture when given."""
    if seed_path is None:
        return InMemoryEntityStore()
    fixture = json.loads(Path(seed_path).read_text(encoding="utf-8"))
    return InMemoryEntityStore.from_fixture(fixture)


def build_mcp_server(
    store: EntityStore, sessions: SessionManager, settings: Settings
) -> MCPServer:
    """Wire the dispatcher with the tool registry and resource resolver."""
    return MCPServer(
        tools=build_tools(store),
        resources=ResourceResolver(store),
        sessions=sessions,
        server_info=ServerInfo(
            name=settings.server_name, version=settings.server_version
        ),
        strict_session_touch=settings.strict_session_touch,
    )


def main(argv: list[str] | None = None) -> int:
    """Run the server, or print the catalog with ``--catalog``."""
    args = build_parser().parse_args(argv)
    settings = apply_overrides(Settings(), args)
    setup_logging(settings.log_level)

    try:
        store = load_store(settings.seed_path)
    except (OSError, ValueError) as error:
        print(f"Failed to load seed data: {error}", file=sys.stderr)
        return 2

    server = build_mcp_server(store, session_manager, settings)
    if args.catalog:
        catalog = {
            "tools": server.tool_catalog(),
            "resourceTemplates": ResourceResolver(store).templates(),
        }
        print(json.dumps(catalog, indent=2))
        return 0

    session = session_manager.create_session(
        settings.tenant_id, settings.client_name, settings.permissions
    )
    logger.info(
        "mcp_server_start",
        extra={
            "session_id": session.session_id,
            "args_data": {
                "transport": settings.transport,
                "tenant_id": settings.tenant_id,
            },
        },
    )
    app = build_fastmcp_app(server, session)
    try:
        if settings.transport == "stdio":
            app.run(transport="stdio")
        else:
            app.run(
                transport=settings.transport,
                host=settings.host,
                port=settings.port,
                path=settings.path,
            )
    finally:
        last_active_at = session_manager.get(session.session_id).last_active_at
        session_manager.close(session.session_id)
        logger.info(
            "mcp_server_stop",
            extra={
                "session_id": session.session_id,
                "args_data": {"last_active_at": last_active_at.isoformat()},
            },
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
