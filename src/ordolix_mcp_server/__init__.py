"""Model Context Protocol server for the Ordolix issue tracker."""

from ordolix_mcp_server.resources import RESOURCE_TEMPLATES, ResourceResolver
from ordolix_mcp_server.session_manager import SessionManager, session_manager
from ordolix_mcp_server.store import EntityStore, InMemoryEntityStore
from ordolix_mcp_server.tools import ToolName, build_tools

__all__ = [
    "RESOURCE_TEMPLATES",
    "EntityStore",
    "InMemoryEntityStore",
    "ResourceResolver",
    "SessionManager",
    "ToolName",
    "build_tools",
    "session_manager",
]
