"""Runtime settings for the Ordolix MCP server."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ordolix_mcp.session import Capability

Transport = Literal["stdio", "http", "sse"]


class Settings(BaseSettings):
    """Settings read from ``ORDOLIX_MCP_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="ORDOLIX_MCP_", env_file=".env", extra="ignore"
    )

    server_name: str = "ordolix-mcp"
    server_version: str = "1.0.0"

    tenant_id: str = "default"
    client_name: str = "mcp-client"
    permissions: list[Capability] = Field(
        default_factory=lambda: [
            Capability.ISSUES_READ,
            Capability.COMMENTS_READ,
            Capability.BOARDS_READ,
            Capability.DASHBOARDS_READ,
            Capability.PROJECTS_READ,
        ]
    )
    strict_session_touch: bool = False

    log_level: str = "INFO"
    transport: Transport = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000
    path: str = "/mcp"
    seed_path: str | None = None
