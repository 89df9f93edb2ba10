"""Portal configuration via pydantic-settings."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class PortalSettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///portal.db"
    echo_sql: bool = False
    app_title: str = "B2B Portal"
    log_level: str = "INFO"

    # Shopify Admin API
    shopify_api_version: str = "2025-01"
    shopify_timeout_seconds: float = 30.0

    # Two-tier role model; any Shopify role whose name contains "admin" maps to admin_role_id.
    admin_role_id: str = "1"
    admin_role_name: str = "Admin"
    member_role_id: str = "2"
    member_role_name: str = "Ordering only"
    # Contact role names defined on Shopify companies for location assignments.
    shopify_admin_role_name: str = "Location admin"
    shopify_member_role_name: str = "Ordering only"

    session_cache_enabled: bool = True

    model_config = {"env_prefix": "PORTAL_", "env_file": ".env", "extra": "ignore"}

    @property
    def default_roles(self) -> dict[str, str]:
        return {
            self.admin_role_id: self.admin_role_name,
            self.member_role_id: self.member_role_name,
        }


settings = PortalSettings()
