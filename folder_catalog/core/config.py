# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Folder Catalog Configuration — Environment-driven settings.

All configuration is loaded from environment variables (or .env file).
Variable names match the ones the hosting platform already provisions
for the storage service principal.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class CatalogSettings(BaseSettings):
    """Service-wide configuration loaded from environment."""

    # --- Storage account (hierarchical namespace) ---
    STORAGE_ACCOUNT_URI: str = Field(
        default="",
        description="Data Lake endpoint, e.g. https://<account>.dfs.core.windows.net",
    )
    FILE_SYSTEM_NAME: str = Field(
        default="",
        description="File system (container) holding the top-level folders",
    )

    # --- Service principal ---
    TENANT_ID: str = Field(default="", description="Azure AD tenant id")
    APP_REGISTRATION_CLIENT_ID: str = Field(
        default="",
        description="Client id of the app registration used against the store",
    )
    CLIENT_SECRET: str = Field(
        default="",
        description="Client secret of the app registration (server-side only)",
    )

    # --- Cost reporting ---
    COST_PER_TB: Optional[Decimal] = Field(
        default=None,
        description="Storage cost per TB; unset disables cost reporting",
    )

    # --- Size cache ---
    SIZE_CACHE_MAX_AGE_DAYS: int = Field(
        default=7,
        description="Cached folder size is recomputed once older than this",
    )

    # --- Store client ---
    STORE_MAX_ATTEMPTS: int = Field(
        default=3,
        description="Max attempts for idempotent store calls on transient failures",
    )
    STORE_BACKOFF_BASE: float = Field(
        default=0.5,
        description="First retry delay in seconds (doubles per attempt)",
    )
    STORE_CONNECTION_TIMEOUT: int = Field(
        default=20,
        description="Connection timeout for store requests, seconds",
    )
    STORE_READ_TIMEOUT: int = Field(
        default=60,
        description="Read timeout for store requests, seconds",
    )

    # --- Platform ---
    LOG_LEVEL: str = Field(default="INFO")
    CATALOG_ENV: str = Field(
        default="dev",
        description="Environment: dev | prod",
    )

    @property
    def cost_enabled(self) -> bool:
        return self.COST_PER_TB is not None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
        "env_ignore_empty": True,
    }


_settings_singleton: CatalogSettings | None = None


def get_settings() -> CatalogSettings:
    """Return a cached CatalogSettings singleton."""
    global _settings_singleton
    if _settings_singleton is None:
        _settings_singleton = CatalogSettings()
    return _settings_singleton
