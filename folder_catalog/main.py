# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Folder Catalog Application Entry Point.

Entry point: uvicorn folder_catalog.main:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI

from folder_catalog.api.errors import APIError, api_error_handler, store_error_handler
from folder_catalog.api.folders import router as folders_router
from folder_catalog.api.middleware import TraceMiddleware
from folder_catalog.api.observability import router as observability_router
from folder_catalog.catalog.service import FolderCatalog
from folder_catalog.core.config import CatalogSettings, get_settings
from folder_catalog.core.logging import setup_logging
from folder_catalog.storage.base import HierarchicalStore
from folder_catalog.storage.datalake import DataLakeStore
from folder_catalog.storage.errors import StoreError

logger = logging.getLogger("catalog.main")


def build_catalog(store: HierarchicalStore, settings: CatalogSettings) -> FolderCatalog:
    return FolderCatalog(
        store,
        cost_per_tb=settings.COST_PER_TB,
        size_max_age=timedelta(days=settings.SIZE_CACHE_MAX_AGE_DAYS),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the store client on startup unless one was injected."""
    settings: CatalogSettings = app.state.settings
    setup_logging(settings.LOG_LEVEL)

    owned_store: Optional[HierarchicalStore] = None
    if getattr(app.state, "catalog", None) is None:
        owned_store = DataLakeStore.from_settings(settings)
        app.state.catalog = build_catalog(owned_store, settings)

    logger.info(
        "[catalog] Ready — env=%s cost_reporting=%s",
        settings.CATALOG_ENV, "enabled" if settings.cost_enabled else "disabled",
    )
    yield

    if owned_store is not None:
        await owned_store.close()
    logger.info("[catalog] Shutdown complete")


def create_app(
    store: Optional[HierarchicalStore] = None,
    settings: Optional[CatalogSettings] = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    When ``store`` is given the catalog is wired immediately and the
    lifespan leaves it alone (tests, local runs against another store).
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Folder Catalog",
        description="Per-tenant folders on a hierarchical namespace store",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    if store is not None:
        app.state.catalog = build_catalog(store, settings)

    # ── Middleware ───────────────────────────────────────────
    app.add_middleware(TraceMiddleware)

    # ── Error Handlers ───────────────────────────────────────
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(StoreError, store_error_handler)

    # ── Routes ───────────────────────────────────────────────
    app.include_router(folders_router, prefix="/api")
    app.include_router(observability_router)
    return app


app = create_app()
