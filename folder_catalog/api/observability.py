# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Observability API — Metrics and health check.
"""

from __future__ import annotations

from fastapi import APIRouter, Request

from folder_catalog.core.metrics import catalog_metrics

router = APIRouter(tags=["observability"])


@router.get("/health")
async def health_check(request: Request):
    """Health check with catalog wiring status."""
    settings = getattr(request.app.state, "settings", None)
    return {
        "status": "ok",
        "version": "0.1.0",
        "catalog": "ready" if getattr(request.app.state, "catalog", None) else "not_configured",
        "cost_reporting": "enabled" if settings and settings.cost_enabled else "disabled",
        "metrics": catalog_metrics.snapshot(),
    }


@router.get("/api/metrics")
async def get_metrics():
    """Return current catalog metrics."""
    return catalog_metrics.snapshot()
