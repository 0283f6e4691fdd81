# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
API Error Handling — Unified error structure.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from folder_catalog.storage.errors import FolderNotFound, StoreError


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
        trace_id: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.trace_id = trace_id or str(uuid.uuid4())
        super().__init__(message)


class FolderOperationError(APIError):
    """A folder mutation was rejected by the store."""

    def __init__(self, folder: str, operation: str, message: str, trace_id: str = None):
        super().__init__(
            code="FOLDER_OPERATION_FAILED",
            message=message,
            status_code=502,
            details={"folder": folder, "operation": operation},
            trace_id=trace_id,
        )


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", None) or str(uuid.uuid4())


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Global exception handler for APIError."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "code": exc.code,
            "message": exc.message,
            "trace_id": exc.trace_id,
            "details": exc.details,
        },
    )


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Store failures that escaped a read operation."""
    if isinstance(exc, FolderNotFound):
        status_code, code = 404, "FOLDER_NOT_FOUND"
    else:
        status_code, code = 502, "STORE_ERROR"
    return JSONResponse(
        status_code=status_code,
        content={
            "code": code,
            "message": exc.message,
            "trace_id": _trace_id(request),
            "details": {"path": exc.path, "store_status": exc.status_code},
        },
    )
