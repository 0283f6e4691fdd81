# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
API Middleware — Request tracing and access log.

Every response carries an ``X-Trace-Id`` (echoed from the request or
freshly minted). Each request is logged once with its caller and counted
by status class in the catalog metrics.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from folder_catalog.core.metrics import catalog_metrics

logger = logging.getLogger("catalog.api")

TRACE_HEADER = "X-Trace-Id"
PRINCIPAL_HEADERS = ("X-MS-CLIENT-PRINCIPAL-NAME", "X-User-Principal")


def _caller(request: Request) -> Optional[str]:
    for header in PRINCIPAL_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return None


class TraceMiddleware(BaseHTTPMiddleware):
    """Propagates the trace id and writes one access-log line per request."""

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get(TRACE_HEADER) or uuid.uuid4().hex
        request.state.trace_id = trace_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers[TRACE_HEADER] = trace_id
        catalog_metrics.inc(f"http_responses:{response.status_code // 100}xx")
        catalog_metrics.observe("http_latency", elapsed_ms)
        logger.info(
            "%s %s -> %d (%.0fms)",
            request.method, request.url.path, response.status_code, elapsed_ms,
            extra={"trace_id": trace_id, "principal": _caller(request)},
        )
        return response
