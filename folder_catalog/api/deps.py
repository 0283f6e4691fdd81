# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
API Dependencies — FastAPI dependency injection.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, Request

from folder_catalog.catalog.service import FolderCatalog
from folder_catalog.core.identity import Principal


async def get_current_principal(
    x_ms_client_principal_name: Optional[str] = Header(None, alias="X-MS-CLIENT-PRINCIPAL-NAME"),
    x_user_principal: Optional[str] = Header(None, alias="X-User-Principal"),
) -> Principal:
    """
    Caller identity as forwarded by the hosting platform.

    Headers:
      - X-MS-CLIENT-PRINCIPAL-NAME: set by the platform's built-in auth
      - X-User-Principal: fallback for local runs behind a plain proxy

    Authentication itself happens upstream; this only reads the result.
    """
    name = x_ms_client_principal_name or x_user_principal
    if not name:
        raise HTTPException(status_code=401, detail="Missing user principal")
    return Principal(name=name)


def get_catalog(request: Request) -> FolderCatalog:
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise HTTPException(status_code=503, detail="Folder catalog not initialized")
    return catalog
