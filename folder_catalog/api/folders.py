# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Folder API — Provision, tag, size and list folders.
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from folder_catalog.api.deps import get_catalog, get_current_principal
from folder_catalog.api.errors import FolderOperationError
from folder_catalog.api.schemas import (
    AssignOwnerRequest,
    CreateFolderRequest,
    FolderDetailResponse,
    FolderListResponse,
    FolderSizeResponse,
    TagMetadataRequest,
)
from folder_catalog.catalog.models import OperationResult, format_cost
from folder_catalog.catalog.service import FolderCatalog
from folder_catalog.catalog.size_cache import estimate_cost
from folder_catalog.core.identity import Principal

logger = logging.getLogger("catalog.api.folders")

router = APIRouter(prefix="/folders", tags=["folders"])


def _raise_on_failure(request: Request, folder: str, operation: str, result: OperationResult) -> None:
    if not result.ok:
        raise FolderOperationError(
            folder, operation, result.error or "Folder operation failed",
            trace_id=getattr(request.state, "trace_id", None),
        )


@router.get("", response_model=FolderListResponse)
async def list_folders(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    principal: Principal = Depends(get_current_principal),
    catalog: FolderCatalog = Depends(get_catalog),
):
    """Folders the caller can read. Stops scanning once ``limit`` matches are found."""
    folders = []
    async with aclosing(catalog.list_accessible(principal.name)) as listing:
        async for detail in listing:
            folders.append(FolderDetailResponse.from_detail(detail))
            if limit is not None and len(folders) >= limit:
                break
    logger.info(
        "Listed %d folders", len(folders), extra={"principal": principal.name},
    )
    return FolderListResponse(folders=folders, count=len(folders))


@router.post("", response_model=FolderDetailResponse, status_code=201)
async def create_folder(
    body: CreateFolderRequest,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    catalog: FolderCatalog = Depends(get_catalog),
):
    """Create a folder, grant its owner full access and tag it."""
    logger.info(
        "Provisioning folder %s", body.name,
        extra={"principal": principal.name, "folder": body.name},
    )
    result = await catalog.provision_folder(body.name, owner=body.owner, fund_code=body.fund_code)
    _raise_on_failure(request, body.name, "provision", result)
    return FolderDetailResponse.from_detail(await catalog.get_folder_detail(body.name))


@router.get("/{name}", response_model=FolderDetailResponse)
async def get_folder(
    name: str,
    principal: Principal = Depends(get_current_principal),
    catalog: FolderCatalog = Depends(get_catalog),
):
    return FolderDetailResponse.from_detail(await catalog.get_folder_detail(name))


@router.put("/{name}/owner", response_model=FolderDetailResponse)
async def assign_owner(
    name: str,
    body: AssignOwnerRequest,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    catalog: FolderCatalog = Depends(get_catalog),
):
    result = await catalog.assign_owner_full_access(name, body.owner)
    _raise_on_failure(request, name, "assign_owner", result)
    return FolderDetailResponse.from_detail(await catalog.get_folder_detail(name))


@router.put("/{name}/metadata", response_model=FolderDetailResponse)
async def tag_metadata(
    name: str,
    body: TagMetadataRequest,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    catalog: FolderCatalog = Depends(get_catalog),
):
    result = await catalog.tag_metadata(name, fund_code=body.fund_code, owner=body.owner)
    _raise_on_failure(request, name, "tag_metadata", result)
    return FolderDetailResponse.from_detail(await catalog.get_folder_detail(name))


@router.post("/{name}/size", response_model=FolderSizeResponse)
async def refresh_size(
    name: str,
    principal: Principal = Depends(get_current_principal),
    catalog: FolderCatalog = Depends(get_catalog),
):
    """Return the folder size, rescanning when the cached value is over a week old."""
    size = await catalog.refresh_size(name)
    cost = estimate_cost(size, catalog.cost_per_tb)
    return FolderSizeResponse(
        name=name,
        size=str(size),
        cost=format_cost(cost),
    )
