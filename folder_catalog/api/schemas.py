# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
API Request/Response Schemas — Pydantic models for the folder HTTP API.

Wire keys are camelCase; numbers and timestamps travel as strings and an
unknown value is null, never "0".
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from folder_catalog.catalog.models import FolderDetail


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Requests ──────────────────────────────────────────────────


class CreateFolderRequest(_CamelModel):
    """Request body for POST /api/folders."""
    name: str = Field(..., min_length=1, description="Top-level folder name")
    owner: Optional[str] = Field(None, description="Principal granted full access")
    fund_code: Optional[str] = Field(None, description="Cost allocation tag")


class AssignOwnerRequest(_CamelModel):
    """Request body for PUT /api/folders/{name}/owner."""
    owner: str = Field(..., min_length=1)


class TagMetadataRequest(_CamelModel):
    """Request body for PUT /api/folders/{name}/metadata."""
    fund_code: Optional[str] = None
    owner: Optional[str] = None


# ── Responses ─────────────────────────────────────────────────


class FolderDetailResponse(_CamelModel):
    name: str
    created_on: Optional[str] = None
    size: Optional[str] = None
    cost: Optional[str] = None
    fund_code: Optional[str] = None
    owner: Optional[str] = None
    uri: Optional[str] = None
    user_access: List[str] = Field(default_factory=list)

    @classmethod
    def from_detail(cls, detail: FolderDetail) -> "FolderDetailResponse":
        return cls.model_validate(detail.to_wire())


class FolderListResponse(BaseModel):
    folders: List[FolderDetailResponse]
    count: int


class FolderSizeResponse(_CamelModel):
    name: str
    size: str
    cost: Optional[str] = None
