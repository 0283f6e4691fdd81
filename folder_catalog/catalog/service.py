# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
FolderCatalog — Folder provisioning, tagging, sizing and access listing.

Every operation is a short sequence of store calls. Mutations report an
OperationResult; reads raise StoreError on failure.
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from datetime import timedelta
from decimal import Decimal
from typing import AsyncIterator, List, Optional

from folder_catalog.catalog.access import derive_user_access, grants_read_to
from folder_catalog.catalog.models import FolderDetail, FolderMetadata, OperationResult
from folder_catalog.catalog.size_cache import DEFAULT_MAX_AGE, SizeCache, estimate_cost
from folder_catalog.core.identity import normalize_principal
from folder_catalog.core.metrics import catalog_metrics
from folder_catalog.storage.base import AclEntry, HierarchicalStore
from folder_catalog.storage.errors import StoreError

logger = logging.getLogger("catalog.service")

HTTP_OK = 200
HTTP_CREATED = 201


class FolderCatalog:
    """
    Folder operations over a HierarchicalStore.

    Usage:
        catalog = FolderCatalog(store, cost_per_tb=Decimal("20.8"))
        async for detail in catalog.list_accessible("jane@contoso.com"):
            ...
    """

    def __init__(
        self,
        store: HierarchicalStore,
        cost_per_tb: Optional[Decimal] = None,
        size_cache: Optional[SizeCache] = None,
        size_max_age: timedelta = DEFAULT_MAX_AGE,
    ) -> None:
        self._store = store
        self._cost_per_tb = cost_per_tb
        self._size_cache = size_cache or SizeCache(store, max_age=size_max_age)

    @property
    def cost_per_tb(self) -> Optional[Decimal]:
        return self._cost_per_tb

    # ── Mutations ───────────────────────────────────────────────

    async def create_folder(self, name: str) -> OperationResult:
        logger.debug("Creating folder %s", name, extra={"folder": name})
        try:
            status = await self._store.create_directory(name)
        except StoreError as e:
            logger.warning("Create folder %s failed: %s", name, e, extra={"folder": name})
            return OperationResult.failure(e.message)
        if status != HTTP_CREATED:
            return OperationResult.failure(
                f"Error trying to create the new folder. Error {status}."
            )
        logger.info("Created folder %s", name, extra={"folder": name})
        return OperationResult.success()

    async def assign_owner_full_access(self, folder: str, owner: str) -> OperationResult:
        """
        Grant ``owner`` rwx on the folder, as both an access and a default
        entry, applied to everything already below it.
        """
        logger.debug("Assigning rwx on %s to %s", folder, owner, extra={"folder": folder})
        entries = [
            AclEntry.full_access(owner),
            AclEntry.full_access(owner, default_scope=True),
        ]
        try:
            status = await self._store.update_access_control_recursive(folder, entries)
        except StoreError as e:
            logger.warning("Assign owner on %s failed: %s", folder, e, extra={"folder": folder})
            return OperationResult.failure(e.message)
        if status != HTTP_OK:
            return OperationResult.failure(
                f"Error trying to assign the RWX permission to the folder. Error {status}."
            )
        return OperationResult.success()

    async def tag_metadata(
        self,
        folder: str,
        fund_code: Optional[str] = None,
        owner: Optional[str] = None,
    ) -> OperationResult:
        """Set or replace the fund code and owner tags; None leaves a tag as is."""
        try:
            props = await self._store.get_directory_properties(folder)
            meta = FolderMetadata.from_store(props.metadata)
            if fund_code is not None:
                meta.fund_code = fund_code
            if owner is not None:
                meta.owner = owner
            await self._store.set_directory_metadata(folder, meta.to_store())
        except StoreError as e:
            logger.warning("Tagging %s failed: %s", folder, e, extra={"folder": folder})
            return OperationResult.failure(e.message)
        return OperationResult.success()

    async def provision_folder(
        self,
        name: str,
        owner: Optional[str] = None,
        fund_code: Optional[str] = None,
    ) -> OperationResult:
        """Create a folder, hand it to its owner and tag it. Stops at the first failure."""
        result = await self.create_folder(name)
        if not result.ok:
            return result
        if owner:
            result = await self.assign_owner_full_access(name, owner)
            if not result.ok:
                return result
        if owner or fund_code:
            result = await self.tag_metadata(name, fund_code=fund_code, owner=owner)
        return result

    # ── Reads ───────────────────────────────────────────────────

    async def refresh_size(self, folder: str) -> int:
        return await self._size_cache.get_or_refresh(folder)

    async def get_folder_detail(self, folder: str) -> FolderDetail:
        acl = await self._store.get_access_control(folder, resolve_identities=True)
        return await self._build_detail(folder, acl)

    async def list_accessible(self, principal: Optional[str]) -> AsyncIterator[FolderDetail]:
        """
        Yield details of the top-level folders ``principal`` can read.

        One ACL fetch per top-level folder, plus a properties fetch for each
        match, issued only as the caller advances. The first store error
        ends the listing.
        """
        key = normalize_principal(principal)
        if key is None:
            return

        listing = self._store.list_paths(None, recursive=False, include_directories=True)
        async with aclosing(listing) as paths:
            async for item in paths:
                if not item.is_directory:
                    continue
                acl = await self._store.get_access_control(item.name, resolve_identities=True)
                if not grants_read_to(acl, key):
                    continue
                catalog_metrics.inc("folders_listed")
                yield await self._build_detail(item.name, acl)

    async def _build_detail(self, folder: str, acl: List[AclEntry]) -> FolderDetail:
        props = await self._store.get_directory_properties(folder)
        meta = FolderMetadata.from_store(props.metadata)
        return FolderDetail(
            name=folder,
            created_on=props.created_on,
            size=meta.size_bytes,
            cost=estimate_cost(meta.size_bytes, self._cost_per_tb),
            fund_code=meta.fund_code,
            owner=meta.owner,
            uri=self._store.directory_uri(folder),
            user_access=derive_user_access(acl),
        )
