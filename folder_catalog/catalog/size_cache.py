# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Size Cache — Lazily recomputed folder size kept in directory metadata.

A folder's size is the sum of the content lengths of every file below it.
Scanning is expensive, so the result is stored on the folder together with
the time it was computed, and reused until it is older than ``max_age``.
Nothing else invalidates it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Optional

from folder_catalog.catalog.models import FolderMetadata
from folder_catalog.core.metrics import catalog_metrics
from folder_catalog.storage.base import HierarchicalStore

logger = logging.getLogger("catalog.size_cache")

BYTES_PER_TB = Decimal(10) ** 12
DEFAULT_MAX_AGE = timedelta(days=7)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def estimate_cost(size_bytes: Optional[int], cost_per_tb: Optional[Decimal]) -> Optional[Decimal]:
    """Storage cost of ``size_bytes``; None when either input is unknown."""
    if size_bytes is None or cost_per_tb is None:
        return None
    return Decimal(size_bytes) * cost_per_tb / BYTES_PER_TB


class SizeCache:
    """Reads, recomputes and stores the cached size of folders."""

    def __init__(
        self,
        store: HierarchicalStore,
        max_age: timedelta = DEFAULT_MAX_AGE,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._max_age = max_age
        self._clock = clock

    def is_stale(self, meta: FolderMetadata, now: datetime) -> bool:
        if meta.size_calculated_at is None:
            return True
        return now - meta.size_calculated_at > self._max_age

    async def compute_size(self, folder: str) -> int:
        """Full scan: sum of file lengths below ``folder``."""
        total = 0
        async for item in self._store.list_paths(folder, recursive=True, include_directories=False):
            if item.is_directory:
                continue
            total += item.content_length or 0
        return total

    async def get_or_refresh(self, folder: str) -> int:
        """Return the cached size of ``folder``, rescanning it first if stale."""
        props = await self._store.get_directory_properties(folder)
        meta = FolderMetadata.from_store(props.metadata)
        now = self._clock()

        if self.is_stale(meta, now):
            logger.info("Recomputing size of %s", folder, extra={"folder": folder})
            size = await self.compute_size(folder)
            meta.record_size(size, now)
            await self._store.set_directory_metadata(folder, meta.to_store())
            catalog_metrics.inc("size_recomputes")
            logger.info("Size of %s is %d bytes", folder, size, extra={"folder": folder})

        return meta.size_bytes
