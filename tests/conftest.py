# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Shared test fixtures — an in-memory HierarchicalStore and a fixed clock.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import AsyncIterator, Dict, List, Optional

import pytest

from folder_catalog.core.metrics import catalog_metrics
from folder_catalog.storage.base import (
    GROUP,
    OTHER,
    USER,
    AclEntry,
    DirectoryProperties,
    HierarchicalStore,
    PathItem,
)
from folder_catalog.storage.errors import FolderNotFound

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# ── Fake store ────────────────────────────────────────────────


class FakeHierarchicalStore(HierarchicalStore):
    """
    In-memory store keyed by path.

    Directories get the store's read-only marker in their metadata and the
    usual owning-user/group/other ACL entries. Every call is logged in
    ``calls`` as ``(operation, path)``.
    """

    BASE_URI = "https://fake.dfs.core.windows.net/data"

    def __init__(self):
        self.dirs: Dict[str, DirectoryProperties] = {}
        self.files: Dict[str, int | None] = {}
        self.acls: Dict[str, List[AclEntry]] = {}
        self.calls: List[tuple] = []
        self.create_status = 201
        self.acl_status = 200
        self.fail_on: Dict[str, Exception] = {}
        self.open_listings = 0

    # ── Test setup helpers ──

    def add_dir(self, path: str, metadata: Optional[Dict[str, str]] = None, acl: Optional[List[AclEntry]] = None):
        self.dirs[path] = DirectoryProperties(
            created_on=NOW,
            metadata={"hdi_isfolder": "true", **(metadata or {})},
        )
        self.acls[path] = list(acl) if acl is not None else [
            AclEntry(USER, None, True, True, True),
            AclEntry(GROUP, None, True, False, True),
            AclEntry(OTHER, None),
        ]

    def add_file(self, path: str, length: Optional[int]):
        self.files[path] = length

    def _record(self, op: str, path: Optional[str]):
        self.calls.append((op, path))
        if op in self.fail_on:
            raise self.fail_on[op]

    def _require(self, path: str):
        if path not in self.dirs:
            raise FolderNotFound(path)

    def ops(self, op: str) -> List[Optional[str]]:
        return [p for o, p in self.calls if o == op]

    # ── HierarchicalStore ──

    async def create_directory(self, path: str) -> int:
        self._record("create_directory", path)
        if self.create_status == 201:
            self.add_dir(path)
        return self.create_status

    async def get_directory_properties(self, path: str) -> DirectoryProperties:
        self._record("get_properties", path)
        self._require(path)
        props = self.dirs[path]
        return DirectoryProperties(created_on=props.created_on, metadata=dict(props.metadata))

    async def set_directory_metadata(self, path: str, metadata: Dict[str, str]) -> int:
        self._record("set_metadata", path)
        self._require(path)
        if any(k.lower() == "hdi_isfolder" for k in metadata):
            raise AssertionError("read-only marker must not be written back")
        self.dirs[path].metadata = {"hdi_isfolder": "true", **metadata}
        return 200

    async def get_access_control(self, path: str, resolve_identities: bool = True) -> List[AclEntry]:
        self._record("get_access_control", path)
        self._require(path)
        return list(self.acls[path])

    async def update_access_control_recursive(self, path: str, entries: List[AclEntry]) -> int:
        self._record("update_acl_recursive", path)
        self._require(path)
        targets = [path] + [d for d in self.dirs if d.startswith(path + "/")]
        for target in targets:
            acl = self.acls[target]
            for entry in entries:
                slot = next(
                    (i for i, e in enumerate(acl)
                     if (e.principal_type, e.entity_id, e.default_scope)
                     == (entry.principal_type, entry.entity_id, entry.default_scope)),
                    None,
                )
                if slot is None:
                    acl.append(entry)
                else:
                    acl[slot] = entry
        return self.acl_status

    async def list_paths(
        self,
        path: Optional[str] = None,
        recursive: bool = True,
        include_directories: bool = True,
    ) -> AsyncIterator[PathItem]:
        self._record("list_paths", path)
        prefix = f"{path}/" if path else ""
        entries = [(d, True, None) for d in self.dirs] + [(f, False, n) for f, n in self.files.items()]
        self.open_listings += 1
        try:
            for name, is_dir, length in entries:
                if not name.startswith(prefix):
                    continue
                rest = name[len(prefix):]
                if not recursive and "/" in rest:
                    continue
                if is_dir and not include_directories:
                    continue
                yield PathItem(name=name, is_directory=is_dir, content_length=length)
        finally:
            self.open_listings -= 1

    def directory_uri(self, path: str) -> str:
        return f"{self.BASE_URI}/{path}"


# ── Fixtures ──────────────────────────────────────────────────


@pytest.fixture
def fake_store() -> FakeHierarchicalStore:
    return FakeHierarchicalStore()


@pytest.fixture
def fixed_now() -> datetime:
    return NOW


@pytest.fixture(autouse=True)
def reset_metrics():
    catalog_metrics.reset()
    yield
