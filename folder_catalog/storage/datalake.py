# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Data Lake Store — HierarchicalStore backed by Azure Data Lake Storage Gen2.

Authenticates as the app registration (client secret) and operates on a
single file system. SDK exceptions are translated into the store error
taxonomy; idempotent calls are retried on transient failures.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, TypeVar

from azure.core.exceptions import AzureError, HttpResponseError, ResourceNotFoundError
from azure.identity.aio import ClientSecretCredential
from azure.storage.filedatalake.aio import DataLakeServiceClient

from folder_catalog.core.config import CatalogSettings
from folder_catalog.core.metrics import catalog_metrics
from folder_catalog.resilience.retry import RetryManager, RetryPolicy
from folder_catalog.storage.base import (
    AclEntry,
    DirectoryProperties,
    HierarchicalStore,
    PathItem,
    format_acl,
    parse_acl,
)
from folder_catalog.storage.errors import FolderNotFound, StoreError, TransportFailure, UnexpectedStatus

logger = logging.getLogger("catalog.datalake")

T = TypeVar("T")

# Server-side statuses worth another attempt.
TRANSIENT_STATUSES = {408, 429, 500, 502, 503, 504}


class _StatusCapture:
    """raw_response_hook that remembers the last HTTP status seen."""

    def __init__(self) -> None:
        self.status: Optional[int] = None

    def __call__(self, response: Any) -> None:
        self.status = response.http_response.status_code


def translate_error(error: AzureError, operation: str, path: Optional[str]) -> StoreError:
    """Map an Azure SDK exception onto the store error taxonomy."""
    if isinstance(error, ResourceNotFoundError):
        return FolderNotFound(path or "")
    if isinstance(error, HttpResponseError):
        status = error.status_code
        if status is None or status in TRANSIENT_STATUSES:
            return TransportFailure(error.message or str(error), status_code=status, path=path)
        return UnexpectedStatus(operation, status, path=path, detail=error.message)
    return TransportFailure(str(error), path=path)


class DataLakeStore(HierarchicalStore):
    """
    Azure Data Lake file system as a HierarchicalStore.

    Usage:
        store = DataLakeStore.from_settings(get_settings())
        props = await store.get_directory_properties("alpha")
    """

    def __init__(
        self,
        service_client: DataLakeServiceClient,
        file_system: str,
        retry: Optional[RetryManager] = None,
        credential: Optional[ClientSecretCredential] = None,
    ) -> None:
        self._service = service_client
        self._credential = credential
        self._fs = service_client.get_file_system_client(file_system)
        self._retry = retry or RetryManager()

    @classmethod
    def from_settings(cls, settings: CatalogSettings) -> "DataLakeStore":
        credential = ClientSecretCredential(
            settings.TENANT_ID,
            settings.APP_REGISTRATION_CLIENT_ID,
            settings.CLIENT_SECRET,
        )
        service = DataLakeServiceClient(
            settings.STORAGE_ACCOUNT_URI,
            credential=credential,
            connection_timeout=settings.STORE_CONNECTION_TIMEOUT,
            read_timeout=settings.STORE_READ_TIMEOUT,
        )
        retry = RetryManager(RetryPolicy(
            max_attempts=settings.STORE_MAX_ATTEMPTS,
            backoff_base=settings.STORE_BACKOFF_BASE,
        ))
        logger.info(
            "Data Lake store: %s/%s", settings.STORAGE_ACCOUNT_URI, settings.FILE_SYSTEM_NAME,
        )
        return cls(service, settings.FILE_SYSTEM_NAME, retry=retry, credential=credential)

    # ── Call plumbing ───────────────────────────────────────────

    async def _call(
        self,
        operation: str,
        path: Optional[str],
        call: Callable[[], Awaitable[T]],
        retry: bool = True,
    ) -> T:
        async def attempt() -> T:
            with catalog_metrics.track(operation):
                try:
                    return await call()
                except AzureError as e:
                    raise translate_error(e, operation, path) from e

        if not retry:
            return await attempt()
        return await self._retry.run(operation, attempt)

    # ── HierarchicalStore ───────────────────────────────────────

    async def create_directory(self, path: str) -> int:
        capture = _StatusCapture()
        client = self._fs.get_directory_client(path)
        # Not retried: a lost response would turn a retry into a silent overwrite.
        await self._call(
            "create_directory", path,
            lambda: client.create_directory(raw_response_hook=capture),
            retry=False,
        )
        return capture.status

    async def get_directory_properties(self, path: str) -> DirectoryProperties:
        client = self._fs.get_directory_client(path)
        props = await self._call("get_properties", path, client.get_directory_properties)
        return DirectoryProperties(
            created_on=props.creation_time,
            metadata=dict(props.metadata or {}),
        )

    async def set_directory_metadata(self, path: str, metadata: Dict[str, str]) -> int:
        capture = _StatusCapture()
        client = self._fs.get_directory_client(path)
        await self._call(
            "set_metadata", path,
            lambda: client.set_metadata(metadata, raw_response_hook=capture),
        )
        return capture.status

    async def get_access_control(self, path: str, resolve_identities: bool = True) -> List[AclEntry]:
        client = self._fs.get_directory_client(path)
        result = await self._call(
            "get_access_control", path,
            lambda: client.get_access_control(upn=resolve_identities),
        )
        return parse_acl(result.get("acl") or "")

    async def update_access_control_recursive(self, path: str, entries: List[AclEntry]) -> int:
        capture = _StatusCapture()
        client = self._fs.get_directory_client(path)
        result = await self._call(
            "update_acl_recursive", path,
            lambda: client.update_access_control_recursive(
                acl=format_acl(entries), raw_response_hook=capture,
            ),
        )
        failures = result.counters.failure_count if result.counters else 0
        if failures:
            raise UnexpectedStatus(
                "update_acl_recursive", capture.status, path=path,
                detail=f"{failures} path(s) failed",
            )
        return capture.status

    async def list_paths(
        self,
        path: Optional[str] = None,
        recursive: bool = True,
        include_directories: bool = True,
    ) -> AsyncIterator[PathItem]:
        catalog_metrics.inc("store_call:list_paths")
        try:
            async for item in self._fs.get_paths(path=path, recursive=recursive):
                is_directory = bool(item.is_directory)
                if is_directory and not include_directories:
                    continue
                yield PathItem(
                    name=item.name,
                    is_directory=is_directory,
                    content_length=item.content_length,
                )
        except AzureError as e:
            catalog_metrics.inc("store_error:list_paths")
            raise translate_error(e, "list_paths", path) from e

    def directory_uri(self, path: str) -> str:
        return self._fs.get_directory_client(path).url

    async def close(self) -> None:
        await self._service.close()
        if self._credential is not None:
            await self._credential.close()
