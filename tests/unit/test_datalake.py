# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""Unit tests for DataLakeStore — SDK calls mocked, no network."""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError, ServiceRequestError

from folder_catalog.core.metrics import catalog_metrics
from folder_catalog.resilience.retry import RetryManager, RetryPolicy
from folder_catalog.storage.base import AclEntry
from folder_catalog.storage.datalake import DataLakeStore, translate_error
from folder_catalog.storage.errors import FolderNotFound, TransportFailure, UnexpectedStatus


def _http_error(status):
    err = HttpResponseError(message=f"status {status}")
    err.status_code = status
    return err


def _hooked(status, value=None):
    """AsyncMock side effect that reports ``status`` through raw_response_hook."""
    async def side_effect(*args, **kwargs):
        hook = kwargs.get("raw_response_hook")
        if hook:
            hook(SimpleNamespace(http_response=SimpleNamespace(status_code=status)))
        return value
    return side_effect


@pytest.fixture
def dir_client():
    client = MagicMock()
    client.url = "https://acct.dfs.core.windows.net/data/alpha"
    return client


@pytest.fixture
def store(dir_client):
    fs = MagicMock()
    fs.get_directory_client.return_value = dir_client
    service = MagicMock()
    service.get_file_system_client.return_value = fs
    service.close = AsyncMock()
    return DataLakeStore(
        service, "data",
        retry=RetryManager(RetryPolicy(max_attempts=2, backoff_base=0.0)),
    )


class TestTranslateError:
    def test_not_found(self):
        err = translate_error(ResourceNotFoundError(message="gone"), "get_properties", "alpha")
        assert isinstance(err, FolderNotFound)
        assert err.path == "alpha"

    def test_server_busy_is_transient(self):
        err = translate_error(_http_error(503), "get_properties", "alpha")
        assert isinstance(err, TransportFailure)
        assert err.status_code == 503

    def test_forbidden_is_unexpected_status(self):
        err = translate_error(_http_error(403), "set_metadata", "alpha")
        assert isinstance(err, UnexpectedStatus)
        assert err.status_code == 403
        assert "set_metadata" in err.message

    def test_connection_error_is_transient(self):
        err = translate_error(ServiceRequestError("connection refused"), "list_paths", None)
        assert isinstance(err, TransportFailure)


class TestDataLakeStore:
    @pytest.mark.asyncio
    async def test_create_directory_reports_status(self, store, dir_client):
        dir_client.create_directory = AsyncMock(side_effect=_hooked(201, {}))
        assert await store.create_directory("alpha") == 201

    @pytest.mark.asyncio
    async def test_create_directory_not_retried(self, store, dir_client):
        dir_client.create_directory = AsyncMock(side_effect=ServiceRequestError("reset"))
        with pytest.raises(TransportFailure):
            await store.create_directory("alpha")
        assert dir_client.create_directory.await_count == 1

    @pytest.mark.asyncio
    async def test_get_directory_properties(self, store, dir_client):
        created = datetime(2026, 1, 2, tzinfo=timezone.utc)
        dir_client.get_directory_properties = AsyncMock(return_value=SimpleNamespace(
            creation_time=created, metadata={"hdi_isfolder": "true", "FundCode": "FC1"},
        ))
        props = await store.get_directory_properties("alpha")
        assert props.created_on == created
        assert props.metadata["FundCode"] == "FC1"
        assert catalog_metrics.get_counter("store_call:get_properties") == 1

    @pytest.mark.asyncio
    async def test_transient_failure_retried(self, store, dir_client):
        dir_client.get_directory_properties = AsyncMock(side_effect=[
            ServiceRequestError("reset"),
            SimpleNamespace(creation_time=None, metadata={}),
        ])
        props = await store.get_directory_properties("alpha")
        assert props.metadata == {}
        assert dir_client.get_directory_properties.await_count == 2
        assert catalog_metrics.get_counter("store_call:get_properties") == 2
        assert catalog_metrics.get_counter("store_error:get_properties") == 1

    @pytest.mark.asyncio
    async def test_missing_folder(self, store, dir_client):
        dir_client.get_directory_properties = AsyncMock(side_effect=ResourceNotFoundError(message="gone"))
        with pytest.raises(FolderNotFound):
            await store.get_directory_properties("alpha")
        assert dir_client.get_directory_properties.await_count == 1
        assert catalog_metrics.get_counter("store_error:get_properties") == 1
        assert catalog_metrics.snapshot()["histogram_store_latency:get_properties"]["count"] == 1

    @pytest.mark.asyncio
    async def test_set_metadata(self, store, dir_client):
        dir_client.set_metadata = AsyncMock(side_effect=_hooked(200, {}))
        assert await store.set_directory_metadata("alpha", {"Size": "1"}) == 200
        assert dir_client.set_metadata.await_args.args[0] == {"Size": "1"}

    @pytest.mark.asyncio
    async def test_get_access_control_parses_acl(self, store, dir_client):
        dir_client.get_access_control = AsyncMock(return_value={
            "acl": "user::rwx,user:jane@contoso.com:r-x,default:user:jane@contoso.com:rwx",
        })
        acl = await store.get_access_control("alpha")
        assert [e.entity_id for e in acl] == [None, "jane@contoso.com", "jane@contoso.com"]
        assert dir_client.get_access_control.await_args.kwargs["upn"] is True

    @pytest.mark.asyncio
    async def test_update_acl_recursive(self, store, dir_client):
        result = SimpleNamespace(counters=SimpleNamespace(failure_count=0))
        dir_client.update_access_control_recursive = AsyncMock(side_effect=_hooked(200, result))
        status = await store.update_access_control_recursive("alpha", [AclEntry.full_access("bob")])
        assert status == 200
        assert dir_client.update_access_control_recursive.await_args.kwargs["acl"] == "user:bob:rwx"

    @pytest.mark.asyncio
    async def test_update_acl_recursive_partial_failure(self, store, dir_client):
        result = SimpleNamespace(counters=SimpleNamespace(failure_count=2))
        dir_client.update_access_control_recursive = AsyncMock(side_effect=_hooked(200, result))
        with pytest.raises(UnexpectedStatus, match="2 path"):
            await store.update_access_control_recursive("alpha", [AclEntry.full_access("bob")])

    @pytest.mark.asyncio
    async def test_list_paths_filters_directories(self, store):
        async def paths():
            yield SimpleNamespace(name="alpha", is_directory=True, content_length=None)
            yield SimpleNamespace(name="alpha/a.bin", is_directory=False, content_length=10)

        store._fs.get_paths = MagicMock(return_value=paths())
        items = [p async for p in store.list_paths("alpha", recursive=True, include_directories=False)]
        assert [p.name for p in items] == ["alpha/a.bin"]
        assert items[0].content_length == 10
        assert store._fs.get_paths.call_args.kwargs == {"path": "alpha", "recursive": True}

    @pytest.mark.asyncio
    async def test_list_paths_translates_errors(self, store):
        async def paths():
            raise ServiceRequestError("connection refused")
            yield  # pragma: no cover

        store._fs.get_paths = MagicMock(return_value=paths())
        with pytest.raises(TransportFailure):
            [p async for p in store.list_paths(None, recursive=False)]

    def test_directory_uri(self, store):
        assert store.directory_uri("alpha").endswith("/data/alpha")

    @pytest.mark.asyncio
    async def test_close(self, store):
        await store.close()
        store._service.close.assert_awaited_once()
