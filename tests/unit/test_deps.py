# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""Unit tests for API dependencies (principal header parsing)."""

import pytest
from fastapi import HTTPException

from folder_catalog.api.deps import get_current_principal


class TestGetCurrentPrincipal:
    @pytest.mark.asyncio
    async def test_platform_header(self):
        p = await get_current_principal(
            x_ms_client_principal_name="Jane@Contoso.com",
            x_user_principal=None,
        )
        assert p.name == "Jane@Contoso.com"
        assert p.key == "jane_contoso.com"

    @pytest.mark.asyncio
    async def test_fallback_header(self):
        p = await get_current_principal(
            x_ms_client_principal_name=None,
            x_user_principal="bob@x.com",
        )
        assert p.name == "bob@x.com"

    @pytest.mark.asyncio
    async def test_platform_header_takes_priority(self):
        p = await get_current_principal(
            x_ms_client_principal_name="jane@contoso.com",
            x_user_principal="bob@x.com",
        )
        assert p.name == "jane@contoso.com"

    @pytest.mark.asyncio
    async def test_missing_principal_raises(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_principal(
                x_ms_client_principal_name=None,
                x_user_principal=None,
            )
        assert exc_info.value.status_code == 401
