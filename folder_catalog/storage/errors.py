# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Store Errors — Failure taxonomy for hierarchical store calls.

Adapters translate SDK exceptions into these so the catalog and the API
layer never depend on a particular storage SDK.
"""

from __future__ import annotations

from typing import Optional


class StoreError(Exception):
    """Base class for every store failure."""

    def __init__(self, message: str, status_code: Optional[int] = None, path: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.path = path
        super().__init__(message)


class TransportFailure(StoreError):
    """Store unreachable, or a transient server-side failure (5xx / 429)."""


class UnexpectedStatus(StoreError):
    """Call completed but returned a status outside the expected set."""

    def __init__(
        self,
        operation: str,
        status_code: Optional[int],
        path: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        self.operation = operation
        message = f"Unexpected status {status_code} from {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, status_code=status_code, path=path)


class FolderNotFound(StoreError):
    def __init__(self, path: str):
        super().__init__(f"Folder '{path}' not found", status_code=404, path=path)
