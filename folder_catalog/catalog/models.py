# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Catalog Models — Typed folder metadata and folder details.

The store keeps folder tags and the size cache as plain strings in the
directory's metadata map. ``FolderMetadata`` is the only place that reads
or writes that map, always with set-or-replace semantics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

logger = logging.getLogger("catalog.models")

FUND_CODE_KEY = "FundCode"
OWNER_KEY = "Owner"
SIZE_KEY = "Size"
SIZE_CALC_DATE_KEY = "SizeCalcDate"

# Read-only marker the store adds to every directory; it must never be written back.
FOLDER_MARKER_KEY = "hdi_isfolder"

_KNOWN_KEYS = {k.lower() for k in (FUND_CODE_KEY, OWNER_KEY, SIZE_KEY, SIZE_CALC_DATE_KEY)}


def _lookup(metadata: Dict[str, str], key: str) -> Optional[str]:
    # Metadata keys are case-insensitive on the store side.
    wanted = key.lower()
    for k, v in metadata.items():
        if k.lower() == wanted:
            return v
    return None


# Formats the .NET service wrote with DateTime.ToString() (invariant and en-US cultures).
_LEGACY_TIMESTAMP_FORMATS = ("%m/%d/%Y %H:%M:%S", "%m/%d/%Y %I:%M:%S %p")


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        parsed = _parse_legacy_timestamp(value)
        if parsed is None:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_legacy_timestamp(value: str) -> Optional[datetime]:
    for fmt in _LEGACY_TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt)
        except ValueError:
            continue
    return None


def format_cost(cost: Optional[Decimal]) -> Optional[str]:
    """Plain decimal string, never exponent notation."""
    if cost is None:
        return None
    return format(cost, "f")


def _parse_size(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


@dataclass
class FolderMetadata:
    """Typed view of a folder's metadata map."""

    fund_code: Optional[str] = None
    owner: Optional[str] = None
    size_bytes: Optional[int] = None
    size_calculated_at: Optional[datetime] = None
    extra: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_store(cls, metadata: Dict[str, str]) -> "FolderMetadata":
        size_bytes = _parse_size(_lookup(metadata, SIZE_KEY))
        calculated_at = _parse_timestamp(_lookup(metadata, SIZE_CALC_DATE_KEY))
        if (size_bytes is None) != (calculated_at is None):
            # Half a cache entry is no cache entry.
            logger.warning(
                "Ignoring incomplete size cache: size=%r calculated_at=%r",
                _lookup(metadata, SIZE_KEY), _lookup(metadata, SIZE_CALC_DATE_KEY),
            )
            size_bytes, calculated_at = None, None
        extra = {
            k: v for k, v in metadata.items()
            if k.lower() not in _KNOWN_KEYS and k.lower() != FOLDER_MARKER_KEY
        }
        return cls(
            fund_code=_lookup(metadata, FUND_CODE_KEY),
            owner=_lookup(metadata, OWNER_KEY),
            size_bytes=size_bytes,
            size_calculated_at=calculated_at,
            extra=extra,
        )

    def to_store(self) -> Dict[str, str]:
        """Serialize back to a metadata map, without the read-only marker."""
        out = dict(self.extra)
        if self.fund_code is not None:
            out[FUND_CODE_KEY] = self.fund_code
        if self.owner is not None:
            out[OWNER_KEY] = self.owner
        if self.size_bytes is not None and self.size_calculated_at is not None:
            out[SIZE_KEY] = str(self.size_bytes)
            out[SIZE_CALC_DATE_KEY] = self.size_calculated_at.astimezone(timezone.utc).isoformat()
        return out

    def record_size(self, size_bytes: int, calculated_at: datetime) -> None:
        self.size_bytes = size_bytes
        self.size_calculated_at = calculated_at


@dataclass
class FolderDetail:
    """Everything the catalog reports about one folder."""

    name: str
    created_on: Optional[datetime] = None
    size: Optional[int] = None
    cost: Optional[Decimal] = None
    fund_code: Optional[str] = None
    owner: Optional[str] = None
    uri: Optional[str] = None
    user_access: List[str] = field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        """Wire form: numbers and times as strings, absent values as None."""
        return {
            "name": self.name,
            "createdOn": self.created_on.isoformat() if self.created_on else None,
            "size": str(self.size) if self.size is not None else None,
            "cost": format_cost(self.cost),
            "fundCode": self.fund_code,
            "owner": self.owner,
            "uri": self.uri,
            "userAccess": list(self.user_access),
        }


@dataclass
class OperationResult:
    """Outcome of a folder mutation."""

    ok: bool
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "OperationResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> "OperationResult":
        return cls(ok=False, error=error)
