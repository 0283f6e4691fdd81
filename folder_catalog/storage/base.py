# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
HierarchicalStore — Abstract interface over a path-oriented object store.

The catalog only needs directories, per-path ACLs and per-path metadata.
Adapters (Azure Data Lake in production, an in-memory fake in tests)
implement this interface; every call is a network round-trip.

ACLs travel as ``AclEntry`` lists. ``format_acl`` / ``parse_acl`` convert
them to and from the POSIX short form used by Data Lake::

    user::rwx,user:jane@contoso.com:r-x,default:user:jane@contoso.com:rwx
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, Dict, List, Optional

USER = "user"
GROUP = "group"
MASK = "mask"
OTHER = "other"

DEFAULT_PREFIX = "default:"


@dataclass(frozen=True)
class AclEntry:
    """A single access rule; ``entity_id`` is None for the owning user/group entries."""

    principal_type: str
    entity_id: Optional[str] = None
    read: bool = False
    write: bool = False
    execute: bool = False
    default_scope: bool = False

    @classmethod
    def full_access(cls, entity_id: str, default_scope: bool = False) -> "AclEntry":
        return cls(USER, entity_id, True, True, True, default_scope)

    @property
    def permissions(self) -> str:
        return "".join((
            "r" if self.read else "-",
            "w" if self.write else "-",
            "x" if self.execute else "-",
        ))

    def to_acl_string(self) -> str:
        scope = DEFAULT_PREFIX if self.default_scope else ""
        return f"{scope}{self.principal_type}:{self.entity_id or ''}:{self.permissions}"

    @classmethod
    def from_acl_string(cls, text: str) -> "AclEntry":
        """Parse ``[default:]type:entity:perms``."""
        default_scope = text.startswith(DEFAULT_PREFIX)
        if default_scope:
            text = text[len(DEFAULT_PREFIX):]
        parts = text.split(":")
        if len(parts) != 3:
            raise ValueError(f"Malformed ACL entry: {text!r}")
        principal_type, entity_id, perms = parts
        return cls(
            principal_type=principal_type,
            entity_id=entity_id or None,
            read="r" in perms,
            write="w" in perms,
            execute="x" in perms,
            default_scope=default_scope,
        )


def parse_acl(acl: str) -> List[AclEntry]:
    """Parse a comma-separated ACL into entries, preserving order."""
    return [AclEntry.from_acl_string(item.strip()) for item in acl.split(",") if item.strip()]


def format_acl(entries: List[AclEntry]) -> str:
    return ",".join(e.to_acl_string() for e in entries)


@dataclass
class DirectoryProperties:
    """Properties of a directory as reported by the store."""

    created_on: Optional[datetime] = None
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class PathItem:
    """One entry of a path listing."""

    name: str
    is_directory: bool = False
    content_length: Optional[int] = None


class HierarchicalStore(ABC):
    """Directory, ACL and metadata operations the catalog depends on."""

    @abstractmethod
    async def create_directory(self, path: str) -> int:
        """Create a directory. Returns the store's status code (201 = created)."""
        ...

    @abstractmethod
    async def get_directory_properties(self, path: str) -> DirectoryProperties:
        ...

    @abstractmethod
    async def set_directory_metadata(self, path: str, metadata: Dict[str, str]) -> int:
        """Replace the directory's whole metadata map. Returns the status code."""
        ...

    @abstractmethod
    async def get_access_control(self, path: str, resolve_identities: bool = True) -> List[AclEntry]:
        """
        Return the ACL of ``path`` in the store's native order.

        With ``resolve_identities`` entity ids come back as user principal
        names instead of object ids.
        """
        ...

    @abstractmethod
    async def update_access_control_recursive(self, path: str, entries: List[AclEntry]) -> int:
        """Merge ``entries`` into the ACL of ``path`` and every descendant."""
        ...

    @abstractmethod
    def list_paths(
        self,
        path: Optional[str] = None,
        recursive: bool = True,
        include_directories: bool = True,
    ) -> AsyncIterator[PathItem]:
        """
        Lazily list paths under ``path`` (the store root when None).

        Implementations are async generators; nothing is fetched until
        the caller starts iterating.
        """
        ...

    @abstractmethod
    def directory_uri(self, path: str) -> str:
        ...

    async def close(self) -> None:
        """Release client resources."""
        return None
