# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Access Derivation — Who can see a folder, read from its root ACL.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from folder_catalog.core.identity import normalize_principal
from folder_catalog.storage.base import USER, AclEntry


def derive_user_access(acl: Iterable[AclEntry]) -> List[str]:
    """
    Identities with a user entry set directly on this folder.

    Default-scope entries only shape future children and are skipped.
    Order follows the ACL; duplicates are kept.
    """
    return [
        e.entity_id for e in acl
        if e.principal_type == USER and e.entity_id and not e.default_scope
    ]


def grants_read_to(acl: Iterable[AclEntry], principal_key: Optional[str]) -> bool:
    """
    True when some read-granting entry belongs to ``principal_key``.

    ``principal_key`` is an already normalized principal. Matching is by
    prefix so that ``jane_contoso.com`` also finds the guest-account form
    ``jane_contoso.com#ext#@tenant.onmicrosoft.com``; an identity that is a
    literal prefix of another one matches it too.
    """
    if not principal_key:
        return False
    for entry in acl:
        if not entry.entity_id or not entry.read:
            continue
        if normalize_principal(entry.entity_id).startswith(principal_key):
            return True
    return False
