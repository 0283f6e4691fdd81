# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Identity — Principal name normalization and request-scoped caller identity.

Guest accounts show up in folder ACLs as
``jane_contoso.com#ext#@tenant.onmicrosoft.com`` while the hosting platform
reports the caller as ``Jane@Contoso.com``. Both are compared in a
normalized form: lowercased, with every ``@`` replaced by ``_``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


def normalize_principal(principal: Optional[str]) -> Optional[str]:
    """
    Build the comparison key for a principal name.

    Examples:
        normalize_principal("Jane@Contoso.com") -> "jane_contoso.com"
        normalize_principal("") -> None
    """
    if not principal:
        return None
    return principal.replace("@", "_").lower()


@dataclass
class Principal:
    """Caller identity forwarded by the hosting platform."""

    name: str
    key: Optional[str] = field(init=False)

    def __post_init__(self):
        if not self.name:
            raise ValueError("principal name must not be empty")
        self.key = normalize_principal(self.name)

    def __repr__(self) -> str:
        return f"Principal(name={self.name!r})"
