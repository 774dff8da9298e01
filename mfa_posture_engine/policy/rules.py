"""
Access rule and account identity models used by the applicability matcher.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..config import ALL_TARGET


@dataclass(frozen=True)
class AccountIdentity:
    """Minimal identity for rule matching. group_ids must already be resolved."""
    id: str
    group_ids: frozenset[str] = frozenset()
    role_ids: frozenset[str] = frozenset()
    display_name: str = ""


@dataclass(frozen=True)
class AccessRule:
    """
    A conditional access rule reduced to its user scoping and whether its
    grant controls mandate strong authentication.
    """
    id: str
    display_name: str = ""
    enabled: bool = True
    include_account_ids: frozenset[str] = frozenset()
    exclude_account_ids: frozenset[str] = frozenset()
    include_group_ids: frozenset[str] = frozenset()
    requires_strong_auth: bool = False
    exclude_group_ids: frozenset[str] = frozenset()
    include_role_ids: frozenset[str] = frozenset()
    exclude_role_ids: frozenset[str] = frozenset()

    @property
    def targets_all(self) -> bool:
        return ALL_TARGET in self.include_account_ids

    @property
    def is_valid(self) -> bool:
        """False when the rule names no include target at all; such a rule never applies."""
        return bool(self.include_account_ids or self.include_group_ids or self.include_role_ids)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "enabled": self.enabled,
            "requires_strong_auth": self.requires_strong_auth,
            "include_account_ids": sorted(self.include_account_ids),
            "exclude_account_ids": sorted(self.exclude_account_ids),
            "include_group_ids": sorted(self.include_group_ids),
            "exclude_group_ids": sorted(self.exclude_group_ids),
            "include_role_ids": sorted(self.include_role_ids),
            "exclude_role_ids": sorted(self.exclude_role_ids),
        }
