"""
Evaluation inputs — the upstream signals for one fetch cycle, plus the
availability bookkeeping that keeps "no signal" distinct from "signal says no".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..licensing.posture import SkuEntitlement
from ..policy.rules import AccessRule, AccountIdentity


class SignalSource(str, Enum):
    TENANT_DEFAULT = "tenant_default"
    ACCESS_RULES = "access_rules"
    REGISTERED_METHODS = "registered_methods"
    GROUP_MEMBERSHIP = "group_membership"
    ROLE_MEMBERSHIP = "role_membership"
    TENANT_ENTITLEMENTS = "tenant_entitlements"
    ACCOUNT_ENTITLEMENTS = "account_entitlements"


# Signals that feed the MFA verdict; any of them missing means Indeterminate
MFA_SIGNALS = frozenset({
    SignalSource.TENANT_DEFAULT,
    SignalSource.ACCESS_RULES,
    SignalSource.REGISTERED_METHODS,
    SignalSource.GROUP_MEMBERSHIP,
    SignalSource.ROLE_MEMBERSHIP,
})


class SourceUnavailable(Exception):
    """Raised by a fetcher when an upstream signal could not be retrieved."""
    def __init__(self, source: SignalSource, message: str = ""):
        self.source = source
        super().__init__(f"{source.value} unavailable" + (f": {message}" if message else ""))


class StrongAuthMethod(str, Enum):
    """Non-password factor registered to an account. Registered is not enforced."""
    AUTHENTICATOR = "Authenticator"
    SECURITY_KEY = "SecurityKey"
    PHONE = "Phone"
    WINDOWS_HELLO = "WindowsHello"
    SOFTWARE_OATH = "SoftwareOath"
    HARDWARE_OATH = "HardwareOath"
    PLATFORM_CREDENTIAL = "PlatformCredential"


@dataclass(frozen=True)
class TenantSignals:
    """Tenant-wide inputs. None on any field means that fetch failed."""
    tenant_default_enforced: Optional[bool]
    rules: Optional[tuple[AccessRule, ...]]
    entitlements: Optional[tuple[SkuEntitlement, ...]]
    display_name: str = ""

    @property
    def unavailable(self) -> frozenset[SignalSource]:
        missing = set()
        if self.tenant_default_enforced is None:
            missing.add(SignalSource.TENANT_DEFAULT)
        if self.rules is None:
            missing.add(SignalSource.ACCESS_RULES)
        if self.entitlements is None:
            missing.add(SignalSource.TENANT_ENTITLEMENTS)
        return frozenset(missing)


@dataclass(frozen=True)
class AccountSignals:
    """Per-account inputs. None or unresolved groups/roles mean that fetch failed."""
    account: AccountIdentity
    registered_methods: Optional[frozenset] = frozenset()
    entitlements: Optional[tuple[SkuEntitlement, ...]] = ()
    group_ids_resolved: bool = True
    role_ids_resolved: bool = True
    extra_unavailable: frozenset[SignalSource] = field(default_factory=frozenset)
    errors: tuple[str, ...] = ()

    @property
    def unavailable(self) -> frozenset[SignalSource]:
        missing = set(self.extra_unavailable)
        if self.registered_methods is None:
            missing.add(SignalSource.REGISTERED_METHODS)
        if self.entitlements is None:
            missing.add(SignalSource.ACCOUNT_ENTITLEMENTS)
        if not self.group_ids_resolved:
            missing.add(SignalSource.GROUP_MEMBERSHIP)
        if not self.role_ids_resolved:
            missing.add(SignalSource.ROLE_MEMBERSHIP)
        return frozenset(missing)


def ordered_signals(signals) -> tuple[SignalSource, ...]:
    """Stable ordering (declaration order) for reporting."""
    present = set(signals)
    return tuple(s for s in SignalSource if s in present)
