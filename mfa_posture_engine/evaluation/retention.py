"""
Retention window resolver — picks how far back telemetry may be queried.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..licensing.posture import LicensePosture


class RetentionBound(str, Enum):
    TENANT = "Tenant"
    ACCOUNT = "Account"


@dataclass(frozen=True)
class RetentionDecision:
    effective_days: int
    bounded_by: RetentionBound

    def clamp(self, requested_days: int) -> int:
        """Days actually queryable for a caller asking for `requested_days`."""
        return max(0, min(requested_days, self.effective_days))

    def to_dict(self) -> dict:
        return {
            "effective_days": self.effective_days,
            "bounded_by": self.bounded_by.value,
        }


def resolve(tenant_posture: LicensePosture, account_posture: LicensePosture) -> RetentionDecision:
    """
    The wider of the two windows wins, so an account with a higher-tier add-on
    than the tenant baseline keeps its longer window. Ties are bounded by Tenant.
    """
    tenant_days = tenant_posture.max_retention_days
    account_days = account_posture.max_retention_days
    if account_days > tenant_days:
        return RetentionDecision(effective_days=account_days, bounded_by=RetentionBound.ACCOUNT)
    return RetentionDecision(effective_days=tenant_days, bounded_by=RetentionBound.TENANT)
