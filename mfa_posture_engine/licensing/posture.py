"""
License posture calculator — Folds SKU entitlements to a single summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..config import MIN_RETENTION_DAYS
from .catalog import DEFAULT_CATALOG, LicenseCatalog, LicenseTier


@dataclass(frozen=True)
class SkuEntitlement:
    """One licensed SKU as reported by the directory (tenant-wide or per account)."""
    sku_id: str
    consumed_units: int = 0
    enabled: bool = True


@dataclass(frozen=True)
class LicensePosture:
    """Highest entitlement tier and widest retention window over a set of SKUs."""
    highest_tier: LicenseTier = LicenseTier.BASIC
    max_retention_days: int = MIN_RETENTION_DAYS
    counts: tuple[tuple[LicenseTier, int], ...] = ()

    def count(self, tier: LicenseTier) -> int:
        for t, n in self.counts:
            if t == tier:
                return n
        return 0

    def to_dict(self) -> dict:
        return {
            "highest_tier": self.highest_tier.value,
            "max_retention_days": self.max_retention_days,
            "counts": {t.value: self.count(t) for t in LicenseTier},
        }


def compute_posture(
    entitlements: Iterable[SkuEntitlement],
    catalog: Optional[LicenseCatalog] = None,
) -> LicensePosture:
    """
    Reduce entitlements to a LicensePosture.

    Only enabled entitlements are considered. UNKNOWN SKUs rank as BASIC and
    contribute the minimum retention, but are counted under UNKNOWN.
    """
    catalog = DEFAULT_CATALOG if catalog is None else catalog
    highest = LicenseTier.BASIC
    max_days = MIN_RETENTION_DAYS
    counts: dict[LicenseTier, int] = {}

    for ent in entitlements:
        if not ent.enabled:
            continue
        info = catalog.tier_of(ent.sku_id)
        counts[info.tier] = counts.get(info.tier, 0) + 1
        if info.tier.rank > highest.rank:
            highest = info.tier
        max_days = max(max_days, info.retention_days)

    return LicensePosture(
        highest_tier=highest,
        max_retention_days=max_days,
        counts=tuple((t, counts[t]) for t in LicenseTier if t in counts),
    )
