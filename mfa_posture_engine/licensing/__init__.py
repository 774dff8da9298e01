"""Licensing package — SKU catalog and license posture calculation."""

from .catalog import DEFAULT_CATALOG, LicenseCatalog, LicenseTier, LicenseTierInfo, tier_of
from .posture import LicensePosture, SkuEntitlement, compute_posture

__all__ = [
    "DEFAULT_CATALOG",
    "LicenseCatalog",
    "LicenseTier",
    "LicenseTierInfo",
    "tier_of",
    "LicensePosture",
    "SkuEntitlement",
    "compute_posture",
]
