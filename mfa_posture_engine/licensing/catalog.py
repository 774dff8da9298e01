"""
License catalog — Static SKU → entitlement tier table.

Keys are SKU part numbers (e.g. "AAD_PREMIUM_P2") and the matching SKU GUIDs,
so both tenant inventory records and per-user assignedLicenses resolve.
Unmapped SKUs never raise: the directory service can introduce new SKUs at any
time, so a miss degrades to the UNKNOWN tier with the minimum retention window.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

from ..config import MIN_RETENTION_DAYS, PREMIUM_RETENTION_DAYS

logger = logging.getLogger("mfa_posture_engine.licensing.catalog")


class LicenseTier(str, Enum):
    BASIC = "Basic"
    P1 = "P1"
    P2 = "P2"
    UNKNOWN = "Unknown"

    @property
    def rank(self) -> int:
        """Ordering used for the highest-tier fold. UNKNOWN ranks as BASIC."""
        return _TIER_RANK[self]


_TIER_RANK = {
    LicenseTier.UNKNOWN: 0,
    LicenseTier.BASIC: 0,
    LicenseTier.P1: 1,
    LicenseTier.P2: 2,
}


@dataclass(frozen=True)
class LicenseTierInfo:
    """Entitlement details for one SKU."""
    display_name: str
    tier: LicenseTier
    retention_days: int

    def to_dict(self) -> dict:
        return {
            "display_name": self.display_name,
            "tier": self.tier.value,
            "retention_days": self.retention_days,
        }


def _entry(name: str, tier: LicenseTier) -> LicenseTierInfo:
    days = PREMIUM_RETENTION_DAYS if tier in (LicenseTier.P1, LicenseTier.P2) else MIN_RETENTION_DAYS
    return LicenseTierInfo(display_name=name, tier=tier, retention_days=days)


# (part number, GUID, display name, tier)
_SKU_ROWS = [
    # Entra ID standalone
    ("AAD_PREMIUM", "078d2b04-f1bd-4111-bbd4-b4b1b354cef4", "Microsoft Entra ID P1", LicenseTier.P1),
    ("AAD_PREMIUM_P2", "84a661c4-e949-4bd2-a560-ed7766fcaf2b", "Microsoft Entra ID P2", LicenseTier.P2),

    # Enterprise Mobility + Security
    ("EMS", "efccb6f7-5641-4e0e-bd10-b4976e1bf68e", "Enterprise Mobility + Security E3", LicenseTier.P1),
    ("EMSPREMIUM", "b05e124f-c7cc-45a0-a6aa-8cf78c946968", "Enterprise Mobility + Security E5", LicenseTier.P2),

    # Microsoft 365 suites
    ("SPE_E3", "05e9a617-0261-4cee-bb44-138d3ef5d965", "Microsoft 365 E3", LicenseTier.P1),
    ("SPE_E5", "06ebc4ee-1bb5-47dd-8120-11324bc54e06", "Microsoft 365 E5", LicenseTier.P2),
    ("SPE_F1", "66b55226-6b4f-492c-910c-a3b7a3c9d993", "Microsoft 365 F3", LicenseTier.P1),
    ("SPB", "cbdc14ab-d96c-4c30-b9f4-6ada7cdc1d46", "Microsoft 365 Business Premium", LicenseTier.P1),
    ("IDENTITY_THREAT_PROTECTION", "26124093-3d78-432b-b5dc-48bf992543d5", "Microsoft 365 E5 Security", LicenseTier.P2),

    # Office 365 / business plans without Entra premium
    ("O365_BUSINESS_ESSENTIALS", "3b555118-da6a-4418-894f-7df1e2096870", "Microsoft 365 Business Basic", LicenseTier.BASIC),
    ("O365_BUSINESS_PREMIUM", "f245ecc8-75af-4f8e-b61f-27d8114de5b3", "Microsoft 365 Business Standard", LicenseTier.BASIC),
    ("STANDARDPACK", "18181a46-0d4e-45cd-891e-60aabd171b4e", "Office 365 E1", LicenseTier.BASIC),
    ("ENTERPRISEPACK", "6fd2c87f-b296-42f0-b197-1e91e994b900", "Office 365 E3", LicenseTier.BASIC),
    ("ENTERPRISEPREMIUM", "c7df2760-2c81-4ef7-b578-5b5392b571df", "Office 365 E5", LicenseTier.BASIC),
    ("EXCHANGESTANDARD", "4b9405b0-7788-4568-add1-99614e613b69", "Exchange Online (Plan 1)", LicenseTier.BASIC),
]


class LicenseCatalog:
    """
    Lookup table from SKU identifier to LicenseTierInfo.
    Identifiers (part numbers and GUIDs) are matched case-insensitively.
    """

    def __init__(self, entries: Optional[dict[str, LicenseTierInfo]] = None):
        self._entries: dict[str, LicenseTierInfo] = {}
        for sku_id, info in (entries or {}).items():
            self._entries[self._key(sku_id)] = info

    @staticmethod
    def _key(sku_id: str) -> str:
        return sku_id.strip().upper()

    @classmethod
    def default(cls) -> "LicenseCatalog":
        entries = {}
        for part_number, guid, name, tier in _SKU_ROWS:
            info = _entry(name, tier)
            entries[part_number] = info
            entries[guid] = info
        return cls(entries)

    @classmethod
    def from_file(cls, path: str, base: Optional["LicenseCatalog"] = None) -> "LicenseCatalog":
        """
        Load SKU overrides from JSON and layer them over `base` (the built-in
        table when omitted). Expected shape:

            {"SKU_ID": {"display_name": "...", "tier": "P2", "retention_days": 30}}

        `retention_days` defaults from the tier when absent.
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"SKU catalog {path} must be a JSON object keyed by SKU id")
        catalog = cls()
        catalog._entries = dict((cls.default() if base is None else base)._entries)
        for sku_id, row in data.items():
            if not isinstance(row, dict):
                raise ValueError(f"SKU catalog entry {sku_id!r} must be an object")
            if sku_id in catalog:
                logger.debug(f"[catalog] Override replaces entry for {sku_id}")
            tier = LicenseTier(row.get("tier", LicenseTier.UNKNOWN.value))
            info = _entry(row.get("display_name", sku_id), tier)
            if "retention_days" in row:
                info = LicenseTierInfo(info.display_name, tier, int(row["retention_days"]))
            catalog._entries[cls._key(sku_id)] = info
        logger.info(f"[catalog] Loaded {len(data)} SKU overrides from {path}")
        return catalog

    def tier_of(self, sku_id: str) -> LicenseTierInfo:
        """Total lookup; unmapped ids get the UNKNOWN fallback."""
        info = self._entries.get(self._key(sku_id or ""))
        if info is None:
            logger.debug(f"[catalog] No catalog entry for SKU {sku_id!r}; treating as Unknown")
            return LicenseTierInfo(
                display_name=sku_id,
                tier=LicenseTier.UNKNOWN,
                retention_days=MIN_RETENTION_DAYS,
            )
        return info

    def __contains__(self, sku_id: str) -> bool:
        return self._key(sku_id) in self._entries

    def __iter__(self) -> Iterator[tuple[str, LicenseTierInfo]]:
        return iter(sorted(self._entries.items()))

    def __len__(self) -> int:
        return len(self._entries)


DEFAULT_CATALOG = LicenseCatalog.default()


def tier_of(sku_id: str) -> LicenseTierInfo:
    return DEFAULT_CATALOG.tier_of(sku_id)
