"""
Record normalisation — Graph-shaped JSON records → typed evaluation inputs.

Accepts records exactly as the external fetcher hands them over. Conditional
access policies may be raw Graph objects (nested `conditions.users`) or the
flattened form with `includeUsers` etc. at the top level. No network access.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from ..config import (
    ACTIVE_SKU_STATES,
    ALL_TARGET,
    GRAPH_ALL_TOKENS,
    GRAPH_IGNORED_METHOD_TYPES,
    GRAPH_STRONG_METHOD_TYPES,
    POLICY_STATE_ENABLED,
    STRONG_AUTH_GRANT_CONTROLS,
)
from ..evaluation.signals import StrongAuthMethod
from ..licensing.posture import SkuEntitlement
from ..policy.rules import AccessRule

logger = logging.getLogger("mfa_posture_engine.ingest.normalize")


def is_unavailable(section: Any) -> bool:
    """A null section or a `_forbidden` / `_inaccessible` marker means the fetch failed."""
    if section is None:
        return True
    if isinstance(section, dict):
        return bool(section.get("_forbidden") or section.get("_inaccessible"))
    return False


def _ids(values: Optional[Iterable[str]]) -> frozenset[str]:
    out = set()
    for v in values or []:
        if not v:
            continue
        out.add(ALL_TARGET if v in GRAPH_ALL_TOKENS else v)
    return frozenset(out)


def _odata_suffix(record: dict) -> str:
    return (record.get("@odata.type") or record.get("type") or "").split(".")[-1]


# ── Licenses ────────────────────────────────────────────────────────────────

def sku_entitlements_from_graph(subscribed_skus: list[dict]) -> tuple[SkuEntitlement, ...]:
    """Tenant inventory (`/subscribedSkus`) → entitlements keyed by part number."""
    entitlements = []
    for s in subscribed_skus:
        sku_id = s.get("skuPartNumber") or s.get("skuId")
        if not sku_id:
            continue
        entitlements.append(SkuEntitlement(
            sku_id=sku_id,
            consumed_units=int(s.get("consumedUnits") or 0),
            enabled=s.get("capabilityStatus", "Enabled") in ACTIVE_SKU_STATES,
        ))
    return tuple(entitlements)


def sku_names_from_graph(subscribed_skus: list[dict]) -> dict[str, str]:
    """skuId GUID → skuPartNumber lookup for resolving per-user assignments."""
    return {
        s["skuId"]: s["skuPartNumber"]
        for s in subscribed_skus
        if s.get("skuId") and s.get("skuPartNumber")
    }


def account_entitlements_from_graph(
    assigned_licenses: list[dict],
    sku_names: Optional[dict[str, str]] = None,
) -> tuple[SkuEntitlement, ...]:
    """
    A user's `assignedLicenses` → entitlements. GUIDs are translated to part
    numbers when the tenant inventory knows them; otherwise the GUID is kept
    (the catalog also indexes GUIDs).
    """
    sku_names = sku_names or {}
    entitlements = []
    for lic in assigned_licenses:
        guid = lic.get("skuId")
        if not guid:
            continue
        entitlements.append(SkuEntitlement(
            sku_id=sku_names.get(guid, guid),
            consumed_units=1,
            enabled=True,
        ))
    return tuple(entitlements)


# ── Conditional Access ──────────────────────────────────────────────────────

def access_rule_from_graph(policy: dict) -> AccessRule:
    """One conditional access policy → AccessRule. Report-only is not enforcement."""
    # Use `or {}` to handle JSON null values (key present but None)
    conditions = policy.get("conditions", {}) or {}
    users_cond = conditions.get("users", {}) or {}
    grant_controls = policy.get("grantControls", {}) or {}

    def pick(key: str) -> frozenset[str]:
        if key in users_cond:
            return _ids(users_cond.get(key))
        return _ids(policy.get(key))

    if grant_controls:
        built_in = grant_controls.get("builtInControls", []) or []
        strength = grant_controls.get("authenticationStrength") or {}
        flattened_flag = False
    else:
        # Flattened shape carries grant fields and a precomputed flag
        built_in = policy.get("grantBuiltInControls", []) or []
        strength = policy.get("authenticationStrength") or {}
        flattened_flag = bool(policy.get("requiresMFA"))

    requires_mfa = (
        bool(set(built_in) & STRONG_AUTH_GRANT_CONTROLS)
        or bool(strength)
        or flattened_flag
    )

    rule = AccessRule(
        id=policy.get("id") or "",
        display_name=policy.get("displayName") or "",
        enabled=policy.get("state") == POLICY_STATE_ENABLED,
        include_account_ids=pick("includeUsers"),
        exclude_account_ids=pick("excludeUsers"),
        include_group_ids=pick("includeGroups"),
        exclude_group_ids=pick("excludeGroups"),
        include_role_ids=pick("includeRoles"),
        exclude_role_ids=pick("excludeRoles"),
        requires_strong_auth=requires_mfa,
    )
    if not rule.is_valid:
        logger.warning(
            f"[normalize] Policy {rule.id!r} ({rule.display_name}) has no include "
            f"target; it will never apply"
        )
    return rule


def access_rules_from_graph(policies: list[dict]) -> tuple[AccessRule, ...]:
    return tuple(access_rule_from_graph(p) for p in policies)


def tenant_default_from_graph(security_defaults: Optional[dict]) -> Optional[bool]:
    """`identitySecurityDefaultsEnforcementPolicy` → enforced flag, None if unreadable."""
    if is_unavailable(security_defaults):
        return None
    return bool(security_defaults.get("isEnabled", False))


# ── Authentication Methods ──────────────────────────────────────────────────

def registered_methods_from_graph(methods: list[dict]) -> frozenset[StrongAuthMethod]:
    """
    A user's `/authentication/methods` → strong-auth tags. Password, email and
    temporary access pass are not second factors and are dropped; unrecognised
    method types are logged and dropped.
    """
    tags = set()
    for m in methods:
        kind = _odata_suffix(m)
        if kind in GRAPH_STRONG_METHOD_TYPES:
            tags.add(StrongAuthMethod(GRAPH_STRONG_METHOD_TYPES[kind]))
        elif kind and kind not in GRAPH_IGNORED_METHOD_TYPES:
            logger.debug(f"[normalize] Ignoring unrecognised auth method type {kind!r}")
    return frozenset(tags)
