"""
Snapshot loader — Reads one fetch cycle's records from a JSON file.

Layout:
    {
      "tenant": {
        "display_name": "...",
        "security_defaults": {"isEnabled": false},
        "subscribed_skus": [...],
        "conditional_access_policies": [...]
      },
      "accounts": [
        {"id": "...", "userPrincipalName": "...",
         "group_ids": [...], "role_ids": [...],
         "authentication_methods": [...],
         "assigned_licenses": [...]}
      ]
    }

A section that is null, absent, or a `{"_inaccessible": true}` marker was not
retrieved and is carried through as unavailable, never as empty. `role_ids` is
the exception for "absent": a fetcher that does not collect roles omits the key.
A malformed account record becomes an all-unavailable placeholder carrying the
parse error; only a malformed top level or tenant section is fatal.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..evaluation.signals import AccountSignals, TenantSignals
from ..policy.rules import AccountIdentity
from .normalize import (
    access_rules_from_graph,
    account_entitlements_from_graph,
    is_unavailable,
    registered_methods_from_graph,
    sku_entitlements_from_graph,
    sku_names_from_graph,
    tenant_default_from_graph,
)

logger = logging.getLogger("mfa_posture_engine.ingest.snapshot")


class SnapshotError(ValueError):
    """Raised when a snapshot file is structurally unusable."""
    pass


@dataclass(frozen=True)
class Snapshot:
    tenant: TenantSignals
    accounts: tuple[AccountSignals, ...]


def _list_or_none(section: Any, name: str):
    if is_unavailable(section):
        return None
    if not isinstance(section, list):
        raise SnapshotError(f"Section {name!r} must be a list or null, got {type(section).__name__}")
    return section


def parse_tenant(data: dict) -> tuple[TenantSignals, dict[str, str]]:
    """Returns tenant signals plus the skuId → part number lookup for accounts."""
    skus = _list_or_none(data.get("subscribed_skus"), "subscribed_skus")
    policies = _list_or_none(data.get("conditional_access_policies"), "conditional_access_policies")

    tenant = TenantSignals(
        tenant_default_enforced=tenant_default_from_graph(data.get("security_defaults")),
        rules=access_rules_from_graph(policies) if policies is not None else None,
        entitlements=sku_entitlements_from_graph(skus) if skus is not None else None,
        display_name=data.get("display_name") or "",
    )
    return tenant, sku_names_from_graph(skus or [])


def parse_account(data: dict, sku_names: dict[str, str]) -> AccountSignals:
    account_id = data.get("id")
    if not account_id:
        raise SnapshotError(f"Account record without an id: {data!r:.120}")

    groups = _list_or_none(data.get("group_ids"), "group_ids")
    # Absent means roles were not collected; null or a marker means the fetch failed
    roles = _list_or_none(data["role_ids"], "role_ids") if "role_ids" in data else []
    methods = _list_or_none(data.get("authentication_methods"), "authentication_methods")
    licenses = _list_or_none(data.get("assigned_licenses"), "assigned_licenses")

    identity = AccountIdentity(
        id=account_id,
        group_ids=frozenset(groups or []),
        role_ids=frozenset(roles or []),
        display_name=data.get("userPrincipalName") or data.get("displayName") or "",
    )
    return AccountSignals(
        account=identity,
        registered_methods=registered_methods_from_graph(methods) if methods is not None else None,
        entitlements=(
            account_entitlements_from_graph(licenses, sku_names)
            if licenses is not None else None
        ),
        group_ids_resolved=groups is not None,
        role_ids_resolved=roles is not None,
    )


def unreadable_account(record: Any, index: int, error: Exception) -> AccountSignals:
    """Placeholder for a record that could not be parsed; every account signal is unavailable."""
    account_id = ""
    if isinstance(record, dict):
        account_id = str(record.get("id") or "")
    account_id = account_id or f"record-{index}"
    logger.warning(f"[snapshot] Account {account_id} unreadable: {error}")
    return AccountSignals(
        account=AccountIdentity(id=account_id),
        registered_methods=None,
        entitlements=None,
        group_ids_resolved=False,
        role_ids_resolved=False,
        errors=(f"{type(error).__name__}: {error}",),
    )


def parse_snapshot(data: dict) -> Snapshot:
    if not isinstance(data, dict) or "tenant" not in data or "accounts" not in data:
        raise SnapshotError("Snapshot must be an object with 'tenant' and 'accounts' sections")
    if not isinstance(data["accounts"], list):
        raise SnapshotError("'accounts' must be a list")

    if not isinstance(data["tenant"] or {}, dict):
        raise SnapshotError("'tenant' must be an object")

    tenant, sku_names = parse_tenant(data["tenant"] or {})
    accounts = []
    for index, record in enumerate(data["accounts"]):
        try:
            accounts.append(parse_account(record, sku_names))
        except (ValueError, TypeError, AttributeError) as e:
            # Isolated per record; the placeholder evaluates as Indeterminate
            accounts.append(unreadable_account(record, index, e))

    gaps = sorted(s.value for s in tenant.unavailable)
    if gaps:
        logger.warning(f"[snapshot] Tenant signals unavailable: {gaps}")
    logger.info(f"[snapshot] Loaded {len(accounts)} accounts, {len(tenant.rules or ())} access rules")
    return Snapshot(tenant=tenant, accounts=tuple(accounts))


def load_snapshot(path: str | Path) -> Snapshot:
    """Read and parse a snapshot file."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Snapshot {path} is not valid JSON: {e}") from e
    return parse_snapshot(data)
