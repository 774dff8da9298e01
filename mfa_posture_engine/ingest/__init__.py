"""Ingest package — normalises fetched directory records into evaluation inputs."""

from .normalize import (
    access_rule_from_graph,
    access_rules_from_graph,
    account_entitlements_from_graph,
    is_unavailable,
    registered_methods_from_graph,
    sku_entitlements_from_graph,
    tenant_default_from_graph,
)
from .snapshot import Snapshot, SnapshotError, load_snapshot, parse_snapshot

__all__ = [
    "access_rule_from_graph",
    "access_rules_from_graph",
    "account_entitlements_from_graph",
    "is_unavailable",
    "registered_methods_from_graph",
    "sku_entitlements_from_graph",
    "tenant_default_from_graph",
    "Snapshot",
    "SnapshotError",
    "load_snapshot",
    "parse_snapshot",
]
