"""Shared fixtures for engine tests."""

import json

import pytest

from mfa_posture_engine.licensing import LicenseCatalog, LicenseTier, LicenseTierInfo
from mfa_posture_engine.policy import AccessRule, AccountIdentity


@pytest.fixture
def account():
    """A plain member account in one group."""
    return AccountIdentity(
        id="user-1",
        group_ids=frozenset({"group-sales"}),
        display_name="alice@contoso.com",
    )


@pytest.fixture
def mfa_all_rule():
    """Enabled rule requiring MFA for everyone."""
    return AccessRule(
        id="rule-all",
        display_name="Require MFA for all users",
        enabled=True,
        include_account_ids=frozenset({"ALL"}),
        requires_strong_auth=True,
    )


@pytest.fixture
def test_catalog():
    """Small catalog with one SKU per tier."""
    return LicenseCatalog({
        "P2_SKU": LicenseTierInfo("Premium P2", LicenseTier.P2, 30),
        "P1_SKU": LicenseTierInfo("Premium P1", LicenseTier.P1, 30),
        "BASIC_SKU": LicenseTierInfo("Basic", LicenseTier.BASIC, 7),
    })


@pytest.fixture
def sample_snapshot():
    """Graph-shaped snapshot: one rule for a group, three accounts."""
    return {
        "tenant": {
            "display_name": "Contoso",
            "security_defaults": {"isEnabled": False},
            "subscribed_skus": [
                {
                    "skuId": "078d2b04-f1bd-4111-bbd4-b4b1b354cef4",
                    "skuPartNumber": "AAD_PREMIUM",
                    "capabilityStatus": "Enabled",
                    "consumedUnits": 10,
                },
                {
                    "skuId": "84a661c4-e949-4bd2-a560-ed7766fcaf2b",
                    "skuPartNumber": "AAD_PREMIUM_P2",
                    "capabilityStatus": "Enabled",
                    "consumedUnits": 1,
                },
            ],
            "conditional_access_policies": [
                {
                    "id": "ca-admins",
                    "displayName": "MFA for admins group",
                    "state": "enabled",
                    "conditions": {
                        "users": {
                            "includeUsers": [],
                            "excludeUsers": [],
                            "includeGroups": ["group-admins"],
                            "excludeGroups": [],
                        },
                    },
                    "grantControls": {"operator": "OR", "builtInControls": ["mfa"]},
                },
            ],
        },
        "accounts": [
            {
                "id": "admin-1",
                "userPrincipalName": "admin@contoso.com",
                "group_ids": ["group-admins"],
                "authentication_methods": [
                    {"@odata.type": "#microsoft.graph.passwordAuthenticationMethod"},
                ],
                "assigned_licenses": [{"skuId": "84a661c4-e949-4bd2-a560-ed7766fcaf2b"}],
            },
            {
                "id": "user-2",
                "userPrincipalName": "bob@contoso.com",
                "group_ids": [],
                "authentication_methods": [
                    {"@odata.type": "#microsoft.graph.microsoftAuthenticatorAuthenticationMethod"},
                ],
                "assigned_licenses": [],
            },
            {
                "id": "user-3",
                "userPrincipalName": "carol@contoso.com",
                "group_ids": None,
                "authentication_methods": [],
                "assigned_licenses": [],
            },
        ],
    }


@pytest.fixture
def snapshot_file(tmp_path, sample_snapshot):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(sample_snapshot), encoding="utf-8")
    return path
