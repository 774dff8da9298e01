"""Tests for Graph record normalisation."""

from mfa_posture_engine.evaluation import StrongAuthMethod
from mfa_posture_engine.ingest import (
    access_rule_from_graph,
    account_entitlements_from_graph,
    is_unavailable,
    registered_methods_from_graph,
    sku_entitlements_from_graph,
    tenant_default_from_graph,
)


def _policy(**overrides):
    policy = {
        "id": "ca-1",
        "displayName": "Require MFA",
        "state": "enabled",
        "conditions": {
            "users": {
                "includeUsers": ["All"],
                "excludeUsers": ["breakglass-1"],
                "includeGroups": [],
                "excludeGroups": ["group-svc"],
                "includeRoles": [],
                "excludeRoles": [],
            },
        },
        "grantControls": {"operator": "OR", "builtInControls": ["mfa"]},
    }
    policy.update(overrides)
    return policy


class TestAccessRuleFromGraph:
    """Test suite for conditional access policy normalisation."""

    def test_raw_graph_policy(self):
        rule = access_rule_from_graph(_policy())
        assert rule.id == "ca-1"
        assert rule.enabled is True
        assert rule.requires_strong_auth is True
        assert rule.targets_all is True
        assert rule.exclude_account_ids == frozenset({"breakglass-1"})
        assert rule.exclude_group_ids == frozenset({"group-svc"})

    def test_report_only_is_not_enabled(self):
        rule = access_rule_from_graph(_policy(state="enabledForReportingButNotEnforced"))
        assert rule.enabled is False

    def test_block_policy_does_not_require_mfa(self):
        rule = access_rule_from_graph(_policy(grantControls={"builtInControls": ["block"]}))
        assert rule.requires_strong_auth is False

    def test_authentication_strength_requires_mfa(self):
        rule = access_rule_from_graph(_policy(grantControls={
            "builtInControls": [],
            "authenticationStrength": {"id": "00000000-0000-0000-0000-000000000002"},
        }))
        assert rule.requires_strong_auth is True

    def test_null_sections(self):
        rule = access_rule_from_graph({"id": "x", "state": "enabled", "conditions": None, "grantControls": None})
        assert rule.is_valid is False
        assert rule.requires_strong_auth is False

    def test_flattened_policy(self):
        rule = access_rule_from_graph({
            "id": "flat",
            "displayName": "Flattened",
            "state": "enabled",
            "includeUsers": [],
            "includeGroups": ["group-admins"],
            "excludeUsers": [],
            "requiresMFA": True,
        })
        assert rule.include_group_ids == frozenset({"group-admins"})
        assert rule.requires_strong_auth is True


class TestLicensesFromGraph:
    """Test suite for SKU inventory and assignment normalisation."""

    def test_subscribed_skus(self):
        ents = sku_entitlements_from_graph([
            {"skuId": "g1", "skuPartNumber": "AAD_PREMIUM", "capabilityStatus": "Enabled", "consumedUnits": 4},
            {"skuId": "g2", "skuPartNumber": "AAD_PREMIUM_P2", "capabilityStatus": "Suspended"},
            {"skuId": "g3", "capabilityStatus": "Warning"},
        ])
        assert [(e.sku_id, e.enabled) for e in ents] == [
            ("AAD_PREMIUM", True),
            ("AAD_PREMIUM_P2", False),
            ("g3", True),
        ]
        assert ents[0].consumed_units == 4

    def test_assigned_licenses_resolve_part_numbers(self):
        ents = account_entitlements_from_graph(
            [{"skuId": "g1"}, {"skuId": "unknown-guid"}, {}],
            {"g1": "AAD_PREMIUM"},
        )
        assert [e.sku_id for e in ents] == ["AAD_PREMIUM", "unknown-guid"]


class TestMethodsAndDefaults:
    """Test suite for auth methods and tenant default normalisation."""

    def test_registered_methods(self):
        methods = registered_methods_from_graph([
            {"@odata.type": "#microsoft.graph.passwordAuthenticationMethod"},
            {"@odata.type": "#microsoft.graph.fido2AuthenticationMethod"},
            {"@odata.type": "#microsoft.graph.phoneAuthenticationMethod"},
            {"@odata.type": "#microsoft.graph.somethingNewAuthenticationMethod"},
        ])
        assert methods == frozenset({StrongAuthMethod.SECURITY_KEY, StrongAuthMethod.PHONE})

    def test_password_only_is_empty(self):
        methods = registered_methods_from_graph([
            {"@odata.type": "#microsoft.graph.passwordAuthenticationMethod"},
        ])
        assert methods == frozenset()

    def test_tenant_default(self):
        assert tenant_default_from_graph({"isEnabled": True}) is True
        assert tenant_default_from_graph({"isEnabled": False}) is False
        assert tenant_default_from_graph(None) is None
        assert tenant_default_from_graph({"_forbidden": True, "_error": "403"}) is None

    def test_unavailable_markers(self):
        assert is_unavailable(None)
        assert is_unavailable({"_inaccessible": True})
        assert not is_unavailable([])
        assert not is_unavailable({})
