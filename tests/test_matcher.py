"""Tests for the policy applicability matcher."""

import pytest

from mfa_posture_engine.policy import AccessRule, AccountIdentity, PolicyApplicabilityMatcher, applies


def _rule(**kwargs):
    defaults = {"id": "r1", "enabled": True}
    defaults.update(kwargs)
    for key in list(defaults):
        if key.endswith("_ids"):
            defaults[key] = frozenset(defaults[key])
    return AccessRule(**defaults)


class TestApplies:
    """Test suite for applies()."""

    @pytest.mark.parametrize("include", [{"ALL"}, {"user-1"}, set()])
    def test_disabled_rule_never_applies(self, account, include):
        rule = _rule(enabled=False, include_account_ids=include, include_group_ids={"group-sales"})
        assert applies(rule, account) is False

    def test_wildcard_include(self, account):
        assert applies(_rule(include_account_ids={"ALL"}), account) is True

    def test_direct_include(self, account):
        assert applies(_rule(include_account_ids={"user-1"}), account) is True

    def test_group_include_requires_membership(self, account):
        """Listing an include group is not enough; the account must be a member."""
        assert applies(_rule(include_group_ids={"group-sales"}), account) is True
        assert applies(_rule(include_group_ids={"group-hr"}), account) is False

    def test_exclusion_beats_direct_include(self, account):
        rule = _rule(include_account_ids={"user-1"}, exclude_account_ids={"user-1"})
        assert applies(rule, account) is False

    def test_exclusion_beats_wildcard(self, account):
        rule = _rule(include_account_ids={"ALL"}, exclude_account_ids={"user-1"})
        assert applies(rule, account) is False

    def test_wildcard_with_other_exclusion_still_applies(self, account):
        rule = _rule(include_account_ids={"ALL"}, exclude_account_ids={"someone-else"})
        assert applies(rule, account) is True

    def test_group_exclusion(self, account):
        rule = _rule(include_account_ids={"ALL"}, exclude_group_ids={"group-sales"})
        assert applies(rule, account) is False

    def test_role_include_and_exclude(self):
        admin = AccountIdentity(id="admin", role_ids=frozenset({"global-admin"}))
        assert applies(_rule(include_role_ids={"global-admin"}), admin) is True
        assert applies(
            _rule(include_account_ids={"ALL"}, exclude_role_ids={"global-admin"}), admin
        ) is False

    def test_rule_without_targets_never_applies(self, account):
        """A rule with no include target is invalid and never applicable."""
        rule = _rule()
        assert rule.is_valid is False
        assert applies(rule, account) is False

    def test_no_match(self, account):
        assert applies(_rule(include_account_ids={"user-9"}), account) is False

    def test_deterministic(self, account):
        rule = _rule(include_group_ids={"group-sales"})
        assert [applies(rule, account) for _ in range(3)] == [True, True, True]


class TestPolicyApplicabilityMatcher:
    """Test suite for the injectable matcher."""

    def test_matching_keeps_input_order(self, account):
        rules = [
            _rule(id="b", include_account_ids={"ALL"}),
            _rule(id="x", include_account_ids={"nobody"}),
            _rule(id="a", include_group_ids={"group-sales"}),
        ]
        matched = PolicyApplicabilityMatcher().matching(rules, account)
        assert [r.id for r in matched] == ["b", "a"]
