"""Tests for the MFA posture evaluator precedence."""

import pytest

from mfa_posture_engine.evaluation import (
    MfaPostureEvaluator,
    MfaStatus,
    SignalSource,
    StrongAuthMethod,
    evaluate,
)
from mfa_posture_engine.policy import AccessRule


class TestEvaluatePrecedence:
    """Test suite for verdict precedence."""

    @pytest.mark.parametrize("methods", [set(), {"Authenticator"}])
    def test_tenant_default_wins(self, account, mfa_all_rule, methods):
        """Tenant default enforcement wins regardless of rules or methods."""
        verdict = evaluate(True, [mfa_all_rule], account, methods)
        assert verdict.status == MfaStatus.PROTECTED_BY_SYSTEM_DEFAULT
        assert verdict.matched_rules == ()

    def test_tenant_default_with_no_rules(self, account):
        assert evaluate(True, [], account, set()).status == MfaStatus.PROTECTED_BY_SYSTEM_DEFAULT

    def test_not_protected(self, account):
        verdict = evaluate(False, [], account, set())
        assert verdict.status == MfaStatus.NOT_PROTECTED

    def test_registered_method_only(self, account):
        verdict = evaluate(False, [], account, {"Authenticator"})
        assert verdict.status == MfaStatus.PROTECTED_BY_REGISTERED_METHOD_ONLY
        assert "Authenticator" in verdict.summary

    def test_registered_method_enum(self, account):
        verdict = evaluate(False, [], account, {StrongAuthMethod.SECURITY_KEY})
        assert verdict.status == MfaStatus.PROTECTED_BY_REGISTERED_METHOD_ONLY
        assert "SecurityKey" in verdict.summary

    def test_protected_by_rule(self, account, mfa_all_rule):
        verdict = evaluate(False, [mfa_all_rule], account, set())
        assert verdict.status == MfaStatus.PROTECTED_BY_RULE
        assert verdict.matched_rules == ("rule-all",)

    def test_rule_beats_registered_methods(self, account, mfa_all_rule):
        verdict = evaluate(False, [mfa_all_rule], account, {"Phone"})
        assert verdict.status == MfaStatus.PROTECTED_BY_RULE

    def test_matched_rules_in_input_order(self, account):
        rules = [
            AccessRule(id="z", include_account_ids=frozenset({"ALL"}), requires_strong_auth=True),
            AccessRule(id="block", include_account_ids=frozenset({"ALL"}), requires_strong_auth=False),
            AccessRule(id="a", include_group_ids=frozenset({"group-sales"}), requires_strong_auth=True),
        ]
        verdict = evaluate(False, rules, account, set())
        assert verdict.matched_rules == ("z", "a")

    def test_rule_without_strong_auth_does_not_protect(self, account):
        rule = AccessRule(id="r", include_account_ids=frozenset({"ALL"}), requires_strong_auth=False)
        assert evaluate(False, [rule], account, set()).status == MfaStatus.NOT_PROTECTED

    def test_excluded_account_falls_through(self, account):
        rule = AccessRule(
            id="r",
            include_account_ids=frozenset({"ALL"}),
            exclude_account_ids=frozenset({"user-1"}),
            requires_strong_auth=True,
        )
        verdict = evaluate(False, [rule], account, {"Authenticator"})
        assert verdict.status == MfaStatus.PROTECTED_BY_REGISTERED_METHOD_ONLY

    def test_idempotent(self, account, mfa_all_rule):
        evaluator = MfaPostureEvaluator()
        first = evaluator.evaluate(False, [mfa_all_rule], account, set())
        second = evaluator.evaluate(False, [mfa_all_rule], account, set())
        assert first == second


class TestIndeterminate:
    """Unavailable inputs must never read as protected or unprotected."""

    def test_rules_unavailable(self, account):
        verdict = evaluate(False, None, account, set())
        assert verdict.status == MfaStatus.INDETERMINATE
        assert verdict.unavailable_signals == (SignalSource.ACCESS_RULES,)

    def test_tenant_default_unavailable(self, account, mfa_all_rule):
        verdict = evaluate(None, [mfa_all_rule], account, {"Authenticator"})
        assert verdict.status == MfaStatus.INDETERMINATE

    def test_methods_unavailable(self, account):
        verdict = evaluate(False, [], account, None)
        assert verdict.status == MfaStatus.INDETERMINATE

    def test_flagged_unavailable_overrides_tenant_default(self, account):
        """An explicit flag short-circuits even when the default is enforced."""
        verdict = evaluate(
            True, [], account, set(), unavailable=[SignalSource.GROUP_MEMBERSHIP]
        )
        assert verdict.status == MfaStatus.INDETERMINATE
        assert verdict.unavailable_signals == (SignalSource.GROUP_MEMBERSHIP,)

    def test_entitlement_gaps_do_not_affect_mfa(self, account):
        verdict = evaluate(
            False, [], account, set(), unavailable=[SignalSource.ACCOUNT_ENTITLEMENTS]
        )
        assert verdict.status == MfaStatus.NOT_PROTECTED

    def test_signals_reported_in_stable_order(self, account):
        verdict = evaluate(None, None, account, None)
        assert verdict.unavailable_signals == (
            SignalSource.TENANT_DEFAULT,
            SignalSource.ACCESS_RULES,
            SignalSource.REGISTERED_METHODS,
        )
        assert verdict.to_dict()["status"] == "Indeterminate"
