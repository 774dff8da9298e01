"""
Policy applicability matcher — Decides whether an access rule scopes an account.

Order of evaluation:
  1. Disabled rules never apply.
  2. Exclusions (account, group, role) always win over inclusion.
  3. Wildcard, direct account, group or role inclusion applies the rule.
  4. Anything else does not apply.
"""

from __future__ import annotations

from .rules import AccessRule, AccountIdentity


def is_excluded(rule: AccessRule, account: AccountIdentity) -> bool:
    if account.id in rule.exclude_account_ids:
        return True
    if rule.exclude_group_ids & account.group_ids:
        return True
    return bool(rule.exclude_role_ids & account.role_ids)


def is_included(rule: AccessRule, account: AccountIdentity) -> bool:
    if rule.targets_all or account.id in rule.include_account_ids:
        return True
    # Real intersection; listing an include group is not enough on its own
    if rule.include_group_ids & account.group_ids:
        return True
    return bool(rule.include_role_ids & account.role_ids)


def applies(rule: AccessRule, account: AccountIdentity) -> bool:
    """Pure, total predicate: does `rule` apply to `account`?"""
    if not rule.enabled:
        return False
    if is_excluded(rule, account):
        return False
    return is_included(rule, account)


class PolicyApplicabilityMatcher:
    """Stateless wrapper so the matcher can be injected into the evaluator."""

    def applies(self, rule: AccessRule, account: AccountIdentity) -> bool:
        return applies(rule, account)

    def matching(self, rules, account: AccountIdentity) -> list[AccessRule]:
        """Rules that apply to `account`, in input order."""
        return [r for r in rules if applies(r, account)]
