"""
MFA Posture Evaluator
Combines tenant default enforcement, conditional access rules and registered
strong-auth methods into one verdict per account.

Precedence (first match wins, sources are never merged):
  0. Any MFA-relevant input unavailable  → Indeterminate
  1. Tenant default enforcement          → ProtectedBySystemDefault
  2. Applicable rules requiring MFA      → ProtectedByRule
  3. Registered strong-auth methods      → ProtectedByRegisteredMethodOnly
  4. Nothing                             → NotProtected
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

from ..policy.matcher import PolicyApplicabilityMatcher
from ..policy.rules import AccessRule, AccountIdentity
from .signals import MFA_SIGNALS, SignalSource, ordered_signals

logger = logging.getLogger("mfa_posture_engine.evaluation.mfa")


class MfaStatus(str, Enum):
    PROTECTED_BY_SYSTEM_DEFAULT = "ProtectedBySystemDefault"
    PROTECTED_BY_RULE = "ProtectedByRule"
    PROTECTED_BY_REGISTERED_METHOD_ONLY = "ProtectedByRegisteredMethodOnly"
    NOT_PROTECTED = "NotProtected"
    INDETERMINATE = "Indeterminate"

    @property
    def is_enforced(self) -> bool:
        return self in (MfaStatus.PROTECTED_BY_SYSTEM_DEFAULT, MfaStatus.PROTECTED_BY_RULE)


@dataclass(frozen=True)
class MfaVerdict:
    """Single-status outcome of one evaluation. Built fresh for every account."""
    status: MfaStatus
    matched_rules: tuple[str, ...] = ()
    summary: str = ""
    unavailable_signals: tuple[SignalSource, ...] = ()

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "matched_rules": list(self.matched_rules),
            "summary": self.summary,
            "unavailable_signals": [s.value for s in self.unavailable_signals],
        }


def _method_label(method) -> str:
    return getattr(method, "value", str(method))


class MfaPostureEvaluator:
    """
    Stateless evaluator. The matcher is injectable so callers can swap in a
    different applicability policy without touching precedence.
    """

    def __init__(self, matcher: Optional[PolicyApplicabilityMatcher] = None):
        self.matcher = matcher or PolicyApplicabilityMatcher()

    def evaluate(
        self,
        tenant_default_enforced: Optional[bool],
        rules: Optional[Sequence[AccessRule]],
        account: AccountIdentity,
        registered_methods: Optional[Iterable],
        unavailable: Iterable[SignalSource] = (),
    ) -> MfaVerdict:
        missing = set(unavailable) & MFA_SIGNALS
        if tenant_default_enforced is None:
            missing.add(SignalSource.TENANT_DEFAULT)
        if rules is None:
            missing.add(SignalSource.ACCESS_RULES)
        if registered_methods is None:
            missing.add(SignalSource.REGISTERED_METHODS)

        if missing:
            gaps = ordered_signals(missing)
            logger.debug(f"[mfa] {account.id}: indeterminate, missing {[g.value for g in gaps]}")
            return MfaVerdict(
                status=MfaStatus.INDETERMINATE,
                summary="Cannot determine MFA posture: "
                        + ", ".join(g.value for g in gaps) + " unavailable",
                unavailable_signals=gaps,
            )

        if tenant_default_enforced:
            return MfaVerdict(
                status=MfaStatus.PROTECTED_BY_SYSTEM_DEFAULT,
                summary="MFA enforced tenant-wide by security defaults",
            )

        matched = [
            r for r in rules
            if r.requires_strong_auth and self.matcher.applies(r, account)
        ]
        if matched:
            names = ", ".join(r.display_name or r.id for r in matched)
            return MfaVerdict(
                status=MfaStatus.PROTECTED_BY_RULE,
                matched_rules=tuple(r.id for r in matched),
                summary=f"MFA enforced by {len(matched)} conditional access rule(s): {names}",
            )

        methods = sorted({_method_label(m) for m in registered_methods})
        if methods:
            return MfaVerdict(
                status=MfaStatus.PROTECTED_BY_REGISTERED_METHOD_ONLY,
                summary="Strong auth registered (" + ", ".join(methods)
                        + ") but no enforcement mechanism applies",
            )

        return MfaVerdict(
            status=MfaStatus.NOT_PROTECTED,
            summary="No MFA enforcement and no strong auth methods registered",
        )


_DEFAULT_EVALUATOR = MfaPostureEvaluator()


def evaluate(
    tenant_default_enforced: Optional[bool],
    rules: Optional[Sequence[AccessRule]],
    account: AccountIdentity,
    registered_methods: Optional[Iterable],
    unavailable: Iterable[SignalSource] = (),
) -> MfaVerdict:
    """Module-level shortcut around a default MfaPostureEvaluator."""
    return _DEFAULT_EVALUATOR.evaluate(
        tenant_default_enforced, rules, account, registered_methods, unavailable
    )
