"""Policy package — access rule models and the applicability matcher."""

from .rules import AccessRule, AccountIdentity
from .matcher import PolicyApplicabilityMatcher, applies

__all__ = [
    "AccessRule",
    "AccountIdentity",
    "PolicyApplicabilityMatcher",
    "applies",
]
