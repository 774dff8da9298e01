from .signals import (
    AccountSignals,
    SignalSource,
    SourceUnavailable,
    StrongAuthMethod,
    TenantSignals,
)
from .mfa import MfaPostureEvaluator, MfaStatus, MfaVerdict, evaluate
from .retention import RetentionBound, RetentionDecision, resolve
from .batch import AccountAssessment, BatchAssessor, assess_account, assess_all

__all__ = [
    "AccountSignals",
    "SignalSource",
    "SourceUnavailable",
    "StrongAuthMethod",
    "TenantSignals",
    "MfaPostureEvaluator",
    "MfaStatus",
    "MfaVerdict",
    "evaluate",
    "RetentionBound",
    "RetentionDecision",
    "resolve",
    "AccountAssessment",
    "BatchAssessor",
    "assess_account",
    "assess_all",
]
