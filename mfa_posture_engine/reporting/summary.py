"""
Report helpers shared by the exporters.
"""

from __future__ import annotations

from typing import Optional

from ..evaluation.mfa import MfaStatus


def status_counts(assessments: list) -> dict[str, int]:
    """Accounts per MFA status, every status present (zero when unused)."""
    counts = {s.value: 0 for s in MfaStatus}
    for a in assessments:
        counts[a.verdict.status.value] += 1
    return counts


def accounts_with_status(assessments: list, status: MfaStatus) -> list:
    return sorted(
        (a for a in assessments if a.verdict.status == status),
        key=lambda a: (a.display_name or a.account_id).lower(),
    )


def enforced_count(assessments: list) -> int:
    """Accounts where MFA is actually enforced (tenant default or a rule)."""
    return sum(1 for a in assessments if a.verdict.status.is_enforced)


def queryable_days(assessment, requested_days: Optional[int]) -> Optional[int]:
    """Requested telemetry window clamped to what the account is entitled to."""
    if requested_days is None:
        return None
    return assessment.retention.clamp(requested_days)
