"""
Batch assessor — Evaluates many accounts with a bounded worker pool.

Each account is independent: a failed per-account fetch yields an
Indeterminate assessment for that account only, and assessments are recorded
as they complete so a cancelled batch keeps everything already produced.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional

from ..config import MAX_CONCURRENT_EVALUATIONS
from ..licensing.catalog import DEFAULT_CATALOG, LicenseCatalog
from ..licensing.posture import LicensePosture, compute_posture
from .mfa import MfaPostureEvaluator, MfaStatus, MfaVerdict
from .retention import RetentionDecision, resolve
from .signals import (
    AccountSignals,
    SignalSource,
    SourceUnavailable,
    TenantSignals,
    ordered_signals,
)

logger = logging.getLogger("mfa_posture_engine.evaluation.batch")

# Account-level signals lost when the whole per-account fetch fails
_ACCOUNT_SIGNALS = frozenset({
    SignalSource.REGISTERED_METHODS,
    SignalSource.GROUP_MEMBERSHIP,
    SignalSource.ROLE_MEMBERSHIP,
    SignalSource.ACCOUNT_ENTITLEMENTS,
})


@dataclass
class AccountAssessment:
    """Everything the report writer needs for one account."""
    account_id: str
    display_name: str
    verdict: MfaVerdict
    retention: RetentionDecision
    license_posture: LicensePosture
    unavailable_signals: tuple[SignalSource, ...] = ()
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "account_id": self.account_id,
            "display_name": self.display_name,
            "mfa": self.verdict.to_dict(),
            "retention": self.retention.to_dict(),
            "license_posture": self.license_posture.to_dict(),
            "unavailable_signals": [s.value for s in self.unavailable_signals],
            "errors": list(self.errors),
        }


def _posture_or_minimum(entitlements, catalog: LicenseCatalog) -> LicensePosture:
    # Missing entitlements contribute only the always-available minimum
    if entitlements is None:
        return LicensePosture()
    return compute_posture(entitlements, catalog)


def assess_account(
    tenant: TenantSignals,
    signals: AccountSignals,
    catalog: Optional[LicenseCatalog] = None,
    evaluator: Optional[MfaPostureEvaluator] = None,
    tenant_posture: Optional[LicensePosture] = None,
) -> AccountAssessment:
    """Evaluate one account against the tenant signals. Pure; no I/O."""
    catalog = DEFAULT_CATALOG if catalog is None else catalog
    evaluator = evaluator or MfaPostureEvaluator()
    unavailable = tenant.unavailable | signals.unavailable

    verdict = evaluator.evaluate(
        tenant.tenant_default_enforced,
        tenant.rules,
        signals.account,
        signals.registered_methods,
        unavailable=unavailable,
    )

    if tenant_posture is None:
        tenant_posture = _posture_or_minimum(tenant.entitlements, catalog)
    account_posture = _posture_or_minimum(signals.entitlements, catalog)

    return AccountAssessment(
        account_id=signals.account.id,
        display_name=signals.account.display_name,
        verdict=verdict,
        retention=resolve(tenant_posture, account_posture),
        license_posture=account_posture,
        unavailable_signals=ordered_signals(unavailable),
        errors=list(signals.errors),
    )


def failed_assessment(
    account_id: str,
    tenant: TenantSignals,
    error: Exception,
    tenant_posture: LicensePosture,
) -> AccountAssessment:
    """Indeterminate assessment for an account whose fetch raised."""
    lost = set(_ACCOUNT_SIGNALS)
    if isinstance(error, SourceUnavailable):
        lost.add(error.source)
    gaps = ordered_signals(tenant.unavailable | lost)
    verdict = MfaVerdict(
        status=MfaStatus.INDETERMINATE,
        summary="Cannot determine MFA posture: "
                + ", ".join(g.value for g in gaps) + " unavailable",
        unavailable_signals=gaps,
    )
    return AccountAssessment(
        account_id=account_id,
        display_name="",
        verdict=verdict,
        retention=resolve(tenant_posture, LicensePosture()),
        license_posture=LicensePosture(),
        unavailable_signals=gaps,
        errors=[f"{type(error).__name__}: {error}"],
    )


FetchAccount = Callable[[str], Awaitable[AccountSignals]]


class BatchAssessor:
    """
    Runs fetch + evaluate for a list of accounts.
    Features:
      - Concurrency bounded by an asyncio.Semaphore
      - Per-account failure isolation
      - Incremental results in `assessments`
    """

    def __init__(
        self,
        tenant: TenantSignals,
        catalog: Optional[LicenseCatalog] = None,
        max_concurrency: int = MAX_CONCURRENT_EVALUATIONS,
        evaluator: Optional[MfaPostureEvaluator] = None,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.tenant = tenant
        self.catalog = DEFAULT_CATALOG if catalog is None else catalog
        self.evaluator = evaluator or MfaPostureEvaluator()
        self.max_concurrency = max_concurrency
        self.tenant_posture = _posture_or_minimum(tenant.entitlements, self.catalog)
        self.assessments: list[AccountAssessment] = []
        self.metadata: dict[str, Any] = {
            "started_at": None,
            "completed_at": None,
            "duration_seconds": 0,
            "accounts_requested": 0,
            "accounts_failed": 0,
        }

    async def _assess_one(
        self,
        account_id: str,
        fetch_account: FetchAccount,
        semaphore: asyncio.Semaphore,
    ) -> AccountAssessment:
        async with semaphore:
            try:
                signals = await fetch_account(account_id)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"[batch] Fetch failed for {account_id}: {type(e).__name__}: {e}")
                self.metadata["accounts_failed"] += 1
                assessment = failed_assessment(account_id, self.tenant, e, self.tenant_posture)
            else:
                assessment = assess_account(
                    self.tenant,
                    signals,
                    catalog=self.catalog,
                    evaluator=self.evaluator,
                    tenant_posture=self.tenant_posture,
                )
        self.assessments.append(assessment)
        return assessment

    async def run(
        self,
        account_ids: Iterable[str],
        fetch_account: FetchAccount,
    ) -> list[AccountAssessment]:
        """
        Assess every account id. Results come back in input order; the
        `assessments` attribute holds them in completion order.
        """
        ids = list(account_ids)
        self.metadata["started_at"] = time.time()
        self.metadata["accounts_requested"] = len(ids)
        logger.info(f"[batch] Assessing {len(ids)} accounts (max {self.max_concurrency} concurrent)")

        semaphore = asyncio.Semaphore(self.max_concurrency)
        results = await asyncio.gather(
            *(self._assess_one(aid, fetch_account, semaphore) for aid in ids)
        )

        self.metadata["completed_at"] = time.time()
        self.metadata["duration_seconds"] = round(
            self.metadata["completed_at"] - self.metadata["started_at"], 2
        )
        logger.info(
            f"[batch] Completed in {self.metadata['duration_seconds']}s — "
            f"{self.metadata['accounts_failed']} failed fetches"
        )
        return list(results)

    async def run_signals(self, accounts: Iterable[AccountSignals]) -> list[AccountAssessment]:
        """Assess accounts whose signals are already in memory."""
        by_id = {s.account.id: s for s in accounts}

        async def _lookup(account_id: str) -> AccountSignals:
            return by_id[account_id]

        return await self.run(list(by_id), _lookup)


def assess_all(
    tenant: TenantSignals,
    accounts: Iterable[AccountSignals],
    catalog: Optional[LicenseCatalog] = None,
) -> list[AccountAssessment]:
    """Synchronous convenience for in-memory snapshots."""
    catalog = DEFAULT_CATALOG if catalog is None else catalog
    tenant_posture = _posture_or_minimum(tenant.entitlements, catalog)
    evaluator = MfaPostureEvaluator()
    return [
        assess_account(tenant, s, catalog, evaluator, tenant_posture)
        for s in accounts
    ]
