"""
JSON exporter — Writes per-account assessments and tenant posture to one file.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .. import __version__
from .summary import enforced_count, queryable_days, status_counts


def _account_entry(assessment, requested_days: Optional[int]) -> dict:
    entry = assessment.to_dict()
    if requested_days is not None:
        entry["queryable_days"] = queryable_days(assessment, requested_days)
    return entry


def export_json(
    assessments: list,
    tenant_posture: Any,
    output_dir: Path,
    run_id: str,
    tenant_name: str = "Unknown Tenant",
    tenant_unavailable: Any = (),
    requested_days: Optional[int] = None,
) -> Path:
    """
    Write the full evaluation to a JSON file. When `requested_days` is given,
    each account also carries `queryable_days`, the request clamped to its
    retention window.

    Returns:
        Path to the created JSON file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    payload = {
        "metadata": {
            "engine": "MFA Posture Engine",
            "version": __version__,
            "run_id": run_id,
            "tenant": tenant_name,
            "generated_utc": datetime.now(timezone.utc).isoformat(),
            "mode": "READ-ONLY",
        },
        "tenant_posture": tenant_posture.to_dict(),
        "tenant_unavailable_signals": sorted(s.value for s in tenant_unavailable),
        "status_counts": status_counts(assessments),
        "enforced_count": enforced_count(assessments),
        "requested_days": requested_days,
        "accounts": [_account_entry(a, requested_days) for a in assessments],
    }

    filepath = output_dir / f"mfa_posture_{run_id}.json"
    with open(filepath, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, default=str, ensure_ascii=False)

    return filepath
