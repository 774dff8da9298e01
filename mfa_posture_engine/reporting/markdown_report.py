"""
Markdown posture summary — Rendered via Jinja2.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..evaluation.mfa import MfaStatus
from .summary import accounts_with_status, enforced_count, status_counts

TEMPLATE_DIR = Path(__file__).parent / "templates"

_STATUS_ICONS = {
    MfaStatus.PROTECTED_BY_SYSTEM_DEFAULT.value: "🟢",
    MfaStatus.PROTECTED_BY_RULE.value: "🟢",
    MfaStatus.PROTECTED_BY_REGISTERED_METHOD_ONLY.value: "🟡",
    MfaStatus.NOT_PROTECTED.value: "🔴",
    MfaStatus.INDETERMINATE.value: "⚪",
}


def render_markdown(
    assessments: list,
    tenant_posture: Any,
    run_id: str,
    tenant_name: str = "Unknown Tenant",
    requested_days: Optional[int] = None,
) -> str:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape([]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    template = env.get_template("posture_summary.md.j2")
    return template.render(
        run_id=run_id,
        tenant_name=tenant_name,
        generated_utc=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
        tenant_posture=tenant_posture,
        counts=status_counts(assessments),
        enforced=enforced_count(assessments),
        total=len(assessments),
        status_icons=_STATUS_ICONS,
        not_protected=accounts_with_status(assessments, MfaStatus.NOT_PROTECTED),
        method_only=accounts_with_status(assessments, MfaStatus.PROTECTED_BY_REGISTERED_METHOD_ONLY),
        indeterminate=accounts_with_status(assessments, MfaStatus.INDETERMINATE),
        assessments=sorted(assessments, key=lambda a: (a.display_name or a.account_id).lower()),
        requested_days=requested_days,
    )


def export_markdown(
    assessments: list,
    tenant_posture: Any,
    output_dir: Path,
    run_id: str,
    tenant_name: str = "Unknown Tenant",
    requested_days: Optional[int] = None,
) -> Path:
    """Write the Markdown posture summary and return its path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    filepath = output_dir / f"mfa_posture_{run_id}.md"

    content = render_markdown(assessments, tenant_posture, run_id, tenant_name, requested_days)
    with open(filepath, "w", encoding="utf-8") as fh:
        fh.write(content)

    return filepath
