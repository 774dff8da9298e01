"""
MFA Posture Engine — Command-line entry point

Usage:
    python -m mfa_posture_engine evaluate snapshot.json
    python -m mfa_posture_engine evaluate snapshot.json --days 30 --formats json
    python -m mfa_posture_engine evaluate snapshot.json --catalog skus.json --verbose
    python -m mfa_posture_engine catalog list [--catalog skus.json]

The snapshot is produced by the external fetcher; this tool never contacts the
directory service and is STRICTLY READ-ONLY.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from . import __version__
from .config import EngineConfig
from .evaluation import BatchAssessor
from .ingest import SnapshotError, load_snapshot
from .licensing import DEFAULT_CATALOG, LicenseCatalog
from .reporting import export_json, export_markdown
from .reporting.summary import status_counts


# ---------------------------------------------------------------------------
# Catalog sub-command
# ---------------------------------------------------------------------------

def _load_catalog(path: Optional[str]) -> LicenseCatalog:
    if path:
        return LicenseCatalog.from_file(path)
    return DEFAULT_CATALOG


def _cmd_catalog(args: argparse.Namespace) -> int:
    """Handle `catalog list`."""
    try:
        catalog = _load_catalog(args.catalog)
    except (OSError, ValueError) as e:
        print(f"\n❌ Cannot load SKU catalog: {e}")
        return 1
    print(f"\n  {'SKU':<40s} {'Tier':<8s} {'Days':>4s}  {'Display Name'}")
    print(f"  {'─'*40} {'─'*8} {'─'*4}  {'─'*40}")
    for sku_id, info in catalog:
        print(f"  {sku_id:<40s} {info.tier.value:<8s} {info.retention_days:>4d}  {info.display_name}")
    print(f"\n  {len(catalog)} entries. Unlisted SKUs resolve to Unknown (7 days).\n")
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mfa_posture_engine",
        description="MFA posture and telemetry retention evaluation (READ-ONLY)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # --- evaluate ---
    ev = subparsers.add_parser("evaluate", help="Evaluate a fetched snapshot")
    ev.add_argument("snapshot", type=Path, help="Path to the snapshot JSON file")
    ev.add_argument(
        "--config", "-c",
        type=Path,
        help="Path to JSON configuration file",
    )
    ev.add_argument(
        "--catalog",
        type=str,
        default=None,
        help="JSON file with SKU catalog overrides",
    )
    ev.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=None,
        help="Output directory for reports (default: ./mfa_posture_<timestamp>)",
    )
    ev.add_argument(
        "--formats",
        nargs="+",
        choices=["json", "markdown"],
        default=None,
        help="Output formats to generate",
    )
    ev.add_argument(
        "--days",
        type=int,
        default=None,
        help="Telemetry window the report consumer intends to query",
    )
    ev.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Maximum accounts evaluated concurrently",
    )
    ev.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    # --- catalog ---
    cat = subparsers.add_parser("catalog", help="Inspect the SKU catalog")
    cat_sub = cat.add_subparsers(dest="catalog_action", help="Catalog actions")
    cat_list = cat_sub.add_parser("list", help="List catalog entries")
    cat_list.add_argument("--catalog", type=str, default=None, help="JSON overrides file")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> EngineConfig:
    """Build engine configuration from config file and CLI overrides."""
    if args.config and args.config.exists():
        config = EngineConfig.from_file(str(args.config))
    else:
        config = EngineConfig()

    if args.catalog:
        config.sku_catalog_path = args.catalog
    if args.output_dir:
        config.output.base_dir = str(args.output_dir)
    if args.formats:
        config.output.formats = args.formats
    if args.days is not None:
        config.requested_days = args.days
    if args.max_concurrency is not None:
        config.max_concurrency = args.max_concurrency
    config.verbose = config.verbose or args.verbose
    return config


# ---------------------------------------------------------------------------
# evaluate
# ---------------------------------------------------------------------------

async def run_evaluation(config: EngineConfig, snapshot_path: Path) -> int:
    run_id = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S") + "_" + uuid.uuid4().hex[:8]
    output_dir = config.output.report_dir

    print("=" * 70)
    print(f" MFA Posture Engine v{__version__}")
    print(" Mode: READ-ONLY — evaluation of a fetched snapshot")
    print("=" * 70)

    try:
        catalog = _load_catalog(config.sku_catalog_path)
        snapshot = load_snapshot(snapshot_path)
    except (OSError, SnapshotError, ValueError) as e:
        print(f"\n❌ Cannot load input: {e}")
        return 1

    tenant = snapshot.tenant
    tenant_name = tenant.display_name or "Unknown Tenant"
    print(f"\n📋 Run ID:   {run_id}")
    print(f"🏢 Tenant:   {tenant_name}")
    print(f"👥 Accounts: {len(snapshot.accounts)}")
    for gap in sorted(s.value for s in tenant.unavailable):
        print(f"   ⚠  Tenant signal unavailable: {gap}")

    # --- Evaluation Phase ---
    print("\n" + "=" * 70)
    print(" PHASE 1: EVALUATION")
    print("=" * 70 + "\n")
    assessor = BatchAssessor(tenant, catalog=catalog, max_concurrency=config.max_concurrency)
    assessments = await assessor.run_signals(snapshot.accounts)

    posture = assessor.tenant_posture
    print(f"  Tenant tier:       {posture.highest_tier.value}")
    print(f"  Tenant retention:  {posture.max_retention_days} days")
    for status, n in status_counts(assessments).items():
        print(f"    {status:40s} {n:5d}")

    if config.requested_days is not None:
        widest = max((a.retention.effective_days for a in assessments),
                     default=posture.max_retention_days)
        if config.requested_days > widest:
            print(f"\n  ⚠  Requested {config.requested_days} days exceeds the widest "
                  f"entitled window ({widest} days); each account's queryable window is "
                  f"clamped to its retention and reported as queryable_days.")

    # --- Reporting Phase ---
    print("\n" + "=" * 70)
    print(" PHASE 2: REPORT GENERATION")
    print("=" * 70 + "\n")
    formats = config.output.formats
    if "json" in formats:
        path = export_json(assessments, posture, output_dir, run_id, tenant_name,
                           tenant.unavailable, config.requested_days)
        print(f"  📄 JSON:       {path}")
    if "markdown" in formats:
        path = export_markdown(assessments, posture, output_dir, run_id, tenant_name,
                               config.requested_days)
        print(f"  📝 Markdown:   {path}")

    print()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    if args.command == "catalog":
        if not getattr(args, "catalog_action", None):
            print("Usage: python -m mfa_posture_engine catalog list")
            return 0
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
        return _cmd_catalog(args)

    if args.command != "evaluate":
        print("Usage: python -m mfa_posture_engine {evaluate|catalog} ...")
        return 0

    config = build_config(args)
    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run_evaluation(config, args.snapshot))


if __name__ == "__main__":
    sys.exit(main())
