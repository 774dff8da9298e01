"""
Configuration module for the MFA Posture Engine.
Defines evaluation constants, Graph record vocabularies and runtime settings.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


# ─── Retention ──────────────────────────────────────────────────────────────

MIN_RETENTION_DAYS = 7            # Sign-in logs are always queryable this far back
PREMIUM_RETENTION_DAYS = 30       # P1 / P2 entitlement window


# ─── Policy Matching ────────────────────────────────────────────────────────

ALL_TARGET = "ALL"                # Wildcard include target on an access rule

# Graph spells the wildcard "All"; anything in this set is normalised to ALL_TARGET
GRAPH_ALL_TOKENS = {"All", "all", "ALL"}

# Grant controls that count as a strong-auth mandate
STRONG_AUTH_GRANT_CONTROLS = {"mfa"}

# Conditional access states; only "enabled" is enforcement
POLICY_STATE_ENABLED = "enabled"
POLICY_STATE_REPORT_ONLY = "enabledForReportingButNotEnforced"

# capabilityStatus values of a subscribed SKU that still grant the entitlement
ACTIVE_SKU_STATES = {"Enabled", "Warning"}


# ─── Authentication Methods ─────────────────────────────────────────────────

# Graph @odata.type suffix → StrongAuthMethod tag
GRAPH_STRONG_METHOD_TYPES = {
    "microsoftAuthenticatorAuthenticationMethod": "Authenticator",
    "fido2AuthenticationMethod": "SecurityKey",
    "phoneAuthenticationMethod": "Phone",
    "windowsHelloForBusinessAuthenticationMethod": "WindowsHello",
    "softwareOathAuthenticationMethod": "SoftwareOath",
    "hardwareOathAuthenticationMethod": "HardwareOath",
    "platformCredentialAuthenticationMethod": "PlatformCredential",
}

# Registered, but not a second factor
GRAPH_IGNORED_METHOD_TYPES = {
    "passwordAuthenticationMethod",
    "emailAuthenticationMethod",
    "temporaryAccessPassAuthenticationMethod",
}


# ─── Batch Evaluation ───────────────────────────────────────────────────────

MAX_CONCURRENT_EVALUATIONS = 8    # Bounded pool for per-account fetch + evaluate


# ─── Output Configuration ───────────────────────────────────────────────────

@dataclass
class OutputConfig:
    """Output directory and format settings."""
    base_dir: str = ""
    timestamp: str = ""
    formats: list[str] = field(default_factory=lambda: ["json", "markdown"])

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        if not self.base_dir:
            self.base_dir = os.path.join(
                os.getcwd(),
                f"mfa_posture_{self.timestamp}"
            )

    @property
    def report_dir(self) -> Path:
        return Path(self.base_dir)


@dataclass
class EngineConfig:
    """Top-level configuration for the entire engine."""
    output: OutputConfig = field(default_factory=OutputConfig)
    sku_catalog_path: Optional[str] = None  # JSON overrides for the SKU table
    max_concurrency: int = MAX_CONCURRENT_EVALUATIONS
    requested_days: Optional[int] = None    # Telemetry window the operator asked for
    verbose: bool = False

    @classmethod
    def from_file(cls, path: str) -> "EngineConfig":
        """Load configuration from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        config = cls()
        if "output" in data:
            for k, v in data["output"].items():
                if hasattr(config.output, k):
                    setattr(config.output, k, v)
        config.sku_catalog_path = data.get("sku_catalog_path")
        config.max_concurrency = int(data.get("max_concurrency", MAX_CONCURRENT_EVALUATIONS))
        config.requested_days = data.get("requested_days")
        config.verbose = data.get("verbose", False)
        return config
