"""
MFA Posture Engine
==================
A read-only security-posture evaluation engine for directory tenants.
Combines tenant default enforcement, conditional access rules and per-account
strong-auth registrations into one MFA verdict per account, and resolves the
telemetry retention window from license entitlements.

The engine never talks to the directory service itself. It evaluates records
that an external fetcher has already collected.
"""

__version__ = "1.0.0"
__mode__ = "READ-ONLY"
