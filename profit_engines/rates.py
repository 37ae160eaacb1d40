"""
Rate fallback policy for per-job percentages.

Pure functions. No I/O.

Two override-or-default rules feed the profit waterfall and they differ
in kind:

- Overhead: a job override replaces the organization's configured
  overhead percent (no blending).
- Warranty reserve: a job value replaces a fixed business-policy
  constant of 3%.  The constant is not an org setting.
"""

from __future__ import annotations

from decimal import Decimal

from profit_kernel.domain.ledger import JobLedger, OrgDefaults

DEFAULT_WARRANTY_RESERVE_PERCENT = Decimal("3")


def resolve_overhead_percent(job: JobLedger, org: OrgDefaults) -> Decimal:
    """Overhead percent for the job: its override if set, else the org default."""
    if job.overhead_override_pct is not None:
        return job.overhead_override_pct
    return org.overhead_percent


def resolve_warranty_reserve_percent(job: JobLedger) -> Decimal:
    """Warranty reserve percent for the job: its own value if set, else 3%."""
    if job.warranty_reserve_pct is not None:
        return job.warranty_reserve_pct
    return DEFAULT_WARRANTY_RESERVE_PERCENT
