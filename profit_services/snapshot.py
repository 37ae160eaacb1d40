"""
Allocation snapshot -- the immutable record taken when a job is finalized.

The snapshot freezes a calculation's bucket allocation together with the
job identity and the time it was taken.  Storing it durably is the
caller's responsibility (the persistence layer's own transaction
discipline guarantees the ledger was not modified mid-read).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from profit_engines.job_profit import CalculationResult
from profit_kernel.domain.buckets import BucketAllocation


@dataclass(frozen=True)
class AllocationSnapshot:
    """
    Immutable, timestamped copy of a job's bucket allocation.

    Attributes:
        job_id: Identity of the finalized job
        bucket_schema_name: Schema the profit was allocated against
        taken_at: Clock time the snapshot was taken (UTC)
        profit_for_allocation: Basis the allocation was computed from
        allocations: Per-bucket allocation, in schema order
    """

    job_id: str
    bucket_schema_name: str
    taken_at: datetime
    profit_for_allocation: Decimal
    allocations: tuple[BucketAllocation, ...]

    @classmethod
    def from_result(
        cls,
        job_id: str,
        bucket_schema_name: str,
        taken_at: datetime,
        result: CalculationResult,
    ) -> AllocationSnapshot:
        return cls(
            job_id=job_id,
            bucket_schema_name=bucket_schema_name,
            taken_at=taken_at,
            profit_for_allocation=result.profit_for_allocation,
            allocations=result.bucket_allocations,
        )
