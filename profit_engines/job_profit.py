"""
Module: profit_engines.job_profit
Responsibility:
    Derive a job's layered cost/profit breakdown from its ledger and the
    organization's rate defaults, then distribute the resulting profit
    across a named percentage bucket schema.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import profit_kernel (domain values and logging) and sibling
    engine modules.

Invariants enforced:
    - Waterfall order: revenue -> direct costs -> overhead/reserve/fees ->
      margin.  Each figure depends only on the ones before it.
    - Decimal-only arithmetic under ``calculation_context()``; nothing is
      rounded or routed through float.
    - Profit for allocation equals fully loaded profit (no floor).
    - When profit for allocation <= 0 every bucket receives exactly zero,
      and every bucket is still emitted.
    - Owner-split amounts sum exactly to their bucket's amount.
    - Determinism: identical inputs produce equal results.

Failure modes:
    - None.  The calculator is total over well-typed input; shape and
      range checks happen when the ledger is constructed.

Usage:
    from profit_engines.job_profit import calculate_job_profit

    result = calculate_job_profit(job, org, schema)
    result.fully_loaded_profit
    result.bucket_allocations[0].amount
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from profit_engines.rates import (
    resolve_overhead_percent,
    resolve_warranty_reserve_percent,
)
from profit_engines.tracer import traced_engine
from profit_kernel.domain.buckets import (
    BucketAllocation,
    BucketDef,
    BucketMeta,
    OwnerAmount,
)
from profit_kernel.domain.ledger import (
    ChangeOrder,
    JobLedger,
    LaborEntry,
    OrgDefaults,
    Payment,
    Purchase,
    TravelEntry,
)
from profit_kernel.domain.values import ZERO, calculation_context, percent_of
from profit_kernel.logging_config import get_logger

logger = get_logger("engines.job_profit")


@dataclass(frozen=True)
class CalculationResult:
    """
    Complete profit breakdown for one job.

    Contract:
        Frozen dataclass created fresh on every invocation.  No field is
        omitted even when zero.
    Guarantees:
        - ``contribution_margin == revenue - direct_material_cost
          - direct_labor_cost - travel_cost``.
        - ``fully_loaded_profit == contribution_margin - overhead_allocation
          - warranty_reserve - payment_fees``.
        - ``profit_for_allocation == fully_loaded_profit``.
    Non-goals:
        - Carries no snapshot identity or timestamp; see
          ``profit_services.calculation_service.AllocationSnapshot``.
    """

    revenue: Decimal
    direct_material_cost: Decimal
    direct_labor_cost: Decimal
    travel_cost: Decimal
    payment_fees: Decimal
    warranty_reserve: Decimal
    overhead_allocation: Decimal
    contribution_margin: Decimal
    fully_loaded_profit: Decimal
    profit_for_allocation: Decimal
    bucket_allocations: tuple[BucketAllocation, ...]

    @property
    def total_direct_cost(self) -> Decimal:
        """Materials + labor + travel."""
        with calculation_context():
            return self.direct_material_cost + self.direct_labor_cost + self.travel_cost

    @property
    def total_allocated(self) -> Decimal:
        """Sum of every bucket amount."""
        with calculation_context():
            return sum((b.amount for b in self.bucket_allocations), ZERO)


# ============================================================================
# Waterfall steps
# ============================================================================


def calculate_revenue(quote_total: Decimal, change_orders: Sequence[ChangeOrder]) -> Decimal:
    """Quote total plus every change order; credits reduce revenue with no floor."""
    return quote_total + sum((co.amount for co in change_orders), ZERO)


def calculate_direct_material_cost(purchases: Sequence[Purchase]) -> Decimal:
    """Sum of line extensions plus shipping, over all purchases."""
    return sum((p.total_cost for p in purchases), ZERO)


def calculate_direct_labor_cost(labor_entries: Sequence[LaborEntry]) -> Decimal:
    return sum((entry.cost for entry in labor_entries), ZERO)


def calculate_travel_cost(
    travel_entries: Sequence[TravelEntry],
    org: OrgDefaults,
) -> Decimal:
    """
    Mileage and per diem priced at org rates, plus lodging and other.

    Travel entries carry no per-entry rate override.
    """
    total = ZERO
    for entry in travel_entries:
        mileage_cost = entry.miles * org.mileage_rate_per_mile
        per_diem_cost = entry.per_diem_days * org.per_diem_per_day
        total += mileage_cost + per_diem_cost + entry.lodging + entry.other
    return total


def calculate_payment_fees(payments: Sequence[Payment]) -> Decimal:
    return sum((p.processing_fee for p in payments), ZERO)


# ============================================================================
# Bucket allocation
# ============================================================================


def _split_among_owners(amount: Decimal, owners: Sequence[str]) -> tuple[OwnerAmount, ...]:
    """Equal split in owner order; the last owner absorbs any division residue."""
    if not owners:
        return ()

    share = amount / Decimal(len(owners))
    last_index = len(owners) - 1
    allocated_so_far = ZERO
    split: list[OwnerAmount] = []

    for i, name in enumerate(owners):
        if i == last_index:
            owner_amount = amount - allocated_so_far
        else:
            owner_amount = share
            allocated_so_far += share
        split.append(OwnerAmount(name=name, amount=owner_amount))

    return tuple(split)


def _enrich_meta(meta: BucketMeta | None, amount: Decimal) -> BucketMeta | None:
    if meta is None or not meta.has_owners:
        return meta
    return replace(meta, owner_amounts=_split_among_owners(amount, meta.owners))


def allocate_buckets(
    profit_for_allocation: Decimal,
    schema: Sequence[BucketDef],
) -> tuple[BucketAllocation, ...]:
    """
    Distribute profit across a bucket schema.

    Pure function.  Tolerates any schema, including one whose percentages
    do not sum to 100; validation is the caller's concern.

    Postconditions:
        - One allocation per bucket definition, in schema order.
        - ``profit_for_allocation <= 0``: every amount is exactly zero and
          meta passes through unenriched.
        - Otherwise ``amount == profit_for_allocation * percent / 100`` and
          buckets whose meta carries ``owners`` get ``owner_amounts``.
    """
    with calculation_context():
        if profit_for_allocation <= ZERO:
            return tuple(
                BucketAllocation(
                    name=bucket.name,
                    percent=bucket.percent,
                    amount=ZERO,
                    meta=bucket.meta,
                )
                for bucket in schema
            )

        allocations: list[BucketAllocation] = []
        for bucket in schema:
            amount = percent_of(profit_for_allocation, bucket.percent)
            allocations.append(
                BucketAllocation(
                    name=bucket.name,
                    percent=bucket.percent,
                    amount=amount,
                    meta=_enrich_meta(bucket.meta, amount),
                )
            )
        return tuple(allocations)


# ============================================================================
# Profit calculator
# ============================================================================


@traced_engine("job_profit", "1.0", fingerprint_fields=("job", "org", "schema"))
def calculate_job_profit(
    job: JobLedger,
    org: OrgDefaults,
    schema: Sequence[BucketDef],
) -> CalculationResult:
    """
    Calculate a job's profit waterfall and bucket allocation.

    Pure function - no side effects, no I/O, deterministic output.

    Args:
        job: The job's full ledger at calculation time
        org: Organization-wide rate defaults
        schema: Ordered bucket definitions to allocate against

    Returns:
        CalculationResult with every waterfall figure and one allocation
        per bucket definition
    """
    t0 = time.monotonic()
    logger.info("job_profit_calculation_started", extra={
        "quote_total": str(job.quote_total),
        "change_order_count": len(job.change_orders),
        "purchase_count": len(job.purchases),
        "labor_entry_count": len(job.labor_entries),
        "travel_entry_count": len(job.travel_entries),
        "payment_count": len(job.payments),
        "bucket_count": len(schema),
    })

    with calculation_context():
        revenue = calculate_revenue(job.quote_total, job.change_orders)
        direct_material_cost = calculate_direct_material_cost(job.purchases)
        direct_labor_cost = calculate_direct_labor_cost(job.labor_entries)
        travel_cost = calculate_travel_cost(job.travel_entries, org)
        payment_fees = calculate_payment_fees(job.payments)

        warranty_reserve_pct = resolve_warranty_reserve_percent(job)
        warranty_reserve = percent_of(revenue, warranty_reserve_pct)

        overhead_pct = resolve_overhead_percent(job, org)
        overhead_allocation = percent_of(revenue, overhead_pct)

        contribution_margin = (
            revenue - direct_material_cost - direct_labor_cost - travel_cost
        )
        fully_loaded_profit = (
            contribution_margin - overhead_allocation - warranty_reserve - payment_fees
        )
        profit_for_allocation = fully_loaded_profit

    bucket_allocations = allocate_buckets(profit_for_allocation, schema)

    result = CalculationResult(
        revenue=revenue,
        direct_material_cost=direct_material_cost,
        direct_labor_cost=direct_labor_cost,
        travel_cost=travel_cost,
        payment_fees=payment_fees,
        warranty_reserve=warranty_reserve,
        overhead_allocation=overhead_allocation,
        contribution_margin=contribution_margin,
        fully_loaded_profit=fully_loaded_profit,
        profit_for_allocation=profit_for_allocation,
        bucket_allocations=bucket_allocations,
    )

    duration_ms = round((time.monotonic() - t0) * 1000, 2)
    logger.info("job_profit_calculation_completed", extra={
        "revenue": str(revenue),
        "contribution_margin": str(contribution_margin),
        "fully_loaded_profit": str(fully_loaded_profit),
        "overhead_pct": str(overhead_pct),
        "warranty_reserve_pct": str(warranty_reserve_pct),
        "total_allocated": str(result.total_allocated),
        "loss_allocation": profit_for_allocation <= ZERO,
        "duration_ms": duration_ms,
    })

    return result
