"""
Module: profit_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for higher
    layers (profit_config, profit_services).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import profit_kernel (and sibling engine modules).
    MUST NOT import profit_config or profit_services.

Invariants enforced:
    - Purity: engines never read the clock, files, or environment.
    - Decimal-only arithmetic: floats are rejected before they reach an
      engine.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from profit_engines import calculate_job_profit, validate_bucket_schema
"""

from profit_engines.bucket_schema import (
    BUCKET_TOTAL_TOLERANCE,
    BucketSchemaValidation,
    bucket_percent_total,
    validate_bucket_schema,
)
from profit_engines.job_profit import (
    CalculationResult,
    allocate_buckets,
    calculate_direct_labor_cost,
    calculate_direct_material_cost,
    calculate_job_profit,
    calculate_payment_fees,
    calculate_revenue,
    calculate_travel_cost,
)
from profit_engines.rates import (
    DEFAULT_WARRANTY_RESERVE_PERCENT,
    resolve_overhead_percent,
    resolve_warranty_reserve_percent,
)

__all__ = [
    "BUCKET_TOTAL_TOLERANCE",
    "BucketSchemaValidation",
    "CalculationResult",
    "DEFAULT_WARRANTY_RESERVE_PERCENT",
    "allocate_buckets",
    "bucket_percent_total",
    "calculate_direct_labor_cost",
    "calculate_direct_material_cost",
    "calculate_job_profit",
    "calculate_payment_fees",
    "calculate_revenue",
    "calculate_travel_cost",
    "resolve_overhead_percent",
    "resolve_warranty_reserve_percent",
    "validate_bucket_schema",
]
