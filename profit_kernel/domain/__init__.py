"""Pure domain value objects for the profit kernel."""

from profit_kernel.domain.buckets import (
    BucketAllocation,
    BucketDef,
    BucketMeta,
    BucketSchema,
    OwnerAmount,
)
from profit_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from profit_kernel.domain.ledger import (
    ChangeOrder,
    JobLedger,
    LaborEntry,
    OrgDefaults,
    Payment,
    Purchase,
    PurchaseLine,
    TravelEntry,
)
from profit_kernel.domain.values import (
    HUNDRED,
    ZERO,
    format_currency,
    format_percent,
    percent_of,
    round_money,
    to_decimal,
    to_optional_decimal,
)

__all__ = [
    "BucketAllocation",
    "BucketDef",
    "BucketMeta",
    "BucketSchema",
    "ChangeOrder",
    "Clock",
    "DeterministicClock",
    "HUNDRED",
    "JobLedger",
    "LaborEntry",
    "OrgDefaults",
    "OwnerAmount",
    "Payment",
    "Purchase",
    "PurchaseLine",
    "SystemClock",
    "TravelEntry",
    "ZERO",
    "format_currency",
    "format_percent",
    "percent_of",
    "round_money",
    "to_decimal",
    "to_optional_decimal",
]
