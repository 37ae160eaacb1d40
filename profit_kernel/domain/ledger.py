"""
Ledger -- immutable input records for one job's profit calculation.

Responsibility:
    Frozen value objects for the job ledger (change orders, purchases,
    labor, travel, payments) and the organization-wide rate defaults.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Constructed by the boundary layer (``profit_services.serialization``)
    or directly by callers; consumed read-only by ``profit_engines``.

Invariants enforced:
    - Every numeric field is a finite Decimal after construction; ints and
      decimal strings are coerced, floats are rejected.
    - Collection fields are stored as tuples so a ledger cannot be mutated
      after it is handed to the calculator.

Failure modes:
    - InvalidAmountError from ``__post_init__`` on non-decimal input.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from profit_kernel.domain.values import (
    ZERO,
    percent_of,
    to_decimal,
    to_optional_decimal,
)


def _coerce(obj: object, *field_names: str) -> None:
    for name in field_names:
        object.__setattr__(obj, name, to_decimal(getattr(obj, name), name))


def _coerce_optional(obj: object, *field_names: str) -> None:
    for name in field_names:
        object.__setattr__(obj, name, to_optional_decimal(getattr(obj, name), name))


def _freeze(obj: object, *field_names: str) -> None:
    for name in field_names:
        value: Iterable = getattr(obj, name)
        if not isinstance(value, tuple):
            object.__setattr__(obj, name, tuple(value))


@dataclass(frozen=True)
class ChangeOrder:
    """A revenue adjustment; negative amounts are credits."""

    amount: Decimal

    def __post_init__(self) -> None:
        _coerce(self, "amount")


@dataclass(frozen=True)
class PurchaseLine:
    """One line of a supplier purchase."""

    quantity: Decimal
    unit_cost: Decimal

    def __post_init__(self) -> None:
        _coerce(self, "quantity", "unit_cost")

    @property
    def extension(self) -> Decimal:
        """Line total (quantity x unit cost)."""
        return self.quantity * self.unit_cost


@dataclass(frozen=True)
class Purchase:
    """
    A single supplier purchase event.

    Contract:
        Cost is shipping plus the sum of line extensions.
    """

    shipping_cost: Decimal
    lines: tuple[PurchaseLine, ...] = ()

    def __post_init__(self) -> None:
        _coerce(self, "shipping_cost")
        _freeze(self, "lines")

    @property
    def total_cost(self) -> Decimal:
        lines_total = sum((line.extension for line in self.lines), ZERO)
        return lines_total + self.shipping_cost


@dataclass(frozen=True)
class LaborEntry:
    """
    Labor charged to a job.

    ``units`` is hours or days depending on ``kind``; the kind is a label
    only and never changes the arithmetic.
    """

    rate: Decimal
    units: Decimal
    kind: str | None = None

    def __post_init__(self) -> None:
        _coerce(self, "rate", "units")

    @property
    def cost(self) -> Decimal:
        return self.rate * self.units


@dataclass(frozen=True)
class TravelEntry:
    """Travel charged to a job. Mileage and per diem are priced with org rates."""

    miles: Decimal = ZERO
    per_diem_days: Decimal = ZERO
    lodging: Decimal = ZERO
    other: Decimal = ZERO

    def __post_init__(self) -> None:
        _coerce(self, "miles", "per_diem_days", "lodging", "other")


@dataclass(frozen=True)
class Payment:
    """
    A received payment and the processing fee it incurred.

    Contract:
        ``fee_pct`` and ``fee_flat`` are independent and optional; a
        payment with neither contributes no fee.  An explicit zero is a
        present zero.
    """

    amount: Decimal
    fee_pct: Decimal | None = None
    fee_flat: Decimal | None = None

    def __post_init__(self) -> None:
        _coerce(self, "amount")
        _coerce_optional(self, "fee_pct", "fee_flat")

    @property
    def processing_fee(self) -> Decimal:
        fee = ZERO
        if self.fee_pct is not None:
            fee += percent_of(self.amount, self.fee_pct)
        if self.fee_flat is not None:
            fee += self.fee_flat
        return fee


@dataclass(frozen=True)
class JobLedger:
    """
    One job's full transactional history at calculation time.

    Attributes:
        quote_total: Contracted price before change orders
        change_orders: Revenue adjustments (may be negative)
        purchases: Supplier purchases (materials + shipping)
        labor_entries: Labor charged to the job
        travel_entries: Travel charged to the job
        payments: Payments received, with processing fees
        overhead_override_pct: Replaces the org overhead percent when set
        warranty_reserve_pct: Replaces the default 3% reserve when set
    """

    quote_total: Decimal
    change_orders: tuple[ChangeOrder, ...] = ()
    purchases: tuple[Purchase, ...] = ()
    labor_entries: tuple[LaborEntry, ...] = ()
    travel_entries: tuple[TravelEntry, ...] = ()
    payments: tuple[Payment, ...] = ()
    overhead_override_pct: Decimal | None = None
    warranty_reserve_pct: Decimal | None = None

    def __post_init__(self) -> None:
        _coerce(self, "quote_total")
        _coerce_optional(self, "overhead_override_pct", "warranty_reserve_pct")
        _freeze(
            self,
            "change_orders",
            "purchases",
            "labor_entries",
            "travel_entries",
            "payments",
        )


@dataclass(frozen=True)
class OrgDefaults:
    """Organization-wide rates. Only overhead can be overridden per job."""

    overhead_percent: Decimal
    mileage_rate_per_mile: Decimal
    per_diem_per_day: Decimal

    def __post_init__(self) -> None:
        _coerce(self, "overhead_percent", "mileage_rate_per_mile", "per_diem_per_day")
