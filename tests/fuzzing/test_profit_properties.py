"""
Hypothesis property tests for the profit calculator and schema validator.

Properties checked:
- Empty ledger: revenue equals quote total, profit is revenue less
  overhead and reserve
- Waterfall identities hold for arbitrary ledgers
- Profit <= 0 zeroes every bucket and keeps the bucket count
- Positive profit against a 100% schema is fully allocated
- Owner splits sum exactly to their bucket amount
- Identical inputs produce equal results
- Validator verdict matches the tolerance rule
- Floats never become amounts
"""

from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from profit_engines.bucket_schema import BUCKET_TOTAL_TOLERANCE, validate_bucket_schema
from profit_engines.job_profit import allocate_buckets, calculate_job_profit
from profit_kernel.domain.buckets import BucketDef
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
from profit_kernel.domain.values import calculation_context, to_decimal
from profit_kernel.exceptions import InvalidAmountError

ORG = OrgDefaults(
    overhead_percent=Decimal("15"),
    mileage_rate_per_mile=Decimal("0.70"),
    per_diem_per_day=Decimal("30"),
)

SCHEMA = (
    BucketDef("Taxes", Decimal("20")),
    BucketDef("Owner Pay", Decimal("10"), meta={"owners": ["Alejandro", "Jason"]}),
    BucketDef("Retained Earnings", Decimal("10")),
    BucketDef("Marketing", Decimal("15")),
    BucketDef("Payroll Growth Fund", Decimal("15")),
    BucketDef("Equipment", Decimal("12")),
    BucketDef("Tech/Software", Decimal("5")),
    BucketDef("Training", Decimal("3")),
    BucketDef("Warranty", Decimal("3")),
    BucketDef("Referrals", Decimal("2")),
    BucketDef("Flex Fund", Decimal("5")),
)

SETTINGS = settings(
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)


def money(min_value="0", max_value="99999999.99"):
    return st.decimals(
        min_value=Decimal(min_value),
        max_value=Decimal(max_value),
        places=2,
        allow_nan=False,
        allow_infinity=False,
    )


def percents(max_value="100"):
    return st.decimals(
        min_value=Decimal("0"),
        max_value=Decimal(max_value),
        places=3,
        allow_nan=False,
        allow_infinity=False,
    )


@composite
def ledgers(draw):
    """Arbitrary well-typed job ledgers."""
    purchases = draw(st.lists(
        st.builds(
            Purchase,
            shipping_cost=money(max_value="500"),
            lines=st.lists(
                st.builds(PurchaseLine, quantity=money(max_value="1000"),
                          unit_cost=money(max_value="1000")),
                max_size=4,
            ),
        ),
        max_size=3,
    ))
    return JobLedger(
        quote_total=draw(money()),
        change_orders=draw(st.lists(
            st.builds(ChangeOrder, amount=money("-50000", "50000")), max_size=4
        )),
        purchases=purchases,
        labor_entries=draw(st.lists(
            st.builds(LaborEntry, rate=money(max_value="500"), units=money(max_value="200")),
            max_size=4,
        )),
        travel_entries=draw(st.lists(
            st.builds(TravelEntry, miles=money(max_value="2000"),
                      per_diem_days=money(max_value="30"),
                      lodging=money(max_value="5000"), other=money(max_value="5000")),
            max_size=3,
        )),
        payments=draw(st.lists(
            st.builds(
                Payment,
                amount=money(),
                fee_pct=st.one_of(st.none(), percents("10")),
                fee_flat=st.one_of(st.none(), money(max_value="5")),
            ),
            max_size=3,
        )),
        overhead_override_pct=draw(st.one_of(st.none(), percents("50"))),
        warranty_reserve_pct=draw(st.one_of(st.none(), percents("10"))),
    )


class TestWaterfallProperties:

    @given(quote=money())
    @SETTINGS
    def test_empty_ledger(self, quote):
        result = calculate_job_profit(JobLedger(quote_total=quote), ORG, SCHEMA)

        assert result.revenue == quote
        assert result.total_direct_cost == 0
        assert result.payment_fees == 0
        with calculation_context():
            expected = quote - quote * Decimal("15") / 100 - quote * Decimal("3") / 100
        assert result.fully_loaded_profit == expected

    @given(job=ledgers())
    @SETTINGS
    def test_identities(self, job):
        result = calculate_job_profit(job, ORG, SCHEMA)

        with calculation_context():
            assert result.contribution_margin == (
                result.revenue
                - result.direct_material_cost
                - result.direct_labor_cost
                - result.travel_cost
            )
            assert result.fully_loaded_profit == (
                result.contribution_margin
                - result.overhead_allocation
                - result.warranty_reserve
                - result.payment_fees
            )
        assert result.profit_for_allocation == result.fully_loaded_profit
        assert len(result.bucket_allocations) == len(SCHEMA)

    @given(job=ledgers())
    @SETTINGS
    def test_idempotent(self, job):
        assert calculate_job_profit(job, ORG, SCHEMA) == calculate_job_profit(job, ORG, SCHEMA)


class TestAllocationProperties:

    @given(profit=money("-99999999.99", "0"))
    @SETTINGS
    def test_non_positive_profit_zeroes_buckets(self, profit):
        allocations = allocate_buckets(profit, SCHEMA)

        assert len(allocations) == len(SCHEMA)
        assert all(a.amount == 0 for a in allocations)
        assert [a.percent for a in allocations] == [b.percent for b in SCHEMA]

    @given(profit=money("0.01"))
    @SETTINGS
    def test_positive_profit_fully_allocated(self, profit):
        allocations = allocate_buckets(profit, SCHEMA)

        with calculation_context():
            assert sum(a.amount for a in allocations) == profit

    @given(
        profit=money("0.01"),
        first=percents("50"),
        second=percents("50"),
    )
    @SETTINGS
    def test_within_a_cent_per_bucket(self, profit, first, second):
        schema = (
            BucketDef("A", first),
            BucketDef("B", second),
            BucketDef("C", Decimal("100") - first - second),
        )

        allocations = allocate_buckets(profit, schema)

        with calculation_context():
            total = sum(a.amount for a in allocations)
        assert abs(total - profit) <= Decimal("0.01") * len(schema)

    @given(
        profit=money("0.01"),
        owners=st.lists(st.text(min_size=1, max_size=12), min_size=1, max_size=7),
    )
    @SETTINGS
    def test_owner_split_sums_exactly(self, profit, owners):
        schema = (BucketDef("Partners", Decimal("100"), meta={"owners": owners}),)

        allocation = allocate_buckets(profit, schema)[0]

        split = allocation.meta.owner_amounts
        assert [oa.name for oa in split] == owners
        with calculation_context():
            assert sum(oa.amount for oa in split) == allocation.amount
        assert len({oa.amount for oa in split[:-1]}) <= 1


class TestValidatorProperties:

    @given(values=st.lists(percents(), min_size=1, max_size=12))
    @SETTINGS
    def test_verdict_matches_tolerance(self, values):
        schema = tuple(BucketDef(f"B{i}", p) for i, p in enumerate(values))

        result = validate_bucket_schema(schema)

        total = sum(values, Decimal("0"))
        assert result.total == total
        assert result.is_valid == (abs(total - 100) <= BUCKET_TOTAL_TOLERANCE)
        assert (result.error is None) == result.is_valid


class TestAmountBoundary:

    @given(value=st.floats(allow_nan=True, allow_infinity=True))
    @SETTINGS
    def test_floats_rejected(self, value):
        with pytest.raises(InvalidAmountError):
            to_decimal(value, "amount")

    @given(value=st.decimals(allow_nan=False, allow_infinity=False))
    @SETTINGS
    def test_finite_decimals_accepted(self, value):
        assert to_decimal(value, "amount") is value
