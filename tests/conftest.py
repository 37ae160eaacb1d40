"""
Pytest fixtures for the profit engine test suite.

Provides:
- Organization defaults and the default bucket schema
- The reference job ledger (Smith residence)
- Deterministic clock and loaded configuration
- Structured log capture
"""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from profit_config import get_active_config
from profit_kernel.domain.buckets import BucketDef
from profit_kernel.domain.clock import DeterministicClock
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
from profit_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture profit_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, org_defaults):
            calculate_job_profit(job, org_defaults, schema)
            logs = captured_logs()
            assert any(r["message"] == "job_profit_calculation_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("profit_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def org_defaults() -> OrgDefaults:
    """15% overhead, $0.70/mile, $30/day per diem."""
    return OrgDefaults(
        overhead_percent=Decimal("15"),
        mileage_rate_per_mile=Decimal("0.70"),
        per_diem_per_day=Decimal("30.00"),
    )


@pytest.fixture
def default_schema() -> tuple[BucketDef, ...]:
    """The eleven-bucket default allocation; Owner Pay is split two ways."""
    return (
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


@pytest.fixture
def reference_job() -> JobLedger:
    """
    Smith residence.

    revenue 13000, material 898, labor 600, travel 114, fees 181.55,
    reserve 390, overhead 1950 -> fully loaded profit 8866.45.
    """
    return JobLedger(
        quote_total=Decimal("12500.00"),
        change_orders=(ChangeOrder(Decimal("500.00")),),
        purchases=(
            Purchase(
                shipping_cost=Decimal("150.00"),
                lines=(
                    PurchaseLine(Decimal("200.0"), Decimal("2.90")),
                    PurchaseLine(Decimal("4.0"), Decimal("42.00")),
                ),
            ),
        ),
        labor_entries=(
            LaborEntry(Decimal("300.00"), Decimal("2.0"), kind="daily"),
            LaborEntry(Decimal("0.00"), Decimal("10.0"), kind="hourly"),
        ),
        travel_entries=(
            TravelEntry(miles=Decimal("120.0"), per_diem_days=Decimal("1.0")),
        ),
        payments=(
            Payment(Decimal("6250.00"), fee_pct=Decimal("2.9"), fee_flat=Decimal("0.30")),
        ),
        warranty_reserve_pct=Decimal("3.0"),
    )


# =============================================================================
# Clock and configuration fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock()


@pytest.fixture
def default_config():
    """The shipped ``default`` configuration set."""
    return get_active_config()
