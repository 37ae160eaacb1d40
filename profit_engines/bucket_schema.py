"""
Bucket Schema Validator.

Pure functions with deterministic behavior. No I/O.

Checks that a bucket schema's percentages sum to 100 within a fixed
absolute tolerance of 0.01.  The tolerance absorbs repeating-decimal
splits such as thirds (33.333 / 33.333 / 33.334).

Invoked whenever a schema is authored, edited, or loaded from
configuration.  The profit calculator itself never validates; it
allocates against whatever schema it is handed.

Duplicate bucket names are NOT rejected here.  Name uniqueness is a
presentation-layer concern and is a known gap of this validator.

Usage:
    from profit_engines.bucket_schema import validate_bucket_schema

    validation = validate_bucket_schema(schema)
    if not validation.is_valid:
        print(validation.error)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from profit_kernel.domain.buckets import BucketDef
from profit_kernel.domain.values import HUNDRED, ZERO, calculation_context
from profit_kernel.exceptions import InvalidBucketSchemaError
from profit_kernel.logging_config import get_logger

logger = get_logger("engines.bucket_schema")

BUCKET_TOTAL_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class BucketSchemaValidation:
    """
    Outcome of validating one bucket schema.

    Attributes:
        is_valid: True when the total is within tolerance of 100
        total: Exact sum of every bucket percent
        error: Human-readable rejection reason, None when valid
    """

    is_valid: bool
    total: Decimal
    error: str | None = None

    def raise_for_invalid(self, schema_name: str) -> None:
        """Raise InvalidBucketSchemaError carrying the message verbatim."""
        if not self.is_valid:
            raise InvalidBucketSchemaError(
                schema_name=schema_name,
                total=self.total,
                message=self.error or "",
            )


def bucket_percent_total(schema: Sequence[BucketDef]) -> Decimal:
    """Exact decimal sum of every bucket percent."""
    with calculation_context():
        return sum((bucket.percent for bucket in schema), ZERO)


def validate_bucket_schema(schema: Sequence[BucketDef]) -> BucketSchemaValidation:
    """
    Validate that a bucket schema sums to 100% within tolerance.

    Pure function.  Never raises; invalidity is reported in the result.
    The schema is neither mutated nor reordered.
    """
    total = bucket_percent_total(schema)

    if abs(total - HUNDRED) > BUCKET_TOTAL_TOLERANCE:
        error = f"Bucket percentages must sum to 100%. Current total: {total}%"
        logger.warning("bucket_schema_invalid", extra={
            "bucket_count": len(schema),
            "total": str(total),
        })
        return BucketSchemaValidation(is_valid=False, total=total, error=error)

    logger.debug("bucket_schema_valid", extra={
        "bucket_count": len(schema),
        "total": str(total),
    })
    return BucketSchemaValidation(is_valid=True, total=total)
