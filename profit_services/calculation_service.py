"""
profit_services.calculation_service -- Job profit calculation and finalization.

Responsibility:
    Glue between configuration and the pure engines: resolve org defaults
    and a bucket schema from a ``ProfitConfiguration``, run the profit
    calculator, accept newly authored bucket schemas, and produce the
    immutable allocation snapshot taken when a job is finalized.

Architecture position:
    Services -- orchestration over engines + config.  Holds no mutable
    state besides the configuration it was given (replaced wholesale when
    a schema is authored).  Never persists anything.

Invariants enforced:
    - A schema authored through this service has passed the bucket schema
      validator; the rejection reason is the validator's message verbatim.
    - Snapshot timestamps come from the injected Clock, never the system
      time directly.

Failure modes:
    - BucketSchemaNotFoundError when the named (or default) schema is not
      configured.
    - InvalidBucketSchemaError when an authored schema does not sum to 100%.
    - InvalidPayloadError / InvalidAmountError from ``calculate_payload``
      on malformed request payloads.

Usage:
    from profit_config import get_active_config
    from profit_services.calculation_service import ProfitCalculationService

    service = ProfitCalculationService(get_active_config())
    result = service.calculate(ledger)
    snapshot = service.finalize("JOB-001", ledger)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from profit_config.schema import ProfitConfiguration
from profit_engines.bucket_schema import validate_bucket_schema
from profit_engines.job_profit import CalculationResult, calculate_job_profit
from profit_kernel.domain.buckets import BucketDef, BucketSchema
from profit_kernel.domain.clock import Clock, SystemClock
from profit_kernel.domain.ledger import JobLedger
from profit_kernel.logging_config import LogContext, get_logger
from profit_services.serialization import (
    bucket_schema_from_payload,
    ledger_from_payload,
    org_defaults_from_payload,
    result_to_payload,
)
from profit_services.snapshot import AllocationSnapshot

logger = get_logger("services.calculation")


class ProfitCalculationService:
    """
    Calculates job profit against configured org defaults and bucket schemas.

    Contract:
        Receives a ProfitConfiguration and an optional Clock via
        constructor injection.
    Guarantees:
        - ``calculate`` is a pure function of the ledger and the current
          configuration.
        - ``finalize`` returns a frozen AllocationSnapshot stamped by the
          clock.
    Non-goals:
        - Does not load or store jobs, schemas or snapshots.
        - Does not lock the ledger; the caller's transaction does.
    """

    def __init__(self, config: ProfitConfiguration, clock: Clock | None = None):
        self._config = config
        self._clock = clock or SystemClock()

    @property
    def config(self) -> ProfitConfiguration:
        return self._config

    def calculate(
        self,
        ledger: JobLedger,
        bucket_schema_name: str | None = None,
        job_id: str | None = None,
    ) -> CalculationResult:
        """Run the profit calculator with configured defaults and schema."""
        schema_name = self._config.resolve_bucket_schema_name(bucket_schema_name)
        schema = self._config.bucket_schemas[schema_name]

        with LogContext.bind(job_id=job_id, bucket_schema=schema_name):
            return calculate_job_profit(ledger, self._config.org_defaults, schema)

    def calculate_payload(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """
        Request/response entry point over plain payloads.

        ``payload`` holds ``job`` and optionally ``orgSettings`` and
        ``bucketSet`` (an explicit list) or ``bucketSchema`` (a configured
        name).  Omitted parts fall back to the configuration.  The explicit
        ``bucketSet`` is allocated against as given, without validation.
        """
        ledger = ledger_from_payload(payload.get("job"))

        if payload.get("orgSettings") is not None:
            org = org_defaults_from_payload(payload["orgSettings"])
        else:
            org = self._config.org_defaults

        if payload.get("bucketSet") is not None:
            schema_name = "<request>"
            schema = bucket_schema_from_payload(payload["bucketSet"])
        else:
            schema_name = self._config.resolve_bucket_schema_name(
                payload.get("bucketSchema")
            )
            schema = self._config.bucket_schemas[schema_name]

        job_id = payload.get("jobId")
        with LogContext.bind(
            job_id=str(job_id) if job_id is not None else None,
            bucket_schema=schema_name,
        ):
            result = calculate_job_profit(ledger, org, schema)
        return result_to_payload(result)

    def author_bucket_schema(
        self,
        name: str,
        buckets: Sequence[BucketDef],
        make_default: bool = False,
    ) -> ProfitConfiguration:
        """
        Create or replace a named bucket schema.

        Raises:
            InvalidBucketSchemaError: if the percentages do not sum to 100%
                (the validator's message is carried verbatim).
        """
        schema: BucketSchema = tuple(buckets)
        validation = validate_bucket_schema(schema)
        if not validation.is_valid:
            logger.warning("bucket_schema_rejected", extra={
                "bucket_schema": name,
                "total": str(validation.total),
                "reason": validation.error,
            })
        validation.raise_for_invalid(name)

        self._config = self._config.with_bucket_schema(name, schema, make_default)
        logger.info("bucket_schema_authored", extra={
            "bucket_schema": name,
            "bucket_count": len(schema),
            "is_default": self._config.default_bucket_schema == name,
        })
        return self._config

    def finalize(
        self,
        job_id: str,
        ledger: JobLedger,
        bucket_schema_name: str | None = None,
    ) -> AllocationSnapshot:
        """Calculate and freeze the job's allocation as a timestamped snapshot."""
        schema_name = self._config.resolve_bucket_schema_name(bucket_schema_name)
        result = self.calculate(ledger, schema_name, job_id=job_id)
        snapshot = AllocationSnapshot.from_result(
            job_id=job_id,
            bucket_schema_name=schema_name,
            taken_at=self._clock.now(),
            result=result,
        )

        with LogContext.bind(job_id=job_id, bucket_schema=schema_name):
            logger.info("allocation_snapshot_taken", extra={
                "taken_at": snapshot.taken_at,
                "profit_for_allocation": str(snapshot.profit_for_allocation),
                "bucket_count": len(snapshot.allocations),
            })
        return snapshot
