"""
profit_services -- boundary layer over the profit engines.

Payload parsing and serialization, configuration-backed calculation,
bucket schema authoring, and allocation snapshots at finalize time.
"""

from profit_services.calculation_service import ProfitCalculationService
from profit_services.serialization import (
    bucket_schema_from_payload,
    decimal_json_dumps,
    decimal_json_loads,
    ledger_from_payload,
    org_defaults_from_payload,
    result_to_payload,
    snapshot_to_payload,
)
from profit_services.snapshot import AllocationSnapshot

__all__ = [
    "AllocationSnapshot",
    "ProfitCalculationService",
    "bucket_schema_from_payload",
    "decimal_json_dumps",
    "decimal_json_loads",
    "ledger_from_payload",
    "org_defaults_from_payload",
    "result_to_payload",
    "snapshot_to_payload",
]
