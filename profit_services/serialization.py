"""
Payload codec for the calculation boundary.

Responsibility:
    Turns request payloads (camelCase mappings, as decoded from JSON or
    YAML) into kernel value objects, and turns results back into
    payloads.  Every Decimal leaves as a decimal string, never a float,
    so no precision is lost at the boundary.

Architecture position:
    Services -- the input-construction layer in front of the engines.
    Shape checks live here so the engines can stay total.

Failure modes:
    - InvalidPayloadError on a missing key or wrong container shape,
      with the dotted path of the offending value.
    - InvalidAmountError on a float or unparseable number.

Usage:
    payload = decimal_json_loads(request_body)
    ledger = ledger_from_payload(payload["job"])
    ...
    return decimal_json_dumps(result_to_payload(result))
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any

from profit_engines.job_profit import CalculationResult
from profit_kernel.domain.buckets import BucketAllocation, BucketDef, BucketSchema
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
from profit_kernel.domain.values import to_decimal, to_optional_decimal
from profit_kernel.exceptions import InvalidPayloadError
from profit_services.snapshot import AllocationSnapshot

# ============================================================================
# Shape helpers
# ============================================================================


def _mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise InvalidPayloadError(path, f"expected an object, got {type(value).__name__}")
    return value


def _sequence(value: Any, path: str) -> Sequence[Any]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise InvalidPayloadError(path, f"expected a list, got {type(value).__name__}")
    return value


def _required(data: Mapping[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise InvalidPayloadError(f"{path}.{key}", "required field is missing")
    return data[key]


def _amount(data: Mapping[str, Any], key: str, path: str) -> Decimal:
    return to_decimal(_required(data, key, path), f"{path}.{key}")


def _optional_amount(data: Mapping[str, Any], key: str, path: str) -> Decimal | None:
    return to_optional_decimal(data.get(key), f"{path}.{key}")


def _items(data: Mapping[str, Any], key: str, path: str) -> list[tuple[str, Mapping[str, Any]]]:
    """``(item_path, item)`` pairs for an optional list-of-objects field."""
    raw = data.get(key)
    if raw is None:
        return []
    items = _sequence(raw, f"{path}.{key}")
    return [
        (f"{path}.{key}[{i}]", _mapping(item, f"{path}.{key}[{i}]"))
        for i, item in enumerate(items)
    ]


# ============================================================================
# Payload -> value objects
# ============================================================================


def ledger_from_payload(payload: Any, path: str = "job") -> JobLedger:
    """Build a JobLedger from a ``job`` payload."""
    data = _mapping(payload, path)

    purchases = []
    for p_path, p in _items(data, "purchases", path):
        lines = tuple(
            PurchaseLine(
                quantity=_amount(line, "quantity", l_path),
                unit_cost=_amount(line, "unitCost", l_path),
            )
            for l_path, line in _items(p, "lines", p_path)
        )
        purchases.append(
            Purchase(shipping_cost=_amount(p, "shippingCost", p_path), lines=lines)
        )

    labor_entries = []
    for e_path, e in _items(data, "laborEntries", path):
        kind = e.get("kind")
        if kind is not None and not isinstance(kind, str):
            raise InvalidPayloadError(f"{e_path}.kind", "expected a string")
        labor_entries.append(
            LaborEntry(
                rate=_amount(e, "rate", e_path),
                units=_amount(e, "units", e_path),
                kind=kind,
            )
        )

    return JobLedger(
        quote_total=_amount(data, "quoteTotal", path),
        change_orders=tuple(
            ChangeOrder(amount=_amount(co, "amount", co_path))
            for co_path, co in _items(data, "changeOrders", path)
        ),
        purchases=tuple(purchases),
        labor_entries=tuple(labor_entries),
        travel_entries=tuple(
            TravelEntry(
                miles=_amount(t, "miles", t_path),
                per_diem_days=_amount(t, "perDiemDays", t_path),
                lodging=_amount(t, "lodging", t_path),
                other=_amount(t, "other", t_path),
            )
            for t_path, t in _items(data, "travelEntries", path)
        ),
        payments=tuple(
            Payment(
                amount=_amount(pm, "amount", pm_path),
                fee_pct=_optional_amount(pm, "feePct", pm_path),
                fee_flat=_optional_amount(pm, "feeFlat", pm_path),
            )
            for pm_path, pm in _items(data, "payments", path)
        ),
        overhead_override_pct=_optional_amount(data, "overheadOverridePct", path),
        warranty_reserve_pct=_optional_amount(data, "warrantyReservePct", path),
    )


def org_defaults_from_payload(payload: Any, path: str = "orgSettings") -> OrgDefaults:
    data = _mapping(payload, path)
    return OrgDefaults(
        overhead_percent=_amount(data, "overheadPercent", path),
        mileage_rate_per_mile=_amount(data, "mileageRatePerMile", path),
        per_diem_per_day=_amount(data, "perDiemPerDay", path),
    )


def bucket_schema_from_payload(payload: Any, path: str = "bucketSet") -> BucketSchema:
    """Build an ordered bucket schema. Does not validate the 100% total."""
    buckets = []
    for i, raw in enumerate(_sequence(payload, path)):
        b_path = f"{path}[{i}]"
        data = _mapping(raw, b_path)
        name = _required(data, "name", b_path)
        if not isinstance(name, str):
            raise InvalidPayloadError(f"{b_path}.name", "expected a string")
        meta = data.get("meta")
        if meta is not None:
            meta = _mapping(meta, f"{b_path}.meta")
        buckets.append(
            BucketDef(name=name, percent=_amount(data, "percent", b_path), meta=meta)
        )
    return tuple(buckets)


# ============================================================================
# Value objects -> payload
# ============================================================================


def to_jsonable(value: Any) -> Any:
    """Recursively render Decimals and datetimes as strings."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def allocation_to_payload(allocation: BucketAllocation) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": allocation.name,
        "percent": str(allocation.percent),
        "amount": str(allocation.amount),
    }
    if allocation.meta is not None:
        payload["meta"] = to_jsonable(allocation.meta.to_mapping())
    return payload


def result_to_payload(result: CalculationResult) -> dict[str, Any]:
    """Every figure of the waterfall plus the allocation, as decimal strings."""
    return {
        "revenue": str(result.revenue),
        "directMaterialCost": str(result.direct_material_cost),
        "directLaborCost": str(result.direct_labor_cost),
        "travelCost": str(result.travel_cost),
        "paymentFees": str(result.payment_fees),
        "warrantyReserve": str(result.warranty_reserve),
        "overheadAllocation": str(result.overhead_allocation),
        "contributionMargin": str(result.contribution_margin),
        "fullyLoadedProfit": str(result.fully_loaded_profit),
        "profitForAllocation": str(result.profit_for_allocation),
        "bucketAllocations": [
            allocation_to_payload(a) for a in result.bucket_allocations
        ],
        "totals": {
            "profitForAllocation": str(result.profit_for_allocation),
            "totalAllocated": str(result.total_allocated),
        },
    }


def snapshot_to_payload(snapshot: AllocationSnapshot) -> dict[str, Any]:
    return {
        "jobId": snapshot.job_id,
        "bucketSchema": snapshot.bucket_schema_name,
        "takenAt": snapshot.taken_at.isoformat(),
        "profitForAllocation": str(snapshot.profit_for_allocation),
        "buckets": [allocation_to_payload(a) for a in snapshot.allocations],
    }


# ============================================================================
# JSON
# ============================================================================


def decimal_json_loads(text: str, source: str = "<json>") -> Any:
    """Decode JSON with every non-integer number read as an exact Decimal."""
    try:
        return json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise InvalidPayloadError(source, f"malformed JSON: {e}") from e


def decimal_json_dumps(obj: Any, **kwargs: Any) -> str:
    """Encode to JSON with Decimals rendered as strings."""
    return json.dumps(to_jsonable(obj), **kwargs)
