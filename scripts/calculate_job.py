#!/usr/bin/env python3
"""
Calculate a job's profit waterfall and bucket allocation from a file.

Usage:
    python3 scripts/calculate_job.py scripts/sample_job.yaml
    python3 scripts/calculate_job.py job.json --schema "Lean Reinvestment"
    python3 scripts/calculate_job.py job.yaml --format table
    python3 scripts/calculate_job.py job.yaml --finalize JOB-001
    python3 scripts/calculate_job.py --validate-schema buckets.yaml

The job file is JSON or YAML.  It holds either a bare ``job`` object or a
full request (``job`` plus optional ``orgSettings`` / ``bucketSet`` /
``bucketSchema``).  Numbers are read as exact decimals.

Exit codes:
    0  success (or a valid schema)
    1  calculation/config error, or an invalid schema
    2  usage error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from profit_config import get_active_config
from profit_config.loader import load_yaml_text
from profit_engines.bucket_schema import validate_bucket_schema
from profit_kernel.domain.values import format_currency, format_percent, to_decimal
from profit_kernel.exceptions import ProfitKernelError
from profit_kernel.logging_config import configure_logging
from profit_services.calculation_service import ProfitCalculationService
from profit_services.serialization import (
    bucket_schema_from_payload,
    decimal_json_dumps,
    decimal_json_loads,
    ledger_from_payload,
    snapshot_to_payload,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
W = 60

_WATERFALL = (
    ("Revenue", "revenue"),
    ("Direct material", "directMaterialCost"),
    ("Direct labor", "directLaborCost"),
    ("Travel", "travelCost"),
    ("Contribution margin", "contributionMargin"),
    ("Overhead allocation", "overheadAllocation"),
    ("Warranty reserve", "warrantyReserve"),
    ("Payment fees", "paymentFees"),
    ("Fully loaded profit", "fullyLoadedProfit"),
)


def read_document(path: Path) -> Any:
    """Read a JSON or YAML file with Decimal-exact numbers."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return decimal_json_loads(text, str(path))
    return load_yaml_text(text, str(path))


def _as_request(document: Any) -> dict[str, Any]:
    if isinstance(document, dict) and "job" in document:
        return document
    return {"job": document}


def print_table(payload: dict[str, Any]) -> None:
    print("=" * W)
    for label, key in _WATERFALL:
        amount = to_decimal(payload[key], key)
        print(f"  {label:<30}{format_currency(amount):>26}")
    print("-" * W)
    for bucket in payload["bucketAllocations"]:
        percent = format_percent(to_decimal(bucket["percent"], "percent"))
        amount = format_currency(to_decimal(bucket["amount"], "amount"))
        print(f"  {bucket['name']:<30}{percent:>10}{amount:>16}")
        for owner in (bucket.get("meta") or {}).get("ownerAmounts", []):
            owner_amount = format_currency(to_decimal(owner["amount"], "amount"))
            print(f"      {owner['name']:<36}{owner_amount:>16}")
    print("=" * W)


def validate_schema_file(path: Path) -> int:
    document = read_document(path)
    raw = document.get("buckets") if isinstance(document, dict) else document
    schema = bucket_schema_from_payload(raw, path="buckets")
    validation = validate_bucket_schema(schema)
    if validation.is_valid:
        print(f"OK: {len(schema)} buckets, total {validation.total}%")
        return 0
    print(f"INVALID: {validation.error}", file=sys.stderr)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Calculate job profit and bucket allocation.",
    )
    parser.add_argument("job_file", nargs="?", type=Path, help="JSON or YAML job file")
    parser.add_argument("--config", default="default", help="Configuration set name")
    parser.add_argument("--config-dir", type=Path, default=None,
                        help="Directory holding configuration sets")
    parser.add_argument("--schema", default=None, help="Bucket schema name")
    parser.add_argument("--finalize", metavar="JOB_ID", default=None,
                        help="Emit an allocation snapshot for JOB_ID")
    parser.add_argument("--format", choices=("json", "table"), default="json")
    parser.add_argument("--validate-schema", metavar="FILE", type=Path, default=None,
                        help="Validate a bucket schema file and exit")
    parser.add_argument("--verbose", action="store_true",
                        help="Emit structured logs to stderr")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        configure_logging(level=logging.DEBUG)

    try:
        if args.validate_schema is not None:
            return validate_schema_file(args.validate_schema)

        if args.job_file is None:
            parser.print_usage(sys.stderr)
            print("error: a job file is required", file=sys.stderr)
            return 2

        config = get_active_config(args.config, args.config_dir)
        service = ProfitCalculationService(config)
        request = _as_request(read_document(args.job_file))
        if args.schema is not None:
            request["bucketSchema"] = args.schema

        if args.finalize is not None:
            ledger = ledger_from_payload(request.get("job"))
            snapshot = service.finalize(args.finalize, ledger, request.get("bucketSchema"))
            print(decimal_json_dumps(snapshot_to_payload(snapshot), indent=2))
            return 0

        payload = service.calculate_payload(request)
    except OSError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except ProfitKernelError as exc:
        print(f"ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1

    if args.format == "table":
        print_table(payload)
    else:
        print(decimal_json_dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
