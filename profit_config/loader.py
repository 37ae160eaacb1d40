"""
Configuration Loader (``profit_config.loader``).

Responsibility
--------------
Loads YAML configuration files and parses them into the typed
``profit_config.schema.ProfitConfiguration``.  Runtime callers go through
``profit_config.get_active_config()``; the functions here are the
building blocks it uses and that tests exercise directly.

Invariants enforced
-------------------
* YAML floats are read as exact ``Decimal`` values (``DecimalSafeLoader``);
  no configured rate or percentage ever passes through a binary float.
* Every bucket schema is validated at load time; a schema that does not
  sum to 100% stops the load with ``InvalidBucketSchemaError``.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``ConfigNotFoundError``.
* Malformed YAML or missing required keys  -> ``InvalidConfigError``.
* Bucket schema not summing to 100%  -> ``InvalidBucketSchemaError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from profit_config.schema import ProfitConfiguration
from profit_engines.bucket_schema import validate_bucket_schema
from profit_kernel.domain.buckets import BucketDef, BucketSchema
from profit_kernel.domain.ledger import OrgDefaults
from profit_kernel.exceptions import ConfigNotFoundError, InputError, InvalidConfigError
from profit_kernel.logging_config import get_logger

logger = get_logger("config.loader")


class DecimalSafeLoader(yaml.SafeLoader):
    """SafeLoader whose float scalars become exact Decimals."""


def _construct_decimal(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> Decimal:
    value = loader.construct_scalar(node)
    try:
        return Decimal(value.replace("_", ""))
    except InvalidOperation as e:
        raise yaml.constructor.ConstructorError(
            None, None, f"cannot read {value!r} as an exact decimal", node.start_mark
        ) from e


DecimalSafeLoader.add_constructor("tag:yaml.org,2002:float", _construct_decimal)


def load_yaml_text(text: str, source: str = "<string>") -> Any:
    """Parse YAML text with Decimal-exact floats."""
    try:
        return yaml.load(text, Loader=DecimalSafeLoader)
    except yaml.YAMLError as e:
        raise InvalidConfigError(source, str(e)) from e


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        ConfigNotFoundError: if the file does not exist.
        InvalidConfigError: if the file is not valid YAML or not a mapping.
    """
    if not path.is_file():
        raise ConfigNotFoundError(str(path))
    data = load_yaml_text(path.read_text(encoding="utf-8"), str(path)) or {}
    if not isinstance(data, dict):
        raise InvalidConfigError(str(path), "top level must be a mapping")
    return data


def parse_org_defaults(data: dict[str, Any], source: str = "<config>") -> OrgDefaults:
    """Parse OrgDefaults from the ``org_defaults`` section."""
    try:
        return OrgDefaults(
            overhead_percent=data["overhead_percent"],
            mileage_rate_per_mile=data["mileage_rate_per_mile"],
            per_diem_per_day=data["per_diem_per_day"],
        )
    except KeyError as e:
        raise InvalidConfigError(source, f"org_defaults missing {e.args[0]!r}") from e
    except TypeError as e:
        raise InvalidConfigError(source, "org_defaults must be a mapping") from e
    except InputError as e:
        raise InvalidConfigError(source, str(e)) from e


def parse_bucket_schema(
    data: dict[str, Any],
    source: str = "<config>",
) -> tuple[str, BucketSchema]:
    """
    Parse and validate one named bucket schema.

    Postconditions:
        - Returns ``(name, schema)`` where the schema sums to 100 +/- 0.01.
    Raises:
        InvalidConfigError: on missing keys or wrong shapes.
        InvalidBucketSchemaError: when the percentages do not sum to 100.
    """
    try:
        name = data["name"]
        raw_buckets = data["buckets"]
    except (KeyError, TypeError) as e:
        raise InvalidConfigError(source, f"bucket schema entry malformed: {data!r}") from e
    if not isinstance(raw_buckets, list):
        raise InvalidConfigError(source, f"buckets of {name!r} must be a list")

    buckets: list[BucketDef] = []
    for raw in raw_buckets:
        try:
            meta = raw.get("meta")
            if meta is not None and not isinstance(meta, dict):
                raise InvalidConfigError(source, f"meta of bucket {raw['name']!r} must be a mapping")
            buckets.append(BucketDef(name=raw["name"], percent=raw["percent"], meta=meta))
        except (KeyError, AttributeError) as e:
            raise InvalidConfigError(source, f"bucket entry malformed in {name!r}: {raw!r}") from e
        except InputError as e:
            raise InvalidConfigError(source, f"bucket in {name!r}: {e}") from e

    schema = tuple(buckets)
    validate_bucket_schema(schema).raise_for_invalid(name)
    return name, schema


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def build_configuration(
    data: dict[str, Any],
    name: str,
    source: str = "<config>",
) -> ProfitConfiguration:
    """Build a ProfitConfiguration from an already-parsed document."""
    if "org_defaults" not in data:
        raise InvalidConfigError(source, "missing 'org_defaults' section")
    org_defaults = parse_org_defaults(data["org_defaults"] or {}, source)

    schemas: dict[str, BucketSchema] = {}
    for entry in data.get("bucket_schemas") or []:
        schema_name, schema = parse_bucket_schema(entry, source)
        if schema_name in schemas:
            raise InvalidConfigError(source, f"duplicate bucket schema {schema_name!r}")
        schemas[schema_name] = schema

    default_schema = data.get("default_bucket_schema")
    if default_schema is None and schemas:
        default_schema = next(iter(schemas))
    if default_schema is not None and default_schema not in schemas:
        raise InvalidConfigError(
            source, f"default_bucket_schema {default_schema!r} is not defined"
        )

    return ProfitConfiguration(
        name=data.get("name", name),
        org_defaults=org_defaults,
        bucket_schemas=schemas,
        default_bucket_schema=default_schema,
        checksum=compute_checksum(data),
    )


def load_configuration(path: Path) -> ProfitConfiguration:
    """Load, validate and build the configuration stored at ``path``."""
    data = load_yaml_file(path)
    config = build_configuration(data, name=path.stem, source=str(path))
    logger.info("config_loaded", extra={
        "path": str(path),
        "config_name": config.name,
        "bucket_schema_count": len(config.bucket_schemas),
        "checksum": config.checksum,
    })
    return config
