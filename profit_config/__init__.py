"""
profit_config -- single public entrypoint for profit configuration.

Responsibility:
    Provides the runtime way to obtain configuration through
    ``get_active_config()``: organization rate defaults and the named
    bucket schemas, loaded from YAML configuration sets.

Architecture position:
    Configuration -- sits above ``profit_kernel`` / ``profit_engines`` and
    below ``profit_services``.  The kernel and engines MUST NEVER import
    from ``profit_config``.

Invariants enforced:
    - Every bucket schema in a returned configuration sums to 100% within
      the validator's tolerance.
    - Deterministic loading: the same YAML always produces the same
      configuration checksum.

Failure modes:
    - ``ConfigNotFoundError`` -- no configuration set with that name.
    - ``InvalidConfigError`` -- malformed YAML or missing keys.
    - ``InvalidBucketSchemaError`` -- a configured schema does not sum to 100%.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``PROFIT_CONFIG_TRACE`` log entry containing the config name, checksum,
    default schema and schema count.
"""

from __future__ import annotations

from pathlib import Path

from profit_config.loader import load_configuration
from profit_config.schema import ProfitConfiguration
from profit_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


def get_active_config(
    config_name: str = "default",
    config_dir: Path | None = None,
) -> ProfitConfiguration:
    """Load the named configuration set.

    Args:
        config_name: File stem of the configuration set (``<name>.yaml``).
        config_dir: Override path to the configuration sets directory.
            Defaults to profit_config/sets/.

    Returns:
        ProfitConfiguration whose bucket schemas have all been validated.

    Raises:
        ConfigNotFoundError: If no ``<config_name>.yaml`` exists.
        InvalidConfigError: If the file is malformed.
        InvalidBucketSchemaError: If a schema does not sum to 100%.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    config = load_configuration(sets_dir / f"{config_name}.yaml")

    _logger.info(
        "PROFIT_CONFIG_TRACE",
        extra={
            "trace_type": "PROFIT_CONFIG_TRACE",
            "config_name": config.name,
            "checksum": config.checksum,
            "default_bucket_schema": config.default_bucket_schema,
            "bucket_schema_count": len(config.bucket_schemas),
        },
    )
    return config


__all__ = ["ProfitConfiguration", "get_active_config"]
