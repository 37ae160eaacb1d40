"""
Typed Exception Hierarchy for the Profit Kernel.

Every error has a typed class (catch by type, not message), a ``code``
class attribute (machine-readable, API-safe), and carries its context as
attributes rather than only inside the message string.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ProfitKernelError (base)
    |
    +-- InputError
    |   +-- InvalidAmountError
    |   +-- InvalidPayloadError
    |
    +-- BucketSchemaError
    |   +-- InvalidBucketSchemaError
    |   +-- BucketSchemaNotFoundError
    |
    +-- ConfigError
        +-- ConfigNotFoundError
        +-- InvalidConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Input           | INVALID_AMOUNT              | Float, non-finite or unparseable amount
                | INVALID_PAYLOAD             | Missing key or wrong shape in a payload
----------------|-----------------------------|-----------------------------------------
Bucket schema   | INVALID_BUCKET_SCHEMA       | Percentages do not sum to 100 (+/- 0.01)
                | BUCKET_SCHEMA_NOT_FOUND     | Named schema is not configured
----------------|-----------------------------|-----------------------------------------
Config          | CONFIG_NOT_FOUND            | Configuration file/directory missing
                | INVALID_CONFIG              | Configuration file has a bad shape

The calculation engines never raise: they are total over well-typed
input.  Everything here is raised by the construction, configuration and
service layers that sit around them.

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        service.author_bucket_schema("Q3 split", buckets)
    except InvalidBucketSchemaError as e:
        # e.message is the validator's text, shown verbatim to the author
        return {"error": e.code, "total": str(e.total), "reason": e.message}
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any


class ProfitKernelError(Exception):
    """
    Base exception for all profit kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PROFIT_KERNEL_ERROR"


# Input construction


class InputError(ProfitKernelError):
    """Base exception for malformed calculation input."""

    code: str = "INPUT_ERROR"


class InvalidAmountError(InputError):
    """A monetary or percentage field could not be read as an exact decimal."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field_name: str, value: Any, reason: str | None = None):
        self.field_name = field_name
        self.value = repr(value)
        self.reason = reason or "expected Decimal, int or decimal string"
        super().__init__(
            f"Invalid amount for {field_name}: {value!r} ({self.reason})"
        )


class InvalidPayloadError(InputError):
    """A calculation payload is missing a key or has the wrong shape."""

    code: str = "INVALID_PAYLOAD"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid payload at {path}: {reason}")


# Bucket schemas


class BucketSchemaError(ProfitKernelError):
    """Base exception for bucket schema errors."""

    code: str = "BUCKET_SCHEMA_ERROR"


class InvalidBucketSchemaError(BucketSchemaError):
    """Bucket percentages do not sum to 100%."""

    code: str = "INVALID_BUCKET_SCHEMA"

    def __init__(self, schema_name: str, total: Decimal, message: str):
        self.schema_name = schema_name
        self.total = total
        self.message = message
        super().__init__(message)


class BucketSchemaNotFoundError(BucketSchemaError):
    """No bucket schema with the given name is configured."""

    code: str = "BUCKET_SCHEMA_NOT_FOUND"

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        super().__init__(f"Bucket schema not found: {schema_name}")


# Configuration


class ConfigError(ProfitKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class ConfigNotFoundError(ConfigError):
    """Configuration file or directory does not exist."""

    code: str = "CONFIG_NOT_FOUND"

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Configuration not found: {path}")


class InvalidConfigError(ConfigError):
    """Configuration file could not be parsed into the expected shape."""

    code: str = "INVALID_CONFIG"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration {path}: {reason}")
