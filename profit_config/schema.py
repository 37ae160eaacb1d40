"""
ProfitConfiguration schema.

The runtime configuration artifact: organization rate defaults plus the
named bucket schemas a job's profit can be allocated against.  YAML
files are parsed into these types by ``profit_config.loader``.

Every bucket schema held here has already passed the bucket schema
validator; the loader refuses to build a configuration otherwise.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from profit_kernel.domain.buckets import BucketSchema
from profit_kernel.domain.ledger import OrgDefaults
from profit_kernel.exceptions import BucketSchemaNotFoundError


@dataclass(frozen=True)
class ProfitConfiguration:
    """
    Organization defaults and named bucket schemas.

    Attributes:
        name: Configuration set name (file stem)
        org_defaults: Overhead, mileage and per diem rates
        bucket_schemas: Schema name -> ordered bucket definitions
        default_bucket_schema: Name used when a caller does not choose one
        checksum: SHA-256 of the source document, for change detection
    """

    name: str
    org_defaults: OrgDefaults
    bucket_schemas: Mapping[str, BucketSchema] = field(default_factory=dict)
    default_bucket_schema: str | None = None
    checksum: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.bucket_schemas, MappingProxyType):
            object.__setattr__(
                self, "bucket_schemas", MappingProxyType(dict(self.bucket_schemas))
            )

    @property
    def bucket_schema_names(self) -> tuple[str, ...]:
        return tuple(self.bucket_schemas)

    def resolve_bucket_schema_name(self, name: str | None = None) -> str:
        """The explicit name if given, else the configured default."""
        resolved = name or self.default_bucket_schema
        if resolved is None or resolved not in self.bucket_schemas:
            raise BucketSchemaNotFoundError(str(resolved))
        return resolved

    def bucket_schema(self, name: str | None = None) -> BucketSchema:
        """Look up a schema by name, falling back to the default schema."""
        return self.bucket_schemas[self.resolve_bucket_schema_name(name)]

    def with_bucket_schema(
        self,
        name: str,
        schema: BucketSchema,
        make_default: bool = False,
    ) -> ProfitConfiguration:
        """Return a new configuration with ``name`` added or replaced."""
        schemas = dict(self.bucket_schemas)
        schemas[name] = tuple(schema)
        default = name if make_default or self.default_bucket_schema is None else (
            self.default_bucket_schema
        )
        return replace(self, bucket_schemas=schemas, default_bucket_schema=default)
