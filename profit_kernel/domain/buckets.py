"""
Buckets -- named percentage shares of distributable profit.

Responsibility:
    Value objects for bucket definitions, their optional metadata
    extension, and the per-bucket allocation output.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - ``BucketMeta`` recognizes exactly one sub-key, ``owners`` (a list of
      owner names).  Everything else is opaque and passed through as-is.
    - Owner-split enrichment is keyed on the presence of ``owners``; the
      bucket's display name never matters.

Non-goals:
    - Does not enforce unique bucket names or the 100% total; see
      ``profit_engines.bucket_schema``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Any

from profit_kernel.domain.values import to_decimal

OWNERS_KEY = "owners"
OWNER_AMOUNTS_KEY = "ownerAmounts"


@dataclass(frozen=True)
class OwnerAmount:
    """One owner's equal share of an owner-split bucket."""

    name: str
    amount: Decimal


@dataclass(frozen=True)
class BucketMeta:
    """
    Optional structured extension attached to a bucket.

    Contract:
        ``owners`` is set only when the source mapping held a list of
        strings under ``owners``.  ``owner_amounts`` is produced by the
        allocator, never read from input.  ``extra`` holds every other
        key untouched.
    """

    owners: tuple[str, ...] | None = None
    owner_amounts: tuple[OwnerAmount, ...] | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.owners is not None and not isinstance(self.owners, tuple):
            object.__setattr__(self, "owners", tuple(self.owners))
        if not isinstance(self.extra, MappingProxyType):
            object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> BucketMeta:
        """Split a free-form meta mapping into the recognized and opaque parts."""
        extra = dict(raw)
        owners = extra.get(OWNERS_KEY)
        if isinstance(owners, (list, tuple)) and all(
            isinstance(name, str) for name in owners
        ):
            del extra[OWNERS_KEY]
            return cls(owners=tuple(owners), extra=extra)
        return cls(extra=extra)

    @property
    def has_owners(self) -> bool:
        return self.owners is not None

    def to_mapping(self) -> dict[str, Any]:
        """Wire form: opaque keys, then ``owners``, then ``ownerAmounts``."""
        out: dict[str, Any] = dict(self.extra)
        if self.owners is not None:
            out[OWNERS_KEY] = list(self.owners)
        if self.owner_amounts is not None:
            out[OWNER_AMOUNTS_KEY] = [
                {"name": oa.name, "amount": oa.amount} for oa in self.owner_amounts
            ]
        return out


@dataclass(frozen=True)
class BucketDef:
    """
    A named percentage share within a bucket schema.

    ``percent`` is parts per hundred (0-100).  ``meta`` may be given as a
    plain mapping; it is converted to ``BucketMeta``.
    """

    name: str
    percent: Decimal
    meta: BucketMeta | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "percent", to_decimal(self.percent, "percent"))
        if self.meta is not None and not isinstance(self.meta, BucketMeta):
            object.__setattr__(self, "meta", BucketMeta.from_mapping(self.meta))


# Ordered; the order is the rendering order.
BucketSchema = tuple[BucketDef, ...]


@dataclass(frozen=True)
class BucketAllocation:
    """Dollar amount allocated to one bucket."""

    name: str
    percent: Decimal
    amount: Decimal
    meta: BucketMeta | None = None
