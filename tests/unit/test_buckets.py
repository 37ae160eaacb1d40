"""Unit tests for bucket value objects and the meta extension."""

from decimal import Decimal

import pytest

from profit_kernel.domain.buckets import (
    BucketDef,
    BucketMeta,
    OwnerAmount,
)
from profit_kernel.exceptions import InvalidAmountError


class TestBucketMetaFromMapping:
    """Only ``owners`` is recognized; everything else is opaque."""

    def test_owners_recognized(self):
        meta = BucketMeta.from_mapping({"owners": ["Alejandro", "Jason"], "split": "50/50"})

        assert meta.owners == ("Alejandro", "Jason")
        assert meta.has_owners
        assert dict(meta.extra) == {"split": "50/50"}

    def test_no_owners(self):
        meta = BucketMeta.from_mapping({"category": "taxes"})

        assert meta.owners is None
        assert not meta.has_owners
        assert dict(meta.extra) == {"category": "taxes"}

    def test_owners_of_wrong_type_stay_opaque(self):
        meta = BucketMeta.from_mapping({"owners": ["Kim", 7]})

        assert not meta.has_owners
        assert dict(meta.extra) == {"owners": ["Kim", 7]}

    def test_owner_amounts_in_input_stay_opaque(self):
        meta = BucketMeta.from_mapping({"ownerAmounts": [{"name": "x", "amount": "1"}]})

        assert meta.owner_amounts is None
        assert "ownerAmounts" in meta.extra

    def test_source_mapping_not_mutated(self):
        raw = {"owners": ["A"], "category": "compensation"}
        BucketMeta.from_mapping(raw)
        assert raw == {"owners": ["A"], "category": "compensation"}

    def test_extra_is_read_only(self):
        meta = BucketMeta.from_mapping({"category": "taxes"})
        with pytest.raises(TypeError):
            meta.extra["category"] = "other"


class TestBucketMetaToMapping:

    def test_wire_order(self):
        meta = BucketMeta(
            owners=("A", "B"),
            owner_amounts=(OwnerAmount("A", Decimal("5")), OwnerAmount("B", Decimal("5"))),
            extra={"category": "compensation"},
        )

        out = meta.to_mapping()

        assert list(out) == ["category", "owners", "ownerAmounts"]
        assert out["owners"] == ["A", "B"]
        assert out["ownerAmounts"] == [
            {"name": "A", "amount": Decimal("5")},
            {"name": "B", "amount": Decimal("5")},
        ]

    def test_opaque_only(self):
        assert BucketMeta(extra={"k": "v"}).to_mapping() == {"k": "v"}


class TestBucketDef:

    def test_percent_coerced(self):
        assert BucketDef("Taxes", "20.0").percent == Decimal("20.0")

    def test_float_percent_rejected(self):
        with pytest.raises(InvalidAmountError):
            BucketDef("Taxes", 20.0)

    def test_mapping_meta_converted(self):
        bucket = BucketDef("Owner Pay", Decimal("10"), meta={"owners": ["A", "B"]})

        assert isinstance(bucket.meta, BucketMeta)
        assert bucket.meta.owners == ("A", "B")

    def test_meta_instance_kept(self):
        meta = BucketMeta(owners=["A"])
        bucket = BucketDef("Owner Pay", Decimal("10"), meta=meta)

        assert bucket.meta is meta
        assert meta.owners == ("A",)

    def test_no_meta(self):
        assert BucketDef("Flex", Decimal("5")).meta is None
