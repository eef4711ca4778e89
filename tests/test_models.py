# tests/test_models.py

"""Tests for the catalog and snapshot dataclasses."""

import dataclasses
import unittest
from datetime import datetime, timezone

from pricewatch.models.product import Product, Source
from pricewatch.models.snapshot import ProductSnapshot, RunSnapshot

_NOW = datetime(2026, 10, 19, tzinfo=timezone.utc)


class TestProduct(unittest.TestCase):
    """Frozen catalog records."""

    def test_defaults(self) -> None:
        """Optional fields default to empty."""
        product = Product(id="p1", name="Widget")
        self.assertEqual(product.sources, ())
        self.assertIsNone(product.reference_url)
        self.assertIsNone(product.category)

    def test_frozen(self) -> None:
        """Products cannot be mutated during a run."""
        product = Product(id="p1", name="Widget", sources=(Source("A", "u"),))
        with self.assertRaises(dataclasses.FrozenInstanceError):
            product.name = "Other"  # type: ignore[misc]

    def test_hashable(self) -> None:
        """Equal products hash equally."""
        a = Product(id="p1", name="Widget", sources=(Source("A", "u"),))
        b = Product(id="p1", name="Widget", sources=(Source("A", "u"),))
        self.assertEqual(hash(a), hash(b))


class TestSnapshotDefaults(unittest.TestCase):
    """List fields are not shared between instances."""

    def test_offer_lists_independent(self) -> None:
        """Each product row gets its own offers list."""
        first = ProductSnapshot(id="a", name="A", best=None)
        second = ProductSnapshot(id="b", name="B", best=None)
        first.offers.append(object())  # type: ignore[arg-type]
        self.assertEqual(second.offers, [])

    def test_product_lists_independent(self) -> None:
        """Each run snapshot gets its own products list."""
        first = RunSnapshot(updated_at=_NOW)
        first.products.append(ProductSnapshot(id="a", name="A", best=None))
        self.assertEqual(RunSnapshot(updated_at=_NOW).products, [])


if __name__ == "__main__":
    unittest.main()
