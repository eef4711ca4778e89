# pricewatch/models/product.py

"""Catalog data model: products and the retail sources that list them."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Source:
    """One retail listing (store + URL) for a product."""

    store: str
    url: str


@dataclass(frozen=True)
class Product:
    """A tracked product and its sources, in catalog-declared order."""

    id: str
    name: str
    sources: tuple[Source, ...] = ()
    reference_url: str | None = None
    category: str | None = None
