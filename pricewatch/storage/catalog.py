# pricewatch/storage/catalog.py

"""Load the product catalog (``products.json``)."""

import json
import logging
from pathlib import Path
from typing import Any

from pricewatch.errors import CatalogError
from pricewatch.models.product import Product, Source

logger = logging.getLogger("pricewatch.catalog")


def _parse_source(raw: object, product_id: str, index: int) -> Source:
    if not isinstance(raw, dict):
        raise CatalogError(f"{product_id}: source #{index} is not an object")
    store = raw.get("store") or raw.get("storeLabel") or raw.get("site")
    url = raw.get("url")
    if not store or not url:
        raise CatalogError(
            f"{product_id}: source #{index} needs both a store and a url"
        )
    return Source(store=str(store), url=str(url))


def parse_product(raw: object) -> Product:
    """Build a :class:`Product` from one catalog record.

    Accepts ``sources`` or the older ``offers`` list, and
    ``reference_url``, ``referenceUrl`` or ``akakce_url``.
    """
    if not isinstance(raw, dict):
        raise CatalogError("catalog entries must be objects")
    record: dict[str, Any] = raw
    product_id = record.get("id")
    name = record.get("name")
    if not product_id or not name:
        raise CatalogError(f"catalog entry missing id or name: {record!r}")
    product_id = str(product_id)

    raw_sources = record.get("sources", record.get("offers", []))
    if not isinstance(raw_sources, list):
        raise CatalogError(f"{product_id}: sources must be a list")

    reference_url = (
        record.get("reference_url")
        or record.get("referenceUrl")
        or record.get("akakce_url")
    )
    category = record.get("category")
    return Product(
        id=product_id,
        name=str(name),
        sources=tuple(
            _parse_source(s, product_id, i)
            for i, s in enumerate(raw_sources, 1)
        ),
        reference_url=str(reference_url) if reference_url else None,
        category=str(category) if category else None,
    )


def load_catalog(path: Path) -> list[Product]:
    """Read and validate the catalog; raises CatalogError on any problem."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogError(f"cannot read catalog {path}: {exc}") from exc

    if isinstance(data, dict) and isinstance(data.get("products"), list):
        data = data["products"]
    if not isinstance(data, list):
        raise CatalogError(f"catalog {path} must be a list of products")

    products = [parse_product(raw) for raw in data]
    ids = [p.id for p in products]
    duplicates = sorted({pid for pid in ids if ids.count(pid) > 1})
    if duplicates:
        raise CatalogError(f"duplicate product ids: {', '.join(duplicates)}")

    logger.info("Loaded %d products from %s", len(products), path)
    return products
