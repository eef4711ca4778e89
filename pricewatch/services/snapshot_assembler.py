# pricewatch/services/snapshot_assembler.py

"""Combine a product's resolved offers and ledger stats for the snapshot."""

from collections.abc import Sequence

from pricewatch.filters.best_offer import select_best
from pricewatch.models.offer import ResolvedOffer
from pricewatch.models.product import Product
from pricewatch.models.snapshot import ProductSnapshot
from pricewatch.services.stats import Stats


def summarize_failures(offers: Sequence[ResolvedOffer]) -> str:
    """Product-level error text built from per-offer diagnostics."""
    if not offers:
        return "no sources configured"
    details = "; ".join(
        f"{o.store}: {o.diagnostic or 'no price'}" for o in offers
    )
    return f"no priced offer: {details}"


def assemble_product(
    product: Product,
    offers: Sequence[ResolvedOffer],
    stats: Stats | None = None,
) -> ProductSnapshot:
    """Build the snapshot row; ``error`` is set exactly when ``best`` is not."""
    best = select_best(offers)
    return ProductSnapshot(
        id=product.id,
        name=product.name,
        category=product.category,
        reference_url=product.reference_url,
        best=best,
        offers=list(offers),
        error=None if best is not None else summarize_failures(offers),
        trend=stats.to_dict() if stats is not None else None,
    )
