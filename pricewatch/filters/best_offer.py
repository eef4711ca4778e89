# pricewatch/filters/best_offer.py

"""Reduce a product's resolved offers to the single cheapest one."""

import logging
from collections.abc import Sequence

from pricewatch.models.offer import BestOffer, ResolvedOffer

logger = logging.getLogger("pricewatch.filters")


def select_best(offers: Sequence[ResolvedOffer]) -> BestOffer | None:
    """Return the cheapest priced offer, or ``None`` if none is priced.

    On an exact price tie the offer that comes first in *offers* wins,
    so the same inputs always pick the same store.
    """
    best: ResolvedOffer | None = None
    for offer in offers:
        if offer.price is None:
            continue
        if best is None or offer.price < best.price:  # type: ignore[operator]
            best = offer

    if best is None:
        logger.debug("No priced offer among %d candidates", len(offers))
        return None
    return BestOffer.from_offer(best)
