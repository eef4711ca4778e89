# pricewatch/extraction/price_extractor.py

"""Run extraction strategies in order and keep the first usable price."""

import logging
from collections.abc import Callable, Sequence
from decimal import Decimal

from pricewatch.extraction.strategies import (
    price_from_linked_data,
    price_from_metadata,
    price_from_visible_text,
)
from pricewatch.scrapers.page import Page

logger = logging.getLogger("pricewatch.extraction")

Strategy = Callable[[Page], Decimal | None]

DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    price_from_metadata,
    price_from_linked_data,
    price_from_visible_text,
)


def extract_price(
    page: Page,
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
) -> Decimal | None:
    """Return the first strictly positive price any strategy finds.

    ``None`` means the page exposes no price we can read.
    """
    for strategy in strategies:
        price = strategy(page)
        if price is not None and price > 0:
            logger.debug(
                "Price %s from %s on %s",
                price,
                getattr(strategy, "__name__", repr(strategy)),
                page.url,
            )
            return price
    return None
