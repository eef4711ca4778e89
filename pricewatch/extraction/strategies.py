# pricewatch/extraction/strategies.py

"""Price extraction strategies, most structured first.

Each strategy is a plain function ``Page -> Decimal | None``. A strategy
returns ``None`` when it has nothing to offer; it never raises for a page
that simply does not expose a price.
"""

import json
import logging
import re
from collections.abc import Iterator, Sequence
from decimal import Decimal

from pricewatch.config.settings import Settings
from pricewatch.extraction.currency import (
    parse_localized_amount,
    parse_plain_amount,
)
from pricewatch.scrapers.page import Page

logger = logging.getLogger("pricewatch.extraction")

_LINKED_DATA_PRICE_KEYS: tuple[str, ...] = ("price", "lowPrice", "highPrice")

_AMOUNT = r"[0-9][0-9.]*(?:,[0-9]{1,2})?"


def _positive(value: Decimal | None) -> Decimal | None:
    """Pass through strictly positive amounts only."""
    if value is not None and value > 0:
        return value
    return None


# ── 1. Metadata ──────────────────────────────────────────


def price_from_metadata(
    page: Page, names: Sequence[str] | None = None,
) -> Decimal | None:
    """First parseable price among the configured metadata names."""
    for name in names or Settings.PRICE_META_NAMES:
        raw = page.metadata(name)
        if not raw or not raw.strip():
            continue
        price = _positive(parse_localized_amount(raw))
        if price is not None:
            logger.debug("Metadata '%s' gave %s", name, price)
            return price
    return None


# ── 2. Linked data (JSON-LD) ─────────────────────────────


def _iter_price_values(node: object) -> Iterator[object]:
    """Yield price-like values from a JSON-LD tree, offers first."""
    if isinstance(node, list):
        for item in node:
            yield from _iter_price_values(item)
        return
    if not isinstance(node, dict):
        return
    if "offers" in node:
        yield from _iter_price_values(node["offers"])
    for key in _LINKED_DATA_PRICE_KEYS:
        if key in node:
            yield node[key]
    for key, value in node.items():
        if key != "offers" and isinstance(value, (dict, list)):
            yield from _iter_price_values(value)


def price_from_linked_data(page: Page) -> Decimal | None:
    """First positive price found in the page's JSON-LD blocks."""
    for block in page.structured_data():
        if not block or not block.strip():
            continue
        try:
            data = json.loads(block, parse_float=Decimal)
        except ValueError:
            logger.debug("Skipping malformed JSON-LD block on %s", page.url)
            continue
        for raw in _iter_price_values(data):
            price = _positive(parse_plain_amount(raw))
            if price is not None:
                logger.debug("JSON-LD gave %s", price)
                return price
    return None


# ── 3. Visible text ──────────────────────────────────────


def _marker_pattern(marker: str) -> str:
    """Regex for one currency marker; word-like markers need boundaries."""
    escaped = re.escape(marker)
    if marker.isalpha():
        return rf"(?<![^\W\d_]){escaped}(?![^\W\d_])"
    return escaped


def currency_amount_pattern(markers: Sequence[str]) -> re.Pattern[str]:
    """Match an amount with a currency marker before or after it."""
    alternation = "|".join(_marker_pattern(m) for m in markers)
    return re.compile(
        rf"(?:{alternation})\s*({_AMOUNT})|({_AMOUNT})\s*(?:{alternation})"
    )


def price_from_selectors(
    page: Page, selectors: Sequence[str] | None = None,
) -> Decimal | None:
    """First parseable amount among the configured price elements."""
    for selector in selectors or Settings.PRICE_SELECTORS:
        raw = page.selector_text(selector)
        if not raw:
            continue
        price = _positive(parse_localized_amount(raw))
        if price is not None:
            logger.debug("Selector '%s' gave %s", selector, price)
            return price
    return None


def price_from_visible_text(
    page: Page,
    markers: Sequence[str] | None = None,
    selectors: Sequence[str] | None = None,
) -> Decimal | None:
    """Known price elements first, then the first currency-marked amount."""
    price = price_from_selectors(page, selectors)
    if price is not None:
        return price

    text = page.visible_text()
    if not text:
        return None
    pattern = currency_amount_pattern(markers or Settings.CURRENCY_MARKERS)
    for match in pattern.finditer(text):
        raw = match.group(1) or match.group(2)
        price = _positive(parse_localized_amount(raw))
        if price is not None:
            logger.debug("Visible text '%s' gave %s", match.group(0), price)
            return price
    return None
