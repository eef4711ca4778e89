# pricewatch/services/offer_resolver.py

"""Resolve one (product, source) pair into a classified offer.

Every outcome (priced, blocked, not found, provider error) is returned as
a :class:`ResolvedOffer`; nothing raised while fetching or reading a page
escapes :func:`resolve_offer`.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from decimal import Decimal

from pricewatch.config.settings import Settings
from pricewatch.errors import BlockedError, NotFoundError, ProviderError
from pricewatch.extraction.price_extractor import extract_price
from pricewatch.models.offer import OfferStatus, ResolvedOffer
from pricewatch.models.product import Product, Source
from pricewatch.scrapers.page import Page, PageProvider
from pricewatch.utils.timestamps import utc_now

logger = logging.getLogger("pricewatch.resolver")

NOT_FOUND_MESSAGE = "price not found"


def detect_blocked(
    page: Page, keywords: Sequence[str] | None = None,
) -> str | None:
    """Return the first challenge keyword found in title or body text."""
    haystack = f"{page.title()}\n{page.visible_text()}".lower()
    for keyword in keywords or Settings.BLOCKED_KEYWORDS:
        if keyword.lower() in haystack:
            return keyword
    return None


def _read_price(page: Page) -> Decimal:
    """Blocked check first, then extraction.

    Raises BlockedError or NotFoundError.
    """
    keyword = detect_blocked(page)
    if keyword is not None:
        raise BlockedError(keyword)
    price = extract_price(page)
    if price is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return price


def _capture(page: Page, product: Product, source: Source) -> str | None:
    """Ask the page for a diagnostic artifact; failures are only logged."""
    if not Settings.CAPTURE_DIAGNOSTICS:
        return None
    try:
        return page.capture_diagnostic(f"{product.id}_{source.store}")
    except Exception as exc:
        logger.warning(
            "Diagnostic capture failed for %s: %s",
            source.url,
            exc,
            exc_info=True,
        )
        return None


def _with_artifact(message: str, artifact: str | None) -> str:
    return f"{message} (debug: {artifact})" if artifact else message


def resolve_offer(
    product: Product,
    source: Source,
    provider: PageProvider,
    clock: Callable[[], datetime] = utc_now,
) -> ResolvedOffer:
    """Fetch *source* and classify the outcome into a ResolvedOffer."""
    offer = ResolvedOffer(
        store=source.store,
        url=source.url,
        status=OfferStatus.PROVIDER_ERROR,
        fetched_at=clock(),
        currency=Settings.CURRENCY,
    )

    logger.info("[%s] Fetching %s (%s)", product.id, source.store, source.url)
    try:
        page = provider.render(source.url, Settings.REQUEST_TIMEOUT)
    except ProviderError as exc:
        logger.warning(
            "[%s] %s provider error: %s", product.id, source.store, exc,
        )
        offer.diagnostic = f"provider error [{exc.kind}]: {exc.message}"
        return offer
    except Exception as exc:
        logger.error(
            "[%s] %s unexpected fetch failure: %s",
            product.id,
            source.store,
            exc,
            exc_info=True,
        )
        offer.diagnostic = f"provider error [unexpected]: {exc}"
        return offer

    try:
        offer.title = page.metadata("og:title") or page.title() or None
        offer.image = page.metadata("og:image")
        offer.price = _read_price(page)
    except BlockedError as exc:
        logger.warning(
            "[%s] %s looks blocked (%s)", product.id, source.store, exc,
        )
        offer.status = OfferStatus.BLOCKED
        offer.diagnostic = _with_artifact(
            f"blocked: {exc}", _capture(page, product, source),
        )
        return offer
    except NotFoundError:
        logger.info("[%s] %s: %s", product.id, source.store, NOT_FOUND_MESSAGE)
        offer.status = OfferStatus.NOT_FOUND
        offer.diagnostic = _with_artifact(
            NOT_FOUND_MESSAGE, _capture(page, product, source),
        )
        return offer
    except Exception as exc:
        logger.error(
            "[%s] %s failed while reading page: %s",
            product.id,
            source.store,
            exc,
            exc_info=True,
        )
        offer.diagnostic = f"provider error [unexpected]: {exc}"
        return offer

    offer.status = OfferStatus.PRICED
    logger.info("[%s] %s priced at %s", product.id, source.store, offer.price)
    return offer
