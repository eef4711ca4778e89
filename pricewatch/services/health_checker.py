# pricewatch/services/health_checker.py

"""Catalog source connectivity health checker."""

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass

from pricewatch.config.settings import Settings
from pricewatch.errors import ProviderError
from pricewatch.models.product import Product, Source
from pricewatch.scrapers.page import PageProvider
from pricewatch.services.offer_resolver import detect_blocked

logger = logging.getLogger("pricewatch.health")

_HEALTH_TIMEOUT = 10  # seconds per source


@dataclass
class HealthResult:
    """Result of a single source health check."""

    product_id: str
    store: str
    status: str  # "ok", "slow", "blocked", "down"
    latency_ms: float
    message: str


def probe_source(
    product: Product, source: Source, provider: PageProvider,
) -> HealthResult:
    """Fetch one source page and grade the response."""
    start = time.monotonic()
    try:
        page = provider.render(source.url, _HEALTH_TIMEOUT)
    except ProviderError as exc:
        return HealthResult(
            product_id=product.id,
            store=source.store,
            status="down",
            latency_ms=(time.monotonic() - start) * 1000,
            message=str(exc)[:80],
        )
    elapsed_ms = (time.monotonic() - start) * 1000

    keyword = detect_blocked(page)
    if keyword is not None:
        return HealthResult(
            product_id=product.id,
            store=source.store,
            status="blocked",
            latency_ms=elapsed_ms,
            message=f"Challenge keyword '{keyword}'",
        )

    if elapsed_ms > Settings.SLOW_THRESHOLD_MS:
        return HealthResult(
            product_id=product.id,
            store=source.store,
            status="slow",
            latency_ms=elapsed_ms,
            message="High latency",
        )

    return HealthResult(
        product_id=product.id,
        store=source.store,
        status="ok",
        latency_ms=elapsed_ms,
        message="",
    )


class HealthChecker:
    """Probes every catalog source, one at a time."""

    def __init__(self, provider: PageProvider) -> None:
        self.provider = provider

    def check_all(self, products: Sequence[Product]) -> list[HealthResult]:
        """Probe each source of each product in catalog order."""
        results: list[HealthResult] = []
        for product in products:
            for source in product.sources:
                result = probe_source(product, source, self.provider)
                logger.info(
                    "Health check %s/%s: %s (%.0fms) %s",
                    result.product_id,
                    result.store,
                    result.status,
                    result.latency_ms,
                    result.message,
                )
                results.append(result)
                time.sleep(Settings.REQUEST_DELAY)
        return results
