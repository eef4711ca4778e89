# pricewatch/services/update_orchestrator.py

"""Runs one price update across the whole catalog, strictly in order."""

import logging
import time
from collections.abc import Callable, Sequence
from datetime import datetime

from pricewatch.config.settings import Settings
from pricewatch.models.offer import ResolvedOffer
from pricewatch.models.product import Product
from pricewatch.models.snapshot import ProductSnapshot, RunSnapshot
from pricewatch.scrapers.page import PageProvider
from pricewatch.services.offer_resolver import resolve_offer
from pricewatch.services.snapshot_assembler import assemble_product
from pricewatch.services.stats import compute_stats
from pricewatch.storage.history_ledger import HistoryLedger
from pricewatch.utils.timestamps import utc_now

logger = logging.getLogger("pricewatch.orchestrator")


class UpdateOrchestrator:
    """Resolves every source of every product, one request at a time.

    Sources are fetched sequentially with a fixed pause after each.
    The ledger is mutated in memory; persisting it is the caller's job.
    """

    def __init__(
        self,
        provider: PageProvider,
        ledger: HistoryLedger,
        clock: Callable[[], datetime] = utc_now,
        request_delay: float | None = None,
    ) -> None:
        self.provider = provider
        self.ledger = ledger
        self.clock = clock
        self.request_delay = (
            Settings.REQUEST_DELAY if request_delay is None else request_delay
        )

    def resolve_product(self, product: Product) -> list[ResolvedOffer]:
        """Resolve the product's sources in catalog order."""
        offers: list[ResolvedOffer] = []
        for source in product.sources:
            offers.append(
                resolve_offer(product, source, self.provider, self.clock)
            )
            time.sleep(self.request_delay)
        return offers

    def update_product(self, product: Product) -> ProductSnapshot:
        """Resolve, pick the best offer, record it, and summarise."""
        offers = self.resolve_product(product)
        row = assemble_product(product, offers)
        self.ledger.ingest(product.id, row.best, self.clock())
        stats = compute_stats(self.ledger.entries(product.id))
        row.trend = stats.to_dict() if stats is not None else None

        if row.best is not None:
            logger.info(
                "[%s] Best: %s at %s", product.id, row.best.price, row.best.store,
            )
        else:
            logger.warning("[%s] %s", product.id, row.error)
        return row

    def run(self, products: Sequence[Product]) -> RunSnapshot:
        """Update every product and return the run's snapshot."""
        snapshot = RunSnapshot(updated_at=self.clock())
        for product in products:
            snapshot.products.append(self.update_product(product))

        priced = sum(1 for p in snapshot.products if p.best is not None)
        logger.info(
            "Run complete: %d/%d products priced", priced, len(products),
        )
        return snapshot
