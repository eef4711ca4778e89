# pricewatch/models/offer.py

"""Per-source resolution outcome and the best offer derived from them."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from pricewatch.utils.timestamps import to_iso


class OfferStatus(str, Enum):
    """Terminal state of one (product, source) resolution."""

    PRICED = "priced"
    BLOCKED = "blocked"
    NOT_FOUND = "not_found"
    PROVIDER_ERROR = "provider_error"


@dataclass
class ResolvedOffer:
    """The outcome of attempting to price one source in one run.

    ``price`` is ``None`` whenever no strategy succeeded; ``diagnostic``
    then explains why.
    """

    store: str
    url: str
    status: OfferStatus
    fetched_at: datetime
    price: Decimal | None = None
    diagnostic: str | None = None
    currency: str = "TRY"
    title: str | None = None
    image: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialise to the snapshot JSON shape."""
        return {
            "store": self.store,
            "url": self.url,
            "price": float(self.price) if self.price is not None else None,
            "currency": self.currency,
            "status": self.status.value,
            "diagnostic": self.diagnostic,
            "title": self.title,
            "image": self.image,
            "fetched_at": to_iso(self.fetched_at),
        }


@dataclass(frozen=True)
class BestOffer:
    """The cheapest priced offer for a product in a run."""

    price: Decimal
    store: str
    url: str

    @classmethod
    def from_offer(cls, offer: ResolvedOffer) -> "BestOffer":
        """Build from a priced :class:`ResolvedOffer`."""
        if offer.price is None:
            raise ValueError("cannot build a BestOffer from an unpriced offer")
        return cls(price=offer.price, store=offer.store, url=offer.url)

    def to_dict(self) -> dict[str, object]:
        """Serialise to the snapshot JSON shape."""
        return {
            "price": float(self.price),
            "store": self.store,
            "url": self.url,
        }
