# pricewatch/models/history.py

"""Ledger entry model: one stable (price, store) regime over time."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from pricewatch.utils.timestamps import to_iso


@dataclass
class HistoryEntry:
    """A merged observation of the same best price at the same store."""

    price: Decimal
    store: str
    url: str
    first_seen: datetime
    last_seen: datetime

    def same_regime(self, price: Decimal, store: str) -> bool:
        """True when *price* at *store* continues this entry."""
        return self.price == price and self.store == store

    def to_dict(self) -> dict[str, object]:
        """Serialise to the history JSON shape."""
        return {
            "price": float(self.price),
            "store": self.store,
            "url": self.url,
            "first_seen": to_iso(self.first_seen),
            "last_seen": to_iso(self.last_seen),
        }
