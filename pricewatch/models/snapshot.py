# pricewatch/models/snapshot.py

"""Point-in-time run snapshot model, rewritten in full every run."""

from dataclasses import dataclass, field
from datetime import datetime

from pricewatch.models.offer import BestOffer, ResolvedOffer
from pricewatch.utils.timestamps import to_iso


@dataclass
class ProductSnapshot:
    """Current resolution results for one product."""

    id: str
    name: str
    best: BestOffer | None
    offers: list[ResolvedOffer] = field(default_factory=list)
    error: str | None = None
    category: str | None = None
    reference_url: str | None = None
    trend: dict[str, object] | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialise to the snapshot JSON shape."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "reference_url": self.reference_url,
            "best": self.best.to_dict() if self.best else None,
            "offers": [o.to_dict() for o in self.offers],
            "error": self.error,
            "trend": self.trend,
        }


@dataclass
class RunSnapshot:
    """All products resolved in one run, in catalog order."""

    updated_at: datetime
    products: list[ProductSnapshot] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        """Serialise to the snapshot JSON shape."""
        return {
            "updated_at": to_iso(self.updated_at),
            "products": [p.to_dict() for p in self.products],
        }
