# pricewatch/services/stats.py

"""Trend statistics derived from a product's history ledger."""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from pricewatch.models.history import HistoryEntry
from pricewatch.utils.timestamps import to_iso


def _as_decimal(value: object) -> Decimal | None:
    """Coerce a numeric value to Decimal; ``None`` for anything else."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        return None
    return result if result.is_finite() else None


def percent_change(current: object, base: object) -> Decimal | None:
    """``(current - base) / base * 100``, or ``None`` if undefined.

    Undefined when either side is not a finite number or *base* is zero.
    """
    cur = _as_decimal(current)
    ref = _as_decimal(base)
    if cur is None or ref is None or ref == 0:
        return None
    return (cur - ref) / ref * 100


@dataclass(frozen=True)
class Stats:
    """Summary of one product's ledger sequence."""

    first: HistoryEntry
    last: HistoryEntry
    previous: HistoryEntry | None
    min_entry: HistoryEntry
    max_entry: HistoryEntry
    count: int

    @property
    def change_percent(self) -> Decimal | None:
        """Change from the first to the latest recorded price."""
        return percent_change(self.last.price, self.first.price)

    @property
    def last_delta(self) -> Decimal | None:
        """Latest price minus the one before it."""
        if self.previous is None:
            return None
        return self.last.price - self.previous.price

    def to_dict(self) -> dict[str, object]:
        """Serialise as the snapshot ``trend`` block."""
        change = self.change_percent
        delta = self.last_delta
        return {
            "count": self.count,
            "first_price": float(self.first.price),
            "first_seen": to_iso(self.first.first_seen),
            "last_price": float(self.last.price),
            "last_seen": to_iso(self.last.last_seen),
            "min_price": float(self.min_entry.price),
            "min_store": self.min_entry.store,
            "max_price": float(self.max_entry.price),
            "max_store": self.max_entry.store,
            "change_percent": (
                float(round(change, 2)) if change is not None else None
            ),
            "last_delta": float(delta) if delta is not None else None,
        }


def compute_stats(entries: Sequence[HistoryEntry]) -> Stats | None:
    """Scan a ledger sequence once; ``None`` when it is empty.

    Ties for the lowest and highest price go to the earliest entry.
    """
    if not entries:
        return None

    min_entry = max_entry = entries[0]
    for entry in entries[1:]:
        if entry.price < min_entry.price:
            min_entry = entry
        if entry.price > max_entry.price:
            max_entry = entry

    return Stats(
        first=entries[0],
        last=entries[-1],
        previous=entries[-2] if len(entries) >= 2 else None,
        min_entry=min_entry,
        max_entry=max_entry,
        count=len(entries),
    )
