# pricewatch/storage/history_ledger.py

"""Per-product best-price history, persisted across runs as JSON.

Each product maps to an ordered list of :class:`HistoryEntry` objects,
oldest first. An entry is a price *regime*: repeated observations of the
same price at the same store extend the last entry instead of appending.
"""

import json
import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from pricewatch.config.settings import Settings
from pricewatch.errors import HistoryFormatError
from pricewatch.extraction.currency import parse_plain_amount
from pricewatch.models.history import HistoryEntry
from pricewatch.models.offer import BestOffer
from pricewatch.storage.file_manager import write_json_atomic
from pricewatch.utils.timestamps import parse_iso, to_iso

logger = logging.getLogger("pricewatch.history")

_STORE_KEYS: tuple[str, ...] = ("store", "storeLabel", "store_label", "site")
_FIRST_SEEN_KEYS: tuple[str, ...] = (
    "first_seen", "firstSeenAt", "first_seen_at", "at", "fetched_at", "date",
)
_LAST_SEEN_KEYS: tuple[str, ...] = ("last_seen", "lastSeenAt", "last_seen_at")
_PRODUCT_ID_KEYS: tuple[str, ...] = ("product_id", "productId", "id")


class HistoryLedger:
    """In-memory ledger, loaded once per run and written back once."""

    def __init__(
        self,
        products: dict[str, list[HistoryEntry]] | None = None,
        updated_at: datetime | None = None,
        cap: int | None = None,
    ) -> None:
        self.cap: int = cap or Settings.HISTORY_CAP
        self.updated_at = updated_at
        self._products: dict[str, list[HistoryEntry]] = {}
        for product_id, entries in (products or {}).items():
            self._products[product_id] = _canonical_sequence(
                entries, self.cap,
            )

    # ── Mutation ─────────────────────────────────────────

    def ingest(
        self,
        product_id: str,
        best: BestOffer | None,
        now: datetime,
    ) -> None:
        """Record a run's best offer for *product_id*.

        A missing best offer leaves history untouched. The same price at
        the same store as the last entry only advances ``last_seen``.
        """
        if best is None:
            return

        entries = self._products.setdefault(product_id, [])
        last = entries[-1] if entries else None
        if last is not None and last.same_regime(best.price, best.store):
            last.last_seen = max(now, last.first_seen)
            last.url = best.url
        else:
            entries.append(HistoryEntry(
                price=best.price,
                store=best.store,
                url=best.url,
                first_seen=now,
                last_seen=now,
            ))
            logger.info(
                "[%s] New price regime: %s at %s",
                product_id,
                best.price,
                best.store,
            )

        overflow = len(entries) - self.cap
        if overflow > 0:
            del entries[:overflow]
            logger.debug(
                "[%s] Dropped %d oldest history entries", product_id, overflow,
            )
        self.updated_at = now

    # ── Querying ─────────────────────────────────────────

    def entries(self, product_id: str) -> list[HistoryEntry]:
        """Return the product's entries, oldest first (empty if unknown)."""
        return list(self._products.get(product_id, []))

    def product_ids(self) -> list[str]:
        """Product ids with at least one entry."""
        return [pid for pid, seq in self._products.items() if seq]

    def __len__(self) -> int:
        return len(self._products)

    def to_dict(self) -> dict[str, object]:
        """Serialise to the canonical history JSON shape."""
        return {
            "updated_at": (
                to_iso(self.updated_at) if self.updated_at else None
            ),
            "products": {
                pid: [e.to_dict() for e in seq]
                for pid, seq in self._products.items()
            },
        }

    @classmethod
    def from_data(
        cls, data: object, cap: int | None = None,
    ) -> "HistoryLedger":
        """Build a ledger from any known history layout.

        Shape rules are tried in order; the first that accepts *data*
        wins. Raises :class:`HistoryFormatError` if none does.
        """
        for rule in _SHAPE_RULES:
            ledger = rule(data, cap)
            if ledger is not None:
                logger.debug(
                    "History matched layout '%s' (%d products)",
                    rule.__name__,
                    len(ledger),
                )
                return ledger
        raise HistoryFormatError(
            f"unrecognised history layout: {type(data).__name__}"
        )


# ── Entry normalisation ──────────────────────────────────


def _first_value(raw: dict[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if raw.get(key) not in (None, ""):
            return raw[key]
    return None


def _entry_from_raw(raw: object) -> HistoryEntry | None:
    """Read one stored entry; ``None`` if it lacks a usable price or time."""
    if isinstance(raw, HistoryEntry):
        return raw
    if not isinstance(raw, dict):
        return None
    price = parse_plain_amount(raw.get("price"))
    if price is None or price <= 0:
        return None
    first_seen = parse_iso(_first_value(raw, _FIRST_SEEN_KEYS))
    last_seen = parse_iso(_first_value(raw, _LAST_SEEN_KEYS))
    if first_seen is None:
        first_seen = last_seen
    if first_seen is None:
        return None
    if last_seen is None or last_seen < first_seen:
        last_seen = first_seen
    return HistoryEntry(
        price=price,
        store=str(_first_value(raw, _STORE_KEYS) or ""),
        url=str(raw.get("url") or ""),
        first_seen=first_seen,
        last_seen=last_seen,
    )


def _canonical_sequence(raw_entries: object, cap: int) -> list[HistoryEntry]:
    """Normalise entries, merge consecutive duplicates, then apply the cap."""
    if not isinstance(raw_entries, list):
        return []
    result: list[HistoryEntry] = []
    for raw in raw_entries:
        entry = _entry_from_raw(raw)
        if entry is None:
            continue
        if result and result[-1].same_regime(entry.price, entry.store):
            prev = result[-1]
            prev.last_seen = max(prev.last_seen, entry.last_seen)
            prev.url = entry.url or prev.url
            continue
        result.append(entry)
    return result[-cap:]


# ── Shape rules ──────────────────────────────────────────


def _canonical_layout(data: object, cap: int | None) -> HistoryLedger | None:
    """``{"updated_at": ..., "products": {id: [entry, ...]}}``."""
    if not isinstance(data, dict) or not isinstance(data.get("products"), dict):
        return None
    updated_at = parse_iso(data.get("updated_at") or data.get("updatedAt"))
    return HistoryLedger(data["products"], updated_at=updated_at, cap=cap)


def _bare_mapping_layout(
    data: object, cap: int | None,
) -> HistoryLedger | None:
    """``{id: [entry, ...]}`` with no envelope."""
    if not isinstance(data, dict) or "products" in data:
        return None
    if not all(isinstance(v, list) for v in data.values()):
        return None
    return HistoryLedger(
        {str(k): v for k, v in data.items()}, cap=cap,
    )


def _flat_samples_layout(
    data: object, cap: int | None,
) -> HistoryLedger | None:
    """``[{"id": ..., "price": ..., "store": ..., "at": ...}, ...]``.

    One record per run; replayed through :meth:`HistoryLedger.ingest` so
    repeated prices collapse into regimes.
    """
    if not isinstance(data, list):
        return None
    samples: list[tuple[datetime, str, BestOffer]] = []
    for raw in data:
        if not isinstance(raw, dict):
            return None
        product_id = _first_value(raw, _PRODUCT_ID_KEYS)
        if product_id is None:
            return None
        entry = _entry_from_raw(raw)
        if entry is None:
            continue
        samples.append((
            entry.first_seen,
            str(product_id),
            BestOffer(price=entry.price, store=entry.store, url=entry.url),
        ))

    ledger = HistoryLedger(cap=cap)
    for seen_at, product_id, best in sorted(samples, key=lambda s: s[0]):
        ledger.ingest(product_id, best, seen_at)
    return ledger


_SHAPE_RULES: tuple[
    Callable[[object, int | None], HistoryLedger | None], ...
] = (
    _canonical_layout,
    _bare_mapping_layout,
    _flat_samples_layout,
)


# ── Persistence ──────────────────────────────────────────


def load_ledger(path: Path, cap: int | None = None) -> HistoryLedger:
    """Load the ledger from *path*; a missing file yields an empty one."""
    if not path.exists():
        logger.info("No history at %s, starting empty", path)
        return HistoryLedger(cap=cap)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise HistoryFormatError(f"cannot read {path}: {exc}") from exc
    if not text.strip():
        logger.warning("History file %s is empty, starting empty", path)
        return HistoryLedger(cap=cap)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise HistoryFormatError(f"invalid JSON in {path}: {exc}") from exc
    ledger = HistoryLedger.from_data(data, cap=cap)
    logger.info(
        "Loaded history for %d products from %s",
        len(ledger.product_ids()),
        path,
    )
    return ledger


def save_ledger(ledger: HistoryLedger, path: Path) -> Path:
    """Write the full ledger, atomically replacing the previous file."""
    write_json_atomic(path, ledger.to_dict())
    logger.info(
        "Saved history for %d products to %s",
        len(ledger.product_ids()),
        path,
    )
    return path
