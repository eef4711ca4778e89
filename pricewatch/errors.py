# pricewatch/errors.py

"""Exception hierarchy for pricewatch.

Per-offer failures (``ProviderError``, ``BlockedError``, ``NotFoundError``,
``ParseError``) never leave the offer resolver; they are folded into the
offer's diagnostic string. The remaining errors abort a run.
"""


class PriceWatchError(Exception):
    """Base class for all pricewatch errors."""


# ── Per-offer ────────────────────────────────────────────


class ProviderError(PriceWatchError):
    """A source page could not be fetched (timeout, network, HTTP status)."""

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(f"[{kind}] {message}")
        self.kind = kind
        self.message = message


class BlockedError(PriceWatchError):
    """The fetched page looks like an anti-bot challenge."""

    def __init__(self, keyword: str) -> None:
        super().__init__(f"matched '{keyword}'")
        self.keyword = keyword


class NotFoundError(PriceWatchError):
    """The page loaded but no extraction strategy produced a price."""


class ParseError(PriceWatchError):
    """A string could not be read as a currency amount."""


# ── Run-fatal ────────────────────────────────────────────


class CatalogError(PriceWatchError):
    """The product catalog is missing or malformed."""


class HistoryFormatError(PriceWatchError):
    """The persisted history file exists but matches no known layout."""


class ProviderUnavailableError(PriceWatchError):
    """The page provider could not be started."""
