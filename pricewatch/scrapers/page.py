# pricewatch/scrapers/page.py

"""The narrow page capability the resolution pipeline depends on."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Page(Protocol):
    """A fetched product page.

    ``metadata`` looks up a named price-bearing attribute (``<meta
    property=...>``, ``<meta name=...>`` or an ``itemprop`` element) and
    returns its value, or ``None``. ``selector_text`` returns the
    ``content`` attribute or text of the first element matching a CSS
    selector. ``structured_data`` returns the raw text of every JSON-LD
    block in document order.
    """

    url: str

    def title(self) -> str: ...

    def metadata(self, name: str) -> str | None: ...

    def selector_text(self, selector: str) -> str | None: ...

    def structured_data(self) -> list[str]: ...

    def visible_text(self) -> str: ...

    def capture_diagnostic(self, label: str) -> str | None: ...


@runtime_checkable
class PageProvider(Protocol):
    """Fetches URLs into :class:`Page` objects.

    ``render`` raises :class:`~pricewatch.errors.ProviderError` when the
    page cannot be reached within *timeout* seconds.
    """

    def render(self, url: str, timeout: float) -> Page: ...
