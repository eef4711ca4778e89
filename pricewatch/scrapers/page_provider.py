# pricewatch/scrapers/page_provider.py

"""Default page provider: browser-impersonating HTTP with a fallback."""

import logging
from pathlib import Path
from types import TracebackType
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from curl_cffi import requests as curl_requests

from pricewatch.config.settings import Settings
from pricewatch.errors import ProviderError, ProviderUnavailableError
from pricewatch.scrapers.html_page import HtmlPage


def classify_failure(exc: BaseException) -> str:
    """Map a transport exception to a short failure kind."""
    name = type(exc).__name__.lower()
    message = str(exc).lower()
    if "timeout" in name or "timed out" in message or "timeout" in message:
        return "timeout"
    return "network"


class HttpPageProvider:
    """Fetch product pages over one reusable session per run.

    The primary client is ``curl_cffi`` with browser TLS impersonation.
    When it fails, ``cloudscraper`` gets one attempt; if that also fails a
    :class:`ProviderError` carrying both messages is raised.
    """

    def __init__(self, debug_dir: Path | None = None) -> None:
        self.logger = logging.getLogger("pricewatch.provider")
        self.settings = Settings()
        self._debug_dir = debug_dir
        try:
            self.session = curl_requests.Session(
                impersonate=self.settings.IMPERSONATE_BROWSER
            )
        except Exception as exc:
            raise ProviderUnavailableError(
                f"could not start HTTP session: {exc}"
            ) from exc
        self._fallback: Any = None

    def __enter__(self) -> "HttpPageProvider":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying sessions."""
        self.session.close()
        if self._fallback is not None:
            self._fallback.close()

    def _page(self, url: str, html: str) -> HtmlPage:
        return HtmlPage(url, html, debug_dir=self._debug_dir)

    def _fetch_fallback(self, url: str, timeout: float) -> HtmlPage:
        """One attempt through cloudscraper (JS challenge solver)."""
        if self._fallback is None:
            _cs: Any = cloudscraper
            self._fallback = _cs.create_scraper()
        try:
            resp: Any = self._fallback.get(
                url,
                headers=self.settings.DEFAULT_HEADERS,
                timeout=timeout,
            )
        except Exception as exc:
            raise ProviderError(classify_failure(exc), str(exc)) from exc
        if resp.status_code != 200:
            raise ProviderError("http", f"HTTP {resp.status_code}")
        return self._page(url, str(resp.text))

    def render(self, url: str, timeout: float) -> HtmlPage:
        """Fetch *url* and parse it, raising ProviderError on failure."""
        primary: ProviderError
        try:
            resp = self.session.get(
                url,
                headers=self.settings.DEFAULT_HEADERS,
                timeout=timeout,
            )
            if resp.status_code == 200:
                return self._page(url, resp.text)
            primary = ProviderError("http", f"HTTP {resp.status_code}")
        except Exception as exc:
            self.logger.warning(
                "Request error for %s: %s", url, exc, exc_info=True,
            )
            primary = ProviderError(classify_failure(exc), str(exc))

        self.logger.info(
            "curl_cffi failed for %s (%s), falling back to cloudscraper",
            url,
            primary.message,
        )
        try:
            return self._fetch_fallback(url, timeout)
        except ProviderError as fallback:
            self.logger.error(
                "cloudscraper fallback also failed for %s: %s",
                url,
                fallback.message,
            )
            raise ProviderError(
                primary.kind,
                f"{primary.message} | fallback: {fallback.message}",
            ) from fallback
