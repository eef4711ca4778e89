# tests/test_page_provider.py

"""Tests for the HTTP page provider using mocked sessions."""

import unittest
from unittest.mock import MagicMock, patch

from pricewatch.errors import ProviderError, ProviderUnavailableError
from pricewatch.scrapers.html_page import HtmlPage
from pricewatch.scrapers.page_provider import (
    HttpPageProvider,
    classify_failure,
)

_HTML = "<html><head><title>Ürün</title></head><body>₺1.000</body></html>"


def _response(status: int, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    return resp


class TestClassifyFailure(unittest.TestCase):
    """Transport exceptions map to failure kinds."""

    def test_timeout_by_message(self) -> None:
        """curl timeouts mention 'timed out'."""
        exc = RuntimeError("Operation timed out after 45000 milliseconds")
        self.assertEqual(classify_failure(exc), "timeout")

    def test_timeout_by_type(self) -> None:
        """Exception classes named *Timeout* are timeouts."""
        self.assertEqual(classify_failure(TimeoutError()), "timeout")

    def test_other_errors_are_network(self) -> None:
        """Everything else is a network failure."""
        exc = ConnectionError("Could not resolve host")
        self.assertEqual(classify_failure(exc), "network")


@patch("pricewatch.scrapers.page_provider.cloudscraper.create_scraper")
@patch("pricewatch.scrapers.page_provider.curl_requests.Session")
class TestHttpPageProvider(unittest.TestCase):
    """Primary fetch, fallback, and error reporting."""

    def test_primary_success(
        self, mock_session_cls: MagicMock, mock_create: MagicMock,
    ) -> None:
        """A 200 from curl_cffi yields a parsed page."""
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        mock_session.get.return_value = _response(200, _HTML)

        provider = HttpPageProvider()
        page = provider.render("https://shop.example/p", 45)

        self.assertIsInstance(page, HtmlPage)
        self.assertEqual(page.title(), "Ürün")
        self.assertEqual(mock_session.get.call_args.kwargs["timeout"], 45)
        mock_create.assert_not_called()

    def test_fallback_after_http_error(
        self, mock_session_cls: MagicMock, mock_create: MagicMock,
    ) -> None:
        """A non-200 primary response falls back to cloudscraper."""
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        mock_session.get.return_value = _response(403)
        fallback = MagicMock()
        fallback.get.return_value = _response(200, _HTML)
        mock_create.return_value = fallback

        provider = HttpPageProvider()
        page = provider.render("https://shop.example/p", 45)

        self.assertEqual(page.url, "https://shop.example/p")
        fallback.get.assert_called_once()

    def test_fallback_scraper_reused(
        self, mock_session_cls: MagicMock, mock_create: MagicMock,
    ) -> None:
        """The fallback client is created once per provider."""
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        mock_session.get.return_value = _response(503)
        fallback = MagicMock()
        fallback.get.return_value = _response(200, _HTML)
        mock_create.return_value = fallback

        provider = HttpPageProvider()
        provider.render("https://shop.example/a", 45)
        provider.render("https://shop.example/b", 45)

        mock_create.assert_called_once()

    def test_both_fail_raises_provider_error(
        self, mock_session_cls: MagicMock, mock_create: MagicMock,
    ) -> None:
        """Both clients failing raises one error with both messages."""
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        mock_session.get.side_effect = RuntimeError(
            "Operation timed out after 45000 milliseconds"
        )
        fallback = MagicMock()
        fallback.get.return_value = _response(429)
        mock_create.return_value = fallback

        provider = HttpPageProvider()
        with self.assertRaises(ProviderError) as ctx:
            provider.render("https://shop.example/p", 45)

        self.assertEqual(ctx.exception.kind, "timeout")
        self.assertIn("timed out", ctx.exception.message)
        self.assertIn("fallback: HTTP 429", ctx.exception.message)

    def test_session_start_failure(
        self, mock_session_cls: MagicMock, mock_create: MagicMock,
    ) -> None:
        """A session that cannot start is a fatal provider error."""
        mock_session_cls.side_effect = OSError("libcurl missing")

        with self.assertRaises(ProviderUnavailableError):
            HttpPageProvider()

    def test_context_manager_closes_session(
        self, mock_session_cls: MagicMock, mock_create: MagicMock,
    ) -> None:
        """Leaving the with-block closes the session."""
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session

        with HttpPageProvider():
            pass

        mock_session.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
