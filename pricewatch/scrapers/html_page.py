# pricewatch/scrapers/html_page.py

"""BeautifulSoup-backed implementation of the :class:`Page` capability."""

import logging
import re
from datetime import datetime
from pathlib import Path

from bs4 import BeautifulSoup, Comment, Tag

logger = logging.getLogger("pricewatch.page")

_INVISIBLE_TAGS: list[str] = [
    "script", "style", "noscript", "template", "head", "title",
]

_UNSAFE_LABEL_RE = re.compile(r"[^A-Za-z0-9_.-]+")


class HtmlPage:
    """A fetched HTML document parsed with lxml."""

    def __init__(
        self,
        url: str,
        html: str,
        debug_dir: Path | None = None,
    ) -> None:
        self.url = url
        self.html = html
        self._debug_dir = debug_dir
        self._soup = BeautifulSoup(html, "lxml")
        self._visible_text: str | None = None

    def title(self) -> str:
        """Return the ``<title>`` text, or an empty string."""
        if self._soup.title is None:
            return ""
        return self._soup.title.get_text(strip=True)

    def metadata(self, name: str) -> str | None:
        """Look up a named attribute via meta tags, then ``itemprop``."""
        for attr in ("property", "name", "itemprop"):
            meta = self._soup.find("meta", attrs={attr: name})
            if isinstance(meta, Tag):
                content = meta.get("content")
                if isinstance(content, str) and content.strip():
                    return content.strip()

        element = self._soup.find(attrs={"itemprop": name})
        if isinstance(element, Tag):
            content = element.get("content")
            if isinstance(content, str) and content.strip():
                return content.strip()
            text = element.get_text(" ", strip=True)
            if text:
                return text
        return None

    def selector_text(self, selector: str) -> str | None:
        """Content attribute or text of the first *selector* match."""
        element = self._soup.select_one(selector)
        if element is None:
            return None
        content = element.get("content")
        if isinstance(content, str) and content.strip():
            return content.strip()
        return element.get_text(" ", strip=True) or None

    def structured_data(self) -> list[str]:
        """Return the raw text of every JSON-LD ``<script>`` block."""
        blocks: list[str] = []
        for script in self._soup.find_all(
            "script", attrs={"type": "application/ld+json"},
        ):
            text = script.string if script.string else script.get_text()
            if text and text.strip():
                blocks.append(text)
        return blocks

    def visible_text(self) -> str:
        """Return the document's human-visible text, whitespace-joined."""
        if self._visible_text is None:
            parts: list[str] = []
            for node in self._soup.find_all(string=True):
                if isinstance(node, Comment):
                    continue
                if node.find_parent(_INVISIBLE_TAGS) is not None:
                    continue
                chunk = node.strip()
                if chunk:
                    parts.append(chunk)
            self._visible_text = " ".join(parts)
        return self._visible_text

    def capture_diagnostic(self, label: str) -> str | None:
        """Dump the raw HTML for post-mortem; return the file path."""
        if self._debug_dir is None:
            return None
        self._debug_dir.mkdir(parents=True, exist_ok=True)
        safe = _UNSAFE_LABEL_RE.sub("_", label).strip("_") or "page"
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = self._debug_dir / f"{safe}_{timestamp}.html"
        path.write_text(self.html, encoding="utf-8")
        logger.debug("Saved diagnostic HTML for %s to %s", self.url, path)
        return str(path)
