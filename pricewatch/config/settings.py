# pricewatch/config/settings.py

"""Central configuration for the pricewatch tracker."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_path(name: str, default: Path) -> Path:
    """Return a path from the environment, or *default* when unset."""
    value = os.getenv(name)
    return Path(value) if value else default


class Settings:
    """Central configuration for the pricewatch tracker."""

    # --- Fetching ---
    REQUEST_DELAY: float = 0.4          # Seconds to pause after each source
    REQUEST_TIMEOUT: int = 45           # Seconds before a page fetch times out
    SLOW_THRESHOLD_MS: float = 5000.0   # Health check "slow" cutoff

    # --- History ---
    HISTORY_CAP: int = 200              # Max ledger entries per product

    # --- Extraction ---
    CURRENCY: str = "TRY"
    PRICE_META_NAMES: list[str] = [
        "product:price:amount",
        "og:price:amount",
        "price",
    ]
    PRICE_SELECTORS: list[str] = [
        ".pt_v8",
        ".p_w_v9",
        ".p_w_v8",
        ".p_w",
        '[data-test="price"]',
        ".price",
        ".product-price",
        ".salePrice",
        ".currentPrice",
        ".final-price",
        ".a-price .a-offscreen",
    ]
    CURRENCY_MARKERS: list[str] = ["₺", "TL", "TRY"]
    BLOCKED_KEYWORDS: list[str] = [
        "captcha",
        "robot",
        "blocked",
        "unusual traffic",
        "verify you are human",
        "access denied",
        "just a moment",
        "olağandışı trafik",
        "güvenlik doğrulaması",
        "erişim engellendi",
    ]

    # --- Diagnostics ---
    CAPTURE_DIAGNOSTICS: bool = (
        os.getenv("PRICEWATCH_CAPTURE_DEBUG", "0").lower()
        in ("1", "true", "yes")
    )

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "tr-TR,tr;q=0.9,en;q=0.6",
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    CATALOG_PATH: Path = _env_path(
        "PRICEWATCH_CATALOG", BASE_DIR / "products.json"
    )
    OUTPUT_DIR: Path = _env_path(
        "PRICEWATCH_OUTPUT_DIR", BASE_DIR / "docs"
    )
    SNAPSHOT_FILENAME: str = "data.json"
    HISTORY_FILENAME: str = "history.json"
    LOGS_DIR: Path = BASE_DIR / "logs"
    DEBUG_DIR: Path = BASE_DIR / "debug"

    @classmethod
    def snapshot_path(cls) -> Path:
        """Location of the per-run snapshot file."""
        return cls.OUTPUT_DIR / cls.SNAPSHOT_FILENAME

    @classmethod
    def history_path(cls) -> Path:
        """Location of the persisted history ledger."""
        return cls.OUTPUT_DIR / cls.HISTORY_FILENAME
