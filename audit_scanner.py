"""
GritAudit - Page Scanner
Fetches a page's raw HTML and pulls out the structural signals the
findings rules look at: image inventory, alt-text coverage, lazy-loading,
and rough presence checks for search, add-to-cart, prices and trust copy.
"""

import logging
import re

import requests
from bs4 import BeautifulSoup

from audit_config import DEFAULT_REQUEST_TIMEOUT
from audit_errors import FetchError
from audit_models import ImageRecord, ScanResult

logger = logging.getLogger(__name__)

USER_AGENT = "GritAudit/1.0 (Weekly Site Audit)"
MAX_IMAGE_RECORDS = 40

SEARCH_SELECTOR = 'form[action*="search"], input[type="search"], input[name="q"]'
ADD_TO_CART_SELECTOR = "form[action*='cart/add'] button, button[name='add'], button[type='submit']"

PRICE_RE = re.compile(r"\$[\d,.]+")
SHIPPING_RE = re.compile(r"(shipping|returns|money[- ]back|guarantee)", re.IGNORECASE)


def _image_records(soup: BeautifulSoup) -> list[ImageRecord]:
    return [
        ImageRecord(
            src=img.get("src") or "",
            alt=img.get("alt"),
            width=img.get("width"),
            height=img.get("height"),
            loading=img.get("loading"),
        )
        for img in soup.find_all("img")
    ]


def _has_add_to_cart(soup: BeautifulSoup) -> bool:
    # Deliberately loose: any submit button counts, not only "add to cart" ones.
    labels = [b.get_text().strip().lower() for b in soup.select(ADD_TO_CART_SELECTOR)]
    return any("add" in t and "cart" in t for t in labels) or len(labels) > 0


def scan_html(html: str) -> ScanResult:
    """Extract scan signals from raw HTML. No network access."""
    soup = BeautifulSoup(html or "", "lxml")
    images = _image_records(soup)

    missing_alt = sum(1 for i in images if i.alt is None or i.alt.strip() == "")
    lazy = sum(1 for i in images if (i.loading or "").lower() == "lazy")

    body = soup.body
    text = body.get_text() if body else ""

    return ScanResult(
        image_count=len(images),
        missing_alt_count=missing_alt,
        lazy_count=lazy,
        has_search=soup.select_one(SEARCH_SELECTOR) is not None,
        has_add_to_cart=_has_add_to_cart(soup),
        has_price=PRICE_RE.search(text) is not None,
        has_shipping_text=SHIPPING_RE.search(text) is not None,
        images=tuple(images[:MAX_IMAGE_RECORDS]),
    )


class PageScanner:
    """Fetches pages over HTTP and scans them."""

    def __init__(self, timeout: float = DEFAULT_REQUEST_TIMEOUT, session=None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})

    def fetch(self, url: str) -> str:
        """Return the response body. Any HTTP status is accepted; only transport failures raise."""
        try:
            resp = self.session.get(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            raise FetchError(f"Could not fetch page: {e}", url) from e
        if resp.status_code >= 400:
            logger.warning("HTTP %s for %s; scanning the returned body anyway", resp.status_code, url)
        return resp.text

    def scan(self, url: str) -> ScanResult:
        html = self.fetch(url)
        result = scan_html(html)
        logger.debug("Scanned %s: %d images, %d missing alt, %d lazy",
                     url, result.image_count, result.missing_alt_count, result.lazy_count)
        return result
