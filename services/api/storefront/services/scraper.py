"""Marketplace listing scraper (headless Chromium via Playwright).

Flow:
1. Launch headless Chromium (sandbox disabled for containers)
2. Open one page with a desktop user agent and 1920x1080 viewport
3. Navigate and wait for network idle, then a fixed settle delay
4. Run ONE in-page extraction call that returns, per field, the text of the
   first element matched by each candidate selector (in order)
5. Pick the first non-empty candidate per field, clean the price,
   dedupe and cap image URLs
6. Close the browser (always)

The cascade is resolved in Python so it can be tested without a browser.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from storefront.services.debug_storage import save_scrape_payload
from storefront.settings import Settings, get_settings

logger = logging.getLogger("uvicorn.error")


# ============================================================
# Selector fallbacks (ordered: most specific first)
# ============================================================

TITLE_SELECTORS = [
    "h1.product-title",
    "h1.title",
    ".product-name h1",
    ".product-title h1",
    'h1[data-testid="product-title"]',
    "h1",
]

DESCRIPTION_SELECTORS = [
    ".product-description",
    ".description",
    ".product-details",
    ".product-info",
    '[data-testid="product-description"]',
]

PRICE_SELECTORS = [
    ".product-price",
    ".price",
    ".current-price",
    ".main-price",
    '[data-testid="price"]',
    ".price-value",
]

IMAGE_SELECTORS = [
    ".product-image img",
    ".gallery-image img",
    ".main-image img",
    ".product-gallery img",
    "img[data-src]",
    'img[src*="product"]',
]

FIELD_SELECTORS: dict[str, list[str]] = {
    "title": TITLE_SELECTORS,
    "description": DESCRIPTION_SELECTORS,
    "price": PRICE_SELECTORS,
}

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-web-security",
    "--disable-features=VizDisplayCompositor",
]

VIEWPORT = {"width": 1920, "height": 1080}

# Runs inside the page. Returns {field: [text per selector], images: [urls]}.
EXTRACT_SCRIPT = """
({ fields, imageSelectors }) => {
  const firstText = (selector) => {
    try {
      const el = document.querySelector(selector);
      return el ? (el.textContent || '').trim() : '';
    } catch (e) {
      return '';
    }
  };

  const out = {};
  for (const [name, selectors] of Object.entries(fields)) {
    out[name] = selectors.map(firstText);
  }

  const images = [];
  for (const selector of imageSelectors) {
    let nodes = [];
    try {
      nodes = document.querySelectorAll(selector);
    } catch (e) {
      continue;
    }
    nodes.forEach((img) => {
      if (img.src && img.src.startsWith('http')) images.push(img.src);
      const dataSrc = img.dataset ? img.dataset.src : null;
      if (dataSrc && dataSrc.startsWith('http')) images.push(dataSrc);
    });
  }
  out.images = images;
  return out;
}
"""

_PRICE_JUNK_RE = re.compile(r"[^\d.,]")


class ScrapeError(RuntimeError):
    """Raised when the page cannot be loaded or evaluated."""


class EvaluatesScripts(Protocol):
    """The part of a Playwright Page the extractor uses."""

    async def evaluate(self, expression: str, arg: Any = None) -> Any: ...


@dataclass
class ScrapedProduct:
    """Listing data extracted from a marketplace page."""

    title: str
    description: str
    price: str
    images: list[str] = field(default_factory=list)
    scraped_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys used by the HTTP API."""
        return {
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "images": list(self.images),
            "scrapedAt": self.scraped_at,
        }


# ============================================================
# Pure helpers
# ============================================================


def first_non_empty(candidates: list[Any] | None) -> str:
    """Return the first candidate with non-blank text, else ''."""
    for value in candidates or []:
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def clean_price_text(text: str) -> str:
    """Keep only digits, '.' and ',' (e.g. 'US $1,299.50 /piece' -> '1,299.50')."""
    if not text:
        return ""
    return _PRICE_JUNK_RE.sub("", text).strip()


def dedupe_images(urls: list[Any] | None, limit: int) -> list[str]:
    """Drop non-http and duplicate URLs (first occurrence wins), cap at limit."""
    seen: set[str] = set()
    unique: list[str] = []
    for url in urls or []:
        if not isinstance(url, str) or not url.startswith("http"):
            continue
        if url in seen:
            continue
        seen.add(url)
        unique.append(url)
    return unique[: max(0, limit)]


def build_scraped_product(payload: dict[str, Any], max_images: int = 10) -> ScrapedProduct:
    """Resolve the selector cascade from a raw extraction payload."""
    return ScrapedProduct(
        title=first_non_empty(payload.get("title")),
        description=first_non_empty(payload.get("description")),
        price=clean_price_text(first_non_empty(payload.get("price"))),
        images=dedupe_images(payload.get("images"), max_images),
    )


def _log_missing_fields(product: ScrapedProduct) -> None:
    if not product.title:
        logger.warning("[scrape] no title found")
    if not product.description:
        logger.warning("[scrape] no description found")
    if not product.price:
        logger.warning("[scrape] no price found")
    if not product.images:
        logger.warning("[scrape] no images found")


# ============================================================
# Scraper
# ============================================================


class ProductScraper:
    """Scrapes one listing per call; the browser lives only for that call."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    async def extract(self, page: EvaluatesScripts, url: str) -> ScrapedProduct:
        """Run the in-page extraction and resolve the selector cascade."""
        payload = await page.evaluate(
            EXTRACT_SCRIPT,
            {"fields": FIELD_SELECTORS, "imageSelectors": IMAGE_SELECTORS},
        )
        if not isinstance(payload, dict):
            raise ScrapeError("Extraction script returned no data")

        if self.settings.scraper_debug:
            filename = save_scrape_payload(url=url, payload=payload)
            if filename:
                logger.info(f"[scrape] raw payload saved to debug file: {filename}")

        product = build_scraped_product(payload, max_images=self.settings.scraper_max_images)
        _log_missing_fields(product)
        return product

    async def scrape(self, url: str) -> ScrapedProduct:
        """Load `url` in headless Chromium and extract the listing.

        Raises:
            ScrapeError: Browser launch, navigation or evaluation failed.
        """
        settings = self.settings
        logger.info(f"[scrape] start url={url}")

        try:
            async with async_playwright() as pw:
                browser = await pw.chromium.launch(
                    headless=settings.scraper_headless,
                    args=CHROMIUM_ARGS,
                )
                try:
                    context = await browser.new_context(
                        user_agent=settings.scraper_user_agent,
                        viewport=VIEWPORT,
                    )
                    page = await context.new_page()

                    logger.info("[scrape] navigating to product page")
                    await page.goto(
                        url,
                        wait_until="networkidle",
                        timeout=settings.scraper_navigation_timeout_ms,
                    )
                    # Late-rendering galleries and price widgets
                    await page.wait_for_timeout(settings.scraper_settle_delay_ms)

                    logger.info("[scrape] extracting product data")
                    product = await self.extract(page, url)
                finally:
                    await browser.close()
        except PlaywrightError as e:
            raise ScrapeError(str(e)) from e

        logger.info(
            "[scrape] done title=%r price=%r images=%s",
            product.title[:80],
            product.price,
            len(product.images),
        )
        return product


# Singleton scraper instance
_scraper: ProductScraper | None = None


def get_scraper() -> ProductScraper:
    """Get scraper singleton."""
    global _scraper
    if _scraper is None:
        _scraper = ProductScraper()
    return _scraper


async def scrape_product(url: str) -> ScrapedProduct:
    """Scrape a marketplace listing with the shared scraper."""
    return await get_scraper().scrape(url)
