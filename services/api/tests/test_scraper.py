"""Tests for the listing scraper (selector cascade and payload cleanup).

The browser is not started: a fake page returns what the in-page script
would have collected.
"""

import pytest

from storefront.services.scraper import (
    FIELD_SELECTORS,
    IMAGE_SELECTORS,
    ProductScraper,
    ScrapeError,
    build_scraped_product,
    clean_price_text,
    dedupe_images,
    first_non_empty,
)
from storefront.settings import Settings


class FakePage:
    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    async def evaluate(self, expression, arg=None):
        self.calls.append(arg)
        return self.payload


def _scraper(**settings) -> ProductScraper:
    return ProductScraper(settings=Settings(scraper_debug=False, **settings))


def test_first_non_empty_takes_first_selector_with_text():
    assert first_non_empty(["", "   ", "Rose Serum", "Fallback"]) == "Rose Serum"
    assert first_non_empty([]) == ""
    assert first_non_empty(None) == ""


def test_clean_price_text():
    assert clean_price_text("US $1,299.50 /piece") == "1,299.50"
    assert clean_price_text("") == ""


def test_dedupe_images_keeps_order_and_drops_non_http():
    urls = [
        "https://img/a.jpg",
        "data:image/png;base64,xxx",
        "https://img/b.jpg",
        "https://img/a.jpg",
        "//img/c.jpg",
        None,
    ]
    assert dedupe_images(urls, limit=10) == ["https://img/a.jpg", "https://img/b.jpg"]


def test_dedupe_images_caps_count():
    urls = [f"https://img/{i}.jpg" for i in range(25)]
    assert len(dedupe_images(urls, limit=10)) == 10


def test_build_scraped_product_resolves_cascade():
    product = build_scraped_product(
        {
            "title": ["", "Vitamin C Serum"],
            "description": ["", "", "Brightening"],
            "price": ["", "US $12.50"],
            "images": ["https://img/a.jpg", "https://img/a.jpg"],
        }
    )
    assert product.title == "Vitamin C Serum"
    assert product.description == "Brightening"
    assert product.price == "12.50"
    assert product.images == ["https://img/a.jpg"]
    assert product.scraped_at


@pytest.mark.asyncio
async def test_extract_passes_selectors_and_applies_image_limit():
    page = FakePage(
        {
            "title": ["Serum"],
            "description": [],
            "price": [],
            "images": [f"https://img/{i}.jpg" for i in range(5)],
        }
    )
    product = await _scraper(scraper_max_images=3).extract(page, "https://www.alibaba.com/x")

    assert page.calls == [{"fields": FIELD_SELECTORS, "imageSelectors": IMAGE_SELECTORS}]
    assert product.title == "Serum"
    assert product.description == ""
    assert product.price == ""
    assert product.images == ["https://img/0.jpg", "https://img/1.jpg", "https://img/2.jpg"]


@pytest.mark.asyncio
async def test_extract_rejects_empty_payload():
    with pytest.raises(ScrapeError):
        await _scraper().extract(FakePage(None), "https://www.alibaba.com/x")


def test_scraped_product_serializes_camel_case():
    product = build_scraped_product({"title": ["T"], "price": ["$5"]})
    data = product.to_dict()
    assert set(data) == {"title", "description", "price", "images", "scrapedAt"}
    assert data["price"] == "5"
